# -*- coding: utf-8 -*-
"""
Category Service Module
-----------------------
Hierarchical asset categorization used by every exposure view:

1. Main categories: crypto, equities, cash, other
2. Sub-categories: crypto (btc, eth, sol, stablecoins, tokens), equities (stocks, etfs)
3. Exposure categories: finer crypto buckets (defi, rwa, privacy, ai, meme, ...)

All lookup tables are built once in __init__ as frozensets and never change,
so a single instance can be shared freely.
"""

from typing import Optional

from config.constants import PERP_EXCHANGE_NAMES

MAIN_CATEGORIES = ("crypto", "equities", "cash", "other")

PENDLE_PREFIXES = ("pt-", "yt-", "pt_", "yt_")

# Substrings that identify the underlying of a Pendle PT/YT token
PENDLE_USD_HINTS = (
    "usd", "dai", "frax", "gho", "lusd", "mkusd", "crvusd", "pyusd", "dola", "mim", "fdusd",
)
PENDLE_STABLE_HINTS = ("usd", "dai", "eur", "frax", "gho", "lusd")
PENDLE_ETH_HINTS = ("eth", "steth", "eeth", "reth", "wsteth", "weeth")
PENDLE_BTC_HINTS = ("btc", "wbtc", "lbtc", "ebtc")
PENDLE_SOL_HINTS = ("sol", "jsol", "msol", "jitosol")


class CategoryService:
    """Classifies (symbol, asset type) pairs into the category hierarchy."""

    def __init__(self):
        # USD-pegged stablecoins
        self.usd_stablecoins = frozenset({
            "usd", "usdt", "usdc", "dai", "busd", "tusd", "usdp", "usdd", "frax", "lusd",
            "gusd", "susd", "cusd", "ust", "mim", "fei", "ousd", "dola", "rai",
            "pyusd", "usdm", "gho", "crvusd", "mkusd", "usds", "dusd", "husd", "xusd",
            "usde", "susde", "wusde", "usdai", "usd0", "usd0++", "fdusd", "usdb", "usdx",
            "usdy", "usdz", "zusd", "musd", "pusd", "ausd", "rusd", "cgusd",
            "wxdai", "xdai", "sdai",  # DAI variants
            "susds", "stusdt",  # yield-bearing
            "usdt0",
        })

        # EUR-pegged stablecoins
        self.eur_stablecoins = frozenset({
            "euroc", "eurt", "ceur", "ageur", "jeur", "eur", "eurc", "eure", "eura",
            "steur", "seur",
        })

        # GBP-pegged stablecoins
        self.gbp_stablecoins = frozenset({"gbpt", "gbpc"})

        self.stablecoins = self.usd_stablecoins | self.eur_stablecoins | self.gbp_stablecoins

        # BTC and wrapped/bridged BTC
        self.btc_like = frozenset({
            "btc", "wbtc", "btcb", "renbtc", "hbtc", "sbtc", "tbtc", "pbtc",
            "obtc", "fbtc", "mbtc", "ibtc", "bbtc", "ebtc", "xbtc", "rbtc",
            "btc.b", "cbbtc", "lbtc", "btcpx",
        })

        # ETH, staked ETH, wrapped ETH
        self.eth_like = frozenset({
            "eth", "weth", "steth", "wsteth", "reth", "cbeth", "seth", "meth",
            "frxeth", "sfrxeth", "oeth", "ankreth", "seth2", "reth2", "eeth", "weeth",
            "ezeth", "rseth", "pufeth", "sweth", "ethx", "unsteth",
        })

        # SOL and liquid staking tokens
        self.sol_like = frozenset({
            "sol", "wsol", "msol", "jitosol", "bsol", "stsol", "scnsol", "lsol",
            "hsol", "csol", "dsol", "vsol", "risksol", "laine", "bonksol", "jupsol",
            "inf", "phsol", "jsol",
        })

        # Fiat currencies (bank accounts and manual cash entries)
        self.fiat_currencies = frozenset({
            "usd", "eur", "gbp", "chf", "jpy", "cny", "cad", "aud", "nzd",
            "hkd", "sgd", "sek", "nok", "dkk", "krw", "inr", "brl", "mxn",
            "zar", "aed", "thb", "pln", "czk", "ils", "php", "idr", "myr",
            "try", "rub", "huf", "ron", "bgn", "hrk", "isk", "twd", "vnd",
        })

        # Perpetual futures exchanges (exact names; substrings handled in is_perp_protocol)
        self.perp_protocols = frozenset(
            set(PERP_EXCHANGE_NAMES)
            | {"hyperliquid perp", "hyperliquid perpetual", "lighter exchange", "ethereal exchange"}
        )

        self.defi_tokens = frozenset({
            # DEXs & AMMs
            "uni", "uniswap", "sushi", "cake", "crv", "bal", "joe", "velo", "aero", "sky",
            "gmx", "dydx", "perp", "rune", "osmo", "ray", "orca", "jup", "jupiter",
            "1inch", "dodo", "bnt", "knc", "camelot", "thena", "quickswap",
            # Lending
            "aave", "comp", "mkr", "ldo", "rpl", "morpho", "euler", "rdnt", "qi", "xvs",
            "fxs", "spell", "alcx", "lqty",
            # Yield & vaults
            "yfi", "cvx", "btrfly", "ohm", "pendle", "rbn", "dpx", "jones", "umami",
            "bifi", "farm", "pickle", "sdt",
            # Derivatives & bridges
            "snx", "lyra", "premia", "hegic", "stg", "hop", "acx", "syn", "celr",
            "multi", "any", "w", "zro",
            # Other DeFi and infrastructure
            "inst", "gns", "kwenta", "api3", "band", "uma", "ren", "keep", "nu", "t",
            "eigen", "ethfi", "ena", "drv", "lit", "resolv", "angle",
            "arb", "op", "strk", "matic", "pol", "zk", "manta", "scr", "linea",
            "blast", "mode", "metis", "boba", "mnt", "avax", "ftm", "one", "celo",
            "movr", "glmr", "kava", "canto", "atom", "dot", "ksm", "link", "pyth",
        })

        self.rwa_tokens = frozenset({
            "ondo", "mpl", "gfi", "cfg", "syrup", "cpool", "tru", "credix",
            "paxg", "xaut", "tgold", "dgld", "pmgt", "cache", "cgo",
            "rwa", "realt", "land", "pro", "labs", "parcl", "buidl", "rsv", "mountain",
        })

        self.privacy_tokens = frozenset({
            "xmr", "zec", "dash", "scrt", "rose", "arrr", "firo", "beam", "grin",
            "nym", "prcy", "dero", "xhv", "oxen", "mask", "torn", "rail", "iron",
            "zcn", "zano",
        })

        self.ai_tokens = frozenset({
            "fet", "agix", "ocean", "vvv", "giza", "rndr", "render", "tao", "akt", "grt",
            "ar", "fil", "storj", "sc", "nmt", "clv", "ctxc", "nmr", "vana", "prime",
            "ai16z", "virtual", "goat", "act", "arc", "griffain", "zerebro", "aixbt",
            "grass", "io", "wld", "jasmy", "pha", "nos", "near", "oort", "gpu", "exo",
        })

        self.meme_tokens = frozenset({
            "doge", "shib", "pepe", "floki", "bonk", "wif", "meme", "wojak", "turbo",
            "bob", "ladys", "brett", "mog", "popcat", "pnut", "neiro", "cate", "toshi",
            "higher", "degen", "normie", "ponke", "wen", "myro", "slerf", "bome",
            "trump", "mother", "retardio", "gigachad", "fartcoin",
        })

        # Known ETFs by symbol (exchange suffixes are stripped before lookup)
        self.etfs = frozenset({
            # Broad market
            "spy", "spx", "voo", "ivv", "qqq", "qqqm", "dia", "iwm", "vti", "vtv", "vug",
            "schd", "schx", "schb", "splg", "sptm", "itot",
            # Sector
            "xlk", "xlf", "xle", "xlv", "xli", "xlp", "xly", "xlb", "xlu", "xlre",
            "vgt", "vht", "vde", "vnq", "vfh", "vis", "vox", "vpu", "vaw", "vdc",
            # International
            "vxus", "vea", "vwo", "efa", "eem", "iefa", "iemg", "vgk", "vpl", "fxi",
            # Bonds
            "bnd", "agg", "lqd", "tlt", "ief", "shy", "tip", "vcit", "vcsh", "bndx",
            # Thematic and commodity
            "arkk", "arkw", "arkg", "arkf", "arkq", "soxx", "smh", "botz", "robo", "hack",
            "kweb", "cqqq", "mchi", "gld", "slv", "gdx", "gldm", "iau", "uso", "ung",
            # Leveraged / inverse
            "tqqq", "sqqq", "upro", "spxu", "soxl", "soxs", "fngu", "fngd",
            # Crypto ETFs
            "gbtc", "ethe", "bito", "bitq", "blok", "ibit", "btco", "arkb",
            # European trackers
            "dax", "cac40", "ftse", "eurostoxx", "stoxx50", "ewg", "ewq", "ewu", "ezu",
            "hedj", "dbeu", "ieur", "fez", "veur", "meud", "lyxdax", "exs1", "c40",
        })

        self.main_category_labels = {
            "crypto": "Crypto",
            "equities": "Equities",
            "cash": "Cash",
            "other": "Other",
        }

        self.sub_category_labels = {
            "crypto_btc": "BTC",
            "crypto_eth": "ETH",
            "crypto_sol": "SOL",
            "crypto_stablecoins": "Stablecoins",
            "crypto_tokens": "Tokens",
            "equities_stocks": "Stocks",
            "equities_etfs": "ETFs",
        }

        self.exposure_category_labels = {
            "stablecoins": "Stablecoins",
            "btc": "BTC",
            "eth": "ETH",
            "sol": "SOL",
            "defi": "DeFi",
            "rwa": "RWA",
            "privacy": "Privacy",
            "ai": "AI",
            "meme": "Meme",
            "tokens": "Tokens",
        }

    def _normalize_symbol(self, symbol: Optional[str]) -> str:
        """Normalize symbols for table lookups."""
        return (symbol or "").strip().lower()

    def _is_pendle_token(self, normalized: str) -> bool:
        return normalized.startswith(PENDLE_PREFIXES) or "pt-" in normalized or "yt-" in normalized

    def _pendle_underlying(self, normalized: str) -> Optional[str]:
        """Sub-category of the asset embedded in a Pendle PT/YT symbol, if recognisable."""
        if any(hint in normalized for hint in PENDLE_STABLE_HINTS):
            return "stablecoins"
        if any(hint in normalized for hint in PENDLE_ETH_HINTS):
            return "eth"
        if any(hint in normalized for hint in PENDLE_BTC_HINTS):
            return "btc"
        if any(hint in normalized for hint in PENDLE_SOL_HINTS):
            return "sol"
        return None

    def is_known_etf(self, symbol: str) -> bool:
        """Check the ETF table, also trying the symbol without an exchange suffix (.PA, .DE)."""
        normalized = self._normalize_symbol(symbol)
        if normalized in self.etfs:
            return True
        dot_index = normalized.rfind(".")
        if dot_index > 0:
            return normalized[:dot_index] in self.etfs
        return False

    def is_fiat_currency(self, symbol: str) -> bool:
        return self._normalize_symbol(symbol) in self.fiat_currencies

    def is_perp_protocol(self, protocol: Optional[str]) -> bool:
        """True for a known perp exchange, matched exactly or as a substring."""
        normalized = self._normalize_symbol(protocol)
        if not normalized:
            return False
        if normalized in self.perp_protocols:
            return True
        return any(name in normalized for name in PERP_EXCHANGE_NAMES)

    def is_stablecoin(self, symbol: str) -> bool:
        """Stablecoin table lookup, plus PT/YT tokens wrapping a stablecoin."""
        normalized = self._normalize_symbol(symbol)
        if normalized in self.stablecoins:
            return True
        if normalized.startswith(PENDLE_PREFIXES):
            return any(
                hint in normalized
                for hint in ("usd", "dai", "frax", "gho", "lusd", "eur", "gbp", "mkusd", "crvusd")
            )
        return False

    def is_cash_equivalent(self, symbol: str) -> bool:
        """Stablecoins and Pendle principal tokens: no directional market risk."""
        normalized = self._normalize_symbol(symbol)
        return self.is_stablecoin(normalized) or normalized.startswith("pt-")

    def get_underlying_fiat_currency(self, symbol: str) -> Optional[str]:
        """
        Fiat currency a cash-like symbol is pegged to (USDC -> USD, EURC -> EUR).
        Returns None for anything that is not fiat or a stablecoin.
        """
        normalized = self._normalize_symbol(symbol)

        if normalized in self.fiat_currencies:
            return normalized.upper()
        if normalized in self.usd_stablecoins:
            return "USD"
        if normalized in self.eur_stablecoins:
            return "EUR"
        if normalized in self.gbp_stablecoins:
            return "GBP"

        if normalized.startswith(PENDLE_PREFIXES):
            if any(hint in normalized for hint in PENDLE_USD_HINTS):
                return "USD"
            if "eur" in normalized:
                return "EUR"
            if "gbp" in normalized:
                return "GBP"

        # Wrapped/bridged variants not in the tables
        if normalized.endswith(("dai", "usd", "usdc", "usdt", "frax")):
            return "USD"

        return None

    def get_main_category(self, symbol: str, asset_type: Optional[str] = None) -> str:
        """
        Main category for an asset. An explicit type wins; untyped, "other" and
        "manual" assets are categorized by symbol.
        """
        normalized = self._normalize_symbol(symbol)
        kind = (asset_type or "").lower()

        if kind == "cash" or normalized.startswith("cash_"):
            return "cash"
        if kind in ("stock", "etf", "equity"):
            return "equities"
        if kind == "crypto":
            return "crypto"

        if normalized in self.fiat_currencies:
            return "cash"
        if (
            normalized in self.stablecoins
            or normalized in self.btc_like
            or normalized in self.eth_like
            or normalized in self.sol_like
        ):
            return "crypto"
        if self.is_known_etf(normalized):
            return "equities"
        return "other"

    def get_sub_category(self, symbol: str, asset_type: Optional[str] = None) -> str:
        """Sub-category within the main category; "none" for cash and other."""
        normalized = self._normalize_symbol(symbol)
        main = self.get_main_category(symbol, asset_type)

        if main == "crypto":
            if normalized in self.stablecoins:
                return "stablecoins"
            if normalized in self.btc_like:
                return "btc"
            if normalized in self.eth_like:
                return "eth"
            if normalized in self.sol_like:
                return "sol"
            if self._is_pendle_token(normalized):
                return self._pendle_underlying(normalized) or "tokens"
            return "tokens"

        if main == "equities":
            if (asset_type or "").lower() == "etf":
                return "etfs"
            # Positions added as "stock" before ETFs were tracked separately
            if self.is_known_etf(normalized):
                return "etfs"
            return "stocks"

        return "none"

    def get_asset_category(self, symbol: str, asset_type: Optional[str] = None) -> str:
        """Combined key in main_sub form (bare main for cash/other)."""
        main = self.get_main_category(symbol, asset_type)
        sub = self.get_sub_category(symbol, asset_type)
        if sub == "none" or main in ("cash", "other"):
            return main
        return f"{main}_{sub}"

    def get_exposure_category(self, symbol: str, asset_type: Optional[str] = None) -> str:
        """
        Thematic crypto bucket used for exposure charts.
        Priority: stablecoins > btc > eth > sol > defi > rwa > privacy > ai > meme > tokens
        """
        if self.get_main_category(symbol, asset_type) != "crypto":
            return "tokens"

        normalized = self._normalize_symbol(symbol)
        if normalized in self.stablecoins:
            return "stablecoins"
        if normalized in self.btc_like:
            return "btc"
        if normalized in self.eth_like:
            return "eth"
        if normalized in self.sol_like:
            return "sol"
        if normalized in self.defi_tokens:
            return "defi"
        if normalized in self.rwa_tokens:
            return "rwa"
        if normalized in self.privacy_tokens:
            return "privacy"
        if normalized in self.ai_tokens:
            return "ai"
        if normalized in self.meme_tokens:
            return "meme"
        if self._is_pendle_token(normalized):
            # Yield tokens without a recognisable underlying count as DeFi
            return self._pendle_underlying(normalized) or "defi"
        return "tokens"

    def get_exposure_category_label(self, category: str) -> str:
        return self.exposure_category_labels.get(category, "Tokens")

    def get_main_category_label(self, main: str) -> str:
        return self.main_category_labels.get(main, "Other")

    def get_sub_category_label(self, main: str, sub: str) -> str:
        key = f"{main}_{sub}"
        return self.sub_category_labels.get(key, self.get_main_category_label(main))
