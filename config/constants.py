# -*- coding: utf-8 -*-
"""
Configuration constants for the Portfolio Exposure Engine
Lookup tables and tunables shared by the valuation and exposure modules
"""

# Runtime flags (toggled by the CLI)
DEBUG_MODE = False

# Exposure Constants
# Average leverage assumed across perp positions when estimating margin in use.
# No exchange margin data reaches the engine, so this stays a rough estimate.
ASSUMED_AVG_LEVERAGE = 5.0

# Positions with an absolute value below this are hidden when dust filtering is on
DUST_THRESHOLD = 100.0

# Number of positions reported as "top assets" in the portfolio summary
TOP_ASSETS_LIMIT = 10

# Concentration buckets reported next to the HHI
CONCENTRATION_TOP_N = (1, 5, 10)

# FX Constants
# Fallback rates (1 unit of currency in USD) used when no live rates are supplied
DEFAULT_FX_RATES = {
    "USD": 1.0,
    "EUR": 1.19,
    "GBP": 1.37,
    "CHF": 1.30,
    "JPY": 0.0065,
    "CAD": 0.73,
    "AUD": 0.69,
    "NZD": 0.60,
    "CNY": 0.14,
    "HKD": 0.13,
    "SGD": 0.79,
    "SEK": 0.11,
    "NOK": 0.10,
    "DKK": 0.16,
    "PLN": 0.28,
    "CZK": 0.049,
    "HUF": 0.0031,
    "RON": 0.23,
    "BGN": 0.61,
    "ISK": 0.0082,
    "TRY": 0.023,
    "BRL": 0.19,
    "MXN": 0.058,
    "ZAR": 0.063,
    "INR": 0.011,
    "KRW": 0.00069,
    "THB": 0.032,
    "IDR": 0.00006,
    "MYR": 0.25,
    "PHP": 0.017,
    "ILS": 0.32,
    "AED": 0.27,
    "TWD": 0.031,
    "VND": 0.00004,
}

# Price Key Constants
# Ticker -> CoinGecko id used as the primary price key for manual crypto positions
COIN_ID_MAP = {
    "btc": "bitcoin",
    "eth": "ethereum",
    "usdt": "tether",
    "usdc": "usd-coin",
    "bnb": "binancecoin",
    "xrp": "ripple",
    "ada": "cardano",
    "doge": "dogecoin",
    "sol": "solana",
    "dot": "polkadot",
    "matic": "matic-network",
    "pol": "matic-network",
    "link": "chainlink",
    "uni": "uniswap",
    "aave": "aave",
    "atom": "cosmos",
    "ltc": "litecoin",
    "avax": "avalanche-2",
    "arb": "arbitrum",
    "op": "optimism",
    "apt": "aptos",
    "sui": "sui",
    "sei": "sei-network",
    "inj": "injective-protocol",
    "near": "near",
    "xlm": "stellar",
    "trx": "tron",
    "etc": "ethereum-classic",
    "xmr": "monero",
    "fil": "filecoin",
    "hbar": "hedera-hashgraph",
    "icp": "internet-computer",
    "wbtc": "wrapped-bitcoin",
    "steth": "staked-ether",
    "wsteth": "wrapped-steth",
    "weth": "weth",
    "reth": "rocket-pool-eth",
    "cbeth": "coinbase-wrapped-staked-eth",
    "mkr": "maker",
    "crv": "curve-dao-token",
    "ldo": "lido-dao",
    "snx": "havven",
    "comp": "compound-governance-token",
    "dai": "dai",
    "frax": "frax",
    "hype": "hyperliquid",
    "ena": "ethena",
    "pendle": "pendle",
}

# Account / Venue Constants
# Connection data sources that represent a self-custodied on-chain wallet
WALLET_DATA_SOURCES = {"debank", "helius"}

# Centralised exchanges and their display names
CEX_EXCHANGE_NAMES = {
    "binance": "Binance",
    "coinbase": "Coinbase",
    "kraken": "Kraken",
    "okx": "OKX",
}

# Perp DEX protocol keys and their display names
PERP_EXCHANGE_NAMES = {
    "hyperliquid": "Hyperliquid",
    "lighter": "Lighter",
    "ethereal": "Ethereal",
}

# Breakdown Labels
CUSTODY_SELF = "Self-Custody"
CUSTODY_DEFI = "DeFi"
CUSTODY_CEX = "CEX"
CUSTODY_PERP_DEX = "Perp DEX"
CUSTODY_BANKS = "Banks & Brokers"
CUSTODY_MANUAL = "Manual"

ALLOCATION_CASH = "Cash & Equivalents"
ALLOCATION_CRYPTO = "Crypto"
ALLOCATION_EQUITIES = "Equities"
ALLOCATION_OTHER = "Other"

RISK_CONSERVATIVE = "Conservative"
RISK_MODERATE = "Moderate"
RISK_AGGRESSIVE = "Aggressive"

# File and Directory Constants
DATA_DIR = "data"
DEFAULT_SNAPSHOT_FILE = f"{DATA_DIR}/portfolio_snapshot.json"
