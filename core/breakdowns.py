# -*- coding: utf-8 -*-
"""
Portfolio Breakdowns Module
---------------------------
Chart-ready breakdowns of valued assets:

1. Custody (who holds the keys) and chain/venue
2. Crypto metrics (stablecoin ratio, BTC/ETH dominance, DeFi exposure)
3. Asset allocation and risk profile buckets
4. Cash (fiat vs stablecoins) and equities (stocks vs ETFs)
5. Perp exchange page data
6. Per-symbol asset summary

All breakdowns net debts against holdings in the same bucket, skip perp
notional and return only positive buckets sorted by value.
"""

import re
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Union

from config.constants import (
    ALLOCATION_CASH,
    ALLOCATION_CRYPTO,
    ALLOCATION_EQUITIES,
    ALLOCATION_OTHER,
    CEX_EXCHANGE_NAMES,
    CUSTODY_BANKS,
    CUSTODY_CEX,
    CUSTODY_DEFI,
    CUSTODY_MANUAL,
    CUSTODY_PERP_DEX,
    CUSTODY_SELF,
    RISK_AGGRESSIVE,
    RISK_CONSERVATIVE,
    RISK_MODERATE,
)
from core.category_service import CategoryService
from core.exposure_classifier import classify_asset_exposure
from core.perp_trades import get_perp_exchange_name, is_perp_trade
from core.position_valuator import extract_currency_code
from models.portfolio import Account, AssetClass, AssetWithPrice
from models.results import (
    AssetSummary,
    BreakdownItem,
    CashBreakdownResult,
    CryptoMetrics,
    EquitiesBreakdownResult,
    ExchangeStats,
    ExposureClassification,
    InstitutionBreakdownItem,
    PerpPageData,
    ValueCount,
)
from utils.helpers import safe_percentage

AccountsArg = Optional[Union[List[Account], Dict[str, Account]]]

# "Revolut (USD)" -> "Revolut"
ACCOUNT_CURRENCY_PATTERN = re.compile(r"^(.+?)\s*\([A-Za-z]{3,5}\)\s*$")


def _account_map(accounts: AccountsArg) -> Dict[str, Account]:
    if not accounts:
        return {}
    if isinstance(accounts, dict):
        return accounts
    return {account.id: account for account in accounts}


def _holdings(assets: Iterable[AssetWithPrice]) -> List[AssetWithPrice]:
    return [asset for asset in assets if not asset.is_perp_notional]


def _to_breakdown(totals: Dict[str, float], counts: Optional[Dict[str, int]] = None) -> List[BreakdownItem]:
    """Positive buckets as BreakdownItems, with percentages of their sum, largest first."""
    positive = {label: value for label, value in totals.items() if value > 0}
    total = sum(positive.values())
    items = [
        BreakdownItem(
            label=label,
            value=value,
            percentage=safe_percentage(value, total),
            count=(counts or {}).get(label, 0),
        )
        for label, value in positive.items()
    ]
    items.sort(key=lambda item: item.value, reverse=True)
    return items


def _symbol_breakdown(assets: Iterable[AssetWithPrice]) -> List[BreakdownItem]:
    """Per-symbol drill-down of a bucket."""
    totals: Dict[str, float] = defaultdict(float)
    counts: Dict[str, int] = defaultdict(int)
    for asset in assets:
        totals[asset.symbol.upper()] += asset.value
        counts[asset.symbol.upper()] += 1
    return _to_breakdown(totals, counts)


# --- Custody and venues ---


def get_custody_type(asset: AssetWithPrice, account_map: Dict[str, Account], category_service: CategoryService) -> str:
    """Custody bucket of one asset, checked in order of specificity."""
    if category_service.is_perp_protocol(asset.protocol):
        return CUSTODY_PERP_DEX

    account = account_map.get(asset.account_id) if asset.account_id else None
    if account is not None:
        if account.is_cex:
            return CUSTODY_CEX
        if account.is_wallet:
            return CUSTODY_DEFI if asset.protocol else CUSTODY_SELF

    if asset.asset_class in (AssetClass.EQUITY, AssetClass.CASH):
        return CUSTODY_BANKS
    return CUSTODY_MANUAL


def calculate_custody_breakdown(
    assets: List[AssetWithPrice],
    accounts: AccountsArg = None,
    category_service: Optional[CategoryService] = None,
) -> List[BreakdownItem]:
    category_service = category_service or CategoryService()
    account_map = _account_map(accounts)

    totals: Dict[str, float] = defaultdict(float)
    counts: Dict[str, int] = defaultdict(int)
    for asset in _holdings(assets):
        custody = get_custody_type(asset, account_map, category_service)
        totals[custody] += asset.value
        counts[custody] += 1
    return _to_breakdown(totals, counts)


def get_chain_label(asset: AssetWithPrice, account_map: Dict[str, Account], category_service: CategoryService) -> str:
    account = account_map.get(asset.account_id) if asset.account_id else None
    if account is not None and account.is_cex:
        return CEX_EXCHANGE_NAMES[account.data_source]
    if category_service.is_perp_protocol(asset.protocol):
        return get_perp_exchange_name(asset.protocol)
    if asset.chain:
        return asset.chain.capitalize()
    return "Other"


def calculate_chain_breakdown(
    assets: List[AssetWithPrice],
    accounts: AccountsArg = None,
    category_service: Optional[CategoryService] = None,
) -> List[BreakdownItem]:
    """Crypto holdings grouped by chain, CEX or perp exchange."""
    category_service = category_service or CategoryService()
    account_map = _account_map(accounts)

    totals: Dict[str, float] = defaultdict(float)
    counts: Dict[str, int] = defaultdict(int)
    for asset in _holdings(assets):
        if asset.asset_class is not AssetClass.CRYPTO:
            continue
        label = get_chain_label(asset, account_map, category_service)
        totals[label] += asset.value
        counts[label] += 1
    return _to_breakdown(totals, counts)


# --- Crypto metrics ---


def calculate_crypto_metrics(
    assets: List[AssetWithPrice],
    category_service: Optional[CategoryService] = None,
) -> CryptoMetrics:
    """
    Shares of the net crypto book held in stablecoins, BTC, ETH and DeFi.

    Perp trades never count toward a numerator. Only assets already flagged
    as perp notional are left out of the denominator.
    """
    category_service = category_service or CategoryService()
    crypto_assets = [asset for asset in assets if asset.asset_class is AssetClass.CRYPTO]

    total = sum(asset.value for asset in crypto_assets if not asset.is_perp_notional)
    if total <= 0:
        return CryptoMetrics()

    stablecoins = btc = eth = defi = 0.0
    for asset in crypto_assets:
        if asset.is_perp_notional or is_perp_trade(asset.name, asset.protocol, category_service):
            continue

        if category_service.is_stablecoin(asset.symbol):
            stablecoins += asset.value
        sub = category_service.get_sub_category(asset.symbol, asset.asset_type)
        if sub == "btc":
            btc += asset.value
        elif sub == "eth":
            eth += asset.value
        if asset.protocol and not category_service.is_perp_protocol(asset.protocol):
            defi += asset.value

    return CryptoMetrics(
        stablecoin_ratio=safe_percentage(stablecoins, total),
        btc_dominance=safe_percentage(btc, total),
        eth_dominance=safe_percentage(eth, total),
        defi_exposure=safe_percentage(defi, total),
    )


# --- Allocation and risk ---


def get_allocation_bucket(asset: AssetWithPrice, category_service: CategoryService) -> str:
    main = category_service.get_main_category(asset.symbol, asset.asset_type)
    if main == "cash" or category_service.is_cash_equivalent(asset.symbol):
        return ALLOCATION_CASH
    if main == "crypto":
        return ALLOCATION_CRYPTO
    if main == "equities":
        return ALLOCATION_EQUITIES
    return ALLOCATION_OTHER


def get_risk_bucket(asset: AssetWithPrice, category_service: CategoryService) -> str:
    main = category_service.get_main_category(asset.symbol, asset.asset_type)
    if main == "cash" or category_service.is_cash_equivalent(asset.symbol):
        return RISK_CONSERVATIVE
    if main == "equities":
        return RISK_MODERATE
    if main == "crypto" and category_service.get_sub_category(asset.symbol, asset.asset_type) in ("btc", "eth"):
        return RISK_MODERATE
    return RISK_AGGRESSIVE


def _bucketed_breakdown(assets: List[AssetWithPrice], bucket_for) -> List[BreakdownItem]:
    members: Dict[str, List[AssetWithPrice]] = defaultdict(list)
    for asset in _holdings(assets):
        members[bucket_for(asset)].append(asset)

    totals = {label: sum(asset.value for asset in bucket) for label, bucket in members.items()}
    items = _to_breakdown(totals, {label: len(bucket) for label, bucket in members.items()})
    for item in items:
        item.breakdown = _symbol_breakdown(members[item.label])
    return items


def calculate_allocation_breakdown(
    assets: List[AssetWithPrice],
    category_service: Optional[CategoryService] = None,
) -> List[BreakdownItem]:
    """Cash & Equivalents / Crypto / Equities / Other, with per-symbol drill-down."""
    category_service = category_service or CategoryService()
    return _bucketed_breakdown(assets, lambda asset: get_allocation_bucket(asset, category_service))


def calculate_risk_profile(
    assets: List[AssetWithPrice],
    category_service: Optional[CategoryService] = None,
) -> List[BreakdownItem]:
    """Conservative (cash), Moderate (BTC, ETH, equities) and Aggressive (everything else)."""
    category_service = category_service or CategoryService()
    return _bucketed_breakdown(assets, lambda asset: get_risk_bucket(asset, category_service))


# --- Account names ---


def shorten_address(address: str) -> str:
    if len(address) <= 10:
        return address
    return f"{address[:6]}...{address[-4:]}"


def extract_account_name(asset: AssetWithPrice, account_map: AccountsArg = None) -> str:
    """Human-readable holder of an asset (bank, exchange, wallet, protocol or chain)."""
    name = (asset.name or "").strip()
    match = ACCOUNT_CURRENCY_PATTERN.match(name)
    if match:
        return match.group(1).strip()

    accounts = _account_map(account_map)
    account = accounts.get(asset.account_id) if asset.account_id else None
    if account is not None:
        if account.is_cex:
            return CEX_EXCHANGE_NAMES[account.data_source]
        if account.is_wallet and account.address:
            return shorten_address(account.address)

    if asset.protocol:
        return asset.protocol.title()
    if asset.chain:
        return asset.chain.capitalize()
    return name or "Manual"


# --- Cash and equities ---


def calculate_cash_breakdown(
    assets: List[AssetWithPrice],
    include_stablecoins: bool = True,
    accounts: AccountsArg = None,
    category_service: Optional[CategoryService] = None,
) -> CashBreakdownResult:
    """Fiat and stablecoin holdings by currency and by institution."""
    category_service = category_service or CategoryService()
    account_map = _account_map(accounts)

    fiat = ValueCount()
    stablecoins = ValueCount()
    by_currency: Dict[str, List[AssetWithPrice]] = defaultdict(list)
    by_institution: Dict[tuple, InstitutionBreakdownItem] = {}

    for asset in _holdings(assets):
        is_fiat = category_service.get_main_category(asset.symbol, asset.asset_type) == "cash"
        if is_fiat:
            currency = extract_currency_code(asset.symbol)
            fiat.value += asset.value
            fiat.count += 1
        elif include_stablecoins and category_service.is_stablecoin(asset.symbol):
            currency = category_service.get_underlying_fiat_currency(asset.symbol) or "USD"
            stablecoins.value += asset.value
            stablecoins.count += 1
        else:
            continue

        by_currency[currency].append(asset)

        key = (extract_account_name(asset, account_map), currency)
        institution = by_institution.setdefault(
            key, InstitutionBreakdownItem(name=key[0], currency=currency, value=0.0)
        )
        institution.value += asset.value
        institution.count += 1

    chart_data = _to_breakdown(
        {currency: sum(asset.value for asset in members) for currency, members in by_currency.items()},
        {currency: len(members) for currency, members in by_currency.items()},
    )
    for item in chart_data:
        item.breakdown = _symbol_breakdown(by_currency[item.label])

    institutions = [item for item in by_institution.values() if item.value > 0]
    institutions.sort(key=lambda item: item.value, reverse=True)

    fiat.value = max(0.0, fiat.value)
    stablecoins.value = max(0.0, stablecoins.value)
    return CashBreakdownResult(
        fiat=fiat,
        stablecoins=stablecoins,
        total=fiat.value + stablecoins.value,
        chart_data=chart_data,
        institution_breakdown=institutions,
    )


def calculate_equities_breakdown(
    assets: List[AssetWithPrice],
    category_service: Optional[CategoryService] = None,
) -> EquitiesBreakdownResult:
    """Stocks vs ETFs, counted by position, with per-symbol drill-down."""
    category_service = category_service or CategoryService()

    members: Dict[str, List[AssetWithPrice]] = {"stocks": [], "etfs": []}
    for asset in _holdings(assets):
        if category_service.get_main_category(asset.symbol, asset.asset_type) != "equities":
            continue
        sub = category_service.get_sub_category(asset.symbol, asset.asset_type)
        members["etfs" if sub == "etfs" else "stocks"].append(asset)

    stocks = ValueCount(
        value=max(0.0, sum(asset.value for asset in members["stocks"])),
        count=len(members["stocks"]),
    )
    etfs = ValueCount(
        value=max(0.0, sum(asset.value for asset in members["etfs"])),
        count=len(members["etfs"]),
    )
    total = stocks.value + etfs.value

    chart_data = []
    for label, bucket, key in (("Stocks", stocks, "stocks"), ("ETFs", etfs, "etfs")):
        if bucket.value > 0:
            chart_data.append(
                BreakdownItem(
                    label=label,
                    value=bucket.value,
                    percentage=safe_percentage(bucket.value, total),
                    count=bucket.count,
                    breakdown=_symbol_breakdown(members[key]),
                )
            )
    chart_data.sort(key=lambda item: item.value, reverse=True)

    return EquitiesBreakdownResult(stocks=stocks, etfs=etfs, total=total, chart_data=chart_data)


# --- Perps ---


def calculate_perp_page_data(
    assets: List[AssetWithPrice],
    category_service: Optional[CategoryService] = None,
) -> PerpPageData:
    """Positions held on perp exchanges, split by role, with per-exchange totals."""
    category_service = category_service or CategoryService()
    data = PerpPageData()
    stats: Dict[str, ExchangeStats] = {}

    for asset in assets:
        if not category_service.is_perp_protocol(asset.protocol):
            continue

        classification = classify_asset_exposure(asset, category_service).classification
        exchange = get_perp_exchange_name(asset.protocol)
        exchange_stats = stats.setdefault(exchange, ExchangeStats(exchange=exchange))
        exchange_stats.position_count += 1
        data.all_perp_positions.append(asset)

        if classification is ExposureClassification.PERP_MARGIN:
            data.margin_positions.append(asset)
            exchange_stats.margin += asset.value
        elif classification is ExposureClassification.PERP_LONG:
            data.trading_positions.append(asset)
            exchange_stats.longs += abs(asset.value)
        elif classification is ExposureClassification.PERP_SHORT:
            data.trading_positions.append(asset)
            exchange_stats.shorts += abs(asset.value)
        else:
            data.spot_holdings.append(asset)
            exchange_stats.spot += asset.value

    for exchange_stats in stats.values():
        exchange_stats.account_value = exchange_stats.margin + exchange_stats.spot
        exchange_stats.net_exposure = exchange_stats.longs - exchange_stats.shorts

    data.exchange_stats = sorted(stats.values(), key=lambda item: item.account_value, reverse=True)
    data.has_perps = bool(data.all_perp_positions)
    return data


# --- Asset summary ---


def calculate_asset_summary(
    assets: List[AssetWithPrice],
    category_service: Optional[CategoryService] = None,
) -> Optional[AssetSummary]:
    """Roll up every position of one symbol; None when there are none."""
    if not assets:
        return None

    category_service = category_service or CategoryService()
    first = assets[0]

    total_amount = sum(-asset.amount if asset.is_debt else asset.amount for asset in assets)
    cost_bases = [asset.cost_basis for asset in assets if asset.cost_basis is not None]
    current_price = next((asset.current_price for asset in assets if asset.current_price > 0), 0.0)
    change_24h = sum(asset.change_24h for asset in assets)
    exposure_category = category_service.get_exposure_category(first.symbol, first.asset_type)
    wallets = {asset.account_id or asset.protocol or asset.chain or "manual" for asset in assets}

    return AssetSummary(
        symbol=first.symbol.upper(),
        name=first.name,
        total_amount=total_amount,
        total_value=sum(asset.value for asset in assets),
        total_cost_basis=sum(cost_bases) if cost_bases else None,
        current_price=current_price,
        change_24h=change_24h,
        change_percent_24h=first.change_percent_24h,
        exposure_category=exposure_category,
        exposure_category_label=category_service.get_exposure_category_label(exposure_category),
        main_category=category_service.get_main_category(first.symbol, first.asset_type),
        sub_category=category_service.get_sub_category(first.symbol, first.asset_type),
        wallet_count=len(wallets),
        position_count=len(assets),
        allocation=sum(asset.allocation for asset in assets),
    )
