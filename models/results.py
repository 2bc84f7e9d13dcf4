# -*- coding: utf-8 -*-
"""
Engine Result Models
--------------------
Plain data structures returned by the valuation and exposure engine.
Every result exposes to_dict(), which yields camelCase keys for JSON output.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from models.portfolio import AssetWithPrice, to_plain


class ResultMixin:
    """Adds camelCase dict export to result dataclasses."""

    def to_dict(self) -> Dict[str, Any]:
        return to_plain(self)


class ExposureClassification(str, Enum):
    """How a single asset contributes to exposure and leverage."""

    PERP_LONG = "perp-long"
    PERP_SHORT = "perp-short"
    PERP_MARGIN = "perp-margin"
    PERP_SPOT = "perp-spot"
    SPOT_LONG = "spot-long"
    SPOT_SHORT = "spot-short"
    CASH = "cash"
    BORROWED_CASH = "borrowed-cash"


@dataclass(frozen=True)
class PerpTradeInfo(ResultMixin):
    is_perp_trade: bool = False
    is_long: bool = False
    is_short: bool = False


@dataclass(frozen=True)
class ExposureResult(ResultMixin):
    classification: ExposureClassification
    abs_value: float


# --- Portfolio summary ---


@dataclass
class AssetTypeValue(ResultMixin):
    type: str
    value: float
    percentage: float


@dataclass
class PortfolioSummary(ResultMixin):
    """Headline numbers for the whole portfolio (perp notional excluded)."""

    total_value: float = 0.0
    change_24h: float = 0.0
    change_percent_24h: float = 0.0
    gross_assets: float = 0.0
    total_debts: float = 0.0
    position_count: int = 0
    asset_count: int = 0
    crypto_value: float = 0.0
    stock_value: float = 0.0
    cash_value: float = 0.0
    other_value: float = 0.0
    top_assets: List[AssetWithPrice] = field(default_factory=list)
    assets_by_type: List[AssetTypeValue] = field(default_factory=list)


# --- Exposure data ---


@dataclass
class SubCategoryExposure(ResultMixin):
    category: str
    label: str
    value: float
    gross: float
    debt: float
    percentage: float


@dataclass
class CategoryExposure(ResultMixin):
    category: str
    label: str
    value: float
    gross: float
    debt: float
    percentage: float
    sub_categories: List[SubCategoryExposure] = field(default_factory=list)


@dataclass
class PerpsBreakdown(ResultMixin):
    margin: float = 0.0
    longs: float = 0.0
    shorts: float = 0.0
    total: float = 0.0


@dataclass
class ExposureMetrics(ResultMixin):
    long_exposure: float = 0.0
    short_exposure: float = 0.0
    gross_exposure: float = 0.0
    net_exposure: float = 0.0
    net_worth: float = 0.0
    leverage: float = 0.0
    cash_percentage: float = 0.0
    debt_ratio: float = 0.0


@dataclass
class ConcentrationMetrics(ResultMixin):
    herfindahl_index: float = 0.0
    top1_percentage: float = 0.0
    top5_percentage: float = 0.0
    top10_percentage: float = 0.0
    position_count: int = 0
    asset_count: int = 0


@dataclass
class PerpsMetrics(ResultMixin):
    collateral: float = 0.0
    long_notional: float = 0.0
    short_notional: float = 0.0
    net_notional: float = 0.0
    gross_notional: float = 0.0
    estimated_margin_used: float = 0.0
    utilization_rate: float = 0.0


@dataclass
class SpotDerivativesBreakdown(ResultMixin):
    spot_long: float = 0.0
    spot_short: float = 0.0
    spot_net: float = 0.0
    derivatives_long: float = 0.0
    derivatives_short: float = 0.0
    derivatives_net: float = 0.0


@dataclass
class ExposureData(ResultMixin):
    categories: List[CategoryExposure] = field(default_factory=list)
    perps_breakdown: PerpsBreakdown = field(default_factory=PerpsBreakdown)
    exposure_metrics: ExposureMetrics = field(default_factory=ExposureMetrics)
    concentration_metrics: ConcentrationMetrics = field(default_factory=ConcentrationMetrics)
    perps_metrics: PerpsMetrics = field(default_factory=PerpsMetrics)
    spot_derivatives: SpotDerivativesBreakdown = field(default_factory=SpotDerivativesBreakdown)
    total_value: float = 0.0
    gross_assets: float = 0.0
    total_debts: float = 0.0


# --- Breakdowns ---


@dataclass
class BreakdownItem(ResultMixin):
    """One bucket of a breakdown chart, optionally with a drill-down list."""

    label: str
    value: float
    percentage: float = 0.0
    count: int = 0
    breakdown: List["BreakdownItem"] = field(default_factory=list)


@dataclass
class CryptoMetrics(ResultMixin):
    stablecoin_ratio: float = 0.0
    btc_dominance: float = 0.0
    eth_dominance: float = 0.0
    defi_exposure: float = 0.0


@dataclass
class ValueCount(ResultMixin):
    value: float = 0.0
    count: int = 0


@dataclass
class InstitutionBreakdownItem(ResultMixin):
    name: str
    currency: str
    value: float
    count: int = 0


@dataclass
class CashBreakdownResult(ResultMixin):
    fiat: ValueCount = field(default_factory=ValueCount)
    stablecoins: ValueCount = field(default_factory=ValueCount)
    total: float = 0.0
    chart_data: List[BreakdownItem] = field(default_factory=list)
    institution_breakdown: List[InstitutionBreakdownItem] = field(default_factory=list)


@dataclass
class EquitiesBreakdownResult(ResultMixin):
    stocks: ValueCount = field(default_factory=ValueCount)
    etfs: ValueCount = field(default_factory=ValueCount)
    total: float = 0.0
    chart_data: List[BreakdownItem] = field(default_factory=list)


@dataclass
class ExchangeStats(ResultMixin):
    exchange: str
    margin: float = 0.0
    longs: float = 0.0
    shorts: float = 0.0
    spot: float = 0.0
    account_value: float = 0.0
    net_exposure: float = 0.0
    position_count: int = 0


@dataclass
class PerpPageData(ResultMixin):
    margin_positions: List[AssetWithPrice] = field(default_factory=list)
    trading_positions: List[AssetWithPrice] = field(default_factory=list)
    spot_holdings: List[AssetWithPrice] = field(default_factory=list)
    all_perp_positions: List[AssetWithPrice] = field(default_factory=list)
    exchange_stats: List[ExchangeStats] = field(default_factory=list)
    has_perps: bool = False


@dataclass
class AssetSummary(ResultMixin):
    """Everything about one symbol across all positions holding it."""

    symbol: str
    name: str
    total_amount: float
    total_value: float
    total_cost_basis: Optional[float]
    current_price: float
    change_24h: float
    change_percent_24h: float
    exposure_category: str
    exposure_category_label: str
    main_category: str
    sub_category: str
    wallet_count: int
    position_count: int
    allocation: float


@dataclass
class PortfolioReport(ResultMixin):
    """Every view of the portfolio computed from one valuation pass."""

    assets: List[AssetWithPrice]
    summary: PortfolioSummary
    exposure: ExposureData
    allocation: List[BreakdownItem]
    risk_profile: List[BreakdownItem]
    custody: List[BreakdownItem]
    chains: List[BreakdownItem]
    crypto_metrics: CryptoMetrics
    cash: CashBreakdownResult
    equities: EquitiesBreakdownResult
    perps: PerpPageData
