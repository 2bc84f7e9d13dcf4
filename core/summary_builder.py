# -*- coding: utf-8 -*-
"""
Portfolio Summary Builder
-------------------------
Entry point of the engine. PortfolioEngine values positions once and derives
every view (summary, exposure, breakdowns, perps page) from that single pass.
"""

import logging
from collections import defaultdict
from typing import Dict, List, Optional

from config.constants import ASSUMED_AVG_LEVERAGE, TOP_ASSETS_LIMIT
from core.aggregation import calculate_exposure_data
from core.breakdowns import (
    AccountsArg,
    calculate_allocation_breakdown,
    calculate_cash_breakdown,
    calculate_chain_breakdown,
    calculate_crypto_metrics,
    calculate_custody_breakdown,
    calculate_equities_breakdown,
    calculate_perp_page_data,
    calculate_risk_profile,
)
from core.category_service import CategoryService
from core.position_valuator import PositionValuator, get_price_key
from core.price_provider import CoinIdPriceProvider, PriceProvider
from models.portfolio import AssetClass, AssetWithPrice, CustomPrice, Position, PriceData, resolve_position
from models.results import AssetTypeValue, ExposureData, PortfolioReport, PortfolioSummary
from utils.helpers import safe_percentage

logger = logging.getLogger(__name__)


def build_portfolio_summary(assets: List[AssetWithPrice], top_assets_limit: int = TOP_ASSETS_LIMIT) -> PortfolioSummary:
    """Headline numbers from already-valued assets (sorted as value_all returns them)."""
    holdings = [asset for asset in assets if not asset.is_perp_notional]

    total_value = sum(asset.value for asset in holdings)
    gross_assets = sum(asset.value for asset in holdings if asset.value > 0)
    total_debts = sum(-asset.value for asset in holdings if asset.value < 0)

    change_24h = sum(asset.change_24h for asset in holdings)
    previous_value = total_value - change_24h
    change_percent_24h = safe_percentage(change_24h, previous_value)

    by_class: Dict[AssetClass, float] = defaultdict(float)
    for asset in holdings:
        by_class[asset.asset_class] += asset.value

    assets_by_type = [
        AssetTypeValue(
            type=asset_class.value,
            value=by_class[asset_class],
            percentage=safe_percentage(by_class[asset_class], total_value),
        )
        for asset_class in AssetClass
        if by_class[asset_class] > 0
    ]

    return PortfolioSummary(
        total_value=total_value,
        change_24h=change_24h,
        change_percent_24h=change_percent_24h,
        gross_assets=gross_assets,
        total_debts=total_debts,
        position_count=len(assets),
        asset_count=len({asset.symbol.upper() for asset in assets}),
        crypto_value=by_class[AssetClass.CRYPTO],
        stock_value=by_class[AssetClass.EQUITY],
        cash_value=by_class[AssetClass.CASH],
        other_value=by_class[AssetClass.OTHER],
        top_assets=assets[:top_assets_limit],
        assets_by_type=assets_by_type,
    )


class PortfolioEngine:
    """Values a portfolio and builds every exposure view from one valuation pass."""

    def __init__(
        self,
        category_service: Optional[CategoryService] = None,
        price_provider: Optional[PriceProvider] = None,
        assumed_avg_leverage: float = ASSUMED_AVG_LEVERAGE,
    ):
        self.category_service = category_service or CategoryService()
        self.price_provider = price_provider or CoinIdPriceProvider()
        self.assumed_avg_leverage = assumed_avg_leverage
        self.valuator = PositionValuator(self.category_service, self.price_provider)

    def value_positions(
        self,
        positions: List[Position],
        prices: Dict[str, PriceData],
        custom_prices: Optional[Dict[str, CustomPrice]] = None,
        fx_rates: Optional[Dict[str, float]] = None,
    ) -> List[AssetWithPrice]:
        return self.valuator.value_all(positions, prices, custom_prices, fx_rates)

    def summarize(
        self,
        positions: List[Position],
        prices: Dict[str, PriceData],
        custom_prices: Optional[Dict[str, CustomPrice]] = None,
        fx_rates: Optional[Dict[str, float]] = None,
    ) -> PortfolioSummary:
        return build_portfolio_summary(self.value_positions(positions, prices, custom_prices, fx_rates))

    def exposure(
        self,
        positions: List[Position],
        prices: Dict[str, PriceData],
        custom_prices: Optional[Dict[str, CustomPrice]] = None,
        fx_rates: Optional[Dict[str, float]] = None,
    ) -> ExposureData:
        assets = self.value_positions(positions, prices, custom_prices, fx_rates)
        return calculate_exposure_data(assets, self.category_service, self.assumed_avg_leverage)

    def build_report(
        self,
        positions: List[Position],
        prices: Dict[str, PriceData],
        custom_prices: Optional[Dict[str, CustomPrice]] = None,
        fx_rates: Optional[Dict[str, float]] = None,
        accounts: AccountsArg = None,
    ) -> PortfolioReport:
        """Value once, then derive every view from the same assets."""
        assets = self.value_positions(positions, prices, custom_prices, fx_rates)
        logger.debug("Valued %d positions", len(assets))

        service = self.category_service
        return PortfolioReport(
            assets=assets,
            summary=build_portfolio_summary(assets),
            exposure=calculate_exposure_data(assets, service, self.assumed_avg_leverage),
            allocation=calculate_allocation_breakdown(assets, service),
            risk_profile=calculate_risk_profile(assets, service),
            custody=calculate_custody_breakdown(assets, accounts, service),
            chains=calculate_chain_breakdown(assets, accounts, service),
            crypto_metrics=calculate_crypto_metrics(assets, service),
            cash=calculate_cash_breakdown(assets, True, accounts, service),
            equities=calculate_equities_breakdown(assets, service),
            perps=calculate_perp_page_data(assets, service),
        )


def calculate_portfolio_summary(
    positions: List[Position],
    prices: Dict[str, PriceData],
    custom_prices: Optional[Dict[str, CustomPrice]] = None,
    fx_rates: Optional[Dict[str, float]] = None,
) -> PortfolioSummary:
    return PortfolioEngine().summarize(positions, prices, custom_prices, fx_rates)


def calculate_total_nav(
    positions: List[Position],
    prices: Dict[str, PriceData],
    price_provider: Optional[PriceProvider] = None,
) -> float:
    """Quick NAV straight from raw prices: cash at face value, debts subtract."""
    provider = price_provider or CoinIdPriceProvider()
    nav = 0.0
    for position in positions:
        resolved = resolve_position(position)
        if resolved.asset_class is AssetClass.CASH:
            price = 1.0
        else:
            price_data = prices.get(get_price_key(resolved, provider))
            price = price_data.price if price_data else 0.0
        value = resolved.amount * price
        nav += -value if resolved.is_debt else value
    return nav
