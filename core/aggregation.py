# -*- coding: utf-8 -*-
"""
Exposure Aggregation Module
---------------------------
Rolls classified assets up into portfolio-level exposure numbers:

1. Net worth, gross assets and debts (perp notional excluded)
2. Long/short/gross/net exposure and leverage
3. Concentration (HHI and top-N shares)
4. Perp collateral, notional and estimated margin utilization
5. Category tree (main category -> sub-category) over gross and debt

Perp trades are exposure, not holdings: they feed leverage and the perps
metrics but never any holdings total.
"""

import logging
from collections import defaultdict
from dataclasses import replace
from typing import Any, Dict, List, Optional, Tuple

from config.constants import ASSUMED_AVG_LEVERAGE, CONCENTRATION_TOP_N, DUST_THRESHOLD
from core.category_service import MAIN_CATEGORIES, CategoryService
from core.exposure_classifier import classify_asset_exposure
from core.perp_trades import is_perp_trade
from models.portfolio import AssetWithPrice
from models.results import (
    CategoryExposure,
    ConcentrationMetrics,
    ExposureClassification,
    ExposureData,
    ExposureMetrics,
    PerpsBreakdown,
    PerpsMetrics,
    SpotDerivativesBreakdown,
    SubCategoryExposure,
)
from utils.helpers import safe_divide, safe_percentage

logger = logging.getLogger(__name__)

PERP_TRADE_CLASSES = (ExposureClassification.PERP_LONG, ExposureClassification.PERP_SHORT)
SPOT_CLASSES = (ExposureClassification.SPOT_LONG, ExposureClassification.SPOT_SHORT)


def _item_value(item: Any) -> float:
    if isinstance(item, dict):
        return item.get("value", 0.0) or 0.0
    return getattr(item, "value", 0.0) or 0.0


def calculate_net_worth(assets: List[AssetWithPrice]) -> float:
    """Sum of signed values, perp notional excluded."""
    return sum(asset.value for asset in assets if not asset.is_perp_notional)


def filter_dust_positions(items: List[Any], hide_dust: bool, threshold: float = DUST_THRESHOLD) -> List[Any]:
    """Drop items whose absolute value is below threshold; significant debts survive."""
    if not hide_dust:
        return list(items)
    return [item for item in items if abs(_item_value(item)) >= threshold]


def aggregate_positions_by_symbol(assets: List[AssetWithPrice]) -> List[AssetWithPrice]:
    """
    Merge positions of the same symbol and asset class into one row.

    Debts net against holdings (amount and value), perp notional stays in its
    own row, and allocation is recomputed over gross holdings.
    """
    merged: Dict[Tuple[str, str, bool], AssetWithPrice] = {}
    net_amounts: Dict[Tuple[str, str, bool], float] = {}

    for asset in assets:
        key = (asset.symbol.lower(), asset.asset_class.value, asset.is_perp_notional)
        signed_amount = -asset.amount if asset.is_debt else asset.amount

        if key in merged:
            existing = merged[key]
            net_amounts[key] += signed_amount
            merged[key] = replace(existing, value=existing.value + asset.value)
        else:
            net_amounts[key] = signed_amount
            merged[key] = replace(asset)

    results = []
    for key, asset in merged.items():
        net_amount = net_amounts[key]
        results.append(
            replace(asset, amount=abs(net_amount), is_debt=asset.value < 0 or net_amount < 0)
        )

    gross_assets = sum(asset.value for asset in results if asset.value > 0 and not asset.is_perp_notional)
    for asset in results:
        asset.allocation = 0.0 if asset.is_perp_notional else safe_percentage(asset.value, gross_assets)

    results.sort(key=lambda asset: (asset.value <= 0, -abs(asset.value)))
    return results


def calculate_concentration_metrics(
    assets: List[AssetWithPrice],
    category_service: Optional[CategoryService] = None,
) -> ConcentrationMetrics:
    """HHI and top-N shares over positive holdings grouped by symbol."""
    category_service = category_service or CategoryService()
    by_symbol: Dict[str, float] = defaultdict(float)
    position_count = 0
    for asset in assets:
        if asset.value <= 0 or asset.is_perp_notional:
            continue
        if is_perp_trade(asset.name, asset.protocol, category_service):
            continue
        by_symbol[asset.symbol.upper()] += asset.value
        position_count += 1

    total = sum(by_symbol.values())
    shares = sorted((safe_percentage(value, total) for value in by_symbol.values()), reverse=True)
    top1, top5, top10 = (sum(shares[:n]) for n in CONCENTRATION_TOP_N)

    return ConcentrationMetrics(
        herfindahl_index=sum(share ** 2 for share in shares),
        top1_percentage=top1,
        top5_percentage=top5,
        top10_percentage=top10,
        position_count=position_count,
        asset_count=len(by_symbol),
    )


def _build_category_tree(
    category_totals: Dict[str, Dict[str, float]],
    sub_category_totals: Dict[Tuple[str, str], Dict[str, float]],
    gross_assets: float,
    category_service: CategoryService,
) -> List[CategoryExposure]:
    categories = []
    for main in MAIN_CATEGORIES:
        totals = category_totals.get(main)
        if not totals:
            continue

        sub_categories = [
            SubCategoryExposure(
                category=sub,
                label=category_service.get_sub_category_label(main, sub),
                value=sub_totals["gross"] - sub_totals["debt"],
                gross=sub_totals["gross"],
                debt=sub_totals["debt"],
                percentage=safe_percentage(sub_totals["gross"], gross_assets),
            )
            for (sub_main, sub), sub_totals in sub_category_totals.items()
            if sub_main == main and sub != "none"
        ]
        sub_categories.sort(key=lambda item: item.value, reverse=True)

        categories.append(
            CategoryExposure(
                category=main,
                label=category_service.get_main_category_label(main),
                value=totals["gross"] - totals["debt"],
                gross=totals["gross"],
                debt=totals["debt"],
                percentage=safe_percentage(totals["gross"], gross_assets),
                sub_categories=sub_categories,
            )
        )

    categories.sort(key=lambda item: item.value, reverse=True)
    return categories


def calculate_exposure_data(
    assets: List[AssetWithPrice],
    category_service: Optional[CategoryService] = None,
    assumed_avg_leverage: float = ASSUMED_AVG_LEVERAGE,
) -> ExposureData:
    """Single pass over classified assets producing every exposure metric."""
    category_service = category_service or CategoryService()

    perps_margin = perps_longs = perps_shorts = 0.0
    spot_long = spot_short = 0.0
    cash_value = 0.0
    category_totals: Dict[str, Dict[str, float]] = {}
    sub_category_totals: Dict[Tuple[str, str], Dict[str, float]] = {}

    for asset in assets:
        exposure = classify_asset_exposure(asset, category_service)
        classification = exposure.classification
        abs_value = exposure.abs_value
        is_debt = asset.is_debt or asset.value < 0
        main = category_service.get_main_category(asset.symbol, asset.asset_type)
        is_fiat = main == "cash" and classification in SPOT_CLASSES

        if classification is ExposureClassification.PERP_LONG:
            perps_longs += abs_value
        elif classification is ExposureClassification.PERP_SHORT:
            perps_shorts += abs_value
        elif asset.is_perp_notional:
            # Flagged as a trade upstream; direction comes from the sign
            if is_debt:
                perps_shorts += abs_value
            else:
                perps_longs += abs_value
        elif classification is ExposureClassification.PERP_MARGIN:
            perps_margin += abs_value
            cash_value += abs_value
        elif classification is ExposureClassification.CASH:
            cash_value += abs_value
        elif is_fiat:
            # Bank balances are cash; fiat loans only count as debt
            if not is_debt:
                cash_value += abs_value
        elif classification is ExposureClassification.SPOT_SHORT:
            spot_short += abs_value
        elif classification in (ExposureClassification.SPOT_LONG, ExposureClassification.PERP_SPOT):
            if is_debt:
                spot_short += abs_value
            else:
                spot_long += abs_value
        # Borrowed cash is leverage, not a directional short: debt total only

        if classification in PERP_TRADE_CLASSES or asset.is_perp_notional:
            continue

        sub =category_service.get_sub_category(asset.symbol, asset.asset_type)
        bucket_key = "debt" if is_debt else "gross"
        for totals in (
            category_totals.setdefault(main, {"gross": 0.0, "debt": 0.0}),
            sub_category_totals.setdefault((main, sub), {"gross": 0.0, "debt": 0.0}),
        ):
            totals[bucket_key] += abs_value

    gross_assets = sum(totals["gross"] for totals in category_totals.values())
    total_debts = sum(totals["debt"] for totals in category_totals.values())
    net_worth = gross_assets - total_debts

    long_exposure = max(0.0, spot_long + perps_longs)
    short_exposure = max(0.0, spot_short + perps_shorts)
    gross_exposure = long_exposure + short_exposure
    leverage = safe_divide(gross_exposure, net_worth) if net_worth > 0 else 0.0

    gross_notional = perps_longs + perps_shorts
    estimated_margin_used = safe_divide(gross_notional, assumed_avg_leverage)

    logger.debug(
        "Exposure: gross=%.2f debts=%.2f long=%.2f short=%.2f leverage=%.2f",
        gross_assets,
        total_debts,
        long_exposure,
        short_exposure,
        leverage,
    )

    return ExposureData(
        categories=_build_category_tree(category_totals, sub_category_totals, gross_assets, category_service),
        perps_breakdown=PerpsBreakdown(
            margin=perps_margin,
            longs=perps_longs,
            shorts=perps_shorts,
            total=perps_margin,
        ),
        exposure_metrics=ExposureMetrics(
            long_exposure=long_exposure,
            short_exposure=short_exposure,
            gross_exposure=gross_exposure,
            net_exposure=long_exposure - short_exposure,
            net_worth=net_worth,
            leverage=leverage,
            cash_percentage=safe_percentage(cash_value, gross_assets),
            debt_ratio=safe_percentage(total_debts, gross_assets),
        ),
        concentration_metrics=calculate_concentration_metrics(assets, category_service),
        perps_metrics=PerpsMetrics(
            collateral=perps_margin,
            long_notional=perps_longs,
            short_notional=perps_shorts,
            net_notional=perps_longs - perps_shorts,
            gross_notional=gross_notional,
            estimated_margin_used=estimated_margin_used,
            utilization_rate=safe_percentage(estimated_margin_used, perps_margin),
        ),
        spot_derivatives=SpotDerivativesBreakdown(
            spot_long=spot_long,
            spot_short=spot_short,
            spot_net=spot_long - spot_short,
            derivatives_long=perps_longs,
            derivatives_short=perps_shorts,
            derivatives_net=perps_longs - perps_shorts,
        ),
        total_value=net_worth,
        gross_assets=gross_assets,
        total_debts=total_debts,
    )
