# -*- coding: utf-8 -*-
"""
Exposure Classification
-----------------------
Assigns every priced asset exactly one exposure classification. The checks
run in a fixed order and the first match wins, so a stablecoin sitting on a
perp exchange is margin, never plain cash.
"""

from core.category_service import CategoryService
from core.perp_trades import detect_perp_trade
from models.portfolio import AssetWithPrice
from models.results import ExposureClassification, ExposureResult


def classify_asset_exposure(asset: AssetWithPrice, category_service: CategoryService) -> ExposureResult:
    """Classify one asset and return its classification with the absolute value."""
    abs_value = abs(asset.value)
    is_debt = asset.is_debt or asset.value < 0
    on_perp_exchange = category_service.is_perp_protocol(asset.protocol)
    cash_equivalent = category_service.is_cash_equivalent(asset.symbol)

    if on_perp_exchange:
        trade = detect_perp_trade(asset.name)
        if trade.is_perp_trade:
            classification = (
                ExposureClassification.PERP_SHORT if trade.is_short else ExposureClassification.PERP_LONG
            )
        elif cash_equivalent:
            classification = ExposureClassification.PERP_MARGIN
        else:
            classification = ExposureClassification.PERP_SPOT
    elif cash_equivalent:
        classification = ExposureClassification.BORROWED_CASH if is_debt else ExposureClassification.CASH
    elif is_debt:
        classification = ExposureClassification.SPOT_SHORT
    else:
        classification = ExposureClassification.SPOT_LONG

    return ExposureResult(classification=classification, abs_value=abs_value)
