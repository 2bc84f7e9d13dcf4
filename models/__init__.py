# -*- coding: utf-8 -*-
"""
Models Package
--------------
Input holdings, resolved positions and the result structures of the engine.
"""

from .portfolio import (
    Account,
    AssetClass,
    AssetWithPrice,
    CustomPrice,
    Position,
    PriceData,
    ResolvedPosition,
    resolve_asset_class,
    resolve_position,
)
from .results import ExposureClassification, PortfolioReport, PortfolioSummary, ExposureData

__all__ = [
    "Account",
    "AssetClass",
    "AssetWithPrice",
    "CustomPrice",
    "ExposureClassification",
    "ExposureData",
    "PortfolioReport",
    "PortfolioSummary",
    "Position",
    "PriceData",
    "ResolvedPosition",
    "resolve_asset_class",
    "resolve_position",
]
