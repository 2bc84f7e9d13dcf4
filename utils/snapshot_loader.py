# -*- coding: utf-8 -*-
"""
Snapshot Loader
---------------
Reads an already-fetched portfolio snapshot (positions, prices, custom
prices, FX rates and accounts) from a JSON file into engine models.

Snapshot layout:
    {
        "positions": [{"symbol": "BTC", "amount": 1, "assetClass": "crypto", ...}],
        "prices": {"bitcoin": {"price": 50000, "change24h": 500, "changePercent24h": 1.0}},
        "customPrices": {"pepe": {"price": 0.00001, "note": "OTC"}},
        "fxRates": {"EUR": 1.08},
        "accounts": [{"id": "wallet-1", "name": "Main", "connection": {"dataSource": "debank"}}]
    }
"""

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List

from models.portfolio import Account, CustomPrice, Position, PriceData
from utils.helpers import safe_float_convert

logger = logging.getLogger(__name__)


class SnapshotError(ValueError):
    """Raised when a snapshot file cannot be read or is not a snapshot."""


@dataclass
class PortfolioSnapshot:
    positions: List[Position] = field(default_factory=list)
    prices: Dict[str, PriceData] = field(default_factory=dict)
    custom_prices: Dict[str, CustomPrice] = field(default_factory=dict)
    fx_rates: Dict[str, float] = field(default_factory=dict)
    accounts: List[Account] = field(default_factory=list)


def _records(data: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
    records = data.get(key) or []
    if not isinstance(records, list):
        logger.warning("Snapshot field '%s' is not a list, ignoring it", key)
        return []
    return [record for record in records if isinstance(record, dict)]


def _mapping(data: Dict[str, Any], *keys: str) -> Dict[str, Any]:
    for key in keys:
        value = data.get(key)
        if isinstance(value, dict):
            return value
    return {}


def parse_snapshot(data: Any) -> PortfolioSnapshot:
    """Build a PortfolioSnapshot from decoded JSON; bad records are skipped with a warning."""
    if not isinstance(data, dict):
        raise SnapshotError("Snapshot must be a JSON object")

    positions = []
    for index, record in enumerate(_records(data, "positions")):
        if not record.get("symbol"):
            logger.warning("Skipping position #%d without a symbol", index)
            continue
        positions.append(Position.from_dict(record))

    prices = {
        key: PriceData.from_dict(value)
        for key, value in _mapping(data, "prices").items()
        if isinstance(value, dict)
    }
    # Custom prices are keyed by lower-cased symbol
    custom_prices = {
        key.lower(): CustomPrice.from_dict(value)
        for key, value in _mapping(data, "customPrices", "custom_prices").items()
        if isinstance(value, dict)
    }
    fx_rates = {
        code.upper(): safe_float_convert(rate)
        for code, rate in _mapping(data, "fxRates", "fx_rates").items()
        if safe_float_convert(rate) > 0
    }

    accounts = []
    for record in _records(data, "accounts"):
        if not record.get("id"):
            logger.warning("Skipping account without an id: %s", record.get("name", "?"))
            continue
        accounts.append(Account.from_dict(record))

    logger.debug(
        "Snapshot: %d positions, %d prices, %d custom prices, %d FX rates, %d accounts",
        len(positions),
        len(prices),
        len(custom_prices),
        len(fx_rates),
        len(accounts),
    )
    return PortfolioSnapshot(
        positions=positions,
        prices=prices,
        custom_prices=custom_prices,
        fx_rates=fx_rates,
        accounts=accounts,
    )


def load_snapshot(path: str) -> PortfolioSnapshot:
    """Read and parse a snapshot file."""
    if not os.path.exists(path):
        raise SnapshotError(f"Snapshot file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise SnapshotError(f"Invalid JSON in {path}: {e}") from e
    except OSError as e:
        raise SnapshotError(f"Could not read {path}: {e}") from e

    return parse_snapshot(data)
