"""Shared builders for engine tests."""

import itertools
from typing import Dict

from models.portfolio import AssetWithPrice, Position, PriceData

_ids = itertools.count(1)


def make_position(**overrides) -> Position:
    values = {
        "id": f"pos-{next(_ids)}",
        "symbol": "BTC",
        "name": "Bitcoin",
        "amount": 1.0,
        "asset_class": "crypto",
    }
    values.update(overrides)
    return Position(**values)


def make_crypto_position(**overrides) -> Position:
    values = {"symbol": "ETH", "name": "Ethereum", "amount": 10.0, "asset_class": "crypto"}
    values.update(overrides)
    return make_position(**values)


def make_debt_position(**overrides) -> Position:
    values = {
        "symbol": "USDC",
        "name": "USD Coin",
        "amount": 5000.0,
        "asset_class": "crypto",
        "is_debt": True,
        "protocol": "Morpho",
    }
    values.update(overrides)
    return make_position(**values)


def make_cash_position(**overrides) -> Position:
    values = {
        "symbol": "CASH_USD_revolut",
        "name": "Revolut (USD)",
        "amount": 10000.0,
        "asset_class": "cash",
    }
    values.update(overrides)
    return make_position(**values)


def make_stock_position(**overrides) -> Position:
    values = {"symbol": "AAPL", "name": "Apple Inc.", "amount": 50.0, "asset_class": "equity"}
    values.update(overrides)
    return make_position(**values)


def make_perp_position(**overrides) -> Position:
    values = {
        "symbol": "BTC",
        "name": "BTC-PERP Long",
        "amount": 1.0,
        "asset_class": "crypto",
        "protocol": "Hyperliquid",
    }
    values.update(overrides)
    return make_position(**values)


def make_asset_with_price(**overrides) -> AssetWithPrice:
    values = {
        "id": f"asset-{next(_ids)}",
        "symbol": "BTC",
        "name": "Bitcoin",
        "asset_class": "crypto",
        "chain": "eth",
        "amount": 1.0,
        "current_price": 50000.0,
        "value": 50000.0,
        "change_24h": 500.0,
        "change_percent_24h": 1.0,
        "allocation": 50.0,
    }
    values.update(overrides)
    return AssetWithPrice(**values)


def make_price_map(prices: Dict[str, float], change_percent: float = 1.0) -> Dict[str, PriceData]:
    """PriceData keyed as given; the 24h change is change_percent of the price."""
    return {
        key: PriceData(price=price, change_24h=price * change_percent / 100, change_percent_24h=change_percent)
        for key, price in prices.items()
    }


def make_basic_prices() -> Dict[str, PriceData]:
    return make_price_map(
        {
            "btc": 50000.0,
            "eth": 3000.0,
            "sol": 100.0,
            "usdc": 1.0,
            "usdt": 1.0,
            "aapl": 180.0,
            "googl": 140.0,
        }
    )
