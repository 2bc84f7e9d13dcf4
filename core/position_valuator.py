# -*- coding: utf-8 -*-
"""
Position Valuation Module
-------------------------
Turns raw positions into priced AssetWithPrice records:

1. Cash positions are converted to USD through an FX rate
2. User-set custom prices override market prices
3. Market prices are looked up by price key, with an alternate-key retry for crypto
4. Known stablecoins without a price fall back to 1.0

Debt positions carry a negative value so that the sign alone tells an asset
from a liability. Perp trades (long/short on a perp exchange) are flagged as
notional so they stay out of holdings totals.
"""

import logging
import re
from typing import Dict, List, Optional

from config.constants import DEFAULT_FX_RATES
from core.category_service import CategoryService
from core.perp_trades import is_perp_trade
from core.price_provider import CoinIdPriceProvider, PriceProvider
from models.portfolio import AssetClass, AssetWithPrice, CustomPrice, Position, PriceData, resolve_position
from utils.helpers import safe_float_convert, safe_percentage

logger = logging.getLogger(__name__)

# CASH_CHF_1769344861626 / cash_eur_123
CASH_SYMBOL_PATTERN = re.compile(r"^cash_([a-z]{3})(?:_|$)", re.IGNORECASE)
# PLN_1234567890
CURRENCY_ID_PATTERN = re.compile(r"^([a-z]{3})_\d+$", re.IGNORECASE)


def extract_currency_code(symbol: str) -> str:
    """Currency code embedded in a cash position symbol (CASH_USD_revolut -> USD)."""
    text = (symbol or "").strip()

    match = CASH_SYMBOL_PATTERN.match(text) or CURRENCY_ID_PATTERN.match(text)
    if match:
        return match.group(1).upper()
    return text.upper()


def get_fx_rate(currency: str, fx_rates: Optional[Dict[str, float]] = None) -> float:
    """USD value of one unit of currency; live table first, then defaults, then 1.0."""
    code = (currency or "").upper()
    if code == "USD":
        return 1.0

    rate = safe_float_convert((fx_rates or {}).get(code), 0.0)
    if rate <= 0:
        rate = DEFAULT_FX_RATES.get(code, 0.0)
    if rate <= 0:
        logger.debug("No FX rate for %s, using 1.0", code)
        return 1.0
    return rate


def get_price_key(position, price_provider: Optional[PriceProvider] = None) -> str:
    """
    Key used to look up a position's market price.

    Wallet positions carry a precomputed key; manual crypto positions use the
    provider's coin id; everything else uses the lower-cased symbol.
    """
    if position.price_key:
        return position.price_key

    provider = price_provider or CoinIdPriceProvider()
    asset_class = getattr(position, "asset_class", None)
    if asset_class is AssetClass.CRYPTO or asset_class == "crypto":
        return provider.get_coin_id(position.symbol)
    return position.symbol.lower()


class PositionValuator:
    """Prices positions against an already-fetched price table."""

    def __init__(
        self,
        category_service: Optional[CategoryService] = None,
        price_provider: Optional[PriceProvider] = None,
    ):
        self.category_service = category_service or CategoryService()
        self.price_provider = price_provider or CoinIdPriceProvider()

    def _is_cash(self, resolved) -> bool:
        if resolved.asset_class is AssetClass.CASH:
            return True
        return self.category_service.get_main_category(resolved.symbol, resolved.asset_type) == "cash"

    def _lookup_price(self, resolved, prices: Dict[str, PriceData]) -> PriceData:
        """Market price for a position; an empty PriceData when nothing matches."""
        price_key = get_price_key(resolved, self.price_provider)
        price_data = prices.get(price_key)

        if resolved.asset_class is AssetClass.CRYPTO and (price_data is None or price_data.price <= 0):
            alternate_key = self.price_provider.get_alternate_key(resolved.symbol)
            if alternate_key != price_key and alternate_key in prices:
                logger.debug("%s: no price under %s, using %s", resolved.symbol, price_key, alternate_key)
                price_data = prices[alternate_key]

        return price_data or PriceData()

    def value(
        self,
        position: Position,
        prices: Dict[str, PriceData],
        custom_prices: Optional[Dict[str, CustomPrice]] = None,
        fx_rates: Optional[Dict[str, float]] = None,
    ) -> AssetWithPrice:
        """Price a single position. Allocation is left at 0 (see value_all)."""
        resolved = resolve_position(position)
        sign = -1 if resolved.is_debt else 1
        custom_prices = custom_prices or {}

        current_price = 0.0
        raw_change = 0.0
        change_percent = 0.0
        has_custom_price = False

        if self._is_cash(resolved):
            currency = extract_currency_code(resolved.symbol)
            current_price = get_fx_rate(currency, fx_rates)
        else:
            custom = custom_prices.get(resolved.symbol.lower())
            if custom is not None and custom.price > 0:
                current_price = custom.price
                has_custom_price = True
            else:
                price_data = self._lookup_price(resolved, prices)
                current_price = safe_float_convert(price_data.price)
                raw_change = safe_float_convert(price_data.change_24h)
                change_percent = safe_float_convert(price_data.change_percent_24h)

            if current_price <= 0 and self.category_service.is_stablecoin(resolved.symbol):
                current_price = 1.0

        value = sign * resolved.amount * current_price
        change_24h = sign * raw_change * resolved.amount
        change_percent_24h = sign * change_percent

        asset = AssetWithPrice(
            **vars(resolved),
            current_price=current_price,
            value=value,
            change_24h=change_24h,
            change_percent_24h=change_percent_24h,
            allocation=0.0,
            has_custom_price=has_custom_price,
            is_perp_notional=is_perp_trade(resolved.name, resolved.protocol, self.category_service),
        )

        logger.debug(
            "%s%s: amount=%s price=%s value=%.2f",
            asset.symbol,
            " [DEBT]" if asset.is_debt else "",
            asset.amount,
            current_price,
            value,
        )
        return asset

    def value_all(
        self,
        positions: List[Position],
        prices: Dict[str, PriceData],
        custom_prices: Optional[Dict[str, CustomPrice]] = None,
        fx_rates: Optional[Dict[str, float]] = None,
    ) -> List[AssetWithPrice]:
        """
        Price every position and compute allocations.

        Allocation is each value's share of gross holdings (positive values,
        perp notional excluded); debts get a negative allocation and perp
        notional gets 0. Results are sorted assets first, then by absolute
        value descending.
        """
        assets = [self.value(position, prices, custom_prices, fx_rates) for position in positions]

        gross_assets = sum(
            asset.value for asset in assets if asset.value > 0 and not asset.is_perp_notional
        )
        for asset in assets:
            asset.allocation = 0.0 if asset.is_perp_notional else safe_percentage(asset.value, gross_assets)

        assets.sort(key=lambda asset: (asset.is_debt, -abs(asset.value)))
        return assets


def calculate_position_value(
    position: Position,
    prices: Dict[str, PriceData],
    custom_prices: Optional[Dict[str, CustomPrice]] = None,
    fx_rates: Optional[Dict[str, float]] = None,
    category_service: Optional[CategoryService] = None,
    price_provider: Optional[PriceProvider] = None,
) -> AssetWithPrice:
    return PositionValuator(category_service, price_provider).value(
        position, prices, custom_prices, fx_rates
    )


def calculate_all_positions_with_prices(
    positions: List[Position],
    prices: Dict[str, PriceData],
    custom_prices: Optional[Dict[str, CustomPrice]] = None,
    fx_rates: Optional[Dict[str, float]] = None,
    category_service: Optional[CategoryService] = None,
    price_provider: Optional[PriceProvider] = None,
) -> List[AssetWithPrice]:
    return PositionValuator(category_service, price_provider).value_all(
        positions, prices, custom_prices, fx_rates
    )
