# -*- coding: utf-8 -*-
"""
Portfolio Input Models
----------------------
Holdings, prices and accounts as they arrive from the data layer, plus the
resolved position objects the engine works with after valuation.

Raw positions carry up to three overlapping "type" fields (an override, an
explicit asset class and a legacy type). They are resolved exactly once, in
resolve_position(), into an AssetClass enum and a category hint so nothing
downstream inspects the raw strings again.
"""

import logging
from dataclasses import dataclass, field, fields, is_dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from config.constants import CEX_EXCHANGE_NAMES, WALLET_DATA_SOURCES
from utils.helpers import safe_float_convert

logger = logging.getLogger(__name__)


class AssetClass(str, Enum):
    """Storage-level asset class of a position."""

    CRYPTO = "crypto"
    EQUITY = "equity"
    CASH = "cash"
    OTHER = "other"


# Legacy position "type" values -> asset class
LEGACY_TYPE_TO_CLASS = {
    "crypto": AssetClass.CRYPTO,
    "stock": AssetClass.EQUITY,
    "etf": AssetClass.EQUITY,
    "equity": AssetClass.EQUITY,
    "cash": AssetClass.CASH,
    "manual": AssetClass.OTHER,
    "other": AssetClass.OTHER,
}


def _first(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first present, non-None value among keys (camelCase or snake_case)."""
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return default


def _optional_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    return safe_float_convert(value)


@dataclass(frozen=True)
class Position:
    """A holding as stored by the data layer. Never mutated by the engine."""

    symbol: str
    name: str = ""
    amount: float = 0.0
    id: str = ""
    asset_class_override: Optional[str] = None
    asset_class: Optional[str] = None
    type: Optional[str] = None
    equity_type: Optional[str] = None
    cost_basis: Optional[float] = None
    is_debt: bool = False
    account_id: Optional[str] = None
    protocol: Optional[str] = None
    chain: Optional[str] = None
    price_key: Optional[str] = None  # precomputed key for wallet-sourced positions

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Position":
        """Build a Position from a snapshot record (camelCase or snake_case keys)."""
        amount = safe_float_convert(data.get("amount"))
        is_debt = bool(_first(data, "isDebt", "is_debt", default=False))
        symbol = str(data.get("symbol") or "")
        if amount < 0:
            # Direction belongs in is_debt; amounts are stored unsigned
            logger.warning("Position %s has a negative amount, treating it as debt", symbol)
            amount = -amount
            is_debt = True

        return cls(
            symbol=symbol,
            name=str(data.get("name") or ""),
            amount=amount,
            id=str(data.get("id") or ""),
            asset_class_override=_first(data, "assetClassOverride", "asset_class_override"),
            asset_class=_first(data, "assetClass", "asset_class"),
            type=data.get("type"),
            equity_type=_first(data, "equityType", "equity_type"),
            cost_basis=_optional_float(_first(data, "costBasis", "cost_basis")),
            is_debt=is_debt,
            account_id=_first(data, "accountId", "account_id"),
            protocol=data.get("protocol"),
            chain=data.get("chain"),
            price_key=_first(data, "debankPriceKey", "priceKey", "price_key"),
        )


@dataclass
class PriceData:
    """Market price for one price key."""

    price: float = 0.0
    change_24h: float = 0.0
    change_percent_24h: float = 0.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PriceData":
        return cls(
            price=safe_float_convert(data.get("price")),
            change_24h=safe_float_convert(_first(data, "change24h", "change_24h")),
            change_percent_24h=safe_float_convert(
                _first(data, "changePercent24h", "change_percent_24h")
            ),
        )


@dataclass
class CustomPrice:
    """User-entered price override for a symbol."""

    price: float
    note: Optional[str] = None
    set_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CustomPrice":
        return cls(
            price=safe_float_convert(data.get("price")),
            note=data.get("note"),
            set_at=_first(data, "setAt", "set_at"),
        )


@dataclass
class Account:
    """Connected account, used only for ownership labels."""

    id: str
    name: str = ""
    data_source: str = "manual"
    address: Optional[str] = None
    chains: List[str] = field(default_factory=list)

    @property
    def is_wallet(self) -> bool:
        return self.data_source in WALLET_DATA_SOURCES

    @property
    def is_cex(self) -> bool:
        return self.data_source in CEX_EXCHANGE_NAMES

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Account":
        connection = data.get("connection") or {}
        data_source = _first(connection, "dataSource", "data_source") or _first(
            data, "dataSource", "data_source", default="manual"
        )
        return cls(
            id=str(data.get("id") or ""),
            name=str(data.get("name") or ""),
            data_source=str(data_source).lower(),
            address=connection.get("address") or data.get("address"),
            chains=list(connection.get("chains") or data.get("chains") or []),
        )


def resolve_asset_class(position: Position) -> AssetClass:
    """Effective asset class: override, then explicit class, then legacy type."""
    for raw in (position.asset_class_override, position.asset_class, position.type):
        if not raw:
            continue
        resolved = LEGACY_TYPE_TO_CLASS.get(str(raw).lower())
        if resolved is not None:
            return resolved
    return AssetClass.OTHER


def _category_hint(asset_class: AssetClass, equity_type: Optional[str] = None) -> str:
    """Type string understood by the category service for a resolved class."""
    if asset_class is AssetClass.EQUITY:
        return "etf" if (equity_type or "").lower() == "etf" else "stock"
    return asset_class.value


@dataclass
class ResolvedPosition:
    """Position with every optional field resolved; produced once per valuation."""

    symbol: str
    name: str = ""
    asset_class: AssetClass = AssetClass.OTHER
    amount: float = 0.0
    asset_type: str = ""  # category hint: crypto | stock | etf | cash | other
    id: str = ""
    is_debt: bool = False
    cost_basis: Optional[float] = None
    account_id: Optional[str] = None
    protocol: Optional[str] = None
    chain: Optional[str] = None
    price_key: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.asset_class, AssetClass):
            self.asset_class = LEGACY_TYPE_TO_CLASS.get(
                str(self.asset_class).lower(), AssetClass.OTHER
            )
        if not self.asset_type:
            self.asset_type = _category_hint(self.asset_class)


def resolve_position(position: Position) -> ResolvedPosition:
    """Collapse the raw type fields of a Position into a ResolvedPosition."""
    asset_class = resolve_asset_class(position)
    legacy_type = (position.type or "").lower()
    equity_type = position.equity_type or ("etf" if legacy_type == "etf" else None)
    # Direction lives in is_debt; a negative amount is a debt of abs(amount)
    amount = position.amount or 0.0
    return ResolvedPosition(
        symbol=position.symbol,
        name=position.name,
        asset_class=asset_class,
        amount=abs(amount),
        asset_type=_category_hint(asset_class, equity_type),
        id=position.id,
        is_debt=bool(position.is_debt) or amount < 0,
        cost_basis=position.cost_basis,
        account_id=position.account_id,
        protocol=position.protocol,
        chain=position.chain,
        price_key=position.price_key,
    )


@dataclass
class AssetWithPrice(ResolvedPosition):
    """A resolved position enriched with price, signed value and allocation."""

    current_price: float = 0.0
    value: float = 0.0
    change_24h: float = 0.0
    change_percent_24h: float = 0.0
    allocation: float = 0.0
    has_custom_price: bool = False
    is_perp_notional: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Plain dict with camelCase keys."""
        return to_plain(self)


def camel_case(name: str) -> str:
    """change_percent_24h -> changePercent24h"""
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def to_plain(value: Any) -> Any:
    """Recursively convert dataclasses/enums into JSON-ready structures with camelCase keys."""
    if is_dataclass(value) and not isinstance(value, type):
        return {camel_case(item.name): to_plain(getattr(value, item.name)) for item in fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [to_plain(item) for item in value]
    if isinstance(value, dict):
        return {key: to_plain(item) for key, item in value.items()}
    return value
