# -*- coding: utf-8 -*-
"""
Perp Trade Detection
--------------------
Perp DEX positions come in three flavours: margin (collateral held on the
exchange), spot holdings on the exchange, and open trades. Open trades are
recognised by their display name, e.g. "BTC Long", "ETH Short (Hyperliquid)".
"""

import re
from typing import Optional

from config.constants import PERP_EXCHANGE_NAMES
from models.results import PerpTradeInfo

# " Long" / " Short" at the end of the name, or followed by a parenthesised suffix
PERP_TRADE_PATTERN = re.compile(r" (long|short)(\s*\(|$)", re.IGNORECASE)


def detect_perp_trade(name: Optional[str]) -> PerpTradeInfo:
    """Detect a long/short trade from a position name."""
    match = PERP_TRADE_PATTERN.search(name or "")
    if not match:
        return PerpTradeInfo()

    direction = match.group(1).lower()
    return PerpTradeInfo(
        is_perp_trade=True,
        is_long=direction == "long",
        is_short=direction == "short",
    )


def is_perp_trade(name: Optional[str], protocol: Optional[str], category_service) -> bool:
    """A long/short name only counts as a trade on a perp exchange."""
    return category_service.is_perp_protocol(protocol) and detect_perp_trade(name).is_perp_trade


def get_perp_exchange_name(protocol: Optional[str]) -> str:
    """Display name for a perp exchange protocol ("hyperliquid perp" -> "Hyperliquid")."""
    normalized = (protocol or "").lower()
    for key, display_name in PERP_EXCHANGE_NAMES.items():
        if key in normalized:
            return display_name
    return protocol or "Unknown"
