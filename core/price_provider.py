# -*- coding: utf-8 -*-
"""
Price Key Providers
-------------------
Map a ticker to the key under which its price is stored. Lookups are pure:
prices are fetched elsewhere and handed to the engine as a plain dict.
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional

from config.constants import COIN_ID_MAP


class PriceProvider(ABC):
    """Interface for price key lookups."""

    @abstractmethod
    def get_coin_id(self, symbol: str) -> str:
        """Primary price key for a crypto symbol."""
        raise NotImplementedError

    @abstractmethod
    def get_alternate_key(self, symbol: str) -> str:
        """Fallback key tried when the primary key has no price."""
        raise NotImplementedError


class CoinIdPriceProvider(PriceProvider):
    """Keys prices by CoinGecko id (BTC -> bitcoin), falling back to the lower-cased ticker."""

    def __init__(self, coin_ids: Optional[Dict[str, str]] = None):
        self.coin_ids = dict(COIN_ID_MAP if coin_ids is None else coin_ids)

    def get_coin_id(self, symbol: str) -> str:
        normalized = (symbol or "").lower()
        return self.coin_ids.get(normalized, normalized)

    def get_alternate_key(self, symbol: str) -> str:
        return (symbol or "").lower()
