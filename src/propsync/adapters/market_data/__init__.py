"""Market-data provider adapter."""

from __future__ import annotations

from .client import MarketDataFetcher
from .schema import RawTransactionRecord
from .translator import translate_transaction

__all__ = ["MarketDataFetcher", "RawTransactionRecord", "translate_transaction"]
