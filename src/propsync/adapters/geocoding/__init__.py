"""Geocoding adapters."""

from __future__ import annotations

from .client import GoogleGeocoder, NullGeocoder, format_address

__all__ = ["GoogleGeocoder", "NullGeocoder", "format_address"]
