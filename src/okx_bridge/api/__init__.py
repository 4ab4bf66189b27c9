"""Aggregator REST client."""

from .client import OKXDexClient

__all__ = ["OKXDexClient"]
