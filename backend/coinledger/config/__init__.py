"""Configuration package for the coin ledger service."""

from .settings import LedgerSettings, get_settings

__all__ = ["LedgerSettings", "get_settings"]
