"""Currency conversion package."""

from family_finance.currency.converter import CurrencyConverter

__all__ = ["CurrencyConverter"]
