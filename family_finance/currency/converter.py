"""
Currency Converter

Converts amounts from any supported currency into the single reporting
(native) currency using a fixed rate table.

DESIGN DECISION: Rates are injected, never read from a process-wide
mutable. Tests and callers can substitute their own table.

Unknown currency codes are NOT an error: they are logged and the
amount is treated as already native.
"""

from collections.abc import Mapping
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from family_finance.audit.logger import get_logger
from family_finance.config import get_settings

Number = Union[int, float, Decimal]

CENT = Decimal("0.01")
FALLBACK_RATE = Decimal("1.00")


def _normalize_code(currency: Optional[str]) -> str:
    return (currency or "").strip().upper()


def _to_decimal(amount: Number) -> Decimal:
    if isinstance(amount, Decimal):
        return amount
    return Decimal(str(amount))


class CurrencyConverter:
    """
    Pure, stateless conversion into the native currency.

    The rate table maps currency code -> units of native currency per
    1 unit of that code. The native currency itself maps to 1.00.
    """

    def __init__(
        self,
        rates: Optional[Mapping[str, Number]] = None,
        native_currency: Optional[str] = None,
        logger=None,
    ):
        """
        Args:
            rates: Rate table. Defaults to the configured table.
            native_currency: Reporting currency. Defaults to configuration.
            logger: structlog-compatible logger for fallback warnings.
        """
        if rates is None or native_currency is None:
            currency_settings = get_settings().currency
            if rates is None:
                rates = currency_settings.rates
            if native_currency is None:
                native_currency = currency_settings.native_currency

        self._rates: dict[str, Decimal] = {
            _normalize_code(code): _to_decimal(rate) for code, rate in rates.items()
        }
        self._native_currency = _normalize_code(native_currency)
        self._logger = logger or get_logger("family_finance.currency")

    @property
    def native_currency(self) -> str:
        return self._native_currency

    def convert(self, amount: Number, from_currency: Optional[str]) -> Number:
        """
        Convert amount to the native currency.

        Returns:
            The converted amount rounded half-up to 2 decimal places, or
            the input amount unchanged when the currency is unknown.
        """
        code = _normalize_code(from_currency)
        rate = self._rates.get(code)
        if not rate:
            self._logger.warning(
                "unknown_currency",
                currency=from_currency,
                native_currency=self._native_currency,
            )
            return amount

        scaled = _to_decimal(amount) * rate
        return scaled.quantize(CENT, rounding=ROUND_HALF_UP)

    def convert_to(
        self,
        amount: Number,
        from_currency: Optional[str],
        to_currency: Optional[str],
    ) -> Decimal:
        """
        Convert between any two currencies through the native currency.

        Unknown codes on either side fall back to a 1.00 rate, with a warning.
        """
        source, target = _normalize_code(from_currency), _normalize_code(to_currency)
        if source == target:
            return _to_decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)

        for code in (source, target):
            if not self._rates.get(code):
                self._logger.warning(
                    "unknown_currency",
                    currency=code,
                    native_currency=self._native_currency,
                )
        native = _to_decimal(amount) * self.get_rate(source)
        return (native / self.get_rate(target)).quantize(CENT, rounding=ROUND_HALF_UP)

    def get_rate(self, currency: Optional[str]) -> Decimal:
        """Rate to native for a currency; 1.00 when the code is unknown."""
        return self._rates.get(_normalize_code(currency)) or FALLBACK_RATE

    def supported_currencies(self) -> list[str]:
        """All currency codes present in the rate table."""
        return list(self._rates.keys())

    def is_supported(self, currency: Optional[str]) -> bool:
        return _normalize_code(currency) in self._rates
