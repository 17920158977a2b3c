"""Currency normalization using rates captured at transaction time."""
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

ZERO_DECIMAL_CURRENCIES = frozenset({"JPY", "KRW"})


def currency_decimals(currency: Optional[str]) -> int:
    """Number of minor-unit digits used when rounding amounts in ``currency``."""
    if currency and currency.upper() in ZERO_DECIMAL_CURRENCIES:
        return 0
    return 2


def round_amount(value: Union[float, Decimal], currency: Optional[str] = None) -> float:
    """Round half-up to the currency's precision."""
    exponent = Decimal(1).scaleb(-currency_decimals(currency))
    return float(Decimal(str(value)).quantize(exponent, rounding=ROUND_HALF_UP))


class CurrencyNormalizer:
    """Converts amounts into a home currency with stored from/to rates.

    Rates are never looked up live: the pair stored on the record is treated
    as correct even when it has drifted from the market rate.
    """

    def normalize(
        self,
        amount: float,
        from_rate: Optional[float] = 1.0,
        to_rate: Optional[float] = 1.0,
        currency: Optional[str] = None,
    ) -> float:
        """
        Convert ``amount`` with ``amount * from_rate / to_rate``.

        Args:
            amount: Amount in the source currency
            from_rate: Stored rate of the source currency (missing means 1)
            to_rate: Stored rate of the target currency (missing means 1)
            currency: Target currency code, selects the rounding precision

        Returns:
            Converted amount rounded to 2 decimals (0 for JPY and KRW)
        """
        from_rate = 1.0 if from_rate is None else from_rate
        to_rate = 1.0 if to_rate is None else to_rate
        if from_rate <= 0 or to_rate <= 0:
            raise ValueError(f"Exchange rates must be positive, got {from_rate}/{to_rate}")
        converted = Decimal(str(amount)) * Decimal(str(from_rate)) / Decimal(str(to_rate))
        return round_amount(converted, currency)
