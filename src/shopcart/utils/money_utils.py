from decimal import Decimal, ROUND_HALF_UP
from typing import Union


class MoneyUtils:
    """
    Money arithmetic and formatting helpers

    Amounts are Decimal in the domain and integer cents in the database.
    All rounding is ROUND_HALF_UP to two places.
    """

    CENT = Decimal("0.01")
    ZERO = Decimal("0.00")

    CURRENCY_FORMATS = {
        'USD': {'symbol': '$', 'symbol_position': 'before'},
        'EUR': {'symbol': '€', 'symbol_position': 'after'},
        'GBP': {'symbol': '£', 'symbol_position': 'before'},
    }

    @classmethod
    def to_decimal(cls, value: Union[Decimal, int, float, str]) -> Decimal:
        """Convert a number to Decimal without float artefacts (29.99 stays 29.99)"""
        if isinstance(value, Decimal):
            return value
        if isinstance(value, float):
            return Decimal(str(value))
        return Decimal(value)

    @classmethod
    def quantize(cls, amount: Union[Decimal, int, float, str]) -> Decimal:
        """Round to cents using round-half-up"""
        return cls.to_decimal(amount).quantize(cls.CENT, rounding=ROUND_HALF_UP)

    @classmethod
    def to_cents(cls, amount: Union[Decimal, int, float, str]) -> int:
        """Decimal amount -> integer cents. $19.99 -> 1999"""
        return int(cls.quantize(amount) * 100)

    @classmethod
    def from_cents(cls, cents: int) -> Decimal:
        """Integer cents -> Decimal amount. 1999 -> Decimal('19.99')"""
        return (Decimal(int(cents)) / 100).quantize(cls.CENT)

    @classmethod
    def format_money(cls, amount: Decimal, currency: str = 'USD') -> str:
        """
        Format money amount for display

        Examples:
            format_money(Decimal('12.99'), 'USD') -> "$12.99"
            format_money(Decimal('1234.5'), 'EUR') -> "1,234.50€"
        """
        currency_config = cls.CURRENCY_FORMATS.get(currency)
        formatted_amount = f"{cls.quantize(amount):,.2f}"

        if currency_config is None:
            return f"{formatted_amount} {currency}"

        symbol = currency_config['symbol']
        if currency_config['symbol_position'] == 'before':
            return f"{symbol}{formatted_amount}"
        return f"{formatted_amount}{symbol}"
