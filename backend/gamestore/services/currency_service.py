"""
Currency conversion and price formatting
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Union

from gamestore.domain.currency import Currency, CURRENCIES_BY_CODE, SUPPORTED_CURRENCIES, BASE_CURRENCY_CODE

Number = Union[Decimal, int, float, str]


def get_currency(code: str) -> Currency:
    """Look up a supported currency by code (case-insensitive)"""
    currency = CURRENCIES_BY_CODE.get((code or "").upper())
    if currency is None:
        raise ValueError(
            f"Unsupported currency '{code}'. Supported: {', '.join(CURRENCIES_BY_CODE)}"
        )
    return currency


def list_currencies() -> List[Currency]:
    return list(SUPPORTED_CURRENCIES)


def convert(amount: Number, from_code: str, to_code: str) -> Decimal:
    """
    Convert an amount between currencies through KWD.

    amount / rate(from) * rate(to), unrounded; formatting decides the
    number of decimals.
    """
    source = get_currency(from_code)
    target = get_currency(to_code)
    value = Decimal(str(amount))
    if source.code == target.code:
        return value
    return value / source.exchange_rate * target.exchange_rate


def round_amount(amount: Number, code: str = BASE_CURRENCY_CODE) -> Decimal:
    currency = get_currency(code)
    quantum = Decimal(1).scaleb(-currency.decimals)
    return Decimal(str(amount)).quantize(quantum, rounding=ROUND_HALF_UP)


def format_price(amount: Number, code: str = BASE_CURRENCY_CODE, rtl: bool = False) -> str:
    """
    Format an amount already expressed in `code`.

    format_price(1234.5, "KWD", rtl=True)  -> "1,234.500 د.ك"
    format_price(12, "USD")                -> "$ 12.00"
    """
    currency = get_currency(code)
    value = round_amount(amount, currency.code)
    formatted = f"{value:,.{currency.decimals}f}"
    if rtl:
        return f"{formatted} {currency.symbol}"
    return f"{currency.symbol} {formatted}"


def format_base_price(amount: Number, code: str = BASE_CURRENCY_CODE, rtl: bool = False) -> str:
    """Convert a KWD catalog price to `code` and format it"""
    return format_price(convert(amount, BASE_CURRENCY_CODE, code), code, rtl)


def price_table(amount: Number) -> Dict[str, Decimal]:
    """A KWD price in every supported currency, rounded to each currency's decimals"""
    return {
        c.code: round_amount(convert(amount, BASE_CURRENCY_CODE, c.code), c.code)
        for c in SUPPORTED_CURRENCIES
    }


def currency_name(code: str, rtl: bool = False) -> str:
    currency = get_currency(code)
    return currency.name_ar if rtl else currency.name
