"""
Currency Domain Model

Prices are stored in Kuwaiti Dinar (KWD). Other Gulf currencies, EGP,
USD and EUR are display currencies converted with fixed rates.
"""
from pydantic import BaseModel, ConfigDict
from decimal import Decimal


class Currency(BaseModel):
    """
    Fields:
        code: ISO 4217 code
        symbol: Display symbol
        name / name_ar: English and Arabic names
        decimals: Digits after the decimal point when formatting
        exchange_rate: Units of this currency per 1 KWD
    """
    code: str
    symbol: str
    name: str
    name_ar: str
    decimals: int
    exchange_rate: Decimal

    model_config = ConfigDict(frozen=True, json_encoders={Decimal: float})

    def to_dict(self) -> dict:
        data = self.model_dump()
        data['exchange_rate'] = float(self.exchange_rate)
        return data


BASE_CURRENCY_CODE = "KWD"

SUPPORTED_CURRENCIES = [
    Currency(code="KWD", symbol="د.ك", name="Kuwaiti Dinar", name_ar="دينار كويتي",
             decimals=3, exchange_rate=Decimal("1.000")),
    Currency(code="SAR", symbol="ر.س", name="Saudi Riyal", name_ar="ريال سعودي",
             decimals=2, exchange_rate=Decimal("12.25")),
    Currency(code="AED", symbol="د.إ", name="UAE Dirham", name_ar="درهم إماراتي",
             decimals=2, exchange_rate=Decimal("12.00")),
    Currency(code="QAR", symbol="ر.ق", name="Qatari Riyal", name_ar="ريال قطري",
             decimals=2, exchange_rate=Decimal("11.90")),
    Currency(code="EGP", symbol="ج.م", name="Egyptian Pound", name_ar="جنيه مصري",
             decimals=2, exchange_rate=Decimal("100.50")),
    Currency(code="USD", symbol="$", name="US Dollar", name_ar="دولار أمريكي",
             decimals=2, exchange_rate=Decimal("3.27")),
    Currency(code="EUR", symbol="€", name="Euro", name_ar="يورو",
             decimals=2, exchange_rate=Decimal("3.45")),
]

CURRENCIES_BY_CODE = {c.code: c for c in SUPPORTED_CURRENCIES}
