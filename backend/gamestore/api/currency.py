"""
Currency API Endpoints
Supported display currencies, conversion and formatting (prices are stored in KWD)
"""
from fastapi import APIRouter, HTTPException, Query

from gamestore.services import currency_service

router = APIRouter()


@router.get("/")
async def get_currencies():
    currencies = currency_service.list_currencies()
    return {
        "status": "success",
        "count": len(currencies),
        "data": [c.to_dict() for c in currencies]
    }


@router.get("/convert")
async def convert_amount(
    amount: float = Query(..., ge=0),
    from_currency: str = Query("KWD", alias="from"),
    to_currency: str = Query(..., alias="to"),
    rtl: bool = Query(False)
):
    """
    Convert an amount between currencies

    Example: /convert?amount=10&from=KWD&to=USD -> 32.70, "$ 32.70"
    """
    try:
        converted = currency_service.convert(amount, from_currency, to_currency)
        rounded = currency_service.round_amount(converted, to_currency)
        return {
            "status": "success",
            "data": {
                "amount": amount,
                "from": from_currency.upper(),
                "to": to_currency.upper(),
                "converted": float(rounded),
                "formatted": currency_service.format_price(rounded, to_currency, rtl),
            }
        }

    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/prices")
async def get_price_table(amount: float = Query(..., ge=0)):
    """A KWD price in every supported currency"""
    table = currency_service.price_table(amount)
    return {
        "status": "success",
        "data": {code: float(value) for code, value in table.items()}
    }
