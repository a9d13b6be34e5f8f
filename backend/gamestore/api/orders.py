"""
Orders API Endpoints
Checkout and cart quotes (public), order management (admin)
"""
import logging
from datetime import date
from fastapi import APIRouter, HTTPException, Query, Depends
from typing import Optional

from gamestore.core.auth import TokenUser, require_admin
from gamestore.core.exceptions import NotFoundError, DiscountCodeError
from gamestore.domain.cart import CartQuoteRequest
from gamestore.domain.order import CheckoutRequest, OrderStatusUpdate, PaymentStatusUpdate, OrderNote
from gamestore.services.discount_service import DiscountService, get_discount_service
from gamestore.services.order_service import OrderService, get_order_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/quote")
async def quote_cart(
    request: CartQuoteRequest,
    service: DiscountService = Depends(get_discount_service)
):
    """
    Price a cart from catalog data

    Returns subtotal, shipping, discount and total; the client never
    supplies prices.
    """
    try:
        quote = service.quote(request.items, request.promo_code, request.email)
        return {
            "status": "success",
            "data": quote.to_dict()
        }

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (ValueError, DiscountCodeError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error pricing cart: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error pricing cart: {str(e)}")


@router.post("/checkout", status_code=201)
async def checkout(
    request: CheckoutRequest,
    service: OrderService = Depends(get_order_service)
):
    try:
        order = await service.checkout(request)
        return {
            "status": "success",
            "data": order.to_dict()
        }

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (ValueError, DiscountCodeError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error placing order: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error placing order: {str(e)}")


@router.get("/track/{order_number}")
async def track_order(
    order_number: str,
    email: str = Query(..., description="E-mail used at checkout"),
    service: OrderService = Depends(get_order_service)
):
    """Order lookup for customers; the e-mail must match the order"""
    try:
        order = service.get_by_number(order_number)
        if order.customer.email.lower() != email.strip().lower():
            raise HTTPException(status_code=404, detail=f"Order {order_number} not found")

        return {
            "status": "success",
            "data": order.to_dict()
        }

    except HTTPException:
        raise
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error fetching order: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error fetching order: {str(e)}")


@router.get("/")
async def get_orders(
    search: Optional[str] = Query(None, description="Order number, customer, e-mail, phone or item title"),
    status: Optional[str] = Query(None),
    payment_status: Optional[str] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    limit: int = Query(50, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    user: TokenUser = Depends(require_admin),
    service: OrderService = Depends(get_order_service)
):
    try:
        orders, total = service.search(
            query=search,
            status=status,
            payment_status=payment_status,
            date_from=date_from,
            date_to=date_to,
            limit=limit,
            offset=offset
        )

        return {
            "status": "success",
            "total": total,
            "limit": limit,
            "offset": offset,
            "count": len(orders),
            "data": [o.to_dict() for o in orders]
        }

    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error fetching orders: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error fetching orders: {str(e)}")


@router.get("/stats")
async def get_order_stats(
    user: TokenUser = Depends(require_admin),
    service: OrderService = Depends(get_order_service)
):
    """Counts per status and revenue of paid orders"""
    try:
        return {
            "status": "success",
            "data": service.stats()
        }

    except Exception as e:
        logger.error(f"Error fetching stats: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error fetching stats: {str(e)}")


@router.get("/{order_id}")
async def get_order(
    order_id: int,
    user: TokenUser = Depends(require_admin),
    service: OrderService = Depends(get_order_service)
):
    try:
        return {
            "status": "success",
            "data": service.get_order(order_id).to_dict()
        }

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error fetching order: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error fetching order: {str(e)}")


@router.patch("/{order_id}/status")
async def update_order_status(
    order_id: int,
    body: OrderStatusUpdate,
    user: TokenUser = Depends(require_admin),
    service: OrderService = Depends(get_order_service)
):
    try:
        return {
            "status": "success",
            "data": service.update_status(order_id, body.status).to_dict()
        }

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error updating order status: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error updating order status: {str(e)}")


@router.patch("/{order_id}/payment-status")
async def update_payment_status(
    order_id: int,
    body: PaymentStatusUpdate,
    user: TokenUser = Depends(require_admin),
    service: OrderService = Depends(get_order_service)
):
    try:
        return {
            "status": "success",
            "data": service.update_payment_status(order_id, body.payment_status).to_dict()
        }

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error updating payment status: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error updating payment status: {str(e)}")


@router.post("/{order_id}/notes")
async def add_order_note(
    order_id: int,
    body: OrderNote,
    user: TokenUser = Depends(require_admin),
    service: OrderService = Depends(get_order_service)
):
    try:
        return {
            "status": "success",
            "data": service.add_note(order_id, body.note, author=user.email).to_dict()
        }

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error adding note: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error adding note: {str(e)}")


@router.delete("/{order_id}")
async def delete_order(
    order_id: int,
    user: TokenUser = Depends(require_admin),
    service: OrderService = Depends(get_order_service)
):
    try:
        service.delete(order_id)
        return {
            "status": "success",
            "message": f"Order {order_id} deleted"
        }

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error deleting order: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error deleting order: {str(e)}")
