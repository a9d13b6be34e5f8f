"""
Discount Codes API Endpoints
Public code validation, admin CRUD
"""
import logging
from fastapi import APIRouter, HTTPException, Query, Depends
from typing import Optional

from gamestore.core.auth import TokenUser, require_admin
from gamestore.core.exceptions import NotFoundError, DuplicateError
from gamestore.domain.discount import DiscountCodeCreate, DiscountCodeUpdate
from gamestore.services.discount_service import DiscountService, get_discount_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/validate")
async def validate_discount_code(
    code: str = Query(..., min_length=1),
    email: Optional[str] = Query(None, description="Needed for one-per-customer codes"),
    service: DiscountService = Depends(get_discount_service)
):
    """
    Check a code before checkout

    Always returns 200; `valid` and `reason` tell the storefront what to show.
    """
    try:
        result = service.validate(code, email)
        data = {"code": result.code, "valid": result.valid, "reason": result.reason}
        if result.discount:
            data["type"] = result.discount.type
            data["value"] = float(result.discount.value)

        return {
            "status": "success",
            "data": data
        }

    except Exception as e:
        logger.error(f"Error validating discount code: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error validating discount code: {str(e)}")


@router.get("/")
async def get_discount_codes(
    user: TokenUser = Depends(require_admin),
    service: DiscountService = Depends(get_discount_service)
):
    try:
        codes = service.list_codes()
        return {
            "status": "success",
            "count": len(codes),
            "data": [c.to_dict() for c in codes]
        }

    except Exception as e:
        logger.error(f"Error fetching discount codes: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error fetching discount codes: {str(e)}")


@router.get("/{discount_id}")
async def get_discount_code(
    discount_id: int,
    user: TokenUser = Depends(require_admin),
    service: DiscountService = Depends(get_discount_service)
):
    try:
        return {
            "status": "success",
            "data": service.get_code(discount_id).to_dict()
        }

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error fetching discount code: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error fetching discount code: {str(e)}")


@router.post("/", status_code=201)
async def create_discount_code(
    discount_in: DiscountCodeCreate,
    user: TokenUser = Depends(require_admin),
    service: DiscountService = Depends(get_discount_service)
):
    try:
        return {
            "status": "success",
            "data": service.create_code(discount_in).to_dict()
        }

    except (ValueError, DuplicateError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error creating discount code: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error creating discount code: {str(e)}")


@router.put("/{discount_id}")
async def update_discount_code(
    discount_id: int,
    discount_in: DiscountCodeUpdate,
    user: TokenUser = Depends(require_admin),
    service: DiscountService = Depends(get_discount_service)
):
    try:
        return {
            "status": "success",
            "data": service.update_code(discount_id, discount_in).to_dict()
        }

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (ValueError, DuplicateError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error updating discount code: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error updating discount code: {str(e)}")


@router.delete("/{discount_id}")
async def delete_discount_code(
    discount_id: int,
    user: TokenUser = Depends(require_admin),
    service: DiscountService = Depends(get_discount_service)
):
    try:
        service.delete_code(discount_id)
        return {
            "status": "success",
            "message": f"Discount code {discount_id} deleted"
        }

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error deleting discount code: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error deleting discount code: {str(e)}")
