"""
CSV export and import endpoints (admin)
"""
import io
import logging
from fastapi import APIRouter, UploadFile, File, HTTPException, Query, Depends
from fastapi.responses import StreamingResponse

from gamestore.core.auth import TokenUser, require_admin
from gamestore.services import csv_service
from gamestore.services.catalog_service import CatalogService, get_catalog_service
from gamestore.services.discount_service import DiscountService, get_discount_service
from gamestore.services.message_service import MessageService, get_message_service
from gamestore.services.order_service import OrderService, get_order_service

logger = logging.getLogger(__name__)

router = APIRouter()

EXPORT_LIMIT = 10000


def _csv_response(content: str, filename: str) -> StreamingResponse:
    # BOM so spreadsheet apps detect UTF-8 and render Arabic text
    return StreamingResponse(
        io.BytesIO(content.encode("utf-8-sig")),
        media_type="text/csv; charset=utf-8",
        headers={
            "Content-Disposition": f"attachment; filename={filename}"
        }
    )


@router.get("/export/products")
async def export_products(
    user: TokenUser = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service)
):
    try:
        products, _ = service.list_products(limit=EXPORT_LIMIT, offset=0)
        return _csv_response(csv_service.export_products(products), csv_service.export_filename("products"))
    except Exception as e:
        logger.error(f"Error exporting products: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error exporting products: {str(e)}")


@router.get("/export/orders")
async def export_orders(
    status: str = Query(None),
    user: TokenUser = Depends(require_admin),
    service: OrderService = Depends(get_order_service)
):
    try:
        orders, _ = service.search(status=status, limit=EXPORT_LIMIT, offset=0)
        return _csv_response(csv_service.export_orders(orders), csv_service.export_filename("orders"))
    except Exception as e:
        logger.error(f"Error exporting orders: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error exporting orders: {str(e)}")


@router.get("/export/messages")
async def export_messages(
    status: str = Query(None),
    user: TokenUser = Depends(require_admin),
    service: MessageService = Depends(get_message_service)
):
    try:
        messages, _ = service.search(status=status, limit=EXPORT_LIMIT, offset=0)
        return _csv_response(csv_service.export_messages(messages), csv_service.export_filename("messages"))
    except Exception as e:
        logger.error(f"Error exporting messages: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error exporting messages: {str(e)}")


@router.get("/export/discount-codes")
async def export_discount_codes(
    user: TokenUser = Depends(require_admin),
    service: DiscountService = Depends(get_discount_service)
):
    try:
        codes = service.list_codes()
        return _csv_response(
            csv_service.export_discount_codes(codes), csv_service.export_filename("discount_codes")
        )
    except Exception as e:
        logger.error(f"Error exporting discount codes: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error exporting discount codes: {str(e)}")


@router.get("/import/products/template")
async def download_import_template(user: TokenUser = Depends(require_admin)):
    """CSV header row plus one sample product"""
    return _csv_response(csv_service.import_template(), "products_import_template.csv")


@router.post("/import/products")
async def import_products(
    file: UploadFile = File(...),
    dry_run: bool = Query(False, description="Validate and report without writing"),
    user: TokenUser = Depends(require_admin)
):
    """
    Create or update products from a CSV file (matched by SKU)

    Invalid rows are skipped and reported with their row number.
    """
    try:
        if not file.filename or not file.filename.lower().endswith('.csv'):
            raise HTTPException(status_code=400, detail="File must be a CSV (.csv)")

        contents = await file.read()
        result = csv_service.ProductImportService().import_products(contents, dry_run=dry_run)

        return {
            "status": "success",
            "data": result.to_dict()
        }

    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error importing products: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error importing products: {str(e)}")
