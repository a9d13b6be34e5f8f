"""
Products API Endpoints
Storefront catalog (public) and product management (admin)
"""
import logging
from fastapi import APIRouter, HTTPException, Query, Depends
from typing import Optional
from pydantic import BaseModel

from gamestore.core.auth import TokenUser, require_admin
from gamestore.core.exceptions import NotFoundError, DuplicateError
from gamestore.domain.product import ProductCreate, ProductUpdate, ProductImagesUpdate
from gamestore.services.catalog_service import CatalogService, get_catalog_service

logger = logging.getLogger(__name__)

router = APIRouter()


class ProductStatusUpdate(BaseModel):
    status: str


@router.get("/")
async def get_products(
    category: Optional[str] = Query(None, description="Filter by category"),
    search: Optional[str] = Query(None, description="Search titles, descriptions, SKU and tags"),
    service: CatalogService = Depends(get_catalog_service)
):
    """Active products for the storefront, newest first"""
    try:
        if search:
            products = service.search(search, category=category)
        else:
            products = service.list_active(category=category)

        return {
            "status": "success",
            "count": len(products),
            "data": [p.to_dict() for p in products]
        }

    except Exception as e:
        logger.error(f"Error fetching products: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error fetching products: {str(e)}")


@router.get("/admin/all")
async def get_all_products(
    status: Optional[str] = Query(None, description="active, inactive or draft"),
    category: Optional[str] = Query(None),
    is_digital: Optional[bool] = Query(None),
    search: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    user: TokenUser = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service)
):
    """Admin listing with every status"""
    try:
        products, total = service.list_products(
            status=status,
            category=category,
            is_digital=is_digital,
            search=search,
            limit=limit,
            offset=offset
        )

        return {
            "status": "success",
            "total": total,
            "limit": limit,
            "offset": offset,
            "count": len(products),
            "data": [p.to_dict() for p in products]
        }

    except Exception as e:
        logger.error(f"Error fetching products: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error fetching products: {str(e)}")


@router.get("/stats")
async def get_product_stats(
    user: TokenUser = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service)
):
    """
    Product statistics

    Returns totals by status and category plus low / out of stock counts
    """
    try:
        return {
            "status": "success",
            "data": service.product_stats()
        }

    except Exception as e:
        logger.error(f"Error fetching stats: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error fetching stats: {str(e)}")


@router.get("/{product_id}")
async def get_product(product_id: int, service: CatalogService = Depends(get_catalog_service)):
    try:
        product = service.get_product(product_id)
        return {
            "status": "success",
            "data": product.to_dict()
        }

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error fetching product: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error fetching product: {str(e)}")


@router.post("/", status_code=201)
async def create_product(
    product_in: ProductCreate,
    user: TokenUser = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service)
):
    try:
        product = service.create_product(product_in)
        return {
            "status": "success",
            "data": product.to_dict()
        }

    except (ValueError, DuplicateError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error creating product: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error creating product: {str(e)}")


@router.put("/{product_id}")
async def update_product(
    product_id: int,
    product_in: ProductUpdate,
    user: TokenUser = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service)
):
    try:
        product = service.update_product(product_id, product_in)
        return {
            "status": "success",
            "data": product.to_dict()
        }

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (ValueError, DuplicateError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error updating product: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error updating product: {str(e)}")


@router.patch("/{product_id}/status")
async def update_product_status(
    product_id: int,
    body: ProductStatusUpdate,
    user: TokenUser = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service)
):
    try:
        product = service.set_status(product_id, body.status)
        return {
            "status": "success",
            "data": product.to_dict()
        }

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error updating product status: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error updating product status: {str(e)}")


@router.put("/{product_id}/images")
async def update_product_images(
    product_id: int,
    body: ProductImagesUpdate,
    user: TokenUser = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service)
):
    """Replace the image gallery; the first image becomes the main image"""
    try:
        product = service.update_images(product_id, body.images)
        return {
            "status": "success",
            "data": product.to_dict()
        }

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error updating product images: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error updating product images: {str(e)}")


@router.delete("/{product_id}")
async def delete_product(
    product_id: int,
    user: TokenUser = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service)
):
    try:
        service.delete_product(product_id)
        return {
            "status": "success",
            "message": f"Product {product_id} deleted"
        }

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error deleting product: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error deleting product: {str(e)}")
