"""
Categories API Endpoints
Navigation categories: public tree, admin CRUD
"""
import logging
from fastapi import APIRouter, HTTPException, Query, Depends

from gamestore.core.auth import TokenUser, require_admin
from gamestore.core.exceptions import NotFoundError, DuplicateError
from gamestore.domain.category import CategoryCreate, CategoryUpdate
from gamestore.services.catalog_service import CatalogService, get_catalog_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/")
async def get_categories(
    tree: bool = Query(False, description="Return nested children instead of a flat list"),
    active_only: bool = Query(True),
    service: CatalogService = Depends(get_catalog_service)
):
    try:
        if tree:
            categories = service.category_tree(active_only=active_only)
        else:
            categories = service.list_categories(active_only=active_only)

        return {
            "status": "success",
            "count": len(categories),
            "data": [c.to_dict() for c in categories]
        }

    except Exception as e:
        logger.error(f"Error fetching categories: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error fetching categories: {str(e)}")


@router.get("/{category_id}")
async def get_category(category_id: int, service: CatalogService = Depends(get_catalog_service)):
    try:
        return {
            "status": "success",
            "data": service.get_category(category_id).to_dict()
        }

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error fetching category: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error fetching category: {str(e)}")


@router.post("/", status_code=201)
async def create_category(
    category_in: CategoryCreate,
    user: TokenUser = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service)
):
    try:
        return {
            "status": "success",
            "data": service.create_category(category_in).to_dict()
        }

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (ValueError, DuplicateError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error creating category: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error creating category: {str(e)}")


@router.put("/{category_id}")
async def update_category(
    category_id: int,
    category_in: CategoryUpdate,
    user: TokenUser = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service)
):
    try:
        return {
            "status": "success",
            "data": service.update_category(category_id, category_in).to_dict()
        }

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (ValueError, DuplicateError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error updating category: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error updating category: {str(e)}")


@router.patch("/{category_id}/toggle")
async def toggle_category(
    category_id: int,
    user: TokenUser = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service)
):
    try:
        return {
            "status": "success",
            "data": service.toggle_category(category_id).to_dict()
        }

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error toggling category: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error toggling category: {str(e)}")


@router.delete("/{category_id}")
async def delete_category(
    category_id: int,
    user: TokenUser = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service)
):
    """Delete a category; its children move up to its parent"""
    try:
        service.delete_category(category_id)
        return {
            "status": "success",
            "message": f"Category {category_id} deleted"
        }

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error deleting category: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error deleting category: {str(e)}")
