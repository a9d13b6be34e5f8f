"""
Image upload endpoints (admin)
Files go to Supabase Storage; the public URL can be attached to a product
"""
import logging
from fastapi import APIRouter, UploadFile, File, HTTPException, Query, Depends
from typing import Optional

from gamestore.core.auth import TokenUser, require_admin
from gamestore.core.exceptions import NotFoundError
from gamestore.services.catalog_service import CatalogService, get_catalog_service
from gamestore.services.image_upload_service import ImageUploadService, get_image_upload_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/images", status_code=201)
async def upload_image(
    file: UploadFile = File(...),
    product_id: Optional[int] = Query(None, description="Append the uploaded image to this product"),
    user: TokenUser = Depends(require_admin),
    uploads: ImageUploadService = Depends(get_image_upload_service),
    catalog: CatalogService = Depends(get_catalog_service)
):
    try:
        contents = await file.read()
        url = uploads.upload(file.filename or "", contents)

        data = {"url": url}
        if product_id is not None:
            data["product"] = catalog.add_image(product_id, url).to_dict()

        return {
            "status": "success",
            "data": data
        }

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error uploading image: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error uploading image: {str(e)}")
