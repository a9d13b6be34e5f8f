"""
AI Description API Endpoints (admin)

- POST /descriptions/generate        full pipeline (images, fusion, LLM, validation)
- POST /descriptions/quick           template-only description, no external calls
- POST /descriptions/batch           up to 20 products
- POST /descriptions/validate-config check options without generating
- GET  /descriptions/templates       fallback templates
- GET/DELETE /descriptions/cache     image analysis cache
- POST /validate-arabic              Arabic text quality check
"""
import logging
from fastapi import APIRouter, HTTPException, Depends

from gamestore.core.auth import TokenUser, require_admin
from gamestore.core.rate_limit import rate_limit_check, AI_GENERATION_LIMIT
from gamestore.domain.description import (
    DescriptionRequest, QuickDescriptionRequest, BatchDescriptionRequest, ArabicValidationRequest,
)
from gamestore.services.ai.arabic_validator import ValidationConfig, validate_arabic_text
from gamestore.services.ai.description_generator import (
    DescriptionGenerator, get_description_generator, validate_generation_config,
)
from gamestore.services.ai.smart_fallback import available_templates

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/descriptions/generate")
async def generate_description(
    request: DescriptionRequest,
    user: TokenUser = Depends(require_admin),
    _: None = Depends(rate_limit_check(*AI_GENERATION_LIMIT)),
    generator: DescriptionGenerator = Depends(get_description_generator)
):
    errors = validate_generation_config(request)
    if errors:
        raise HTTPException(status_code=400, detail="; ".join(errors))

    try:
        result = await generator.generate_description(request)
        return {
            "status": "success",
            "data": result.to_dict()
        }

    except Exception as e:
        logger.error(f"Error generating description: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error generating description: {str(e)}")


@router.post("/descriptions/quick")
async def generate_quick_description(
    request: QuickDescriptionRequest,
    user: TokenUser = Depends(require_admin),
    generator: DescriptionGenerator = Depends(get_description_generator)
):
    try:
        result = generator.generate_quick_description(request.product_name, request.product_name_en)
        return {
            "status": "success",
            "data": result.to_dict()
        }

    except Exception as e:
        logger.error(f"Error generating description: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error generating description: {str(e)}")


@router.post("/descriptions/batch")
async def generate_batch(
    request: BatchDescriptionRequest,
    user: TokenUser = Depends(require_admin),
    _: None = Depends(rate_limit_check(*AI_GENERATION_LIMIT)),
    generator: DescriptionGenerator = Depends(get_description_generator)
):
    """Each product is generated independently; failures come back with confidence 0"""
    errors = []
    for index, product in enumerate(request.products, start=1):
        product_errors = validate_generation_config(DescriptionRequest(
            product_name=product.name,
            product_name_en=product.name_en,
            language=request.language,
            cultural_level=request.cultural_level,
            target_audience=request.target_audience,
            prompt_complexity=request.prompt_complexity,
        ))
        errors += [f"Product {index}: {e}" for e in product_errors]
    if errors:
        raise HTTPException(status_code=400, detail="; ".join(errors))

    try:
        results = await generator.generate_batch(request)
        return {
            "status": "success",
            "count": len(results),
            "data": [r.to_dict() for r in results]
        }

    except Exception as e:
        logger.error(f"Error generating descriptions: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error generating descriptions: {str(e)}")


@router.post("/descriptions/validate-config")
async def validate_config(
    request: DescriptionRequest,
    user: TokenUser = Depends(require_admin)
):
    errors = validate_generation_config(request)
    return {
        "status": "success",
        "data": {
            "is_valid": not errors,
            "errors": errors
        }
    }


@router.get("/descriptions/templates")
async def get_templates(user: TokenUser = Depends(require_admin)):
    templates = available_templates()
    return {
        "status": "success",
        "count": len(templates),
        "data": templates
    }


@router.get("/descriptions/cache")
async def get_cache_stats(
    user: TokenUser = Depends(require_admin),
    generator: DescriptionGenerator = Depends(get_description_generator)
):
    return {
        "status": "success",
        "data": generator.image_analyzer.cache_stats()
    }


@router.delete("/descriptions/cache")
async def clear_cache(
    user: TokenUser = Depends(require_admin),
    generator: DescriptionGenerator = Depends(get_description_generator)
):
    generator.image_analyzer.clear_cache()
    return {
        "status": "success",
        "message": "Image analysis cache cleared"
    }


@router.post("/validate-arabic")
async def validate_arabic(
    request: ArabicValidationRequest,
    user: TokenUser = Depends(require_admin)
):
    try:
        config = ValidationConfig(
            strictness=request.strictness,
            target_audience=request.target_audience,
            min_readability_score=request.min_readability_score,
        )
        result = validate_arabic_text(request.text, config)
        return {
            "status": "success",
            "data": result.to_dict()
        }

    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error validating text: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error validating text: {str(e)}")
