"""
Request models for the AI description endpoints

Enumerated options are plain strings here; validate_generation_config
reports every bad value at once instead of failing on the first one.
"""
from pydantic import BaseModel, Field
from typing import Optional, List


class DescriptionRequest(BaseModel):
    product_name: str
    product_name_en: str
    product_description_en: Optional[str] = None
    product_images: List[str] = Field(default_factory=list)
    language: str = "ar"
    provider: Optional[str] = None
    enable_image_analysis: bool = True
    enable_validation: bool = True
    enable_fallback: bool = True
    cultural_level: str = "moderate"
    target_audience: str = "casual"
    prompt_complexity: str = "standard"


class QuickDescriptionRequest(BaseModel):
    product_name: str
    product_name_en: str
    language: str = "ar"


class BatchProduct(BaseModel):
    name: str
    name_en: str
    description_en: Optional[str] = None
    images: List[str] = Field(default_factory=list)


class BatchDescriptionRequest(BaseModel):
    products: List[BatchProduct] = Field(..., min_length=1, max_length=20)
    language: str = "ar"
    provider: Optional[str] = None
    enable_image_analysis: bool = True
    cultural_level: str = "moderate"
    target_audience: str = "casual"
    prompt_complexity: str = "standard"


class ArabicValidationRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=10000)
    strictness: str = "moderate"
    target_audience: str = "gulf"
    min_readability_score: int = Field(70, ge=0, le=100)
