"""
AI Description Generator

Pipeline for product descriptions:
1. image analysis (optional)
2. context fusion of title and images
3. LLM generation, or template fallback when the LLM fails or returns nothing
4. Arabic validation, with one automatic improvement pass for poor text
5. recommendations for the admin
"""
import asyncio
import logging
import time
from dataclasses import dataclass, field, asdict
from typing import List, Optional, Dict, Any, Callable

from gamestore.domain.description import DescriptionRequest, BatchDescriptionRequest
from gamestore.services.ai.arabic_validator import (
    ValidationConfig, ValidationResult, validate_arabic_text, improve_text,
)
from gamestore.services.ai.context_fusion import fuse_context
from gamestore.services.ai.image_analyzer import ImageAnalyzer, ImageAnalysisResult, get_image_analyzer
from gamestore.services.ai.llm_client import LLMClient, get_llm_client
from gamestore.services.ai.prompt_generator import (
    PromptConfig, generate_prompt, LANGUAGES, CULTURAL_LEVELS, AUDIENCES, COMPLEXITIES,
)
from gamestore.services.ai.smart_fallback import FallbackConfig, generate_smart_fallback

logger = logging.getLogger(__name__)

BATCH_SIZE = 3
BATCH_PAUSE_SECONDS = 1.0
QUICK_CONFIDENCE = 60

# Prompt audience -> validator audience
VALIDATION_AUDIENCE = {
    'casual': 'general',
    'collectors': 'gulf',
    'professional': 'professional',
}

GAMING_TERMS = [
    'بلايستيشن', 'إكس بوكس', 'نينتندو', 'كمبيوتر', 'ألعاب', 'تحكم',
    'رسومات', 'HD', '4K', 'DualSense', 'Game Pass', 'Joy-Con', 'Steam',
]
CULTURAL_KEYWORDS = ['خليجي', 'مذهل', 'رائع', 'ممتاز', 'ممتع', 'لا يُقاوم']


class GenerationError(RuntimeError):
    """LLM produced no usable description and fallback is disabled"""


@dataclass
class DescriptionResult:
    description: str
    source: str
    confidence: int
    processing_time_ms: int
    fallback_used: bool = False
    template_used: Optional[str] = None
    image_analysis: List[Dict[str, Any]] = field(default_factory=list)
    context: Optional[Dict[str, Any]] = None
    validation: Optional[Dict[str, Any]] = None
    cultural_adaptations: List[str] = field(default_factory=list)
    gaming_terminology: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def validate_generation_config(request: DescriptionRequest) -> List[str]:
    errors = []
    if not request.product_name.strip():
        errors.append('Product name is required')
    if not request.product_name_en.strip():
        errors.append('Product English name is required')
    if request.language not in LANGUAGES:
        errors.append('Language must be "ar" or "en"')
    if request.cultural_level not in CULTURAL_LEVELS:
        errors.append('Cultural level must be "conservative", "moderate", or "liberal"')
    if request.target_audience not in AUDIENCES:
        errors.append('Target audience must be "casual", "professional", or "collectors"')
    if request.prompt_complexity not in COMPLEXITIES:
        errors.append('Prompt complexity must be "simple", "standard", or "detailed"')
    return errors


def _mean_confidence(analyses: List[ImageAnalysisResult]) -> Optional[float]:
    if not analyses:
        return None
    return sum(a.confidence for a in analyses) / len(analyses)


def calculate_confidence(
    image_confidence: Optional[float],
    source: str,
    validation: Optional[ValidationResult]
) -> int:
    confidence = 50
    if image_confidence is not None and image_confidence > 0.7:
        confidence += 20
    if source == 'ai':
        confidence += 15
    elif source == 'hybrid':
        confidence += 10
    if validation is not None and validation.score > 80:
        confidence += 15
    return min(100, confidence)


def build_recommendations(
    validation: Optional[ValidationResult],
    image_confidence: Optional[float],
    source: str
) -> List[str]:
    recommendations = []
    if validation is not None:
        if validation.score < 70:
            recommendations.append('Consider improving description quality for better results')
        if validation.grammar_issues:
            recommendations.append('Review and fix grammar issues for better readability')
        if validation.cultural_flags:
            recommendations.append('Review cultural appropriateness for target audience')
    if image_confidence is not None and image_confidence < 0.5:
        recommendations.append('Consider using higher quality product images for better analysis')
    if source in ('template', 'hybrid'):
        recommendations.append('Consider configuring an AI provider for better quality descriptions')
    return recommendations


class DescriptionGenerator:

    def __init__(
        self,
        image_analyzer: Optional[ImageAnalyzer] = None,
        llm_factory: Optional[Callable[[Optional[str]], LLMClient]] = None
    ):
        self.image_analyzer = image_analyzer or get_image_analyzer()
        self.llm_factory = llm_factory or (lambda provider: get_llm_client(provider))

    async def _generate_with_llm(self, request: DescriptionRequest, context) -> str:
        prompt = generate_prompt(
            context,
            request.product_name,
            request.product_name_en,
            request.product_description_en,
            PromptConfig(
                language=request.language,
                cultural_level=request.cultural_level,
                target_audience=request.target_audience,
                complexity=request.prompt_complexity,
            ),
        )
        client = self.llm_factory(request.provider)
        response = await client.complete(prompt.prompt)
        if response.error:
            raise GenerationError(response.error)
        if not response.content.strip():
            raise GenerationError('AI generated empty description')
        return response.content.strip()

    async def generate_description(self, request: DescriptionRequest) -> DescriptionResult:
        started = time.monotonic()
        logger.info(
            f"Generating description for '{request.product_name_en}' "
            f"({len(request.product_images)} images, language={request.language})"
        )

        try:
            analyses: List[ImageAnalysisResult] = []
            if request.enable_image_analysis and request.product_images:
                analyses = await self.image_analyzer.analyze_images(request.product_images)

            context = fuse_context(request.product_name, request.product_name_en, analyses)

            source = 'ai'
            fallback_used = False
            template_used = None
            try:
                description = await self._generate_with_llm(request, context)
            except Exception as e:
                if not request.enable_fallback:
                    raise
                logger.warning(f"AI generation failed, using fallback: {e}")
                fallback = generate_smart_fallback(
                    context, request.product_name, request.product_name_en,
                    FallbackConfig(enable_hybrid_mode=True, personalization=True),
                )
                description = fallback.description
                source = fallback.source
                fallback_used = True
                template_used = fallback.template_id

            validation = None
            if request.enable_validation and request.language == 'ar':
                config = ValidationConfig(target_audience=VALIDATION_AUDIENCE[request.target_audience])
                validation = validate_arabic_text(description, config)
                if validation.overall == 'poor':
                    description = improve_text(description, validation)
                    validation = validate_arabic_text(description, config)

            image_confidence = _mean_confidence(analyses)
            result = DescriptionResult(
                description=description,
                source=source,
                confidence=calculate_confidence(image_confidence, source, validation),
                processing_time_ms=int((time.monotonic() - started) * 1000),
                fallback_used=fallback_used,
                template_used=template_used,
                image_analysis=[a.to_dict() for a in analyses],
                context=context.to_dict(),
                validation=validation.to_dict() if validation else None,
                cultural_adaptations=[k for k in CULTURAL_KEYWORDS if k in description],
                gaming_terminology=[t for t in GAMING_TERMS if t in description],
                recommendations=build_recommendations(validation, image_confidence, source),
            )
            logger.info(f"Description generated: source={source} confidence={result.confidence}")
            return result

        except Exception as e:
            logger.error(f"Description generation failed: {e}", exc_info=True)
            return DescriptionResult(
                description='',
                source='template',
                confidence=0,
                processing_time_ms=int((time.monotonic() - started) * 1000),
                recommendations=[
                    f"Generation failed: {e}",
                    'Please try again or check your AI configuration',
                ],
            )

    def generate_quick_description(self, name: str, name_en: str) -> DescriptionResult:
        """Template-only description from the titles, no network calls"""
        started = time.monotonic()
        context = fuse_context(name, name_en, [])
        fallback = generate_smart_fallback(
            context, name, name_en, FallbackConfig(enable_hybrid_mode=False, personalization=False)
        )
        return DescriptionResult(
            description=fallback.description,
            source='template',
            confidence=QUICK_CONFIDENCE,
            processing_time_ms=int((time.monotonic() - started) * 1000),
            fallback_used=True,
            template_used=fallback.template_id,
            context=context.to_dict(),
            recommendations=[
                'For better results, enable image analysis and AI generation',
                'Configure an AI provider for enhanced descriptions',
            ],
        )

    async def generate_batch(self, batch: BatchDescriptionRequest) -> List[DescriptionResult]:
        """Products are processed BATCH_SIZE at a time with a pause between groups"""
        requests = [
            DescriptionRequest(
                product_name=product.name,
                product_name_en=product.name_en,
                product_description_en=product.description_en,
                product_images=product.images,
                language=batch.language,
                provider=batch.provider,
                enable_image_analysis=batch.enable_image_analysis,
                cultural_level=batch.cultural_level,
                target_audience=batch.target_audience,
                prompt_complexity=batch.prompt_complexity,
            )
            for product in batch.products
        ]

        results: List[DescriptionResult] = []
        for start in range(0, len(requests), BATCH_SIZE):
            group = requests[start:start + BATCH_SIZE]
            logger.info(f"Processing batch {start // BATCH_SIZE + 1}: {len(group)} products")
            results.extend(await asyncio.gather(*(self.generate_description(r) for r in group)))
            if start + BATCH_SIZE < len(requests):
                await asyncio.sleep(BATCH_PAUSE_SECONDS)

        logger.info(f"Batch generation completed for {len(results)} products")
        return results


_generator_instance: Optional[DescriptionGenerator] = None


def get_description_generator() -> DescriptionGenerator:
    global _generator_instance
    if _generator_instance is None:
        _generator_instance = DescriptionGenerator()
    return _generator_instance
