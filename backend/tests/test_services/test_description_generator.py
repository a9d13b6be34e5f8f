"""
Tests for the description generation pipeline

The image analyzer and LLM client are mocked; fusion, prompt building,
fallback templates and Arabic validation run for real.
"""
import asyncio
import pytest
from unittest.mock import patch, MagicMock, AsyncMock

from gamestore.domain.description import DescriptionRequest, BatchDescriptionRequest
from gamestore.services.ai.arabic_validator import validate_arabic_text
from gamestore.services.ai.description_generator import (
    DescriptionGenerator, validate_generation_config, calculate_confidence,
    build_recommendations, BATCH_PAUSE_SECONDS, QUICK_CONFIDENCE,
)
from gamestore.services.ai.image_analyzer import ImageAnalysisResult
from gamestore.services.ai.llm_client import LLMResponse, LLMConfigError

GOOD_TEXT = (
    "استمتع بأفضل ألعاب المغامرة على بلايستيشن و إكس بوكس. "
    "رسومات واضحة وقصة مشوقة دائماً. تناسب جميع أفراد العائلة."
)


def _llm_returning(content='', error=None):
    client = MagicMock()
    client.complete = AsyncMock(
        return_value=LLMResponse(content=content, provider='claude', model='test-model', error=error)
    )
    return client


@pytest.fixture
def analyzer():
    mock = MagicMock()
    mock.analyze_images = AsyncMock(return_value=[])
    return mock


@pytest.fixture
def request_data():
    return DescriptionRequest(
        product_name='إله الحرب راغناروك',
        product_name_en='God of War Ragnarok PS5 Game',
    )


class TestGenerateDescription:

    def test_ai_description(self, analyzer, request_data):
        # Arrange
        llm = _llm_returning(GOOD_TEXT)
        factory = MagicMock(return_value=llm)
        generator = DescriptionGenerator(image_analyzer=analyzer, llm_factory=factory)

        # Act
        result = asyncio.run(generator.generate_description(request_data.model_copy(update={'provider': 'openai'})))

        # Assert
        factory.assert_called_once_with('openai')
        prompt = llm.complete.call_args[0][0]
        assert 'God of War Ragnarok PS5 Game' in prompt
        assert result.description == GOOD_TEXT
        assert result.source == 'ai'
        assert result.fallback_used is False
        assert result.validation['score'] == 90.0
        # 50 base + 15 AI + 15 validation above 80
        assert result.confidence == 80
        assert result.gaming_terminology == ['بلايستيشن', 'إكس بوكس', 'ألعاب', 'رسومات']
        assert result.recommendations == []
        # No images, so the analyzer is never called
        analyzer.analyze_images.assert_not_called()

    def test_image_analysis_raises_confidence(self, analyzer, request_data):
        # Arrange
        analyzer.analyze_images.return_value = [
            ImageAnalysisResult(product_type='game', platform_hints=['playstation'], confidence=0.9)
        ]
        generator = DescriptionGenerator(image_analyzer=analyzer, llm_factory=lambda p: _llm_returning(GOOD_TEXT))
        images = ['https://cdn.example.com/gow.jpg']

        # Act
        result = asyncio.run(generator.generate_description(request_data.model_copy(update={'product_images': images})))

        # Assert
        analyzer.analyze_images.assert_awaited_once_with(images)
        assert len(result.image_analysis) == 1
        assert result.confidence == 100

    def test_image_analysis_can_be_disabled(self, analyzer, request_data):
        generator = DescriptionGenerator(image_analyzer=analyzer, llm_factory=lambda p: _llm_returning(GOOD_TEXT))
        request = request_data.model_copy(update={
            'product_images': ['https://cdn.example.com/gow.jpg'],
            'enable_image_analysis': False,
        })

        asyncio.run(generator.generate_description(request))

        analyzer.analyze_images.assert_not_called()

    def test_llm_error_falls_back_to_template(self, analyzer, request_data):
        # Arrange
        generator = DescriptionGenerator(
            image_analyzer=analyzer, llm_factory=lambda p: _llm_returning(error='HTTP 500: Internal Server Error')
        )

        # Act
        result = asyncio.run(generator.generate_description(request_data))

        # Assert
        assert result.fallback_used is True
        assert result.source == 'hybrid'
        assert result.template_used is not None
        assert result.description
        assert 'Consider configuring an AI provider for better quality descriptions' in result.recommendations

    def test_missing_provider_key_falls_back(self, analyzer, request_data):
        def factory(provider):
            raise LLMConfigError("No API key configured for provider 'claude'")

        generator = DescriptionGenerator(image_analyzer=analyzer, llm_factory=factory)

        result = asyncio.run(generator.generate_description(request_data))

        assert result.fallback_used is True
        assert result.description

    def test_failure_without_fallback(self, analyzer, request_data):
        # Arrange
        generator = DescriptionGenerator(image_analyzer=analyzer, llm_factory=lambda p: _llm_returning('   '))

        # Act
        result = asyncio.run(generator.generate_description(request_data.model_copy(update={'enable_fallback': False})))

        # Assert
        assert result.description == ''
        assert result.confidence == 0
        assert result.recommendations[0] == 'Generation failed: AI generated empty description'

    def test_poor_text_is_improved(self, analyzer, request_data):
        # Arrange: two words with a repetition and a double space
        generator = DescriptionGenerator(image_analyzer=analyzer, llm_factory=lambda p: _llm_returning('لعبة  لعبة'))

        # Act
        result = asyncio.run(generator.generate_description(request_data))

        # Assert
        assert result.description == 'لعبة'
        assert result.validation['grammar_issues'] == []

    def test_english_skips_arabic_validation(self, analyzer, request_data):
        generator = DescriptionGenerator(
            image_analyzer=analyzer, llm_factory=lambda p: _llm_returning('An epic Norse adventure.')
        )

        result = asyncio.run(generator.generate_description(request_data.model_copy(update={'language': 'en'})))

        assert result.validation is None
        # 50 base + 15 AI
        assert result.confidence == 65


class TestQuickAndBatch:

    def test_quick_description(self, analyzer):
        generator = DescriptionGenerator(image_analyzer=analyzer, llm_factory=MagicMock())

        result = generator.generate_quick_description('إله الحرب', 'God of War PS5 Game')

        assert result.source == 'template'
        assert result.confidence == QUICK_CONFIDENCE
        assert result.fallback_used is True
        assert result.description
        generator.llm_factory.assert_not_called()

    @patch('gamestore.services.ai.description_generator.asyncio.sleep', new_callable=AsyncMock)
    def test_batch_pauses_between_groups(self, mock_sleep, analyzer):
        # Arrange
        generator = DescriptionGenerator(image_analyzer=analyzer, llm_factory=lambda p: _llm_returning(GOOD_TEXT))
        batch = BatchDescriptionRequest(products=[
            {'name': f'لعبة {i}', 'name_en': f'Game {i}'} for i in range(4)
        ])

        # Act
        results = asyncio.run(generator.generate_batch(batch))

        # Assert
        assert len(results) == 4
        assert all(r.source == 'ai' for r in results)
        mock_sleep.assert_awaited_once_with(BATCH_PAUSE_SECONDS)


class TestHelpers:

    def test_validate_generation_config(self):
        request = DescriptionRequest(
            product_name=' ', product_name_en='Game',
            language='fr', cultural_level='extreme', target_audience='kids', prompt_complexity='simple',
        )

        errors = validate_generation_config(request)

        assert errors == [
            'Product name is required',
            'Language must be "ar" or "en"',
            'Cultural level must be "conservative", "moderate", or "liberal"',
            'Target audience must be "casual", "professional", or "collectors"',
        ]

    def test_calculate_confidence(self):
        good = validate_arabic_text(GOOD_TEXT)

        assert calculate_confidence(None, 'template', None) == 50
        assert calculate_confidence(0.7, 'hybrid', None) == 60
        assert calculate_confidence(0.71, 'ai', good) == 100

    def test_build_recommendations(self):
        poor = validate_arabic_text('لعبة  لعبة')

        recommendations = build_recommendations(poor, 0.3, 'template')

        assert recommendations == [
            'Consider improving description quality for better results',
            'Review and fix grammar issues for better readability',
            'Consider using higher quality product images for better analysis',
            'Consider configuring an AI provider for better quality descriptions',
        ]
