"""
API tests for AI description endpoints

The generator is replaced with a mock; Arabic validation and the template
listing run for real.
"""
import pytest
from unittest.mock import MagicMock, AsyncMock

from gamestore.main import app
from gamestore.services.ai.description_generator import DescriptionResult, get_description_generator


@pytest.fixture
def generator():
    mock = MagicMock()
    mock.generate_description = AsyncMock(return_value=DescriptionResult(
        description='وصف تجريبي', source='ai', confidence=80, processing_time_ms=12,
    ))
    mock.generate_batch = AsyncMock(return_value=[])
    app.dependency_overrides[get_description_generator] = lambda: mock
    return mock


class TestGenerate:

    def test_requires_admin(self, client, generator):
        response = client.post("/api/v1/ai/descriptions/generate", json={
            'product_name': 'إله الحرب', 'product_name_en': 'God of War',
        })

        assert response.status_code == 401

    def test_generate(self, client, as_admin, generator):
        # Act
        response = client.post("/api/v1/ai/descriptions/generate", json={
            'product_name': 'إله الحرب', 'product_name_en': 'God of War',
            'product_images': ['https://cdn.example.com/gow.jpg'],
        })

        # Assert
        assert response.status_code == 200
        data = response.json()['data']
        assert data['description'] == 'وصف تجريبي'
        assert data['confidence'] == 80
        request = generator.generate_description.call_args[0][0]
        assert request.product_images == ['https://cdn.example.com/gow.jpg']

    def test_bad_options_are_400(self, client, as_admin, generator):
        response = client.post("/api/v1/ai/descriptions/generate", json={
            'product_name': 'إله الحرب', 'product_name_en': 'God of War', 'language': 'fr',
        })

        assert response.status_code == 400
        assert response.json()['detail'] == 'Language must be "ar" or "en"'
        generator.generate_description.assert_not_called()

    def test_batch_reports_product_index(self, client, as_admin, generator):
        response = client.post("/api/v1/ai/descriptions/batch", json={
            'products': [{'name': 'لعبة', 'name_en': 'Game'}, {'name': ' ', 'name_en': 'Other'}],
        })

        assert response.status_code == 400
        assert response.json()['detail'] == 'Product 2: Product name is required'

    def test_batch_size_limit(self, client, as_admin, generator):
        products = [{'name': 'لعبة', 'name_en': 'Game'}] * 21

        response = client.post("/api/v1/ai/descriptions/batch", json={'products': products})

        assert response.status_code == 422


class TestHelpers:

    def test_validate_config(self, client, as_admin):
        response = client.post("/api/v1/ai/descriptions/validate-config", json={
            'product_name': 'إله الحرب', 'product_name_en': 'God of War', 'target_audience': 'kids',
        })

        data = response.json()['data']
        assert data['is_valid'] is False
        assert len(data['errors']) == 1

    def test_templates(self, client, as_admin):
        response = client.get("/api/v1/ai/descriptions/templates")

        assert response.status_code == 200
        assert response.json()['count'] == len(response.json()['data']) > 0

    def test_cache_stats_and_clear(self, client, as_admin, generator):
        generator.image_analyzer.cache_stats.return_value = {'size': 4, 'max_size': 100}

        assert client.get("/api/v1/ai/descriptions/cache").json()['data']['size'] == 4
        assert client.delete("/api/v1/ai/descriptions/cache").status_code == 200
        generator.image_analyzer.clear_cache.assert_called_once()

    def test_validate_arabic(self, client, as_admin):
        response = client.post("/api/v1/ai/validate-arabic", json={
            'text': "استمتع بأفضل ألعاب المغامرة على بلايستيشن و إكس بوكس. رسومات واضحة وقصة مشوقة دائماً. تناسب جميع أفراد العائلة.",
        })

        data = response.json()['data']
        assert data['score'] == 90.0
        assert data['overall'] == 'excellent'

    def test_validate_arabic_bad_strictness(self, client, as_admin):
        response = client.post("/api/v1/ai/validate-arabic", json={'text': 'نص', 'strictness': 'extreme'})

        assert response.status_code == 400
