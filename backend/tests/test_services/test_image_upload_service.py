"""
Tests for product image uploads (Supabase client mocked)
"""
import re
import pytest
from unittest.mock import MagicMock

from gamestore.services.image_upload_service import (
    ImageUploadService, validate_image_file, MAX_UPLOAD_BYTES,
)


@pytest.fixture
def supabase_client():
    client = MagicMock()
    client.storage.from_.return_value.get_public_url.return_value = "https://cdn.example.com/public/x.png"
    return client


class TestValidateImageFile:

    def test_accepts_known_types(self):
        assert validate_image_file("cover.JPG", 1024) == []

    def test_rejects_large_files(self):
        assert validate_image_file("cover.png", MAX_UPLOAD_BYTES + 1) == ['File size must be less than 5MB']

    def test_rejects_unknown_type(self):
        errors = validate_image_file("cover.gif", 10)
        assert errors[0].startswith("File type not allowed")

    def test_rejects_missing_extension(self):
        assert validate_image_file("cover", 10) != []


class TestImageUploadService:

    def test_build_path(self):
        path = ImageUploadService.build_path("Box Art.PNG")

        assert re.match(r"^products/\d{8}/[0-9a-f]{32}\.png$", path)

    def test_upload_returns_public_url(self, supabase_client):
        # Arrange
        service = ImageUploadService(client=supabase_client, bucket="product-images")

        # Act
        url = service.upload("cover.webp", b"RIFF....WEBP")

        # Assert
        supabase_client.storage.from_.assert_called_with("product-images")
        bucket = supabase_client.storage.from_.return_value
        path, content, options = bucket.upload.call_args[0]
        assert path.endswith(".webp")
        assert content == b"RIFF....WEBP"
        assert options == {"content-type": "image/webp"}
        assert url == "https://cdn.example.com/public/x.png"

    def test_upload_rejects_invalid_file(self, supabase_client):
        service = ImageUploadService(client=supabase_client, bucket="product-images")

        with pytest.raises(ValueError, match="File type not allowed"):
            service.upload("notes.txt", b"hello")
        supabase_client.storage.from_.assert_not_called()
