"""
Product image uploads to Supabase Storage
"""
import logging
import uuid
from datetime import datetime
from typing import List, Optional

from supabase import Client

from gamestore.core.config import settings
from gamestore.core.database import get_supabase

logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 5 * 1024 * 1024
ALLOWED_EXTENSIONS = ['jpeg', 'jpg', 'png', 'webp']
CONTENT_TYPES = {
    'jpeg': 'image/jpeg',
    'jpg': 'image/jpeg',
    'png': 'image/png',
    'webp': 'image/webp',
}


def validate_image_file(filename: str, size: int) -> List[str]:
    errors = []
    if size > MAX_UPLOAD_BYTES:
        errors.append('File size must be less than 5MB')

    extension = filename.rsplit('.', 1)[-1].lower() if '.' in filename else ''
    if extension not in ALLOWED_EXTENSIONS:
        errors.append(f"File type not allowed. Allowed types: {', '.join(ALLOWED_EXTENSIONS)}")
    return errors


class ImageUploadService:
    """Stores images in the configured bucket and returns their public URL"""

    def __init__(self, client: Optional[Client] = None, bucket: Optional[str] = None):
        self._client = client
        self.bucket = bucket or settings.SUPABASE_STORAGE_BUCKET

    @property
    def client(self) -> Client:
        if self._client is None:
            self._client = get_supabase()
        return self._client

    @staticmethod
    def build_path(filename: str, folder: str = "products") -> str:
        extension = filename.rsplit('.', 1)[-1].lower()
        stamp = datetime.now().strftime("%Y%m%d")
        return f"{folder}/{stamp}/{uuid.uuid4().hex}.{extension}"

    def upload(self, filename: str, content: bytes, folder: str = "products") -> str:
        """
        Upload one image.

        Raises:
            ValueError: file too large or of a type that is not allowed
        """
        errors = validate_image_file(filename, len(content))
        if errors:
            raise ValueError("; ".join(errors))

        path = self.build_path(filename, folder)
        extension = path.rsplit('.', 1)[-1]
        storage = self.client.storage.from_(self.bucket)
        storage.upload(path, content, {"content-type": CONTENT_TYPES[extension]})

        url = storage.get_public_url(path)
        logger.info(f"Image uploaded to {self.bucket}/{path}")
        return url

    def delete(self, path: str) -> None:
        self.client.storage.from_(self.bucket).remove([path])
        logger.info(f"Image removed from {self.bucket}/{path}")


_service_instance: Optional[ImageUploadService] = None


def get_image_upload_service() -> ImageUploadService:
    global _service_instance
    if _service_instance is None:
        _service_instance = ImageUploadService()
    return _service_instance
