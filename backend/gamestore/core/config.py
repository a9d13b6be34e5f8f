"""
Centralized application configuration
"""
import json
from decimal import Decimal
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings"""

    # API Settings
    API_TITLE: str = "Gaming Store API"
    API_VERSION: str = "1.0.0"
    API_DESCRIPTION: str = "Storefront and back-office API for the gaming store"
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    API_DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Database (clients are created lazily, empty values only fail on first use)
    DATABASE_URL: str = ""
    SUPABASE_URL: str = ""
    SUPABASE_SERVICE_ROLE_KEY: str = ""
    SUPABASE_STORAGE_BUCKET: str = "product-images"

    # CORS - Can be string (comma-separated) or JSON array
    # Example: "http://localhost:5173,https://store.example.com" or '["http://localhost:5173"]'
    ALLOWED_ORIGINS: Optional[str] = "http://localhost:5173,http://localhost:3000"

    def get_allowed_origins(self) -> List[str]:
        """Parse ALLOWED_ORIGINS string into list"""
        if not self.ALLOWED_ORIGINS:
            return ["http://localhost:5173"]

        # Try JSON parse first (for array format)
        try:
            origins = json.loads(self.ALLOWED_ORIGINS)
            if isinstance(origins, list):
                return origins
        except (json.JSONDecodeError, ValueError):
            pass

        # Fall back to comma-separated string
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]

    # Auth
    AUTH_SECRET: str = ""
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 60 * 24

    # Store
    STORE_NAME: str = "Gaming Store"
    BASE_CURRENCY: str = "KWD"
    SHIPPING_COST: Decimal = Decimal("2.000")
    ORDER_NUMBER_PREFIX: str = "ORD"
    MESSAGE_NUMBER_PREFIX: str = "MSG"

    # AI providers (description generator)
    AI_PROVIDER: str = "claude"
    AI_MODEL: str = ""
    AI_TEMPERATURE: float = 0.7
    AI_MAX_TOKENS: int = 2000
    AI_TIMEOUT_SECONDS: float = 30.0
    ANTHROPIC_API_KEY: str = ""
    OPENAI_API_KEY: str = ""
    PERPLEXITY_API_KEY: str = ""
    LOCAL_LLM_URL: str = "http://localhost:11434/v1/chat/completions"

    # Admin AI chat (Claude tool use over store data)
    ADMIN_CHAT_MODEL: str = "claude-haiku-4-5-20251001"
    ADMIN_CHAT_MAX_TOKENS: int = 4096
    ADMIN_CHAT_MAX_HISTORY_MESSAGES: int = 10
    ADMIN_CHAT_MAX_HISTORY_TOKENS: int = 8000

    # E-mail notifications (EmailJS REST API)
    EMAILJS_SERVICE_ID: str = ""
    EMAILJS_TEMPLATE_ID: str = "template_store_notification"
    EMAILJS_PUBLIC_KEY: str = ""
    EMAILJS_PRIVATE_KEY: str = ""
    ADMIN_NOTIFICATION_EMAIL: str = ""
    EMAILJS_API_URL: str = "https://api.emailjs.com/api/v1.0/email/send"

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
