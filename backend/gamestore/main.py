"""
Gaming Store - Backend API
Catalog, checkout and back office for a Kuwaiti gaming retailer
"""
import logging
import time
from pathlib import Path

from dotenv import load_dotenv

# .env must be loaded before gamestore.core.config builds settings
load_dotenv(Path(__file__).parent.parent / '.env')

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gamestore.core.config import settings
from gamestore.core.database import get_db_connection_with_retry, CONNECTION_TIMEOUT
from gamestore.core.rate_limit import RateLimitMiddleware
from gamestore.api import (
    products, categories, orders, messages, discount_codes, currency,
    data_transfer, uploads, ai_descriptions, auth, admin,
)

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

# (module, url segment, docs tag)
ROUTERS = [
    (auth, "auth", "Authentication"),
    (products, "products", "Products"),
    (categories, "categories", "Categories"),
    (orders, "orders", "Orders"),
    (messages, "messages", "Messages"),
    (discount_codes, "discount-codes", "Discount Codes"),
    (currency, "currencies", "Currency"),
    (data_transfer, "data", "Import / Export"),
    (uploads, "uploads", "Uploads"),
    (ai_descriptions, "ai", "AI Descriptions"),
    (admin, "admin", "Admin"),
]

app = FastAPI(
    title=settings.API_TITLE,
    version=settings.API_VERSION,
    description=settings.API_DESCRIPTION
)

# Added first so CORS wraps it and 429s still carry CORS headers
app.add_middleware(RateLimitMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["*"],
)

for module, segment, tag in ROUTERS:
    app.include_router(module.router, prefix=f"/api/v1/{segment}", tags=[tag])

logger.info(f"{settings.API_TITLE} {settings.API_VERSION} ready with {len(ROUTERS)} routers")


def _probe_database() -> dict:
    """One quick connection attempt; never raises"""
    try:
        conn = get_db_connection_with_retry(max_retries=1, retry_delay=0.5)
        try:
            cursor = conn.cursor()
            started = time.time()
            cursor.execute("SELECT 1")
            cursor.fetchone()
            latency = round((time.time() - started) * 1000, 2)
            cursor.close()
        finally:
            conn.close()
    except Exception as e:
        logger.warning(f"Health check could not reach the database: {e}")
        return {"status": "disconnected", "latency_ms": None, "error": str(e)}

    return {"status": "connected", "latency_ms": latency, "error": None}


@app.get("/")
async def root():
    return {
        "message": f"{settings.STORE_NAME} API",
        "status": "online",
        "version": settings.API_VERSION,
    }


@app.get("/health")
def health():
    """Liveness plus database reachability for uptime monitors"""
    started = time.time()
    database = _probe_database()
    database["connection_timeout_s"] = CONNECTION_TIMEOUT

    return {
        "status": "healthy" if database["status"] == "connected" else "degraded",
        "service": "gamestore-api",
        "version": settings.API_VERSION,
        "database": database,
        "total_latency_ms": round((time.time() - started) * 1000, 2),
    }
