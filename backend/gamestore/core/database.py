"""
Database and storage clients for the store backend

- SQLAlchemy: table declarations (gamestore.domain.tables) and schema bootstrap
- psycopg2: raw SQL used by every repository
- Supabase: Storage bucket holding product images

Nothing connects at import time; each client is built on first use.
"""
import time
import logging
from typing import List, Optional

import psycopg2
from psycopg2.extras import RealDictCursor
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base
from supabase import create_client, Client

from .config import settings

logger = logging.getLogger(__name__)

CONNECTION_TIMEOUT = 10  # seconds

Base = declarative_base()

_engine = None
_supabase: Optional[Client] = None


def _database_url() -> str:
    if not settings.DATABASE_URL:
        raise Exception("DATABASE_URL not configured")
    return settings.DATABASE_URL


# ============================================================================
# Schema
# ============================================================================

def get_engine():
    global _engine
    if _engine is None:
        _engine = create_engine(_database_url(), pool_pre_ping=True, pool_size=5, max_overflow=10)
    return _engine


def init_schema() -> List[str]:
    """
    Create missing store tables; existing ones are left as they are.

    Returns the sorted names of all declared tables.
    """
    from gamestore.domain import tables  # noqa: F401  (registers models on Base)

    Base.metadata.create_all(bind=get_engine())
    names = sorted(Base.metadata.tables)
    logger.info(f"Schema ready: {', '.join(names)}")
    return names


# ============================================================================
# Raw SQL connections
# ============================================================================

def get_db_connection_dict():
    """
    Open a connection whose cursors yield dict rows.

    Callers own the connection:
        conn = get_db_connection_dict()
        try:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM products WHERE id = %s", (product_id,))
            row = cursor.fetchone()
        finally:
            conn.close()
    """
    return psycopg2.connect(
        _database_url(),
        cursor_factory=RealDictCursor,
        connect_timeout=CONNECTION_TIMEOUT,
    )


def get_db_connection_with_retry(max_retries=3, retry_delay=1.0):
    """
    Open a verified connection, retrying transient failures.

    Supabase occasionally drops SSL sessions while the pooler recycles, so
    each attempt runs SELECT 1 before handing the connection out. Waits
    retry_delay, 2 * retry_delay, ... between attempts and re-raises the
    last psycopg2.OperationalError once max_retries is used up.
    """
    url = _database_url()
    attempt = 0

    while True:
        attempt += 1
        try:
            conn = psycopg2.connect(url, connect_timeout=CONNECTION_TIMEOUT)
            probe = conn.cursor()
            probe.execute("SELECT 1")
            probe.close()
            if attempt > 1:
                logger.info(f"Database reachable after {attempt} attempts")
            return conn
        except psycopg2.OperationalError as e:
            kind = "SSL drop" if "SSL connection has been closed unexpectedly" in str(e) else "Connection error"
            logger.warning(f"{kind} (attempt {attempt}/{max_retries}): {e}")

            if attempt >= max_retries:
                logger.error(f"Giving up on database after {max_retries} attempts")
                raise

            wait = retry_delay * (2 ** (attempt - 1))
            logger.info(f"Retrying database connection in {wait:.2f}s")
            time.sleep(wait)


# ============================================================================
# Supabase Storage
# ============================================================================

def get_supabase() -> Client:
    """Shared Supabase client; usable directly or as a FastAPI dependency"""
    global _supabase
    if _supabase is None:
        if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_ROLE_KEY:
            raise Exception("SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY not configured")
        _supabase = create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)
    return _supabase
