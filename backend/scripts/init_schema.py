#!/usr/bin/env python3
"""
Create the Gaming Store tables
==============================

Creates products, categories, orders, messages, discount_codes and users
when they do not exist yet. Existing tables are left untouched.

Usage:
    cd backend
    python3 scripts/init_schema.py
"""
import sys
from pathlib import Path

from dotenv import load_dotenv

BACKEND_DIR = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(BACKEND_DIR))
load_dotenv(BACKEND_DIR / '.env')

from gamestore.core.database import init_schema  # noqa: E402


def main():
    print("🔧 Ensuring database schema...")
    try:
        tables = init_schema()
    except Exception as e:
        print(f"❌ Schema creation failed: {e}")
        return 1

    for name in tables:
        print(f"  ✅ {name}")
    print(f"\n📊 {len(tables)} tables ready")
    return 0


if __name__ == "__main__":
    sys.exit(main())
