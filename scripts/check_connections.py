#!/usr/bin/env python3
"""
Connection Check Script

Run this to verify all external services are reachable.
Usage: python scripts/check_connections.py
"""
import sys
sys.path.insert(0, '.')

from careerhub.db.postgres import test_postgres_connection
from careerhub.db.mongodb import test_mongo_connection
from careerhub.core.config import get_settings


def main():
    settings = get_settings()
    print("=" * 50)
    print("CAREERHUB - CONNECTION CHECK")
    print("=" * 50)

    # PostgreSQL
    print("\n[1] Testing PostgreSQL...")
    print(f"    URL: postgresql://{settings.postgres_user}:****@{settings.postgres_host}:{settings.postgres_port}/{settings.postgres_db}")
    if test_postgres_connection():
        print("    ✅ PostgreSQL: CONNECTED")
    else:
        print("    ❌ PostgreSQL: FAILED")

    # MongoDB
    print("\n[2] Testing MongoDB...")
    print(f"    URI: {settings.mongodb_uri}")
    print(f"    Database: {settings.mongodb_db}")
    if test_mongo_connection():
        print("    ✅ MongoDB: CONNECTED")
    else:
        print("    ❌ MongoDB: FAILED")

    # DeepSeek (only if API key is set)
    print("\n[3] Testing DeepSeek API...")
    print(f"    Feedback backend: {settings.feedback_backend}")
    if settings.deepseek_api_key:
        from careerhub.services.deepseek_client import get_deepseek_client
        print(f"    Base URL: {settings.deepseek_base_url}")
        if get_deepseek_client().test_connection():
            print("    ✅ DeepSeek: CONNECTED")
        else:
            print("    ❌ DeepSeek: FAILED")
    else:
        print("    ⚠️  DeepSeek: API key not configured (mock feedback only)")

    # Vapi (configuration only, starting a call costs money)
    print("\n[4] Checking voice interviewer...")
    if settings.voice_configured:
        print(f"    ✅ Vapi: key set, assistant '{settings.vapi_assistant_id or '(none)'}'")
    else:
        print("    ⚠️  Vapi: VAPI_API_KEY not configured, voice interviews disabled")

    print("\n" + "=" * 50)
    print("Connection check complete!")
    print("=" * 50)


if __name__ == "__main__":
    main()
