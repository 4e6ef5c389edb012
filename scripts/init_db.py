#!/usr/bin/env python
import sys
from pathlib import Path

# Add parent directory to path to import app modules
sys.path.append(str(Path(__file__).parent.parent))

from watermark_app.config import Settings
from watermark_app.deps import init_store


def init_db(settings=None):
    """Initialize the database by creating all tables"""
    settings = settings or Settings.from_env()
    print(f"Creating database tables in {settings.database_url}...")
    engine, _ = init_store(settings)
    engine.dispose()
    print("Database tables created successfully!")


if __name__ == "__main__":
    init_db()
