"""Configuration read from environment variables."""

import os
from pathlib import Path
from typing import Optional

BASE_DIR = Path(__file__).resolve().parent
DEFAULT_CATALOG_PATH = BASE_DIR / "data" / "activities.json"


def get_data_dir() -> Path:
    """
    Get the directory holding the local JSON store.

    Returns:
        Path from PINE_DATA_DIR, defaults to "data"
    """
    return Path(os.getenv("PINE_DATA_DIR", "data"))


def get_catalog_path() -> Path:
    """Get the activity catalog file, defaults to the bundled catalog."""
    path = os.getenv("PINE_CATALOG_PATH")
    return Path(path) if path else DEFAULT_CATALOG_PATH


def get_supabase_url() -> Optional[str]:
    """
    Get the Supabase project URL.

    Returns:
        URL without trailing slash, or None if remote sync is not configured
    """
    url = os.getenv("SUPABASE_URL")
    if not url:
        return None
    return url.rstrip("/")


def get_supabase_key() -> Optional[str]:
    return os.getenv("SUPABASE_KEY") or None


def get_remote_timeout() -> float:
    return float(os.getenv("PINE_REMOTE_TIMEOUT", "10"))


def get_auto_sync_seconds() -> int:
    """Interval of the background push; 0 disables it."""
    return int(os.getenv("PINE_AUTO_SYNC_SECONDS", "0"))
