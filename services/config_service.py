# Software Engineer: Kyeshav Chettiar
# Company FXO - Adcorp
# Configured and pushed onto the virtual machine for testing and evaluation for team members to use within the companies rules and regulations
# v3.0.0.0

"""
Configuration service for runtime system settings.
"""
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

DEFAULT_DATABASE_URL = "sqlite:///./eish-alert.db"
DEFAULT_UPLOAD_DIR = "uploads"
DEFAULT_PHOTO_MAX_SIZE_KB = 500
DEFAULT_MAX_UPLOAD_MB = 10
DEFAULT_ORPHAN_GRACE_MINUTES = 60


def _int_from_env(name: str, default: int) -> int:
    env_value = os.getenv(name)
    if not env_value:
        return default
    try:
        value = int(env_value)
    except ValueError:
        return default
    return value if value > 0 else default


def get_database_url() -> str:
    return os.getenv("DATABASE_URL") or DEFAULT_DATABASE_URL


def get_upload_dir() -> Path:
    return Path(os.getenv("UPLOAD_DIR") or DEFAULT_UPLOAD_DIR)


def get_photo_max_size_kb() -> int:
    """Return the compression budget for stored photos (KB)."""
    return _int_from_env("PHOTO_MAX_SIZE_KB", DEFAULT_PHOTO_MAX_SIZE_KB)


def get_max_upload_bytes() -> int:
    return _int_from_env("MAX_UPLOAD_MB", DEFAULT_MAX_UPLOAD_MB) * 1024 * 1024


def is_photo_sweep_enabled() -> bool:
    return os.getenv("PHOTO_SWEEP_ON_STARTUP", "false").lower() in {"1", "true", "yes"}


def get_orphan_grace_minutes() -> int:
    return _int_from_env("PHOTO_ORPHAN_GRACE_MINUTES", DEFAULT_ORPHAN_GRACE_MINUTES)


def get_log_level() -> str:
    return (os.getenv("LOG_LEVEL") or "INFO").strip().upper()
