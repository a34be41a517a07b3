"""
Profile core configuration.
All settings come from environment variables (optionally a local .env file).
"""

import os

from dotenv import load_dotenv

load_dotenv()

# Database path configuration
DB_PATH = os.getenv("DB_PATH", "./data/profilebook.db")

DEBUG = os.getenv("DEBUG", "true").lower() == "true"

# Storage backend and capacity (browser localStorage caps out around 5 MiB)
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "sqlite")  # sqlite|memory
STORAGE_QUOTA_BYTES = int(os.getenv("STORAGE_QUOTA_BYTES", str(5 * 1024 * 1024)))

# Logical slot names
PROFILE_KEY = os.getenv("PROFILE_KEY", "myProfile")
CONNECTIONS_KEY = os.getenv("CONNECTIONS_KEY", "savedConnections")

# Editing strategy for the my-profile session
EDIT_STRATEGY = os.getenv("EDIT_STRATEGY", "label")  # label|path

DEFAULT_AVATAR = os.getenv("DEFAULT_AVATAR", "/default-avatar.png")

VERSION = "1.0.0"


def debug_enabled():
    """Check if debug mode is enabled."""
    return os.getenv("DEBUG", "true").lower() == "true"


def get_db_path():
    """Current database path (re-read so tests can point at a temp file)."""
    return os.getenv("DB_PATH", DB_PATH)


def get_storage_quota():
    """Get storage capacity in bytes."""
    return int(os.getenv("STORAGE_QUOTA_BYTES", str(STORAGE_QUOTA_BYTES)))


def get_edit_strategy():
    """Get edit strategy (label|path)."""
    return os.getenv("EDIT_STRATEGY", EDIT_STRATEGY)


def get_store():
    """Get configured key-value store implementation."""
    backend = os.getenv("STORAGE_BACKEND", STORAGE_BACKEND)

    if backend == "memory":
        from .storage import InMemoryKeyValueStore
        return InMemoryKeyValueStore(quota_bytes=get_storage_quota())

    # Default to SQLite for unknown backends
    from .storage import SqliteKeyValueStore
    return SqliteKeyValueStore(db_path=get_db_path(), quota_bytes=get_storage_quota())


def validate_config():
    """Validate configuration and return any issues."""
    issues = []

    backend = os.getenv("STORAGE_BACKEND", STORAGE_BACKEND)
    if backend not in ["sqlite", "memory"]:
        issues.append(f"Invalid STORAGE_BACKEND: {backend}")

    if get_storage_quota() < 1:
        issues.append("STORAGE_QUOTA_BYTES must be >= 1")

    if get_edit_strategy() not in ["label", "path"]:
        issues.append(f"Invalid EDIT_STRATEGY: {get_edit_strategy()}")

    if PROFILE_KEY == CONNECTIONS_KEY:
        issues.append("PROFILE_KEY and CONNECTIONS_KEY must differ")

    return issues
