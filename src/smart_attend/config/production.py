import os

FIREBASE_CONFIG = {
    "credentials_path": os.getenv("FIREBASE_CREDENTIALS", ""),
    "project_id": os.getenv("FIREBASE_PROJECT_ID") or None,
}

CACHE_TTL_SECONDS = int(os.getenv("CACHE_TTL_SECONDS", "300"))
CACHE_MAX_ENTRIES = int(os.getenv("CACHE_MAX_ENTRIES", "100"))
FANOUT_MAX_WORKERS = int(os.getenv("FANOUT_MAX_WORKERS", "8"))
RAW_SCAN_LIMIT = int(os.getenv("RAW_SCAN_LIMIT", "1000"))
STATS_SCAN_LIMIT = int(os.getenv("STATS_SCAN_LIMIT", "200"))
DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", "50"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
DEBUG = False
