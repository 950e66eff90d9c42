import os

FIREBASE_CONFIG = {
    "credentials_path": "",
    "project_id": os.getenv("FIREBASE_PROJECT_ID", "smart-attend-test"),
}

CACHE_TTL_SECONDS = 300
CACHE_MAX_ENTRIES = 100
FANOUT_MAX_WORKERS = 4
RAW_SCAN_LIMIT = 1000
STATS_SCAN_LIMIT = 200
DEFAULT_PAGE_SIZE = 50

LOG_LEVEL = "WARNING"
DEBUG = False
TESTING = True
