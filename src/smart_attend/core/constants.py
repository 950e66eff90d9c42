"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

RAW_COLLECTION_PREFIX = "attendance"
METADATA_COLLECTION = "attendance_metadata"
STATS_COLLECTION = "attendance_stats"
STUDENT_COLLECTION = "student_attendance"
SUBJECTS_COLLECTION = "subjects"

# Upper bound for Firestore string range scans on document IDs.
ID_PREFIX_END = "\uf8ff"

DEFAULT_CACHE_TTL_MS = 5 * 60 * 1000
DEFAULT_CACHE_MAX_ENTRIES = 100
DEFAULT_FANOUT_MAX_WORKERS = 8
DEFAULT_RAW_SCAN_LIMIT = 1000
DEFAULT_STATS_SCAN_LIMIT = 200
DEFAULT_PAGE_SIZE = 50
DEFAULT_INITIAL_SUBJECTS = 5

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
