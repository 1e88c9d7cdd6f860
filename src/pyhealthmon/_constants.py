"""Internal constants shared across the package."""

UDP_PORT = 8888
HTTP_PORT = 3000
DEFAULT_HOST = "0.0.0.0"

# ------------------------------------------------------------------
# Retention
# ------------------------------------------------------------------

HISTORY_CAPACITY = 1000
HIGH_FREQUENCY_CAPACITY = 200
DEFAULT_HISTORY_LIMIT = 50

# ------------------------------------------------------------------
# Durable log
# ------------------------------------------------------------------

LOG_DIR = "logs"
LOG_FILE_PREFIX = "health_data_udp_"
LOG_FILE_SUFFIX = ".json"

NO_DATA_MESSAGE = "No data available"


def log_file_name(day: str) -> str:
    """Return the daily log file name for an ISO ``YYYY-MM-DD`` *day*."""
    return f"{LOG_FILE_PREFIX}{day}{LOG_FILE_SUFFIX}"
