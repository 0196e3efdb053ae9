"""Core constants for logq.

Centralizing these constants helps prevent circular imports and provides a
single source of truth for values that are referenced by multiple modules.
"""

# Environment variable names
ENV_API_BASE_URL = "LOGQ_URL"
ENV_API_KEY = "LOGQ_TOKEN"
ENV_ORG_ID = "LOGQ_ORG_ID"
ENV_INSECURE = "LOGQ_INSECURE"
ENV_VERBOSE = "LOGQ_VERBOSE"

# API defaults
DEFAULT_API_BASE_URL = "https://api.logq.dev"
DEFAULT_REQUEST_TIMEOUT = 30.0

# Logging
DEFAULT_LOG_DIR = "~/.logq/logs"
LOG_FILENAME = "logq.log"

# Live tail cadence: every query window is bounded by this many seconds.
STREAMING_DURATION_SECONDS = 2.0

# Output formats accepted by --format
FORMAT_JSON = "json"
FORMAT_TABLE = "table"
