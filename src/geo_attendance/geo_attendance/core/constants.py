"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

EARTH_RADIUS_METERS = 6_371_000.0

DEFAULT_SESSION_MINUTES = 30
DEFAULT_EXTEND_MINUTES = 15
MIN_API_SESSION_MINUTES = 5
MAX_API_SESSION_MINUTES = 180

DEFAULT_MAX_DISTANCE_METERS = 50.0
SUSPICIOUS_DISTANCE_METERS = 1000.0

SESSION_TOKEN_BYTES = 32
TOKEN_RETRY_ATTEMPTS = 5
TOKEN_LOG_PREFIX = 8

DEFAULT_CONNECTION_TIMEOUT_SECONDS = 5
DEFAULT_LOCK_WAIT_TIMEOUT_SECONDS = 5
