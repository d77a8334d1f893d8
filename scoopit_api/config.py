"""Configuration constants for the Scoop.it API client."""

from . import __version__

# API endpoints
API_HOST = "https://www.scoop.it"
API_BASE_PATH = "/api/1/"

# HTTP configuration
REQUEST_TIMEOUT = 30
MAX_RETRIES = 0                   # transport retries are opt-in
BACKOFF_FACTOR = 0.5
RETRY_STATUS_CODES = [429, 500, 502, 503, 504]
RETRY_METHODS = frozenset({"GET", "HEAD", "PUT", "DELETE", "OPTIONS"})
USER_AGENT = f"scoopit-api-python/{__version__}"

# Token configuration
TOKEN_LIFETIME = 3600             # seconds requested for each minted token
TOKEN_RENEWAL_SAFETY_MARGIN = 60  # renew this many seconds before expiry
TOKEN_ALGORITHM = "HS256"

# Response handling
ERROR_EXCERPT_LENGTH = 200
RETRYABLE_ERROR_CODES = frozenset({
    "rate_limited",
    "too_many_requests",
    "service_unavailable",
})
