"""
Application constants.

Centralized operational constants for the application.
"""

# ========================================================================
# BLOCKCHAIN CONSTANTS
# ========================================================================

# Blockchain operation timeouts (in seconds)
BLOCKCHAIN_TIMEOUT = 30.0  # Single RPC call (block number, one getLogs window)
BLOCKCHAIN_RPC_TIMEOUT = 30  # RPC provider HTTP timeout

# Chunked deposit scan
DEFAULT_SCAN_MAX_CHUNK_SPAN = 3000
DEFAULT_SCAN_MIN_CHUNK_SPAN = 500
DEFAULT_SCAN_CHUNK_PAUSE_SECONDS = 0.12  # Between windows, for provider rate limits
DEFAULT_SCAN_RETRY_DELAY_SECONDS = 0.15  # Before the single transient retry
DEFAULT_DEPOSIT_LOOKBACK_BLOCKS = 60000  # ~2 days of BSC blocks
DEFAULT_SCAN_TIMEOUT_SECONDS = 120.0

# JSON-RPC error codes providers use for "block range too large"
RANGE_TOO_LARGE_ERROR_CODES = frozenset({-32062, -32005})
RANGE_TOO_LARGE_MARKERS = (
    "block range",
    "range is too large",
    "range too large",
    "limit exceeded",
    "exceed maximum block range",
    "query returned more than",
)

# ========================================================================
# LOCKS
# ========================================================================

DISTRIBUTED_LOCK_TIMEOUT = 180  # Default lock TTL in seconds
LOCK_TTL_MARGIN_SECONDS = 60  # Added to the scan timeout for the confirmation lock TTL
DISTRIBUTED_LOCK_BLOCKING_TIMEOUT = 5.0  # Time to wait for lock acquisition

# ========================================================================
# REFERRAL CODES
# ========================================================================

REFERRAL_CODE_PREFIX = "REF"
REFERRAL_CODE_MAX_ATTEMPTS = 10
