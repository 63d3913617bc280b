"""Shared constants for OriginGuard.

Defaults for the rejection response and the origin normalization tables live
here. Nothing in this module is ever mutated at runtime.
"""

# ─── Rejection Response Defaults ──────────────────────────────────────────────

# Status code written for every blocked request unless overridden.
DEFAULT_RESPONSE_CODE: int = 400

# Body written for blocked requests in plain and JSON response modes.
DEFAULT_MESSAGE: str = (
    "Bad request. CSRF protection in effect. You may need to disable ad-block or "
    "privacy-related browser extensions."
)

# Accepted range for a configured response status code.
MIN_RESPONSE_CODE: int = 100
MAX_RESPONSE_CODE: int = 599

# ─── Origin Normalization ─────────────────────────────────────────────────────

# Schemes that carry a (scheme, host, port) origin tuple, mapped to the port
# that is elided when serializing the origin. Any other scheme (file:, data:,
# blob:, custom app schemes) yields an opaque origin and is never trusted.
DEFAULT_PORTS: dict[str, int] = {
    "http": 80,
    "https": 443,
    "ws": 80,
    "wss": 443,
    "ftp": 21,
}

# Code points a browser never lets into a host name. Bracketed IPv6 literals
# are validated separately. C0 controls and DEL are rejected as well.
FORBIDDEN_HOST_CHARS: frozenset[str] = frozenset(" #%/:<>?@[\\]^|")

# Request headers consulted for the declared origin, in precedence order.
ORIGIN_HEADER: str = "origin"
REFERER_HEADER: str = "referer"

# ─── Logging ──────────────────────────────────────────────────────────────────

# Raw header values longer than this are truncated before they reach a log line.
MAX_LOGGED_HEADER_CHARS: int = 256

# ─── Configuration File ───────────────────────────────────────────────────────

SUPPORTED_CONFIG_VERSION: int = 1
