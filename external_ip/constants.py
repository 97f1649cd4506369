"""
Constants for external_ip package.

Centralizes magic numbers and configuration defaults.
"""

# Resolution defaults
DEFAULT_TIMEOUT = 30.0  # seconds, applied when the caller supplies no context
DEFAULT_HTTP_TIMEOUT = 30.0  # seconds, ceiling for a single HTTP request

# HTTP source defaults
DEFAULT_USER_AGENT = "external-ip-consensus (+https://pypi.org/project/external-ip-consensus/)"
MAX_RESPONSE_BYTES = 64 * 1024  # an IP address never needs more than this
RESPONSE_CHUNK_SIZE = 1024

# Voter weights
# TLS-protected providers get more power than plain-text providers,
# since their answer cannot be rewritten in transit.
TLS_WEIGHT = 3
PLAIN_WEIGHT = 1

# Recommended providers as (url, weight) pairs
DEFAULT_PROVIDERS: tuple[tuple[str, int], ...] = (
    # TLS-protected providers
    ("https://icanhazip.com/", TLS_WEIGHT),
    ("https://myexternalip.com/raw", TLS_WEIGHT),
    # Plain-text providers
    ("http://ifconfig.io/ip", PLAIN_WEIGHT),
    ("http://checkip.amazonaws.com/", PLAIN_WEIGHT),
    ("http://ident.me/", PLAIN_WEIGHT),
    ("http://whatismyip.akamai.com/", PLAIN_WEIGHT),
    ("http://myip.dnsomatic.com/", PLAIN_WEIGHT),
    ("http://diagnostic.opendns.com/myip", PLAIN_WEIGHT),
)
