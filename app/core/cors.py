from typing import Dict, Optional, Sequence

ALLOW_METHODS = "GET, POST, PUT, DELETE, OPTIONS"
ALLOW_HEADERS = "Content-Type, Authorization"


def build_cors_headers(origin: Optional[str], allowed_origins: Sequence[str] = ("*",)) -> Dict[str, str]:
    """CORS headers for one response. A fresh dict on every call."""
    headers = {
        "Access-Control-Allow-Methods": ALLOW_METHODS,
        "Access-Control-Allow-Headers": ALLOW_HEADERS,
        "Access-Control-Max-Age": "86400",
    }
    if "*" in allowed_origins:
        headers["Access-Control-Allow-Origin"] = "*"
    elif origin and origin in allowed_origins:
        headers["Access-Control-Allow-Origin"] = origin
        headers["Vary"] = "Origin"
    return headers
