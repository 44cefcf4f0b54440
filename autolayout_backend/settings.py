"""
Backend configuration from environment variables.

Environment Variables:
    AUTOLAYOUT_LOG_LEVEL    - Logging level name (default: INFO)
    AUTOLAYOUT_CORS_ORIGINS - Comma-separated allowed origins for the editor frontend
    AUTOLAYOUT_HOST         - Bind address when run directly (default: 127.0.0.1)
    AUTOLAYOUT_PORT         - Port when run directly (default: 8765)
"""

import logging
import os

DEFAULT_CORS_ORIGINS = "http://localhost:5173,http://localhost:3000,http://127.0.0.1:5173"

LOG_LEVEL = os.environ.get("AUTOLAYOUT_LOG_LEVEL", "INFO").upper()
CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("AUTOLAYOUT_CORS_ORIGINS", DEFAULT_CORS_ORIGINS).split(",")
    if origin.strip()
]
HOST = os.environ.get("AUTOLAYOUT_HOST", "127.0.0.1")
PORT = int(os.environ.get("AUTOLAYOUT_PORT", "8765"))


def configure_logging() -> None:
    """Configure root logging once for the backend process."""
    level = getattr(logging, LOG_LEVEL, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
