"""
CORS negotiation for the translate endpoint.

Unknown origins are answered with the configured fallback origin (or no
allow-origin at all in strict mode); preflights are short-circuited by the
pipeline with an empty 204.
"""
import logging
from typing import Optional

from models import CorsDecision
from settings import CorsSettings, get_cors_settings

logger = logging.getLogger(__name__)


def negotiate(
    origin: Optional[str],
    requested_headers: Optional[str] = None,
    settings: Optional[CorsSettings] = None,
) -> CorsDecision:
    """
    Resolve the CORS headers for one request.

    Args:
        origin: Value of the request's Origin header
        requested_headers: Value of Access-Control-Request-Headers (preflight only).
            Allowed headers are a fixed list, so this is only logged.
        settings: CORS settings (uses global if None)

    Returns:
        CorsDecision with the allow-origin (None when strict and not allowed)
    """
    settings = settings or get_cors_settings()
    allowed = settings.get_allowed_origins()

    if origin and origin in allowed:
        allow_origin = origin
    elif settings.cors_strict_origin:
        allow_origin = None
    else:
        allow_origin = settings.get_default_origin()

    if requested_headers:
        logger.debug(f"Preflight requested headers: {requested_headers}")

    return CorsDecision(
        allow_origin=allow_origin,
        allow_methods=settings.cors_allowed_methods,
        allow_headers=settings.cors_allowed_headers,
        max_age=settings.cors_max_age,
    )
