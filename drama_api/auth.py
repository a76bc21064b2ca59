# drama_api/auth.py
import hmac
import logging
from functools import wraps

from flask import current_app, request

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-API-Key"

class Unauthorized(Exception):
    """Missing or wrong shared API key on a write route."""
    pass

def key_matches(supplied: str, expected: str) -> bool:
    if not supplied or not expected:
        return False
    return hmac.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8"))

def require_api_key(view):
    """Reject the request before the view runs unless X-API-Key matches the configured key."""
    @wraps(view)
    def wrapper(*args, **kwargs):
        if not key_matches(request.headers.get(API_KEY_HEADER, ""), current_app.config["API_KEY"]):
            logger.warning("Rejected %s %s: bad or missing API key", request.method, request.path)
            raise Unauthorized()
        return view(*args, **kwargs)
    return wrapper
