"""
Security utilities - never log or return secrets.
"""

import secrets
from typing import Any, Dict, Optional


SENSITIVE_KEY_PARTS = (
    'secret',
    'password',
    'token',
    'api_key',
)

REDACTED = '***REDACTED***'


def is_sensitive_key(key: str) -> bool:
    key = key.lower()
    return any(part in key for part in SENSITIVE_KEY_PARTS)


def sanitize_dict_for_logging(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Replace secret values in a dict before logging it.

    Args:
        data: Dictionary that may contain secrets.

    Returns:
        Sanitized copy; nested dicts and lists of dicts are sanitized too.
    """
    result = {}
    for key, value in data.items():
        if is_sensitive_key(str(key)) and value:
            result[key] = REDACTED
        elif isinstance(value, dict):
            result[key] = sanitize_dict_for_logging(value)
        elif isinstance(value, list):
            result[key] = [
                sanitize_dict_for_logging(item) if isinstance(item, dict) else item
                for item in value
            ]
        else:
            result[key] = value
    return result


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from an 'Authorization: Bearer <token>' header value."""
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(' ')
    if scheme.lower() != 'bearer' or not token.strip():
        return None
    return token.strip()


def tokens_match(provided: Optional[str], expected: Optional[str]) -> bool:
    """Constant-time token comparison; an empty expected token never matches."""
    if not provided or not expected:
        return False
    return secrets.compare_digest(provided.encode('utf-8'), expected.encode('utf-8'))
