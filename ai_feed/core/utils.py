"""
Utility functions.
"""

import re
from typing import Any, Optional
from urllib.parse import urlparse


ALLOWED_URL_SCHEMES = ('http', 'https')


def strip_tags(text: Any) -> str:
    """Strip HTML tags (and script/style bodies), returning trimmed plain text."""
    if not text:
        return ''
    text = str(text)
    text = re.sub(r'<(script|style)[^>]*?>.*?</\1>', '', text, flags=re.IGNORECASE | re.DOTALL)
    text = re.sub(r'<[^>]+>', '', text)
    return text.strip()


def truncate_chars(text: str, max_chars: int) -> str:
    """Cut text to at most max_chars characters (not bytes)."""
    if text and len(text) > max_chars:
        return text[:max_chars]
    return text


def bool_string(value: Any) -> str:
    """'true' for true/1/yes (any case), otherwise 'false'."""
    return 'true' if str(value).strip().lower() in ('true', '1', 'yes') else 'false'


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return bool_string(value) == 'true'


def absint(value: Any) -> int:
    """Absolute integer value; anything unparseable is 0."""
    if value is None or isinstance(value, bool):
        return 0
    try:
        return abs(int(float(str(value).strip())))
    except (ValueError, OverflowError):
        return 0


def clean_url(value: Any) -> str:
    """Return the URL if it is http(s) or site-relative, otherwise ''."""
    if not value:
        return ''
    url = str(value).strip()
    if re.search(r'\s', url):
        return ''
    if url.startswith('/') and not url.startswith('//'):
        return url
    try:
        parsed = urlparse(url)
    except ValueError:
        return ''
    if parsed.scheme.lower() in ALLOWED_URL_SCHEMES and parsed.netloc:
        return url
    return ''


def leading_number(value: Any) -> float:
    """First number in a string like '12.34 USD'; 0.0 if there is none."""
    match = re.search(r'([0-9]+(?:\.[0-9]+)?)', str(value))
    return float(match.group(1)) if match else 0.0


def is_blank(value: Any) -> bool:
    """None, '' and empty lists count as blank; numeric zero does not."""
    if value is None:
        return True
    if isinstance(value, str):
        return value == ''
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


def parse_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
