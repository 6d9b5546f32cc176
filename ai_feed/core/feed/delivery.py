"""
Push delivery of the serialized feed to an external endpoint.

Failures are logged and swallowed: the next scheduled push is the retry.
"""

import logging
from typing import Optional

import httpx

from ai_feed.core.woo_client import WooClient
from .fetcher import fetch_catalog
from .generator import FeedGenerator
from .models import FeedSettings
from .serializer import serialize


logger = logging.getLogger(__name__)

DEFAULT_PUSH_TIMEOUT = 15.0


def can_push(settings: FeedSettings) -> bool:
    return settings.delivery_enabled and bool(settings.endpoint_url)


async def push_payload(
    settings: FeedSettings,
    payload: str,
    content_type: str,
    timeout: float = DEFAULT_PUSH_TIMEOUT,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> bool:
    """
    POST a serialized feed to the configured endpoint.

    Returns:
        True on a 2xx response, False otherwise (never raises)
    """
    if not can_push(settings):
        logger.info("Feed delivery disabled or endpoint not configured, skipping push")
        return False

    headers = {"Content-Type": f"{content_type}; charset=utf-8"}
    if settings.auth_token:
        headers["Authorization"] = f"Bearer {settings.auth_token}"

    try:
        async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
            response = await client.post(
                settings.endpoint_url,
                content=payload.encode('utf-8'),
                headers=headers
            )
    except httpx.TimeoutException as e:
        logger.warning(f"Feed push to {settings.endpoint_url} timed out after {timeout}s: {e}")
        return False
    except httpx.HTTPError as e:
        logger.warning(f"Feed push to {settings.endpoint_url} failed: {e}")
        return False

    if response.is_success:
        logger.info(f"Feed pushed to {settings.endpoint_url} ({len(payload)} chars, HTTP {response.status_code})")
        return True

    logger.warning(
        f"Feed push to {settings.endpoint_url} rejected: HTTP {response.status_code} {response.text[:200]}"
    )
    return False


async def build_and_push(
    client: WooClient,
    settings: FeedSettings,
    timeout: float = DEFAULT_PUSH_TIMEOUT,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> bool:
    """
    Fetch the catalog, build the full feed in the configured format and push it.

    Never raises; errors are logged.
    """
    if not can_push(settings):
        logger.info("Feed delivery disabled or endpoint not configured, skipping push")
        return False

    try:
        source = await fetch_catalog(client)
        rows = FeedGenerator(source, settings).build_feed()
        payload, content_type = serialize(rows, settings.format)
    except Exception as e:
        logger.error(f"Feed build for push failed: {e}", exc_info=True)
        return False

    return await push_payload(settings, payload, content_type, timeout=timeout, transport=transport)
