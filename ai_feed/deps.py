"""
Dependency injection for FastAPI.
"""

import logging
from typing import List, Optional

from fastapi import HTTPException, status

from ai_feed.config import get_settings, load_feed_settings
from ai_feed.core.feed.fetcher import fetch_catalog
from ai_feed.core.feed.models import FeedSettings
from ai_feed.core.feed.source import CatalogSnapshot, ProductSource
from ai_feed.core.woo_client import WooClient


logger = logging.getLogger(__name__)


def get_feed_settings() -> FeedSettings:
    """
    Fresh feed settings snapshot for this request.

    Raises:
        HTTPException: If the settings file is unreadable.
    """
    try:
        return load_feed_settings()
    except ValueError as e:
        logger.error(f"Invalid feed settings: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Feed settings are invalid"
        )


def create_woo_client() -> Optional[WooClient]:
    """WooClient for the configured store, or None when credentials are missing."""
    settings = get_settings()
    if not settings.store_url or not settings.consumer_key or not settings.consumer_secret:
        return None
    return WooClient(
        store_url=settings.store_url,
        consumer_key=settings.consumer_key,
        consumer_secret=settings.consumer_secret
    )


async def load_product_source(product_ids: Optional[List[int]] = None) -> ProductSource:
    """
    Fetch the catalog for one build.

    A missing store connection gives an unavailable source, so the feed is
    empty instead of failing.
    """
    client = create_woo_client()
    if client is None:
        logger.warning("Store connection not configured, product source unavailable")
        return CatalogSnapshot.unavailable()
    try:
        return await fetch_catalog(client, product_ids=product_ids)
    finally:
        await client.close()
