"""
WooCommerce REST API client with retry logic and rate limiting.

Read-only: the feed only needs products, variations, categories and a few
store settings.
"""

import time
import random
import asyncio
import logging
from typing import Optional, Dict, List, Any
import httpx
from urllib.parse import urljoin


logger = logging.getLogger(__name__)

PER_PAGE = 100


class WooCommerceError(Exception):
    """Base exception for WooCommerce API errors."""
    pass


class WooClient:
    """
    Async WooCommerce REST API client (API v3, consumer_key/consumer_secret).
    """

    def __init__(
        self,
        store_url: str,
        consumer_key: str,
        consumer_secret: str,
        rate_limit_rps: float = 5.0,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize WooCommerce client.

        Args:
            store_url: Store base URL (e.g., https://example.com)
            consumer_key: WooCommerce consumer key
            consumer_secret: WooCommerce consumer secret
            rate_limit_rps: Rate limit (requests per second)
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        if not store_url:
            raise ValueError("store_url is required")
        if not consumer_key or not consumer_secret:
            raise ValueError("Must provide consumer_key and consumer_secret")

        self.store_url = store_url.rstrip('/')
        self.consumer_key = consumer_key
        self.consumer_secret = consumer_secret
        self.rate_limit_rps = rate_limit_rps
        self.timeout = timeout

        # Rate limiting state
        self._last_request_time = 0.0
        self._min_interval = 1.0 / rate_limit_rps if rate_limit_rps > 0 else 0

        self.client = httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            transport=transport
        )

    async def _wait_for_rate_limit(self):
        """Wait if needed to respect rate limit."""
        now = time.time()
        elapsed = now - self._last_request_time
        if elapsed < self._min_interval:
            await asyncio.sleep(self._min_interval - elapsed)
        self._last_request_time = time.time()

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict] = None,
        max_retries: int = 5,
        initial_delay: float = 2.0,
        backoff_factor: float = 2.0
    ) -> httpx.Response:
        """
        Make HTTP request with retry logic.

        Args:
            method: HTTP method
            endpoint: API endpoint (relative to store_url)
            params: Query parameters
            max_retries: Maximum retry attempts
            initial_delay: Initial retry delay in seconds
            backoff_factor: Backoff multiplier

        Returns:
            httpx.Response

        Raises:
            WooCommerceError: If request fails after retries
        """
        url = urljoin(self.store_url + '/', endpoint.lstrip('/'))
        auth = httpx.BasicAuth(self.consumer_key, self.consumer_secret)

        last_error = None

        for attempt in range(max_retries + 1):
            await self._wait_for_rate_limit()
            delay = min(initial_delay * (backoff_factor ** attempt), 60.0)

            try:
                response = await self.client.request(method=method, url=url, params=params, auth=auth)

                if response.status_code in (200, 201, 204):
                    return response

                # Non-retryable errors
                if response.status_code in (400, 401, 403, 404, 422):
                    raise WooCommerceError(f"HTTP {response.status_code}: {response.text[:200]}")

                # Retryable errors
                if response.status_code in (429, 500, 502, 503, 504):
                    last_error = f"HTTP {response.status_code}"
                    if attempt < max_retries:
                        logger.warning(f"{method} {endpoint} returned {response.status_code}, retrying in {delay:.1f}s")
                        await asyncio.sleep(delay + random.uniform(0, 0.4))
                        continue
                    raise WooCommerceError(
                        f"HTTP {response.status_code} after {max_retries} retries: {response.text[:200]}"
                    )

                raise WooCommerceError(f"Unexpected HTTP {response.status_code}: {response.text[:200]}")

            except httpx.TimeoutException as e:
                last_error = f"Timeout: {str(e)}"
                if attempt < max_retries:
                    await asyncio.sleep(delay)
                    continue
                raise WooCommerceError(f"Timeout after {max_retries} retries: {e}")

            except httpx.RequestError as e:
                last_error = f"Request error: {str(e)}"
                if attempt < max_retries:
                    await asyncio.sleep(delay)
                    continue
                raise WooCommerceError(f"Request error after {max_retries} retries: {e}")

        raise WooCommerceError(f"Request failed after {max_retries} retries: {last_error}")

    async def _get_all_pages(self, endpoint: str, params: Optional[Dict] = None) -> List[Dict[str, Any]]:
        """GET every page of a list endpoint."""
        items: List[Dict[str, Any]] = []
        page = 1
        while True:
            page_params = dict(params or {})
            page_params.update({"per_page": PER_PAGE, "page": page})
            response = await self._request("GET", endpoint, params=page_params)
            page_items = response.json()
            if not isinstance(page_items, list) or not page_items:
                break
            items.extend(page_items)

            total_pages = int(response.headers.get("X-WP-TotalPages", 0) or 0)
            if len(page_items) < PER_PAGE or (total_pages and page >= total_pages):
                break
            page += 1
        return items

    async def get_published_products(self) -> List[Dict[str, Any]]:
        """All published products (simple, variable, ...) in store order."""
        return await self._get_all_pages(
            "/wp-json/wc/v3/products",
            params={"status": "publish", "orderby": "id", "order": "asc"}
        )

    async def get_product(self, product_id: int) -> Dict[str, Any]:
        response = await self._request("GET", f"/wp-json/wc/v3/products/{product_id}")
        return response.json()

    async def get_product_variations(self, product_id: int) -> List[Dict[str, Any]]:
        """All variations of a variable product."""
        return await self._get_all_pages(f"/wp-json/wc/v3/products/{product_id}/variations")

    async def get_all_categories(self) -> List[Dict[str, Any]]:
        return await self._get_all_pages("/wp-json/wc/v3/products/categories")

    async def get_setting(self, group: str, option: str, default: str = '') -> str:
        """
        Read a single store setting value, e.g. ('general', 'woocommerce_currency').

        Falls back to default when the setting cannot be read.
        """
        try:
            response = await self._request("GET", f"/wp-json/wc/v3/settings/{group}/{option}", max_retries=1)
        except WooCommerceError as e:
            logger.warning(f"Could not read setting {group}/{option}: {e}")
            return default
        data = response.json()
        value = data.get("value") if isinstance(data, dict) else None
        return str(value) if value else default

    async def close(self):
        """Close HTTP client."""
        await self.client.aclose()
