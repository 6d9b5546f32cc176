"""
Feed generator - orchestrates product source, row mapper and row hooks.
"""

import logging
from typing import Callable, List, Optional

from ai_feed.core.utils import is_blank
from .mapper import RowMapper
from .models import FeedRow, FeedSettings, ProductRecord
from .source import ProductSource


logger = logging.getLogger(__name__)

# (rows) -> rows, applied to the complete row set
RowsHook = Callable[[List[FeedRow]], List[FeedRow]]


def strip_empty(row: FeedRow) -> FeedRow:
    """Drop None, '' and empty-list fields (sparse row)."""
    return {key: value for key, value in row.items() if not is_blank(value)}


class FeedGenerator:
    """
    Builds feed rows for one request.

    Construct a new generator per build with a fresh settings snapshot.
    """

    def __init__(
        self,
        source: ProductSource,
        settings: FeedSettings,
        mapper: Optional[RowMapper] = None,
        rows_hooks: Optional[List[RowsHook]] = None
    ):
        self.source = source
        self.settings = settings
        self.mapper = mapper or RowMapper(source)
        self.rows_hooks: List[RowsHook] = list(rows_hooks or [])

    def add_rows_hook(self, hook: RowsHook) -> None:
        self.rows_hooks.append(hook)

    def build_feed(self) -> List[FeedRow]:
        """
        Build rows for every published sellable product.

        Variable products are replaced by their variations, in place;
        the variable parent itself is not emitted.
        """
        if not self.source.is_available():
            logger.warning("Product source unavailable, returning empty feed")
            return []

        rows: List[FeedRow] = []
        for product in self.source.query_products():
            rows.extend(self._rows_for(product))

        logger.info(f"Built feed with {len(rows)} rows")
        return self._finish(rows)

    def build_for_product_id(self, product_id: int) -> List[FeedRow]:
        """
        Build rows for a single product.

        Returns all variations for a variable product, one row for a simple
        product or variation, and nothing for unknown or unpublished ids.
        """
        if not self.source.is_available():
            logger.warning("Product source unavailable, returning empty preview")
            return []

        product = self.source.get_product(product_id)
        if product is None or product.status != 'publish':
            logger.debug(f"Product {product_id} not found or not published")
            return []

        return self._finish(self._rows_for(product))

    def _rows_for(self, product: ProductRecord) -> List[FeedRow]:
        if product.is_type('variable'):
            return [
                self.mapper.map(child, product, self.settings)
                for child in self.source.get_children(product)
            ]
        if product.is_type('variation'):
            parent = self.source.get_product(product.parent_id) if product.parent_id else None
            return [self.mapper.map(product, parent, self.settings)]
        if product.is_type('simple'):
            return [self.mapper.map(product, None, self.settings)]
        logger.debug(f"Skipping product {product.id} with type '{product.type}'")
        return []

    def _finish(self, rows: List[FeedRow]) -> List[FeedRow]:
        rows = [strip_empty(row) for row in rows]
        for hook in self.rows_hooks:
            rows = hook(rows)
        return rows
