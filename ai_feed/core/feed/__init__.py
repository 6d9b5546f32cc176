"""
Feed generation core module.
"""

from .models import FeedRow, FeedSettings, ProductRecord, CategoryTerm, RowReport
from .source import ProductSource, CatalogSnapshot
from .mapper import RowMapper
from .validator import validate_row, validate_rows
from .serializer import serialize
from .generator import FeedGenerator
from .fetcher import fetch_catalog

__all__ = [
    'FeedRow',
    'FeedSettings',
    'ProductRecord',
    'CategoryTerm',
    'RowReport',
    'ProductSource',
    'CatalogSnapshot',
    'RowMapper',
    'validate_row',
    'validate_rows',
    'serialize',
    'FeedGenerator',
    'fetch_catalog',
]
