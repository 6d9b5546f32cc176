"""
Feed row validation.

Reports issues as human-readable strings. Rows are never modified or
rejected here; the report is advisory tooling for previews and the CLI.
"""

import re
from typing import List

from ai_feed.core.utils import is_blank, leading_number
from .models import AVAILABILITY_VALUES, FeedRow, RowReport


REQUIRED_FIELDS = ('id', 'title', 'description', 'link', 'image_link', 'price', 'availability')

GTIN_RE = re.compile(r'^\d{8,14}$', re.ASCII)


def validate_row(row: FeedRow) -> List[str]:
    """
    Validate a single feed row.

    Every rule is checked; an empty list means the row passes.
    """
    issues: List[str] = []

    for key in REQUIRED_FIELDS:
        if is_blank(row.get(key)):
            issues.append(f'Missing {key}')

    gtin = row.get('gtin')
    mpn = row.get('mpn')
    if not is_blank(gtin) and not GTIN_RE.match(str(gtin)):
        issues.append('gtin invalid (must be 8-14 digits)')
    if is_blank(gtin) and is_blank(mpn):
        issues.append('mpn required if gtin missing')

    sale_price = row.get('sale_price')
    price = row.get('price')
    if not is_blank(sale_price) and not is_blank(price):
        if leading_number(sale_price) > leading_number(price):
            issues.append('sale_price must be <= price')

    window = row.get('sale_price_effective_date')
    if not is_blank(window) and '/' in str(window):
        parts = [part.strip() for part in str(window).split('/')]
        start, end = parts[0], parts[1]
        # ISO dates compare correctly as strings
        if start and end and start > end:
            issues.append('sale window start must precede end')

    if row.get('enable_checkout') == 'true' and row.get('enable_search') != 'true':
        issues.append('enable_checkout requires enable_search=true')

    availability = row.get('availability')
    if not is_blank(availability):
        if availability not in AVAILABILITY_VALUES:
            issues.append('availability must be in_stock|out_of_stock|preorder')
        elif availability == 'preorder' and is_blank(row.get('availability_date')):
            issues.append('availability_date required for preorder')

    return issues


def validate_rows(rows: List[FeedRow], only_failing: bool = False) -> List[RowReport]:
    """Validate every row, pairing row ids with their issues."""
    reports = []
    for index, row in enumerate(rows):
        row_id = row.get('id') or f'#{index + 1}'
        report = RowReport(id=str(row_id), issues=validate_row(row))
        if only_failing and report.ok:
            continue
        reports.append(report)
    return reports
