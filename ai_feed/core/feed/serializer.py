"""
Feed serialization: JSON (default), CSV, TSV and XML.
"""

import csv
import io
import json
import re
from typing import Any, List, Tuple
from xml.dom import minidom

from .models import FEED_FORMATS, FeedRow


CONTENT_TYPES = {
    'json': 'application/json',
    'csv': 'text/csv',
    'tsv': 'text/tab-separated-values',
    'xml': 'application/xml',
}

FILE_EXTENSIONS = {
    'json': 'json',
    'csv': 'csv',
    'tsv': 'tsv',
    'xml': 'xml',
}

# Characters outside the XML 1.0 Char production
INVALID_XML_CHARS = re.compile(r'[^\x09\x0A\x0D\x20-\uD7FF\uE000-\uFFFD\U00010000-\U0010FFFF]')


def normalize_format(fmt: Any) -> str:
    """Lower-cased format name; anything unsupported falls back to 'json'."""
    fmt = str(fmt or '').strip().lower()
    return fmt if fmt in FEED_FORMATS else 'json'


def serialize(rows: List[FeedRow], fmt: str = 'json') -> Tuple[str, str]:
    """
    Serialize feed rows.

    Args:
        rows: Feed rows, in output order
        fmt: 'json', 'csv', 'tsv' or 'xml'; unknown values use 'json'

    Returns:
        (payload, content_type)
    """
    fmt = normalize_format(fmt)
    if fmt == 'csv':
        payload = to_csv(rows)
    elif fmt == 'tsv':
        payload = to_tsv(rows)
    elif fmt == 'xml':
        payload = to_xml(rows)
    else:
        payload = to_json(rows)
    return payload, CONTENT_TYPES[fmt]


def to_json(rows: List[FeedRow]) -> str:
    return json.dumps(rows, ensure_ascii=False, separators=(',', ':'))


def columns(rows: List[FeedRow]) -> List[str]:
    """First row's keys in order, then keys first seen in later rows."""
    cols: List[str] = []
    seen = set()
    for row in rows:
        for key in row:
            if key not in seen:
                seen.add(key)
                cols.append(key)
    return cols


def _flatten(value: Any) -> str:
    if value is None:
        return ''
    if isinstance(value, (list, tuple)):
        return ','.join(_flatten(v) for v in value)
    return INVALID_XML_CHARS.sub('', str(value))


def _table(rows: List[FeedRow]) -> Tuple[List[str], List[List[str]]]:
    cols = columns(rows)
    body = [[_flatten(row.get(col)) for col in cols] for row in rows]
    return cols, body


def to_csv(rows: List[FeedRow]) -> str:
    if not rows:
        return ''
    cols, body = _table(rows)
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator='\n')
    writer.writerow(cols)
    writer.writerows(body)
    return buffer.getvalue()


def to_tsv(rows: List[FeedRow]) -> str:
    if not rows:
        return ''
    cols, body = _table(rows)
    lines = ['\t'.join(cols)]
    lines.extend('\t'.join(values) for values in body)
    return '\n'.join(lines) + '\n'


def to_xml(rows: List[FeedRow]) -> str:
    doc = minidom.Document()
    root = doc.createElement('products')
    doc.appendChild(root)
    for row in rows:
        item = doc.createElement('product')
        for key, value in row.items():
            field = doc.createElement(key)
            text = _flatten(value)
            if text:
                field.appendChild(doc.createTextNode(text))
            item.appendChild(field)
        root.appendChild(item)
    return root.toxml()
