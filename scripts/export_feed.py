#!/usr/bin/env python3
"""
Build the product feed from the configured WooCommerce store and write it out.

Usage:
    python scripts/export_feed.py --format csv --output feed.csv
    python scripts/export_feed.py --product-id 42 --validate
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add parent directory to path to import ai_feed modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from ai_feed import deps
from ai_feed.config import load_feed_settings
from ai_feed.core.feed.generator import FeedGenerator
from ai_feed.core.feed.serializer import serialize
from ai_feed.core.feed.validator import validate_rows


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Export the AI product feed")
    parser.add_argument("--format", help="json, csv, tsv or xml (default: feed settings format)")
    parser.add_argument("--product-id", type=int, help="Only build rows for this product")
    parser.add_argument("--output", "-o", help="Write payload to this file instead of stdout")
    parser.add_argument("--validate", action="store_true", help="Print validation issues to stderr")
    parser.add_argument("--settings", help="Path to feed settings JSON file")
    return parser.parse_args(argv)


async def export(args) -> int:
    settings = load_feed_settings(args.settings)

    if args.product_id is not None:
        source = await deps.load_product_source([args.product_id])
        rows = FeedGenerator(source, settings).build_for_product_id(args.product_id)
    else:
        source = await deps.load_product_source()
        rows = FeedGenerator(source, settings).build_feed()

    payload, content_type = serialize(rows, args.format or settings.format)

    if args.output:
        Path(args.output).write_text(payload, encoding="utf-8")
        print(f"✅ Wrote {len(rows)} rows ({content_type}) to {args.output}", file=sys.stderr)
    else:
        sys.stdout.write(payload)

    if args.validate:
        reports = validate_rows(rows, only_failing=True)
        for report in reports:
            print(f"⚠️ {report.id}: {'; '.join(report.issues)}", file=sys.stderr)
        print(f"{len(reports)} of {len(rows)} rows have issues", file=sys.stderr)

    return 0


def main(argv=None):
    args = parse_args(argv)
    try:
        sys.exit(asyncio.run(export(args)))
    except ValueError as e:
        print(f"❌ Error: {str(e)}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
