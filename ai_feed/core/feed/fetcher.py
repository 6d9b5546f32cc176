"""
Fetch the catalog from WooCommerce into a CatalogSnapshot.
"""

import logging
import re
from datetime import date, datetime
from typing import Any, Dict, List, Optional

import httpx

from ai_feed.core.utils import parse_int
from ai_feed.core.woo_client import WooClient, WooCommerceError
from .models import CategoryTerm, ProductRecord
from .source import CatalogSnapshot


logger = logging.getLogger(__name__)


def normalize_attribute_name(name: str) -> str:
    """'pa_brand' / 'attribute_pa_size' / 'Size System' -> 'brand' / 'size' / 'size_system'."""
    key = (name or '').strip().lower()
    if key.startswith('attribute_'):
        key = key[len('attribute_'):]
    if key.startswith('pa_'):
        key = key[len('pa_'):]
    return re.sub(r'[\s\-]+', '_', key)


def parse_attributes(raw_attributes: Any) -> Dict[str, str]:
    """
    Attribute list -> {normalized name: value}.

    Products carry 'options' (joined with ', '), variations a single 'option'.
    """
    attributes: Dict[str, str] = {}
    for attr in raw_attributes or []:
        if not isinstance(attr, dict):
            continue
        key = normalize_attribute_name(attr.get('slug') or attr.get('name', ''))
        if not key or key in attributes:
            continue
        if 'option' in attr:
            value = str(attr.get('option') or '')
        else:
            value = ', '.join(str(o) for o in (attr.get('options') or []) if o)
        if value:
            attributes[key] = value
    return attributes


def parse_date(value: Any) -> Optional[date]:
    """'2024-05-01T00:00:00' -> date(2024, 5, 1); None when missing or invalid."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value)[:19]).date()
    except ValueError:
        return None


def parse_meta(raw_meta: Any) -> Dict[str, Any]:
    meta: Dict[str, Any] = {}
    for item in raw_meta or []:
        if isinstance(item, dict) and item.get('key'):
            meta[item['key']] = item.get('value')
    return meta


def _variation_name(variation: Dict[str, Any], parent: Optional[Dict[str, Any]]) -> str:
    name = variation.get('name')
    if name:
        return name
    parent_name = (parent or {}).get('name', '')
    options = [str(a.get('option')) for a in variation.get('attributes') or [] if isinstance(a, dict) and a.get('option')]
    if parent_name and options:
        return f"{parent_name} - {', '.join(options)}"
    return parent_name


def to_product_record(
    data: Dict[str, Any],
    media: Dict[int, str],
    parent: Optional[Dict[str, Any]] = None
) -> ProductRecord:
    """
    Convert WooCommerce product/variation JSON to a ProductRecord.

    Image URLs are collected into media as a side effect.
    """
    product_type = data.get('type') or ('variation' if parent else 'simple')

    image_id = 0
    gallery_ids: List[int] = []
    if isinstance(data.get('image'), dict):
        # Variations carry a single image object
        img = data['image']
        image_id = parse_int(img.get('id')) or 0
        if image_id and img.get('src'):
            media[image_id] = img['src']
    for index, img in enumerate(data.get('images') or []):
        if not isinstance(img, dict):
            continue
        img_id = parse_int(img.get('id')) or 0
        if not img_id:
            continue
        if img.get('src'):
            media[img_id] = img['src']
        if index == 0:
            image_id = img_id
        else:
            gallery_ids.append(img_id)

    if product_type == 'variation':
        name = _variation_name(data, parent)
    else:
        name = data.get('name') or ''

    category_ids = [
        parse_int(c.get('id')) for c in data.get('categories') or []
        if isinstance(c, dict) and parse_int(c.get('id'))
    ]
    dimensions = data.get('dimensions') or {}
    stock_quantity = data.get('stock_quantity')

    return ProductRecord(
        id=parse_int(data.get('id')) or 0,
        type=product_type,
        status=data.get('status') or 'publish',
        sku=data.get('sku') or '',
        parent_id=parse_int(data.get('parent_id')) or (parse_int(parent.get('id')) if parent else 0) or 0,
        name=name,
        description=data.get('description') or '',
        short_description=data.get('short_description') or '',
        permalink=data.get('permalink') or '',
        stock_status=data.get('stock_status') or '',
        stock_quantity=parse_int(stock_quantity) if stock_quantity is not None else None,
        regular_price=data.get('regular_price') or '',
        sale_price=data.get('sale_price') or '',
        date_on_sale_from=parse_date(data.get('date_on_sale_from')),
        date_on_sale_to=parse_date(data.get('date_on_sale_to')),
        weight=data.get('weight') or '',
        length=dimensions.get('length') or '',
        width=dimensions.get('width') or '',
        height=dimensions.get('height') or '',
        image_id=image_id,
        gallery_image_ids=gallery_ids,
        attributes=parse_attributes(data.get('attributes')),
        category_ids=category_ids,
        meta=parse_meta(data.get('meta_data')),
        children=[parse_int(v) for v in data.get('variations') or [] if parse_int(v)],
    )


def to_category_term(data: Dict[str, Any]) -> CategoryTerm:
    return CategoryTerm(
        id=parse_int(data.get('id')) or 0,
        name=data.get('name') or '',
        parent=parse_int(data.get('parent')) or 0,
    )


async def _load_store_units(client: WooClient) -> Dict[str, str]:
    return {
        'currency': await client.get_setting('general', 'woocommerce_currency', 'USD'),
        'weight_unit': await client.get_setting('products', 'woocommerce_weight_unit', 'kg'),
        'dimension_unit': await client.get_setting('products', 'woocommerce_dimension_unit', 'cm'),
    }


async def fetch_catalog(
    client: WooClient,
    product_ids: Optional[List[int]] = None
) -> CatalogSnapshot:
    """
    Fetch products, their variations and categories from WooCommerce.

    With product_ids, only those products (plus parents and variations they
    need) are fetched. Any API failure yields an unavailable snapshot so the
    feed degrades to an empty row list.
    """
    try:
        if product_ids:
            raw_products = []
            for product_id in product_ids:
                try:
                    raw_products.append(await client.get_product(product_id))
                except WooCommerceError as e:
                    logger.info(f"Product {product_id} could not be fetched: {e}")
        else:
            raw_products = await client.get_published_products()
        logger.info(f"Fetched {len(raw_products)} products from {client.store_url}")

        media: Dict[int, str] = {}
        products: List[ProductRecord] = []
        variations: List[ProductRecord] = []

        for raw in raw_products:
            if not isinstance(raw, dict):
                continue
            if raw.get('type') == 'variation':
                parent_raw = None
                parent_id = parse_int(raw.get('parent_id'))
                if parent_id:
                    parent_raw = await client.get_product(parent_id)
                    variations.append(to_product_record(parent_raw, media))
                products.append(to_product_record(raw, media, parent=parent_raw))
                continue

            product = to_product_record(raw, media)
            products.append(product)
            if product.is_type('variable') and product.children:
                raw_variations = await client.get_product_variations(product.id)
                logger.debug(f"Product {product.id}: {len(raw_variations)} variations")
                for raw_variation in raw_variations:
                    variations.append(to_product_record(raw_variation, media, parent=raw))

        categories = [to_category_term(c) for c in await client.get_all_categories() if isinstance(c, dict)]
        units = await _load_store_units(client)

    except (WooCommerceError, httpx.HTTPError, ValueError) as e:
        logger.error(f"Catalog fetch failed, product source unavailable: {e}")
        return CatalogSnapshot.unavailable()

    return CatalogSnapshot(
        products=products,
        variations=variations,
        media=media,
        categories=categories,
        **units
    )
