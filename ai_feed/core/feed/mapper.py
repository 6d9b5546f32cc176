"""
Map WooCommerce products to feed rows.

One row per sellable unit: a simple product, or a variation mapped against
its variable parent. Missing data never raises; it just leaves the field
empty so the generator can drop it.
"""

from datetime import date, datetime
from typing import Any, Callable, List, Optional

from ai_feed.core.utils import absint, bool_string, clean_url, is_blank, strip_tags, truncate_chars
from .models import (
    FeedRow,
    FeedSettings,
    ProductRecord,
    META_AGE_RESTRICTION,
    META_BRAND,
    META_ENABLE_CHECKOUT,
    META_ENABLE_SEARCH,
    META_GTIN,
    META_MODEL_3D_LINK,
    META_MPN,
    META_Q_AND_A,
    META_VIDEO_LINK,
    META_WARNING,
    META_WARNING_URL,
)
from .source import ProductSource


TITLE_MAX_CHARS = 150
DESCRIPTION_MAX_CHARS = 5000
MPN_FALLBACK = 'N/A'

# (row, product, parent, settings) -> row
RowHook = Callable[[FeedRow, ProductRecord, Optional[ProductRecord], FeedSettings], FeedRow]


def product_sku(product: ProductRecord) -> str:
    """SKU, or a synthetic 'wc-<id>' when the product has none."""
    return product.sku or f'wc-{product.id}'


def map_availability(stock_status: str) -> str:
    if stock_status == 'instock':
        return 'in_stock'
    if stock_status == 'outofstock':
        return 'out_of_stock'
    return 'preorder'


def coalesce(*lookups: Callable[[], Any]) -> Any:
    """Call lookups in order and return the first non-empty result."""
    for lookup in lookups:
        value = lookup()
        if not is_blank(value):
            return value
    return None


def normalize_row(row: FeedRow) -> FeedRow:
    """
    Enforce row-level feed rules in place.

    - enable_search / enable_checkout become 'true' | 'false' strings
    - checkout requires search; checkout is switched off otherwise
    - title and description are cut to their character limits
    - mpn is 'N/A' when neither gtin nor mpn is set
    """
    search = row.get('enable_search')
    checkout = row.get('enable_checkout')
    row['enable_search'] = 'false' if search is not None and str(search).lower() != 'true' else 'true'
    row['enable_checkout'] = 'true' if checkout is not None and str(checkout).lower() == 'true' else 'false'
    if row['enable_checkout'] == 'true' and row['enable_search'] != 'true':
        row['enable_checkout'] = 'false'

    if row.get('title'):
        row['title'] = truncate_chars(row['title'], TITLE_MAX_CHARS)
    if row.get('description'):
        row['description'] = truncate_chars(row['description'], DESCRIPTION_MAX_CHARS)

    if not row.get('gtin') and not row.get('mpn'):
        row['mpn'] = MPN_FALLBACK
    return row


def _format_price(amount: Any, currency: str) -> Optional[str]:
    if is_blank(amount):
        return None
    return f'{amount} {currency}'


def _format_date(value: Any) -> str:
    if isinstance(value, (date, datetime)):
        return value.strftime('%Y-%m-%d')
    return str(value)[:10]


def _with_unit(value: Any, unit: str) -> Optional[str]:
    if is_blank(value):
        return None
    return f'{value} {unit}'.strip()


class RowMapper:
    """Builds feed rows from product records read through a ProductSource."""

    def __init__(self, source: ProductSource, hooks: Optional[List[RowHook]] = None):
        self.source = source
        self.hooks: List[RowHook] = list(hooks or [])

    def add_hook(self, hook: RowHook) -> None:
        self.hooks.append(hook)

    def map(
        self,
        product: ProductRecord,
        parent: Optional[ProductRecord],
        settings: FeedSettings
    ) -> FeedRow:
        currency = self.source.currency
        weight_unit = self.source.weight_unit
        dimension_unit = self.source.dimension_unit

        # Media falls back to the parent only when the product has none of its own
        image_id = product.image_id or (parent.image_id if parent else 0)
        main_image = self.source.image_url(image_id) if image_id else ''
        gallery_ids = list(product.gallery_image_ids)
        if not gallery_ids and parent:
            gallery_ids = list(parent.gallery_image_ids)
        gallery_urls = [url for url in (self.source.image_url(i) for i in gallery_ids) if url]

        regular = product.regular_price
        sale = product.sale_price
        sale_from = product.date_on_sale_from
        sale_to = product.date_on_sale_to
        sale_window = None
        if not is_blank(sale) and sale_from and sale_to:
            sale_window = f'{_format_date(sale_from)} / {_format_date(sale_to)}'

        brand = coalesce(
            lambda: product.get_attribute('brand'),
            lambda: parent.get_attribute('brand') if parent else None,
            lambda: product.get_meta(META_BRAND),
        )

        gtin = product.get_meta(META_GTIN) or None
        mpn = None if gtin else (product.get_meta(META_MPN) or None)

        warning = product.get_meta(META_WARNING)
        q_and_a = product.get_meta(META_Q_AND_A)

        row: FeedRow = {
            # Feed flags
            'enable_search': settings.enable_search_default,
            'enable_checkout': settings.enable_checkout_default,

            # Basic product data
            'id': product_sku(product),
            'gtin': gtin,
            'mpn': mpn,
            'title': strip_tags(product.name),
            'description': truncate_chars(
                strip_tags(product.description or product.short_description),
                DESCRIPTION_MAX_CHARS
            ),
            'link': product.permalink,

            # Item information
            'product_category': self.category_path(product),
            'brand': brand,
            'material': product.get_attribute('material') or None,
            'weight': _with_unit(product.weight, weight_unit),
            'length': _with_unit(product.length, dimension_unit),
            'width': _with_unit(product.width, dimension_unit),
            'height': _with_unit(product.height, dimension_unit),

            # Media
            'image_link': main_image,
            'additional_image_link': gallery_urls,
            'video_link': clean_url(product.get_meta(META_VIDEO_LINK)) or None,
            'model_3d_link': clean_url(product.get_meta(META_MODEL_3D_LINK)) or None,

            # Price & promotions
            'price': _format_price(regular, currency),
            'sale_price': _format_price(sale, currency),
            'sale_price_effective_date': sale_window,

            # Availability & inventory
            'availability': map_availability(product.stock_status),
            'inventory_quantity': product.stock_quantity if product.stock_quantity is not None else 0,

            # Variants
            'item_group_id': product_sku(parent) if parent else None,
            'item_group_title': strip_tags(parent.name) if parent else None,
            'color': product.get_attribute('color') or None,
            'size': product.get_attribute('size') or None,
            'size_system': product.get_attribute('size_system') or None,
            'gender': product.get_attribute('gender') or None,

            # Merchant info & returns
            'seller_name': settings.seller_name or None,
            'seller_url': settings.seller_url or None,
            'seller_privacy_policy': settings.privacy_url or None,
            'seller_tos': settings.tos_url or None,
            'return_policy': settings.returns_url or None,
            'return_window': settings.return_window or None,

            # Compliance
            'warning': strip_tags(warning) if warning else None,
            'warning_url': clean_url(product.get_meta(META_WARNING_URL)) or None,
            'age_restriction': absint(product.get_meta(META_AGE_RESTRICTION)) or None,

            'q_and_a': strip_tags(q_and_a) if q_and_a else None,
        }

        # Per-product flag overrides
        override_search = product.get_meta(META_ENABLE_SEARCH)
        override_checkout = product.get_meta(META_ENABLE_CHECKOUT)
        if not is_blank(override_search):
            row['enable_search'] = bool_string(override_search)
        if not is_blank(override_checkout):
            row['enable_checkout'] = bool_string(override_checkout)

        row = normalize_row(row)

        for hook in self.hooks:
            row = hook(row, product, parent, settings)
        return row

    def category_path(self, product: ProductRecord) -> Optional[str]:
        """
        'Top > Mid > Leaf' for the deepest assigned category.

        On equal depth the later term wins.
        """
        terms = [t for t in (self.source.get_category(i) for i in product.category_ids) if t]
        if not terms:
            return None

        chosen = None
        chosen_depth = 0
        for term in terms:
            depth = self._depth(term)
            if chosen is None or depth >= chosen_depth:
                chosen = term
                chosen_depth = depth

        path = [chosen.name]
        seen = {chosen.id}
        term = chosen
        while term.parent:
            parent_term = self.source.get_category(term.parent)
            if parent_term is None or parent_term.id in seen:
                break
            seen.add(parent_term.id)
            path.insert(0, parent_term.name)
            term = parent_term
        return ' > '.join(path)

    def _depth(self, term) -> int:
        """Number of parent links above term, counting an unresolvable last link."""
        depth = 0
        seen = {term.id}
        while term and term.parent:
            depth += 1
            parent_term = self.source.get_category(term.parent)
            if parent_term is None or parent_term.id in seen:
                break
            seen.add(parent_term.id)
            term = parent_term
        return depth
