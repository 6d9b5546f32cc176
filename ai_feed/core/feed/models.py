"""
Feed data models.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional, List, Dict, Any, Union


# A feed row maps field names to scalars or lists of scalars.
FeedRow = Dict[str, Any]

FEED_FORMATS = ('json', 'csv', 'xml', 'tsv')

AVAILABILITY_VALUES = ('in_stock', 'out_of_stock', 'preorder')

# Output schema, in emission order.
ROW_FIELDS = (
    'enable_search',
    'enable_checkout',
    'id',
    'gtin',
    'mpn',
    'title',
    'description',
    'link',
    'product_category',
    'brand',
    'material',
    'weight',
    'length',
    'width',
    'height',
    'image_link',
    'additional_image_link',
    'video_link',
    'model_3d_link',
    'price',
    'sale_price',
    'sale_price_effective_date',
    'availability',
    'inventory_quantity',
    'item_group_id',
    'item_group_title',
    'color',
    'size',
    'size_system',
    'gender',
    'seller_name',
    'seller_url',
    'seller_privacy_policy',
    'seller_tos',
    'return_policy',
    'return_window',
    'warning',
    'warning_url',
    'age_restriction',
    'q_and_a',
)

# Product custom fields read by the mapper
META_GTIN = '_gtin'
META_MPN = '_mpn'
META_BRAND = '_brand'
META_ENABLE_SEARCH = '_oapfw_enable_search'
META_ENABLE_CHECKOUT = '_oapfw_enable_checkout'
META_VIDEO_LINK = '_oapfw_video_link'
META_MODEL_3D_LINK = '_oapfw_model_3d_link'
META_WARNING = '_oapfw_warning'
META_WARNING_URL = '_oapfw_warning_url'
META_AGE_RESTRICTION = '_oapfw_age_restriction'
META_Q_AND_A = '_oapfw_q_and_a'


@dataclass(frozen=True)
class FeedSettings:
    """
    Settings snapshot for one feed build.

    Built once per request from the settings file and passed explicitly
    into the generator; never mutated during a build.
    """
    format: str = 'json'
    enable_search_default: bool = True
    enable_checkout_default: bool = False

    # Merchant info & returns
    seller_name: str = ''
    seller_url: str = ''
    privacy_url: str = ''
    tos_url: str = ''
    returns_url: str = ''
    return_window: int = 0  # days, 0 = not set

    # Push delivery
    delivery_enabled: bool = False
    endpoint_url: str = ''
    auth_token: str = ''

    # Pull endpoint
    pull_endpoint_enabled: bool = False
    pull_access_token: str = ''


@dataclass
class CategoryTerm:
    """Product category term. parent == 0 means top level."""
    id: int
    name: str
    parent: int = 0


@dataclass
class ProductRecord:
    """Read-only view of a WooCommerce product, variable product or variation."""
    # Identifiers
    id: int
    type: str = 'simple'  # 'simple', 'variable' or 'variation'
    status: str = 'publish'
    sku: str = ''
    parent_id: int = 0

    # Content
    name: str = ''
    description: str = ''
    short_description: str = ''
    permalink: str = ''

    # Stock
    stock_status: str = 'instock'  # 'instock', 'outofstock', 'onbackorder'
    stock_quantity: Optional[int] = None

    # Pricing (raw store strings, '' = not set)
    regular_price: Union[str, float, None] = ''
    sale_price: Union[str, float, None] = ''
    date_on_sale_from: Optional[date] = None
    date_on_sale_to: Optional[date] = None

    # Shipping
    weight: str = ''
    length: str = ''
    width: str = ''
    height: str = ''

    # Media (attachment ids, 0 = none)
    image_id: int = 0
    gallery_image_ids: List[int] = field(default_factory=list)

    # Attributes keyed by normalized name ('brand', 'color', ...)
    attributes: Dict[str, str] = field(default_factory=dict)
    category_ids: List[int] = field(default_factory=list)
    meta: Dict[str, Any] = field(default_factory=dict)

    # Variation ids for variable products
    children: List[int] = field(default_factory=list)

    def is_type(self, product_type: str) -> bool:
        return self.type == product_type

    def get_attribute(self, name: str) -> str:
        value = self.attributes.get(name)
        return str(value) if value else ''

    def get_meta(self, key: str) -> Any:
        return self.meta.get(key)


@dataclass
class RowReport:
    """Validation result for a single row."""
    id: str
    issues: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues
