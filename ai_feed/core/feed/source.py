"""
Product source: the read interface the feed core consumes.
"""

from typing import Dict, Iterable, List, Optional, Protocol

from .models import CategoryTerm, ProductRecord


SELLABLE_TYPES = ('simple', 'variable', 'variation')


class ProductSource(Protocol):
    """Read-only access to the store catalog."""

    currency: str
    weight_unit: str
    dimension_unit: str

    def is_available(self) -> bool: ...

    def query_products(self) -> List[ProductRecord]: ...

    def get_product(self, product_id: int) -> Optional[ProductRecord]: ...

    def get_children(self, product: ProductRecord) -> List[ProductRecord]: ...

    def image_url(self, image_id: int) -> str: ...

    def get_category(self, term_id: int) -> Optional[CategoryTerm]: ...


class CatalogSnapshot:
    """
    In-memory ProductSource.

    `products` holds the records returned by the catalog query, in order.
    Variations fetched only as children of a variable product live in
    `variations` so they are not emitted twice.
    """

    def __init__(
        self,
        products: Optional[Iterable[ProductRecord]] = None,
        variations: Optional[Iterable[ProductRecord]] = None,
        media: Optional[Dict[int, str]] = None,
        categories: Optional[Iterable[CategoryTerm]] = None,
        currency: str = 'USD',
        weight_unit: str = 'kg',
        dimension_unit: str = 'cm',
        available: bool = True
    ):
        self.products: Dict[int, ProductRecord] = {p.id: p for p in (products or [])}
        self.variations: Dict[int, ProductRecord] = {v.id: v for v in (variations or [])}
        self.media: Dict[int, str] = dict(media or {})
        self.categories: Dict[int, CategoryTerm] = {c.id: c for c in (categories or [])}
        self.currency = currency
        self.weight_unit = weight_unit
        self.dimension_unit = dimension_unit
        self.available = available

    @classmethod
    def unavailable(cls) -> 'CatalogSnapshot':
        return cls(available=False)

    def is_available(self) -> bool:
        return self.available

    def query_products(self) -> List[ProductRecord]:
        """Published sellable products in catalog order."""
        return [
            p for p in self.products.values()
            if p.status == 'publish' and p.type in SELLABLE_TYPES
        ]

    def get_product(self, product_id: int) -> Optional[ProductRecord]:
        return self.products.get(product_id) or self.variations.get(product_id)

    def get_children(self, product: ProductRecord) -> List[ProductRecord]:
        children = []
        for child_id in product.children:
            child = self.get_product(child_id)
            if child is not None:
                children.append(child)
        return children

    def image_url(self, image_id: int) -> str:
        if not image_id:
            return ''
        return self.media.get(image_id, '')

    def get_category(self, term_id: int) -> Optional[CategoryTerm]:
        return self.categories.get(term_id)
