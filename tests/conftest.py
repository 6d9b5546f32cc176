from datetime import date

import pytest

from ai_feed.core.feed.models import CategoryTerm, FeedSettings, ProductRecord
from ai_feed.core.feed.source import CatalogSnapshot


IMG = "https://shop.example.com/wp-content/uploads"


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def settings():
    return FeedSettings(
        seller_name="Example Shop",
        seller_url="https://shop.example.com",
        privacy_url="https://shop.example.com/privacy",
        tos_url="https://shop.example.com/terms",
        returns_url="https://shop.example.com/returns",
        return_window=30,
    )


@pytest.fixture
def categories():
    return [
        CategoryTerm(id=1, name="Clothing", parent=0),
        CategoryTerm(id=2, name="Shirts", parent=1),
        CategoryTerm(id=3, name="T-Shirts", parent=2),
        CategoryTerm(id=4, name="Sale", parent=0),
        CategoryTerm(id=5, name="Mugs", parent=6),
        CategoryTerm(id=6, name="Kitchen", parent=0),
    ]


@pytest.fixture
def media():
    return {
        10: f"{IMG}/shirt.jpg",
        11: f"{IMG}/shirt-back.jpg",
        12: f"{IMG}/shirt-side.jpg",
        13: f"{IMG}/shirt-blue.jpg",
        20: f"{IMG}/mug.jpg",
    }


@pytest.fixture
def simple_product():
    return ProductRecord(
        id=100,
        type="simple",
        sku="ABC-1",
        name="Coffee Mug",
        description="<p>A sturdy <strong>ceramic</strong> mug.</p>",
        permalink="https://shop.example.com/product/coffee-mug/",
        stock_status="instock",
        stock_quantity=12,
        regular_price="19.99",
        image_id=20,
        category_ids=[5],
    )


@pytest.fixture
def variable_product():
    return ProductRecord(
        id=200,
        type="variable",
        sku="SHIRT",
        name="Basic Shirt",
        description="Cotton shirt.",
        permalink="https://shop.example.com/product/basic-shirt/",
        image_id=10,
        gallery_image_ids=[11, 12],
        attributes={"brand": "Acme", "material": "Cotton"},
        category_ids=[4, 3],
        children=[201, 202],
    )


@pytest.fixture
def red_variation():
    return ProductRecord(
        id=201,
        type="variation",
        parent_id=200,
        sku="SHIRT-RED-M",
        name="Basic Shirt - Red, M",
        description="Red shirt, size M.",
        permalink="https://shop.example.com/product/basic-shirt/?attribute_pa_color=red",
        stock_status="instock",
        stock_quantity=3,
        regular_price="25",
        attributes={"color": "Red", "size": "M"},
    )


@pytest.fixture
def blue_variation():
    return ProductRecord(
        id=202,
        type="variation",
        parent_id=200,
        sku="",
        name="Basic Shirt - Blue, L",
        description="Blue shirt, size L.",
        permalink="https://shop.example.com/product/basic-shirt/?attribute_pa_color=blue",
        stock_status="onbackorder",
        regular_price="25",
        sale_price="20",
        date_on_sale_from=date(2024, 6, 1),
        date_on_sale_to=date(2024, 6, 30),
        image_id=13,
        attributes={"color": "Blue", "size": "L"},
    )


@pytest.fixture
def catalog(simple_product, variable_product, red_variation, blue_variation, media, categories):
    return CatalogSnapshot(
        products=[simple_product, variable_product],
        variations=[red_variation, blue_variation],
        media=media,
        categories=categories,
        currency="USD",
        weight_unit="kg",
        dimension_unit="cm",
    )
