import pytest

import catalog
from errors import CatalogError, InvalidIdError, ProductNotFoundError

PRODUCTS = [
    {"_id": 1, "title": "Men Tee", "price": 500, "category": "tshirt", "gender": "men"},
    {"_id": 2, "title": "Women Joggers", "price": 1200, "category": "joggers", "gender": "women"},
    {"_id": 3, "title": "Men Joggers", "price": 900, "category": "joggers", "gender": "men"},
    {"_id": 4, "title": "Women Tee", "price": 450, "category": "tshirt", "gender": "women"},
    {"_id": 5, "title": "Men Tee 2", "price": 700, "category": "tshirt", "gender": "men"},
]


def titles(products):
    return [p["title"] for p in products]


def test_no_filters_returns_everything_in_store_order():
    assert titles(catalog.filter_products(PRODUCTS)) == titles(PRODUCTS)


def test_all_means_no_filter():
    assert catalog.filter_products(PRODUCTS, gender="All", category="All") == PRODUCTS


def test_filter_by_gender_and_category():
    result = catalog.filter_products(PRODUCTS, gender="men", category="tshirt")
    assert titles(result) == ["Men Tee", "Men Tee 2"]


def test_sort_by_price():
    low = catalog.filter_products(PRODUCTS, sort="lowToHigh")
    high = catalog.filter_products(PRODUCTS, sort="highToLow")
    assert [p["price"] for p in low] == [450, 500, 700, 900, 1200]
    assert [p["price"] for p in high] == [1200, 900, 700, 500, 450]


def test_unknown_sort_order():
    with pytest.raises(CatalogError):
        catalog.filter_products(PRODUCTS, sort="newest")


def test_filtering_does_not_mutate_input():
    before = list(PRODUCTS)
    catalog.filter_products(PRODUCTS, sort="highToLow")
    assert PRODUCTS == before


def test_facets_keep_first_seen_order():
    assert catalog.facets(PRODUCTS) == {
        "categories": ["All", "tshirt", "joggers"],
        "genders": ["All", "men", "women"],
    }


def test_featured_limits_section():
    assert titles(catalog.featured(PRODUCTS, "men", "tshirt", limit=1)) == ["Men Tee"]


def test_home_sections():
    sections = catalog.home_sections(PRODUCTS)
    assert [s["label"] for s in sections] == [
        "Men's T-Shirts", "Men's Joggers", "Women's T-Shirts", "Women's Joggers",
    ]
    assert titles(sections[1]["products"]) == ["Men Joggers"]


def test_related_excludes_the_product_itself():
    result = catalog.related(PRODUCTS, PRODUCTS[0])
    assert titles(result) == ["Women Tee", "Men Tee 2"]


def test_related_limit():
    assert len(catalog.related(PRODUCTS, PRODUCTS[0], limit=1)) == 1


def test_heading():
    assert catalog.title_heading("men", "tshirt") == "Men's Tshirts"
    assert catalog.title_heading("men", None) == "All Products"
    assert catalog.title_heading("All", "joggers") == "All Products"


def test_get_product(db, make_product):
    product_id = make_product(title="Tee")
    assert catalog.get_product(db, product_id)["title"] == "Tee"


def test_get_product_errors(db):
    with pytest.raises(InvalidIdError):
        catalog.get_product(db, "not-an-id")
    with pytest.raises(ProductNotFoundError):
        catalog.get_product(db, "0123456789abcdef01234567")
