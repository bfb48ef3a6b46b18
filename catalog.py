"""
Product browsing predicates: filters, sort orders, facets, related items.
"""

from typing import List, Optional

from database import to_object_id
from errors import CatalogError, ProductNotFoundError

ALL = "All"

SORT_DEFAULT = "default"
SORT_LOW_TO_HIGH = "lowToHigh"
SORT_HIGH_TO_LOW = "highToLow"
SORT_ORDERS = (SORT_DEFAULT, SORT_LOW_TO_HIGH, SORT_HIGH_TO_LOW)

# Sections shown on the home page
HOME_SECTIONS = [
    {"gender": "men", "category": "tshirt", "label": "Men's T-Shirts"},
    {"gender": "men", "category": "joggers", "label": "Men's Joggers"},
    {"gender": "women", "category": "tshirt", "label": "Women's T-Shirts"},
    {"gender": "women", "category": "joggers", "label": "Women's Joggers"},
]


def _is_set(value: Optional[str]) -> bool:
    return bool(value) and value != ALL


def filter_products(products: List[dict], gender: Optional[str] = None,
                    category: Optional[str] = None, sort: str = SORT_DEFAULT) -> List[dict]:
    if sort not in SORT_ORDERS:
        raise CatalogError(f"Unknown sort order: {sort}")

    result = list(products)
    if _is_set(gender):
        result = [p for p in result if p.get("gender") == gender]
    if _is_set(category):
        result = [p for p in result if p.get("category") == category]

    if sort == SORT_LOW_TO_HIGH:
        result.sort(key=lambda p: p["price"])
    elif sort == SORT_HIGH_TO_LOW:
        result.sort(key=lambda p: p["price"], reverse=True)
    return result


def _distinct(products: List[dict], field: str) -> List[str]:
    seen = []
    for p in products:
        value = p.get(field)
        if value is not None and value not in seen:
            seen.append(value)
    return seen


def facets(products: List[dict]) -> dict:
    return {
        "categories": [ALL] + _distinct(products, "category"),
        "genders": [ALL] + _distinct(products, "gender"),
    }


def featured(products: List[dict], gender: str, category: str, limit: int = 4) -> List[dict]:
    return filter_products(products, gender=gender, category=category)[:limit]


def home_sections(products: List[dict], limit: int = 4) -> List[dict]:
    return [
        {**section, "products": featured(products, section["gender"], section["category"], limit)}
        for section in HOME_SECTIONS
    ]


def related(products: List[dict], product: dict, limit: int = 8) -> List[dict]:
    return [
        p for p in products
        if p.get("category") == product.get("category") and p.get("_id") != product.get("_id")
    ][:limit]


def title_heading(gender: Optional[str], category: Optional[str]) -> str:
    """Page heading, e.g. "Men's Tshirts" when both filters are concrete."""
    if _is_set(gender) and _is_set(category):
        return f"{gender.capitalize()}'s {category.capitalize()}s"
    return "All Products"


def get_product(db, product_id: str) -> dict:
    doc = db["product"].find_one({"_id": to_object_id(product_id, "product id")})
    if not doc:
        raise ProductNotFoundError("Product not found")
    return doc
