"""
Per-user cart, stored as one document keyed by the user's uid.

Every write replaces the whole item list, so the stored cart is always the
list the caller last saw plus one change.
"""

import logging
from typing import List

from catalog import get_product
from database import canonical_id, utcnow
from errors import CartError

logger = logging.getLogger("storefront.cart")


def get_cart(db, uid: str) -> List[dict]:
    doc = db["cart"].find_one({"_id": uid})
    return doc.get("items", []) if doc else []


def save_cart(db, uid: str, items: List[dict]) -> List[dict]:
    db["cart"].replace_one(
        {"_id": uid},
        {"_id": uid, "items": items, "updated_at": utcnow()},
        upsert=True,
    )
    return items


def add_item(db, uid: str, product_id: str) -> List[dict]:
    product = get_product(db, product_id)
    pid = str(product["_id"])
    items = get_cart(db, uid)

    if any(item["product_id"] == pid for item in items):
        items = [
            {**item, "quantity": item["quantity"] + 1} if item["product_id"] == pid else item
            for item in items
        ]
    else:
        items = items + [{
            "product_id": pid,
            "title": product["title"],
            "price": product["price"],
            "quantity": 1,
            "image": product.get("main_image"),
        }]

    logger.info("Added %s to cart of %s", pid, uid)
    return save_cart(db, uid, items)


def remove_item(db, uid: str, product_id: str) -> List[dict]:
    product_id = canonical_id(product_id, "product id")
    items = [item for item in get_cart(db, uid) if item["product_id"] != product_id]
    return save_cart(db, uid, items)


def update_quantity(db, uid: str, product_id: str, quantity: int) -> List[dict]:
    product_id = canonical_id(product_id, "product id")
    items = get_cart(db, uid)
    if quantity < 1:
        return items
    if not any(item["product_id"] == product_id for item in items):
        raise CartError("Item is not in the cart")

    items = [
        {**item, "quantity": quantity} if item["product_id"] == product_id else item
        for item in items
    ]
    return save_cart(db, uid, items)


def clear_cart(db, uid: str) -> List[dict]:
    logger.info("Cleared cart of %s", uid)
    return save_cart(db, uid, [])
