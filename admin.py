"""
Admin console operations: dashboard numbers, users with their orders,
coupon management and product stock management.
"""

import logging
from collections import defaultdict
from typing import List

from pymongo.errors import DuplicateKeyError

import settings
from catalog import get_product
from database import create_document, to_object_id, utcnow
from errors import CatalogError, CouponError, CouponNotFoundError
from orders import NEWEST_FIRST
from schemas import ORDER_CANCELLED, ORDER_STATUSES, Coupon, Product, ProductUpdate

logger = logging.getLogger("storefront.admin")

RECENT_ORDERS = 5


# -----------------------------
# Dashboard
# -----------------------------
def dashboard_stats(db) -> dict:
    orders = list(db["order"].find({}).sort(NEWEST_FIRST))

    revenue = 0.0
    revenue_by_month = defaultdict(float)
    status_count = {status: 0 for status in ORDER_STATUSES}

    for order in orders:
        status_count[order["status"]] = status_count.get(order["status"], 0) + 1
        if order["status"] == ORDER_CANCELLED:
            continue
        amount = order.get("total_amount") or 0
        revenue += amount
        created_at = order.get("created_at")
        if created_at:
            revenue_by_month[created_at.strftime("%Y-%m")] += amount

    return {
        "users": db["user"].count_documents({}),
        "products": db["product"].count_documents({}),
        "orders": len(orders),
        "revenue": round(revenue, 2),
        "revenue_by_month": {month: round(v, 2) for month, v in sorted(revenue_by_month.items())},
        "order_status_count": status_count,
        "recent_orders": orders[:RECENT_ORDERS],
    }


def users_with_orders(db) -> List[dict]:
    by_user = defaultdict(list)
    for order in db["order"].find({}).sort(NEWEST_FIRST):
        by_user[order["user_id"]].append(order)
    return [
        {**user, "orders": by_user.get(user["_id"], [])}
        for user in db["user"].find({})
    ]


# -----------------------------
# Coupons
# -----------------------------
def list_coupons(db) -> List[dict]:
    return list(db["coupon"].find({}).sort(NEWEST_FIRST))


def create_coupon(db, coupon: Coupon) -> dict:
    if db["coupon"].find_one({"code": coupon.code}):
        raise CouponError("Coupon with this code already exists!")
    try:
        coupon_id = create_document("coupon", coupon, target=db)
    except DuplicateKeyError:
        raise CouponError("Coupon with this code already exists!")
    logger.info("Coupon %s created", coupon.code)
    return db["coupon"].find_one({"_id": to_object_id(coupon_id)})


def delete_coupon(db, coupon_id: str) -> None:
    result = db["coupon"].delete_one({"_id": to_object_id(coupon_id, "coupon id")})
    if result.deleted_count != 1:
        raise CouponNotFoundError("Coupon not found")
    logger.info("Coupon %s deleted", coupon_id)


# -----------------------------
# Products
# -----------------------------
def list_products(db) -> List[dict]:
    return list(db["product"].find({}).sort([("created_at", 1)]))


def create_product(db, product: Product) -> dict:
    product_id = create_document("product", product, target=db)
    logger.info("Product %s created", product_id)
    return db["product"].find_one({"_id": to_object_id(product_id)})


def update_product(db, product_id: str, changes: ProductUpdate) -> dict:
    product = get_product(db, product_id)
    update = changes.model_dump(exclude_unset=True, exclude_none=True)
    if "images" in update:
        update["images"] = [url.strip() for url in update["images"] if url and url.strip()]
    update["updated_at"] = utcnow()
    db["product"].update_one({"_id": product["_id"]}, {"$set": update})
    return get_product(db, product_id)


def set_stock(db, product_id: str, quantity: int) -> dict:
    if quantity < 0:
        raise CatalogError("Stock cannot be negative")
    product = get_product(db, product_id)
    db["product"].update_one(
        {"_id": product["_id"]},
        {"$set": {"quantity": quantity, "updated_at": utcnow()}},
    )
    logger.info("Stock of %s set to %d", product_id, quantity)
    return get_product(db, product_id)


def toggle_stock(db, product_id: str) -> dict:
    product = get_product(db, product_id)
    quantity = 0 if product.get("quantity", 0) > 0 else settings.RESTOCK_QUANTITY
    return set_stock(db, product_id, quantity)
