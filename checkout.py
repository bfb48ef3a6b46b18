"""
Checkout: validate the cart against current stock, reserve stock, record the
order and empty the cart.

Stock is reserved with one conditional update per line
({"quantity": {"$gte": n}} + $inc), so two concurrent checkouts cannot both
take the last unit. If a later line loses that race the lines already
reserved are given back before the error is raised.
"""

import logging
from typing import List, Optional

import pricing
from cart import clear_cart, get_cart
from database import create_document, to_object_id
from errors import OrderError, OutOfStockError, ProductNotFoundError
from schemas import ORDER_PENDING, PAYMENT_COD, PAYMENT_PREPAID, Order

logger = logging.getLogger("storefront.checkout")


def validate_stock(db, items: List[dict]) -> None:
    for item in items:
        product = db["product"].find_one({"_id": to_object_id(item["product_id"], "product id")})
        if not product:
            raise ProductNotFoundError(f'Product "{item["title"]}" not found.')
        if product.get("quantity", 0) < item["quantity"]:
            raise OutOfStockError(
                f'Not enough stock for "{item["title"]}". Only {product.get("quantity", 0)} left.'
            )


def restock(db, items: List[dict]) -> None:
    for item in items:
        db["product"].update_one(
            {"_id": to_object_id(item["product_id"], "product id")},
            {"$inc": {"quantity": item["quantity"]}},
        )
    if items:
        logger.info("Restocked %d line(s)", len(items))


def reserve_stock(db, items: List[dict]) -> None:
    reserved = []
    for item in items:
        result = db["product"].update_one(
            {
                "_id": to_object_id(item["product_id"], "product id"),
                "quantity": {"$gte": item["quantity"]},
            },
            {"$inc": {"quantity": -item["quantity"]}},
        )
        if result.modified_count != 1:
            restock(db, reserved)
            logger.warning("Stock for %s ran out during checkout", item["product_id"])
            raise OutOfStockError(f'Not enough stock for "{item["title"]}".')
        reserved.append(item)


def place_order(db, user: dict, address: str, payment_method: str = PAYMENT_COD,
                coupon_code: Optional[str] = None) -> dict:
    if not address or not address.strip():
        raise OrderError("Please enter your address.")
    if payment_method == PAYMENT_PREPAID:
        raise OrderError("Prepaid payments are coming soon, please choose cash on delivery.")
    if payment_method != PAYMENT_COD:
        raise OrderError(f"Unknown payment method: {payment_method}")

    items = get_cart(db, user["uid"])
    if not items:
        raise OrderError("Your cart is empty.")

    validate_stock(db, items)
    coupon = pricing.find_coupon(db, coupon_code) if coupon_code else None
    totals = pricing.quote(items, coupon)

    order = Order(
        user_id=user["uid"],
        email=user.get("email"),
        items=items,
        subtotal=totals["subtotal"],
        coupon_code=totals["coupon_code"],
        discount=totals["discount"],
        total_amount=totals["total"],
        address=address.strip(),
        payment_method=payment_method,
        status=ORDER_PENDING,
    )

    reserve_stock(db, items)
    try:
        order_id = create_document("order", order, target=db)
    except Exception:
        restock(db, items)
        raise

    clear_cart(db, user["uid"])
    logger.info("Order %s placed by %s, total %.2f", order_id, user["uid"], order.total_amount)
    return db["order"].find_one({"_id": to_object_id(order_id)})
