import logging
from typing import List, Optional

from checkout import restock
from database import to_object_id, utcnow
from errors import OrderError, OrderNotFoundError
from schemas import ORDER_CANCELLED, ORDER_DELIVERED, ORDER_PENDING, ORDER_STATUSES

logger = logging.getLogger("storefront.orders")

# status -> statuses it may move to
TRANSITIONS = {
    ORDER_PENDING: {ORDER_DELIVERED, ORDER_CANCELLED},
    ORDER_DELIVERED: {ORDER_CANCELLED},
    ORDER_CANCELLED: set(),
}

NEWEST_FIRST = [("created_at", -1)]


def list_orders_for_user(db, uid: str, status: Optional[str] = None) -> List[dict]:
    query = {"user_id": uid}
    if status and status != "all":
        if status not in ORDER_STATUSES:
            raise OrderError(f"Unknown order status: {status}")
        query["status"] = status
    return list(db["order"].find(query).sort(NEWEST_FIRST))


def list_all_orders(db) -> List[dict]:
    return list(db["order"].find({}).sort(NEWEST_FIRST))


def get_order(db, order_id: str) -> dict:
    order = db["order"].find_one({"_id": to_object_id(order_id, "order id")})
    if not order:
        raise OrderNotFoundError("Order not found")
    return order


def set_status(db, order_id: str, status: str) -> dict:
    order = get_order(db, order_id)
    current = order["status"]
    if status == current:
        return order
    if status not in TRANSITIONS.get(current, set()):
        raise OrderError(f"Cannot change a {current} order to {status}")

    # The filter on the old status makes the change (and the restock) happen once
    result = db["order"].update_one(
        {"_id": order["_id"], "status": current},
        {"$set": {"status": status, "updated_at": utcnow()}},
    )
    if result.modified_count != 1:
        raise OrderError("Order was modified concurrently, please retry")

    if status == ORDER_CANCELLED:
        restock(db, order["items"])
    logger.info("Order %s: %s -> %s", order_id, current, status)
    return get_order(db, order_id)


def cancel_order(db, user: dict, order_id: str) -> dict:
    order = get_order(db, order_id)
    if order["user_id"] != user["uid"]:
        # Other users' orders look like missing ones
        raise OrderNotFoundError("Order not found")
    if order["status"] != ORDER_PENDING:
        raise OrderError(f"Only pending orders can be cancelled, this one is {order['status']}")
    return set_status(db, order_id, ORDER_CANCELLED)
