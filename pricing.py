"""
Cart and coupon arithmetic.

Items and coupons are plain dicts as they come out of the document store.
All money values are rounded to 2 decimals on the way out.
"""

from typing import Iterable, Optional

from errors import CouponError


def line_total(item: dict) -> float:
    return item["price"] * item["quantity"]


def cart_subtotal(items: Iterable[dict]) -> float:
    return round(sum(line_total(i) for i in items), 2)


def normalize_code(code: str) -> str:
    return (code or "").strip().upper()


def coupon_discount(coupon: dict, subtotal: float) -> float:
    """Discount a coupon grants on `subtotal`, never more than the subtotal."""
    if not coupon.get("is_active", True):
        raise CouponError(f"Coupon {coupon['code']} is no longer active")

    min_amount = coupon.get("min_amount") or 0
    if subtotal < min_amount:
        raise CouponError(
            f"Coupon {coupon['code']} requires a minimum order of {min_amount:g}"
        )

    if coupon.get("discount_type") == "flat":
        discount = coupon["discount"]
    else:
        discount = subtotal * coupon["discount"] / 100

    return round(min(discount, subtotal), 2)


def quote(items: Iterable[dict], coupon: Optional[dict] = None) -> dict:
    items = list(items)
    subtotal = cart_subtotal(items)
    discount = coupon_discount(coupon, subtotal) if coupon else 0.0
    return {
        "subtotal": subtotal,
        "discount": discount,
        "total": round(subtotal - discount, 2),
        "coupon_code": coupon["code"] if coupon else None,
    }


def find_coupon(db, code: str) -> dict:
    normalized = normalize_code(code)
    coupon = db["coupon"].find_one({"code": normalized}) if normalized else None
    if not coupon:
        raise CouponError("Invalid coupon code")
    return coupon
