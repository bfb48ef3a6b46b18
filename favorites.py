from typing import List

from bson import ObjectId

from catalog import get_product
from database import canonical_id

# Ids resolved per product query
CHUNK_SIZE = 10


def get_favorites(db, uid: str) -> List[str]:
    db["favorites"].update_one({"_id": uid}, {"$setOnInsert": {"items": []}}, upsert=True)
    doc = db["favorites"].find_one({"_id": uid})
    return doc.get("items", [])


def toggle_favorite(db, uid: str, product_id: str) -> List[str]:
    product_id = canonical_id(product_id, "product id")
    favorites = get_favorites(db, uid)
    if product_id in favorites:
        updated = [pid for pid in favorites if pid != product_id]
    else:
        # Only real products can be favorited
        get_product(db, product_id)
        updated = favorites + [product_id]

    db["favorites"].update_one({"_id": uid}, {"$set": {"items": updated}}, upsert=True)
    return updated


def favorite_products(db, ids: List[str]) -> List[dict]:
    """Product documents for `ids`; ids that no longer exist are skipped."""
    object_ids = [ObjectId(pid) for pid in ids if ObjectId.is_valid(pid)]
    fetched = []
    for start in range(0, len(object_ids), CHUNK_SIZE):
        chunk = object_ids[start:start + CHUNK_SIZE]
        fetched.extend(db["product"].find({"_id": {"$in": chunk}}))
    return fetched
