"""
Database helpers

A single MongoClient is shared by the whole process. `db` stays None when
DATABASE_URL / DATABASE_NAME are not configured; route handlers answer 500
in that case. Tests swap `database.db` for an in-memory database.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel
from pymongo import MongoClient

import settings
from errors import InvalidIdError

logger = logging.getLogger("storefront.database")

db = None

if settings.DATABASE_URL and settings.DATABASE_NAME:
    client = MongoClient(settings.DATABASE_URL)
    db = client[settings.DATABASE_NAME]
    logger.info("Connected to database %s", settings.DATABASE_NAME)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_object_id(value: str, label: str = "id") -> ObjectId:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise InvalidIdError(f"Invalid {label}")


def canonical_id(value: str, label: str = "id") -> str:
    """Lower-case hex form of an ObjectId string, as stored in carts and favorites"""
    return str(to_object_id(value, label))


def create_document(collection_name: str, data, target=None) -> str:
    """Insert a document with created_at/updated_at stamps, return its id"""
    target = db if target is None else target
    if target is None:
        raise Exception("Database not available")

    if isinstance(data, BaseModel):
        data_dict = data.model_dump()
    else:
        data_dict = data.copy()

    now = utcnow()
    data_dict.setdefault("created_at", now)
    data_dict["updated_at"] = now

    result = target[collection_name].insert_one(data_dict)
    return str(result.inserted_id)


def get_documents(collection_name: str, filter_dict: Optional[dict] = None,
                  limit: Optional[int] = None, sort=None, target=None):
    target = db if target is None else target
    if target is None:
        raise Exception("Database not available")

    cursor = target[collection_name].find(filter_dict or {})
    if sort:
        cursor = cursor.sort(sort)
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)


def ensure_indexes(target=None):
    target = db if target is None else target
    if target is None:
        return
    target["coupon"].create_index("code", unique=True)
    target["order"].create_index([("user_id", 1), ("created_at", -1)])


def serialize_id(value):
    if isinstance(value, ObjectId):
        return str(value)
    return value


def serialize_document(doc: dict) -> dict:
    if not doc:
        return doc
    doc = {**doc}
    if doc.get("_id") is not None:
        doc["id"] = serialize_id(doc.pop("_id"))
    # Convert nested ObjectIds / embedded documents (orders inside users)
    for k, v in list(doc.items()):
        if isinstance(v, ObjectId):
            doc[k] = str(v)
        elif isinstance(v, dict):
            doc[k] = serialize_document(v)
        elif isinstance(v, list):
            doc[k] = [serialize_document(i) if isinstance(i, dict) else serialize_id(i) for i in v]
    return doc
