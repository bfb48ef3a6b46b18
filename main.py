import logging
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import admin
import cart
import catalog
import checkout
import database
import favorites
import orders
import pricing
import settings
from auth import get_current_user, get_db, require_admin
from database import serialize_document, utcnow
from errors import StoreError
from logging_config import request_id_var, setup_logging
from schemas import (
    AddToCartIn,
    CheckoutIn,
    Coupon,
    OrderStatusIn,
    Product,
    ProductUpdate,
    ProfileIn,
    QuantityIn,
    QuoteIn,
    StockIn,
)

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger("storefront.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    database.ensure_indexes()
    yield


app = FastAPI(title=settings.API_TITLE, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    token = request_id_var.set(request_id)
    try:
        response = await call_next(request)
    finally:
        request_id_var.reset(token)
    response.headers["X-Request-ID"] = request_id
    return response


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


def serialize_product(doc: dict) -> dict:
    data = serialize_document(doc)
    data["in_stock"] = data.get("quantity", 0) > 0
    return data


def serialize_many(docs, serializer=serialize_document):
    return [serializer(d) for d in docs]


def cart_response(items):
    return {"items": items, **pricing.quote(items)}


# -----------------------------
# Basic routes
# -----------------------------
@app.get("/")
def read_root():
    return {"message": "Storefront backend is running"}


@app.get("/test")
def test_database():
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": None,
        "database_name": None,
        "connection_status": "Not Connected",
        "collections": []
    }
    db = database.db
    if db is not None:
        response["database"] = "✅ Available"
        response["database_url"] = "✅ Set" if settings.DATABASE_URL else "❌ Not Set"
        response["database_name"] = db.name
        response["connection_status"] = "Connected"
        try:
            response["collections"] = db.list_collection_names()[:10]
            response["database"] = "✅ Connected & Working"
        except Exception as e:
            logger.warning("Database check failed: %s", e)
            response["database"] = f"⚠️  Connected but Error: {str(e)[:50]}"
    return response


# -----------------------------
# Schema endpoint (for viewers/tools)
# -----------------------------
@app.get("/schema")
def get_schema():
    from schemas import Cart, Favorites, Order, User
    return {
        "user": User.model_json_schema(),
        "product": Product.model_json_schema(),
        "cart": Cart.model_json_schema(),
        "favorites": Favorites.model_json_schema(),
        "coupon": Coupon.model_json_schema(),
        "order": Order.model_json_schema(),
    }


# -----------------------------
# Product endpoints
# -----------------------------
@app.get("/api/products")
def list_products(gender: Optional[str] = None, category: Optional[str] = None,
                  sort: str = catalog.SORT_DEFAULT, db=Depends(get_db)):
    docs = database.get_documents("product", target=db)
    result = catalog.filter_products(docs, gender=gender, category=category, sort=sort)
    return {
        "products": serialize_many(result, serialize_product),
        "facets": catalog.facets(docs),
        "heading": catalog.title_heading(gender, category),
    }


@app.get("/api/products/featured")
def featured_products(db=Depends(get_db)):
    docs = database.get_documents("product", target=db)
    return [
        {**section, "products": serialize_many(section["products"], serialize_product)}
        for section in catalog.home_sections(docs)
    ]


@app.get("/api/products/{product_id}")
def get_product(product_id: str, db=Depends(get_db)):
    doc = catalog.get_product(db, product_id)
    same_category = database.get_documents("product", {"category": doc.get("category")}, target=db)
    result = serialize_product(doc)
    result["related"] = serialize_many(catalog.related(same_category, doc), serialize_product)
    return result


@app.post("/api/seed", status_code=201)
def seed_products(db=Depends(get_db), user=Depends(require_admin)):
    sample = [
        {
            "title": "Oversized Graphic Tee",
            "description": "Heavyweight cotton, drop shoulder, relaxed fit.",
            "price": 599.0,
            "quantity": 25,
            "category": "tshirt",
            "gender": "men",
            "main_image": "https://images.unsplash.com/photo-1521572163474-6864f9cf17ab?q=80&w=1200&auto=format&fit=crop",
            "images": [],
        },
        {
            "title": "Tapered Cargo Joggers",
            "description": "Stretch twill with six pockets and ribbed cuffs.",
            "price": 1299.0,
            "quantity": 15,
            "category": "joggers",
            "gender": "men",
            "main_image": "https://images.unsplash.com/photo-1552902865-b72c031ac5ea?q=80&w=1200&auto=format&fit=crop",
            "images": [],
        },
        {
            "title": "Boxy Crop Tee",
            "description": "Soft-washed jersey in a cropped boxy cut.",
            "price": 499.0,
            "quantity": 30,
            "category": "tshirt",
            "gender": "women",
            "main_image": "https://images.unsplash.com/photo-1503342217505-b0a15ec3261c?q=80&w=1200&auto=format&fit=crop",
            "images": [],
        },
        {
            "title": "Fleece Lounge Joggers",
            "description": "Brushed fleece, elastic waist, tapered leg.",
            "price": 1099.0,
            "quantity": 20,
            "category": "joggers",
            "gender": "women",
            "main_image": "https://images.unsplash.com/photo-1506629082955-511b1aa562c8?q=80&w=1200&auto=format&fit=crop",
            "images": [],
        }
    ]
    inserted = [database.create_document("product", Product(**p), target=db) for p in sample]
    docs = db["product"].find({"_id": {"$in": [database.to_object_id(i) for i in inserted]}})
    logger.info("Seeded %d products", len(inserted))
    return serialize_many(docs, serialize_product)


# -----------------------------
# Cart endpoints
# -----------------------------
@app.get("/api/cart")
def read_cart(db=Depends(get_db), user=Depends(get_current_user)):
    return cart_response(cart.get_cart(db, user["uid"]))


@app.post("/api/cart/items", status_code=201)
def add_to_cart(body: AddToCartIn, db=Depends(get_db), user=Depends(get_current_user)):
    return cart_response(cart.add_item(db, user["uid"], body.product_id))


@app.patch("/api/cart/items/{product_id}")
def update_cart_item(product_id: str, body: QuantityIn, db=Depends(get_db),
                     user=Depends(get_current_user)):
    return cart_response(cart.update_quantity(db, user["uid"], product_id, body.quantity))


@app.delete("/api/cart/items/{product_id}")
def remove_cart_item(product_id: str, db=Depends(get_db), user=Depends(get_current_user)):
    return cart_response(cart.remove_item(db, user["uid"], product_id))


@app.delete("/api/cart")
def clear_cart(db=Depends(get_db), user=Depends(get_current_user)):
    return cart_response(cart.clear_cart(db, user["uid"]))


@app.post("/api/cart/quote")
def quote_cart(body: QuoteIn, db=Depends(get_db), user=Depends(get_current_user)):
    items = cart.get_cart(db, user["uid"])
    coupon = pricing.find_coupon(db, body.coupon_code) if body.coupon_code else None
    return pricing.quote(items, coupon)


# -----------------------------
# Favorites endpoints
# -----------------------------
@app.get("/api/favorites")
def read_favorites(db=Depends(get_db), user=Depends(get_current_user)):
    ids = favorites.get_favorites(db, user["uid"])
    return {
        "items": ids,
        "products": serialize_many(favorites.favorite_products(db, ids), serialize_product),
    }


@app.post("/api/favorites/{product_id}")
def toggle_favorite(product_id: str, db=Depends(get_db), user=Depends(get_current_user)):
    ids = favorites.toggle_favorite(db, user["uid"], product_id)
    return {"items": ids, "is_favorite": database.canonical_id(product_id) in ids}


# -----------------------------
# Order endpoints
# -----------------------------
@app.post("/api/orders", status_code=201)
def create_order(body: CheckoutIn, db=Depends(get_db), user=Depends(get_current_user)):
    created = checkout.place_order(db, user, body.address, body.payment_method, body.coupon_code)
    result = serialize_document(created)
    result["message"] = "Order placed successfully"
    return result


@app.get("/api/orders")
def my_orders(status: Optional[str] = None, db=Depends(get_db), user=Depends(get_current_user)):
    return serialize_many(orders.list_orders_for_user(db, user["uid"], status))


@app.post("/api/orders/{order_id}/cancel")
def cancel_order(order_id: str, db=Depends(get_db), user=Depends(get_current_user)):
    return serialize_document(orders.cancel_order(db, user, order_id))


# -----------------------------
# Profile endpoints
# -----------------------------
@app.get("/api/profile")
def read_profile(user=Depends(get_current_user)):
    return user


@app.put("/api/profile")
def save_profile(body: ProfileIn, db=Depends(get_db), user=Depends(get_current_user)):
    db["user"].update_one(
        {"_id": user["uid"]},
        {"$set": {"name": body.name, "avatar": body.avatar, "updated_at": utcnow()}},
    )
    return {**user, "name": body.name, "avatar": body.avatar}


# -----------------------------
# Admin endpoints
# -----------------------------
@app.get("/api/admin/dashboard")
def admin_dashboard(db=Depends(get_db), user=Depends(require_admin)):
    stats = admin.dashboard_stats(db)
    stats["recent_orders"] = serialize_many(stats["recent_orders"])
    return stats


@app.get("/api/admin/users")
def admin_users(db=Depends(get_db), user=Depends(require_admin)):
    return serialize_many(admin.users_with_orders(db))


@app.get("/api/admin/orders")
def admin_orders(db=Depends(get_db), user=Depends(require_admin)):
    return serialize_many(orders.list_all_orders(db))


@app.patch("/api/admin/orders/{order_id}")
def admin_order_status(order_id: str, body: OrderStatusIn, db=Depends(get_db),
                       user=Depends(require_admin)):
    return serialize_document(orders.set_status(db, order_id, body.status))


@app.get("/api/admin/products")
def admin_products(db=Depends(get_db), user=Depends(require_admin)):
    return serialize_many(admin.list_products(db), serialize_product)


@app.post("/api/admin/products", status_code=201)
def admin_create_product(product: Product, db=Depends(get_db), user=Depends(require_admin)):
    return serialize_product(admin.create_product(db, product))


@app.put("/api/admin/products/{product_id}")
def admin_update_product(product_id: str, changes: ProductUpdate, db=Depends(get_db),
                         user=Depends(require_admin)):
    return serialize_product(admin.update_product(db, product_id, changes))


@app.patch("/api/admin/products/{product_id}/stock")
def admin_set_stock(product_id: str, body: StockIn, db=Depends(get_db),
                    user=Depends(require_admin)):
    return serialize_product(admin.set_stock(db, product_id, body.quantity))


@app.post("/api/admin/products/{product_id}/toggle-stock")
def admin_toggle_stock(product_id: str, db=Depends(get_db), user=Depends(require_admin)):
    return serialize_product(admin.toggle_stock(db, product_id))


@app.get("/api/admin/coupons")
def admin_coupons(db=Depends(get_db), user=Depends(require_admin)):
    return serialize_many(admin.list_coupons(db))


@app.post("/api/admin/coupons", status_code=201)
def admin_create_coupon(coupon: Coupon, db=Depends(get_db), user=Depends(require_admin)):
    return serialize_document(admin.create_coupon(db, coupon))


@app.delete("/api/admin/coupons/{coupon_id}", status_code=204)
def admin_delete_coupon(coupon_id: str, db=Depends(get_db), user=Depends(require_admin)):
    admin.delete_coupon(db, coupon_id)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)
