"""
Database Schemas

Define your MongoDB collection schemas here using Pydantic models.
Each Pydantic model represents a collection in your database.
Model name is converted to lowercase for the collection name:
- User -> "user" collection
- Product -> "product" collection
- Cart -> "cart" collection
- Favorites -> "favorites" collection
- Coupon -> "coupon" collection
- Order -> "order" collection

Request bodies used only by the API live at the bottom of the file.
"""

from typing import List, Literal, Optional
from pydantic import BaseModel, Field, field_validator, model_validator

ROLE_USER = "User"
ROLE_ADMIN = "Admin"

ORDER_PENDING = "pending"
ORDER_DELIVERED = "delivered"
ORDER_CANCELLED = "cancelled"
ORDER_STATUSES = (ORDER_PENDING, ORDER_DELIVERED, ORDER_CANCELLED)

PAYMENT_COD = "cod"
PAYMENT_PREPAID = "prepaid"

# -----------------------------
# USERS
# -----------------------------
class User(BaseModel):
    email: Optional[str] = Field(None, description="Email address")
    name: str = Field("", description="Display name")
    avatar: str = Field("", description="Avatar URL")
    role: Literal["User", "Admin"] = Field(ROLE_USER, description="Access role")

# -----------------------------
# PRODUCTS
# -----------------------------
class Product(BaseModel):
    title: str = Field(..., description="Product title")
    description: Optional[str] = Field(None, description="Product description")
    price: float = Field(..., ge=0, description="Unit price")
    quantity: int = Field(0, ge=0, description="Units in stock")
    category: str = Field(..., description="Product category, e.g. tshirt")
    gender: str = Field(..., description="Target gender, e.g. men / women")
    main_image: Optional[str] = Field(None, description="Primary image URL")
    images: List[str] = Field(default_factory=list, description="Gallery image URLs")

    @field_validator("images")
    @classmethod
    def strip_images(cls, value: List[str]) -> List[str]:
        return [url.strip() for url in value if url and url.strip()]

# -----------------------------
# CARTS
# -----------------------------
class CartItem(BaseModel):
    product_id: str
    title: str
    price: float = Field(ge=0)
    quantity: int = Field(ge=1)
    image: Optional[str] = None

class Cart(BaseModel):
    items: List[CartItem] = Field(default_factory=list)

# -----------------------------
# FAVORITES
# -----------------------------
class Favorites(BaseModel):
    items: List[str] = Field(default_factory=list, description="Product ids")

# -----------------------------
# COUPONS
# -----------------------------
class Coupon(BaseModel):
    code: str = Field(..., min_length=1, description="Upper-case coupon code")
    discount_type: Literal["percent", "flat"] = "percent"
    discount: float = Field(..., gt=0)
    min_amount: float = Field(0, ge=0, description="Minimum subtotal")
    is_active: bool = True

    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: str) -> str:
        value = value.strip().upper()
        if not value:
            raise ValueError("Coupon code is required")
        return value

    @model_validator(mode="after")
    def check_percent(self):
        if self.discount_type == "percent" and self.discount > 100:
            raise ValueError("Percent discount cannot exceed 100")
        return self

# -----------------------------
# ORDERS
# -----------------------------
class Order(BaseModel):
    user_id: str
    email: Optional[str] = None
    items: List[CartItem]
    subtotal: float = Field(ge=0)
    coupon_code: Optional[str] = None
    discount: float = Field(0, ge=0)
    total_amount: float = Field(ge=0)
    address: str
    payment_method: Literal["cod", "prepaid"] = PAYMENT_COD
    status: Literal["pending", "delivered", "cancelled"] = ORDER_PENDING


# -----------------------------
# Request bodies
# -----------------------------
class ProductUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    quantity: Optional[int] = Field(None, ge=0)
    category: Optional[str] = None
    gender: Optional[str] = None
    main_image: Optional[str] = None
    images: Optional[List[str]] = None


class AddToCartIn(BaseModel):
    product_id: str


class QuantityIn(BaseModel):
    quantity: int


class StockIn(BaseModel):
    quantity: int = Field(ge=0)


class QuoteIn(BaseModel):
    coupon_code: Optional[str] = None


class CheckoutIn(BaseModel):
    address: str
    payment_method: str = PAYMENT_COD
    coupon_code: Optional[str] = None


class OrderStatusIn(BaseModel):
    status: Literal["pending", "delivered", "cancelled"]


class ProfileIn(BaseModel):
    name: str = Field(..., min_length=1)
    avatar: str = Field(..., min_length=1)

    @field_validator("name", "avatar")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Please fill all fields")
        return value
