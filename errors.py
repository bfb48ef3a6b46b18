"""
Domain errors raised by the service modules.

Each carries the HTTP status it maps to; main.py turns them into
{"detail": ...} responses the same way FastAPI renders HTTPException.
"""


class StoreError(Exception):
    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class InvalidIdError(StoreError):
    pass


class CatalogError(StoreError):
    pass


class CartError(StoreError):
    pass


class CouponError(StoreError):
    pass


class OrderError(StoreError):
    pass


class OutOfStockError(StoreError):
    status_code = 409


class ProductNotFoundError(StoreError):
    status_code = 404


class OrderNotFoundError(StoreError):
    status_code = 404


class CouponNotFoundError(StoreError):
    status_code = 404
