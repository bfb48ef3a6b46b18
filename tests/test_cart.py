import pytest

import cart
import favorites
from errors import CartError, ProductNotFoundError


def test_empty_cart(db):
    assert cart.get_cart(db, "user-1") == []


def test_add_new_item_snapshots_product(db, make_product):
    product_id = make_product(title="Tee", price=499.0, main_image="tee.webp")
    items = cart.add_item(db, "user-1", product_id)
    assert items == [{
        "product_id": product_id, "title": "Tee", "price": 499.0, "quantity": 1, "image": "tee.webp",
    }]
    assert cart.get_cart(db, "user-1") == items


def test_adding_again_increments_quantity(db, make_product):
    product_id = make_product()
    cart.add_item(db, "user-1", product_id)
    items = cart.add_item(db, "user-1", product_id)
    assert len(items) == 1
    assert items[0]["quantity"] == 2


def test_one_cart_document_per_user(db, make_product):
    first, second = make_product(), make_product(title="Other")
    cart.add_item(db, "user-1", first)
    cart.add_item(db, "user-1", second)
    cart.add_item(db, "user-2", first)
    assert db["cart"].count_documents({}) == 2
    assert len(cart.get_cart(db, "user-1")) == 2


def test_add_unknown_product(db):
    with pytest.raises(ProductNotFoundError):
        cart.add_item(db, "user-1", "0123456789abcdef01234567")


def test_remove_item(db, make_product):
    first, second = make_product(), make_product(title="Other")
    cart.add_item(db, "user-1", first)
    cart.add_item(db, "user-1", second)
    items = cart.remove_item(db, "user-1", first)
    assert [i["product_id"] for i in items] == [second]


def test_update_quantity(db, make_product):
    product_id = make_product()
    cart.add_item(db, "user-1", product_id)
    assert cart.update_quantity(db, "user-1", product_id, 5)[0]["quantity"] == 5


def test_quantity_below_one_is_ignored(db, make_product):
    product_id = make_product()
    cart.add_item(db, "user-1", product_id)
    assert cart.update_quantity(db, "user-1", product_id, 0)[0]["quantity"] == 1
    assert cart.get_cart(db, "user-1")[0]["quantity"] == 1


def test_update_quantity_of_missing_line(db):
    with pytest.raises(CartError):
        cart.update_quantity(db, "user-1", "0123456789abcdef01234567", 2)


def test_clear_cart(db, make_product):
    cart.add_item(db, "user-1", make_product())
    assert cart.clear_cart(db, "user-1") == []
    assert db["cart"].find_one({"_id": "user-1"})["items"] == []


# -----------------------------
# Favorites
# -----------------------------
def test_favorites_document_is_created_on_first_read(db):
    assert favorites.get_favorites(db, "user-1") == []
    assert db["favorites"].find_one({"_id": "user-1"}) == {"_id": "user-1", "items": []}


def test_toggle_favorite(db, make_product):
    product_id = make_product()
    assert favorites.toggle_favorite(db, "user-1", product_id) == [product_id]
    assert favorites.toggle_favorite(db, "user-1", product_id) == []


def test_toggle_unknown_product(db):
    with pytest.raises(ProductNotFoundError):
        favorites.toggle_favorite(db, "user-1", "0123456789abcdef01234567")


def test_favorite_products_resolve_in_chunks(db, make_product):
    ids = [make_product(title=f"Tee {i}") for i in range(12)]
    products = favorites.favorite_products(db, ids + ["garbage"])
    assert sorted(p["title"] for p in products) == sorted(f"Tee {i}" for i in range(12))


def test_remove_and_update_accept_any_id_spelling(db, make_product):
    product_id = make_product()
    cart.add_item(db, "user-1", product_id)
    assert cart.update_quantity(db, "user-1", product_id.upper(), 3)[0]["quantity"] == 3
    assert cart.remove_item(db, "user-1", product_id.upper()) == []


def test_favorite_is_stored_once_whatever_the_id_spelling(db, make_product):
    product_id = make_product()
    assert favorites.toggle_favorite(db, "user-1", product_id) == [product_id]
    assert favorites.toggle_favorite(db, "user-1", product_id.upper()) == []
    assert favorites.toggle_favorite(db, "user-1", product_id.upper()) == [product_id]


def test_repeated_first_reads_keep_one_favorites_document(db, make_product):
    assert favorites.get_favorites(db, "user-1") == []
    assert favorites.get_favorites(db, "user-1") == []
    product_id = make_product()
    favorites.toggle_favorite(db, "user-1", product_id)
    assert favorites.get_favorites(db, "user-1") == [product_id]
    assert db["favorites"].count_documents({"_id": "user-1"}) == 1
