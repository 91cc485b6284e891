import threading
import uuid
from concurrent.futures import ThreadPoolExecutor

import pytest

from database import SessionLocal
from models.product import Product
from models.users import User
from repositories.products import ProductRepository
from utils.errors import ProductUnavailable


def _purchase(client, product, account=None):
    headers = account["headers"] if account else {}
    return client.post(f"/products/{product['id']}/purchase", headers=headers)


def test_purchase_takes_one_unit(client, seller, buyer, create_product):
    product = create_product(seller, quantity=2)

    resp = _purchase(client, product, buyer)

    assert resp.status_code == 200
    assert resp.json()["quantity"] == 1
    assert client.get(f"/products/{product['id']}").json()["quantity"] == 1


def test_purchase_of_last_unit_then_out_of_stock(client, seller, buyer, create_product):
    product = create_product(seller, quantity=1)

    assert _purchase(client, product, buyer).json()["quantity"] == 0

    resp = _purchase(client, product, buyer)
    assert resp.status_code == 409
    assert client.get(f"/products/{product['id']}").json()["quantity"] == 0


def test_product_created_without_stock_cannot_be_bought(client, seller, buyer, create_product):
    product = create_product(seller, quantity=0)
    assert _purchase(client, product, buyer).status_code == 409


def test_inactive_product_cannot_be_bought(client, seller, buyer, create_product):
    product = create_product(seller, quantity=3)
    client.patch(f"/products/{product['id']}", json={"is_active": False}, headers=seller["headers"])

    assert _purchase(client, product, buyer).status_code == 404


def test_seller_cannot_buy_own_inactive_product(client, seller, create_product):
    product = create_product(seller, quantity=3)
    client.patch(f"/products/{product['id']}", json={"is_active": False}, headers=seller["headers"])

    resp = _purchase(client, product, seller)

    assert resp.status_code == 404
    assert client.get(f"/products/{product['id']}", headers=seller["headers"]).json()["quantity"] == 3


def test_unknown_product_is_not_found(client, buyer):
    assert _purchase(client, {"id": str(uuid.uuid4())}, buyer).status_code == 404


def test_anonymous_purchase_is_rejected(client, seller, create_product):
    product = create_product(seller, quantity=3)

    assert _purchase(client, product).status_code == 403
    assert client.get(f"/products/{product['id']}").json()["quantity"] == 3


def test_buyer_cannot_set_quantity_directly(client, seller, buyer, create_product):
    product = create_product(seller, quantity=3)

    resp = client.patch(f"/products/{product['id']}", json={"quantity": 100}, headers=buyer["headers"])

    assert resp.status_code == 404
    assert client.get(f"/products/{product['id']}").json()["quantity"] == 3


def test_stale_read_cannot_oversell(seller, buyer, create_product):
    product = create_product(seller, quantity=1)
    product_id = uuid.UUID(product["id"])

    first, second = SessionLocal(), SessionLocal()
    try:
        # Both sessions have seen one unit in stock
        first_user = first.get(User, buyer["uuid"])
        second_user = second.get(User, buyer["uuid"])
        assert first.get(Product, product_id).quantity == 1
        assert second.get(Product, product_id).quantity == 1

        assert ProductRepository(second, second_user).purchase(product_id).quantity == 0
        with pytest.raises(ProductUnavailable):
            ProductRepository(first, first_user).purchase(product_id)
    finally:
        first.close()
        second.close()


def test_concurrent_purchases_of_last_unit(seller, buyer, signup, create_product):
    other_buyer = signup("buyer2@example.com")
    product = create_product(seller, quantity=1)
    product_id = uuid.UUID(product["id"])
    barrier = threading.Barrier(2)

    def attempt(user_id):
        session = SessionLocal()
        try:
            user = session.get(User, user_id)
            barrier.wait()
            try:
                ProductRepository(session, user).purchase(product_id)
                return True
            except ProductUnavailable:
                return False
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=2) as pool:
        results = list(pool.map(attempt, [buyer["uuid"], other_buyer["uuid"]]))

    assert sorted(results) == [False, True]

    session = SessionLocal()
    try:
        assert session.get(Product, product_id).quantity == 0
    finally:
        session.close()
