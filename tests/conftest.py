"""
Shared fixtures: an in-memory MongoDB (mongomock) behind mongoengine, plus
factories for admins, promo codes, products and carts.
"""
from datetime import timedelta

import mongomock
import pytest
from mongoengine import connect, disconnect

from models.admin import Admin
from models.product import Product
from models.promo import PromoCode
from utils.dates import utcnow

TEST_DB = "promo_codes_test"


@pytest.fixture(autouse=True)
def db():
    disconnect()
    conn = connect(TEST_DB, host="mongodb://localhost", mongo_client_class=mongomock.MongoClient)
    yield conn
    conn.drop_database(TEST_DB)
    disconnect()


@pytest.fixture
def now():
    return utcnow()


@pytest.fixture
def admin():
    return Admin(email="ops@example.com", name="Ops Team").save()


@pytest.fixture
def make_promo(admin):
    def _make(code="SAVE10", **overrides):
        current = utcnow()
        fields = {
            "code": code,
            "discount_type": "percentage",
            "value": 10,
            "min_purchase": 0,
            "usage_limit": -1,
            "used_count": 0,
            "start_date": current - timedelta(days=1),
            "end_date": current + timedelta(days=30),
            "status": "active",
            "created_by": admin,
        }
        fields.update(overrides)
        return PromoCode(**fields).save()
    return _make


@pytest.fixture
def make_product():
    def _make(price=100.0, eligible=True, coupons=(), name="Cotton Tee"):
        return Product(
            name=name,
            price=price,
            is_coupon_eligible=eligible,
            applicable_coupons=[c.id for c in coupons],
        ).save()
    return _make


def cart_line(product, quantity=1, price=None):
    return {
        "productId": str(product.id),
        "price": product.price if price is None else price,
        "quantity": quantity,
    }
