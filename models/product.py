from mongoengine import (
    Document, StringField, FloatField, BooleanField, ListField, ObjectIdField,
    DateTimeField
)

from utils.dates import utcnow


class Product(Document):
    """
    Catalog entry, read-only as far as promo codes are concerned.

    A product takes a discount from a code only when `is_coupon_eligible`
    is set AND the code's id is listed in `applicable_coupons`. An empty
    list means no code applies.
    """
    name = StringField(required=True)
    price = FloatField(required=True, min_value=0)
    vendor_id = StringField()
    is_coupon_eligible = BooleanField(default=False)
    applicable_coupons = ListField(ObjectIdField(), default=list)
    created_at = DateTimeField(default=utcnow)

    meta = {"collection": "products"}

    def accepts_coupon(self, promo_id) -> bool:
        return bool(self.is_coupon_eligible) and promo_id in (self.applicable_coupons or [])
