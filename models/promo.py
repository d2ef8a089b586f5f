# models/promo.py
from mongoengine import (
    Document, StringField, DateTimeField, IntField, FloatField,
    LazyReferenceField, ValidationError
)

from models.admin import Admin
from utils.dates import utcnow

ACTIVE = "active"
INACTIVE = "inactive"
EXPIRED = "expired"
STATUSES = (ACTIVE, INACTIVE, EXPIRED)

PERCENTAGE = "percentage"
FIXED = "fixed"
DISCOUNT_TYPES = (PERCENTAGE, FIXED)

UNLIMITED = -1
CODE_MAX_LENGTH = 20


def normalize_code(raw) -> str:
    return (raw or "").strip().upper()


class PromoCode(Document):
    """
    A time-boxed, usage-capped discount rule.

    discount_type:
      - percentage: `value` percent of the eligible amount, capped by `max_discount`
      - fixed: `value` off, never more than the eligible amount
    usage_limit of -1 means unlimited. `status` is a cached view of the
    date window and is refreshed by services.promo_status on writes and reads.
    """
    code = StringField(required=True, unique=True, max_length=CODE_MAX_LENGTH)
    discount_type = StringField(required=True, choices=DISCOUNT_TYPES)
    value = FloatField(required=True, min_value=0)
    min_purchase = FloatField(default=0, min_value=0)
    max_discount = FloatField(min_value=0)          # percentage codes only
    usage_limit = IntField(default=UNLIMITED, min_value=UNLIMITED)
    used_count = IntField(default=0, min_value=0)
    start_date = DateTimeField(required=True)
    end_date = DateTimeField(required=True)
    status = StringField(choices=STATUSES, default=ACTIVE)
    created_by = LazyReferenceField(Admin, required=True)
    created_at = DateTimeField(default=utcnow)
    updated_at = DateTimeField(default=utcnow)

    meta = {
        "collection": "promo_codes",
        "indexes": ["status", ("start_date", "end_date")],
    }

    def clean(self):
        if self.code:
            self.code = normalize_code(self.code)
        if self.discount_type == PERCENTAGE and self.value is not None and not 0 <= self.value <= 100:
            raise ValidationError("Percentage must be 0-100, fixed amount must be positive")
        if self.start_date and self.end_date and self.end_date <= self.start_date:
            raise ValidationError("End date must be after start date")
        self.updated_at = utcnow()

    def __str__(self):
        return self.code
