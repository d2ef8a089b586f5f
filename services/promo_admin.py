# services/promo_admin.py
import logging
import math

from bson import ObjectId
from mongoengine import DoesNotExist, NotUniqueError, ValidationError as DocumentValidationError

from models.product import Product
from models.promo import (
    PromoCode, ACTIVE, INACTIVE, PERCENTAGE, FIXED, DISCOUNT_TYPES, UNLIMITED,
    CODE_MAX_LENGTH, normalize_code
)
from services.errors import (
    NotFoundError, ConflictError, ValidationError, MissingFieldError,
    InvalidDateRangeError, ValueOutOfRangeError, InvalidStatusError
)
from services.promo_status import resolve_status, refresh_status, is_expired, is_valid
from utils.dates import utcnow, parse_datetime, iso

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("code", "discountType", "value", "startDate", "endDate")


# --- field setters -------------------------------------------------------
# One setter per writable field: coerce the raw payload value, validate it,
# and assign it to the document. usedCount is deliberately absent.

def _number(raw, label):
    try:
        number = float(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"{label} must be a number")
    if not math.isfinite(number):
        raise ValidationError(f"{label} must be a number")
    return number


def _set_code(promo, raw):
    code = normalize_code(raw)
    if not code:
        raise MissingFieldError("Promo code is required")
    if len(code) > CODE_MAX_LENGTH:
        raise ValidationError(f"Code cannot exceed {CODE_MAX_LENGTH} characters")
    promo.code = code


def _set_discount_type(promo, raw):
    if raw not in DISCOUNT_TYPES:
        raise ValidationError("Discount type must be percentage or fixed")
    promo.discount_type = raw


def _set_value(promo, raw):
    promo.value = _number(raw, "Discount value")


def _set_min_purchase(promo, raw):
    amount = 0.0 if raw in (None, "") else _number(raw, "Minimum purchase")
    if amount < 0:
        raise ValidationError("Minimum purchase must be positive")
    promo.min_purchase = amount


def _set_max_discount(promo, raw):
    amount = None if raw in (None, "") else _number(raw, "Maximum discount")
    if amount is not None and amount < 0:
        raise ValidationError("Maximum discount must be positive")
    promo.max_discount = amount or None


def _set_usage_limit(promo, raw):
    if raw in (None, ""):
        promo.usage_limit = UNLIMITED
        return
    try:
        limit = int(raw)
    except (TypeError, ValueError):
        raise ValidationError("Usage limit must be a whole number")
    if limit < UNLIMITED:
        raise ValidationError("Usage limit must be -1 (unlimited) or positive")
    promo.usage_limit = limit


def _date_setter(attr, label):
    def setter(promo, raw):
        try:
            parsed = parse_datetime(raw)
        except ValueError:
            raise ValidationError(f"{label} is not a valid date")
        if parsed is None:
            raise MissingFieldError(f"{label} is required")
        setattr(promo, attr, parsed)
    return setter


def _set_status(promo, raw):
    check_status_change(promo, raw)
    promo.status = raw


FIELD_SETTERS = {
    "code": _set_code,
    "discountType": _set_discount_type,
    "value": _set_value,
    "minPurchase": _set_min_purchase,
    "maxDiscount": _set_max_discount,
    "usageLimit": _set_usage_limit,
    "startDate": _date_setter("start_date", "Start date"),
    "endDate": _date_setter("end_date", "End date"),
    "status": _set_status,
}


def apply_fields(promo, data):
    for field, setter in FIELD_SETTERS.items():
        if field in data and data[field] is not None:
            setter(promo, data[field])


def check_invariants(promo):
    if promo.end_date <= promo.start_date:
        raise InvalidDateRangeError()
    if promo.discount_type == PERCENTAGE and not 0 <= promo.value <= 100:
        raise ValueOutOfRangeError("Percentage must be between 0 and 100")
    if promo.discount_type == FIXED and promo.value < 0:
        raise ValueOutOfRangeError("Fixed discount must be positive")


def check_status_change(promo, status, now=None):
    if status not in (ACTIVE, INACTIVE):
        raise InvalidStatusError()
    if status == ACTIVE and is_expired(promo, now):
        raise ValidationError("Cannot activate expired promo code")


# --- persistence ---------------------------------------------------------

def _settle_status(promo, explicit, now=None):
    """
    Recompute the cached status on write. An explicit status sent by the
    admin stands while the code is inside its date window; outside of it
    the dates decide.
    """
    now = now or utcnow()
    if explicit and promo.start_date <= now <= promo.end_date:
        return
    promo.status = resolve_status(promo, now)


def _ensure_code_free(code, exclude_id=None):
    query = PromoCode.objects(code=code)
    if exclude_id is not None:
        query = query.filter(id__ne=exclude_id)
    if query.first():
        raise ConflictError()


def _save(promo, **kwargs):
    try:
        promo.save(**kwargs)
    except NotUniqueError:
        raise ConflictError()
    except DocumentValidationError as e:
        raise ValidationError(str(e.message or e))
    return promo


def load_promo_code(promo_id) -> PromoCode:
    promo = None
    if promo_id and ObjectId.is_valid(str(promo_id)):
        promo = PromoCode.objects(id=promo_id).first()
    if not promo:
        raise NotFoundError()
    return promo


def get_promo_code(promo_id, now=None) -> PromoCode:
    return refresh_status(load_promo_code(promo_id), now)


def create_promo_code(data, admin_id, now=None) -> PromoCode:
    missing = [f for f in REQUIRED_FIELDS if data.get(f) in (None, "")]
    if missing:
        raise MissingFieldError(f"Missing required fields: {', '.join(missing)}")

    if isinstance(admin_id, str) and ObjectId.is_valid(admin_id):
        admin_id = ObjectId(admin_id)
    promo = PromoCode(created_by=admin_id, used_count=0)
    apply_fields(promo, {k: v for k, v in data.items() if k != "status"})
    status = data.get("status") or ACTIVE
    if status not in (ACTIVE, INACTIVE):
        raise InvalidStatusError()
    promo.status = status

    check_invariants(promo)
    _ensure_code_free(promo.code)
    _settle_status(promo, data.get("status"), now)
    _save(promo)
    logger.info("Promo code %s created by admin %s", promo.code, admin_id)
    return promo


def update_promo_code(promo_id, data, now=None) -> PromoCode:
    promo = load_promo_code(promo_id)
    original_code = promo.code

    apply_fields(promo, data)
    check_invariants(promo)
    if promo.code != original_code:
        _ensure_code_free(promo.code, exclude_id=promo.id)

    _settle_status(promo, data.get("status"), now)
    _save(promo)
    logger.info("Promo code %s updated (%s)", promo.code, ", ".join(sorted(k for k in data if k in FIELD_SETTERS)))
    return promo


def set_promo_code_status(promo_id, status, now=None) -> PromoCode:
    """
    Explicit admin toggle. Stored as requested: this is the one write that
    can take a code out of `expired` (once its end date has been moved
    forward) or park an in-window code as inactive.
    """
    if not status:
        raise MissingFieldError("Status is required")
    promo = load_promo_code(promo_id)
    check_status_change(promo, status, now)
    promo.status = status
    promo.updated_at = utcnow()
    _save(promo, clean=False)
    logger.info("Promo code %s set to %s", promo.code, status)
    return promo


def delete_promo_code(promo_id):
    promo = load_promo_code(promo_id)
    Product.objects(applicable_coupons=promo.id).update(pull__applicable_coupons=promo.id)
    promo.delete()
    logger.info("Promo code %s deleted", promo.code)
    return {"success": True}


# --- serialization -------------------------------------------------------

def _creator(promo):
    ref = promo.created_by
    if ref is None:
        return None
    try:
        admin = ref.fetch()
    except DoesNotExist:
        return {"id": str(ref.pk)}
    return {"id": str(admin.id), "name": admin.name, "email": admin.email}


def serialize_promo(promo, now=None, populate=True):
    now = now or utcnow()
    return {
        "id": str(promo.id),
        "code": promo.code,
        "discountType": promo.discount_type,
        "value": promo.value,
        "minPurchase": promo.min_purchase,
        "maxDiscount": promo.max_discount,
        "usageLimit": promo.usage_limit,
        "usedCount": promo.used_count,
        "startDate": iso(promo.start_date),
        "endDate": iso(promo.end_date),
        "status": promo.status,
        "createdBy": _creator(promo) if populate else (str(promo.created_by.pk) if promo.created_by else None),
        "createdAt": iso(promo.created_at),
        "updatedAt": iso(promo.updated_at),
        "isExpired": is_expired(promo, now),
        "isValid": is_valid(promo, now),
    }
