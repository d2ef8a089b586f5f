# services/promos.py
import logging
import math

from models.promo import PromoCode, EXPIRED, INACTIVE, UNLIMITED, normalize_code
from services.discounts import discount_for
from services.eligibility import eligible_amount
from services.errors import (
    MissingFieldError, NotFoundError, InvalidCodeError, PromoExpiredError,
    PromoInactiveError, BelowMinimumPurchaseError, UsageLimitExceededError,
    NoEligibleItemsError, ValidationError
)
from services.promo_status import refresh_status, is_active_in_window
from utils.config import currency_symbol
from utils.dates import utcnow

logger = logging.getLogger(__name__)


def find_by_code(raw_code):
    code = normalize_code(raw_code)
    if not code:
        return None
    return PromoCode.objects(code=code).first()


def validate_promo_code(raw_code, cart_total, cart_items, user_id=None, now=None):
    """
    Check whether a code can be applied to a cart and price the discount.

    Read-only apart from the lazy expiry correction: used_count is never
    touched here, and the usage check below is only a snapshot. The order
    flow claims the use later through services.promo_usage.
    Raises a services.errors.PromoCodeError subclass on the first failed check.
    """
    if not normalize_code(raw_code):
        raise MissingFieldError("Promo code is required")
    try:
        cart_total = float(cart_total)
    except (TypeError, ValueError):
        raise ValidationError("Cart total must be a number")
    if not math.isfinite(cart_total):
        raise ValidationError("Cart total must be a number")
    if cart_total < 0:
        raise ValidationError("Cart total cannot be negative")

    now = now or utcnow()
    promo = find_by_code(raw_code)
    if not promo:
        raise NotFoundError("Invalid promo code")

    refresh_status(promo, now)
    if not is_active_in_window(promo, now):
        if promo.status == EXPIRED:
            raise PromoExpiredError()
        if promo.status == INACTIVE:
            raise PromoInactiveError()
        raise InvalidCodeError()

    if cart_total < (promo.min_purchase or 0):
        raise BelowMinimumPurchaseError(promo.min_purchase, currency_symbol())

    if promo.usage_limit != UNLIMITED and promo.used_count >= promo.usage_limit:
        raise UsageLimitExceededError()

    eligible = eligible_amount(promo, cart_items or [])
    if eligible == 0:
        raise NoEligibleItemsError()

    discount = discount_for(promo, eligible)
    logger.debug("Promo %s priced at %.2f off %.2f eligible (user=%s)",
                 promo.code, discount, eligible, user_id)

    return {
        "success": True,
        "code": promo.code,
        "discountType": promo.discount_type,
        "value": promo.value,
        "discountAmount": discount,
        "promoCodeId": str(promo.id),
    }
