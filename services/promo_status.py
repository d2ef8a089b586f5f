# services/promo_status.py
import logging

from models.promo import PromoCode, ACTIVE, INACTIVE, EXPIRED, UNLIMITED
from utils.dates import utcnow

logger = logging.getLogger(__name__)


def resolve_status(promo: PromoCode, now=None) -> str:
    """
    Status the record should carry at `now`.

    Expired is sticky: moving the dates back into the window does not
    revive a code, that takes an explicit set_status("active").
    """
    now = now or utcnow()
    if now > promo.end_date:
        return EXPIRED
    if now < promo.start_date:
        return INACTIVE
    if promo.status == EXPIRED:
        return EXPIRED
    if promo.status == INACTIVE and promo.start_date <= now <= promo.end_date:
        return ACTIVE
    return promo.status


def is_expired(promo: PromoCode, now=None) -> bool:
    return (now or utcnow()) > promo.end_date


def is_active_in_window(promo: PromoCode, now=None) -> bool:
    now = now or utcnow()
    return promo.status == ACTIVE and promo.start_date <= now <= promo.end_date


def has_remaining_uses(promo: PromoCode) -> bool:
    return promo.usage_limit == UNLIMITED or promo.used_count < promo.usage_limit


def is_valid(promo: PromoCode, now=None) -> bool:
    now = now or utcnow()
    return is_active_in_window(promo, now) and has_remaining_uses(promo)


def refresh_status(promo: PromoCode, now=None) -> PromoCode:
    """
    Lazy correction for read paths: persist the expired status as soon as a
    read notices the end date has passed. Other transitions wait for a write.
    """
    now = now or utcnow()
    if promo.status != EXPIRED and resolve_status(promo, now) == EXPIRED:
        PromoCode.objects(id=promo.id, status__ne=EXPIRED).update_one(set__status=EXPIRED)
        promo.status = EXPIRED
        logger.info("Promo code %s expired (end date %s)", promo.code, promo.end_date)
    return promo


def expire_overdue(now=None) -> int:
    """Bulk form of refresh_status, run before listing queries."""
    now = now or utcnow()
    updated = PromoCode.objects(status__ne=EXPIRED, end_date__lt=now).update(set__status=EXPIRED)
    if updated:
        logger.info("Marked %d promo code(s) as expired", updated)
    return updated
