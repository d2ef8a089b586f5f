# services/promo_usage.py
"""
Redemption counter, bumped when an order commits and released when it is
cancelled or refunded.

Each call is a single atomic update on the promo_codes collection. Passing a
pymongo ClientSession folds the update into the caller's transaction;
without one it commits on its own.

Counter failures never reach the order flow: they are logged to the
`promos.usage.alerts` logger and the call returns None. An order is never
blocked or rolled back because its promo counter could not be updated.
"""
import functools
import logging

from pymongo import ReturnDocument

from models.promo import PromoCode, UNLIMITED, normalize_code
from utils.config import enforce_usage_limit

logger = logging.getLogger(__name__)
alerts = logging.getLogger("promos.usage.alerts")

# claims retried when usage_limit keeps changing under a hot code
MAX_CLAIM_ATTEMPTS = 5


def best_effort(operation):
    """Run a counter update; log and swallow any failure, returning None."""
    @functools.wraps(operation)
    def wrapper(code, session=None, **kwargs):
        try:
            return operation(code, session=session, **kwargs)
        except Exception:
            alerts.exception("Promo usage update %s failed for code %r", operation.__name__, code)
            return None
    return wrapper


def _session_kwargs(session):
    return {"session": session} if session is not None else {}


def _to_promo(doc):
    return PromoCode._from_son(doc) if doc else None


def _claim(collection, query, extra):
    doc = collection.find_one_and_update(
        query,
        {"$inc": {"used_count": 1}},
        return_document=ReturnDocument.AFTER,
        **extra,
    )
    return _to_promo(doc)


@best_effort
def increment_usage(code, session=None, enforce_limit=None):
    """
    Claim one use of `code`. Returns the updated PromoCode, or None when the
    code is unknown, already at its usage limit, or the update failed.

    Unlimited codes take a plain $inc. Limited codes take one conditional
    $inc that only lands while used_count is below usage_limit, so concurrent
    orders cannot push the counter past it. The claim is retried only when
    an admin changed usage_limit between the read and the write.
    """
    code = normalize_code(code)
    if not code:
        return None
    if enforce_limit is None:
        enforce_limit = enforce_usage_limit()

    collection = PromoCode._get_collection()
    extra = _session_kwargs(session)

    if not enforce_limit:
        return _claim(collection, {"code": code}, extra)

    for _ in range(MAX_CLAIM_ATTEMPTS):
        current = collection.find_one({"code": code}, {"usage_limit": 1}, **extra)
        if not current:
            logger.warning("Usage increment for unknown promo code %s", code)
            return None

        limit = current.get("usage_limit", UNLIMITED)
        query = {"_id": current["_id"], "usage_limit": limit}
        if limit != UNLIMITED:
            query["used_count"] = {"$lt": limit}
        promo = _claim(collection, query, extra)
        if promo:
            return promo

        latest = collection.find_one({"_id": current["_id"]}, {"used_count": 1, "usage_limit": 1}, **extra)
        if not latest:
            logger.warning("Promo code %s was deleted before its use was counted", code)
            return None
        if latest.get("usage_limit", UNLIMITED) == limit:
            alerts.warning("Promo code %s is at its usage limit (%s/%s); use not counted",
                           code, latest.get("used_count", 0), limit)
            return None
        # usage_limit was edited underneath; claim again against the new one

    alerts.error("Gave up claiming a use of promo code %s after %d attempts", code, MAX_CLAIM_ATTEMPTS)
    return None


@best_effort
def decrement_usage(code, session=None):
    """
    Release one use of `code`. The counter never goes below zero: a release
    against a code already at zero is ignored and returns None.
    """
    code = normalize_code(code)
    if not code:
        return None

    doc = PromoCode._get_collection().find_one_and_update(
        {"code": code, "used_count": {"$gt": 0}},
        {"$inc": {"used_count": -1}},
        return_document=ReturnDocument.AFTER,
        **_session_kwargs(session),
    )
    if not doc:
        logger.warning("Usage decrement for promo code %s ignored (unknown or already at zero)", code)
    return _to_promo(doc)
