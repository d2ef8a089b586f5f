# services/promo_queries.py
from models.promo import PromoCode, ACTIVE, STATUSES
from services.errors import NotFoundError
from services.promo_status import expire_overdue, refresh_status, is_valid
from services.promo_admin import serialize_promo, load_promo_code
from utils.dates import utcnow
from utils.pagination import page_window


def list_promo_codes(search=None, status=None, page=1, limit=None, now=None):
    """Admin listing: newest first, optional code search and status filter."""
    now = now or utcnow()
    expire_overdue(now)

    query = PromoCode.objects
    search = (search or "").strip()
    if search:
        query = query.filter(code__icontains=search)
    if status and status != "all" and status in STATUSES:
        query = query.filter(status=status)

    total = query.count()
    page, limit, skip, total_pages = page_window(page, limit, total)
    promos = query.order_by("-created_at").skip(skip).limit(limit)

    return {
        "promoCodes": [serialize_promo(p, now) for p in promos],
        "total": total,
        "page": page,
        "limit": limit,
        "totalPages": total_pages,
    }


def _redeemable_query(now):
    return PromoCode.objects(status=ACTIVE, start_date__lte=now, end_date__gte=now)


def list_active(now=None):
    """Codes a vendor can attach to products right now."""
    now = now or utcnow()
    expire_overdue(now)
    promos = _redeemable_query(now).only("code", "discount_type", "value").order_by("code")
    return [{"id": str(p.id), "code": p.code, "discountType": p.discount_type, "value": p.value}
            for p in promos]


def list_vendor_promotions(search=None, page=1, limit=None, now=None):
    """
    Vendor listing: active, inside the window and not used up. The usage
    test compares two fields of the same record, so it runs here rather
    than in the query.
    """
    now = now or utcnow()
    expire_overdue(now)

    query = _redeemable_query(now)
    search = (search or "").strip()
    if search:
        query = query.filter(code__icontains=search)
    promos = [p for p in query.order_by("-created_at") if is_valid(p, now)]

    page, limit, skip, total_pages = page_window(page, limit, len(promos))
    return {
        "promotions": [serialize_promo(p, now, populate=False) for p in promos[skip:skip + limit]],
        "total": len(promos),
        "page": page,
        "limit": limit,
        "totalPages": total_pages,
    }


def get_vendor_promotion(promo_id, now=None):
    now = now or utcnow()
    try:
        promo = load_promo_code(promo_id)
    except NotFoundError:
        promo = None
    if promo is None or not is_valid(refresh_status(promo, now), now):
        raise NotFoundError("Promotion not found or not available")
    return serialize_promo(promo, now, populate=False)
