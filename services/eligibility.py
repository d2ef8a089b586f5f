# services/eligibility.py
import math

from bson import ObjectId

from models.product import Product
from services.errors import ValidationError


def _item_product_id(item):
    raw = item.get("productId") or item.get("id")
    if raw is None:
        return None
    raw = str(raw)
    return ObjectId(raw) if ObjectId.is_valid(raw) else None


def line_amount(item) -> float:
    try:
        price = float(item.get("price") or 0)
        quantity = float(item.get("quantity") or 0)
    except (TypeError, ValueError):
        raise ValidationError("Cart items need a numeric price and quantity")
    if not (math.isfinite(price) and math.isfinite(quantity)):
        raise ValidationError("Cart items need a numeric price and quantity")
    if price < 0 or quantity < 0:
        raise ValidationError("Cart item price and quantity cannot be negative")
    return price * quantity


def eligible_lines(promo, cart_items):
    """
    Yield (item, amount) for every cart line the code applies to.
    Lines whose product is unknown (or whose id is malformed) are skipped.
    """
    ids = {pid for pid in (_item_product_id(item) for item in cart_items) if pid}
    if not ids:
        return
    products = {p.id: p for p in Product.objects(id__in=list(ids)).only(
        "is_coupon_eligible", "applicable_coupons")}

    for item in cart_items:
        product = products.get(_item_product_id(item))
        if product and product.accepts_coupon(promo.id):
            yield item, line_amount(item)


def eligible_amount(promo, cart_items) -> float:
    return sum(amount for _, amount in eligible_lines(promo, cart_items))
