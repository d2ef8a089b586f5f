# services/discounts.py
from models.promo import PERCENTAGE, FIXED


def compute_discount(discount_type: str, value: float, eligible: float, max_discount=None) -> float:
    """
    percentage: `value`% of the eligible amount, capped at max_discount when set.
    fixed: `value`, never more than the eligible amount.
    """
    if eligible <= 0:
        return 0.0
    if discount_type == PERCENTAGE:
        discount = eligible * value / 100
        if max_discount:
            discount = min(discount, max_discount)
        return discount
    if discount_type == FIXED:
        return min(value, eligible)
    raise ValueError(f"Unknown discount type: {discount_type}")


def discount_for(promo, eligible: float) -> float:
    return compute_discount(promo.discount_type, promo.value, eligible, promo.max_discount)
