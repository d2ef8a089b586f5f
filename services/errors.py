# services/errors.py
"""
Failures raised by the promo-code services.

Every error carries the HTTP status the boundary layer should answer with
and a message that is safe to show to the shopper or the admin as-is.
"""


class PromoCodeError(Exception):
    status = 500
    default_message = "Promo code request failed"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self):
        return {"success": False, "message": self.message}


class NotFoundError(PromoCodeError):
    status = 404
    default_message = "Promo code not found"


class ConflictError(PromoCodeError):
    status = 409
    default_message = "Promo code already exists"


# --- create / update input ---

class ValidationError(PromoCodeError):
    status = 400
    default_message = "Invalid promo code data"


class MissingFieldError(ValidationError):
    default_message = "Missing required fields"


class InvalidDateRangeError(ValidationError):
    default_message = "End date must be after start date"


class ValueOutOfRangeError(ValidationError):
    default_message = "Discount value is out of range for its type"


class InvalidStatusError(ValidationError):
    default_message = "Invalid status. Must be active or inactive"


# --- checkout ---

class InvalidCodeError(PromoCodeError):
    status = 400
    default_message = "Promo code is not valid"


class PromoExpiredError(InvalidCodeError):
    default_message = "Promo code has expired"


class PromoInactiveError(InvalidCodeError):
    default_message = "Promo code is inactive"


class BelowMinimumPurchaseError(PromoCodeError):
    status = 400

    def __init__(self, minimum, currency="₹"):
        self.minimum = minimum
        super().__init__(f"Minimum purchase of {currency}{format_amount(minimum)} required")


class UsageLimitExceededError(PromoCodeError):
    status = 400
    default_message = "Promo code usage limit exceeded"


class NoEligibleItemsError(PromoCodeError):
    status = 400
    default_message = "This promo code is not applicable to any items in your cart"


def format_amount(amount) -> str:
    amount = float(amount)
    if amount.is_integer():
        return str(int(amount))
    return f"{amount:.2f}"
