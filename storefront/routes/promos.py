# storefront/routes/promos.py
from flask import Blueprint, request, jsonify, current_app

from services.promos import validate_promo_code
from services.promo_queries import list_active

storefront_promos_bp = Blueprint("storefront_promos", __name__)


@storefront_promos_bp.route("/validate", methods=["POST"])
def validate():
    data = request.get_json(silent=True) or {}
    code = data.get("code")
    cart_total = data.get("cartTotal")
    cart_items = data.get("cartItems")

    if not code:
        return jsonify(success=False, message="Promo code is required"), 400
    if cart_total is None or not isinstance(cart_items, list):
        return jsonify(success=False, message="Cart details are required"), 400

    result = validate_promo_code(code, cart_total, cart_items, user_id=request.headers.get("X-User-Id"))
    return jsonify(success=True, message="Promo code applied successfully", data=result), 200


@storefront_promos_bp.route("/available", methods=["GET"])
def available():
    coupons = list_active()
    current_app.logger.debug("Available coupons: %d", len(coupons))
    return jsonify(success=True, message="Available coupons retrieved successfully",
                   data={"coupons": coupons}), 200
