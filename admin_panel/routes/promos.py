# admin_panel/routes/promos.py
from bson import ObjectId
from flask import Blueprint, request, jsonify

from models.admin import Admin
from services.promo_admin import (
    get_promo_code, create_promo_code, update_promo_code, set_promo_code_status,
    delete_promo_code, serialize_promo
)
from services.promo_queries import list_promo_codes

promos_bp = Blueprint("promos", __name__)


def _ok(message, data=None, status=200):
    body = {"success": True, "message": message}
    if data is not None:
        body["data"] = data
    return jsonify(body), status


def _current_admin():
    admin_id = (request.headers.get("X-Admin-Id") or "").strip()
    if not ObjectId.is_valid(admin_id):
        return None
    return Admin.objects(id=admin_id).first()


@promos_bp.route("/", methods=["GET"])
def get_all():
    result = list_promo_codes(
        search=request.args.get("search"),
        status=request.args.get("status"),
        page=request.args.get("page"),
        limit=request.args.get("limit"),
    )
    return _ok("Promo codes retrieved successfully", result)


@promos_bp.route("/<promo_id>", methods=["GET"])
def get_by_id(promo_id):
    promo = get_promo_code(promo_id)
    return _ok("Promo code retrieved successfully", {"promoCode": serialize_promo(promo)})


@promos_bp.route("/", methods=["POST"])
def create():
    admin = _current_admin()
    if not admin:
        return jsonify(success=False, message="Admin authentication required"), 401
    promo = create_promo_code(request.get_json(silent=True) or {}, admin.id)
    return _ok("Promo code created successfully", {"promoCode": serialize_promo(promo)}, 201)


@promos_bp.route("/<promo_id>", methods=["PUT"])
def update(promo_id):
    promo = update_promo_code(promo_id, request.get_json(silent=True) or {})
    return _ok("Promo code updated successfully", {"promoCode": serialize_promo(promo)})


@promos_bp.route("/<promo_id>/status", methods=["PATCH"])
def update_status(promo_id):
    status = (request.get_json(silent=True) or {}).get("status")
    if not status:
        return jsonify(success=False, message="Status is required"), 400
    promo = set_promo_code_status(promo_id, status)
    return _ok("Promo code status updated successfully", {"promoCode": serialize_promo(promo)})


@promos_bp.route("/<promo_id>", methods=["DELETE"])
def remove(promo_id):
    delete_promo_code(promo_id)
    return _ok("Promo code deleted successfully")
