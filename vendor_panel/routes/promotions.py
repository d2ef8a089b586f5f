# vendor_panel/routes/promotions.py
from flask import Blueprint, request, jsonify

from services.promo_queries import list_vendor_promotions, get_vendor_promotion

vendor_promotions_bp = Blueprint("vendor_promotions", __name__)


@vendor_promotions_bp.route("/", methods=["GET"])
def promotions():
    result = list_vendor_promotions(
        search=request.args.get("search"),
        page=request.args.get("page"),
        limit=request.args.get("limit"),
    )
    return jsonify(success=True, message="Promotions retrieved successfully", data=result), 200


@vendor_promotions_bp.route("/<promo_id>", methods=["GET"])
def promotion(promo_id):
    return jsonify(success=True, message="Promotion retrieved successfully",
                   data={"promotion": get_vendor_promotion(promo_id)}), 200
