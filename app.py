import logging

from flask import Flask, jsonify
from mongoengine import connect

from admin_panel.routes.promos import promos_bp
from services.errors import PromoCodeError
from storefront.routes.promos import storefront_promos_bp
from utils.config import MONGO_URI, LOG_LEVEL
from vendor_panel.routes.promotions import vendor_promotions_bp


def create_app(connect_db=True):
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Init DB
    if connect_db:
        connect(host=MONGO_URI)

    app = Flask(__name__)

    # Register routes
    app.register_blueprint(promos_bp, url_prefix="/api/admin/promocodes")
    app.register_blueprint(storefront_promos_bp, url_prefix="/api/public/promocodes")
    app.register_blueprint(vendor_promotions_bp, url_prefix="/api/vendor/promotions")

    @app.errorhandler(PromoCodeError)
    def promo_error(error):
        if error.status >= 500:
            app.logger.exception("Promo code request failed: %s", error)
        else:
            app.logger.info("Promo code request rejected (%s): %s", error.status, error.message)
        return jsonify(error.to_dict()), error.status

    @app.route("/")
    def index():
        return "OK"

    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=5000)
