"""
Checkout-side validation: lookup, status, minimum purchase, usage limit,
product eligibility and discount pricing, in that order.
"""
from datetime import timedelta

import pytest

from conftest import cart_line
from models.promo import PromoCode
from services.errors import (
    NotFoundError, InvalidCodeError, PromoExpiredError, PromoInactiveError,
    BelowMinimumPurchaseError, UsageLimitExceededError, NoEligibleItemsError,
    MissingFieldError, ValidationError
)
from services.promos import validate_promo_code
from utils.config import set_config


class TestScenarios:

    def test_percentage_discount(self, make_promo, make_product):
        promo = make_promo("SAVE10", value=10)
        product = make_product(price=100, coupons=[promo])

        result = validate_promo_code("SAVE10", 100, [cart_line(product)], "user-1")

        assert result == {
            "success": True,
            "code": "SAVE10",
            "discountType": "percentage",
            "value": 10,
            "discountAmount": 10,
            "promoCodeId": str(promo.id),
        }

    def test_percentage_capped_by_max_discount(self, make_promo, make_product):
        promo = make_promo("SAVE10", value=10, max_discount=5)
        product = make_product(price=100, coupons=[promo])

        result = validate_promo_code("SAVE10", 100, [cart_line(product)], None)

        assert result["discountAmount"] == 5

    def test_fixed_discount_capped_by_eligible_amount(self, make_promo, make_product):
        promo = make_promo("FLAT20", discount_type="fixed", value=20)
        eligible = make_product(price=15, coupons=[promo])
        other = make_product(price=200, coupons=[])

        result = validate_promo_code("FLAT20", 215, [cart_line(eligible), cart_line(other)], None)

        assert result["discountAmount"] == 15

    def test_below_minimum_purchase_names_the_minimum(self, make_promo, make_product):
        promo = make_promo(min_purchase=100)
        product = make_product(price=50, coupons=[promo])

        with pytest.raises(BelowMinimumPurchaseError) as exc:
            validate_promo_code("SAVE10", 50, [cart_line(product)], None)

        assert "Minimum purchase of" in exc.value.message
        assert "100" in exc.value.message
        assert exc.value.status == 400

    def test_currency_symbol_comes_from_runtime_config(self, make_promo, make_product):
        set_config("currency_symbol", "$")
        promo = make_promo(min_purchase=500)
        product = make_product(price=50, coupons=[promo])

        with pytest.raises(BelowMinimumPurchaseError) as exc:
            validate_promo_code("SAVE10", 50, [cart_line(product)], None)

        assert exc.value.message == "Minimum purchase of $500 required"

    def test_usage_limit_exceeded(self, make_promo, make_product):
        promo = make_promo(usage_limit=1, used_count=1)
        product = make_product(coupons=[promo])

        with pytest.raises(UsageLimitExceededError):
            validate_promo_code("SAVE10", 100, [cart_line(product)], None)

    def test_expired_code_reports_expiry(self, make_promo, make_product, now):
        promo = make_promo(start_date=now - timedelta(days=10), end_date=now - timedelta(days=1))
        product = make_product(coupons=[promo])

        with pytest.raises(PromoExpiredError) as exc:
            validate_promo_code("SAVE10", 100, [cart_line(product)], None)

        assert exc.value.message == "Promo code has expired"
        assert PromoCode.objects.get(id=promo.id).status == "expired"


class TestLookupAndStatus:

    def test_lookup_ignores_case_and_whitespace(self, make_promo, make_product):
        promo = make_promo("SAVE10")
        product = make_product(coupons=[promo])

        result = validate_promo_code("  save10 ", 100, [cart_line(product)], None)

        assert result["code"] == "SAVE10"

    def test_unknown_code(self):
        with pytest.raises(NotFoundError) as exc:
            validate_promo_code("NOPE", 100, [], None)
        assert exc.value.status == 404

    def test_blank_code(self):
        with pytest.raises(MissingFieldError):
            validate_promo_code("   ", 100, [], None)

    @pytest.mark.parametrize("total", ["nan", "inf", float("nan"), float("-inf"), "ten"])
    def test_cart_total_must_be_a_finite_number(self, make_promo, total):
        make_promo()
        with pytest.raises(ValidationError) as exc:
            validate_promo_code("SAVE10", total, [], None)
        assert exc.value.message == "Cart total must be a number"

    def test_negative_cart_total(self, make_promo):
        make_promo()
        with pytest.raises(ValidationError):
            validate_promo_code("SAVE10", -5, [], None)

    def test_inactive_code(self, make_promo, make_product):
        promo = make_promo(status="inactive")
        product = make_product(coupons=[promo])

        with pytest.raises(PromoInactiveError) as exc:
            validate_promo_code("SAVE10", 100, [cart_line(product)], None)
        assert exc.value.message == "Promo code is inactive"

    def test_active_code_before_its_window(self, make_promo, make_product, now):
        promo = make_promo(start_date=now + timedelta(days=1), end_date=now + timedelta(days=5))
        product = make_product(coupons=[promo])

        with pytest.raises(InvalidCodeError) as exc:
            validate_promo_code("SAVE10", 100, [cart_line(product)], None)
        assert type(exc.value) is InvalidCodeError
        assert exc.value.message == "Promo code is not valid"

    def test_unlimited_code_never_rejected_on_usage(self, make_promo, make_product):
        promo = make_promo(usage_limit=-1, used_count=1_000_000)
        product = make_product(coupons=[promo])

        result = validate_promo_code("SAVE10", 100, [cart_line(product)], None)

        assert result["discountAmount"] == 10


class TestEligibility:

    def test_empty_applicable_coupons_means_none(self, make_promo, make_product):
        make_promo()
        product = make_product(eligible=True, coupons=[])

        with pytest.raises(NoEligibleItemsError):
            validate_promo_code("SAVE10", 100, [cart_line(product)], None)

    def test_flag_off_blocks_listed_coupon(self, make_promo, make_product):
        promo = make_promo()
        product = make_product(eligible=False, coupons=[promo])

        with pytest.raises(NoEligibleItemsError):
            validate_promo_code("SAVE10", 100, [cart_line(product)], None)

    def test_other_coupon_listed(self, make_promo, make_product):
        make_promo("SAVE10")
        other = make_promo("OTHER5")
        product = make_product(coupons=[other])

        with pytest.raises(NoEligibleItemsError):
            validate_promo_code("SAVE10", 100, [cart_line(product)], None)

    def test_unknown_products_are_skipped(self, make_promo, make_product):
        promo = make_promo()
        product = make_product(price=40, coupons=[promo])
        cart = [
            cart_line(product, quantity=2),
            {"productId": "000000000000000000000000", "price": 500, "quantity": 1},
            {"productId": "not-an-object-id", "price": 500, "quantity": 1},
        ]

        result = validate_promo_code("SAVE10", 1080, cart, None)

        assert result["discountAmount"] == pytest.approx(8.0)

    def test_only_eligible_lines_count(self, make_promo, make_product):
        promo = make_promo(value=50)
        eligible = make_product(price=20, coupons=[promo])
        ineligible = make_product(price=80, eligible=False, coupons=[promo])

        result = validate_promo_code("SAVE10", 100, [cart_line(eligible), cart_line(ineligible)], None)

        assert result["discountAmount"] == pytest.approx(10.0)

    def test_item_id_key_is_accepted(self, make_promo, make_product):
        promo = make_promo()
        product = make_product(coupons=[promo])

        result = validate_promo_code("SAVE10", 100, [{"id": str(product.id), "price": 100, "quantity": 1}], None)

        assert result["discountAmount"] == 10

    @pytest.mark.parametrize("price, quantity", [(-100, 1), (100, -1), ("nan", 1), (100, "inf")])
    def test_negative_or_non_finite_line_rejected(self, make_promo, make_product, price, quantity):
        promo = make_promo(discount_type="fixed", value=50)
        product = make_product(coupons=[promo])
        other = make_product(price=200, coupons=[promo])
        cart = [cart_line(product, quantity=quantity, price=price), cart_line(other)]

        with pytest.raises(ValidationError):
            validate_promo_code("SAVE10", 100, cart, None)


class TestNoSideEffects:

    def test_repeated_validation_is_identical_and_leaves_counter(self, make_promo, make_product):
        promo = make_promo(usage_limit=5, used_count=2)
        product = make_product(coupons=[promo])
        cart = [cart_line(product)]

        first = validate_promo_code("SAVE10", 100, cart, "user-1")
        second = validate_promo_code("SAVE10", 100, cart, "user-1")

        assert first == second
        assert PromoCode.objects.get(id=promo.id).used_count == 2
