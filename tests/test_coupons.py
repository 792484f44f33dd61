"""Coupon evaluation and discount arithmetic."""
from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from bizsuite.models.ecommerce import Coupon, DiscountType
from bizsuite.services.ecommerce.coupons import calculate_discount, evaluate_coupon

NOW = datetime(2024, 6, 1, 12, 0, 0)


def make_coupon(**overrides):
    fields = {
        "code": "SAVE10",
        "discount_type": DiscountType.PERCENTAGE,
        "discount_value": Decimal("10"),
        "min_order_amount": None,
        "max_uses": None,
        "uses_count": 0,
        "is_active": True,
        "starts_at": None,
        "expires_at": None,
    }
    fields.update(overrides)
    return Coupon(**fields)


class TestCalculateDiscount:
    def test_percentage_is_exact(self):
        assert calculate_discount(DiscountType.PERCENTAGE, 10, "100") == Decimal("10")
        assert calculate_discount(DiscountType.PERCENTAGE, "12.5", "80.00") == Decimal("10")

    def test_fixed_amount_below_subtotal(self):
        assert calculate_discount(DiscountType.FIXED_AMOUNT, 15, 100) == Decimal("15")

    def test_fixed_amount_never_exceeds_subtotal(self):
        assert calculate_discount(DiscountType.FIXED_AMOUNT, 50, "20.00") == Decimal("20.00")

    def test_zero_subtotal_gives_zero(self):
        assert calculate_discount(DiscountType.FIXED_AMOUNT, 5, 0) == Decimal("0")


class TestEvaluateCoupon:
    def test_missing_coupon(self):
        check = evaluate_coupon(None, 100, NOW)
        assert not check.valid
        assert check.error == "Coupon not found"

    def test_inactive_coupon_looks_missing(self):
        assert evaluate_coupon(make_coupon(is_active=False), 100, NOW).error == "Coupon not found"

    def test_minimum_order_amount(self):
        coupon = make_coupon(min_order_amount=Decimal("50"))
        below = evaluate_coupon(coupon, 40, NOW)
        assert not below.valid
        assert below.error.startswith("Minimum order amount")

        above = evaluate_coupon(coupon, 100, NOW)
        assert above.valid
        assert above.discount == Decimal("10")

    def test_not_started_yet(self):
        check = evaluate_coupon(make_coupon(starts_at=NOW + timedelta(days=1)), 100, NOW)
        assert check.error == "Coupon not yet active"

    def test_expired(self):
        check = evaluate_coupon(make_coupon(expires_at=NOW - timedelta(seconds=1)), 100, NOW)
        assert check.error == "Coupon has expired"

    def test_open_ended_window(self):
        assert evaluate_coupon(make_coupon(starts_at=NOW - timedelta(days=1)), 100, NOW).valid

    @pytest.mark.parametrize("uses, valid", [(2, True), (3, False)])
    def test_usage_cap(self, uses, valid):
        check = evaluate_coupon(make_coupon(max_uses=3, uses_count=uses), 100, NOW)
        assert check.valid is valid

    def test_evaluation_does_not_touch_usage(self):
        coupon = make_coupon(max_uses=5, uses_count=1)
        evaluate_coupon(coupon, 100, NOW)
        assert coupon.uses_count == 1
