import pytest

from services.discounts import compute_discount


class TestComputeDiscount:

    def test_percentage(self):
        assert compute_discount("percentage", 10, 100.0) == 10.0

    def test_percentage_capped_by_max_discount(self):
        assert compute_discount("percentage", 10, 100.0, max_discount=5) == 5

    def test_percentage_below_cap_is_untouched(self):
        assert compute_discount("percentage", 10, 30.0, max_discount=5) == 3.0

    def test_fixed(self):
        assert compute_discount("fixed", 20, 50.0) == 20

    def test_fixed_never_exceeds_eligible_amount(self):
        assert compute_discount("fixed", 20, 15.0) == 15.0

    def test_max_discount_ignored_for_fixed(self):
        assert compute_discount("fixed", 20, 50.0, max_discount=5) == 20

    def test_nothing_eligible(self):
        assert compute_discount("percentage", 50, 0) == 0.0

    def test_unknown_type(self):
        with pytest.raises(ValueError):
            compute_discount("bogo", 1, 10.0)
