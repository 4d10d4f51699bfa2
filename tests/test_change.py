"""
Tests for greedy change-making
"""

import pytest

from vending_machine.change import make_change, StockLine, ChangeResult, NO_CASH_MESSAGE
from vending_machine.errors import InvalidArgumentError


def _stock(quantities):
    return [StockLine(f"d{amount}", amount, qty) for amount, qty in quantities.items()]


class TestMakeChange:
    """Test change breakdown against a float"""

    def test_largest_denominations_first(self):
        """180 from {100:10, 50:10, 20:10, 10:10} is 100+50+20+10"""
        result = make_change(180, _stock({100: 10, 50: 10, 20: 10, 10: 10}))

        assert result.success
        assert result.total_amount == 180
        assert [(line.amount, line.quantity) for line in result.breakdown] == [
            (100, 1), (50, 1), (20, 1), (10, 1)
        ]
        assert sum(line.total for line in result.breakdown) == 180
        assert result.message is None

    def test_respects_available_quantity(self):
        """Only as many units as are on hand are used"""
        result = make_change(300, _stock({100: 2, 50: 10}))

        assert result.success
        assert [(line.amount, line.quantity) for line in result.breakdown] == [(100, 2), (50, 2)]

    def test_stock_order_does_not_matter(self):
        result = make_change(60, _stock({10: 10, 50: 1}))

        assert result.success
        assert [(line.amount, line.quantity) for line in result.breakdown] == [(50, 1), (10, 1)]

    def test_shortfall(self):
        """25 with only a 50 on hand cannot be made"""
        result = make_change(25, _stock({50: 1}))

        assert not result.success
        assert result.breakdown == []
        assert result.shortfall == 25
        assert result.total_amount == 0
        assert "Short by 25" in result.message

    def test_partial_shortfall_reports_covered_amount(self):
        result = make_change(27, _stock({20: 1, 5: 1}))

        assert not result.success
        assert result.total_amount == 25
        assert result.shortfall == 2
        assert result.breakdown == []

    def test_empty_stock(self):
        """No units on hand at all"""
        result = make_change(100, [])

        assert not result.success
        assert result.message == NO_CASH_MESSAGE
        assert result.shortfall == 100

    def test_zero_quantity_rows_are_ignored(self):
        result = make_change(100, _stock({100: 0, 50: 0}))

        assert not result.success
        assert result.message == NO_CASH_MESSAGE

    def test_greedy_is_not_complete_for_non_canonical_sets(self):
        """Greedy takes 40 first and strands 20; 30+30 would have worked"""
        result = make_change(60, _stock({40: 1, 30: 2}))

        assert not result.success
        assert result.shortfall == 20

    @pytest.mark.parametrize("amount", [0, -5])
    def test_non_positive_amount_rejected(self, amount):
        with pytest.raises(InvalidArgumentError):
            make_change(amount, _stock({10: 10}))


class TestChangeResult:
    """Test API shape of change results"""

    def test_success_dict(self):
        result = make_change(30, _stock({20: 1, 10: 1}))
        data = result.to_dict()

        assert data["success"] is True
        assert data["totalAmount"] == 30
        assert data["breakdown"] == [
            {"denominationId": "d20", "amount": 20, "qty": 1},
            {"denominationId": "d10", "amount": 10, "qty": 1},
        ]
        assert "message" not in data
        assert "shortfall" not in data

    def test_failure_dict(self):
        data = ChangeResult(success=False, total_amount=0, message=NO_CASH_MESSAGE, shortfall=5).to_dict()

        assert data["message"] == NO_CASH_MESSAGE
        assert data["shortfall"] == 5
        assert data["breakdown"] == []
