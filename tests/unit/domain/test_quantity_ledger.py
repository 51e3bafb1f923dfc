"""Unit tests for the quantity ledger"""

from decimal import Decimal
from src.domain.purchase_order_line import PurchaseOrderLine
from src.domain.quantity_ledger import QuantityLedger, sum_received, to_quantity


def make_line(line_id: int, ordered: str) -> PurchaseOrderLine:
    return PurchaseOrderLine(
        id=line_id,
        order_id=1,
        item_reference=f"ITEM-{line_id}",
        ordered_quantity=Decimal(ordered),
    )


class TestSumReceived:
    def test_sums_per_order_line(self):
        totals = sum_received([(1, Decimal("2")), (2, Decimal("3")), (1, Decimal("4.5"))])

        assert totals == {1: Decimal("6.5"), 2: Decimal("3")}

    def test_empty_log_has_no_totals(self):
        assert sum_received([]) == {}


class TestQuantityLedger:
    def test_line_without_receipts_reports_zero(self):
        ledger = QuantityLedger()
        line = make_line(7, "5")

        assert ledger.received_so_far(7) == Decimal("0")
        assert ledger.remaining(line) == Decimal("5")

    def test_remaining_is_ordered_minus_received(self):
        ledger = QuantityLedger({1: Decimal("40")})

        assert ledger.remaining(make_line(1, "90")) == Decimal("50")

    def test_quantities_use_six_decimal_places(self):
        ledger = QuantityLedger({1: Decimal("1.1234567")})

        assert str(ledger.received_so_far(1)) == "1.123457"
        assert to_quantity(3) == Decimal("3.000000")

    def test_apply_returns_new_snapshot(self):
        ledger = QuantityLedger({1: Decimal("40")})

        updated = ledger.apply([(1, Decimal("10")), (2, Decimal("1"))])

        assert updated.received_so_far(1) == Decimal("50")
        assert updated.received_so_far(2) == Decimal("1")
        assert ledger.received_so_far(1) == Decimal("40")
        assert ledger.received_so_far(2) == Decimal("0")

    def test_repeated_reads_are_consistent(self):
        ledger = QuantityLedger({1: Decimal("3")})
        line = make_line(1, "5")

        assert ledger.remaining(line) == ledger.remaining(line) == Decimal("2")
