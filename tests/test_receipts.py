from datetime import date, datetime
from decimal import Decimal

from avizier.services.receipts import build_receipts, receipt_due_date
from avizier.services.snapshot import Period
from avizier.services.statements import assemble_statement


def test_receipt_due_date_moves_to_next_month_once_past():
    assert receipt_due_date(Period(2025, 1), 25, date(2025, 1, 10)) == date(2025, 1, 25)
    assert receipt_due_date(Period(2025, 1), 25, date(2025, 1, 25)) == date(2025, 1, 25)
    assert receipt_due_date(Period(2025, 1), 25, datetime(2025, 1, 25, 10, 0)) == date(2025, 2, 25)
    assert receipt_due_date(Period(2025, 1), 25, datetime(2025, 2, 1, 8, 0)) == date(2025, 2, 25)
    assert receipt_due_date(Period(2025, 12), 25, date(2026, 1, 3)) == date(2026, 1, 25)
    assert receipt_due_date(Period(2025, 1), None, date(2025, 1, 10)) is None


def test_receipts_match_statement_totals(unit, expense, fund, make_snapshot):
    snapshot = make_snapshot(
        units=[unit(1, quota_share=1), unit(2, quota_share=1), unit(3, quota_share=1)],
        expenses=[expense(100, month=1), expense(50, month=2, code="GUNOI")],
        funds=[fund(20, "Fond de rulment")],
    )
    statement = assemble_statement(snapshot, Period(2025, 2), date(2025, 2, 4))
    receipts = build_receipts(statement, snapshot, start_number=41)

    assert [receipt.number for receipt in receipts] == [41, 42, 43]
    for receipt in receipts:
        assert receipt.period == Period(2025, 2)
        assert receipt.due_date == date(2025, 2, 25)
        assert receipt.maintenance == Decimal("16.67")
        assert receipt.funds == Decimal("20.00")
        # January: 33.33.. + 20 unpaid, 10 days late.
        assert receipt.arrears == Decimal("53.33")
        assert receipt.total == (statement.for_unit(receipt.unit_id).total).quantize(Decimal("0.01"))
        assert [(line.label, line.amount, line.kind) for line in receipt.lines] == [
            ("Gunoi", Decimal("16.67"), "expense"),
            ("Fond de rulment", Decimal("20.00"), "fund"),
        ]


def test_zero_shares_are_left_off_the_receipt(unit, expense, make_snapshot):
    snapshot = make_snapshot(
        units=[unit(1, quota_share=1), unit(2, quota_share=0)],
        expenses=[expense(100, month=1)],
    )
    statement = assemble_statement(snapshot, Period(2025, 1), date(2025, 1, 2))
    first, second = build_receipts(statement, snapshot)
    assert [line.label for line in first.lines] == ["Curățenie"]
    assert second.lines == []
    assert second.total == Decimal("0.00")
