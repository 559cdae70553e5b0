from datetime import date

import pytest

import db
import member_payments
from models import PAYMENTS, Payment


def _payments(*months, amounts=None):
    amounts = amounts or [100.0] * len(months)
    return [
        Payment(id=f"p{i}", member_id="m", month=month, amount=amount)
        for i, (month, amount) in enumerate(zip(months, amounts))
    ]


def test_current_month():
    assert member_payments.current_month(date(2024, 6, 30)) == "2024-06"
    assert len(member_payments.current_month()) == 7


def test_is_month_paid():
    assert member_payments.is_month_paid(_payments("2024-05", "2024-06"), "2024-06")
    assert not member_payments.is_month_paid(_payments("2024-05"), "2024-06")
    assert not member_payments.is_month_paid([], "2024-06")


def test_payment_totals_treats_missing_amount_as_zero():
    payments = _payments("2024-04", "2024-05", "2024-06", amounts=[300.0, None, 250.5])
    assert member_payments.payment_totals(payments) == (3, 550.5)
    assert member_payments.payment_totals([]) == (0, 0)


def test_available_years_distinct_descending():
    payments = _payments("2022-12", "2024-01", "2023-06", "2024-06", "2023-01")
    assert member_payments.available_years(payments) == ["2024", "2023", "2022"]


def test_filter_by_year():
    payments = _payments("2024-06", "2023-12", "2024-01")
    assert [p.month for p in member_payments.filter_by_year(payments, "2024")] == ["2024-06", "2024-01"]
    assert member_payments.filter_by_year(payments, "2021") == []
    assert member_payments.filter_by_year(payments, "all") == payments


def test_load_payment_overview(member_id, add_payment):
    add_payment("2024-04", paid_at="2024-04-03T09:00:00+00:00")
    add_payment("2024-06", paid_at="2024-06-02T09:00:00+00:00")
    add_payment("2024-05", paid_at="2024-05-04T09:00:00+00:00")
    add_payment("2024-06", owner="someone-else")

    overview = member_payments.load_payment_overview(member_id)
    assert overview.member.name == "Mona Ali"
    assert [p.month for p in overview.payments.items] == ["2024-06", "2024-05", "2024-04"]
    assert overview.payments.loaded


def test_missing_amount_field(member_id):
    db.add_doc(PAYMENTS, {"memberId": member_id, "month": "2024-06", "paidAt": "2024-06-01"})
    overview = member_payments.load_payment_overview(member_id)
    assert member_payments.payment_totals(overview.payments.items) == (1, 0)


def test_year_filter_does_not_refetch(member_id, add_payment, monkeypatch):
    add_payment("2023-12")
    add_payment("2024-01")
    overview = member_payments.load_payment_overview(member_id)

    monkeypatch.setattr(db, "query_docs", lambda *a, **k: pytest.fail("re-fetched"))
    rows = overview.payments.filter(member_payments.year_predicate("2023"))
    assert [p.month for p in rows] == ["2023-12"]
    assert len(overview.payments.filter(member_payments.year_predicate("all"))) == 2


def test_load_failure_yields_empty_overview(member_id, monkeypatch, caplog):
    def boom(*args, **kwargs):
        raise RuntimeError("offline")

    monkeypatch.setattr(db, "get_doc", boom)
    monkeypatch.setattr(db, "query_docs", boom)

    overview = member_payments.load_payment_overview(member_id)
    assert overview.member is None
    assert overview.payments.items == []
    assert member_payments.payment_totals(overview.payments.items) == (0, 0)
    assert "Error fetching payments" in caplog.text


@pytest.mark.parametrize("month", ["2024-6", "", None, "2024-13", "abcd-ef"])
def test_invalid_month_token_is_rejected(month):
    with pytest.raises(ValueError):
        Payment.from_doc({"id": "p1", "memberId": "m", "month": month, "amount": 100})


def test_malformed_payments_are_skipped(member_id, add_payment, caplog):
    add_payment("2024-06")
    add_payment("2024-6")
    db.add_doc(PAYMENTS, {"memberId": member_id, "amount": 50, "paidAt": "2024-05-01"})

    overview = member_payments.load_payment_overview(member_id)
    payments = overview.payments.items
    assert [p.month for p in payments] == ["2024-06"]
    assert overview.payments.error is None
    assert member_payments.available_years(payments) == ["2024"]
    assert member_payments.payment_totals(payments) == (1, 300.0)
    assert "Skipping payment" in caplog.text
