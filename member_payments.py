"""
member_payments.py
Payments viewer: member + payment history and the figures derived from it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable

import db
from member_profile import load_member
from models import PAYMENTS, Member, Payment
from utils import LoadedList, month_token

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaymentOverview:
    member: Member | None
    payments: LoadedList[Payment]


def fetch_payments(member_id: str) -> list[Payment]:
    docs = db.query_docs(PAYMENTS, "memberId", member_id, order_by="paidAt", descending=True)
    payments = []
    for doc in docs:
        try:
            payments.append(Payment.from_doc(doc))
        except ValueError as e:
            logger.warning("Skipping payment %s: %s", doc.get("id"), e)
    return payments


def payments_loader(member_id: str) -> LoadedList[Payment]:
    return LoadedList(lambda: fetch_payments(member_id), name="payments")


def load_payment_overview(member_id: str) -> PaymentOverview:
    """
    Fetch the member record, then the payment history. Both reads are
    independent; a failure in either is logged and leaves that part empty.
    """
    member = load_member(member_id)
    payments = payments_loader(member_id)
    payments.ensure_loaded()
    return PaymentOverview(member=member, payments=payments)


def current_month(today: date | None = None) -> str:
    return month_token(today or date.today())


def is_month_paid(payments: list[Payment], month: str) -> bool:
    return any(p.month == month for p in payments)


def payment_totals(payments: list[Payment]) -> tuple[int, float]:
    return len(payments), sum(p.amount or 0 for p in payments)


def available_years(payments: list[Payment]) -> list[str]:
    return sorted({p.year for p in payments}, reverse=True)


def year_predicate(year: str) -> Callable[[Payment], bool] | None:
    if year == "all":
        return None
    return lambda p: p.year == year


def filter_by_year(payments: list[Payment], year: str) -> list[Payment]:
    predicate = year_predicate(year)
    if predicate is None:
        return list(payments)
    return [p for p in payments if predicate(p)]
