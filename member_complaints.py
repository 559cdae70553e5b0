"""
member_complaints.py
Complaints manager: member-scoped list, status filter, and submission.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Callable

import db
import utils
from models import (
    ANONYMOUS_NAME,
    COMPLAINT_CATEGORIES,
    COMPLAINT_PRIORITIES,
    COMPLAINT_STATUSES,
    COMPLAINTS,
    STATUS_FILTERS,
    Complaint,
    CurrentUser,
)
from utils import LoadedList

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComplaintForm:
    subject: str = ""
    category: str = COMPLAINT_CATEGORIES[0]
    priority: str = "Medium"
    description: str = ""
    is_anonymous: bool = False

    def validate(self) -> list[str]:
        errors: list[str] = []
        if not self.subject.strip():
            errors.append("Subject is required.")
        if not self.description.strip():
            errors.append("Description is required.")
        if self.category not in COMPLAINT_CATEGORIES:
            errors.append(f"Category must be one of: {', '.join(COMPLAINT_CATEGORIES)}.")
        if self.priority not in COMPLAINT_PRIORITIES:
            errors.append(f"Priority must be one of: {', '.join(COMPLAINT_PRIORITIES)}.")
        return errors


def fetch_complaints(member_id: str) -> list[Complaint]:
    docs = db.query_docs(COMPLAINTS, "memberId", member_id, order_by="createdAt", descending=True)
    complaints = []
    for doc in docs:
        try:
            complaints.append(Complaint.from_doc(doc))
        except ValueError as e:
            logger.warning("Skipping complaint %s: %s", doc.get("id"), e)
    return complaints


def complaints_loader(member_id: str) -> LoadedList[Complaint]:
    return LoadedList(lambda: fetch_complaints(member_id), name="complaints")


def status_predicate(status: str) -> Callable[[Complaint], bool] | None:
    if status not in STATUS_FILTERS:
        raise ValueError(f"Unknown status filter: {status!r}")
    if status == "all":
        return None
    return lambda c: c.status == status


def filter_by_status(complaints: list[Complaint], status: str) -> list[Complaint]:
    predicate = status_predicate(status)
    if predicate is None:
        return list(complaints)
    return [c for c in complaints if predicate(c)]


def status_counts(complaints: list[Complaint]) -> dict[str, int]:
    counts = Counter(c.status for c in complaints)
    return {status: counts.get(status, 0) for status in COMPLAINT_STATUSES}


def build_complaint_doc(form: ComplaintForm, user: CurrentUser, created_at: str) -> dict:
    return {
        "memberId": user.id,
        "memberName": ANONYMOUS_NAME if form.is_anonymous else user.name,
        "gymId": user.gym_id,
        "subject": form.subject.strip(),
        "category": form.category,
        "priority": form.priority,
        "description": form.description.strip(),
        "isAnonymous": form.is_anonymous,
        "status": "Pending",
        "responses": [],
        "createdAt": created_at,
    }


def submit_complaint(form: ComplaintForm, user: CurrentUser, created_at: str | None = None) -> str:
    errors = form.validate()
    if errors:
        raise ValueError(" ".join(errors))
    doc = build_complaint_doc(form, user, created_at or utils.now_iso())
    complaint_id = db.add_doc(COMPLAINTS, doc)
    logger.info("Complaint %s submitted by member %s", complaint_id, user.id)
    return complaint_id
