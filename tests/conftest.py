import pytest

import db
from models import COMPLAINTS, MEMBERS, PAYMENTS


@pytest.fixture(autouse=True)
def temp_db(tmp_path, monkeypatch):
    monkeypatch.setattr(db, "DB_FILE", tmp_path / "test.db")
    db.init_db()
    yield tmp_path / "test.db"


@pytest.fixture
def member_id():
    return db.add_doc(
        MEMBERS,
        {
            "name": "Mona Ali",
            "username": "mona",
            "age": 31,
            "mobile": "01000000002",
            "email": "mona@example.com",
            "weight": 70,
            "height": 175,
            "bmi": 22.9,
            "bmiCategory": "Normal",
            "emergencyName": "Ali",
            "emergencyContact": "01000000003",
            "joinDate": "2023-01-15T10:00:00+00:00",
            "status": "active",
            "level": "intermediate",
            "gymId": "gym_1",
        },
    )


@pytest.fixture
def add_complaint(member_id):
    def _add(subject, status="Pending", created_at="2024-06-01T10:00:00+00:00", owner=None, **extra):
        doc = {
            "memberId": owner or member_id,
            "memberName": "Mona Ali",
            "subject": subject,
            "category": "Equipment",
            "priority": "Medium",
            "description": f"{subject} description",
            "isAnonymous": False,
            "status": status,
            "responses": [],
            "createdAt": created_at,
        }
        doc.update(extra)
        return db.add_doc(COMPLAINTS, doc)

    return _add


@pytest.fixture
def add_payment(member_id):
    def _add(month, amount=300.0, paid_at=None, owner=None, **extra):
        doc = {
            "memberId": owner or member_id,
            "month": month,
            "amount": amount,
            "paymentMethod": "Cash",
            "paidAt": paid_at or f"{month}-05T09:00:00+00:00",
        }
        doc.update(extra)
        return db.add_doc(PAYMENTS, doc)

    return _add
