"""
utils.py
BMI, dates, the load-once list helper, exports, sample data.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Generic, Iterable, TypeVar

import pandas as pd

import db
from models import COMPLAINTS, MEMBERS, PAYMENTS, BmiInfo, Payment, parse_month

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Upper bounds (exclusive) of each BMI band; anything above the last is Obese.
BMI_BANDS = (
    (18.5, "Underweight"),
    (25.0, "Normal"),
    (30.0, "Overweight"),
)


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def parse_iso_datetime(value: str) -> datetime:
    return datetime.fromisoformat(value)


def format_timestamp(value: str | None, with_time: bool = False) -> str:
    if not value:
        return "N/A"
    try:
        dt = parse_iso_datetime(value)
    except ValueError:
        return value
    if with_time:
        return dt.strftime("%b %d, %Y %H:%M")
    return dt.strftime("%B %d, %Y")


def format_month(token: str) -> str:
    year, month = parse_month(token)
    return date(year, month, 1).strftime("%B %Y")


def clamp(value, low, high=None):
    """Bring a stored number inside a widget's range; None stays None."""
    if value is None:
        return None
    value = max(value, low)
    if high is not None:
        value = min(value, high)
    return value


def month_token(d: date) -> str:
    return d.strftime("%Y-%m")


def classify_bmi(bmi: float) -> str:
    for upper, category in BMI_BANDS:
        if bmi < upper:
            return category
    return "Obese"


def bmi_info(weight, height) -> BmiInfo | None:
    """
    BMI from weight (kg) and height (cm), rounded to one decimal.
    The category is taken from the rounded value. Returns None when either
    input is missing or not positive.
    """
    try:
        weight_kg = float(weight)
        height_m = float(height) / 100
    except (TypeError, ValueError):
        return None
    if weight_kg <= 0 or height_m <= 0:
        return None
    bmi = round(weight_kg / (height_m * height_m), 1)
    return BmiInfo(bmi=bmi, category=classify_bmi(bmi))


def validate_bmi_inputs(weight, height) -> list[str]:
    errors: list[str] = []
    try:
        w = float(weight)
        h = float(height)
    except (TypeError, ValueError):
        return ["Weight and height must be valid numbers."]

    if w <= 0:
        errors.append("Weight must be greater than 0.")
    elif w < 20:
        errors.append("Weight seems too low. Please verify (minimum 20 kg).")
    elif w > 500:
        errors.append("Weight seems too high. Please verify (maximum 500 kg).")

    if h <= 0:
        errors.append("Height must be greater than 0.")
    elif h < 50:
        errors.append("Height seems too low. Please verify (minimum 50 cm).")
    elif h > 300:
        errors.append("Height seems too high. Please verify (maximum 300 cm).")
    return errors


class LoadedList(Generic[T]):
    """
    Fetch a list once and answer every later filter from memory.

    The loader runs on the first `ensure_loaded()` and again only after
    `reload()`. A failing loader is logged and leaves an empty list.
    """

    def __init__(
        self,
        loader: Callable[[], Iterable[T]],
        sort_key: Callable[[T], object] | None = None,
        reverse: bool = False,
        name: str = "items",
    ):
        self._loader = loader
        self._sort_key = sort_key
        self._reverse = reverse
        self.name = name
        self.items: list[T] = []
        self.loaded = False
        self.error: Exception | None = None

    def ensure_loaded(self) -> list[T]:
        if not self.loaded:
            self._load()
        return self.items

    def reload(self) -> list[T]:
        self.loaded = False
        return self.ensure_loaded()

    def _load(self) -> None:
        try:
            items = list(self._loader())
            if self._sort_key is not None:
                items.sort(key=self._sort_key, reverse=self._reverse)
            self.items = items
            self.error = None
        except Exception as e:
            logger.exception("Error fetching %s", self.name)
            self.items = []
            self.error = e
        self.loaded = True

    def filter(self, predicate: Callable[[T], bool] | None = None) -> list[T]:
        if predicate is None:
            return list(self.items)
        return [item for item in self.items if predicate(item)]

    def __len__(self) -> int:
        return len(self.items)


def payments_to_csv_bytes(payments: Iterable[Payment]) -> bytes:
    df = pd.DataFrame(
        [
            {
                "month": p.month,
                "amount": p.amount or 0,
                "method": p.payment_method,
                "paid_at": p.paid_at,
                "recorded_by": p.recorded_by,
                "notes": p.notes,
            }
            for p in payments
        ],
        columns=["month", "amount", "method", "paid_at", "recorded_by", "notes"],
    )
    return df.to_csv(index=False).encode("utf-8")


def insert_sample_data() -> str:
    """
    Insert a demo member (username 'demo') with complaints and payments.
    Returns the member id. Adds new documents each run.
    """
    today = date.today()
    stamp = datetime.now(timezone.utc).replace(microsecond=0)

    member_id = db.add_doc(
        MEMBERS,
        {
            "name": "Ahmed Hassan",
            "username": "demo",
            "age": 29,
            "mobile": "01000000001",
            "whatsapp": "01000000001",
            "email": "ahmed@example.com",
            "weight": 78,
            "height": 180,
            "bmi": 24.1,
            "bmiCategory": "Normal",
            "allergies": "",
            "diseases": "",
            "emergencyContact": "01000000009",
            "emergencyName": "Mona Hassan",
            "joinDate": (stamp - timedelta(days=400)).isoformat(),
            "status": "active",
            "level": "intermediate",
            "gymId": "gym_main",
        },
    )

    db.add_doc(
        COMPLAINTS,
        {
            "memberId": member_id,
            "memberName": "Ahmed Hassan",
            "gymId": "gym_main",
            "subject": "Treadmill 3 is broken",
            "category": "Equipment",
            "priority": "High",
            "description": "The belt slips at any speed above 8 km/h.",
            "isAnonymous": False,
            "status": "In Progress",
            "responses": [
                {
                    "adminName": "Front Desk",
                    "message": "Thanks, a technician is booked for Thursday.",
                    "respondedAt": (stamp - timedelta(days=2)).isoformat(),
                }
            ],
            "createdAt": (stamp - timedelta(days=3)).isoformat(),
        },
    )
    db.add_doc(
        COMPLAINTS,
        {
            "memberId": member_id,
            "memberName": "Anonymous",
            "gymId": "gym_main",
            "subject": "Locker room cleanliness",
            "category": "Cleanliness",
            "priority": "Medium",
            "description": "Showers are not cleaned in the evening shift.",
            "isAnonymous": True,
            "status": "Pending",
            "responses": [],
            "createdAt": (stamp - timedelta(days=1)).isoformat(),
        },
    )

    first = today.replace(day=1)
    for back in range(0, 14, 2):
        month_start = (first - timedelta(days=31 * back)).replace(day=1)
        db.add_doc(
            PAYMENTS,
            {
                "memberId": member_id,
                "memberName": "Ahmed Hassan",
                "amount": 300.0,
                "month": month_token(month_start),
                "paymentMethod": "Cash" if back % 4 == 0 else "Card",
                "paidAt": datetime.combine(month_start, datetime.min.time(), timezone.utc).isoformat(),
                "recordedBy": "Front Desk",
                "notes": "Sample payment",
            },
        )
    logger.info("Inserted sample data for member %s", member_id)
    return member_id
