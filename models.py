"""
models.py
Domain vocabularies and dataclasses for members, complaints and payments.
"""

from __future__ import annotations

from dataclasses import dataclass, field

SUCCESS_MESSAGE_SECONDS = 3

MEMBERS = "members"
COMPLAINTS = "complaints"
PAYMENTS = "payments"

COMPLAINT_CATEGORIES = ("Equipment", "Cleanliness", "Staff", "Schedule", "Facilities", "Other")
COMPLAINT_PRIORITIES = ("Low", "Medium", "High")
COMPLAINT_STATUSES = ("Pending", "In Progress", "Resolved")
STATUS_FILTERS = ("all",) + COMPLAINT_STATUSES

PAYMENT_METHODS = ("Cash", "Card", "Bank Transfer", "UPI", "Other")

ANONYMOUS_NAME = "Anonymous"


def _to_float(value) -> float | None:
    if value in (None, ""):
        return None
    return float(value)


def parse_month(token: str) -> tuple[int, int]:
    """
    Parse a `YYYY-MM` month token. Raises ValueError for anything else.
    """
    parts = token.split("-") if token else []
    if len(parts) != 2 or len(parts[0]) != 4 or len(parts[1]) != 2:
        raise ValueError(f"Invalid month token: {token!r}")
    if not (parts[0].isdigit() and parts[1].isdigit()):
        raise ValueError(f"Invalid month token: {token!r}")
    year, month = int(parts[0]), int(parts[1])
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month token: {token!r}")
    return year, month


def _to_int(value) -> int | None:
    if value in (None, ""):
        return None
    return int(float(value))


@dataclass(frozen=True)
class CurrentUser:
    id: str
    name: str
    gym_id: str | None = None


@dataclass(frozen=True)
class Member:
    id: str
    name: str = ""
    username: str = ""
    age: int | None = None
    mobile: str = ""
    whatsapp: str = ""
    email: str = ""
    weight: float | None = None  # kg
    height: float | None = None  # cm
    bmi: float | None = None
    bmi_category: str | None = None
    allergies: str = ""
    diseases: str = ""
    emergency_contact: str = ""
    emergency_name: str = ""
    join_date: str | None = None
    status: str = "active"  # 'active' or 'inactive'
    level: str = "beginner"
    gym_id: str | None = None

    @classmethod
    def from_doc(cls, doc: dict) -> "Member":
        return cls(
            id=doc["id"],
            name=doc.get("name") or "",
            username=doc.get("username") or "",
            age=_to_int(doc.get("age")),
            mobile=doc.get("mobile") or "",
            whatsapp=doc.get("whatsapp") or "",
            email=doc.get("email") or "",
            weight=_to_float(doc.get("weight")),
            height=_to_float(doc.get("height")),
            bmi=_to_float(doc.get("bmi")),
            bmi_category=doc.get("bmiCategory"),
            allergies=doc.get("allergies") or "",
            diseases=doc.get("diseases") or "",
            emergency_contact=doc.get("emergencyContact") or "",
            emergency_name=doc.get("emergencyName") or "",
            join_date=doc.get("joinDate"),
            status=doc.get("status") or "active",
            level=doc.get("level") or "beginner",
            gym_id=doc.get("gymId"),
        )

    @property
    def is_active(self) -> bool:
        return self.status == "active"


@dataclass(frozen=True)
class ComplaintResponse:
    admin_name: str
    message: str
    responded_at: str | None = None

    @classmethod
    def from_doc(cls, doc: dict) -> "ComplaintResponse":
        return cls(
            admin_name=doc.get("adminName") or "Admin",
            message=doc.get("message") or "",
            responded_at=doc.get("respondedAt"),
        )


@dataclass(frozen=True)
class Complaint:
    id: str
    member_id: str
    subject: str
    category: str
    priority: str
    description: str
    status: str = "Pending"
    is_anonymous: bool = False
    member_name: str = ""
    created_at: str | None = None
    responses: tuple[ComplaintResponse, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if self.status not in COMPLAINT_STATUSES:
            raise ValueError(f"Unknown complaint status: {self.status!r}")

    @classmethod
    def from_doc(cls, doc: dict) -> "Complaint":
        return cls(
            id=doc["id"],
            member_id=doc.get("memberId", ""),
            subject=doc.get("subject") or "",
            category=doc.get("category") or "Other",
            priority=doc.get("priority") or "Medium",
            description=doc.get("description") or "",
            status=doc.get("status") or "Pending",
            is_anonymous=bool(doc.get("isAnonymous")),
            member_name=doc.get("memberName") or "",
            created_at=doc.get("createdAt"),
            responses=tuple(ComplaintResponse.from_doc(r) for r in doc.get("responses") or []),
        )


@dataclass(frozen=True)
class Payment:
    id: str
    member_id: str
    month: str  # YYYY-MM
    amount: float | None
    payment_method: str = "Cash"
    paid_at: str | None = None
    recorded_by: str | None = None
    notes: str | None = None

    def __post_init__(self):
        parse_month(self.month)

    @property
    def year(self) -> str:
        return self.month.split("-")[0]

    @classmethod
    def from_doc(cls, doc: dict) -> "Payment":
        return cls(
            id=doc["id"],
            member_id=doc.get("memberId", ""),
            month=doc.get("month") or "",
            amount=_to_float(doc.get("amount")),
            payment_method=doc.get("paymentMethod") or "Cash",
            paid_at=doc.get("paidAt"),
            recorded_by=doc.get("recordedBy"),
            notes=doc.get("notes") or None,
        )


@dataclass(frozen=True)
class BmiInfo:
    bmi: float
    category: str
