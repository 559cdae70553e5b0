"""
member_profile.py
Profile editor: persisted snapshot, editable draft, and the save path.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from datetime import datetime, timedelta, timezone

import db
import utils
from models import MEMBERS, SUCCESS_MESSAGE_SECONDS, Member

logger = logging.getLogger(__name__)

# Draft attribute -> stored field name
FORM_FIELDS = {
    "name": "name",
    "age": "age",
    "mobile": "mobile",
    "whatsapp": "whatsapp",
    "email": "email",
    "weight": "weight",
    "height": "height",
    "allergies": "allergies",
    "diseases": "diseases",
    "emergency_contact": "emergencyContact",
    "emergency_name": "emergencyName",
}


@dataclass(frozen=True)
class ProfileForm:
    name: str = ""
    age: int | None = None
    mobile: str = ""
    whatsapp: str = ""
    email: str = ""
    weight: float | None = None
    height: float | None = None
    allergies: str = ""
    diseases: str = ""
    emergency_contact: str = ""
    emergency_name: str = ""

    @classmethod
    def from_member(cls, member: Member) -> "ProfileForm":
        return cls(**{f.name: getattr(member, f.name) for f in fields(cls)})

    @property
    def bmi(self):
        return utils.bmi_info(self.weight, self.height)

    def to_update(self) -> dict:
        """Stored fields for a save, including the derived BMI pair."""
        data = {stored: getattr(self, attr) for attr, stored in FORM_FIELDS.items()}
        info = self.bmi
        data["bmi"] = info.bmi if info else None
        data["bmiCategory"] = info.category if info else None
        return data


@dataclass(frozen=True)
class ProfileState:
    snapshot: Member
    draft: ProfileForm
    editing: bool = False
    saved_at: datetime | None = None

    @classmethod
    def from_member(cls, member: Member) -> "ProfileState":
        return cls(snapshot=member, draft=ProfileForm.from_member(member))

    def begin_edit(self) -> "ProfileState":
        return replace(self, draft=ProfileForm.from_member(self.snapshot), editing=True)

    def update_draft(self, **changes) -> "ProfileState":
        return replace(self, draft=replace(self.draft, **changes))

    def revert(self) -> "ProfileState":
        return replace(self, draft=ProfileForm.from_member(self.snapshot), editing=False)

    def commit(self, saved_at: datetime | None = None) -> "ProfileState":
        info = self.draft.bmi
        snapshot = replace(
            self.snapshot,
            **{attr: getattr(self.draft, attr) for attr in FORM_FIELDS},
            bmi=info.bmi if info else None,
            bmi_category=info.category if info else None,
        )
        return ProfileState(
            snapshot=snapshot,
            draft=ProfileForm.from_member(snapshot),
            editing=False,
            saved_at=saved_at or datetime.now(timezone.utc),
        )

    @property
    def is_dirty(self) -> bool:
        return self.draft != ProfileForm.from_member(self.snapshot)

    def show_success(self, now: datetime | None = None) -> bool:
        if self.saved_at is None:
            return False
        now = now or datetime.now(timezone.utc)
        return now - self.saved_at < timedelta(seconds=SUCCESS_MESSAGE_SECONDS)


def load_member(member_id: str) -> Member | None:
    try:
        doc = db.get_doc(MEMBERS, member_id)
    except Exception:
        logger.exception("Error fetching member data for %s", member_id)
        return None
    if doc is None:
        logger.warning("Member %s not found", member_id)
        return None
    return Member.from_doc(doc)


def save_profile(state: ProfileState, saved_at: datetime | None = None) -> ProfileState:
    """
    Write the draft (plus BMI) over the stored member and return the
    committed state. Storage errors propagate to the caller.
    """
    update = state.draft.to_update()
    db.update_doc(MEMBERS, state.snapshot.id, update)
    logger.info("Profile updated for member %s", state.snapshot.id)
    return state.commit(saved_at)
