from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

import db
import member_profile
from member_profile import ProfileForm, ProfileState
from models import MEMBERS


@pytest.fixture
def state(member_id):
    return ProfileState.from_member(member_profile.load_member(member_id))


def test_load_member(member_id):
    member = member_profile.load_member(member_id)
    assert member.id == member_id
    assert member.name == "Mona Ali"
    assert member.weight == 70.0
    assert member.emergency_name == "Ali"
    assert member.is_active


def test_load_missing_member_returns_none():
    assert member_profile.load_member("missing") is None


def test_load_member_storage_error_is_logged(monkeypatch, caplog):
    def boom(*args):
        raise RuntimeError("offline")

    monkeypatch.setattr(db, "get_doc", boom)
    assert member_profile.load_member("m1") is None
    assert "Error fetching member data" in caplog.text


def test_begin_edit_seeds_draft_from_snapshot(state):
    editing = state.update_draft(name="stale").begin_edit()
    assert editing.editing
    assert editing.draft == ProfileForm.from_member(state.snapshot)


def test_cancel_restores_every_field_without_storage_call(state, monkeypatch):
    calls = []
    monkeypatch.setattr(db, "update_doc", lambda *a: calls.append(a))

    edited = state.begin_edit().update_draft(
        name="Someone Else",
        age=99,
        mobile="x",
        whatsapp="y",
        email="z@example.com",
        weight=120.0,
        height=150.0,
        allergies="peanuts",
        diseases="asthma",
        emergency_contact="000",
        emergency_name="Nobody",
    )
    assert edited.is_dirty

    reverted = edited.revert()
    assert not reverted.editing
    assert reverted.draft == ProfileForm.from_member(state.snapshot)
    assert reverted.snapshot == state.snapshot
    assert not reverted.is_dirty
    assert calls == []


def test_draft_bmi_follows_weight_and_height(state):
    editing = state.begin_edit()
    assert editing.draft.bmi.category == "Normal"
    heavier = editing.update_draft(weight=100.0)
    assert heavier.draft.bmi.bmi == 32.7
    assert heavier.draft.bmi.category == "Obese"
    assert heavier.update_draft(height=None).draft.bmi is None
    # snapshot keeps its stored value until save
    assert heavier.snapshot.bmi_category == "Normal"


def test_save_profile_persists_draft_and_bmi(state, member_id):
    edited = state.begin_edit().update_draft(name="Mona A.", weight=80.0)
    saved = member_profile.save_profile(edited)

    doc = db.get_doc(MEMBERS, member_id)
    assert doc["name"] == "Mona A."
    assert doc["weight"] == 80.0
    assert doc["bmi"] == 26.1
    assert doc["bmiCategory"] == "Overweight"
    # untouched fields survive the partial update
    assert doc["username"] == "mona"
    assert doc["level"] == "intermediate"

    assert not saved.editing
    assert saved.snapshot.name == "Mona A."
    assert saved.snapshot.bmi == 26.1
    assert saved.snapshot.bmi_category == "Overweight"
    assert saved.draft == ProfileForm.from_member(saved.snapshot)


def test_save_without_bmi_inputs_clears_bmi(state, member_id):
    member_profile.save_profile(state.begin_edit().update_draft(height=None))
    doc = db.get_doc(MEMBERS, member_id)
    assert doc["bmi"] is None
    assert doc["bmiCategory"] is None


def test_save_failure_propagates_and_keeps_edit_state(state, monkeypatch):
    def boom(*args):
        raise RuntimeError("write failed")

    monkeypatch.setattr(db, "update_doc", boom)
    edited = state.begin_edit().update_draft(name="Changed")
    with pytest.raises(RuntimeError):
        member_profile.save_profile(edited)
    assert edited.editing
    assert edited.draft.name == "Changed"


def test_save_missing_member_raises(state):
    ghost = ProfileState.from_member(replace(state.snapshot, id="ghost")).begin_edit()
    with pytest.raises(db.DocumentNotFoundError):
        member_profile.save_profile(ghost)


def test_success_message_clears_after_three_seconds(state):
    saved_at = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)
    committed = state.begin_edit().commit(saved_at)
    assert committed.show_success(saved_at + timedelta(seconds=2))
    assert not committed.show_success(saved_at + timedelta(seconds=3))
    assert not state.show_success(saved_at)


def test_fresh_edit_is_not_dirty(state):
    editing = state.begin_edit()
    assert not editing.is_dirty
    assert editing.update_draft(mobile="0123").is_dirty
