"""
auth.py
Session-scoped member identity (who is signed in, their name and gym).

Password checks live with the external identity provider; this module only
resolves a username to a member document and keeps it in the session.
"""

from __future__ import annotations

import logging
from collections.abc import MutableMapping

import db
from models import MEMBERS, CurrentUser

logger = logging.getLogger(__name__)

SESSION_KEY = "current_user"


def find_member_by_username(username: str) -> dict | None:
    docs = db.query_docs(MEMBERS, "username", username)
    return docs[0] if docs else None


def sign_in(session: MutableMapping, username: str) -> CurrentUser | None:
    doc = find_member_by_username(username.strip())
    if not doc:
        logger.info("Sign-in refused for unknown username %r", username)
        return None
    user = CurrentUser(id=doc["id"], name=doc.get("name") or username, gym_id=doc.get("gymId"))
    session[SESSION_KEY] = user
    return user


def current_user(session: MutableMapping) -> CurrentUser | None:
    return session.get(SESSION_KEY)


def sign_out(session: MutableMapping) -> None:
    session.pop(SESSION_KEY, None)
