"""
VELO Django Adapter - Request Identity
======================================
The signed-in user id lives in the Django session under
SESSION_USER_KEY. Session mechanics (passwords, tokens) are outside
this adapter; whatever signs a user in only has to set that key.

A Django request always sees a bootstrapped identity: the session is
loaded before the view runs, so initialized is True.
"""

from __future__ import annotations

from typing import Optional

from django.http import HttpRequest

from core.identity.models import ANONYMOUS, Identity

SESSION_USER_KEY = "velo_user_id"


def session_user_id(request: HttpRequest) -> Optional[str]:
    value = request.session.get(SESSION_USER_KEY)
    if not value or not isinstance(value, str):
        return None
    return value


def identity_from_request(request: HttpRequest) -> Identity:
    user_id = session_user_id(request)
    if user_id is None:
        return ANONYMOUS
    return Identity(user_id=user_id, initialized=True)


def clear_session_user(request: HttpRequest) -> None:
    request.session.flush()
