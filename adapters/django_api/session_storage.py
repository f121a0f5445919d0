"""
VELO Django Adapter - Impersonation Session Storage
===================================================
SessionStorage bound to request.session, so an impersonation survives
page reloads for exactly as long as the Django session does.
"""

from __future__ import annotations

from typing import Optional


class DjangoSessionImpersonationStorage:
    def __init__(self, session) -> None:
        self._session = session

    def get(self, key: str) -> Optional[str]:
        value = self._session.get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        self._session[key] = value

    def delete(self, key: str) -> None:
        if key in self._session:
            del self._session[key]
