"""
VELO Identity - Identity Source
===============================
IdentitySource is what the engine reads; SessionStore is the
external user/session collaborator it is built on.

InMemoryIdentitySource implements both for bootstrap and tests.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional, Protocol

from core.identity.models import ANONYMOUS, UNINITIALIZED, Identity

logger = logging.getLogger("velo.identity")

AuthChangeCallback = Callable[[Identity], None]


class IdentitySource(Protocol):
    def current_identity(self) -> Identity:
        ...


class SessionStore(Protocol):
    def get_current_user(self) -> Optional[str]:
        ...

    def on_auth_change(self, callback: AuthChangeCallback) -> Callable[[], None]:
        ...


class InMemoryIdentitySource:
    """
    Deterministic identity source.

    Lifecycle:
        bootstrap(user_id | None)   initialized flips to True, once
        sign_in(user_id)
        begin_sign_out()            signing_out=True, user still known
        complete_sign_out()         user cleared
    """

    def __init__(self) -> None:
        self._identity = UNINITIALIZED
        self._callbacks: list[AuthChangeCallback] = []
        self._lock = threading.Lock()

    # ── IdentitySource / SessionStore ─────────────────────────

    def current_identity(self) -> Identity:
        return self._identity

    def get_current_user(self) -> Optional[str]:
        return self._identity.user_id

    def on_auth_change(self, callback: AuthChangeCallback) -> Callable[[], None]:
        """Register callback; returns an unsubscribe function."""
        with self._lock:
            self._callbacks.append(callback)

        def _unsubscribe() -> None:
            with self._lock:
                if callback in self._callbacks:
                    self._callbacks.remove(callback)

        return _unsubscribe

    # ── Transitions ───────────────────────────────────────────

    def bootstrap(self, user_id: Optional[str] = None) -> Identity:
        if self._identity.initialized:
            raise RuntimeError("Identity source is already initialized.")
        return self._set(Identity(user_id=user_id, initialized=True))

    def sign_in(self, user_id: str) -> Identity:
        self._require_initialized()
        return self._set(Identity(user_id=user_id, initialized=True))

    def begin_sign_out(self) -> Identity:
        self._require_initialized()
        current = self._identity
        if current.user_id is None:
            return current
        return self._set(
            Identity(user_id=current.user_id, initialized=True, signing_out=True)
        )

    def complete_sign_out(self) -> Identity:
        self._require_initialized()
        return self._set(ANONYMOUS)

    # ── Internals ─────────────────────────────────────────────

    def _require_initialized(self) -> None:
        if not self._identity.initialized:
            raise RuntimeError("Identity source has not been bootstrapped.")

    def _set(self, identity: Identity) -> Identity:
        with self._lock:
            self._identity = identity
            callbacks = tuple(self._callbacks)

        for callback in callbacks:
            try:
                callback(identity)
            except Exception:
                logger.exception("Auth change callback failed.")
        return identity
