"""
VELO Identity - Session Identity Model
======================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Identity:
    """
    Who is signed in, as far as the session bootstrap knows.

    initialized=False means auth has not finished bootstrapping;
    it is not the same as "nobody is signed in".
    """

    user_id: Optional[str] = None
    initialized: bool = False
    signing_out: bool = False

    def __post_init__(self):
        if self.user_id is not None and (
            not isinstance(self.user_id, str) or not self.user_id
        ):
            raise ValueError("user_id must be a non-empty string or None.")

        if not isinstance(self.initialized, bool):
            raise ValueError("initialized must be a bool.")

        if not self.initialized and self.user_id is not None:
            raise ValueError("user_id is only known after initialization.")

    @property
    def is_authenticated(self) -> bool:
        return self.initialized and self.user_id is not None


UNINITIALIZED = Identity()
ANONYMOUS = Identity(user_id=None, initialized=True)
