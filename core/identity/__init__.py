"""
VELO Identity - Public API
==========================
"""

from core.identity.models import ANONYMOUS, UNINITIALIZED, Identity
from core.identity.source import (
    IdentitySource,
    InMemoryIdentitySource,
    SessionStore,
)

__all__ = [
    "ANONYMOUS",
    "UNINITIALIZED",
    "Identity",
    "IdentitySource",
    "InMemoryIdentitySource",
    "SessionStore",
]
