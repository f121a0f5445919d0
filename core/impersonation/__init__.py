"""
VELO Impersonation - Public API
===============================
"""

from core.impersonation.manager import ImpersonationManager
from core.impersonation.session import INACTIVE, ImpersonationSession
from core.impersonation.storage import InMemorySessionStorage, SessionStorage

__all__ = [
    "INACTIVE",
    "ImpersonationManager",
    "ImpersonationSession",
    "InMemorySessionStorage",
    "SessionStorage",
]
