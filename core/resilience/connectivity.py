"""
VELO Core Resilience - Connectivity
===================================
Models the network reachability the access engine is told about:
  ONLINE | OFFLINE

Offline only relaxes subscription enforcement (cached tenant data is
trusted). It never relaxes role or tenant-type checks.

A manual offline switch sits on top of the probe: when set, the
monitor reports OFFLINE whatever the probe says.
"""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Callable, List, Optional, Protocol

logger = logging.getLogger("velo.resilience")


# ══════════════════════════════════════════════════════════════
# CONNECTIVITY ENUM
# ══════════════════════════════════════════════════════════════

class Connectivity(Enum):
    ONLINE = "online"
    OFFLINE = "offline"

    @classmethod
    def from_bool(cls, online: bool) -> "Connectivity":
        return cls.ONLINE if online else cls.OFFLINE


# ══════════════════════════════════════════════════════════════
# PROBE CONTRACT
# ══════════════════════════════════════════════════════════════

class ConnectivityProbe(Protocol):
    def is_online(self) -> bool:
        ...


class StaticConnectivityProbe:
    """Probe with a settable answer. Used by tests and the dev adapter."""

    def __init__(self, online: bool = True) -> None:
        self._online = online

    def is_online(self) -> bool:
        return self._online

    def set_online(self, online: bool) -> None:
        self._online = online


# ══════════════════════════════════════════════════════════════
# MONITOR
# ══════════════════════════════════════════════════════════════

class ConnectivityMonitor:
    """
    Combines a probe with the manual offline switch.

    A probe that raises is logged and reported as ONLINE, so a broken
    probe keeps subscription enforcement in place.
    """

    def __init__(
        self,
        probe: Optional[ConnectivityProbe] = None,
        manual_offline: bool = False,
    ) -> None:
        self._probe = probe or StaticConnectivityProbe()
        self._manual_offline = manual_offline
        self._listeners: List[Callable[[Connectivity], None]] = []
        self._lock = threading.Lock()

    @property
    def manual_offline(self) -> bool:
        return self._manual_offline

    def current(self) -> Connectivity:
        if self._manual_offline:
            return Connectivity.OFFLINE
        try:
            return Connectivity.from_bool(bool(self._probe.is_online()))
        except Exception:
            logger.exception("Connectivity probe failed; assuming online.")
            return Connectivity.ONLINE

    def set_manual_offline(self, offline: bool) -> None:
        with self._lock:
            if offline == self._manual_offline:
                return
            self._manual_offline = offline
            listeners = list(self._listeners)

        mode = self.current()
        logger.info(f"Connectivity mode set to {mode.value} (manual={offline}).")
        for listener in listeners:
            listener(mode)

    def subscribe(self, listener: Callable[[Connectivity], None]) -> Callable[[], None]:
        """Register a listener; it is called once immediately."""
        with self._lock:
            self._listeners.append(listener)
        listener(self.current())

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe
