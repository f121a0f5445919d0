"""
VELO Core Resilience - Public API
=================================
Connectivity reporting for degraded (offline) operation.
"""

from core.resilience.connectivity import (
    Connectivity,
    ConnectivityMonitor,
    ConnectivityProbe,
    StaticConnectivityProbe,
)

__all__ = [
    "Connectivity",
    "ConnectivityMonitor",
    "ConnectivityProbe",
    "StaticConnectivityProbe",
]
