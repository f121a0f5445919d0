"""
VELO Core Resilience - Connectivity Tests
"""

from __future__ import annotations

import logging

import pytest

from core.resilience import (
    Connectivity,
    ConnectivityMonitor,
    StaticConnectivityProbe,
)


class BrokenProbe:
    def is_online(self):
        raise OSError("no route to host")


# ── Connectivity Tests ────────────────────────────────────────


class TestConnectivity:
    def test_from_bool(self):
        assert Connectivity.from_bool(True) == Connectivity.ONLINE
        assert Connectivity.from_bool(False) == Connectivity.OFFLINE


# ── Monitor Tests ─────────────────────────────────────────────


class TestConnectivityMonitor:
    def test_defaults_online(self):
        assert ConnectivityMonitor().current() == Connectivity.ONLINE

    def test_follows_probe(self):
        probe = StaticConnectivityProbe(online=True)
        monitor = ConnectivityMonitor(probe)
        probe.set_online(False)
        assert monitor.current() == Connectivity.OFFLINE

    def test_manual_offline_overrides_probe(self):
        monitor = ConnectivityMonitor(StaticConnectivityProbe(True), manual_offline=True)
        assert monitor.manual_offline
        assert monitor.current() == Connectivity.OFFLINE

    def test_broken_probe_counts_as_online(self, caplog):
        monitor = ConnectivityMonitor(BrokenProbe())
        with caplog.at_level(logging.ERROR, logger="velo.resilience"):
            assert monitor.current() == Connectivity.ONLINE
        assert "probe failed" in caplog.text

    def test_subscribe_calls_immediately(self):
        seen = []
        ConnectivityMonitor().subscribe(seen.append)
        assert seen == [Connectivity.ONLINE]

    def test_manual_switch_notifies(self):
        seen = []
        monitor = ConnectivityMonitor()
        monitor.subscribe(seen.append)
        monitor.set_manual_offline(True)
        monitor.set_manual_offline(True)
        monitor.set_manual_offline(False)
        assert seen == [
            Connectivity.ONLINE,
            Connectivity.OFFLINE,
            Connectivity.ONLINE,
        ]

    def test_unsubscribe(self):
        seen = []
        monitor = ConnectivityMonitor()
        unsubscribe = monitor.subscribe(seen.append)
        unsubscribe()
        monitor.set_manual_offline(True)
        assert seen == [Connectivity.ONLINE]

    @pytest.mark.parametrize("online", [True, False])
    def test_manual_off_restores_probe_answer(self, online):
        monitor = ConnectivityMonitor(StaticConnectivityProbe(online), manual_offline=True)
        monitor.set_manual_offline(False)
        assert monitor.current() == Connectivity.from_bool(online)
