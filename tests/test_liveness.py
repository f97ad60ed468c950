"""Tests for the TCP reachability pre-check."""

from __future__ import annotations

import socket

from switchmac.utils.liveness import is_host_alive


def test_open_port_is_alive():
    with socket.socket() as server:
        server.bind(("127.0.0.1", 0))
        server.listen(1)
        port = server.getsockname()[1]
        assert is_host_alive("127.0.0.1", port, timeout=1.0)


def test_closed_port_is_dead():
    with socket.socket() as probe:
        probe.bind(("127.0.0.1", 0))
        port = probe.getsockname()[1]
    # nothing listens there any more
    assert not is_host_alive("127.0.0.1", port, timeout=0.5)


def test_unresolvable_host_is_dead():
    assert not is_host_alive("no-such-host.invalid", 22, timeout=0.5)
