"""Fast reachability check before launching the remote-shell client."""

from __future__ import annotations

import socket


def is_host_alive(host: str, port: int = 22, timeout: float = 2.0) -> bool:
    """True if a TCP connection to *host*:*port* opens within *timeout*."""
    try:
        with socket.create_connection((host, port), timeout=timeout):
            return True
    except OSError:
        return False
