"""Command allowlist / denylist for commands sent to the fleet.

Only read-only exec commands may be broadcast to every switch in a run.
"""

from __future__ import annotations

import re
from typing import Sequence

from switchmac.utils.logging import get_logger

log = get_logger(__name__)

# ── ALWAYS-DENIED patterns ────────────────────────────────────────────────
DENY_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"^\s*reload\b", re.I),
    re.compile(r"^\s*erase\b", re.I),
    re.compile(r"^\s*format\b", re.I),
    re.compile(r"^\s*write\b", re.I),
    re.compile(r"^\s*delete\b", re.I),
    re.compile(r"^\s*squeeze\b", re.I),
    re.compile(r"^\s*copy\b", re.I),
    re.compile(r"^\s*clear\b", re.I),
    re.compile(r"^\s*debug\b", re.I),
    re.compile(r"^\s*conf(igure)?\b", re.I),
    re.compile(r"^\s*enable\b", re.I),
    re.compile(r"^\s*crypto\s+key\s+zeroize\b", re.I),
]

# ── EXEC-mode allow patterns ──────────────────────────────────────────────
EXEC_ALLOW_PATTERNS: list[re.Pattern[str]] = [
    # "show" and its abbreviations ("sh", "sho")
    re.compile(r"^\s*sh(o(w)?)?\b", re.I),
    # Terminal settings (harmless)
    re.compile(r"^\s*terminal\b", re.I),
]


# ── Public API ────────────────────────────────────────────────────────────

class CommandFilterResult:
    __slots__ = ("allowed", "reason")

    def __init__(self, allowed: bool, reason: str):
        self.allowed = allowed
        self.reason = reason

    def __bool__(self) -> bool:
        return self.allowed


def check_exec_command(command: str) -> CommandFilterResult:
    """Check whether an exec-mode command may be sent to the fleet."""
    cmd = command.strip()
    if not cmd:
        return CommandFilterResult(False, "empty command")

    for pat in DENY_PATTERNS:
        if pat.search(cmd):
            return CommandFilterResult(False, f"denied by safety rule: {pat.pattern}")

    for pat in EXEC_ALLOW_PATTERNS:
        if pat.search(cmd):
            return CommandFilterResult(True, "allowed exec command")

    return CommandFilterResult(False, "command not in exec allowlist")


def check_commands(commands: Sequence[str]) -> None:
    """Raise ``ValueError`` naming the first command that is not allowed."""
    for cmd in commands:
        filt = check_exec_command(cmd)
        if not filt.allowed:
            log.warning("filter.denied", command=cmd, reason=filt.reason)
            raise ValueError(f"command {cmd!r} not allowed: {filt.reason}")
