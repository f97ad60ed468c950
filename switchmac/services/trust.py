"""Host-key trust negotiation.

In batch mode the remote-shell client refuses unknown host keys outright.
When that happens we ask a decider what to do, and on acceptance start a
fresh interactive session that answers the client's key prompt itself.
"""

from __future__ import annotations

import re
import threading
import time
from typing import Callable, Optional

from switchmac.config import Settings, TrustPolicy, settings
from switchmac.exceptions import TrustRejected
from switchmac.models.commands import Credential, SessionOutput, TrustDecision
from switchmac.services.transport import SessionFactory, SessionLike, open_session
from switchmac.utils.logging import get_logger

log = get_logger(__name__)

TrustDecider = Callable[[str, str], TrustDecision]

_UNKNOWN_KEY_RE = re.compile(
    r"key is not cached|host key is not cached|Store key in cache\?",
    re.IGNORECASE,
)
_ABANDONED_RE = re.compile(r"Connection abandoned", re.IGNORECASE)
# How much of the end of stderr counts as its "tail"
_TAIL_CHARS = 200

# What the client's "Store key in cache? (y/n)" prompt expects
TRUST_ANSWERS: dict[TrustDecision, str] = {
    TrustDecision.accept_and_cache: "y",
    TrustDecision.accept_once: "n",
}


def needs_trust(output: SessionOutput) -> bool:
    return _UNKNOWN_KEY_RE.search(output.stderr) is not None


def abandoned(output: SessionOutput) -> bool:
    return _ABANDONED_RE.search(output.stderr.rstrip()[-_TAIL_CHARS:]) is not None


def fingerprint_text(output: SessionOutput) -> str:
    """The part of stderr worth showing to whoever decides."""
    lines = [
        line for line in output.stderr.splitlines()
        if "fingerprint" in line.lower() or "key" in line.lower()
    ]
    return "\n".join(lines) or output.stderr.strip()


# ── deciders ──────────────────────────────────────────────────────────────

def fixed_decider(decision: TrustDecision) -> TrustDecider:
    def _decide(host: str, prompt: str) -> TrustDecision:
        return decision
    return _decide


def console_decider(
    ask: Callable[[str], str] = input,
    echo: Callable[[str], None] = print,
) -> TrustDecider:
    """Ask on the terminal: accept [o]nce, accept and [c]ache, or [r]eject."""

    def _decide(host: str, prompt: str) -> TrustDecision:
        echo(f"The host key for {host} is not trusted yet.")
        if prompt:
            echo(prompt)
        while True:
            answer = ask("Accept [o]nce, accept and [c]ache, or [r]eject? ").strip().lower()
            if answer in ("o", "once"):
                return TrustDecision.accept_once
            if answer in ("c", "cache"):
                return TrustDecision.accept_and_cache
            if answer in ("r", "reject", ""):
                return TrustDecision.reject

    return _decide


def decider_for_policy(policy: TrustPolicy, *, interactive: bool = True) -> TrustDecider:
    """Map a configured policy to a decider.

    ``prompt`` needs a terminal; without one it degrades to ``reject``.
    """
    if policy == "prompt":
        if interactive:
            return console_decider()
        return fixed_decider(TrustDecision.reject)
    return fixed_decider(TrustDecision(policy))


# ── negotiator ────────────────────────────────────────────────────────────

class TrustNegotiator:
    """Unknown -> PromptUser -> {AcceptOnce, AcceptAndCache, Reject}."""

    def __init__(
        self,
        decider: TrustDecider,
        *,
        session_factory: Optional[SessionFactory] = None,
        cfg: Settings | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._decider = decider
        self._open = session_factory or open_session
        self._cfg = cfg or settings
        self._sleep = sleep
        # Pool threads must not prompt at the same time
        self._decide_lock = threading.Lock()

    def negotiate(
        self,
        host: str,
        credential: Credential,
        first_output: SessionOutput,
    ) -> SessionLike:
        """Return a new session whose key prompt has already been answered."""
        with self._decide_lock:
            decision = self._decider(host, fingerprint_text(first_output))
        log.info("trust.decision", host=host, decision=decision.value)
        if decision is TrustDecision.reject:
            raise TrustRejected(host, "host key rejected", stderr=first_output.stderr)

        session = self._open(host, credential, batch=False, cfg=self._cfg)
        try:
            session.write(TRUST_ANSWERS[decision])
            # The client drops input written right after a key acceptance
            self._sleep(self._cfg.trust_settle_seconds)
        except BaseException:
            session.terminate()
            raise
        return session
