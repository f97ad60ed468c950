"""Feed a command sequence to a switch and collect the transcript."""

from __future__ import annotations

import time
from typing import Callable, Optional, Sequence

from switchmac.config import Settings, settings
from switchmac.exceptions import CommandFailure, ConnectFailure, TrustRejected
from switchmac.models.commands import Credential, SessionOutput
from switchmac.services.transport import SessionFactory, SessionLike, open_session
from switchmac.services.trust import TrustNegotiator, abandoned, needs_trust
from switchmac.utils.logging import get_logger

log = get_logger(__name__)


class CommandDriver:
    """Runs one command sequence per host, negotiating host-key trust once."""

    def __init__(
        self,
        negotiator: TrustNegotiator,
        *,
        session_factory: Optional[SessionFactory] = None,
        cfg: Settings | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._negotiator = negotiator
        self._open = session_factory or open_session
        self._cfg = cfg or settings
        self._sleep = sleep

    def run(
        self,
        host: str,
        credential: Credential,
        commands: Sequence[str],
    ) -> SessionOutput:
        """Return the transcript of *commands* on *host*.

        Raises ``ConnectFailure``, ``TrustRejected`` or ``CommandFailure``.
        """
        with self._open(host, credential, batch=True, cfg=self._cfg) as session:
            output = self._drive(session, commands)

        if output.failed and needs_trust(output):
            log.info("driver.untrusted_host_key", host=host)
            with self._negotiator.negotiate(host, credential, output) as session:
                output = self._drive(session, commands)
            if abandoned(output):
                raise TrustRejected(host, "connection abandoned", stderr=output.stderr)

        if output.failed:
            log.warning("driver.command_failed", host=host, rc=output.returncode)
            raise CommandFailure(
                host, f"client exited with code {output.returncode}", stderr=output.stderr,
            )
        if not output.stdout.strip():
            raise ConnectFailure(host, "client produced no output", stderr=output.stderr)

        log.info("driver.done", host=host, lines=len(output.lines))
        return output

    def _drive(self, session: SessionLike, commands: Sequence[str]) -> SessionOutput:
        for command in [self._cfg.paging_command, *commands]:
            if not session.write(command):
                log.debug("driver.client_gone", host=session.host, command=command)
                break
            self._sleep(self._cfg.command_pause_seconds)
        else:
            session.write(self._cfg.exit_command)
        return session.read_all()
