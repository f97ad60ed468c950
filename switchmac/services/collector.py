"""Fleet collector: run the command set on every host and merge the tables."""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional, Sequence

from switchmac.config import Settings, settings
from switchmac.exceptions import ConnectFailure
from switchmac.models.commands import Credential
from switchmac.models.report import HostFailure, ParseResult, Report
from switchmac.services.artifacts import ArtifactWriter
from switchmac.services.command_driver import CommandDriver
from switchmac.services.command_filter import check_commands
from switchmac.services.transport import SessionFactory
from switchmac.services.trust import TrustDecider, TrustNegotiator, decider_for_policy
from switchmac.utils.liveness import is_host_alive
from switchmac.utils.logging import get_logger
from switchmac.utils.table_parser import parse_transcript

log = get_logger(__name__)

ProgressCallback = Callable[[int, int, str, str], None]


def unique_hosts(hosts: Iterable[str]) -> list[str]:
    """Strip, drop blanks and repeats, keep first-seen order."""
    seen: dict[str, None] = {}
    for host in hosts:
        host = host.strip()
        if host:
            seen.setdefault(host, None)
    return list(seen)


class FleetCollector:
    """Collects one report from many switches; a failing host never stops the run."""

    def __init__(
        self,
        *,
        decider: Optional[TrustDecider] = None,
        session_factory: Optional[SessionFactory] = None,
        cfg: Settings | None = None,
        sleep: Callable[[float], None] = time.sleep,
        liveness: Callable[[str, int, float], bool] = is_host_alive,
        artifacts: Optional[ArtifactWriter] = None,
    ) -> None:
        self._cfg = cfg or settings
        negotiator = TrustNegotiator(
            decider or decider_for_policy(self._cfg.trust_policy),
            session_factory=session_factory,
            cfg=self._cfg,
            sleep=sleep,
        )
        self._driver = CommandDriver(
            negotiator,
            session_factory=session_factory,
            cfg=self._cfg,
            sleep=sleep,
        )
        self._liveness = liveness
        self._artifacts = artifacts or ArtifactWriter(self._cfg)

    # ── per host ──────────────────────────────────────────────────────

    def collect_host(
        self,
        host: str,
        credential: Credential,
        commands: Sequence[str],
    ) -> ParseResult:
        """Drive and parse one host. Host-fatal errors propagate."""
        if self._cfg.precheck_liveness and not self._liveness(
            host, self._cfg.ssh_port, self._cfg.liveness_timeout_seconds,
        ):
            raise ConnectFailure(host, f"unreachable on port {self._cfg.ssh_port}")

        output = self._driver.run(host, credential, commands)
        return parse_transcript(
            output.lines,
            commands,
            host,
            skip_lines=self._cfg.parser_skip_lines,
            min_lines=self._cfg.parser_min_lines,
        )

    def _attempt(
        self,
        host: str,
        credential: Credential,
        commands: Sequence[str],
    ) -> ParseResult | HostFailure:
        try:
            return self.collect_host(host, credential, commands)
        except Exception as exc:
            log.error(
                "collect.host_failed",
                host=host,
                kind=type(exc).__name__,
                error=str(exc),
            )
            return HostFailure(
                host=host,
                kind=type(exc).__name__,
                message=getattr(exc, "message", str(exc)),
                artifact=self._artifacts.write(host, exc),
            )

    # ── fleet ─────────────────────────────────────────────────────────

    def collect(
        self,
        hosts: Iterable[str],
        credential: Credential,
        commands: Optional[Sequence[str]] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> Report:
        """Run *commands* on every host and merge the rows in host order."""
        cmds = list(commands or self._cfg.default_commands)
        check_commands(cmds)
        targets = unique_hosts(hosts)
        report = Report()
        total = len(targets)
        log.info("collect.start", hosts=total, commands=len(cmds))

        outcomes: dict[str, ParseResult | HostFailure] = {}

        def _done(host: str, outcome: ParseResult | HostFailure) -> None:
            outcomes[host] = outcome
            status = "failed" if isinstance(outcome, HostFailure) else "ok"
            log.info(
                "collect.progress",
                host=host,
                done=len(outcomes),
                total=total,
                status=status,
            )
            if progress is not None:
                progress(len(outcomes), total, host, status)

        workers = max(1, self._cfg.max_workers)
        if workers == 1 or total <= 1:
            for host in targets:
                _done(host, self._attempt(host, credential, cmds))
        else:
            with ThreadPoolExecutor(
                max_workers=min(workers, total), thread_name_prefix="switch",
            ) as pool:
                futures = {
                    pool.submit(self._attempt, host, credential, cmds): host
                    for host in targets
                }
                for future in as_completed(futures):
                    _done(futures[future], future.result())

        for host in targets:
            outcome = outcomes[host]
            if isinstance(outcome, HostFailure):
                report.failures.append(outcome)
                continue
            report.rows.extend(outcome.rows)
            if outcome.warnings:
                report.warnings[host] = list(outcome.warnings)

        self._artifacts.write_index(report.failures)
        report.finished_at = datetime.now(timezone.utc)
        log.info(
            "collect.finished",
            rows=len(report.rows),
            failed=len(report.failures),
        )
        return report
