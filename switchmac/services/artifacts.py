"""Per-host diagnostic files for hosts that failed."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from pathlib import Path

from switchmac.config import Settings, settings
from switchmac.exceptions import CollectorError
from switchmac.models.report import HostFailure
from switchmac.utils.logging import get_logger

log = get_logger(__name__)

_UNSAFE_RE = re.compile(r"[^\w.\-]")


def artifact_name(host: str) -> str:
    """File name for *host*; IPv6 colons and path separators are replaced."""
    return f"{_UNSAFE_RE.sub('_', host)}.txt"


class ArtifactWriter:
    """Writes ``<error_dir>/<host>.txt`` and the failed-hosts index."""

    def __init__(self, cfg: Settings | None = None) -> None:
        self._cfg = cfg or settings
        self._dir = Path(self._cfg.error_dir)

    @property
    def directory(self) -> Path:
        return self._dir

    def write(self, host: str, exc: BaseException) -> str | None:
        stderr = exc.stderr if isinstance(exc, CollectorError) else ""
        message = exc.message if isinstance(exc, CollectorError) else str(exc)
        body = (
            f"host: {host}\n"
            f"time: {datetime.now(timezone.utc).isoformat()}\n"
            f"error: {type(exc).__name__}\n"
            f"message: {message}\n"
            "\n"
            f"{stderr}"
        )
        path = self._dir / artifact_name(host)
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            path.write_text(body, encoding="utf-8")
        except OSError as err:
            log.warning("artifact.write_failed", host=host, error=str(err))
            return None
        return str(path)

    def write_index(self, failures: list[HostFailure]) -> str | None:
        """One line per failed host: ``host<TAB>kind<TAB>artifact``.

        A clean run removes the index left by an earlier run.
        """
        path = self._dir / "failed-hosts.txt"
        if not failures:
            try:
                path.unlink(missing_ok=True)
            except OSError as err:
                log.warning("artifact.index_stale", path=str(path), error=str(err))
            return None
        lines = [f"{f.host}\t{f.kind}\t{f.artifact or ''}" for f in failures]
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        except OSError as err:
            log.warning("artifact.index_failed", error=str(err))
            return None
        return str(path)
