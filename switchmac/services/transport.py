"""Remote-shell client sessions over an external subprocess.

Each session runs one client process (``plink`` by default) with all three
standard streams piped. stdout and stderr are drained by background
threads so a chatty switch can never fill a pipe and block our writes.
"""

from __future__ import annotations

import subprocess
import threading
from typing import IO, Protocol

from switchmac.config import Settings, settings
from switchmac.exceptions import CommandFailure, ConnectFailure
from switchmac.models.commands import Credential, SessionOutput
from switchmac.utils.logging import get_logger

log = get_logger(__name__)

SECRET_MASK = "********"
# Router shells read "\r\n" as two commands
LINE_TERMINATOR = "\n"


class SessionLike(Protocol):
    host: str

    def write(self, text: str) -> bool: ...

    def read_all(self, timeout: float | None = None) -> SessionOutput: ...

    def terminate(self) -> None: ...

    def __enter__(self) -> "SessionLike": ...

    def __exit__(self, *exc) -> None: ...


class SessionFactory(Protocol):
    def __call__(
        self,
        host: str,
        credential: Credential,
        *,
        batch: bool = True,
        cfg: Settings | None = None,
    ) -> SessionLike: ...


def build_argv(
    host: str,
    credential: Credential,
    *,
    batch: bool = True,
    cfg: Settings | None = None,
) -> list[str]:
    """Command line for the remote-shell client."""
    _cfg = cfg or settings
    argv = [_cfg.ssh_client, *_cfg.ssh_client_args]
    if batch and _cfg.batch_flag:
        argv.append(_cfg.batch_flag)
    if _cfg.verbose_flag:
        argv.append(_cfg.verbose_flag)
    if _cfg.protocol_flag:
        argv.append(_cfg.protocol_flag)
    if _cfg.ssh_port != 22:
        argv += ["-P", str(_cfg.ssh_port)]
    argv += [
        "-pw",
        credential.password.get_secret_value(),
        f"{credential.username}@{host}",
    ]
    return argv


def scrub_argv(argv: list[str], secret: str) -> None:
    """Overwrite *secret* in place so nothing holding the list can read it."""
    for i, arg in enumerate(argv):
        if arg == secret:
            argv[i] = SECRET_MASK


class _StreamDrain(threading.Thread):
    """Reads a pipe to EOF into memory."""

    def __init__(self, stream: IO[bytes], name: str) -> None:
        super().__init__(name=name, daemon=True)
        self._stream = stream
        self._chunks: list[bytes] = []

    def run(self) -> None:
        try:
            for chunk in iter(lambda: self._stream.read1(4096), b""):
                self._chunks.append(chunk)
        except (OSError, ValueError):
            # Pipe closed underneath us by terminate()
            pass

    @property
    def text(self) -> str:
        return b"".join(self._chunks).decode("utf-8", errors="replace")


class Session:
    """One remote-shell client process bound to one host."""

    def __init__(self, host: str, proc: subprocess.Popen, cfg: Settings | None = None) -> None:
        self.host = host
        self._cfg = cfg or settings
        self._proc = proc
        self._stdout = _StreamDrain(proc.stdout, f"{host}-stdout")
        self._stderr = _StreamDrain(proc.stderr, f"{host}-stderr")
        self._stdout.start()
        self._stderr.start()
        self.state = "running"

    @property
    def pid(self) -> int:
        return self._proc.pid

    @property
    def args(self):
        return self._proc.args

    # ── io ────────────────────────────────────────────────────────────

    def write(self, text: str) -> bool:
        """Send one line. Returns False if the client has already gone away."""
        stdin = self._proc.stdin
        if stdin is None or stdin.closed:
            return False
        try:
            stdin.write((text + LINE_TERMINATOR).encode("utf-8"))
            stdin.flush()
        except (BrokenPipeError, OSError):
            log.debug("session.write_after_exit", host=self.host)
            return False
        return True

    def read_all(self, timeout: float | None = None) -> SessionOutput:
        """Close stdin, wait for the client to exit, return everything it printed."""
        if timeout is None and self._cfg.session_timeout_seconds > 0:
            timeout = self._cfg.session_timeout_seconds
        self._close_stdin()
        try:
            returncode = self._proc.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            log.warning("session.timeout", host=self.host, timeout=timeout)
            self.terminate()
            raise CommandFailure(
                self.host,
                f"client did not exit within {timeout}s",
                stderr=self._stderr.text,
            )
        self._stdout.join()
        self._stderr.join()
        self.state = "exited"
        log.debug("session.exited", host=self.host, rc=returncode)
        return SessionOutput(
            host=self.host,
            stdout=self._stdout.text,
            stderr=self._stderr.text,
            returncode=returncode,
        )

    # ── lifecycle ─────────────────────────────────────────────────────

    def terminate(self) -> None:
        if self._proc.poll() is None:
            self._proc.kill()
            log.info("session.killed", host=self.host, pid=self._proc.pid)
        self._close_stdin()
        self._proc.wait()
        self._stdout.join(timeout=5)
        self._stderr.join(timeout=5)
        for stream in (self._proc.stdout, self._proc.stderr):
            if stream is not None:
                stream.close()
        if self.state == "running":
            self.state = "terminated"

    def _close_stdin(self) -> None:
        stdin = self._proc.stdin
        if stdin is not None and not stdin.closed:
            try:
                stdin.close()
            except (BrokenPipeError, OSError):
                pass

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, *exc) -> None:
        self.terminate()


def open_session(
    host: str,
    credential: Credential,
    *,
    batch: bool = True,
    cfg: Settings | None = None,
) -> Session:
    """Start the remote-shell client for *host*."""
    _cfg = cfg or settings
    argv = build_argv(host, credential, batch=batch, cfg=_cfg)
    try:
        proc = subprocess.Popen(
            argv,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
    except OSError as exc:
        raise ConnectFailure(host, f"could not start {_cfg.ssh_client}: {exc}") from exc
    finally:
        # Popen keeps a reference to this same list as proc.args
        scrub_argv(argv, credential.password.get_secret_value())
    log.info("session.opened", host=host, pid=proc.pid, batch=batch)
    return Session(host, proc, _cfg)
