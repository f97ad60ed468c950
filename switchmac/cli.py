"""Command-line entry point: ``switchmac HOST [HOST ...]``."""

from __future__ import annotations

import argparse
import getpass
import os
import sys
from pathlib import Path
from typing import Optional, Sequence

from pydantic import SecretStr

from switchmac import __version__
from switchmac.config import Settings, settings
from switchmac.models.commands import Credential
from switchmac.services.collector import FleetCollector
from switchmac.services.trust import decider_for_policy
from switchmac.utils.logging import get_logger, setup_logging

log = get_logger(__name__)

EXIT_OK = 0
EXIT_SOME_FAILED = 1
EXIT_USAGE = 2


def load_hosts_file(path: str) -> list[str]:
    """One host per line; blank lines and ``#`` comments are ignored."""
    hosts: list[str] = []
    for line in Path(path).read_text(encoding="utf-8").splitlines():
        line = line.split("#", 1)[0].strip()
        if line:
            hosts.append(line)
    return hosts


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="switchmac",
        description="Collect MAC address tables from a fleet of switches.",
    )
    parser.add_argument("hosts", nargs="*", help="switch hostnames or addresses")
    parser.add_argument("-f", "--hosts-file", help="file with one host per line")
    parser.add_argument("-u", "--username", help="login name (default: current user)")
    parser.add_argument(
        "-c", "--command",
        dest="commands",
        action="append",
        help="CLI command to run (repeatable; default: MAC address table)",
    )
    parser.add_argument("-w", "--workers", type=int, help="hosts to query in parallel")
    parser.add_argument(
        "--trust",
        choices=["prompt", "accept_once", "accept_and_cache", "reject"],
        help="what to do with unknown host keys",
    )
    parser.add_argument(
        "--precheck", action="store_true", help="skip hosts whose SSH port is closed",
    )
    parser.add_argument("--error-dir", help="directory for per-host error files")
    parser.add_argument("-o", "--output", help="write the JSON report here")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def settings_from_args(args: argparse.Namespace, base: Settings | None = None) -> Settings:
    overrides: dict = {}
    if args.workers is not None:
        overrides["max_workers"] = args.workers
    if args.trust:
        overrides["trust_policy"] = args.trust
    if args.precheck:
        overrides["precheck_liveness"] = True
    if args.error_dir:
        overrides["error_dir"] = args.error_dir
    if args.verbose:
        overrides["log_level"] = "DEBUG"
    return (base or settings).model_copy(update=overrides)


def read_credential(username: Optional[str]) -> Credential:
    """Password comes from SWITCHMAC_PASSWORD or an interactive prompt."""
    user = username or getpass.getuser()
    secret = os.environ.get("SWITCHMAC_PASSWORD")
    if secret is None:
        secret = getpass.getpass(f"Password for {user}: ")
    return Credential(username=user, password=SecretStr(secret))


def _print_progress(done: int, total: int, host: str, status: str) -> None:
    print(f"[{done}/{total}] {host} {status}", file=sys.stderr)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    hosts = list(args.hosts)
    if args.hosts_file:
        try:
            hosts += load_hosts_file(args.hosts_file)
        except OSError as exc:
            parser.error(f"cannot read hosts file: {exc}")
    if not hosts:
        parser.error("no hosts given")

    cfg = settings_from_args(args)
    setup_logging(cfg.log_level, json=cfg.log_json)

    credential = read_credential(args.username)
    collector = FleetCollector(
        decider=decider_for_policy(cfg.trust_policy, interactive=sys.stdin.isatty()),
        cfg=cfg,
    )
    try:
        report = collector.collect(
            hosts, credential, args.commands, progress=_print_progress,
        )
    except ValueError as exc:
        print(f"switchmac: {exc}", file=sys.stderr)
        return EXIT_USAGE

    payload = report.model_dump_json(indent=2)
    if args.output:
        Path(args.output).write_text(payload, encoding="utf-8")
        log.info("cli.report_written", path=args.output, rows=len(report.rows))
    else:
        print(payload)

    for failure in report.failures:
        print(
            f"FAILED {failure.host}: {failure.kind}: {failure.message}"
            + (f" (see {failure.artifact})" if failure.artifact else ""),
            file=sys.stderr,
        )
    return EXIT_SOME_FAILED if report.failures else EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
