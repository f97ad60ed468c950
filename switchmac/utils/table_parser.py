"""Utilities for parsing column-aligned tables out of a switch CLI transcript."""

from __future__ import annotations

import re
from typing import Iterable, Sequence

from switchmac.exceptions import EmptyOutput, ParseTruncation
from switchmac.models.report import ParseResult, TableRow
from switchmac.utils.logging import get_logger

log = get_logger(__name__)


# ---------------------------------------------------------------------------
# Line classification
# ---------------------------------------------------------------------------

# "switch1>" or "switch1>show mac address-table"
PROMPT_RE = re.compile(r"^(\S+?)>")
# Columns are right-padded with a variable number of spaces
COLUMN_SPLIT_RE = re.compile(r"\s{2,}")


def is_prompt(line: str) -> bool:
    return PROMPT_RE.match(line) is not None


def split_columns(line: str) -> list[str]:
    """Split a table line on runs of two or more whitespace characters.

    Single spaces stay inside a cell, so "Mac Address" is one header.
    """
    stripped = line.strip()
    if not stripped:
        return []
    return COLUMN_SPLIT_RE.split(stripped)


def zip_row(headers: Sequence[str], values: Sequence[str]) -> dict[str, str]:
    """Pair headers with values by position.

    Missing trailing values become ``""``; values past the last header
    are dropped.
    """
    return {
        header: values[i] if i < len(values) else ""
        for i, header in enumerate(headers)
    }


def find_first_prompt(lines: Sequence[str]) -> int | None:
    for i, line in enumerate(lines):
        if is_prompt(line):
            return i
    return None


# ---------------------------------------------------------------------------
# Transcript parsing
# ---------------------------------------------------------------------------

def parse_transcript(
    lines: Iterable[str],
    commands: Sequence[str],
    host: str,
    *,
    skip_lines: int = 2,
    min_lines: int = 3,
) -> ParseResult:
    """Turn a raw session transcript into rows, one table per command.

    The banner is skipped up to the first prompt line, then *skip_lines*
    more lines (the paging-disable echo and the first echoed command).
    Each table is a header line followed by data lines and is closed by
    the next prompt line.
    """
    lines = list(lines)
    result = ParseResult()

    start = find_first_prompt(lines)
    if start is None or len(lines) - start < min_lines:
        warning = EmptyOutput(host, "no output")
        log.warning("parse.empty_output", host=host, lines=len(lines))
        result.warnings.append(warning.message)
        return result

    cursor = start + skip_lines
    for command in commands:
        # Blank separator lines between tables
        while cursor < len(lines) and not lines[cursor].strip():
            cursor += 1
        if cursor >= len(lines):
            result.warnings.append(f"no output for command: {command}")
            log.warning("parse.missing_table", host=host, command=command)
            break

        header_line = lines[cursor]
        cursor += 1
        if is_prompt(header_line):
            # The command printed nothing before the next prompt
            result.warnings.append(f"empty table for command: {command}")
            log.info("parse.empty_table", host=host, command=command)
            continue
        headers = split_columns(header_line)

        closed = False
        while cursor < len(lines):
            line = lines[cursor]
            cursor += 1
            if is_prompt(line):
                closed = True
                break
            values = split_columns(line)
            if not values:
                continue
            if len(values) != len(headers):
                log.debug(
                    "parse.column_mismatch",
                    host=host,
                    expected=len(headers),
                    got=len(values),
                )
            result.rows.append(
                TableRow(host=host, command=command, cells=zip_row(headers, values)),
            )

        if not closed:
            warning = ParseTruncation(
                host, f"transcript ended inside table for: {command}", command,
            )
            log.warning("parse.truncated", host=host, command=command)
            result.warnings.append(warning.message)
            break

    return result
