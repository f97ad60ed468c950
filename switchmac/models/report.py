"""Parsed rows and the merged fleet report."""

from __future__ import annotations

from datetime import datetime, timezone
from types import MappingProxyType
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

HOST_COLUMN = "hostname"
# Where a table's own "hostname" cell goes in flat rows
DEVICE_HOST_COLUMN = "hostname_table"


class TableRow(BaseModel):
    """One data line of a CLI table, keyed by its header.

    ``cells`` is a read-only view; rows never change after parsing.
    """

    model_config = ConfigDict(frozen=True)

    host: str
    command: str
    cells: Mapping[str, str]

    @field_validator("cells", mode="after")
    @classmethod
    def _freeze_cells(cls, cells: Mapping[str, str]) -> Mapping[str, str]:
        return MappingProxyType(dict(cells))

    @field_serializer("cells")
    def _dump_cells(self, cells: Mapping[str, str]) -> dict[str, str]:
        return dict(cells)

    def as_flat(self) -> dict[str, str]:
        """Cells in header order followed by the host column.

        The host column always holds the Target Host. A table that has its
        own ``hostname`` column keeps that value under ``hostname_table``.
        """
        flat = dict(self.cells)
        if HOST_COLUMN in flat:
            flat[DEVICE_HOST_COLUMN] = flat.pop(HOST_COLUMN)
        flat[HOST_COLUMN] = self.host
        return flat


class ParseResult(BaseModel):
    rows: list[TableRow] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class HostFailure(BaseModel):
    host: str
    kind: str
    message: str
    artifact: Optional[str] = None


class Report(BaseModel):
    """Rows from every host that succeeded, plus the hosts that did not."""

    rows: list[TableRow] = Field(default_factory=list)
    failures: list[HostFailure] = Field(default_factory=list)
    warnings: dict[str, list[str]] = Field(default_factory=dict)
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: Optional[datetime] = None

    @property
    def contributed_hosts(self) -> list[str]:
        seen: list[str] = []
        for row in self.rows:
            if row.host not in seen:
                seen.append(row.host)
        return seen

    @property
    def failed_hosts(self) -> list[str]:
        return [f.host for f in self.failures]

    def flat_rows(self) -> list[dict[str, str]]:
        return [row.as_flat() for row in self.rows]
