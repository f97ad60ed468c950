"""Tests for environment-driven settings and report helpers."""

from __future__ import annotations

import pytest

from switchmac.config import DEFAULT_MAC_TABLE_COMMAND, Settings
from switchmac.models.report import HostFailure, Report, TableRow


def test_defaults(monkeypatch):
    monkeypatch.delenv("SWITCHMAC_TRUST_POLICY", raising=False)
    cfg = Settings(_env_file=None)
    assert cfg.ssh_client == "plink"
    assert cfg.default_commands == [DEFAULT_MAC_TABLE_COMMAND]
    assert cfg.command_pause_seconds == 1.0
    assert cfg.trust_policy == "prompt"
    assert cfg.session_timeout_seconds == 0


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("SWITCHMAC_MAX_WORKERS", "3")
    monkeypatch.setenv("SWITCHMAC_DEFAULT_COMMANDS", '["show vlan brief"]')
    monkeypatch.setenv("SWITCHMAC_SSH_CLIENT", "/usr/bin/plink")
    cfg = Settings(_env_file=None)
    assert cfg.max_workers == 3
    assert cfg.default_commands == ["show vlan brief"]
    assert cfg.ssh_client == "/usr/bin/plink"


def test_report_helpers():
    report = Report(
        rows=[
            TableRow(host="sw1", command="c", cells={"Vlan": "10", "Ports": "Gi1/0/1"}),
            TableRow(host="sw1", command="c", cells={"Vlan": "20", "Ports": "Gi1/0/2"}),
            TableRow(host="sw2", command="c", cells={"Vlan": "10", "Ports": "Gi1/0/9"}),
        ],
        failures=[HostFailure(host="sw3", kind="TrustRejected", message="host key rejected")],
    )
    assert report.contributed_hosts == ["sw1", "sw2"]
    assert report.failed_hosts == ["sw3"]
    assert report.flat_rows()[2] == {"Vlan": "10", "Ports": "Gi1/0/9", "hostname": "sw2"}
    assert list(report.flat_rows()[0]) == ["Vlan", "Ports", "hostname"]


def test_table_hostname_column_kept_aside():
    row = TableRow(host="sw1", command="c", cells={"hostname": "core-a", "Port": "Gi1/0/1"})
    assert row.as_flat() == {"Port": "Gi1/0/1", "hostname_table": "core-a", "hostname": "sw1"}


def test_row_cells_are_read_only():
    source = {"Vlan": "10"}
    row = TableRow(host="sw1", command="c", cells=source)
    with pytest.raises(TypeError):
        row.cells["Vlan"] = "20"
    source["Vlan"] = "99"
    assert row.cells["Vlan"] == "10"
    assert row.model_dump()["cells"] == {"Vlan": "10"}
