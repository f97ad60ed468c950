"""Application settings loaded from environment variables."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MAC_TABLE_COMMAND = (
    "show mac address-table | exclude -|CPU|Total|Mac Address Table|^$"
)

TrustPolicy = Literal["prompt", "accept_once", "accept_and_cache", "reject"]


class Settings(BaseSettings):
    """All configuration is driven by SWITCHMAC_* environment variables."""

    # Remote-shell client
    ssh_client: str = "plink"
    ssh_client_args: list[str] = Field(default_factory=list)
    batch_flag: str = "-batch"
    verbose_flag: str = "-v"
    protocol_flag: str = "-ssh"
    ssh_port: int = 22

    # Remote CLI dialogue
    paging_command: str = "terminal length 0"
    exit_command: str = "exit"
    default_commands: list[str] = Field(
        default_factory=lambda: [DEFAULT_MAC_TABLE_COMMAND],
    )
    command_pause_seconds: float = 1.0
    trust_settle_seconds: float = 3.0
    # 0 disables the watchdog and waits for the client indefinitely
    session_timeout_seconds: float = 0.0
    trust_policy: TrustPolicy = "prompt"

    # Table parsing
    parser_skip_lines: int = 2
    parser_min_lines: int = 3

    # Fleet
    max_workers: int = 1
    precheck_liveness: bool = False
    liveness_timeout_seconds: float = 2.0
    error_dir: str = "errors"

    # HTTP surface
    api_key: str = ""

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    model_config = SettingsConfigDict(
        env_prefix="SWITCHMAC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


# Singleton – import this from anywhere
settings = Settings()
