"""Session-level data structures."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, SecretStr


class Credential(BaseModel):
    """Login shared by every host in a run. Never persisted."""

    model_config = ConfigDict(frozen=True)

    username: str
    password: SecretStr


class TrustDecision(str, Enum):
    accept_once = "accept_once"
    accept_and_cache = "accept_and_cache"
    reject = "reject"


class SessionOutput(BaseModel):
    """Everything a finished remote-shell client process produced."""

    host: str
    stdout: str = ""
    stderr: str = ""
    returncode: int = 0

    @property
    def lines(self) -> list[str]:
        return self.stdout.splitlines()

    @property
    def failed(self) -> bool:
        return self.returncode != 0
