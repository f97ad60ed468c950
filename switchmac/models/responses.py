"""Common API request and response models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, SecretStr


class HealthResponse(BaseModel):
    status: str
    version: str


class CollectRequest(BaseModel):
    hosts: list[str] = Field(min_length=1)
    username: str
    password: SecretStr
    commands: Optional[list[str]] = None


class ErrorResponse(BaseModel):
    detail: str
