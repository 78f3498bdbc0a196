"""Configuration models for building clients."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, PositiveFloat, PositiveInt, field_validator


class ClientConfig(BaseModel):
    """Settings used by ``Client.from_config`` to build an owned transport."""

    base_url: str = Field(
        default="",
        description="Base URL that relative paths are joined onto. Not validated.",
    )
    timeout_seconds: Optional[PositiveFloat] = Field(
        default=5.0,
        description="Transport timeout applied to every phase; None disables it.",
    )
    follow_redirects: bool = False
    max_redirects: PositiveInt = Field(default=20)
    default_headers: dict[str, str] = Field(
        default_factory=dict,
        description="Headers set on every request by a client-level middleware.",
    )
    user_agent: Optional[str] = Field(
        default=None,
        description="User-Agent header applied after the default headers.",
    )

    @field_validator("base_url")
    @classmethod
    def _strip_base_url(cls, value: str) -> str:
        return value.strip()

    def transport_options(self) -> dict[str, object]:
        """Keyword arguments for ``httpx.Client``/``httpx.AsyncClient``."""

        return {
            "timeout": self.timeout_seconds,
            "follow_redirects": self.follow_redirects,
            "max_redirects": self.max_redirects,
        }


def load_config(path: str | Path) -> ClientConfig:
    """Load a :class:`ClientConfig` from a JSON or YAML file."""

    data = _read_file(path)
    if not isinstance(data, dict):
        raise ValueError(f"config file {path} must contain a mapping")
    return ClientConfig(**data)


def _read_file(path: str | Path) -> object:
    payload = Path(path).read_text(encoding="utf-8")
    suffix = Path(path).suffix.lower()
    if suffix in {".yaml", ".yml"}:
        return yaml.safe_load(payload) or {}
    return json.loads(payload)


__all__ = ["ClientConfig", "load_config"]
