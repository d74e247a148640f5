"""Configuration models for a rendering run and the demo server."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from initial_rendering.models.stages import Stage

DEFAULT_DEVICE = "Nexus 5X"


class HttpCredentials(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None

    @field_validator("password", mode="before")
    @classmethod
    def resolve_env_password(cls, v: Optional[str]) -> Optional[str]:
        if isinstance(v, str) and v.startswith("env:"):
            env_var = v[4:]
            resolved = os.environ.get(env_var)
            if resolved is None:
                raise ValueError(f"Environment variable '{env_var}' not set")
            return resolved
        return v

    @property
    def is_complete(self) -> bool:
        """Credentials are only sent when both parts are present."""
        return self.username is not None and self.password is not None

    def to_playwright(self) -> dict[str, str]:
        return {"username": self.username or "", "password": self.password or ""}


class RenderingConfig(BaseModel):
    # Target (shape checked by the capturer, which raises InvalidUrlError)
    url: Any = None
    device: str = DEFAULT_DEVICE

    # Browser
    browser_launch_options: dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("browser_launch_options", "browserLaunchOptions"),
    )
    auth: Optional[HttpCredentials] = None

    # Output
    return_screenshots: bool = Field(
        default=True,
        validation_alias=AliasChoices("return_screenshots", "returnScreenshots"),
    )

    # Diffing
    diff_threshold: float = Field(default=0.1, ge=0.0, le=1.0)

    # Navigation
    wait_until: Literal["load", "domcontentloaded", "networkidle", "commit"] = "load"
    navigation_timeout_ms: Optional[int] = Field(default=None, ge=0)
    full_page: bool = False
    stage_delays_ms: dict[Stage, int] = Field(default_factory=dict)

    # Compression: palette size for the lossy PNG pass, None keeps lossless output
    png_colors: Optional[int] = Field(default=256, ge=2, le=256)

    # Device table: Playwright's bundled descriptors instead of the built-in profiles
    playwright_devices: bool = False

    # Extra device profiles (JSON file)
    devices_file: Optional[str] = None

    model_config = {"frozen": True, "populate_by_name": True}

    @field_validator("stage_delays_ms")
    @classmethod
    def validate_delays(cls, v: dict[Stage, int]) -> dict[Stage, int]:
        for stage, delay in v.items():
            if delay < 0:
                raise ValueError(f"Delay for stage '{stage.value}' must not be negative")
        return v

    def stage_delay(self, stage: Stage) -> int:
        return self.stage_delays_ms.get(stage, 0)

    @classmethod
    def load(cls, path: str | Path) -> "RenderingConfig":
        """Load config from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            data = json.load(f)
        return cls(**data)

    def save(self, path: str | Path) -> None:
        """Save config to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.model_dump(mode="json"), f, indent=2)


class ServerConfig(BaseModel):
    host: str = "127.0.0.1"
    port: int = Field(default=3000, ge=1, le=65535)
    rendering: RenderingConfig = Field(
        default_factory=lambda: RenderingConfig(url="https://example.com")
    )

    @classmethod
    def load(cls, path: str | Path) -> "ServerConfig":
        """Load server config from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            data = json.load(f)
        return cls(**data)
