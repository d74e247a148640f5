"""Device emulation profile."""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, Field, field_validator


class Viewport(BaseModel):
    width: int
    height: int

    @field_validator("width", "height")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("Viewport dimensions must be positive integers.")
        return value


class DeviceProfile(BaseModel):
    name: str
    viewport: Viewport
    user_agent: str
    device_scale_factor: float = Field(default=1.0, gt=0)
    is_mobile: bool = False
    has_touch: bool = False

    model_config = {"frozen": True}

    @classmethod
    def from_descriptor(cls, name: str, descriptor: Mapping[str, Any]) -> "DeviceProfile":
        """Build a profile from a Playwright ``devices`` entry."""
        return cls(
            name=name,
            viewport=descriptor["viewport"],
            user_agent=descriptor["user_agent"],
            device_scale_factor=descriptor.get("device_scale_factor", 1.0),
            is_mobile=descriptor.get("is_mobile", False),
            has_touch=descriptor.get("has_touch", False),
        )

    @property
    def screenshot_size(self) -> tuple[int, int]:
        """Expected viewport screenshot size in device pixels."""
        return (
            round(self.viewport.width * self.device_scale_factor),
            round(self.viewport.height * self.device_scale_factor),
        )

    def context_options(self) -> dict[str, Any]:
        """Keyword arguments for ``Browser.new_context``."""
        return {
            "viewport": self.viewport.model_dump(),
            "user_agent": self.user_agent,
            "device_scale_factor": self.device_scale_factor,
            "is_mobile": self.is_mobile,
            "has_touch": self.has_touch,
        }
