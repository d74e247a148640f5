"""Device profile registry: a read-only name -> emulation profile table."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Iterable, Iterator, Mapping

from playwright.async_api import async_playwright

from initial_rendering.errors import CaptureFailure, InvalidDeviceError
from initial_rendering.models.device import DeviceProfile

logger = logging.getLogger(__name__)

_CHROME = "Chrome/120.0.6099.28"
_ANDROID_UA = "Mozilla/5.0 (Linux; Android {os}; {model}) AppleWebKit/537.36 (KHTML, like Gecko) " + _CHROME + " Mobile Safari/537.36"
_IOS_UA = "Mozilla/5.0 ({model}; CPU {os} like Mac OS X) AppleWebKit/604.1.38 (KHTML, like Gecko) Version/11.0 Mobile/15A372 Safari/604.1"

DEFAULT_PROFILES: tuple[DeviceProfile, ...] = (
    DeviceProfile(
        name="Nexus 5X",
        viewport={"width": 412, "height": 732},
        user_agent=_ANDROID_UA.format(os="8.0.0", model="Nexus 5X Build/OPR4.170623.006"),
        device_scale_factor=2.625, is_mobile=True, has_touch=True,
    ),
    DeviceProfile(
        name="Nexus 5",
        viewport={"width": 360, "height": 640},
        user_agent=_ANDROID_UA.format(os="6.0", model="Nexus 5 Build/MRA58N"),
        device_scale_factor=3, is_mobile=True, has_touch=True,
    ),
    DeviceProfile(
        name="Pixel 2",
        viewport={"width": 411, "height": 731},
        user_agent=_ANDROID_UA.format(os="8.0", model="Pixel 2 Build/OPD3.170816.012"),
        device_scale_factor=2.625, is_mobile=True, has_touch=True,
    ),
    DeviceProfile(
        name="Galaxy S5",
        viewport={"width": 360, "height": 640},
        user_agent=_ANDROID_UA.format(os="5.0", model="SM-G900P Build/LRX21T"),
        device_scale_factor=3, is_mobile=True, has_touch=True,
    ),
    DeviceProfile(
        name="iPhone 8",
        viewport={"width": 375, "height": 667},
        user_agent=_IOS_UA.format(model="iPhone", os="iPhone OS 11_0"),
        device_scale_factor=2, is_mobile=True, has_touch=True,
    ),
    DeviceProfile(
        name="iPhone X",
        viewport={"width": 375, "height": 812},
        user_agent=_IOS_UA.format(model="iPhone", os="iPhone OS 11_0"),
        device_scale_factor=3, is_mobile=True, has_touch=True,
    ),
    DeviceProfile(
        name="iPad Mini",
        viewport={"width": 768, "height": 1024},
        user_agent=_IOS_UA.format(model="iPad", os="OS 11_0"),
        device_scale_factor=2, is_mobile=True, has_touch=True,
    ),
    DeviceProfile(
        name="Desktop Chrome",
        viewport={"width": 1280, "height": 720},
        user_agent="Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) " + _CHROME + " Safari/537.36",
    ),
)


class DeviceRegistry:
    """Lookup table of named device profiles."""

    def __init__(self, profiles: Iterable[DeviceProfile]):
        self._profiles: dict[str, DeviceProfile] = {p.name: p for p in profiles}

    @classmethod
    def default(cls) -> "DeviceRegistry":
        return cls(DEFAULT_PROFILES)

    @classmethod
    def from_playwright(cls, devices: Mapping[str, Mapping[str, Any]]) -> "DeviceRegistry":
        """Build a registry from Playwright's ``playwright.devices`` table."""
        return cls(DeviceProfile.from_descriptor(name, d) for name, d in devices.items())

    @classmethod
    def load(cls, path: str | Path, base: "DeviceRegistry | None" = None) -> "DeviceRegistry":
        """Load profiles from a JSON file, layered over ``base`` (defaults if omitted).

        The file holds either a list of profiles or a mapping of name -> profile
        fields.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Device profile file not found: {path}")
        with open(path) as f:
            data = json.load(f)
        if isinstance(data, dict):
            extra = [DeviceProfile(name=name, **fields) for name, fields in data.items()]
        else:
            extra = [DeviceProfile(**entry) for entry in data]
        logger.debug("Loaded %d device profiles from %s", len(extra), path)
        if base is None:
            base = cls.default()
        return base.extended(extra)

    @classmethod
    async def from_engine(cls, playwright_factory: Callable[[], Any] = async_playwright) -> "DeviceRegistry":
        """Build a registry from the descriptor table bundled with the Playwright driver.

        Starts the driver once to read ``playwright.devices``; no browser is launched.
        """
        try:
            async with playwright_factory() as p:
                table = dict(p.devices)
        except Exception as e:
            raise CaptureFailure(f"Playwright driver failed to start: {e}") from e
        registry = cls.from_playwright(table)
        logger.debug("Loaded %d device profiles from Playwright", len(registry))
        return registry

    def extended(self, profiles: Iterable[DeviceProfile]) -> "DeviceRegistry":
        """Return a new registry with ``profiles`` added (same names are replaced)."""
        merged = dict(self._profiles)
        merged.update({p.name: p for p in profiles})
        return DeviceRegistry(merged.values())

    def get(self, name: str) -> DeviceProfile:
        profile = self._profiles.get(name)
        if profile is None:
            raise InvalidDeviceError(f'Device "{name}" is not a known device profile')
        return profile

    def names(self) -> list[str]:
        return sorted(self._profiles)

    def __contains__(self, name: object) -> bool:
        return name in self._profiles

    def __iter__(self) -> Iterator[DeviceProfile]:
        return iter(self._profiles[name] for name in self.names())

    def __len__(self) -> int:
        return len(self._profiles)
