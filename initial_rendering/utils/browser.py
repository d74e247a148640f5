"""Browser helpers: isolated Chromium launch and device-emulating contexts."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from playwright.async_api import Browser, BrowserContext, Playwright

from initial_rendering.models.config import HttpCredentials
from initial_rendering.models.device import DeviceProfile


async def launch_browser(
    playwright: Playwright, launch_options: Optional[Mapping[str, Any]] = None,
) -> Browser:
    """Launch a fresh headless Chromium process.

    ``launch_options`` is forwarded untouched to ``chromium.launch`` (for
    example ``executable_path`` or ``args``) and may override ``headless``.
    """
    options: dict[str, Any] = {"headless": True}
    options.update(launch_options or {})
    return await playwright.chromium.launch(**options)


async def create_device_context(
    browser: Browser,
    profile: DeviceProfile,
    http_credentials: Optional[HttpCredentials] = None,
) -> BrowserContext:
    """Create a browser context emulating ``profile``.

    Args:
        http_credentials: Basic-auth credentials, only attached when both the
            username and the password are present.
    """
    context_kwargs: dict = profile.context_options()
    if http_credentials is not None and http_credentials.is_complete:
        context_kwargs["http_credentials"] = http_credentials.to_playwright()
    return await browser.new_context(**context_kwargs)
