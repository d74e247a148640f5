"""Stage capturer: loads a page three times under different interception policies."""

from __future__ import annotations

import asyncio
import io
import logging
import time
from contextlib import AsyncExitStack
from typing import Any, Callable, Mapping

from PIL import Image
from playwright.async_api import Playwright, async_playwright

from initial_rendering.errors import CaptureFailure, InvalidUrlError
from initial_rendering.models.config import RenderingConfig
from initial_rendering.models.device import DeviceProfile
from initial_rendering.models.report import StageResult
from initial_rendering.models.stages import CAPTURE_ORDER, STAGE_POLICIES, InterceptionPolicy, Stage
from initial_rendering.url_utils import is_http_url
from initial_rendering.utils.browser import create_device_context, launch_browser

from .devices import DeviceRegistry
from .interception import install_interception

logger = logging.getLogger(__name__)


def decode_png(data: bytes) -> Image.Image:
    """Decode screenshot bytes into a fully loaded RGBA image."""
    with Image.open(io.BytesIO(data)) as img:
        img.load()
        return img.convert("RGBA")


class StageCapturer:
    """Captures the initial, no-assets and full stages of a page concurrently.

    Every stage runs in its own browser process; nothing is shared between
    stages or between runs.
    """

    def __init__(
        self,
        devices: DeviceRegistry,
        playwright_factory: Callable[[], Any] = async_playwright,
        policies: Mapping[Stage, InterceptionPolicy] | None = None,
    ):
        self.devices = devices
        self.playwright_factory = playwright_factory
        self.policies = dict(policies or STAGE_POLICIES)

    def validate(self, config: RenderingConfig) -> DeviceProfile:
        """Check the request before any resource is allocated."""
        profile = self.devices.get(config.device)
        if not is_http_url(config.url):
            raise InvalidUrlError(f'URL "{config.url}" is not a valid http(s) URL')
        return profile

    async def capture(self, config: RenderingConfig) -> list[StageResult]:
        """Capture all stages and return them in capture order.

        The first stage to fail cancels the others; their browsers are still
        closed before the failure propagates.
        """
        profile = self.validate(config)
        logger.info("Capturing %s on %s (%d stages)", config.url, profile.name, len(CAPTURE_ORDER))

        async with AsyncExitStack() as stack:
            try:
                p = await stack.enter_async_context(self.playwright_factory())
            except Exception as e:
                raise CaptureFailure(f"Playwright driver failed to start: {e}") from e

            tasks = [
                asyncio.create_task(
                    self._capture_stage(p, stage, profile, config),
                    name=f"capture-{stage.value}",
                )
                for stage in CAPTURE_ORDER
            ]
            try:
                return list(await asyncio.gather(*tasks))
            except BaseException:
                for task in tasks:
                    task.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)
                raise

    async def _capture_stage(
        self,
        playwright: Playwright,
        stage: Stage,
        profile: DeviceProfile,
        config: RenderingConfig,
    ) -> StageResult:
        policy = self.policies[stage]
        start = time.time()
        logger.debug("[%s] launching browser (policy=%s)", stage.value, policy.value)

        try:
            browser = await launch_browser(playwright, config.browser_launch_options)
        except Exception as e:
            raise CaptureFailure(f"{stage.value}: browser launch failed: {e}", stage=stage.value) from e

        try:
            context = await create_device_context(browser, profile, config.auth)
            page = await context.new_page()
            await install_interception(page, policy)

            goto_kwargs: dict[str, Any] = {"wait_until": config.wait_until}
            if config.navigation_timeout_ms is not None:
                goto_kwargs["timeout"] = config.navigation_timeout_ms
            await page.goto(config.url, **goto_kwargs)

            delay = config.stage_delay(stage)
            if delay:
                await page.wait_for_timeout(delay)

            data = await page.screenshot(full_page=config.full_page, type="png")
        except Exception as e:
            logger.warning("[%s] capture failed: %s", stage.value, e)
            raise CaptureFailure(f"{stage.value}: {e}", stage=stage.value) from e
        finally:
            await browser.close()

        try:
            image = decode_png(data)
        except Exception as e:
            raise CaptureFailure(f"{stage.value}: screenshot decode failed: {e}", stage=stage.value) from e

        logger.debug("[%s] captured %dx%d in %.1fs", stage.value, image.width, image.height,
                     time.time() - start)
        return StageResult(stage=stage, image=image)
