"""Pipeline orchestrator: validates a request, captures the stages, reports the diffs."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable, Mapping, Optional

from playwright.async_api import async_playwright

from initial_rendering.capture.capturer import StageCapturer
from initial_rendering.capture.devices import DeviceRegistry
from initial_rendering.models.config import RenderingConfig
from initial_rendering.models.report import RenderingReport
from initial_rendering.reporter.reporter import DiffReporter

logger = logging.getLogger(__name__)


def resolve_devices(config: RenderingConfig, devices: Optional[DeviceRegistry] = None) -> DeviceRegistry:
    """Device table for ``config``: the given registry (or defaults) plus its devices file."""
    base = devices if devices is not None else DeviceRegistry.default()
    if config.devices_file:
        return DeviceRegistry.load(config.devices_file, base=base)
    return base


class Orchestrator:
    """Coordinates one rendering run: capture, then diff and report."""

    def __init__(
        self,
        config: RenderingConfig,
        devices: Optional[DeviceRegistry] = None,
        playwright_factory: Callable[[], Any] = async_playwright,
    ):
        self.config = config
        self.playwright_factory = playwright_factory
        # An injected registry wins over the engine table
        self._engine_devices = devices is None and config.playwright_devices
        self.devices = resolve_devices(config, devices)
        self.capturer = StageCapturer(self.devices, playwright_factory=playwright_factory)
        self.reporter = DiffReporter(
            threshold=config.diff_threshold,
            png_colors=config.png_colors,
        )

    def run(self) -> RenderingReport:
        """Execute the run in a fresh event loop."""
        return asyncio.run(self.render())

    async def render(self) -> RenderingReport:
        start = time.time()
        logger.info("=== Initial rendering of %s (%s) ===", self.config.url, self.config.device)

        if self._engine_devices:
            engine = await DeviceRegistry.from_engine(self.playwright_factory)
            self.devices = resolve_devices(self.config, engine)
            self.capturer.devices = self.devices
            self._engine_devices = False

        # Stage 1: Capture
        stage_start = time.time()
        stages = await self.capturer.capture(self.config)
        logger.info("--- Capture complete: %d stages in %.1fs ---",
                    len(stages), time.time() - stage_start)

        # Stage 2: Report
        stage_start = time.time()
        report = await self.reporter.report(
            stages,
            url=self.config.url,
            device=self.config.device,
            include_images=self.config.return_screenshots,
        )
        logger.info("--- Report complete in %.1fs ---", time.time() - stage_start)

        logger.info("=== Rendering complete in %.1fs ===", time.time() - start)
        return report


async def render(
    config: RenderingConfig | Mapping[str, Any],
    devices: Optional[DeviceRegistry] = None,
    playwright_factory: Callable[[], Any] = async_playwright,
) -> dict[str, Any]:
    """Render ``config`` and return the report as JSON-compatible data.

    ``config`` may be a RenderingConfig or a plain mapping of its options.
    """
    if not isinstance(config, RenderingConfig):
        config = RenderingConfig.model_validate(dict(config))
    orchestrator = Orchestrator(config, devices=devices, playwright_factory=playwright_factory)
    report = await orchestrator.render()
    return report.to_dict()
