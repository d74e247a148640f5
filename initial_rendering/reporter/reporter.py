"""Diff reporter: compares early stages with the fully loaded page."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Optional, Sequence

from initial_rendering.errors import CaptureFailure
from initial_rendering.models.report import RenderingReport, RenderingStep, StageResult
from initial_rendering.version import __version__

from .diff import DEFAULT_THRESHOLD, diff_images, diff_ratio
from .encoding import image_to_base64_async

logger = logging.getLogger(__name__)


class DiffReporter:
    """Builds a RenderingReport from captured stages."""

    def __init__(self, threshold: float = DEFAULT_THRESHOLD, png_colors: Optional[int] = 256):
        self.threshold = threshold
        self.png_colors = png_colors

    async def report(
        self,
        stages: Sequence[StageResult],
        url: str,
        device: str,
        include_images: bool = True,
    ) -> RenderingReport:
        """Diff every stage but the last against the last one.

        Steps keep capture order; the last (full) stage is ground truth only.
        """
        if len(stages) < 2:
            raise CaptureFailure(f"Need at least two stages to compare, got {len(stages)}")

        execution = int(time.time() * 1000)
        *early, last = stages
        width, height = last.width, last.height

        steps: list[RenderingStep] = []
        diffs = []
        for stage in early:
            num_diff_pixels, diff = await asyncio.to_thread(
                diff_images, last.image, stage.image, self.threshold,
            )
            ratio = diff_ratio(num_diff_pixels, width, height)
            logger.info("%s vs %s: %d diff pixels (%.2f%%)",
                        stage.stage.value, last.stage.value, num_diff_pixels, ratio)
            steps.append(RenderingStep(
                name=stage.stage.value, num_diff_pixels=num_diff_pixels, ratio=ratio,
            ))
            diffs.append(diff)

        report = RenderingReport(
            execution=execution,
            url=url,
            device=device,
            width=width,
            height=height,
            steps=steps,
            version=__version__,
        )

        if include_images:
            logger.debug("Encoding %d images...", 1 + 2 * len(early))
            encoded = await asyncio.gather(
                image_to_base64_async(last.image, self.png_colors),
                *(image_to_base64_async(s.image, self.png_colors) for s in early),
                *(image_to_base64_async(d, self.png_colors) for d in diffs),
            )
            report.full = encoded[0]
            screenshots = encoded[1:1 + len(early)]
            diff_uris = encoded[1 + len(early):]
            for step, screenshot, diff_uri in zip(report.steps, screenshots, diff_uris):
                step.screenshot = screenshot
                step.diff = diff_uri

        return report
