"""Pixel diffing of a stage screenshot against the ground truth."""

from __future__ import annotations

from PIL import Image
from pixelmatch.contrib.PIL import pixelmatch

from initial_rendering.errors import DimensionMismatchError

DEFAULT_THRESHOLD = 0.1


def diff_ratio(num_diff_pixels: int, width: int, height: int) -> float:
    """Percentage of differing pixels, rounded to 2 decimals."""
    total = width * height
    if total == 0:
        return 0.0
    return round(num_diff_pixels / total * 100, 2)


def diff_images(
    ground_truth: Image.Image,
    candidate: Image.Image,
    threshold: float = DEFAULT_THRESHOLD,
) -> tuple[int, Image.Image]:
    """Compare ``candidate`` with ``ground_truth``.

    Returns the number of differing pixels and an RGBA diff image of the same
    size. Anti-aliased pixels are not counted.
    """
    if ground_truth.size != candidate.size:
        raise DimensionMismatchError(
            f"Screenshot sizes differ: {ground_truth.width}x{ground_truth.height} "
            f"vs {candidate.width}x{candidate.height}"
        )
    diff = Image.new("RGBA", ground_truth.size)
    num_diff_pixels = pixelmatch(ground_truth, candidate, diff, threshold=threshold)
    return num_diff_pixels, diff
