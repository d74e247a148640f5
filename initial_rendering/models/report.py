"""Report data structures produced by a rendering run."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from PIL import Image
from pydantic import BaseModel, Field

from initial_rendering.models.stages import Stage


@dataclass(frozen=True)
class StageResult:
    """Decoded RGBA screenshot of one capture stage."""
    stage: Stage
    image: Image.Image

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height


class RenderingStep(BaseModel):
    """Diff of one early stage against the fully loaded page."""
    name: str
    num_diff_pixels: int = Field(ge=0, alias="numDiffPixels")
    ratio: float = Field(ge=0.0, le=100.0)  # percent, 2 decimals
    screenshot: Optional[str] = None  # data URI
    diff: Optional[str] = None  # data URI

    model_config = {"populate_by_name": True}


class RenderingReport(BaseModel):
    execution: int  # unix timestamp in ms
    url: str
    device: str
    width: int
    height: int
    steps: list[RenderingStep] = Field(default_factory=list)
    full: Optional[str] = None  # data URI of the fully loaded page
    version: str

    model_config = {"populate_by_name": True}

    @property
    def total_pixels(self) -> int:
        return self.width * self.height

    def step(self, name: str) -> Optional[RenderingStep]:
        for s in self.steps:
            if s.name == name:
                return s
        return None

    def to_dict(self) -> dict[str, Any]:
        """JSON-compatible dict; image fields that were not produced are omitted."""
        return self.model_dump(by_alias=True, exclude_none=True)
