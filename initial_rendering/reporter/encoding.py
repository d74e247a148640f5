"""PNG re-encoding with lossy palette compression, emitted as data URIs."""

from __future__ import annotations

import asyncio
import base64
import io
from typing import Optional

from PIL import Image

from initial_rendering.errors import EncodingFailure


def to_data_uri(data: bytes, image_type: str = "png") -> str:
    return f"data:image/{image_type};base64," + base64.b64encode(data).decode()


def encode_png(image: Image.Image) -> bytes:
    """Lossless PNG encoding."""
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def compress_png(data: bytes, colors: int = 256) -> bytes:
    """Reduce a PNG to a ``colors`` palette and re-encode it optimised."""
    with Image.open(io.BytesIO(data)) as img:
        source = img.convert("RGBA")
    quantized = source.quantize(colors=colors, method=Image.Quantize.FASTOCTREE)
    buffer = io.BytesIO()
    quantized.save(buffer, format="PNG", optimize=True)
    return buffer.getvalue()


def image_to_base64(image: Image.Image, colors: Optional[int] = 256) -> str:
    """Encode ``image`` to a PNG data URI; ``colors=None`` skips compression."""
    try:
        data = encode_png(image)
        if colors is not None:
            data = compress_png(data, colors)
    except (OSError, ValueError) as e:
        raise EncodingFailure(f"PNG encoding failed: {e}") from e
    return to_data_uri(data, "png")


async def image_to_base64_async(image: Image.Image, colors: Optional[int] = 256) -> str:
    """Same as :func:`image_to_base64`, off the event loop."""
    return await asyncio.to_thread(image_to_base64, image, colors)
