# src/upload/compression.py
import io
import logging
from typing import Optional

from PIL import Image

from src.upload.constants import QUALITY_FLOOR, QUALITY_STEP, TARGET_IMAGE_SIZE
from src.upload.schemas import ResizeOptions

logger = logging.getLogger(__name__)


def compress_image(
        content: bytes,
        quality: int,
        resize: Optional[ResizeOptions] = None,
        target_size: int = TARGET_IMAGE_SIZE,
) -> bytes:
    """
    Re-encode an image, lowering quality in steps until it fits target_size.

    Every attempt starts from the original bytes so quality loss does not
    compound. Once quality reaches the floor the last output is returned
    whatever its size. Errors from Pillow are left to the caller.
    """
    compressed = _encode_image(content, quality, resize)

    while len(compressed) > target_size and quality > QUALITY_FLOOR:
        quality = max(QUALITY_FLOOR, quality - QUALITY_STEP)
        compressed = _encode_image(content, quality, resize)

    logger.debug(
        "Compressed image from %d to %d bytes at quality %d",
        len(content), len(compressed), quality,
    )
    return compressed


def _encode_image(content: bytes, quality: int, resize: Optional[ResizeOptions] = None) -> bytes:
    image = Image.open(io.BytesIO(content))
    source_format = image.format

    if resize and not resize.is_empty:
        image = _fit_inside(image, resize)

    output = io.BytesIO()

    if source_format == "PNG":
        # Pillow's PNG encoder is lossless, quality does not apply
        image.save(output, format="PNG", optimize=True, compress_level=9)
    elif source_format == "WEBP":
        image.save(output, format="WEBP", quality=quality)
    else:
        # JPEG, and every other format normalized to JPEG
        if image.mode not in ("RGB", "L", "CMYK"):
            image = image.convert("RGB")
        image.save(output, format="JPEG", quality=quality, progressive=True, optimize=True)

    return output.getvalue()


def _fit_inside(image: Image.Image, resize: ResizeOptions) -> Image.Image:
    width, height = image.size
    box = (resize.width or width, resize.height or height)

    # thumbnail() keeps the aspect ratio and never enlarges
    image.thumbnail(box, Image.Resampling.LANCZOS)
    return image
