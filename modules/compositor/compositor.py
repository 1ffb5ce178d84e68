"""
Side-by-side compositing.

Scales two images to a shared height, places them next to each other on a
black canvas and encodes the result as JPEG.
"""
import io
from typing import Optional

from PIL import Image, ImageOps, UnidentifiedImageError

from modules.compositor.config import (
    TARGET_HEIGHT, JPEG_QUALITY, OUTPUT_FORMAT, OUTPUT_MIME_TYPE, BACKGROUND_COLOR
)
from shared.models.image import ImageRecord, CompositeFrame
from shared.errors import CompositionError
from shared.logging import get_logger

logger = get_logger("compositor")


def scaled_width(width: int, height: int, target_height: int) -> int:
    """
    Width of an image scaled to target_height with its aspect ratio kept.

    Rounded to the nearest pixel, never less than one.
    """
    return max(1, round(target_height * width / height))


def _load(record: ImageRecord, side: str) -> Image.Image:
    """Decode an ImageRecord to pixels, raising CompositionError on failure."""
    image = None
    try:
        image = Image.open(io.BytesIO(record.data))
        image.load()
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as e:
        if image is not None:
            image.close()
        logger.error(f"Failed to decode {side} image: {e}", exc_info=e)
        raise CompositionError(f"Failed to load {side} image.") from e
    if image.width == 0 or image.height == 0:
        image.close()
        raise CompositionError(f"Failed to load {side} image.")

    # Pixels and aspect ratio follow the displayed orientation, not the stored one
    upright = ImageOps.exif_transpose(image)
    if upright is not image:
        image.close()
    return upright


def _scale(image: Image.Image, target_height: int) -> Image.Image:
    """Resize to target_height, converting to RGB or RGBA first."""
    has_alpha = image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info)
    converted = image.convert("RGBA" if has_alpha else "RGB")
    width = scaled_width(image.width, image.height, target_height)
    try:
        return converted.resize((width, target_height), Image.Resampling.LANCZOS)
    finally:
        converted.close()


def _paste(canvas: Image.Image, image: Image.Image, x: int) -> None:
    if image.mode == "RGBA":
        canvas.paste(image, (x, 0), mask=image.getchannel("A"))
    else:
        canvas.paste(image, (x, 0))


def compose(
    left: ImageRecord,
    right: ImageRecord,
    target_height: int = TARGET_HEIGHT,
    quality: int = JPEG_QUALITY
) -> CompositeFrame:
    """
    Composite two images side by side at a canonical height.

    Each image is scaled independently so its height equals target_height
    (no cropping). The left image sits flush with the left edge and the right
    image starts exactly where the left one ends.

    Args:
        left: Image of the person who stays still
        right: Image of the person who moves to hug
        target_height: Canonical height in pixels (default: 720)
        quality: JPEG quality (default: 90)

    Returns:
        CompositeFrame of size (left_width + right_width, target_height)

    Raises:
        CompositionError: If an input cannot be decoded or no canvas can be created
    """
    opened = []
    canvas: Optional[Image.Image] = None
    try:
        left_source = _load(left, "left")
        opened.append(left_source)
        right_source = _load(right, "right")
        opened.append(right_source)

        left_scaled = _scale(left_source, target_height)
        opened.append(left_scaled)
        right_scaled = _scale(right_source, target_height)
        opened.append(right_scaled)

        width = left_scaled.width + right_scaled.width
        try:
            canvas = Image.new("RGB", (width, target_height), BACKGROUND_COLOR)
        except (ValueError, MemoryError) as e:
            logger.error(f"Could not create {width}x{target_height} canvas: {e}", exc_info=e)
            raise CompositionError("Could not create drawing surface") from e

        _paste(canvas, left_scaled, 0)
        _paste(canvas, right_scaled, left_scaled.width)

        output = io.BytesIO()
        canvas.save(output, format=OUTPUT_FORMAT, quality=quality)

        logger.info(
            "Composite frame created",
            extra={
                "width": width,
                "height": target_height,
                "left_width": left_scaled.width,
                "right_width": right_scaled.width,
                "size": output.tell()
            }
        )
        return CompositeFrame(
            data=output.getvalue(),
            mime_type=OUTPUT_MIME_TYPE,
            width=width,
            height=target_height
        )
    except CompositionError:
        raise
    except (OSError, ValueError) as e:
        logger.error(f"Failed to composite images: {e}", exc_info=e)
        raise CompositionError(f"Failed to composite images: {str(e)}") from e
    finally:
        for image in opened:
            image.close()
        if canvas is not None:
            canvas.close()
