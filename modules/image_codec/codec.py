"""
Upload decoding.

Reads an uploaded file into an ImageRecord. No pixel decoding happens here;
the compositor decodes pixels when it needs them.
"""
import mimetypes
from pathlib import Path
from typing import BinaryIO, Optional, Union

from shared.models.image import ImageRecord
from shared.errors import UnsupportedFormatError, ReadFailureError
from shared.logging import get_logger

logger = get_logger("image_codec.codec")

UNSUPPORTED_FORMAT_MESSAGE = "Please upload a valid image file (PNG, JPG, etc.)."
READ_FAILURE_MESSAGE = "Failed to read the file."


def is_image_type(content_type: Optional[str]) -> bool:
    """Check whether a declared MIME type names an image."""
    return bool(content_type) and content_type.lower().startswith("image/")


def decode(stream: BinaryIO, content_type: Optional[str]) -> ImageRecord:
    """
    Read an uploaded file into an ImageRecord.

    Args:
        stream: Readable binary stream of the upload
        content_type: MIME type declared by the uploader

    Returns:
        ImageRecord with the raw bytes and declared MIME type

    Raises:
        UnsupportedFormatError: If content_type is not an image type
        ReadFailureError: If reading the stream fails or yields nothing
    """
    if not is_image_type(content_type):
        logger.warning(
            "Rejected upload with non-image content type",
            extra={"content_type": content_type}
        )
        raise UnsupportedFormatError(UNSUPPORTED_FORMAT_MESSAGE)

    try:
        data = stream.read()
    except (OSError, ValueError) as e:
        logger.error(f"Failed to read upload: {e}", exc_info=e)
        raise ReadFailureError(READ_FAILURE_MESSAGE) from e

    if not data:
        logger.warning("Upload stream was empty", extra={"content_type": content_type})
        raise ReadFailureError(READ_FAILURE_MESSAGE)

    record = ImageRecord(data=data, mime_type=content_type.lower())
    logger.debug(
        "Decoded upload",
        extra={"content_type": record.mime_type, "size": record.size_bytes}
    )
    return record


def decode_path(path: Union[str, Path], content_type: Optional[str] = None) -> ImageRecord:
    """
    Decode a file on disk.

    Args:
        path: Path to the image file
        content_type: Declared MIME type (default: guessed from the file name)

    Returns:
        ImageRecord

    Raises:
        UnsupportedFormatError: If the declared or guessed type is not an image
        ReadFailureError: If the file cannot be opened or read
    """
    path = Path(path)
    if content_type is None:
        content_type, _ = mimetypes.guess_type(path.name)

    if not is_image_type(content_type):
        raise UnsupportedFormatError(UNSUPPORTED_FORMAT_MESSAGE)

    try:
        with path.open("rb") as stream:
            return decode(stream, content_type)
    except OSError as e:
        logger.error(f"Failed to open upload {path}: {e}", exc_info=e)
        raise ReadFailureError(READ_FAILURE_MESSAGE) from e
