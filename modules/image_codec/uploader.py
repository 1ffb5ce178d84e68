"""
Upload slot state.

One UploadSlot per uploader in the view. Decode errors stay local to the slot
and never reach the workflow state machine.
"""
from typing import BinaryIO, Optional

from modules.image_codec.codec import decode
from shared.models.image import ImageRecord
from shared.errors import UnsupportedFormatError, ReadFailureError
from shared.logging import get_logger

logger = get_logger("image_codec.uploader")

LEFT_SLOT_ID = "left-person"
LEFT_SLOT_LABEL = "Person on Left (Stays still)"
RIGHT_SLOT_ID = "right-person"
RIGHT_SLOT_LABEL = "Person on Right (Moves to hug)"


class UploadSlot:
    """Holds the current image (or local error) for one uploader."""

    def __init__(self, slot_id: str, label: str):
        self.slot_id = slot_id
        self.label = label
        self.image: Optional[ImageRecord] = None
        self.error: Optional[str] = None

    @property
    def has_image(self) -> bool:
        return self.image is not None

    @property
    def preview(self) -> Optional[str]:
        return self.image.preview_handle if self.image else None

    def load(self, stream: Optional[BinaryIO], content_type: Optional[str] = None) -> Optional[ImageRecord]:
        """
        Replace the slot's image with a new upload.

        Passing no stream means the picker was dismissed without a file and
        empties the slot.

        Returns:
            The new ImageRecord, or None if the slot ended up empty
        """
        if stream is None:
            self.image = None
            return None

        try:
            self.image = decode(stream, content_type)
        except (UnsupportedFormatError, ReadFailureError) as e:
            self.image = None
            self.error = str(e)
            logger.info(
                f"Upload rejected for slot {self.slot_id}: {e}",
                extra={"slot": self.slot_id, "content_type": content_type}
            )
            return None

        self.error = None
        logger.info(
            f"Image loaded into slot {self.slot_id}",
            extra={"slot": self.slot_id, "size": self.image.size_bytes}
        )
        return self.image

    def clear(self) -> None:
        """Remove the image and any error."""
        self.image = None
        self.error = None

    def __repr__(self) -> str:
        return f"UploadSlot({self.slot_id!r}, has_image={self.has_image}, error={self.error!r})"


def left_slot() -> UploadSlot:
    """Slot for the person who stays still."""
    return UploadSlot(LEFT_SLOT_ID, LEFT_SLOT_LABEL)


def right_slot() -> UploadSlot:
    """Slot for the person who moves to hug."""
    return UploadSlot(RIGHT_SLOT_ID, RIGHT_SLOT_LABEL)
