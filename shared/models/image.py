"""
Image data models.

Defines ImageRecord (a decoded upload) and CompositeFrame (the side-by-side
frame submitted for generation).
"""

import base64
from pydantic import BaseModel, ConfigDict, Field


class ImageRecord(BaseModel):
    """Uploaded image held in memory."""

    model_config = ConfigDict(frozen=True)

    data: bytes = Field(description="Raw encoded image bytes", repr=False)
    mime_type: str = Field(description="Declared MIME type, e.g. image/png")

    @property
    def base64_data(self) -> str:
        """Payload as base64 text."""
        return base64.b64encode(self.data).decode("ascii")

    @property
    def preview_handle(self) -> str:
        """Data URL a view can render directly. Derived from data, never stored."""
        return f"data:{self.mime_type};base64,{self.base64_data}"

    @property
    def size_bytes(self) -> int:
        return len(self.data)


class CompositeFrame(ImageRecord):
    """Side-by-side composite of two ImageRecords at the canonical height."""

    width: int = Field(gt=0, description="Sum of both scaled widths in pixels")
    height: int = Field(gt=0, description="Canonical height in pixels")
