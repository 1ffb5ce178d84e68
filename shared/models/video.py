"""
Video generation data models.

Defines GenerationJob (a snapshot of the remote operation) and VideoReference
(the downloaded result materialized on local disk).
"""

import shutil
from enum import Enum
from pathlib import Path
from typing import Optional, Union
from pydantic import BaseModel, ConfigDict, Field

DEFAULT_VIDEO_FILENAME = "ai_hug_video.mp4"


class JobStatus(str, Enum):
    """Remote job status. Only PENDING -> DONE is allowed."""

    PENDING = "pending"
    DONE = "done"


class GenerationJob(BaseModel):
    """Snapshot of one asynchronous generation job."""

    model_config = ConfigDict(frozen=True)

    job_id: str = Field(description="Opaque provider job handle")
    status: JobStatus = JobStatus.PENDING
    result_locator: Optional[str] = Field(
        default=None,
        description="Provider URL of the finished video, set once done"
    )
    error_message: Optional[str] = Field(
        default=None,
        description="Error reported by the service for a finished job"
    )

    @property
    def done(self) -> bool:
        return self.status == JobStatus.DONE


class VideoReference(BaseModel):
    """Locally addressable generated video."""

    model_config = ConfigDict(frozen=True)

    path: Path
    mime_type: str = "video/mp4"
    size_bytes: int = Field(ge=0)
    suggested_filename: str = DEFAULT_VIDEO_FILENAME

    @property
    def uri(self) -> str:
        """file:// URI a player can open."""
        return self.path.resolve().as_uri()

    @property
    def exists(self) -> bool:
        return self.path.exists()

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()

    def save(self, destination: Union[str, Path]) -> Path:
        """
        Copy the video to destination.

        If destination is a directory, the suggested filename is used.

        Returns:
            Path of the saved copy
        """
        destination = Path(destination)
        if destination.is_dir():
            destination = destination / self.suggested_filename
        shutil.copyfile(self.path, destination)
        return destination

    def release(self) -> None:
        """Delete the local file. Safe to call more than once."""
        self.path.unlink(missing_ok=True)
