"""
Workflow state models.

The controller exposes exactly one of these at a time; the view only reads it.
"""

from typing import Annotated, Literal, Union
from pydantic import BaseModel, ConfigDict, Field

from .video import VideoReference


class Idle(BaseModel):
    """Waiting for inputs or a submit."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["idle"] = "idle"


class Compositing(BaseModel):
    """Building the composite frame."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["compositing"] = "compositing"


class Generating(BaseModel):
    """Waiting on the remote job. progress_message is cosmetic only."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["generating"] = "generating"
    progress_message: str


class Ready(BaseModel):
    """Video downloaded and playable."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["ready"] = "ready"
    video: VideoReference


class Failed(BaseModel):
    """Attempt failed. Inputs are kept so the user can retry."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["failed"] = "failed"
    error_message: str


WorkflowState = Annotated[
    Union[Idle, Compositing, Generating, Ready, Failed],
    Field(discriminator="kind"),
]

BUSY_KINDS = frozenset({"compositing", "generating"})
