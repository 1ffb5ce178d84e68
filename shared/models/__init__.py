"""
Data models for the hug video pipeline.

This module exports all Pydantic models used across pipeline modules.
"""

from .image import ImageRecord, CompositeFrame
from .video import JobStatus, GenerationJob, VideoReference, DEFAULT_VIDEO_FILENAME
from .workflow import (
    Idle,
    Compositing,
    Generating,
    Ready,
    Failed,
    WorkflowState,
)

__all__ = [
    # Image models
    "ImageRecord",
    "CompositeFrame",
    # Video models
    "JobStatus",
    "GenerationJob",
    "VideoReference",
    "DEFAULT_VIDEO_FILENAME",
    # Workflow state
    "Idle",
    "Compositing",
    "Generating",
    "Ready",
    "Failed",
    "WorkflowState",
]
