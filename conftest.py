"""
Root pytest fixtures shared by all module test suites.
"""
import asyncio
import io
import os

# Keep test runs from writing log files; must be set before shared.config loads
os.environ.setdefault("LOG_DIR", "")

import pytest
from PIL import Image

from modules.generation_client.backends import JobBackend
from shared.models.image import ImageRecord
from shared.models.video import GenerationJob, JobStatus


def make_image_bytes(width: int, height: int, color=(255, 0, 0), fmt: str = "PNG", mode: str = "RGB") -> bytes:
    """Encode a solid-color image."""
    image = Image.new(mode, (width, height), color)
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


class ScriptedBackend(JobBackend):
    """JobBackend that replays a fixed list of poll snapshots."""

    name = "scripted"

    def __init__(self, snapshots=None, video=b"fake mp4 bytes", submit_job=None):
        super().__init__()
        self.submit_job = submit_job or GenerationJob(job_id="operations/test-job")
        # The last snapshot repeats once the script runs out
        self.snapshots = list(snapshots or [GenerationJob(
            job_id="operations/test-job",
            status=JobStatus.DONE,
            result_locator="https://example.com/video.mp4"
        )])
        self.video = video
        self.submitted = []
        self.polls = 0
        self.fetched = []

    async def submit(self, image, prompt, number_of_videos=1):
        self.submitted.append({"image": image, "prompt": prompt, "number_of_videos": number_of_videos})
        return self.submit_job

    async def poll_once(self, job):
        self.polls += 1
        if len(self.snapshots) > 1:
            return self.snapshots.pop(0)
        return self.snapshots[0]

    async def fetch(self, locator):
        self.fetched.append(locator)
        if isinstance(self.video, Exception):
            raise self.video
        return self.video


@pytest.fixture
def image_bytes():
    """Factory for encoded solid-color images."""
    return make_image_bytes


@pytest.fixture
def image_record():
    """Factory for ImageRecords backed by real encoded images."""
    def _create(width: int = 100, height: int = 100, color=(255, 0, 0), fmt: str = "PNG", mode: str = "RGB"):
        return ImageRecord(
            data=make_image_bytes(width, height, color=color, fmt=fmt, mode=mode),
            mime_type=f"image/{fmt.lower()}"
        )
    return _create


@pytest.fixture
def scripted_backend():
    """Factory for ScriptedBackend instances."""
    return ScriptedBackend


@pytest.fixture
def pending_job():
    """Create a job snapshot that is still running."""
    def _create(job_id: str = "operations/test-job"):
        return GenerationJob(job_id=job_id, status=JobStatus.PENDING)
    return _create


@pytest.fixture
def done_job():
    """Create a finished job snapshot."""
    def _create(locator="https://example.com/video.mp4", error_message=None, job_id="operations/test-job"):
        return GenerationJob(
            job_id=job_id,
            status=JobStatus.DONE,
            result_locator=locator,
            error_message=error_message
        )
    return _create


@pytest.fixture
def wait_until():
    """Await until predicate() is true, failing after timeout seconds."""
    async def _wait(predicate, timeout: float = 2.0):
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while not predicate():
            if loop.time() > deadline:
                raise AssertionError("Condition not met before timeout")
            await asyncio.sleep(0.001)
    return _wait
