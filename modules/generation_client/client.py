"""
Video generation client.

Submits a composite frame, polls the job at a fixed interval until it is
done, downloads the result and stores it as a local VideoReference.
"""
import asyncio
import tempfile
import time
from pathlib import Path
from typing import Awaitable, Callable, Optional, Union

from modules.generation_client.backends import JobBackend
from modules.generation_client.config import (
    HUG_PROMPT, NUMBER_OF_VIDEOS, POLL_INTERVAL_SECONDS, VIDEO_PREFIX, VIDEO_SUFFIX
)
from shared.config import Settings, settings as default_settings
from shared.models.image import CompositeFrame
from shared.models.video import GenerationJob, VideoReference
from shared.errors import ConfigError, GenerationError, NoResultLocatorError
from shared.logging import get_logger

logger = get_logger("generation_client.client")

NO_RESULT_LOCATOR_MESSAGE = "Video generation failed: no download link provided."
SERVICE_ERROR_PREFIX = "An error occurred with the AI service"


class GenerationClient:
    """Runs one generation job end to end against a JobBackend."""

    def __init__(
        self,
        backend: JobBackend,
        poll_interval: float = POLL_INTERVAL_SECONDS,
        prompt: str = HUG_PROMPT,
        number_of_videos: int = NUMBER_OF_VIDEOS,
        output_dir: Optional[Union[str, Path]] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        if poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        self.backend = backend
        self.poll_interval = poll_interval
        self.prompt = prompt
        self.number_of_videos = number_of_videos
        self.output_dir = Path(output_dir) if output_dir else None
        self._sleep = sleep

    async def generate(self, frame: CompositeFrame) -> VideoReference:
        """
        Generate a video from a composite frame.

        May take from tens of seconds to several minutes. Cancelling the
        calling task stops local polling; the remote job is left running.

        Args:
            frame: Composite frame to animate

        Returns:
            VideoReference to the downloaded video

        Raises:
            GenerationError: On any submit, poll, result or download failure
        """
        start_time = time.time()
        try:
            job = await self.backend.submit(frame, self.prompt, number_of_videos=self.number_of_videos)
            logger.info(
                "Generation job submitted",
                extra={"job_id": job.job_id, "backend": self.backend.name}
            )

            job = await self.wait_for_completion(job)
            locator = self.result_locator(job)

            logger.info("Downloading generated video", extra={"job_id": job.job_id})
            video_bytes = await self.backend.fetch(locator)
            video = self.materialize(video_bytes)
        except Exception as e:
            logger.error(
                f"Error generating video: {e}",
                exc_info=e,
                extra={"backend": self.backend.name}
            )
            raise GenerationError(f"{SERVICE_ERROR_PREFIX}: {str(e)}") from e

        logger.info(
            "Video generated successfully",
            extra={
                "job_id": job.job_id,
                "size": video.size_bytes,
                "generation_time": time.time() - start_time
            }
        )
        return video

    async def wait_for_completion(self, job: GenerationJob) -> GenerationJob:
        """
        Poll until the job reports done.

        Waits poll_interval after every not-done poll, so N not-done polls
        followed by a done one cost exactly N waits. There is no timeout.
        """
        polls = 0
        while not job.done:
            job = await self.backend.poll_once(job)
            polls += 1
            if job.done:
                break
            logger.debug(
                f"Job still running after {polls} polls",
                extra={"job_id": job.job_id, "polls": polls}
            )
            await self._sleep(self.poll_interval)

        logger.info("Generation job done", extra={"job_id": job.job_id, "polls": polls})
        return job

    @staticmethod
    def result_locator(job: GenerationJob) -> str:
        """
        Get the download URL of a finished job.

        Raises:
            GenerationError: If the service reported an error for the job
            NoResultLocatorError: If the job finished without a video URL
        """
        if job.error_message and not job.result_locator:
            raise GenerationError(f"Video generation failed: {job.error_message}")
        if not job.result_locator:
            raise NoResultLocatorError(NO_RESULT_LOCATOR_MESSAGE)
        return job.result_locator

    def materialize(self, video_bytes: bytes) -> VideoReference:
        """Write downloaded bytes to a temporary .mp4 file."""
        if self.output_dir is not None:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            prefix=VIDEO_PREFIX,
            suffix=VIDEO_SUFFIX,
            dir=self.output_dir,
            delete=False
        ) as video_file:
            video_file.write(video_bytes)
            path = Path(video_file.name)
        return VideoReference(path=path, size_bytes=len(video_bytes))


def build_backend(config: Optional[Settings] = None) -> JobBackend:
    """
    Create the JobBackend selected by GENERATION_PROVIDER.

    Raises:
        ConfigError: If the provider's credential is not configured
    """
    config = config or default_settings
    credential = config.active_credential
    if not credential:
        env_var = "REPLICATE_API_TOKEN" if config.generation_provider == "replicate" else "GEMINI_API_KEY"
        raise ConfigError(f"{env_var} is required for provider '{config.generation_provider}'")

    if config.generation_provider == "replicate":
        from modules.generation_client.replicate_backend import ReplicateJobBackend
        return ReplicateJobBackend(
            api_token=credential,
            model=config.replicate_model,
            download_timeout=config.download_timeout_seconds
        )

    from modules.generation_client.veo import VeoJobBackend
    return VeoJobBackend(
        api_key=credential,
        model=config.veo_model,
        download_timeout=config.download_timeout_seconds
    )


def build_generation_client(config: Optional[Settings] = None) -> GenerationClient:
    """Create a GenerationClient from settings, credential injected into its backend."""
    config = config or default_settings
    return GenerationClient(
        backend=build_backend(config),
        poll_interval=config.poll_interval_seconds
    )
