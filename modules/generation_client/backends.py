"""
Job backend interface.

A backend knows how to start a generation job and query it once. The polling
loop in GenerationClient only talks to this interface, so providers can be
swapped and mocked.
"""
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional

import httpx

from modules.generation_client.config import DOWNLOAD_TIMEOUT_SECONDS
from shared.models.image import ImageRecord
from shared.models.video import GenerationJob
from shared.errors import DownloadError
from shared.logging import get_logger

logger = get_logger("generation_client.backends")


class JobBackend(ABC):
    """Provider capability: submit a job, poll it once, fetch its result."""

    name = "base"

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        download_timeout: float = DOWNLOAD_TIMEOUT_SECONDS
    ):
        # Injected clients are borrowed and never closed here
        self._http_client = http_client
        self.download_timeout = download_timeout

    @abstractmethod
    async def submit(
        self,
        image: ImageRecord,
        prompt: str,
        number_of_videos: int = 1
    ) -> GenerationJob:
        """Start a job for image + prompt and return its first snapshot."""

    @abstractmethod
    async def poll_once(self, job: GenerationJob) -> GenerationJob:
        """Query the job once and return a fresh snapshot."""

    def download_headers(self) -> Dict[str, str]:
        """Headers sent when fetching the result. Override for authenticated downloads."""
        return {}

    @asynccontextmanager
    async def http_client(self, timeout: float) -> AsyncIterator[httpx.AsyncClient]:
        if self._http_client is not None:
            yield self._http_client
            return
        async with httpx.AsyncClient(timeout=timeout) as client:
            yield client

    async def fetch(self, locator: str) -> bytes:
        """
        Download the finished video.

        Args:
            locator: Result URL reported by the job

        Returns:
            Video bytes

        Raises:
            DownloadError: If the request fails or returns a non-success status
        """
        try:
            async with self.http_client(self.download_timeout) as client:
                response = await client.get(
                    locator,
                    headers=self.download_headers(),
                    follow_redirects=True
                )
        except httpx.HTTPError as e:
            logger.error(f"Failed to download video: {e}", exc_info=e)
            raise DownloadError(f"Failed to download video: {str(e)}") from e

        if not response.is_success:
            logger.error(
                "Video download returned error status",
                extra={"status_code": response.status_code, "backend": self.name}
            )
            raise DownloadError(f"Failed to download video: {response.reason_phrase}")

        return response.content
