"""
Gemini API (Veo) backend.

Starts a predictLongRunning operation over REST and polls the operation
resource until it reports done.
"""
from typing import Any, Dict, Optional

import httpx

from modules.generation_client.backends import JobBackend
from modules.generation_client.config import (
    VEO_BASE_URL, VEO_MODEL, REQUEST_TIMEOUT_SECONDS, DOWNLOAD_TIMEOUT_SECONDS
)
from shared.models.image import ImageRecord
from shared.models.video import GenerationJob, JobStatus
from shared.errors import GenerationError
from shared.logging import get_logger

logger = get_logger("generation_client.veo")


def extract_result_locator(operation: Dict[str, Any]) -> Optional[str]:
    """
    Pull the first video URI out of a finished operation.

    Accepts both the REST shape (generateVideoResponse.generatedSamples) and
    the SDK shape (generatedVideos).

    Returns:
        Video URI, or None if the operation carries no video
    """
    response = operation.get("response") or {}
    container = response.get("generateVideoResponse") or response
    samples = container.get("generatedSamples") or container.get("generatedVideos") or []
    if not samples:
        return None
    video = (samples[0] or {}).get("video") or {}
    return video.get("uri") or None


def job_from_operation(operation: Dict[str, Any]) -> GenerationJob:
    """Convert a long-running operation resource into a GenerationJob snapshot."""
    name = operation.get("name")
    if not name:
        raise GenerationError("Video service did not return an operation name")

    if not operation.get("done"):
        return GenerationJob(job_id=name, status=JobStatus.PENDING)

    error = operation.get("error")
    error_message = None
    if error:
        error_message = error.get("message") or f"Operation failed with code {error.get('code')}"

    return GenerationJob(
        job_id=name,
        status=JobStatus.DONE,
        result_locator=extract_result_locator(operation),
        error_message=error_message
    )


class VeoJobBackend(JobBackend):
    """Veo image-to-video through the Gemini API."""

    name = "veo"

    def __init__(
        self,
        api_key: str,
        model: str = VEO_MODEL,
        base_url: str = VEO_BASE_URL,
        http_client: Optional[httpx.AsyncClient] = None,
        request_timeout: float = REQUEST_TIMEOUT_SECONDS,
        download_timeout: float = DOWNLOAD_TIMEOUT_SECONDS
    ):
        super().__init__(http_client=http_client, download_timeout=download_timeout)
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.request_timeout = request_timeout

    def _headers(self) -> Dict[str, str]:
        return {"x-goog-api-key": self.api_key}

    def download_headers(self) -> Dict[str, str]:
        # Video URIs from the Files API need the same key as the request
        return self._headers()

    async def _request(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        async with self.http_client(self.request_timeout) as client:
            response = await client.request(method, url, headers=self._headers(), **kwargs)

        if response.is_error:
            logger.error(
                "Video service returned error status",
                extra={"status_code": response.status_code, "url": url}
            )
            raise GenerationError(
                f"Video service returned {response.status_code}: {response.text}"
            )
        return response.json()

    async def submit(
        self,
        image: ImageRecord,
        prompt: str,
        number_of_videos: int = 1
    ) -> GenerationJob:
        payload = {
            "instances": [
                {
                    "prompt": prompt,
                    "image": {
                        "bytesBase64Encoded": image.base64_data,
                        "mimeType": image.mime_type,
                    },
                }
            ],
            "parameters": {"sampleCount": number_of_videos},
        }
        url = f"{self.base_url}/models/{self.model}:predictLongRunning"
        logger.info(
            f"Starting Veo operation with model {self.model}",
            extra={"model": self.model, "image_size": image.size_bytes}
        )
        operation = await self._request("POST", url, json=payload)
        return job_from_operation(operation)

    async def poll_once(self, job: GenerationJob) -> GenerationJob:
        operation = await self._request("GET", f"{self.base_url}/{job.job_id}")
        return job_from_operation(operation)
