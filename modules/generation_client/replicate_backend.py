"""
Replicate backend.

Creates a prediction for an image-to-video model and reloads it by id.
The replicate SDK is blocking, so calls run in a worker thread.
"""
import asyncio
import io
from typing import Any, Optional

import httpx
import replicate
from replicate.exceptions import ReplicateError

from modules.generation_client.backends import JobBackend
from modules.generation_client.config import (
    REPLICATE_MODEL, REPLICATE_IMAGE_PARAMETER, REPLICATE_TERMINAL_STATUSES,
    DOWNLOAD_TIMEOUT_SECONDS
)
from shared.models.image import ImageRecord
from shared.models.video import GenerationJob, JobStatus
from shared.errors import GenerationError
from shared.logging import get_logger

logger = get_logger("generation_client.replicate")


def extract_output_url(output: Any) -> Optional[str]:
    """
    Get the video URL from a prediction output.

    Output may be a URL string, a FileOutput object or a list of either.
    """
    if isinstance(output, list):
        if not output:
            return None
        output = output[0]
    if isinstance(output, str):
        return output or None
    url = getattr(output, "url", None)
    return str(url) if url else None


def job_from_prediction(prediction: Any) -> GenerationJob:
    """Convert a Replicate prediction into a GenerationJob snapshot."""
    if prediction.status not in REPLICATE_TERMINAL_STATUSES:
        return GenerationJob(job_id=prediction.id, status=JobStatus.PENDING)

    if prediction.status == "succeeded":
        return GenerationJob(
            job_id=prediction.id,
            status=JobStatus.DONE,
            result_locator=extract_output_url(prediction.output)
        )

    return GenerationJob(
        job_id=prediction.id,
        status=JobStatus.DONE,
        error_message=str(prediction.error or f"Prediction {prediction.status}")
    )


class ReplicateJobBackend(JobBackend):
    """Image-to-video models hosted on Replicate."""

    name = "replicate"

    def __init__(
        self,
        api_token: str,
        model: str = REPLICATE_MODEL,
        image_parameter: str = REPLICATE_IMAGE_PARAMETER,
        client: Optional[replicate.Client] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        download_timeout: float = DOWNLOAD_TIMEOUT_SECONDS
    ):
        super().__init__(http_client=http_client, download_timeout=download_timeout)
        self.model = model
        self.image_parameter = image_parameter
        self._client = client or replicate.Client(api_token=api_token)

    async def submit(
        self,
        image: ImageRecord,
        prompt: str,
        number_of_videos: int = 1
    ) -> GenerationJob:
        if number_of_videos != 1:
            logger.warning(
                "Replicate models return a single video, ignoring number_of_videos",
                extra={"number_of_videos": number_of_videos}
            )

        # Replicate uploads file objects passed in input
        image_file = io.BytesIO(image.data)
        image_file.name = "composite.jpg" if image.mime_type == "image/jpeg" else "composite.png"

        logger.info(
            f"Creating Replicate prediction with model {self.model}",
            extra={"model": self.model, "image_size": image.size_bytes}
        )
        try:
            prediction = await asyncio.to_thread(
                self._client.predictions.create,
                model=self.model,
                input={"prompt": prompt, self.image_parameter: image_file}
            )
        except ReplicateError as e:
            raise GenerationError(f"Failed to create prediction: {str(e)}") from e
        return job_from_prediction(prediction)

    async def poll_once(self, job: GenerationJob) -> GenerationJob:
        try:
            prediction = await asyncio.to_thread(self._client.predictions.get, job.job_id)
        except ReplicateError as e:
            raise GenerationError(f"Failed to query prediction {job.job_id}: {str(e)}") from e
        return job_from_prediction(prediction)
