"""
Unit tests for generation_client.client module.

Polling, result extraction, download and error wrapping against a scripted
JobBackend.
"""
import asyncio
from unittest.mock import AsyncMock

import httpx
import pytest

from modules.generation_client.backends import JobBackend
from modules.generation_client.client import (
    GenerationClient,
    build_backend,
    build_generation_client,
    NO_RESULT_LOCATOR_MESSAGE,
)
from modules.generation_client.config import HUG_PROMPT, POLL_INTERVAL_SECONDS
from modules.generation_client.replicate_backend import ReplicateJobBackend
from modules.generation_client.veo import VeoJobBackend
from shared.config import Settings
from shared.models.image import CompositeFrame
from shared.models.video import VideoReference
from shared.errors import ConfigError, DownloadError, GenerationError


@pytest.fixture
def frame():
    return CompositeFrame(data=b"jpeg bytes", mime_type="image/jpeg", width=1440, height=720)


@pytest.fixture
def sleep():
    return AsyncMock()


def test_default_poll_interval():
    assert POLL_INTERVAL_SECONDS == 10.0


def test_rejects_non_positive_interval(scripted_backend):
    with pytest.raises(ValueError):
        GenerationClient(scripted_backend(), poll_interval=0)


class TestPolling:
    """Tests for wait_for_completion() timing."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("not_done_polls", [0, 1, 3, 7])
    async def test_n_pending_polls_cost_n_waits(
        self, scripted_backend, pending_job, done_job, frame, sleep, tmp_path, not_done_polls
    ):
        """Test N not-done polls followed by a done poll wait exactly N intervals."""
        backend = scripted_backend(snapshots=[pending_job()] * not_done_polls + [done_job()])
        client = GenerationClient(backend, poll_interval=10, sleep=sleep, output_dir=tmp_path)

        await client.generate(frame)

        assert backend.polls == not_done_polls + 1
        assert sleep.await_count == not_done_polls
        for call in sleep.await_args_list:
            assert call.args == (10,)

    @pytest.mark.asyncio
    async def test_already_done_on_submit_skips_polling(self, scripted_backend, done_job, frame, sleep, tmp_path):
        backend = scripted_backend(submit_job=done_job())
        client = GenerationClient(backend, sleep=sleep, output_dir=tmp_path)

        await client.generate(frame)

        assert backend.polls == 0
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_retrieval_starts_after_done(self, scripted_backend, pending_job, done_job, frame, tmp_path):
        """Test fetch happens only once the job reports done."""
        events = []
        backend = scripted_backend(snapshots=[pending_job(), pending_job(), done_job(locator="https://cdn/v.mp4")])

        async def recording_sleep(seconds):
            events.append(("sleep", backend.polls))

        original_fetch = backend.fetch

        async def recording_fetch(locator):
            events.append(("fetch", backend.polls))
            return await original_fetch(locator)

        backend.fetch = recording_fetch
        client = GenerationClient(backend, sleep=recording_sleep, output_dir=tmp_path)

        await client.generate(frame)

        assert events == [("sleep", 1), ("sleep", 2), ("fetch", 3)]
        assert backend.fetched == ["https://cdn/v.mp4"]

    @pytest.mark.asyncio
    async def test_cancellation_stops_polling(self, scripted_backend, pending_job, frame):
        """Test cancelling the task stops local polling without wrapping the cancellation."""
        backend = scripted_backend(snapshots=[pending_job()])
        client = GenerationClient(backend, poll_interval=0.01)

        task = asyncio.create_task(client.generate(frame))
        while backend.polls < 2:
            await asyncio.sleep(0.005)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        polls = backend.polls
        await asyncio.sleep(0.05)
        assert backend.polls == polls


class TestGenerate:
    """Tests for generate() results and errors."""

    @pytest.mark.asyncio
    async def test_submits_frame_with_fixed_prompt(self, scripted_backend, frame, sleep, tmp_path):
        backend = scripted_backend()
        client = GenerationClient(backend, sleep=sleep, output_dir=tmp_path)

        await client.generate(frame)

        assert backend.submitted == [{"image": frame, "prompt": HUG_PROMPT, "number_of_videos": 1}]
        assert "hugs their waist from behind" in HUG_PROMPT
        assert "must remain completely still" in HUG_PROMPT
        assert "Do not duplicate or clone either person" in HUG_PROMPT

    @pytest.mark.asyncio
    async def test_returns_local_video(self, scripted_backend, frame, sleep, tmp_path):
        backend = scripted_backend(video=b"mp4 payload")
        client = GenerationClient(backend, sleep=sleep, output_dir=tmp_path / "videos")

        video = await client.generate(frame)

        assert isinstance(video, VideoReference)
        assert video.path.parent == tmp_path / "videos"
        assert video.path.suffix == ".mp4"
        assert video.read_bytes() == b"mp4 payload"
        assert video.size_bytes == len(b"mp4 payload")
        assert video.suggested_filename == "ai_hug_video.mp4"

    @pytest.mark.asyncio
    async def test_no_result_locator(self, scripted_backend, done_job, frame, sleep):
        """Test a done job without a download link fails."""
        backend = scripted_backend(snapshots=[done_job(locator=None)])
        client = GenerationClient(backend, sleep=sleep)

        with pytest.raises(GenerationError) as exc_info:
            await client.generate(frame)

        message = str(exc_info.value)
        assert message == f"An error occurred with the AI service: {NO_RESULT_LOCATOR_MESSAGE}"
        assert "no download link provided" in message
        assert backend.fetched == []

    @pytest.mark.asyncio
    async def test_service_reported_error(self, scripted_backend, done_job, frame, sleep):
        backend = scripted_backend(snapshots=[done_job(locator=None, error_message="Quota exceeded")])
        client = GenerationClient(backend, sleep=sleep)

        with pytest.raises(GenerationError, match="Video generation failed: Quota exceeded"):
            await client.generate(frame)

    @pytest.mark.asyncio
    async def test_download_failure(self, scripted_backend, frame, sleep):
        backend = scripted_backend(video=DownloadError("Failed to download video: Not Found"))
        client = GenerationClient(backend, sleep=sleep)

        with pytest.raises(GenerationError) as exc_info:
            await client.generate(frame)

        assert str(exc_info.value) == "An error occurred with the AI service: Failed to download video: Not Found"
        assert isinstance(exc_info.value.__cause__, DownloadError)

    @pytest.mark.asyncio
    async def test_transport_error_on_submit(self, scripted_backend, frame, sleep):
        backend = scripted_backend()
        backend.submit = AsyncMock(side_effect=httpx.ConnectError("connection refused"))
        client = GenerationClient(backend, sleep=sleep)

        with pytest.raises(GenerationError, match="An error occurred with the AI service: connection refused"):
            await client.generate(frame)

    @pytest.mark.asyncio
    async def test_poll_error_is_not_retried(self, scripted_backend, frame, sleep):
        backend = scripted_backend()
        backend.poll_once = AsyncMock(side_effect=GenerationError("Video service returned 503: unavailable"))
        client = GenerationClient(backend, sleep=sleep)

        with pytest.raises(GenerationError, match="503"):
            await client.generate(frame)

        assert backend.poll_once.await_count == 1
        sleep.assert_not_awaited()


def test_backend_interface_is_submit_and_poll():
    """Test providers only implement submit and poll_once; fetch is shared."""
    assert JobBackend.__abstractmethods__ == frozenset({"submit", "poll_once"})


@pytest.mark.asyncio
async def test_fetch_with_injected_client_leaves_it_open():
    """Test an injected httpx client is borrowed, not closed, by the backend."""
    http_client = httpx.AsyncClient(
        transport=httpx.MockTransport(lambda request: httpx.Response(200, content=b"mp4"))
    )
    backend = VeoJobBackend(api_key="AIza" + "k" * 35, http_client=http_client)

    assert await backend.fetch("https://files.test/v.mp4") == b"mp4"
    assert not http_client.is_closed
    await http_client.aclose()


class TestBuildBackend:
    """Tests for build_backend() / build_generation_client()."""

    def test_veo_backend_gets_injected_key(self):
        config = Settings(_env_file=None, gemini_api_key="AIza" + "k" * 35, veo_model="veo-test")

        backend = build_backend(config)

        assert isinstance(backend, VeoJobBackend)
        assert backend.api_key == "AIza" + "k" * 35
        assert backend.model == "veo-test"

    def test_replicate_backend(self):
        config = Settings(
            _env_file=None,
            generation_provider="replicate",
            replicate_api_token="r8_test123456789012345678901234567890",
            replicate_model="owner/model"
        )

        backend = build_backend(config)

        assert isinstance(backend, ReplicateJobBackend)
        assert backend.model == "owner/model"

    def test_missing_credential(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        config = Settings(_env_file=None, gemini_api_key=None)

        with pytest.raises(ConfigError, match="GEMINI_API_KEY is required"):
            build_backend(config)

    def test_build_generation_client_uses_configured_interval(self):
        config = Settings(_env_file=None, gemini_api_key="AIza" + "k" * 35, poll_interval_seconds=2.5)

        client = build_generation_client(config)

        assert client.poll_interval == 2.5
        assert isinstance(client.backend, VeoJobBackend)
