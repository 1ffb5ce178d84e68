"""
Hug video workflow controller.

Owns the two upload slots and the single WorkflowState value:

    Idle -> Compositing -> Generating -> Ready | Failed

Failed can be dismissed back to Idle with inputs kept; Ready can be reset to
Idle with inputs cleared. A submit is rejected while compositing or
generating.
"""
import asyncio
from typing import Callable, List, Optional, Sequence
from uuid import uuid4

from modules.compositor import compose
from modules.generation_client.client import GenerationClient
from modules.image_codec.uploader import left_slot, right_slot
from modules.workflow.config import (
    LOADING_MESSAGES, PROGRESS_INTERVAL_SECONDS, MISSING_INPUT_MESSAGE, UNEXPECTED_ERROR_MESSAGE
)
from modules.workflow.ticker import ProgressTicker
from shared.models.image import CompositeFrame, ImageRecord
from shared.models.workflow import (
    Idle, Compositing, Generating, Ready, Failed, WorkflowState, BUSY_KINDS
)
from shared.errors import MissingInputError, WorkflowBusyError
from shared.logging import get_logger, set_attempt_id

logger = get_logger("workflow.controller")

StateListener = Callable[[WorkflowState], None]
Compositor = Callable[[ImageRecord, ImageRecord], CompositeFrame]


def error_message(error: BaseException) -> str:
    return str(error) or UNEXPECTED_ERROR_MESSAGE


class WorkflowController:
    """State machine driving compositing and generation for one user session."""

    def __init__(
        self,
        generation_client: GenerationClient,
        compositor: Compositor = compose,
        progress_interval: float = PROGRESS_INTERVAL_SECONDS,
        messages: Sequence[str] = LOADING_MESSAGES
    ):
        self.generation_client = generation_client
        self.compositor = compositor
        self.progress_interval = progress_interval
        self.messages = tuple(messages)
        self.left_slot = left_slot()
        self.right_slot = right_slot()
        self.input_error: Optional[str] = None
        self._state: WorkflowState = Idle()
        self._listeners: List[StateListener] = []
        self._ticker: Optional[ProgressTicker] = None
        self._task: Optional[asyncio.Task] = None

    # -------------------- Observation --------------------

    @property
    def state(self) -> WorkflowState:
        return self._state

    @property
    def is_busy(self) -> bool:
        return self._state.kind in BUSY_KINDS

    @property
    def can_submit(self) -> bool:
        return self.left_slot.has_image and self.right_slot.has_image and not self.is_busy

    @property
    def ticker_running(self) -> bool:
        return self._ticker is not None and self._ticker.running

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """
        Register a callback invoked with every new state.

        Returns:
            Function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _transition(self, state: WorkflowState) -> None:
        previous = self._state
        self._state = state
        if previous.kind != state.kind:
            logger.info(
                f"Workflow state {previous.kind} -> {state.kind}",
                extra={"from_state": previous.kind, "to_state": state.kind}
            )
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception as e:
                logger.error(
                    f"State listener failed on {state.kind}: {e}",
                    exc_info=e,
                    extra={"state": state.kind}
                )

    def _attempt_pending(self, current: Optional[asyncio.Task] = None) -> bool:
        """True while a started attempt other than current has not finished."""
        return self._task is not None and self._task is not current and not self._task.done()

    # -------------------- Progress ticker --------------------

    def _start_ticker(self) -> None:
        self._ticker = ProgressTicker(self.messages, self.progress_interval, self._on_progress)
        self._ticker.start()

    def _stop_ticker(self) -> None:
        if self._ticker is not None:
            self._ticker.stop()
            self._ticker = None

    def _on_progress(self, message: str) -> None:
        if isinstance(self._state, Generating):
            self._transition(Generating(progress_message=message))

    # -------------------- Actions --------------------

    async def submit(self) -> WorkflowState:
        """
        Composite the two uploaded images and generate a video from them.

        Returns:
            Terminal state of the attempt (Ready or Failed)

        Raises:
            WorkflowBusyError: If an attempt is already compositing or generating
            MissingInputError: If either slot is empty (state is left unchanged)
        """
        current = asyncio.current_task()
        if self.is_busy or self._attempt_pending(current):
            raise WorkflowBusyError("A video is already being generated")

        left = self.left_slot.image
        right = self.right_slot.image
        if left is None or right is None:
            self.input_error = MISSING_INPUT_MESSAGE
            logger.info(
                "Submit blocked, missing input",
                extra={"has_left": left is not None, "has_right": right is not None}
            )
            raise MissingInputError(MISSING_INPUT_MESSAGE)

        attempt_id = uuid4()
        set_attempt_id(attempt_id)
        self.input_error = None
        self._release_video()
        self._task = current

        try:
            self._transition(Compositing())
            try:
                frame = self.compositor(left, right)
            except Exception as e:
                logger.error(f"Compositing failed: {e}", exc_info=e)
                self._transition(Failed(error_message=error_message(e)))
                return self._state

            self._transition(Generating(progress_message=self.messages[0]))
            self._start_ticker()
            try:
                try:
                    video = await self.generation_client.generate(frame)
                finally:
                    self._stop_ticker()
            except asyncio.CancelledError:
                logger.warning("Generation abandoned, remote job may still be running")
                self._transition(Idle())
                raise
            except Exception as e:
                logger.error(f"Generation failed: {e}", exc_info=e)
                self._transition(Failed(error_message=error_message(e)))
                return self._state

            self._transition(Ready(video=video))
            return self._state
        finally:
            self._task = None
            set_attempt_id(None)

    def start(self) -> "asyncio.Task[WorkflowState]":
        """Schedule submit() as a task so the caller can keep running (and abandon it)."""
        if self.is_busy or self._attempt_pending():
            raise WorkflowBusyError("A video is already being generated")
        # Kept before the first turn so abandon() can cancel a task that has not started
        self._task = asyncio.get_running_loop().create_task(self.submit())
        return self._task

    def abandon(self) -> bool:
        """
        Stop local work for the in-flight attempt.

        Only local polling stops; the remote job is not cancelled.

        Returns:
            True if an attempt was running
        """
        self._stop_ticker()
        if self._task is None or self._task.done():
            return False
        self._task.cancel()
        return True

    def dismiss_error(self) -> None:
        """Clear the error. Failed returns to Idle with both inputs kept."""
        self.input_error = None
        if isinstance(self._state, Failed):
            self._transition(Idle())

    def reset(self) -> None:
        """Return to Idle with both inputs cleared and any video released."""
        if self.is_busy or self._attempt_pending():
            raise WorkflowBusyError("Cannot reset while a video is being generated")
        self._release_video()
        self.left_slot.clear()
        self.right_slot.clear()
        self.input_error = None
        self._transition(Idle())

    def _release_video(self) -> None:
        if isinstance(self._state, Ready):
            self._state.video.release()
