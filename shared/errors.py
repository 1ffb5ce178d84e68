"""
Error taxonomy.

All errors raised by the hug video pipeline derive from PipelineError so the
workflow controller can turn any of them into a Failed state.
"""


class PipelineError(Exception):
    """Base class for all pipeline errors."""


class ConfigError(PipelineError):
    """Invalid or missing configuration."""


class ValidationError(PipelineError):
    """User input rejected before any work starts."""


class MissingInputError(ValidationError):
    """One or both upload slots are empty at submit time."""


class UnsupportedFormatError(ValidationError):
    """Uploaded file does not declare an image type."""


class ReadFailureError(ValidationError):
    """Uploaded file could not be read."""


class WorkflowBusyError(PipelineError):
    """A generation attempt is already compositing or generating."""


class CompositionError(PipelineError):
    """Side-by-side composite could not be built."""


class GenerationError(PipelineError):
    """Video generation failed at submit, poll or retrieval."""


class NoResultLocatorError(GenerationError):
    """Completed job did not report where to download the video."""


class DownloadError(GenerationError):
    """Video bytes could not be fetched from the result locator."""
