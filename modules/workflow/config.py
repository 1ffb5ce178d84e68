"""
Workflow configuration.
"""
from shared.config import settings

# Shown in order while generating, wrapping after the last one
LOADING_MESSAGES = (
    "Warming up the digital actors...",
    "Choreographing the embrace...",
    "Setting the scene for the animation...",
    "Rendering the initial frames...",
    "This can take a few minutes, please be patient.",
    "AI is composing the video sequence...",
    "Almost there, adding the final touches...",
)

PROGRESS_INTERVAL_SECONDS = settings.progress_interval_seconds

MISSING_INPUT_MESSAGE = "Please upload both images before generating."
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred."
