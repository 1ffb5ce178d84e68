"""
Generation client configuration.

Fixed instruction, provider endpoints and polling constants.
"""
from shared.config import settings

# Instruction sent with every composite. The left person is stationary, the
# right person performs the hug.
HUG_PROMPT = (
    "From the provided image containing two people side-by-side, create a short video. "
    "In the video, the person on the right walks through the person on the left, "
    "moves behind them, and then hugs their waist from behind. "
    "The person on the left must remain completely still and stationary throughout "
    "the entire video. Do not duplicate or clone either person. "
    "Ensure the animation is smooth and realistic."
)

NUMBER_OF_VIDEOS = 1

# Constant interval, no backoff (POLL_INTERVAL_SECONDS)
POLL_INTERVAL_SECONDS = settings.poll_interval_seconds
DOWNLOAD_TIMEOUT_SECONDS = settings.download_timeout_seconds
REQUEST_TIMEOUT_SECONDS = 60.0

# Gemini API (Veo)
VEO_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
VEO_MODEL = settings.veo_model

# Replicate
REPLICATE_MODEL = settings.replicate_model
REPLICATE_IMAGE_PARAMETER = "start_image"
REPLICATE_TERMINAL_STATUSES = ("succeeded", "failed", "canceled")

VIDEO_SUFFIX = ".mp4"
VIDEO_PREFIX = "ai_hug_"
