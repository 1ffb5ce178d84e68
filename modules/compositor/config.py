"""
Compositor configuration.
"""
from shared.config import settings

# Canonical height both images are scaled to (COMPOSITE_HEIGHT)
TARGET_HEIGHT = settings.composite_height

# JPEG quality for the encoded composite (COMPOSITE_QUALITY)
JPEG_QUALITY = settings.composite_quality

OUTPUT_FORMAT = "JPEG"
OUTPUT_MIME_TYPE = "image/jpeg"

# Opaque black shows through any partially transparent edge
BACKGROUND_COLOR = (0, 0, 0)
