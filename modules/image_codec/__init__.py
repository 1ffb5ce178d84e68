"""
Image Codec module.

Turns user uploads into ImageRecords and holds per-slot upload state.
"""

from modules.image_codec.codec import decode, decode_path
from modules.image_codec.uploader import UploadSlot, left_slot, right_slot

__all__ = ["decode", "decode_path", "UploadSlot", "left_slot", "right_slot"]
