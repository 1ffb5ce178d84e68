"""
Generation Client module.

Backends: Veo (Gemini API) and Replicate.
Client: submit / poll / download for a single composite frame.
"""

from modules.generation_client.backends import JobBackend
from modules.generation_client.client import (
    GenerationClient,
    build_backend,
    build_generation_client,
)

__all__ = ["JobBackend", "GenerationClient", "build_backend", "build_generation_client"]
