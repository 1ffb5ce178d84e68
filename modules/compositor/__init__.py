"""
Compositor module.

Builds the side-by-side frame that is submitted for video generation.
"""

from modules.compositor.compositor import compose

__all__ = ["compose"]
