"""Media generation and caching.

Handles scene stills, map panoramas and Veo reconstruction videos using
Google's Gemini Image Generation and Veo APIs.
"""

from .cache import MISS, MediaCache, MediaLibrary
from .generator import MediaAsset, MediaGenerator
from .polling import poll_until_done

__all__ = [
    "MISS",
    "MediaAsset",
    "MediaCache",
    "MediaGenerator",
    "MediaLibrary",
    "poll_until_done",
]
