"""
Data models for tempo results using Pydantic.
"""

from .results import WindowEstimate, TempoResult

__all__ = [
    "WindowEstimate",
    "TempoResult",
]
