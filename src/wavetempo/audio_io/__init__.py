"""
Audio I/O module for loading and decoding audio files.
"""

from .loader import AudioLoader, AudioData

__all__ = ["AudioLoader", "AudioData"]
