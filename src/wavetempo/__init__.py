"""
wavetempo - Wavelet-based tempo detection

Estimates the tempo of an audio signal window by window:
- 4-level Daubechies-8 discrete wavelet transform
- Sub-band envelope extraction and summation
- Autocorrelation peak picking in a 40-220 BPM range
- Median over all processed windows

Samples come from a live input device or a file through the
audio_capture layer.
"""

import logging

from .analysis import BpmEstimator
from .errors import (
    WavetempoError,
    InsufficientDataError,
    MisalignedEnvelopeError,
    DegenerateRangeError,
    NoDataError,
)

__version__ = "1.0.0"
__author__ = "Wavetempo Team"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "BpmEstimator",
    "WavetempoError",
    "InsufficientDataError",
    "MisalignedEnvelopeError",
    "DegenerateRangeError",
    "NoDataError",
]
