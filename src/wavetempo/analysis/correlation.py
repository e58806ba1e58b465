"""
Autocorrelation and peak picking over the composite envelope.

The lag search window corresponds to a plausible tempo range of
40-220 BPM at the composite envelope rate.
"""

import math
from typing import Optional, Tuple

import numpy as np

from ..errors import DegenerateRangeError
from .envelope import max_decimation
from .wavelet import DEFAULT_LEVELS

BPM_MIN = 40
BPM_MAX = 220


def autocorrelate(data) -> np.ndarray:
    """Unnormalized autocorrelation, y[k] = sum_i x[i] * x[i + k]."""
    data = np.asarray(data, dtype=np.float64)
    n = len(data)
    if n == 0:
        return data.copy()
    # 'full' mode is centered on lag 0 at index n - 1
    return np.correlate(data, data, mode="full")[n - 1:]


def lag_bounds(sample_rate: float, levels: int = DEFAULT_LEVELS) -> Tuple[int, int]:
    """
    Lag search window [min_lag, max_lag) for the plausible tempo range.

    Raises:
        DegenerateRangeError: If the range is empty or starts at lag 0
    """
    envelope_rate = sample_rate / max_decimation(levels)
    min_lag = int(math.floor(60.0 / BPM_MAX * envelope_rate))
    max_lag = int(math.floor(60.0 / BPM_MIN * envelope_rate))

    if min_lag < 1:
        raise DegenerateRangeError(
            f"Sample rate {sample_rate} Hz gives a minimum lag of {min_lag}"
        )
    if min_lag >= max_lag:
        raise DegenerateRangeError(
            f"Empty lag range [{min_lag}, {max_lag}) at {sample_rate} Hz"
        )
    return min_lag, max_lag


def detect_peak(data) -> Optional[int]:
    """
    Index of the maximum absolute value.

    A positive match wins over a negative one of the same magnitude;
    among equals the lowest index wins.

    Returns:
        Index into ``data``, or None if ``data`` is empty
    """
    data = np.asarray(data, dtype=np.float64)
    if len(data) == 0:
        return None

    peak = np.max(np.abs(data))

    positive = np.flatnonzero(data == peak)
    if len(positive) > 0:
        return int(positive[0])

    negative = np.flatnonzero(data == -peak)
    if len(negative) > 0:
        return int(negative[0])

    # Only reachable with NaN in the input
    return None


def lag_to_bpm(lag: int, sample_rate: float, levels: int = DEFAULT_LEVELS) -> float:
    """Convert an absolute lag in envelope samples to beats per minute."""
    if lag < 1:
        raise DegenerateRangeError(f"Cannot convert lag {lag} to a tempo")
    return 60.0 / lag * (sample_rate / max_decimation(levels))
