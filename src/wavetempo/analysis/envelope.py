"""
Sub-band envelope extraction and aggregation.

Each level's detail coefficients become an envelope by:
1. Strided decimation down to the coarsest level's rate
2. Full-wave rectification
3. Mean removal

The envelopes of all levels plus the rectified, mean-removed final
approximation are summed into a single composite envelope.
"""

from typing import List, Sequence, Tuple

import numpy as np

from ..errors import MisalignedEnvelopeError
from .wavelet import Decomposition


def max_decimation(levels: int) -> int:
    """Decimation applied to the finest detail level."""
    return 2 ** (levels - 1)


def level_pace(level: int, levels: int) -> int:
    """Decimation factor for ``level``; halves at every coarser level."""
    return 2 ** (levels - 1 - level)


def downsample(data, pace: int) -> np.ndarray:
    """Keep every ``pace``-th sample: result[i] = data[i * pace]."""
    if pace < 1:
        raise ValueError(f"pace must be positive, got {pace}")
    data = np.asarray(data, dtype=np.float64)
    length = len(data) // pace
    return data[: length * pace : pace].copy()


def rectify(data) -> np.ndarray:
    return np.abs(np.asarray(data, dtype=np.float64))


def normalize(data) -> np.ndarray:
    """Subtract the arithmetic mean; an empty input stays empty."""
    data = np.asarray(data, dtype=np.float64)
    if len(data) == 0:
        return data.copy()
    return data - np.sum(data, dtype=np.float64) / len(data)


def detail_envelope(detail, pace: int) -> np.ndarray:
    return normalize(rectify(downsample(detail, pace)))


def approximation_envelope(approximation) -> np.ndarray:
    return normalize(rectify(approximation))


def extract_envelopes(decomposition: Decomposition) -> Tuple[List[np.ndarray], np.ndarray]:
    """
    Build one envelope per level plus the final approximation envelope.

    Args:
        decomposition: Output of ``wavelet.decompose``

    Returns:
        (detail envelopes finest first, approximation envelope)
    """
    levels = len(decomposition)
    envelopes = [
        detail_envelope(level.detail, level_pace(i, levels))
        for i, level in enumerate(decomposition)
    ]
    return envelopes, approximation_envelope(decomposition[-1].approximation)


def reference_length(level0_detail_length: int, levels: int) -> int:
    """Composite length: the finest detail level after full decimation."""
    return level0_detail_length // max_decimation(levels)


def aggregate(envelopes: Sequence[np.ndarray], length: int) -> np.ndarray:
    """
    Sum envelopes elementwise over their first ``length`` samples.

    Raises:
        MisalignedEnvelopeError: If any envelope is shorter than ``length``
    """
    composite = np.zeros(length, dtype=np.float64)
    for i, envelope in enumerate(envelopes):
        if len(envelope) < length:
            raise MisalignedEnvelopeError(
                f"Envelope {i} has {len(envelope)} samples, "
                f"composite needs {length}"
            )
        composite += envelope[:length]
    return composite
