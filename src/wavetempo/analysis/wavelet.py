"""
Multi-level discrete wavelet decomposition.

Uses the 8-tap Daubechies analysis filter bank (``db4`` in PyWavelets
naming). Each level splits its input into a low-pass approximation and a
high-pass detail sequence, both downsampled by 2. Level 0 consumes the raw
window, every later level consumes the previous approximation.

Boundary handling is periodization: the input is treated as one period of
a periodic signal, so every output has exactly ceil(n / 2) samples and no
edge padding leaks into the coefficient count.
"""

from typing import NamedTuple, Tuple

import numpy as np
import pywt

from ..errors import InsufficientDataError

WAVELET = "db4"
BOUNDARY_MODE = "periodization"
DEFAULT_LEVELS = 4


class DecompositionLevel(NamedTuple):
    """Coefficients produced by one filter bank stage."""
    approximation: np.ndarray
    detail: np.ndarray


Decomposition = Tuple[DecompositionLevel, ...]


def min_length(levels: int = DEFAULT_LEVELS) -> int:
    """Shortest input that survives ``levels`` halvings without emptying."""
    return 2 ** levels


def decompose(samples, levels: int = DEFAULT_LEVELS) -> Decomposition:
    """
    Run a cascaded Daubechies-8 DWT.

    Args:
        samples: 1-D sequence of real samples
        levels: Number of filter bank stages

    Returns:
        Tuple of ``levels`` DecompositionLevel entries, finest first

    Raises:
        InsufficientDataError: If the input cannot be halved ``levels`` times
    """
    if levels < 1:
        raise ValueError(f"levels must be positive, got {levels}")

    current = np.asarray(samples, dtype=np.float64)
    if current.ndim != 1:
        raise InsufficientDataError(
            f"Expected a 1-D window, got an array of shape {current.shape}"
        )
    if len(current) < min_length(levels):
        raise InsufficientDataError(
            f"{len(current)} samples cannot support {levels} decomposition "
            f"levels (need at least {min_length(levels)})"
        )

    result = []
    for _ in range(levels):
        approximation, detail = pywt.dwt(current, WAVELET, mode=BOUNDARY_MODE)
        result.append(DecompositionLevel(approximation, detail))
        current = approximation

    return tuple(result)
