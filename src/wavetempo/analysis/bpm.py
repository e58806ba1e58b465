"""
Wavelet BPM detector.

Algorithm (Tzanetakis, Essl & Cook, "Audio Analysis using the Discrete
Wavelet Transform"):
1. 4-level DWT of the window
2. Envelope per sub-band: decimate, rectify, remove mean
3. Sum of all envelopes and the final approximation envelope
4. Autocorrelation of the sum
5. Strongest peak within the 40-220 BPM lag range -> window tempo

The tempo of a track is the median of its window tempos.
"""

import logging
from typing import Optional, Tuple

import numpy as np

from ..errors import DegenerateRangeError, InsufficientDataError, NoDataError
from ..models.results import TempoResult, WindowEstimate
from .correlation import autocorrelate, detect_peak, lag_bounds, lag_to_bpm
from .envelope import aggregate, extract_envelopes, max_decimation, reference_length
from .wavelet import DEFAULT_LEVELS, decompose

logger = logging.getLogger(__name__)


def median_tempo(values) -> float:
    """
    Median of window tempos; the mean of the two central values for an
    even count.

    Raises:
        NoDataError: If ``values`` is empty
    """
    if len(values) == 0:
        raise NoDataError("No windows processed yet")
    return float(np.median(values))


class BpmEstimator:
    """
    Per-window tempo estimator with a median over the window history.

    The only state kept between windows is the list of window tempos;
    all numeric work is done by the stateless functions of the analysis
    package. Not thread-safe: share an instance only behind a lock.
    """

    LEVELS = DEFAULT_LEVELS

    def __init__(self, sample_rate: float):
        """
        Args:
            sample_rate: Sample rate of every window in Hz

        Raises:
            ValueError: If the sample rate is not positive
            DegenerateRangeError: If the rate is too low for the lag range
        """
        if not sample_rate or sample_rate <= 0:
            raise ValueError(f"Sample rate must be positive, got {sample_rate}")

        self.sample_rate = float(sample_rate)
        self.min_lag, self.max_lag = lag_bounds(self.sample_rate, self.LEVELS)
        self._history: list[float] = []

    @property
    def max_decimation(self) -> int:
        return max_decimation(self.LEVELS)

    @property
    def min_window_length(self) -> int:
        """Shortest window whose composite envelope spans the lag range."""
        return 2 * self.max_decimation * self.max_lag

    @property
    def history(self) -> Tuple[float, ...]:
        return tuple(self._history)

    def process_window(self, samples) -> float:
        """
        Estimate the tempo of one window and record it.

        Args:
            samples: Mono samples at ``sample_rate``

        Returns:
            Window tempo in BPM

        Raises:
            InsufficientDataError: If the window is too short
            ValueError: If the window holds NaN or infinite samples
        """
        return self.analyze_window(samples).bpm

    def analyze_window(self, samples, start_time: Optional[float] = None) -> WindowEstimate:
        """Same as ``process_window`` but returns lag and peak details."""
        samples = np.asarray(samples, dtype=np.float64)
        if samples.ndim != 1 or len(samples) < self.min_window_length:
            raise InsufficientDataError(
                f"Window of {samples.size} samples is shorter than the "
                f"{self.min_window_length} needed at {self.sample_rate:g} Hz"
            )
        if not np.all(np.isfinite(samples)):
            raise ValueError("Window contains NaN or infinite samples")

        decomposition = decompose(samples, self.LEVELS)
        envelopes, approximation = extract_envelopes(decomposition)
        length = reference_length(len(decomposition[0].detail), self.LEVELS)
        composite = aggregate(envelopes + [approximation], length)

        correlated = autocorrelate(composite)
        location = detect_peak(correlated[self.min_lag:self.max_lag])
        if location is None:
            raise DegenerateRangeError(
                f"No peak in lag range [{self.min_lag}, {self.max_lag})"
            )

        lag = self.min_lag + location
        bpm = lag_to_bpm(lag, self.sample_rate, self.LEVELS)

        estimate = WindowEstimate(
            index=len(self._history),
            bpm=bpm,
            lag=lag,
            peak=float(correlated[lag]),
            start_time=start_time,
        )
        self._history.append(bpm)
        logger.debug("Window %d: %.2f BPM (lag %d)", estimate.index, bpm, lag)
        return estimate

    def current_estimate(self) -> float:
        """
        Median of all window tempos so far.

        Raises:
            NoDataError: If no window has been processed
        """
        return median_tempo(self._history)

    def reset(self):
        """Forget all window tempos to start a new track."""
        if self._history:
            logger.debug("Resetting tempo history (%d windows)", len(self._history))
        self._history.clear()

    def summary(self) -> TempoResult:
        """Median tempo with the window history that produced it."""
        bpm = self.current_estimate()
        windows = len(self._history)
        return TempoResult(
            global_bpm=bpm,
            window_bpms=list(self._history),
            windows=windows,
            sample_rate=self.sample_rate,
            explanation=(
                f"Median of {windows} window estimate{'s' if windows != 1 else ''} "
                f"from wavelet envelope autocorrelation"
            ),
        )
