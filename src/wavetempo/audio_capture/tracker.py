"""
Tracker that feeds fixed-length windows from a sample source to the detector.

Manages:
- Source lifecycle (open, negotiate, prepare, close)
- Channel mixdown to mono
- Per-window estimates and the running median
"""

import logging
from enum import Enum
from typing import Callable, Optional

import numpy as np

from ..analysis.bpm import BpmEstimator
from ..errors import EndOfStreamError, WavetempoError
from ..logging_utils import setup_logger
from ..models.results import TempoResult, WindowEstimate
from .sources import SoundDeviceSource
from .stream import SampleSource, StreamFormat

logger = logging.getLogger(__name__)


class TrackerState(Enum):
    """State of the tracker."""
    IDLE = "idle"
    TRACKING = "tracking"
    ERROR = "error"


class TempoTracker:
    """
    Tracks the tempo of one source window by window.

    Runs synchronously in the caller's thread; the only blocking call is
    the source's ``read_window``.
    """

    def __init__(
        self,
        source: SampleSource,
        window_seconds: float = 3.0,
        bits: int = 16,
        channels: int = 2,
        sample_rate: float = 44100,
        frames_per_period: int = 256,
        device=None,
    ):
        """
        Initialize tracker.

        Args:
            source: Where samples come from
            window_seconds: Length of each analysis window
            bits: Requested sample width
            channels: Requested channel count
            sample_rate: Requested sample rate (the source may grant another)
            frames_per_period: Requested device period size
            device: Default device identifier for ``start``
        """
        if window_seconds <= 0:
            raise ValueError(f"window_seconds must be positive, got {window_seconds}")

        self.source = source
        self.window_seconds = window_seconds
        self.bits = bits
        self.channels = channels
        self.sample_rate = sample_rate
        self.frames_per_period = frames_per_period
        self.device = device

        self._estimator: Optional[BpmEstimator] = None
        self._state = TrackerState.IDLE
        self._windows_read = 0

        # Callbacks
        self._on_state_changed: Optional[Callable[[TrackerState], None]] = None
        self._on_window: Optional[Callable[[WindowEstimate], None]] = None

    @classmethod
    def from_config(cls, config, source: Optional[SampleSource] = None) -> "TempoTracker":
        """
        Build a tracker from a ``Config``; defaults to a live input source.

        Also applies the configured log level to the package logger.
        """
        setup_logger(config.log_level)
        return cls(
            source=source if source is not None else SoundDeviceSource(),
            window_seconds=config.window_seconds,
            bits=config.bits,
            channels=config.channels,
            sample_rate=config.sample_rate,
            frames_per_period=config.frames_per_period,
            device=config.device,
        )

    def set_callbacks(
        self,
        on_state_changed: Optional[Callable[[TrackerState], None]] = None,
        on_window: Optional[Callable[[WindowEstimate], None]] = None,
    ):
        """Set callback functions."""
        self._on_state_changed = on_state_changed
        self._on_window = on_window

    def _set_state(self, state: TrackerState):
        """Update state and notify."""
        self._state = state
        if self._on_state_changed:
            self._on_state_changed(state)

    def start(self, device=None) -> StreamFormat:
        """
        Open and configure the source, then build the detector.

        Args:
            device: Device identifier understood by the source; None uses
                the tracker's default device

        Returns:
            The format granted by the source

        Raises:
            SourceError: If any lifecycle step fails
            DegenerateRangeError: If the granted rate is unusable
        """
        if self._state == TrackerState.TRACKING:
            self.stop()

        if device is None:
            device = self.device

        try:
            self.source.open(device)
            granted = self.source.negotiate(
                self.bits, self.channels, self.sample_rate, self.frames_per_period
            )
            self.source.prepare()
            estimator = BpmEstimator(granted.sample_rate)
        except WavetempoError:
            self.source.close()
            self._set_state(TrackerState.ERROR)
            raise

        if self.window_frames(granted) < estimator.min_window_length:
            logger.warning(
                "%.1f s windows are shorter than the %d frames needed at %g Hz",
                self.window_seconds, estimator.min_window_length, granted.sample_rate,
            )

        self._estimator = estimator
        self._windows_read = 0
        self._set_state(TrackerState.TRACKING)
        return granted

    def window_frames(self, fmt: Optional[StreamFormat] = None) -> int:
        """Frames per analysis window at the granted rate."""
        fmt = fmt or self.source.format
        return int(round(self.window_seconds * fmt.sample_rate))

    def process_next(self) -> WindowEstimate:
        """
        Read one window and estimate its tempo.

        Raises:
            ReadError: If the source cannot deliver a full window
            InsufficientDataError: If the window is too short to analyze
        """
        if self._state != TrackerState.TRACKING:
            raise RuntimeError("Tracker is not started")

        fmt = self.source.format
        samples = self.source.read_window(self.window_frames(fmt))

        # Interleaved -> (frames, channels) -> mono
        if fmt.channels > 1:
            samples = samples.reshape(-1, fmt.channels).mean(axis=1)

        start_time = self._windows_read * self.window_seconds
        self._windows_read += 1

        estimate = self._estimator.analyze_window(samples, start_time=start_time)
        if self._on_window:
            self._on_window(estimate)
        return estimate

    def run(self, max_windows: Optional[int] = None) -> TempoResult:
        """
        Process windows until ``max_windows`` or the end of a finite source.

        Returns:
            Median tempo over the processed windows

        Raises:
            NoDataError: If not a single full window was available
        """
        processed = 0
        while max_windows is None or processed < max_windows:
            try:
                self.process_next()
            except EndOfStreamError:
                logger.info("Source exhausted after %d windows", processed)
                break
            processed += 1

        result = self.estimator.summary()
        logger.info("Tempo: %.2f BPM over %d windows", result.global_bpm, result.windows)
        return result

    def new_track(self):
        """Forget the window history; the stream stays open."""
        if self._estimator is not None:
            self._estimator.reset()

    def current_estimate(self) -> float:
        return self.estimator.current_estimate()

    def stop(self):
        """Close the source."""
        self.source.close()
        self._set_state(TrackerState.IDLE)

    @property
    def estimator(self) -> BpmEstimator:
        if self._estimator is None:
            raise RuntimeError("Tracker is not started")
        return self._estimator

    @property
    def state(self) -> TrackerState:
        """Get current state."""
        return self._state

    @property
    def is_tracking(self) -> bool:
        return self._state == TrackerState.TRACKING

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
