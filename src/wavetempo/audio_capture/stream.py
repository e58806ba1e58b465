"""
Sample source lifecycle.

Every source moves through the same states:

    CLOSED -> OPENED -> CONFIGURED -> PREPARED -> STREAMING -> CLOSED

Each transition either succeeds or raises a SourceError subclass; a failed
transition leaves the state unchanged so the caller can retry, fall back
to another device, or give up.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

import numpy as np

from ..errors import StreamStateError

logger = logging.getLogger(__name__)


class StreamState(Enum):
    """Lifecycle state of a sample source."""
    CLOSED = "closed"
    OPENED = "opened"
    CONFIGURED = "configured"
    PREPARED = "prepared"
    STREAMING = "streaming"


@dataclass(frozen=True)
class StreamFormat:
    """Stream parameters actually granted by a source."""
    bits: int
    channels: int
    sample_rate: float
    frames_per_period: int

    def __str__(self):
        return (
            f"{self.bits}-bit, {self.channels} ch, {self.sample_rate:g} Hz, "
            f"{self.frames_per_period} frames/period"
        )


class SampleSource:
    """
    Base class for sources of interleaved audio samples.

    Subclasses implement the ``_open``, ``_negotiate``, ``_prepare``,
    ``_read`` and ``_close`` hooks; this class enforces their order.
    """

    def __init__(self):
        self._state = StreamState.CLOSED
        self._format: Optional[StreamFormat] = None
        self._device: Any = None

    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def format(self) -> Optional[StreamFormat]:
        """Negotiated format, None before ``negotiate``."""
        return self._format

    @property
    def device(self) -> Any:
        return self._device

    def _require(self, operation: str, *states: StreamState):
        if self._state not in states:
            raise StreamStateError(operation, self._state)

    def open(self, device) -> "SampleSource":
        """
        Open a device for capture.

        Raises:
            OpenError: If the device cannot be opened
        """
        self._require("open", StreamState.CLOSED)
        self._open(device)
        self._device = device
        self._state = StreamState.OPENED
        logger.info("Opened %s", device)
        return self

    def negotiate(
        self,
        bits: int = 16,
        channels: int = 2,
        rate_hint: float = 44100,
        frames_per_period: int = 256,
    ) -> StreamFormat:
        """
        Request stream parameters; the source grants the nearest it supports.

        Raises:
            NegotiationError: If no usable format exists
        """
        self._require("negotiate", StreamState.OPENED, StreamState.CONFIGURED)
        granted = self._negotiate(bits, channels, rate_hint, frames_per_period)
        self._format = granted
        self._state = StreamState.CONFIGURED
        logger.info("Negotiated %s", granted)
        return granted

    def prepare(self):
        """
        Make the configured stream ready for reading.

        Raises:
            PrepareError: If the stream cannot be created
        """
        self._require("prepare", StreamState.CONFIGURED)
        self._prepare()
        self._state = StreamState.PREPARED

    def read_window(self, frame_count: int) -> np.ndarray:
        """
        Read ``frame_count`` frames, blocking until they are available.

        Returns:
            Interleaved float samples scaled to [-1, 1],
            ``frame_count * channels`` long

        Raises:
            ReadError: If the frames cannot be delivered
        """
        self._require("read", StreamState.PREPARED, StreamState.STREAMING)
        if frame_count <= 0:
            raise ValueError(f"frame_count must be positive, got {frame_count}")
        samples = self._read(frame_count)
        self._state = StreamState.STREAMING
        return samples

    def close(self):
        """Release the device. Safe to call in any state."""
        if self._state == StreamState.CLOSED:
            return
        try:
            self._close()
        finally:
            self._state = StreamState.CLOSED
            self._format = None
            logger.info("Closed %s", self._device)

    def _open(self, device):
        raise NotImplementedError

    def _negotiate(self, bits, channels, rate_hint, frames_per_period) -> StreamFormat:
        raise NotImplementedError

    def _prepare(self):
        raise NotImplementedError

    def _read(self, frame_count: int) -> np.ndarray:
        raise NotImplementedError

    def _close(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
