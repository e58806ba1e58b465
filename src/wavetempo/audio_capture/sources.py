"""
Concrete sample sources.

- SoundDeviceSource: live capture through PortAudio via sounddevice
- BufferSource: interleaved samples already in memory
- FileSource: a BufferSource filled from an audio file
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import numpy as np

from ..audio_io.loader import AudioLoader
from ..errors import (
    EndOfStreamError,
    NegotiationError,
    OpenError,
    PrepareError,
    ReadError,
)
from .stream import SampleSource, StreamFormat

# sounddevice needs the PortAudio shared library at import time
SOUNDDEVICE_AVAILABLE = False
try:
    import sounddevice as sd
    SOUNDDEVICE_AVAILABLE = True
except (ImportError, OSError):
    sd = None

logger = logging.getLogger(__name__)


@dataclass
class AudioDevice:
    """Input device information."""
    index: int
    name: str
    channels: int
    sample_rate: float
    is_default: bool = False
    host_api: str = ""

    def __str__(self):
        return f"{self.name} ({self.channels} ch, {self.sample_rate:g} Hz)"


def list_input_devices() -> List[AudioDevice]:
    """Get available capture devices."""
    devices = []

    if not SOUNDDEVICE_AVAILABLE:
        logger.warning("sounddevice is not available, no input devices listed")
        return devices

    all_devices = sd.query_devices()
    default_input = sd.default.device[0]
    host_apis = sd.query_hostapis()

    for i, dev in enumerate(all_devices):
        if dev['max_input_channels'] > 0:
            devices.append(AudioDevice(
                index=i,
                name=dev['name'],
                channels=dev['max_input_channels'],
                sample_rate=dev['default_samplerate'],
                is_default=(i == default_input),
                host_api=host_apis[dev['hostapi']]['name'],
            ))

    return devices


class SoundDeviceSource(SampleSource):
    """
    Capture from an input device through sounddevice.

    The device identifier is anything ``sounddevice.query_devices`` accepts:
    an index, a (partial) name, or None for the default input.
    """

    # Sample width -> sounddevice dtype; 24-bit capture is granted as 32-bit
    DTYPES = {8: "int8", 16: "int16", 32: "int32"}

    def __init__(self):
        super().__init__()
        self._info: Optional[dict] = None
        self._index = None
        self._dtype: Optional[str] = None
        self._stream = None

    def _open(self, device):
        if not SOUNDDEVICE_AVAILABLE:
            raise OpenError("sounddevice is not available (is PortAudio installed?)")

        try:
            info = sd.query_devices(device, "input")
        except (ValueError, sd.PortAudioError) as exc:
            raise OpenError(f"Cannot open input device {device!r}: {exc}") from exc

        self._info = info
        self._index = info.get("index", device)

    def _negotiate(self, bits, channels, rate_hint, frames_per_period) -> StreamFormat:
        granted_bits = next((b for b in sorted(self.DTYPES) if b >= bits), max(self.DTYPES))
        dtype = self.DTYPES[granted_bits]

        max_channels = int(self._info["max_input_channels"])
        if max_channels < 1:
            raise NegotiationError(f"{self._info['name']} has no input channels")
        granted_channels = max(1, min(channels, max_channels))

        # Requested rate first, then the device default
        candidates = [float(rate_hint), float(self._info["default_samplerate"])]
        for rate in candidates:
            try:
                sd.check_input_settings(
                    device=self._index,
                    channels=granted_channels,
                    dtype=dtype,
                    samplerate=rate,
                )
            except (ValueError, sd.PortAudioError) as exc:
                logger.info("Rate %g Hz rejected by %s: %s", rate, self._info["name"], exc)
                continue

            self._dtype = dtype
            return StreamFormat(
                bits=granted_bits,
                channels=granted_channels,
                sample_rate=rate,
                frames_per_period=frames_per_period,
            )

        raise NegotiationError(
            f"{self._info['name']} supports none of {candidates} Hz "
            f"with {granted_channels} ch {dtype}"
        )

    def _prepare(self):
        fmt = self.format
        try:
            self._stream = sd.InputStream(
                device=self._index,
                samplerate=fmt.sample_rate,
                channels=fmt.channels,
                dtype=self._dtype,
                blocksize=fmt.frames_per_period,
            )
        except (ValueError, sd.PortAudioError) as exc:
            raise PrepareError(f"Cannot prepare {self._info['name']}: {exc}") from exc

    def _read(self, frame_count: int) -> np.ndarray:
        try:
            if not self._stream.active:
                self._stream.start()
            data, overflowed = self._stream.read(frame_count)
        except sd.PortAudioError as exc:
            raise ReadError(f"Read of {frame_count} frames failed: {exc}") from exc

        if overflowed:
            logger.warning("Input overflow while reading %d frames", frame_count)

        scale = float(2 ** (self.format.bits - 1))
        return np.asarray(data, dtype=np.float64).reshape(-1) / scale

    def _close(self):
        if self._stream is None:
            return
        try:
            self._stream.stop()
            self._stream.close()
        except sd.PortAudioError as exc:
            logger.warning("Error closing %s: %s", self._info["name"], exc)
        finally:
            self._stream = None


class BufferSource(SampleSource):
    """Serve windows from samples already in memory."""

    def __init__(
        self,
        samples: Optional[np.ndarray] = None,
        sample_rate: float = 44100,
        channels: int = 1,
    ):
        """
        Args:
            samples: Interleaved 1-D samples or a (frames, channels) array
            sample_rate: Rate of the samples in Hz
            channels: Channel count of interleaved 1-D input
        """
        super().__init__()
        self._frames = np.zeros((0, 1), dtype=np.float64)
        self._sample_rate = float(sample_rate)
        self._position = 0
        if samples is not None:
            self._set_buffer(samples, sample_rate, channels)

    def _set_buffer(self, samples, sample_rate: float, channels: int = 1):
        samples = np.asarray(samples, dtype=np.float64)
        if samples.ndim == 1:
            if channels < 1 or len(samples) % channels:
                raise ValueError(
                    f"{len(samples)} interleaved samples do not split into {channels} channels"
                )
            samples = samples.reshape(-1, channels)
        elif samples.ndim != 2:
            raise ValueError(f"Expected 1-D or 2-D samples, got shape {samples.shape}")

        self._frames = samples
        self._sample_rate = float(sample_rate)
        self._position = 0

    @property
    def remaining_frames(self) -> int:
        return len(self._frames) - self._position

    def _open(self, device):
        pass

    def _negotiate(self, bits, channels, rate_hint, frames_per_period) -> StreamFormat:
        # The buffer is what it is: grant its native layout as float32
        if len(self._frames) == 0:
            raise NegotiationError("Buffer is empty")
        return StreamFormat(
            bits=32,
            channels=self._frames.shape[1],
            sample_rate=self._sample_rate,
            frames_per_period=frames_per_period,
        )

    def _prepare(self):
        self._position = 0

    def _read(self, frame_count: int) -> np.ndarray:
        if self.remaining_frames < frame_count:
            raise EndOfStreamError(
                f"Requested {frame_count} frames, {self.remaining_frames} left"
            )
        window = self._frames[self._position:self._position + frame_count]
        self._position += frame_count
        return window.reshape(-1).copy()


class FileSource(BufferSource):
    """Serve windows from an audio file; the device identifier is its path."""

    def __init__(self, target_sr: Optional[int] = None):
        """
        Args:
            target_sr: Resample the file to this rate. None keeps the file's rate.
        """
        super().__init__()
        self.loader = AudioLoader(target_sr=target_sr)

    def _open(self, device):
        path = Path(device)
        try:
            audio = self.loader.load(path)
        except (FileNotFoundError, ValueError, RuntimeError) as exc:
            raise OpenError(f"Cannot open {path}: {exc}") from exc

        self._set_buffer(audio.interleaved(), audio.sample_rate, audio.channels)
        logger.info("Loaded %s: %.1f s at %d Hz", path.name, audio.duration, audio.sample_rate)
