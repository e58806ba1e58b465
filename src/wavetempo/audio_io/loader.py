"""
Audio file loader for WAV, FLAC, OGG, MP3 and other common formats.
Uses soundfile as the primary backend and librosa as a fallback.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import numpy as np

import soundfile as sf
import librosa

logger = logging.getLogger(__name__)


@dataclass
class AudioData:
    """Container for decoded audio."""
    samples: np.ndarray  # (n_frames,) for mono, (n_frames, n_channels) otherwise
    sample_rate: int
    channels: int
    path: Path

    # File metadata
    format: str = "unknown"
    subtype: Optional[str] = None
    bit_depth: Optional[int] = None

    @property
    def frames(self) -> int:
        return len(self.samples)

    @property
    def duration(self) -> float:
        """Duration in seconds."""
        return self.frames / self.sample_rate

    def interleaved(self) -> np.ndarray:
        """Samples as a flat frame-major array (L R L R ...)."""
        return np.ascontiguousarray(self.samples, dtype=np.float32).reshape(-1)


class AudioLoader:
    """
    Load audio files from disk.

    Supports WAV, FLAC, OGG, AIFF through soundfile and MP3/M4A through
    librosa when soundfile cannot decode them.
    """

    SUPPORTED_EXTENSIONS = {".wav", ".mp3", ".flac", ".ogg", ".aiff", ".aif", ".m4a"}

    def __init__(self, target_sr: Optional[int] = None):
        """
        Initialize the loader.

        Args:
            target_sr: Resample to this rate. None keeps the file's rate.
        """
        self.target_sr = target_sr

    def load(self, path: str | Path) -> AudioData:
        """
        Load an audio file, keeping its channel layout.

        Args:
            path: Path to the audio file

        Returns:
            AudioData with frame-major samples and metadata

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the file format is not supported or cannot be decoded
        """
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Audio file not found: {path}")

        ext = path.suffix.lower()
        if ext not in self.SUPPORTED_EXTENSIONS:
            raise ValueError(
                f"Unsupported audio format: {ext}. "
                f"Supported: {', '.join(sorted(self.SUPPORTED_EXTENSIONS))}"
            )

        # soundfile first (faster, exact for WAV/FLAC)
        try:
            return self._load_soundfile(path)
        except RuntimeError as exc:
            logger.info("soundfile could not decode %s (%s), trying librosa", path.name, exc)
            try:
                return self._load_librosa(path)
            except Exception as fallback_exc:
                # audioread raises its own Exception subclasses
                raise ValueError(f"Cannot decode {path.name}: {fallback_exc}") from fallback_exc

    def _load_soundfile(self, path: Path) -> AudioData:
        """Load using soundfile."""
        info = sf.info(path)

        samples, sr = sf.read(path, dtype="float32", always_2d=False)

        if self.target_sr and sr != self.target_sr:
            # librosa resamples along the last axis
            samples = librosa.resample(
                samples.T,
                orig_sr=sr,
                target_sr=self.target_sr,
                res_type="soxr_hq"
            ).T
            sr = self.target_sr

        channels = 1 if samples.ndim == 1 else samples.shape[1]

        bit_depth = None
        if info.subtype:
            if "16" in info.subtype:
                bit_depth = 16
            elif "24" in info.subtype:
                bit_depth = 24
            elif "32" in info.subtype or "FLOAT" in info.subtype:
                bit_depth = 32

        return AudioData(
            samples=samples,
            sample_rate=int(sr),
            channels=channels,
            path=path,
            format=info.format,
            subtype=info.subtype,
            bit_depth=bit_depth,
        )

    def _load_librosa(self, path: Path) -> AudioData:
        """Load using librosa (fallback)."""
        samples, sr = librosa.load(path, sr=self.target_sr, mono=False)

        # librosa returns (n_channels, n_frames) for multi-channel audio
        if samples.ndim == 2:
            samples = samples.T
        channels = 1 if samples.ndim == 1 else samples.shape[1]

        return AudioData(
            samples=samples,
            sample_rate=int(sr),
            channels=channels,
            path=path,
            format=path.suffix.lstrip(".").upper(),
        )

    @classmethod
    def is_supported(cls, path: str | Path) -> bool:
        """Check whether the file extension is supported."""
        return Path(path).suffix.lower() in cls.SUPPORTED_EXTENSIONS
