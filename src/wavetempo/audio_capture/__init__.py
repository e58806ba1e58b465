"""
Sample acquisition for the tempo detector.

Supports:
- Live input devices through sounddevice
- Audio files through soundfile/librosa
- In-memory sample buffers
- A tracker that feeds fixed-length windows to the detector
"""

from .stream import SampleSource, StreamState, StreamFormat
from .sources import SoundDeviceSource, BufferSource, FileSource, AudioDevice, list_input_devices
from .tracker import TempoTracker, TrackerState

__all__ = [
    "SampleSource",
    "StreamState",
    "StreamFormat",
    "SoundDeviceSource",
    "BufferSource",
    "FileSource",
    "AudioDevice",
    "list_input_devices",
    "TempoTracker",
    "TrackerState",
]
