"""
Tests for SoundDeviceSource against a fake sounddevice module.
"""

import logging

import numpy as np
import pytest

from wavetempo.audio_capture import sources
from wavetempo.audio_capture.sources import SoundDeviceSource, list_input_devices
from wavetempo.audio_capture.stream import StreamState
from wavetempo.errors import NegotiationError, OpenError, PrepareError, ReadError


class FakePortAudioError(Exception):
    pass


class FakeInputStream:
    """Records its settings and returns a ramp of int16 samples."""

    instances = []

    def __init__(self, device, samplerate, channels, dtype, blocksize):
        self.device = device
        self.samplerate = samplerate
        self.channels = channels
        self.dtype = dtype
        self.blocksize = blocksize
        self.active = False
        self.closed = False
        self.overflow = False
        self.fail_read = False
        FakeInputStream.instances.append(self)

    def start(self):
        self.active = True

    def stop(self):
        self.active = False

    def close(self):
        self.closed = True

    def read(self, frames):
        if self.fail_read:
            raise FakePortAudioError("device vanished")
        data = np.full((frames, self.channels), 16384, dtype=np.int16)
        return data, self.overflow


class FakeSoundDevice:
    """Minimal stand-in for the parts of sounddevice the source uses."""

    PortAudioError = FakePortAudioError

    def __init__(self):
        self.devices = [
            {"name": "Speakers", "index": 0, "hostapi": 0,
             "max_input_channels": 0, "default_samplerate": 48000.0},
            {"name": "USB Mic", "index": 1, "hostapi": 0,
             "max_input_channels": 1, "default_samplerate": 48000.0},
        ]
        self.supported_rates = {48000.0}
        self.default = type("Default", (), {"device": [1, 0]})()
        self.InputStream = FakeInputStream

    def query_devices(self, device=None, kind=None):
        if device is None and kind is None:
            return self.devices
        if device is None:
            device = self.default.device[0]
        for dev in self.devices:
            if device in (dev["index"], dev["name"]):
                if kind == "input" and dev["max_input_channels"] < 1:
                    raise ValueError(f"No input device matching {device!r}")
                return dict(dev)
        raise ValueError(f"No input device matching {device!r}")

    def query_hostapis(self):
        return [{"name": "ALSA"}]

    def check_input_settings(self, device, channels, dtype, samplerate):
        if samplerate not in self.supported_rates:
            raise FakePortAudioError("Invalid sample rate")


@pytest.fixture
def fake_sd(monkeypatch):
    fake = FakeSoundDevice()
    FakeInputStream.instances = []
    monkeypatch.setattr(sources, "sd", fake)
    monkeypatch.setattr(sources, "SOUNDDEVICE_AVAILABLE", True)
    return fake


class TestSoundDeviceSource:
    """Test cases for SoundDeviceSource."""

    def test_open_default_device(self, fake_sd):
        source = SoundDeviceSource()
        source.open(None)
        assert source.state == StreamState.OPENED

    def test_open_unknown_device(self, fake_sd):
        source = SoundDeviceSource()
        with pytest.raises(OpenError):
            source.open("hw:CARD=missing")
        assert source.state == StreamState.CLOSED

    def test_open_output_only_device(self, fake_sd):
        with pytest.raises(OpenError):
            SoundDeviceSource().open("Speakers")

    def test_open_without_portaudio(self, monkeypatch):
        monkeypatch.setattr(sources, "SOUNDDEVICE_AVAILABLE", False)
        with pytest.raises(OpenError):
            SoundDeviceSource().open(None)

    def test_negotiate_nearest_format(self, fake_sd):
        """Test channel clamping, rate fallback and 24 -> 32 bit rounding."""
        source = SoundDeviceSource()
        source.open("USB Mic")

        granted = source.negotiate(bits=24, channels=2, rate_hint=44100, frames_per_period=256)

        assert granted.bits == 32
        assert granted.channels == 1
        assert granted.sample_rate == 48000.0
        assert granted.frames_per_period == 256

    def test_negotiate_no_usable_rate(self, fake_sd):
        fake_sd.supported_rates = set()
        source = SoundDeviceSource()
        source.open(1)
        with pytest.raises(NegotiationError):
            source.negotiate()
        assert source.state == StreamState.OPENED

    def test_prepare_failure(self, fake_sd, monkeypatch):
        def broken_stream(**kwargs):
            raise FakePortAudioError("busy")

        monkeypatch.setattr(fake_sd, "InputStream", broken_stream)
        source = SoundDeviceSource()
        source.open(1)
        source.negotiate()
        with pytest.raises(PrepareError):
            source.prepare()
        assert source.state == StreamState.CONFIGURED

    def test_read_scales_and_starts_stream(self, fake_sd):
        source = SoundDeviceSource()
        source.open(1)
        source.negotiate(bits=16, channels=1, rate_hint=48000, frames_per_period=128)
        source.prepare()

        samples = source.read_window(4)

        stream = FakeInputStream.instances[-1]
        assert stream.active
        assert stream.blocksize == 128
        assert stream.dtype == "int16"
        np.testing.assert_allclose(samples, [0.5] * 4)
        assert source.state == StreamState.STREAMING

    def test_overflow_is_logged(self, fake_sd, caplog):
        source = SoundDeviceSource()
        source.open(1)
        source.negotiate(bits=16)
        source.prepare()
        FakeInputStream.instances[-1].overflow = True

        with caplog.at_level(logging.WARNING, logger="wavetempo"):
            source.read_window(4)

        assert "overflow" in caplog.text

    def test_read_failure(self, fake_sd):
        source = SoundDeviceSource()
        source.open(1)
        source.negotiate(bits=16)
        source.prepare()
        FakeInputStream.instances[-1].fail_read = True

        with pytest.raises(ReadError):
            source.read_window(4)

    def test_close_stops_stream(self, fake_sd):
        source = SoundDeviceSource()
        source.open(1)
        source.negotiate(bits=16)
        source.prepare()
        source.read_window(4)

        source.close()

        stream = FakeInputStream.instances[-1]
        assert stream.closed
        assert not stream.active
        assert source.state == StreamState.CLOSED


class TestListInputDevices:
    """Test cases for list_input_devices()."""

    def test_lists_only_inputs(self, fake_sd):
        devices = list_input_devices()
        assert [d.name for d in devices] == ["USB Mic"]
        assert devices[0].is_default
        assert devices[0].host_api == "ALSA"

    def test_without_portaudio(self, monkeypatch):
        monkeypatch.setattr(sources, "SOUNDDEVICE_AVAILABLE", False)
        assert list_input_devices() == []
