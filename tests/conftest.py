"""
Shared fixtures: synthetic click tracks with a known tempo.
"""

import numpy as np
import pytest


def click_track(bpm: float, sr: int, duration: float, seed: int = 0) -> np.ndarray:
    """
    Identical decaying noise bursts on every beat.

    The same burst is reused so the signal is exactly periodic.
    """
    rng = np.random.default_rng(seed)
    click_length = int(0.02 * sr)  # 20ms click
    burst = rng.standard_normal(click_length) * np.exp(-np.linspace(0, 5, click_length))

    y = np.zeros(int(sr * duration))
    beat_interval = 60.0 / bpm
    n_beats = int(duration / beat_interval)
    for i in range(n_beats):
        pos = int(round(i * beat_interval * sr))
        if pos + click_length <= len(y):
            y[pos:pos + click_length] = burst
    return y


@pytest.fixture
def make_click_track():
    return click_track


@pytest.fixture
def click_track_120bpm():
    """16 seconds at 120 BPM, 4 kHz: four 4-second windows."""
    sr = 4000
    return click_track(120, sr, 16.0), sr, 120
