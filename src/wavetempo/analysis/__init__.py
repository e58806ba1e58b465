"""
Tempo analysis modules.

The pipeline is split into stateless stages:
- wavelet: multi-level DWT
- envelope: sub-band envelopes and their sum
- correlation: autocorrelation, lag range and peak picking
- bpm: BpmEstimator tying the stages together per window
"""

from .bpm import BpmEstimator
from .wavelet import decompose, DecompositionLevel
from .envelope import downsample, rectify, normalize, extract_envelopes, aggregate
from .correlation import autocorrelate, detect_peak, lag_bounds, lag_to_bpm

__all__ = [
    "BpmEstimator",
    "decompose",
    "DecompositionLevel",
    "downsample",
    "rectify",
    "normalize",
    "extract_envelopes",
    "aggregate",
    "autocorrelate",
    "detect_peak",
    "lag_bounds",
    "lag_to_bpm",
]
