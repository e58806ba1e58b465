"""
Pydantic models for tempo detection results.
"""

from typing import Optional
from pydantic import BaseModel, Field


class WindowEstimate(BaseModel):
    """Tempo estimate for a single analysis window."""
    index: int = Field(..., ge=0, description="Window number since the last reset")
    bpm: float = Field(..., gt=0, description="Tempo in BPM")
    lag: int = Field(..., ge=1, description="Autocorrelation lag in envelope samples")
    peak: float = Field(..., description="Autocorrelation value at the chosen lag")
    start_time: Optional[float] = Field(
        default=None,
        description="Window start in seconds from the beginning of tracking"
    )


class TempoResult(BaseModel):
    """Stable tempo for a track, aggregated over all windows."""
    global_bpm: float = Field(..., gt=0, description="Median of the window estimates")
    window_bpms: list[float] = Field(
        default_factory=list,
        description="Per-window estimates in arrival order"
    )
    windows: int = Field(..., ge=1, description="Number of windows processed")
    sample_rate: float = Field(..., gt=0)
    explanation: str = Field(default="", description="How the tempo was derived")
