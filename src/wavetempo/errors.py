"""
Exception hierarchy.

Analysis errors come from the detector pipeline, source errors from the
sample acquisition layer. Nothing here is retried internally; callers decide.
"""


class WavetempoError(Exception):
    """Base class for all wavetempo errors."""


class AnalysisError(WavetempoError):
    """A window could not be turned into a tempo estimate."""


class InsufficientDataError(AnalysisError):
    """Window too short for the fixed decomposition depth or lag range."""


class MisalignedEnvelopeError(AnalysisError):
    """A sub-band envelope is shorter than the composite length."""


class DegenerateRangeError(AnalysisError):
    """The sample rate yields an unusable lag search window."""


class NoDataError(AnalysisError):
    """Median requested before any window was processed."""


class SourceError(WavetempoError):
    """Base class for sample source failures."""


class OpenError(SourceError):
    """Device or file could not be opened."""


class NegotiationError(SourceError):
    """Requested stream parameters could not be satisfied."""


class PrepareError(SourceError):
    """Stream could not be made ready for reading."""


class ReadError(SourceError):
    """A window could not be read from the stream."""


class StreamStateError(SourceError):
    """Lifecycle operation called in the wrong state."""

    def __init__(self, operation: str, state):
        super().__init__(f"Cannot {operation} while stream is {state.value}")
        self.operation = operation
        self.state = state


class EndOfStreamError(ReadError):
    """A finite source has fewer frames left than requested."""
