"""Core amplitude engine: amplitudes, superpositions and correlations."""

from openquantum.core.accumulate import accumulate, validate_outcome
from openquantum.core.amplitude import Amplitude
from openquantum.core.correlation import Correlation
from openquantum.core.superposition import (
    NORMALIZATION_EPSILON,
    NORMALIZATION_TOLERANCE,
    PRUNE_EPSILON,
    CoherenceMetrics,
    CollapseRecord,
    RandomSource,
    Superposition,
)

__all__ = [
    "Amplitude",
    "Superposition",
    "Correlation",
    "CollapseRecord",
    "CoherenceMetrics",
    "RandomSource",
    "accumulate",
    "validate_outcome",
    "PRUNE_EPSILON",
    "NORMALIZATION_EPSILON",
    "NORMALIZATION_TOLERANCE",
]
