"""Operators that transform or combine superpositions."""

from openquantum.operators.gates import amplify, hadamard, phase, rotate
from openquantum.operators.interference import (
    InterferenceAnalysis,
    InterferencePoint,
    analyze_interference,
    interfere,
)

__all__ = [
    # Gates
    "hadamard",
    "phase",
    "rotate",
    "amplify",
    # Interference
    "interfere",
    "analyze_interference",
    "InterferenceAnalysis",
    "InterferencePoint",
]
