"""
Open Quantum - superposition-based values and control flow.

Model a value as a weighted superposition of mutually exclusive outcomes,
transform and combine it with gates, interference and branching/looping
combinators, and collapse it with a single Born-rule measurement that
propagates through correlated superpositions.

Quick Start:
    import math
    import random

    import openquantum
    from openquantum import Amplitude, Correlation, Superposition, quantum_if

    weather = Superposition(
        [("sunny", Amplitude(0.8)), ("rainy", Amplitude(0.6))],
        rng=random.Random(42),
    )
    plan = Superposition.certain("undecided")
    Correlation(weather, plan, lambda w: "beach" if w == "sunny" else "movie")

    print(plan.get_probabilities())   # {'beach': 0.64, 'movie': 0.36}
    print(weather.measure())          # plan collapses along with it
    print(plan.collapsed_value)

    mood = quantum_if(weather, lambda w: "happy", lambda w: "cosy")

Configuration:
    openquantum.configure(max_while_iterations=500)
    openquantum.setup_logging()
"""

from openquantum.config.settings import (
    configure,
    get_settings,
    reset_settings,
    setup_logging,
)
from openquantum.control import (
    LoopResult,
    merge_branches,
    quantum_for,
    quantum_if,
    quantum_switch,
    quantum_while,
)
from openquantum.core import (
    Amplitude,
    CoherenceMetrics,
    CollapseRecord,
    Correlation,
    Superposition,
)
from openquantum.ensemble import (
    Candidate,
    ModelResponse,
    ensemble,
    measure_with_verification,
    reweight,
    superpose_responses,
    verify,
)
from openquantum.exceptions import (
    ConfigurationError,
    DegenerateStateError,
    EmptyInputError,
    EmptyResultError,
    InvalidArgumentError,
    LengthMismatchError,
    NotAMemberError,
    OpenQuantumError,
    OutOfRangeError,
)
from openquantum.operators import (
    InterferenceAnalysis,
    InterferencePoint,
    amplify,
    analyze_interference,
    hadamard,
    interfere,
    phase,
    rotate,
)

__version__ = "0.1.0"
__all__ = [
    # Configuration
    "configure",
    "get_settings",
    "reset_settings",
    "setup_logging",
    # Core
    "Amplitude",
    "Superposition",
    "Correlation",
    "CollapseRecord",
    "CoherenceMetrics",
    # Operators
    "interfere",
    "analyze_interference",
    "InterferenceAnalysis",
    "InterferencePoint",
    "hadamard",
    "phase",
    "rotate",
    "amplify",
    # Control flow
    "quantum_if",
    "quantum_switch",
    "quantum_for",
    "quantum_while",
    "LoopResult",
    "merge_branches",
    # Ensembles
    "Candidate",
    "ModelResponse",
    "superpose_responses",
    "ensemble",
    "reweight",
    "verify",
    "measure_with_verification",
    # Errors
    "OpenQuantumError",
    "ConfigurationError",
    "InvalidArgumentError",
    "OutOfRangeError",
    "EmptyInputError",
    "LengthMismatchError",
    "DegenerateStateError",
    "EmptyResultError",
    "NotAMemberError",
]
