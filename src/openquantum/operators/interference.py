"""Interference: combining superpositions by amplitude.

Interference sums weighted *amplitudes* per outcome before probabilities are
taken, so contributions can reinforce or cancel::

    A(v) = sum_k  w_k * a_k(v)          with  sum_k w_k^2 = 1

Two states that agree on an outcome in phase (``phi_i - phi_j ~ 0``)
interfere constructively; opposite phases (``phi_i - phi_j ~ pi``) cancel.
This is not voting -- the result can put *less* weight on an outcome than
any input did.

Example::

    from openquantum.operators.interference import analyze_interference, interfere

    a = Superposition([("X", Amplitude(1)), ("Y", Amplitude(1))])
    b = Superposition([("X", Amplitude(-1)), ("Y", Amplitude(1))])
    interfere([a, b]).get_probabilities()    # {"Y": 1.0}
    analyze_interference([a, b]).destructive # [InterferencePoint(outcome="X", ...)]
"""

from __future__ import annotations

import logging
import math
import sys
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from openquantum.config.settings import get_settings
from openquantum.core.accumulate import accumulate, prune, weighted
from openquantum.core.amplitude import Amplitude
from openquantum.core.superposition import PRUNE_EPSILON, Superposition
from openquantum.exceptions import (
    DegenerateStateError,
    EmptyInputError,
    InvalidArgumentError,
    LengthMismatchError,
    OutOfRangeError,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data containers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class InterferencePoint:
    """How one outcome fared when several states were interfered.

    Attributes:
        outcome: The outcome key.
        ratio: ``combined_probability / average_probability``; ``inf`` when
            the outcome was (numerically) absent from every input.
        combined_probability: Probability in the interfered state.
        average_probability: Mean probability across the inputs.
    """

    outcome: Any
    ratio: float
    combined_probability: float
    average_probability: float


@dataclass
class InterferenceAnalysis:
    """Outcomes grouped by interference type."""

    constructive: list[InterferencePoint] = field(default_factory=list)
    destructive: list[InterferencePoint] = field(default_factory=list)
    neutral: list[InterferencePoint] = field(default_factory=list)

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        def rows(points: list[InterferencePoint]) -> list[dict[str, Any]]:
            return [
                {
                    "outcome": p.outcome,
                    "ratio": p.ratio,
                    "combined_probability": p.combined_probability,
                    "average_probability": p.average_probability,
                }
                for p in points
            ]

        return {
            "constructive": rows(self.constructive),
            "destructive": rows(self.destructive),
            "neutral": rows(self.neutral),
        }


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


def interfere(
    states: Sequence[Superposition],
    weights: Sequence[float] | None = None,
) -> Superposition:
    """Interfere several superpositions into one.

    Args:
        states: Non-empty sequence of superpositions.
        weights: Optional real weight per state.  Renormalized so that the
            squared weights sum to 1.  Defaults to ``1/sqrt(n)`` each.

    Returns:
        A new normalized superposition over the surviving outcomes.

    Raises:
        EmptyInputError: If ``states`` is empty.
        InvalidArgumentError: If an element is not a Superposition.
        LengthMismatchError: If ``weights`` and ``states`` differ in length.
        OutOfRangeError: If a weight is non-finite or all weights are ~0.
        DegenerateStateError: If every outcome cancels.
    """
    states = _check_states(states, "interfere")
    resolved = _resolve_weights(len(states), weights)

    combined: dict[Any, Amplitude] = {}
    for state, weight in zip(states, resolved):
        accumulate(weighted(Amplitude(weight, 0.0), state.items()), into=combined)

    surviving = prune(combined, PRUNE_EPSILON)
    if not surviving:
        raise DegenerateStateError(
            "Interference cancelled every outcome",
            details={"outcomes": list(combined)},
        )

    logger.debug(
        "interfere: %d states, %d outcomes, %d survived",
        len(states),
        len(combined),
        len(surviving),
    )
    return Superposition(surviving)


def analyze_interference(
    states: Sequence[Superposition],
    *,
    constructive_threshold: float | None = None,
    destructive_threshold: float | None = None,
) -> InterferenceAnalysis:
    """Classify each outcome as constructive, destructive or neutral.

    The states are interfered with uniform weights and every outcome's
    combined probability is compared with its average probability across
    the inputs.  ``ratio > constructive_threshold`` is constructive,
    ``ratio < destructive_threshold`` destructive, anything else neutral.

    Args:
        states: Non-empty sequence of superpositions.
        constructive_threshold: Defaults to the configured value (1.2).
        destructive_threshold: Defaults to the configured value (0.8).

    Raises:
        OutOfRangeError: If a threshold is non-finite or
            ``destructive_threshold >= constructive_threshold``.
    """
    states = _check_states(states, "analyze_interference")
    thresholds = get_settings().thresholds
    constructive = thresholds.constructive if constructive_threshold is None else constructive_threshold
    destructive = thresholds.destructive if destructive_threshold is None else destructive_threshold

    for name, value in (("constructive_threshold", constructive), ("destructive_threshold", destructive)):
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise OutOfRangeError(f"{name} must be a finite number, got {value!r}", value=value)
    if destructive >= constructive:
        raise OutOfRangeError(
            "destructive_threshold must be less than constructive_threshold",
            value=(destructive, constructive),
        )

    combined = interfere(states)
    outcomes: dict[Any, None] = {}
    for state in states:
        outcomes.update(dict.fromkeys(state.outcomes))

    analysis = InterferenceAnalysis()
    for outcome in outcomes:
        combined_probability = combined.get_probability(outcome)
        average = math.fsum(state.get_probability(outcome) for state in states) / len(states)
        ratio = math.inf if average <= sys.float_info.epsilon else combined_probability / average
        point = InterferencePoint(
            outcome=outcome,
            ratio=ratio,
            combined_probability=combined_probability,
            average_probability=average,
        )
        if ratio > constructive:
            analysis.constructive.append(point)
        elif ratio < destructive:
            analysis.destructive.append(point)
        else:
            analysis.neutral.append(point)

    return analysis


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _check_states(states: Sequence[Superposition], operation: str) -> list[Superposition]:
    if isinstance(states, Superposition) or not isinstance(states, Sequence):
        raise InvalidArgumentError(
            f"{operation} expects a sequence of Superposition instances",
            argument="states",
        )
    if len(states) == 0:
        raise EmptyInputError(f"{operation} requires at least one superposition")
    for index, state in enumerate(states):
        if not isinstance(state, Superposition):
            raise InvalidArgumentError(
                f"{operation} expects Superposition instances; element {index} is "
                f"{type(state).__name__}",
                argument="states",
            )
    return list(states)


def _resolve_weights(size: int, weights: Sequence[float] | None) -> list[float]:
    if weights is None:
        return [1.0 / math.sqrt(size)] * size

    weights = list(weights)
    if len(weights) != size:
        raise LengthMismatchError(
            f"weights must have length {size}, got {len(weights)}",
            expected=size,
            received=len(weights),
        )
    for weight in weights:
        if isinstance(weight, bool) or not isinstance(weight, (int, float)) or not math.isfinite(weight):
            raise OutOfRangeError(f"weights must be finite numbers, got {weight!r}", value=weight)

    sum_squares = math.fsum(w * w for w in weights)
    if sum_squares <= sys.float_info.epsilon:
        raise OutOfRangeError("weights must not all be zero", value=weights)

    norm = math.sqrt(sum_squares)
    return [w / norm for w in weights]
