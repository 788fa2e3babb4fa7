"""Single-superposition gates.

Every gate is pure: it reads its input and returns a new
:class:`~openquantum.core.superposition.Superposition`, leaving the input
(and its correlations) untouched.

- ``hadamard``: ``H = (1/sqrt(2)) [[1, 1], [1, -1]]`` on a two-outcome state.
- ``phase``: ``alpha_t -> alpha_t * exp(i*theta)`` for one target outcome.
- ``rotate``: global phase, ``alpha -> alpha * exp(i*theta)`` for all.
- ``amplify``: scale selected amplitudes by a factor, then renormalize.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from typing import Any

from openquantum.config.settings import get_settings
from openquantum.core.accumulate import validate_outcome
from openquantum.core.amplitude import Amplitude
from openquantum.core.superposition import Superposition
from openquantum.exceptions import (
    EmptyInputError,
    InvalidArgumentError,
    NotAMemberError,
    OutOfRangeError,
)

_INV_SQRT2 = 1.0 / math.sqrt(2.0)


def hadamard(state: Superposition) -> Superposition:
    """Hadamard mix of a two-outcome superposition.

    Outcomes keep their basis order: the first becomes ``(a0 + a1)/sqrt(2)``,
    the second ``(a0 - a1)/sqrt(2)``.

    Raises:
        OutOfRangeError: If the state does not have exactly two outcomes.
    """
    _check_state(state, "hadamard")
    if len(state) != 2:
        raise OutOfRangeError(
            f"hadamard requires exactly 2 outcomes, got {len(state)}",
            value=len(state),
        )

    (v0, a0), (v1, a1) = state.items()
    return Superposition(
        [
            (v0, a0.add(a1).scale(_INV_SQRT2)),
            (v1, a0.subtract(a1).scale(_INV_SQRT2)),
        ],
        rng=state.rng,
    )


def phase(state: Superposition, target: Any, theta: float) -> Superposition:
    """Shift the phase of one outcome by ``theta`` radians.

    Probabilities are unchanged; only relative phase (and therefore future
    interference) is affected.

    Raises:
        OutOfRangeError: If ``theta`` is not finite.
        NotAMemberError: If ``target`` is not in the basis.
    """
    _check_state(state, "phase")
    _check_angle(theta, "theta")
    validate_outcome(target, "phase target")
    if target not in state:
        raise NotAMemberError(f"phase target {target!r} is not in the basis", outcome=target)

    rotor = Amplitude.from_polar(1.0, theta)
    return Superposition(
        [
            (outcome, amplitude.multiply(rotor) if outcome == target else amplitude)
            for outcome, amplitude in state.items()
        ],
        rng=state.rng,
    )


def rotate(state: Superposition, theta: float) -> Superposition:
    """Apply a global phase of ``theta`` radians to every amplitude."""
    _check_state(state, "rotate")
    _check_angle(theta, "theta")

    rotor = Amplitude.from_polar(1.0, theta)
    return Superposition(
        [(outcome, amplitude.multiply(rotor)) for outcome, amplitude in state.items()],
        rng=state.rng,
    )


def amplify(
    state: Superposition,
    targets: Iterable[Any],
    factor: float | None = None,
) -> Superposition:
    """Scale the amplitudes of ``targets`` by ``factor`` and renormalize.

    With ``factor > 1`` the targets gain probability and the remaining
    outcomes lose it; ``0 < factor < 1`` does the opposite.

    Args:
        state: Input superposition.
        targets: Outcomes to amplify (list, tuple, set or frozenset).
        factor: Positive finite scale; defaults to the configured value (1.5).

    Raises:
        InvalidArgumentError: If ``targets`` is not a collection.
        EmptyInputError: If ``targets`` is empty.
        OutOfRangeError: If ``factor`` is not a finite number > 0.
        NotAMemberError: If none of the targets is in the basis.
    """
    _check_state(state, "amplify")
    if factor is None:
        factor = get_settings().thresholds.amplify_factor
    if (
        isinstance(factor, bool)
        or not isinstance(factor, (int, float))
        or not math.isfinite(factor)
        or factor <= 0
    ):
        raise OutOfRangeError(f"amplify factor must be a finite number > 0, got {factor!r}", value=factor)

    if not isinstance(targets, (list, tuple, set, frozenset)):
        raise InvalidArgumentError(
            "amplify targets must be a list, tuple, set or frozenset",
            argument="targets",
        )
    wanted = {validate_outcome(target, "amplify target") for target in targets}
    if not wanted:
        raise EmptyInputError("amplify requires at least one target outcome")
    if not any(outcome in wanted for outcome in state):
        raise NotAMemberError(
            "None of the amplify targets are in the basis",
            outcome=tuple(wanted),
        )

    return Superposition(
        [
            (outcome, amplitude.scale(factor) if outcome in wanted else amplitude)
            for outcome, amplitude in state.items()
        ],
        rng=state.rng,
    )


def _check_state(state: Any, operation: str) -> None:
    if not isinstance(state, Superposition):
        raise InvalidArgumentError(
            f"{operation} requires a Superposition, got {type(state).__name__}",
            argument="state",
        )


def _check_angle(angle: Any, name: str) -> None:
    if isinstance(angle, bool) or not isinstance(angle, (int, float)):
        raise InvalidArgumentError(f"{name} must be a real number", argument=name)
    if not math.isfinite(angle):
        raise OutOfRangeError(f"{name} must be finite, got {angle!r}", value=angle)
