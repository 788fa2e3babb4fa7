"""Reweighting a superposition by verifier scores before measuring.

A verifier scores each outcome in ``[0, 1]``.  Reweighting keeps each
amplitude's phase and multiplies its magnitude by the score::

    new_magnitude = old_magnitude * score

Outcomes whose new magnitude is at or below ``1e-12`` are dropped.  The
verifier may be a plain function, a coroutine function, or a mapping of
precomputed scores; scores outside ``[0, 1]`` are clamped and non-numeric
scores count as 0.

Example::

    async def check(candidate):
        return 1.0 if candidate.text == "4" else 0.0

    answer = await measure_with_verification(state, check)
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, Union

from openquantum.core.amplitude import Amplitude
from openquantum.core.superposition import PRUNE_EPSILON, RandomSource, Superposition
from openquantum.ensemble.candidates import clamp_unit
from openquantum.exceptions import DegenerateStateError, InvalidArgumentError

logger = logging.getLogger(__name__)

Scores = Union[Mapping[Any, float], Callable[[Any], float]]
Verifier = Union[Scores, Callable[[Any], Awaitable[float]]]


def reweight(state: Superposition, scores: Scores) -> Superposition:
    """Return a new superposition with magnitudes scaled by ``scores``.

    Args:
        state: Superposition to reweight (not mutated).
        scores: Mapping of outcome to score (missing outcomes score 0) or a
            synchronous callable ``outcome -> score``.

    Raises:
        InvalidArgumentError: If ``state`` is not a Superposition or
            ``scores`` is neither a mapping nor callable.
        DegenerateStateError: If every outcome is scored away.
    """
    _check_state(state)
    if isinstance(scores, Mapping):
        table = scores
        return _rebuild(state, {outcome: table.get(outcome, 0.0) for outcome in state})
    if not callable(scores):
        raise InvalidArgumentError("scores must be a mapping or a callable", argument="scores")
    if inspect.iscoroutinefunction(scores):
        raise InvalidArgumentError("reweight cannot await scores; use verify()", argument="scores")
    return _rebuild(state, {outcome: scores(outcome) for outcome in state})


async def verify(state: Superposition, verifier: Verifier) -> Superposition:
    """Like :func:`reweight`, but awaits verifiers that return awaitables."""
    _check_state(state)
    if isinstance(verifier, Mapping):
        return reweight(state, verifier)
    if not callable(verifier):
        raise InvalidArgumentError("verifier must be a mapping or a callable", argument="verifier")

    raw: dict[Any, Any] = {}
    for outcome in state:
        score = verifier(outcome)
        if inspect.isawaitable(score):
            score = await score
        raw[outcome] = score
    return _rebuild(state, raw)


async def measure_with_verification(
    state: Superposition,
    verifier: Verifier,
    rng: RandomSource | None = None,
) -> Any:
    """Reweight ``state`` by ``verifier`` and measure the result.

    The input state is left in superposition; only the reweighted copy is
    measured.

    Returns:
        The measured outcome.
    """
    verified = await verify(state, verifier)
    outcome = verified.measure(rng if rng is not None else state.rng)
    logger.debug("measure_with_verification: %d -> %d outcomes, measured %r", len(state), len(verified), outcome)
    return outcome


def _rebuild(state: Superposition, raw_scores: Mapping[Any, Any]) -> Superposition:
    basis: list[tuple[Any, Amplitude]] = []
    for outcome, amplitude in state.items():
        magnitude = amplitude.magnitude * clamp_unit(raw_scores[outcome])
        if magnitude <= PRUNE_EPSILON:
            continue
        basis.append((outcome, Amplitude.from_polar(magnitude, amplitude.phase)))

    if not basis:
        raise DegenerateStateError(
            "Verification removed every outcome; nothing left to measure",
            details={"scores": dict(raw_scores)},
        )
    return Superposition(basis, rng=state.rng)


def _check_state(state: Any) -> None:
    if not isinstance(state, Superposition):
        raise InvalidArgumentError(
            f"Expected a Superposition, got {type(state).__name__}",
            argument="state",
        )
