"""Iteration in superposition.

``quantum_for`` applies a body to every outcome for a fixed number of rounds;
``quantum_while`` keeps applying it to the outcomes that still satisfy a
condition while the others pass through unchanged.  Each round re-merges
outcomes that coincide, so paths that reach the same value interfere.

Both return a :class:`LoopResult` with the final state and a snapshot of the
state before the first round and after every round.

Example::

    start = Superposition([(0, Amplitude(1)), (10, Amplitude(1))])
    result = quantum_for(2, start, lambda value, i: value + 1)
    result.final_state.get_probabilities()   # {2: 0.5, 12: 0.5}
    len(result.history)                      # 3
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from openquantum.config.settings import get_settings
from openquantum.control.merge import merge_branches
from openquantum.core.superposition import Superposition
from openquantum.exceptions import InvalidArgumentError, OutOfRangeError

logger = logging.getLogger(__name__)

Body = Callable[[Any, int], Any]


@dataclass
class LoopResult:
    """Outcome of a superposed loop.

    Attributes:
        final_state: State after the last executed round.
        history: Snapshots: the initial state, then one per round.
        iterations: Number of rounds executed.
        terminated_by_max_iterations: ``True`` if ``quantum_while`` stopped
            on its iteration guard rather than its condition.
    """

    final_state: Superposition
    history: list[Superposition] = field(default_factory=list)
    iterations: int = 0
    terminated_by_max_iterations: bool = False


def quantum_for(iterations: int, initial_state: Superposition, body: Body) -> LoopResult:
    """Run ``body(value, i)`` over every outcome for ``iterations`` rounds.

    The input state is cloned and never mutated.

    Raises:
        OutOfRangeError: If ``iterations`` is not a non-negative int.
        InvalidArgumentError: If ``initial_state`` is not a Superposition or
            ``body`` is not callable.
    """
    _check_count(iterations, "quantum_for iterations")
    _check_state(initial_state, "quantum_for initial_state")
    _check_callable(body, "quantum_for body")

    current = initial_state.clone()
    history = [current.clone()]

    for index in range(iterations):
        current = merge_branches(
            [(amplitude, body(value, index)) for value, amplitude in current.items()],
            operation="quantum_for",
            rng=current.rng,
        )
        history.append(current.clone())
        logger.debug("quantum_for: round %d -> %d outcomes", index, len(current))

    return LoopResult(final_state=current, history=history, iterations=iterations)


def quantum_while(
    condition: Callable[[Any], Any],
    body: Body,
    initial_state: Superposition,
    max_iterations: int | None = None,
) -> LoopResult:
    """Apply ``body`` to outcomes satisfying ``condition`` until none do.

    Each round, outcomes failing ``condition`` carry over unchanged and the
    rest are replaced by ``body(value, i)``; both are merged into the next
    state.  The condition is checked before every round; once
    ``max_iterations`` rounds have run the loop stops and reports
    ``terminated_by_max_iterations=True`` without checking it again.

    Args:
        condition: Predicate on an outcome.
        body: ``(value, iteration) -> Superposition | value``.
        initial_state: Starting superposition (cloned, not mutated).
        max_iterations: Round limit; defaults to the configured value (100).

    Raises:
        OutOfRangeError: If ``max_iterations`` is not a non-negative int.
        InvalidArgumentError: On a non-callable condition/body or a
            non-Superposition initial state.
    """
    _check_callable(condition, "quantum_while condition")
    _check_callable(body, "quantum_while body")
    _check_state(initial_state, "quantum_while initial_state")
    if max_iterations is None:
        max_iterations = get_settings().loops.max_while_iterations
    _check_count(max_iterations, "quantum_while max_iterations")

    current = initial_state.clone()
    history = [current.clone()]
    iteration = 0

    while iteration < max_iterations:
        if not any(condition(value) for value in current):
            return LoopResult(
                final_state=current,
                history=history,
                iterations=iteration,
                terminated_by_max_iterations=False,
            )

        branches = []
        for value, amplitude in current.items():
            if condition(value):
                branches.append((amplitude, body(value, iteration)))
            else:
                branches.append((amplitude, value))

        current = merge_branches(branches, operation="quantum_while", rng=current.rng)
        history.append(current.clone())
        iteration += 1
        logger.debug("quantum_while: round %d -> %d outcomes", iteration, len(current))

    logger.debug("quantum_while: hit max_iterations=%d", max_iterations)
    return LoopResult(
        final_state=current,
        history=history,
        iterations=iteration,
        terminated_by_max_iterations=True,
    )


def _check_count(value: Any, name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise OutOfRangeError(f"{name} must be a non-negative integer, got {value!r}", value=value)


def _check_state(value: Any, name: str) -> None:
    if not isinstance(value, Superposition):
        raise InvalidArgumentError(f"{name} must be a Superposition", argument=name)


def _check_callable(value: Any, name: str) -> None:
    if not callable(value):
        raise InvalidArgumentError(f"{name} must be callable", argument=name)
