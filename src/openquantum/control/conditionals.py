"""Branching in superposition.

``quantum_if`` and ``quantum_switch`` run every branch selected by some
outcome of the input superposition and merge the results, weighting each by
the amplitude of the outcome that selected it.  A condition that is
``true`` with probability 0.7 therefore yields the *then* result with
probability 0.7 -- no measurement happens.

Example::

    condition = Superposition([(True, Amplitude(math.sqrt(0.7))),
                               (False, Amplitude(math.sqrt(0.3)))])
    quantum_if(condition, lambda v: "then", lambda v: "else").get_probabilities()
    # {"then": 0.7, "else": 0.3}
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from openquantum.control.merge import merge_branches
from openquantum.core.superposition import Superposition
from openquantum.exceptions import InvalidArgumentError

logger = logging.getLogger(__name__)

Branch = Callable[[Any], Any]


def quantum_if(condition: Superposition, then_fn: Branch, else_fn: Branch) -> Superposition:
    """Superposed if/else.

    For each outcome ``v`` of ``condition``, ``then_fn(v)`` runs when ``v`` is
    truthy and ``else_fn(v)`` otherwise.  Branches may return a
    Superposition or a plain value.

    Raises:
        InvalidArgumentError: If ``condition`` is not a Superposition or a
            branch is not callable.
    """
    _check_state(condition, "quantum_if condition")
    _check_callable(then_fn, "quantum_if then_fn")
    _check_callable(else_fn, "quantum_if else_fn")

    branches = [
        (amplitude, then_fn(value) if value else else_fn(value))
        for value, amplitude in condition.items()
    ]
    return merge_branches(branches, operation="quantum_if", rng=condition.rng)


def quantum_switch(
    state: Superposition,
    cases: Mapping[Any, Branch],
    default: Branch | None = None,
) -> Superposition:
    """Superposed switch/case.

    Each outcome ``v`` runs ``cases[v]`` if present, else ``default``.  An
    outcome with neither a case nor a default contributes nothing; if that
    leaves no outcome at all the merge raises ``EmptyResultError``.

    Raises:
        InvalidArgumentError: If ``cases`` is not a mapping, ``default`` is
            not callable, or a selected handler is not callable.
    """
    _check_state(state, "quantum_switch state")
    if not isinstance(cases, Mapping):
        raise InvalidArgumentError(
            "quantum_switch cases must be a mapping of outcome to handler",
            argument="cases",
        )
    if default is not None:
        _check_callable(default, "quantum_switch default")

    branches = []
    for value, amplitude in state.items():
        handler = cases[value] if value in cases else default
        if handler is None:
            logger.debug("quantum_switch: no handler for %r, dropping", value)
            continue
        _check_callable(handler, f"quantum_switch handler for {value!r}")
        branches.append((amplitude, handler(value)))

    return merge_branches(branches, operation="quantum_switch", rng=state.rng)


def _check_state(value: Any, name: str) -> None:
    if not isinstance(value, Superposition):
        raise InvalidArgumentError(f"{name} must be a Superposition", argument=name)


def _check_callable(value: Any, name: str) -> None:
    if not callable(value):
        raise InvalidArgumentError(f"{name} must be callable", argument=name)
