"""Weighted accumulate-by-outcome.

Every place that builds a superposition out of several contributions --
construction with duplicate keys, correlation derivation, interference, and
the branch/loop combinators -- does the same thing: sum complex amplitudes
that land on the same outcome.  This module is that one primitive.

Example::

    from openquantum.core.accumulate import accumulate

    accumulate([("x", Amplitude(0.5)), ("x", Amplitude(0.5)), ("y", Amplitude(1))])
    # {"x": Amplitude(1.0, 0.0), "y": Amplitude(1.0, 0.0)}
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable
from typing import Any

from openquantum.core.amplitude import Amplitude
from openquantum.exceptions import InvalidArgumentError


def validate_outcome(outcome: Any, context: str = "outcome") -> Hashable:
    """Check that *outcome* can serve as a basis key.

    Outcomes are dictionary keys, so they must be hashable.  ``None`` is
    reserved to mean "no outcome" and is rejected.

    Raises:
        InvalidArgumentError: If the outcome is ``None`` or unhashable.
    """
    if outcome is None:
        raise InvalidArgumentError(f"{context} must not be None", argument="outcome")
    try:
        hash(outcome)
    except TypeError as exc:
        raise InvalidArgumentError(
            f"{context} must be hashable, got {type(outcome).__name__}",
            argument="outcome",
            cause=exc,
        ) from exc
    return outcome


def accumulate(
    entries: Iterable[tuple[Any, Amplitude]],
    into: dict[Any, Amplitude] | None = None,
) -> dict[Any, Amplitude]:
    """Sum amplitudes per outcome, preserving first-seen order.

    Args:
        entries: ``(outcome, amplitude)`` pairs.  Repeated outcomes add as
            complex numbers.
        into: Optional existing map to accumulate into (mutated and returned).

    Returns:
        Insertion-ordered ``outcome -> amplitude`` map.

    Raises:
        InvalidArgumentError: On a malformed pair, a non-Amplitude amplitude,
            or an invalid outcome.
    """
    combined: dict[Any, Amplitude] = {} if into is None else into
    for entry in entries:
        if not isinstance(entry, tuple) or len(entry) != 2:
            raise InvalidArgumentError(
                "Each basis entry must be an (outcome, Amplitude) pair",
                argument="basis",
            )
        outcome, amplitude = entry
        if not isinstance(amplitude, Amplitude):
            raise InvalidArgumentError(
                f"Basis amplitude must be an Amplitude, got {type(amplitude).__name__}",
                argument="amplitude",
            )
        validate_outcome(outcome, "Basis outcome")
        existing = combined.get(outcome)
        combined[outcome] = amplitude if existing is None else existing.add(amplitude)
    return combined


def weighted(
    weight: Amplitude,
    entries: Iterable[tuple[Any, Amplitude]],
) -> Iterable[tuple[Any, Amplitude]]:
    """Yield ``entries`` with every amplitude multiplied by ``weight``."""
    for outcome, amplitude in entries:
        yield outcome, amplitude.multiply(weight)


def prune(
    amplitudes: dict[Any, Amplitude],
    epsilon: float,
) -> dict[Any, Amplitude]:
    """Return a copy without entries whose magnitude is below ``epsilon``."""
    return {
        outcome: amplitude
        for outcome, amplitude in amplitudes.items()
        if amplitude.magnitude >= epsilon
    }
