"""Re-merging branches that ran in superposition.

Each combinator routes every input outcome ``(value, alpha)`` through some
function and gets back a branch result.  The branch result is coerced to a
superposition (a plain value ``r`` becomes ``{r: 1+0i}``), each of its
amplitudes is multiplied by ``alpha``, and everything is accumulated by
outcome -- exactly the duplicate-key summation a
:class:`~openquantum.core.superposition.Superposition` performs at
construction.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from openquantum.core.accumulate import accumulate, weighted
from openquantum.core.amplitude import Amplitude
from openquantum.core.superposition import RandomSource, Superposition
from openquantum.exceptions import EmptyResultError


def as_superposition(result: Any) -> Superposition:
    """Coerce a branch result to a Superposition."""
    if isinstance(result, Superposition):
        return result
    return Superposition.certain(result)


def merge_branches(
    branches: Iterable[tuple[Amplitude, Any]],
    *,
    operation: str,
    rng: RandomSource | None = None,
) -> Superposition:
    """Weight each branch result by its routing amplitude and merge.

    Args:
        branches: ``(routing amplitude, branch result)`` pairs.
        operation: Name used in error messages.
        rng: Random source for the merged state.

    Raises:
        EmptyResultError: If no branch contributed an outcome.
        DegenerateStateError: If every merged outcome cancelled.
    """
    combined: dict[Any, Amplitude] = {}
    for routing, result in branches:
        accumulate(weighted(routing, as_superposition(result).items()), into=combined)

    if not combined:
        raise EmptyResultError(f"{operation} produced an empty superposition", operation=operation)

    return Superposition(combined, rng=rng)
