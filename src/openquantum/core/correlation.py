"""Correlations between superpositions.

A :class:`Correlation` makes a *target* superposition follow a *source*
superposition through a deterministic mapping ``source outcome -> target
outcome``:

- While the source is in superposition, the target's basis is rebuilt from
  the source's: every source amplitude is carried to ``mapping(outcome)`` and
  amplitudes that land on the same target outcome interfere (add as complex
  numbers).
- When the source collapses, the target collapses to the mapped outcome at
  once, without its own ``measure()`` being called.  A mapped outcome the
  target does not currently hold is injected as its only entry.

Both endpoints keep a reference to the correlation, which forms a cycle;
:meth:`Correlation.dispose` is the lifetime boundary that breaks it.

Example::

    weather = Superposition([("sunny", Amplitude(0.8)), ("rainy", Amplitude(0.6))])
    plan = Superposition.certain("undecided")
    link = Correlation(weather, plan, lambda w: "beach" if w == "sunny" else "movie")
    plan.get_probabilities()   # {"beach": 0.64, "movie": 0.36}
    weather.measure()          # plan is now collapsed too
    link.dispose()
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from openquantum.core.accumulate import accumulate, validate_outcome
from openquantum.core.superposition import Superposition
from openquantum.exceptions import InvalidArgumentError

logger = logging.getLogger(__name__)


class Correlation:
    """Derived link forcing ``target`` to follow ``source``.

    Attributes:
        source: The driving superposition.
        target: The superposition kept in sync with ``source``.
        mapping: Deterministic ``source outcome -> target outcome`` function.
        is_active: ``False`` once :meth:`dispose` has been called.

    Raises:
        InvalidArgumentError: If an endpoint is not a Superposition, both
            endpoints are the same object, or ``mapping`` is not callable.
    """

    def __init__(
        self,
        source: Superposition,
        target: Superposition,
        mapping: Callable[[Any], Any],
    ) -> None:
        if not isinstance(source, Superposition) or not isinstance(target, Superposition):
            raise InvalidArgumentError("Correlation requires two Superposition instances")
        if source is target:
            raise InvalidArgumentError(
                "Correlation requires two distinct superpositions",
                argument="target",
            )
        if not callable(mapping):
            raise InvalidArgumentError("Correlation mapping must be callable", argument="mapping")

        self.source = source
        self.target = target
        self.mapping = mapping
        self.is_active = True
        self._propagating = False

        source._attach(self)
        target._attach(self)

        try:
            self.derive()
        except Exception:
            self.dispose()
            raise

        logger.info("Correlation created: %r -> %r", source, target)

    # ------------------------------------------------------------------
    # Propagation
    # ------------------------------------------------------------------

    def derive(self, changed: Superposition | None = None) -> None:
        """Recompute the target from the source.

        Args:
            changed: The superposition that just changed.  Anything other
                than ``None`` or the source is ignored.

        Raises:
            InvalidArgumentError: If ``mapping`` yields ``None`` or an
                unhashable outcome.
        """
        if not self.is_active or self._propagating:
            return
        if changed is not None and changed is not self.source:
            return

        self._propagating = True
        try:
            if self.source.is_collapsed:
                mapped = self._map(self.source.collapsed_value)
                logger.debug("derive: source collapsed, forcing target to %r", mapped)
                self.target._force_collapse(mapped, "correlation-collapse")
                return

            induced = accumulate(
                (self._map(outcome), amplitude) for outcome, amplitude in self.source.items()
            )
            logger.debug("derive: induced %d target outcomes", len(induced))
            self.target._replace_basis(induced)
        finally:
            self._propagating = False

    def on_measurement(self, measured: Superposition, value: Any) -> None:
        """Collapse the target when the source has been measured."""
        if not self.is_active or self._propagating:
            return
        if measured is not self.source:
            return

        self._propagating = True
        try:
            mapped = self._map(value)
            logger.debug("on_measurement: %r -> %r", value, mapped)
            self.target._force_collapse(mapped, "correlation-collapse")
        finally:
            self._propagating = False

    def dispose(self) -> None:
        """Deactivate and unregister from both endpoints.  Idempotent."""
        if not self.is_active:
            return
        self.is_active = False
        self.source._detach(self)
        self.target._detach(self)
        logger.info("Correlation disposed: %r -> %r", self.source, self.target)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _map(self, outcome: Any) -> Any:
        return validate_outcome(self.mapping(outcome), "Correlation mapping result")

    def __repr__(self) -> str:
        status = "active" if self.is_active else "disposed"
        return f"Correlation({self.source!r} -> {self.target!r}, {status})"
