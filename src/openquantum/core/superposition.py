"""Discrete superpositions over hashable outcomes.

A :class:`Superposition` stores

    |psi> = sum_i  alpha_i |outcome_i>

as an insertion-ordered mapping from outcome to complex :class:`Amplitude`,
maintaining three invariants after every public operation:

1. the basis is never empty;
2. every amplitude has magnitude >= ``PRUNE_EPSILON``;
3. ``sum |alpha_i|^2 == 1`` within ``NORMALIZATION_TOLERANCE``.

Measurement samples one outcome by the Born rule, collapses the state to it
(``{outcome: 1+0i}``), appends a :class:`CollapseRecord` to the audit
history and notifies every :class:`~openquantum.core.correlation.Correlation`
attached to the state.  Measuring an already-collapsed state returns the
stored outcome without drawing again.

Randomness is injected: pass ``rng=`` (a :class:`random.Random` or any
zero-argument callable returning a float in ``[0, 1)``) at construction or per
``measure()`` call.  Without one, each instance owns a private
``random.Random()``.

Example::

    from openquantum import Amplitude, Superposition

    coin = Superposition([("heads", Amplitude(1)), ("tails", Amplitude(1))],
                         rng=random.Random(7))
    coin.get_probabilities()   # {"heads": 0.5, "tails": 0.5}
    coin.measure()             # "heads" or "tails", fixed from now on
    coin.measurement_history[-1].reason   # "measurement"
"""

from __future__ import annotations

import copy
import logging
import math
import random
from collections.abc import Callable, Hashable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Union

from openquantum.config.settings import get_settings
from openquantum.core.accumulate import accumulate, prune, validate_outcome
from openquantum.core.amplitude import Amplitude
from openquantum.exceptions import (
    DegenerateStateError,
    EmptyInputError,
    InvalidArgumentError,
    NotAMemberError,
    OutOfRangeError,
)

if TYPE_CHECKING:
    from openquantum.core.correlation import Correlation

logger = logging.getLogger(__name__)

# Amplitudes with a smaller magnitude are dropped from the basis.
PRUNE_EPSILON = 1e-12
# Total probability at or below this cannot be renormalized.
NORMALIZATION_EPSILON = 1e-15
# Allowed deviation of the total probability from 1.
NORMALIZATION_TOLERANCE = 1e-9

RandomSource = Union[random.Random, Callable[[], float]]

_ONE = Amplitude(1.0, 0.0)


# ---------------------------------------------------------------------------
# Data containers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CollapseRecord:
    """One entry of a superposition's append-only audit trail.

    Attributes:
        outcome: The outcome the state collapsed to.
        reason: Why it collapsed (``"measurement"``, ``"manual-collapse"``,
            ``"correlation-collapse"``, ...).
        distribution: Probability snapshot taken just before the collapse.
        timestamp: UTC time of the collapse.
    """

    outcome: Any
    reason: str
    distribution: Mapping[Any, float] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        return {
            "outcome": self.outcome,
            "reason": self.reason,
            "distribution": dict(self.distribution),
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class CoherenceMetrics:
    """Decoherence diagnostics for a superposition.

    Attributes:
        max_probability: Largest single-outcome probability.  Near 1 means
            the state is effectively classical.
        entropy: Base-2 Shannon entropy of the distribution (``0 log 0 = 0``).
        support_size: Number of outcomes with non-zero amplitude.
        is_classical: ``max_probability`` reached the classical threshold.
    """

    max_probability: float
    entropy: float
    support_size: int
    is_classical: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "max_probability": self.max_probability,
            "entropy": self.entropy,
            "support_size": self.support_size,
            "is_classical": self.is_classical,
        }


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _normalized(amplitudes: Mapping[Any, Amplitude]) -> dict[Any, Amplitude]:
    """Prune, rescale to unit total probability, prune again.

    Pure: the input is never mutated, so callers can commit the result only
    once it is known to be valid.
    """
    pruned = prune(dict(amplitudes), PRUNE_EPSILON)
    if not pruned:
        raise DegenerateStateError("Superposition has no non-zero amplitudes after pruning")

    total = math.fsum(amplitude.magnitude_squared for amplitude in pruned.values())
    if not math.isfinite(total) or total <= NORMALIZATION_EPSILON:
        raise DegenerateStateError(
            "Superposition collapsed to zero probability mass",
            details={"total_probability": total},
        )

    norm = math.sqrt(total)
    scaled = prune(
        {outcome: amplitude.scale(1.0 / norm) for outcome, amplitude in pruned.items()},
        PRUNE_EPSILON,
    )
    if not scaled:
        raise DegenerateStateError("Superposition has no non-zero amplitudes after normalization")
    return scaled


def _check_rng(rng: Any) -> RandomSource:
    if isinstance(rng, random.Random) or callable(rng):
        return rng
    raise InvalidArgumentError(
        "rng must be a random.Random instance or a zero-argument callable",
        argument="rng",
    )


def _draw(rng: RandomSource) -> float:
    sample = rng.random() if isinstance(rng, random.Random) else rng()
    if isinstance(sample, bool) or not isinstance(sample, (int, float)) or not math.isfinite(sample):
        raise OutOfRangeError(
            f"Random source must return a finite float, got {sample!r}",
            value=sample,
        )
    return float(sample)


# ---------------------------------------------------------------------------
# Superposition
# ---------------------------------------------------------------------------


class Superposition:
    """Normalized weighted set of mutually exclusive outcomes.

    Args:
        basis: ``(outcome, Amplitude)`` pairs, or a mapping of outcome to
            amplitude.  Repeated outcomes are summed as complex numbers.
        rng: Random source used by :meth:`measure`.

    Raises:
        EmptyInputError: If ``basis`` is empty.
        InvalidArgumentError: If an entry is malformed.
        DegenerateStateError: If the amplitudes carry no probability mass.
    """

    def __init__(
        self,
        basis: Iterable[tuple[Any, Amplitude]] | Mapping[Any, Amplitude],
        *,
        rng: RandomSource | None = None,
    ) -> None:
        if isinstance(basis, Mapping):
            entries = list(basis.items())
        elif isinstance(basis, (str, bytes)) or not isinstance(basis, Iterable):
            raise InvalidArgumentError(
                "Superposition basis must be an iterable of (outcome, Amplitude) pairs",
                argument="basis",
            )
        else:
            entries = list(basis)

        if not entries:
            raise EmptyInputError("Superposition basis must contain at least one outcome")

        self._basis: dict[Any, Amplitude] = _normalized(accumulate(entries))
        self._rng: RandomSource = _check_rng(rng) if rng is not None else random.Random()
        self._correlations: dict[Correlation, None] = {}
        self._history: list[CollapseRecord] = []
        self._collapsed = False
        self._collapsed_value: Any = None
        self._refresh_collapsed()

    # ------------------------------------------------------------------
    # Alternate constructors
    # ------------------------------------------------------------------

    @classmethod
    def certain(cls, outcome: Any, *, rng: RandomSource | None = None) -> Superposition:
        """A deterministic state: ``outcome`` with amplitude ``1+0i``."""
        return cls([(outcome, _ONE)], rng=rng)

    @classmethod
    def uniform(cls, outcomes: Iterable[Any], *, rng: RandomSource | None = None) -> Superposition:
        """Equal-amplitude superposition over ``outcomes``."""
        return cls([(outcome, _ONE) for outcome in outcomes], rng=rng)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def basis(self) -> Mapping[Any, Amplitude]:
        """Read-only view of ``outcome -> amplitude``."""
        return MappingProxyType(self._basis)

    @property
    def outcomes(self) -> tuple[Any, ...]:
        return tuple(self._basis)

    @property
    def is_collapsed(self) -> bool:
        return self._collapsed

    @property
    def collapsed_value(self) -> Any:
        """The outcome this state collapsed to, or ``None``."""
        return self._collapsed_value

    @property
    def measurement_history(self) -> tuple[CollapseRecord, ...]:
        return tuple(self._history)

    @property
    def correlations(self) -> tuple[Correlation, ...]:
        return tuple(self._correlations)

    @property
    def rng(self) -> RandomSource:
        return self._rng

    def items(self) -> Iterator[tuple[Any, Amplitude]]:
        return iter(list(self._basis.items()))

    def __len__(self) -> int:
        return len(self._basis)

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self._basis))

    def __contains__(self, outcome: object) -> bool:
        if not isinstance(outcome, Hashable):
            return False
        try:
            return outcome in self._basis
        except TypeError:
            return False

    def get_probabilities(self) -> dict[Any, float]:
        """Independent snapshot of ``outcome -> probability``."""
        return {outcome: amplitude.magnitude_squared for outcome, amplitude in self._basis.items()}

    def get_probability(self, outcome: Any) -> float:
        return self.get_amplitude(outcome).magnitude_squared

    def get_amplitude(self, outcome: Any) -> Amplitude:
        """Amplitude of ``outcome``; zero when absent.  Never raises."""
        if not isinstance(outcome, Hashable):
            return Amplitude.zero()
        try:
            return self._basis.get(outcome, Amplitude.zero())
        except TypeError:
            # Hashable by type but unhashable by value, e.g. a tuple holding a list.
            return Amplitude.zero()

    def get_coherence_metrics(self) -> CoherenceMetrics:
        probabilities = self.get_probabilities().values()
        entropy = -math.fsum(p * math.log2(p) for p in probabilities if p > 0)
        return CoherenceMetrics(
            max_probability=max(probabilities),
            entropy=max(entropy, 0.0),
            support_size=len(self._basis),
            is_classical=self.is_near_classical(),
        )

    def is_near_classical(self, threshold: float | None = None) -> bool:
        """True when one outcome holds at least ``threshold`` probability.

        Args:
            threshold: Value in ``(0, 1]``.  Defaults to the configured
                classical threshold (0.999999).

        Raises:
            OutOfRangeError: If ``threshold`` is outside ``(0, 1]``.
        """
        if threshold is None:
            threshold = get_settings().thresholds.classical
        if (
            isinstance(threshold, bool)
            or not isinstance(threshold, (int, float))
            or not math.isfinite(threshold)
            or threshold <= 0
            or threshold > 1
        ):
            raise OutOfRangeError(
                f"Classical threshold must be in (0, 1], got {threshold!r}",
                value=threshold,
            )
        return max(self.get_probabilities().values()) >= threshold

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def normalize(self) -> Superposition:
        """Rescale to unit total probability and propagate to correlations.

        Raises:
            DegenerateStateError: If the total probability is non-finite or
                at/below ``NORMALIZATION_EPSILON``.
        """
        self._commit(_normalized(self._basis))
        return self

    def stabilize(self) -> Superposition:
        """Drop drifted near-zero terms and renormalize.

        Long chains of gates and correlation updates accumulate
        floating-point error; this re-establishes the invariants.
        """
        return self.normalize()

    def set_amplitude(self, outcome: Any, amplitude: Amplitude) -> Superposition:
        """Overwrite one amplitude, then prune and renormalize.

        The update is all-or-nothing: if it leaves no probability mass or a
        correlated target cannot follow it, the state is left unchanged.

        Raises:
            InvalidArgumentError: If ``amplitude`` is not an Amplitude, the
                outcome is not a valid key, or a correlation mapping rejects
                the new outcome.
            DegenerateStateError: If the update leaves no probability mass,
                here or in a correlated target.
        """
        if not isinstance(amplitude, Amplitude):
            raise InvalidArgumentError(
                f"set_amplitude requires an Amplitude, got {type(amplitude).__name__}",
                argument="amplitude",
            )
        validate_outcome(outcome)
        candidate = dict(self._basis)
        candidate[outcome] = amplitude
        self._commit(_normalized(candidate))
        return self

    def measure(self, rng: RandomSource | None = None) -> Any:
        """Sample an outcome by the Born rule and collapse to it.

        Args:
            rng: Random source for this draw; defaults to the instance's.

        Returns:
            The measured outcome.  Repeated calls return the same outcome
            without drawing again.
        """
        if self._collapsed:
            logger.debug("measure: already collapsed to %r", self._collapsed_value)
            return self._collapsed_value

        source = _check_rng(rng) if rng is not None else self._rng
        distribution = self.get_probabilities()
        sample = _draw(source)

        measured: Any = None
        found = False
        cumulative = 0.0
        for outcome, probability in distribution.items():
            cumulative += probability
            if cumulative >= sample:
                measured = outcome
                found = True
                break

        if not found:
            measured = next(reversed(distribution))
            logger.warning(
                "measure: cumulative probability %.17g never reached sample %.17g; "
                "falling back to last outcome %r",
                cumulative,
                sample,
                measured,
            )

        logger.debug("measure: sample=%.6f -> %r", sample, measured)
        self.collapse_to(measured, reason="measurement", distribution=distribution)
        return measured

    def collapse_to(
        self,
        outcome: Any,
        *,
        reason: str = "manual-collapse",
        distribution: Mapping[Any, float] | None = None,
    ) -> Superposition:
        """Deterministically collapse to ``outcome``.

        Args:
            outcome: Must be present in the basis.
            reason: Recorded in the audit trail.
            distribution: Pre-collapse probabilities to record; defaults to
                the current snapshot.

        Raises:
            NotAMemberError: If ``outcome`` is not in the basis.
        """
        validate_outcome(outcome)
        if outcome not in self._basis:
            raise NotAMemberError(
                f"Cannot collapse to {outcome!r}: not present in the basis",
                outcome=outcome,
            )
        snapshot = dict(distribution) if distribution is not None else self.get_probabilities()
        self._collapse(outcome, reason, snapshot)
        return self

    def clone(self) -> Superposition:
        """Deep value copy, including history and flags, with no correlations.

        A ``random.Random`` source is copied with its current state, so the
        clone draws the same stream without advancing the original's.  A
        plain callable source cannot be copied and is shared.
        """
        clone = self.__class__.__new__(self.__class__)
        clone._basis = dict(self._basis)
        clone._rng = copy.deepcopy(self._rng) if isinstance(self._rng, random.Random) else self._rng
        clone._correlations = {}
        clone._history = [replace(record, distribution=dict(record.distribution)) for record in self._history]
        clone._collapsed = self._collapsed
        clone._collapsed_value = self._collapsed_value
        return clone

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {
            "basis": [
                {
                    "outcome": outcome,
                    "real": amplitude.real,
                    "imag": amplitude.imag,
                    "probability": amplitude.magnitude_squared,
                }
                for outcome, amplitude in self._basis.items()
            ],
            "is_collapsed": self._collapsed,
            "collapsed_value": self._collapsed_value,
            "metrics": self.get_coherence_metrics().to_dict(),
            "history": [record.to_dict() for record in self._history],
        }

    def __str__(self) -> str:
        terms = [
            f"{amplitude}|{outcome}⟩ [{amplitude.magnitude_squared * 100:.3f}%]"
            for outcome, amplitude in self._basis.items()
        ]
        return "|ψ⟩ = " + " + ".join(terms)

    def __repr__(self) -> str:
        state = f"collapsed={self._collapsed_value!r}" if self._collapsed else f"support={len(self._basis)}"
        return f"Superposition({state})"

    # ------------------------------------------------------------------
    # Correlation plumbing
    # ------------------------------------------------------------------

    def _attach(self, correlation: Correlation) -> None:
        self._correlations[correlation] = None

    def _detach(self, correlation: Correlation) -> None:
        self._correlations.pop(correlation, None)

    def _replace_basis(self, amplitudes: Mapping[Any, Amplitude]) -> None:
        """Swap in a whole new basis (correlation derivation)."""
        self._commit(_normalized(amplitudes))

    def _force_collapse(self, outcome: Any, reason: str) -> None:
        """Collapse to ``outcome``, injecting it if the basis lacks it."""
        validate_outcome(outcome, "Correlated outcome")
        if self._collapsed and self._collapsed_value == outcome:
            return
        self._collapse(outcome, reason, self.get_probabilities())

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _commit(self, amplitudes: dict[Any, Amplitude]) -> None:
        """Install a new basis and re-derive every correlation from it.

        If any derivation fails, the previous basis is restored and the
        correlations that already followed the new one are re-derived, so
        neither this state nor its targets are left half-updated.
        """
        previous = (self._basis, self._collapsed, self._collapsed_value)
        self._basis = amplitudes
        self._refresh_collapsed()
        derived: list[Correlation] = []
        try:
            for correlation in list(self._correlations):
                correlation.derive(self)
                derived.append(correlation)
        except Exception:
            self._basis, self._collapsed, self._collapsed_value = previous
            for correlation in derived:
                correlation.derive(self)
            logger.debug("commit: derivation failed, restored previous basis")
            raise

    def _collapse(self, outcome: Any, reason: str, distribution: dict[Any, float]) -> None:
        self._basis = {outcome: _ONE}
        self._collapsed = True
        self._collapsed_value = outcome
        self._history.append(CollapseRecord(outcome=outcome, reason=reason, distribution=distribution))
        logger.debug("collapse: %r (%s)", outcome, reason)
        for correlation in list(self._correlations):
            correlation.on_measurement(self, outcome)

    def _refresh_collapsed(self) -> None:
        if len(self._basis) == 1:
            ((outcome, amplitude),) = self._basis.items()
            if amplitude.equals(_ONE):
                self._collapsed = True
                self._collapsed_value = outcome
                return
        self._collapsed = False
        self._collapsed_value = None
