"""Candidate outcomes gathered from several models.

Model calls themselves happen elsewhere; this module takes their responses
and turns them into a superposition.  Each response becomes a
:class:`Candidate` outcome with amplitude magnitude
``sqrt(weight * confidence)`` and phase 0, so after normalization a
candidate's probability is proportional to its model weight times its
confidence.

Example::

    state = superpose_responses([
        ModelResponse(model="large", text="Paris", weight=0.6, confidence=1.0),
        ModelResponse(model="small", text="Lyon", weight=0.4, confidence=0.25),
    ])
    state.get_probabilities()   # large/Paris ~0.857, small/Lyon ~0.143
"""

from __future__ import annotations

import logging
import math
import sys
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Literal

from openquantum.config.settings import get_settings
from openquantum.core.amplitude import Amplitude
from openquantum.core.superposition import RandomSource, Superposition
from openquantum.exceptions import (
    DegenerateStateError,
    EmptyInputError,
    InvalidArgumentError,
    OutOfRangeError,
)
from openquantum.operators.interference import interfere

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Candidate:
    """A model response used as an outcome key.

    Frozen so it hashes by value: two candidates with the same text, model,
    confidence and metadata are the same outcome.  Metadata is stored as a
    sorted tuple of pairs with nested values frozen as well (lists and sets
    become tuples and frozensets, dicts become sorted tuples of pairs); use
    :attr:`meta` for a top-level dict view.
    """

    text: str
    model: str
    confidence: float = 1.0
    metadata: tuple[tuple[str, Any], ...] = ()

    @classmethod
    def create(
        cls,
        text: str,
        model: str,
        confidence: float = 1.0,
        metadata: Mapping[str, Any] | None = None,
    ) -> Candidate:
        return cls(
            text=text,
            model=model,
            confidence=confidence,
            metadata=_freeze_mapping(metadata or {}),
        )

    @property
    def meta(self) -> dict[str, Any]:
        return dict(self.metadata)

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "model": self.model,
            "confidence": self.confidence,
            "metadata": self.meta,
        }


@dataclass
class ModelResponse:
    """A raw response from one model, before it joins a superposition.

    Attributes:
        model: Model name (non-empty).
        text: Response text.
        weight: Relative trust in the model, finite and >= 0.  Weights are
            normalized across all responses.
        confidence: Model-reported confidence; clamped to [0, 1].  ``None``
            uses the configured default (0.8).
        metadata: Free-form details (errors, token counts, ...).
    """

    model: str
    text: str
    weight: float = 1.0
    confidence: float | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


def _freeze_mapping(mapping: Mapping[Any, Any]) -> tuple[tuple[Any, Any], ...]:
    return tuple(
        sorted(
            ((key, _freeze(value)) for key, value in mapping.items()),
            key=lambda item: str(item[0]),
        )
    )


def _freeze(value: Any) -> Any:
    """Recursively convert containers to hashable equivalents."""
    if isinstance(value, Mapping):
        return _freeze_mapping(value)
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    if isinstance(value, (set, frozenset)):
        return frozenset(_freeze(item) for item in value)
    return value


def clamp_unit(value: Any) -> float:
    """Clamp to [0, 1]; anything non-numeric or non-finite becomes 0."""
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        return 0.0
    return min(max(float(value), 0.0), 1.0)


def superpose_responses(
    responses: Sequence[ModelResponse],
    *,
    rng: RandomSource | None = None,
) -> Superposition:
    """Build a superposition of candidates from model responses.

    Raises:
        EmptyInputError: If ``responses`` is empty.
        InvalidArgumentError: If an element is not a ModelResponse or has an
            empty model name.
        OutOfRangeError: If a weight is negative/non-finite or all weights
            are zero.
        DegenerateStateError: If every response has zero weighted confidence.
    """
    if not responses:
        raise EmptyInputError("superpose_responses requires at least one response")

    for index, response in enumerate(responses):
        if not isinstance(response, ModelResponse):
            raise InvalidArgumentError(
                f"Response at index {index} must be a ModelResponse",
                argument="responses",
            )
        if not isinstance(response.model, str) or not response.model.strip():
            raise InvalidArgumentError(
                f"Response at index {index} must have a non-empty model name",
                argument="model",
            )
        weight = response.weight
        if isinstance(weight, bool) or not isinstance(weight, (int, float)) or not math.isfinite(weight) or weight < 0:
            raise OutOfRangeError(
                f"Model {response.model} weight must be a finite number >= 0",
                value=weight,
            )

    total_weight = math.fsum(response.weight for response in responses)
    if total_weight <= sys.float_info.epsilon:
        raise OutOfRangeError("At least one model weight must be > 0", value=total_weight)

    default_confidence = get_settings().ensemble.default_confidence
    basis: list[tuple[Candidate, Amplitude]] = []
    for response in responses:
        confidence = clamp_unit(default_confidence if response.confidence is None else response.confidence)
        magnitude = math.sqrt((response.weight / total_weight) * confidence)
        if magnitude <= sys.float_info.epsilon:
            logger.debug("superpose_responses: dropping %s (zero weighted confidence)", response.model)
            continue
        candidate = Candidate.create(
            text=response.text,
            model=response.model,
            confidence=confidence,
            metadata=response.metadata,
        )
        basis.append((candidate, Amplitude.from_polar(magnitude, 0.0)))

    if not basis:
        raise DegenerateStateError("All model responses have zero confidence; nothing to superpose")

    return Superposition(basis, rng=rng)


def ensemble(
    states: Sequence[Superposition],
    mode: Literal["interference", "classical"] = "interference",
) -> Superposition:
    """Combine several response superpositions into one.

    Args:
        states: Non-empty sequence of superpositions.
        mode: ``"interference"`` sums amplitudes with uniform weights (see
            :func:`~openquantum.operators.interference.interfere`);
            ``"classical"`` pools every ``(outcome, amplitude)`` entry into a
            single construction.

    Raises:
        EmptyInputError: If ``states`` is empty.
        InvalidArgumentError: If an element is not a Superposition.
        OutOfRangeError: On an unknown ``mode``.
    """
    if not states:
        raise EmptyInputError("ensemble requires at least one superposition")
    for index, state in enumerate(states):
        if not isinstance(state, Superposition):
            raise InvalidArgumentError(
                f"ensemble expects Superposition instances; element {index} is {type(state).__name__}",
                argument="states",
            )

    if mode == "interference":
        return interfere(states)
    if mode == "classical":
        return Superposition([entry for state in states for entry in state.items()])

    raise OutOfRangeError(f"Unsupported ensemble mode: {mode!r}", value=mode)
