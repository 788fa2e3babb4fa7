"""Regression tests for interference.

Tests cover:
- interfere(): amplitude summation, weights and cancellation.
- analyze_interference(): constructive/destructive/neutral classification.
- Argument validation for both.
"""

from __future__ import annotations

import math

import pytest

from openquantum import configure
from openquantum.core.amplitude import Amplitude
from openquantum.core.superposition import Superposition
from openquantum.exceptions import (
    DegenerateStateError,
    EmptyInputError,
    InvalidArgumentError,
    LengthMismatchError,
    OutOfRangeError,
)
from openquantum.operators.gates import phase
from openquantum.operators.interference import (
    InterferenceAnalysis,
    analyze_interference,
    interfere,
)


@pytest.fixture
def in_phase():
    return Superposition([("X", Amplitude(1)), ("Y", Amplitude(1))])


@pytest.fixture
def out_of_phase():
    return Superposition([("X", Amplitude(-1)), ("Y", Amplitude(1))])


# =====================================================================
# interfere()
# =====================================================================


class TestInterfere:
    """Tests for combining superpositions by amplitude."""

    def test_destructive_interference(self, in_phase, out_of_phase):
        """Opposite phases on X cancel, leaving only Y."""
        result = interfere([in_phase, out_of_phase])
        assert result.outcomes == ("Y",)
        assert result.get_probability("Y") == pytest.approx(1.0)

    def test_constructive_interference(self, in_phase):
        result = interfere([in_phase, in_phase.clone()])
        assert result.get_probability("X") == pytest.approx(0.5)
        assert result.get_probability("Y") == pytest.approx(0.5)

    def test_disjoint_states(self):
        a = Superposition.certain("X")
        b = Superposition.certain("Y")
        result = interfere([a, b])
        assert result.get_probabilities() == pytest.approx({"X": 0.5, "Y": 0.5})

    def test_phase_gate_then_interfere(self, in_phase):
        flipped = phase(in_phase, "X", math.pi)
        result = interfere([in_phase, flipped])
        assert "X" not in result
        assert result.get_probability("Y") == pytest.approx(1.0)

    def test_single_state_is_identity(self, in_phase):
        result = interfere([in_phase])
        assert result.get_probabilities() == pytest.approx(in_phase.get_probabilities())

    def test_weights_select_states(self, in_phase):
        other = Superposition.certain("Z")
        result = interfere([in_phase, other], weights=[1, 0])
        assert set(result.outcomes) == {"X", "Y"}

    def test_weights_are_renormalized(self):
        a = Superposition.certain("X")
        b = Superposition.certain("Y")
        result = interfere([a, b], weights=[3, 4])
        assert result.get_probability("X") == pytest.approx(9 / 25)
        assert result.get_probability("Y") == pytest.approx(16 / 25)

    def test_inputs_not_mutated(self, in_phase, out_of_phase):
        interfere([in_phase, out_of_phase])
        assert in_phase.get_probability("X") == pytest.approx(0.5)
        assert out_of_phase.get_probability("X") == pytest.approx(0.5)

    def test_total_cancellation(self):
        a = Superposition.certain("X")
        b = Superposition([("X", Amplitude(-1))])
        with pytest.raises(DegenerateStateError):
            interfere([a, b])

    def test_empty_rejected(self):
        with pytest.raises(EmptyInputError):
            interfere([])

    def test_non_superposition_element_rejected(self, in_phase):
        with pytest.raises(InvalidArgumentError):
            interfere([in_phase, "X"])

    def test_bare_superposition_rejected(self, in_phase):
        with pytest.raises(InvalidArgumentError):
            interfere(in_phase)

    def test_weight_length_mismatch(self, in_phase, out_of_phase):
        with pytest.raises(LengthMismatchError) as exc_info:
            interfere([in_phase, out_of_phase], weights=[1.0])
        assert exc_info.value.expected == 2
        assert exc_info.value.received == 1

    def test_all_zero_weights_rejected(self, in_phase, out_of_phase):
        with pytest.raises(OutOfRangeError):
            interfere([in_phase, out_of_phase], weights=[0, 0])

    @pytest.mark.parametrize("bad", [math.nan, math.inf, "1"])
    def test_non_finite_weight_rejected(self, in_phase, out_of_phase, bad):
        with pytest.raises(OutOfRangeError):
            interfere([in_phase, out_of_phase], weights=[bad, 1])


# =====================================================================
# analyze_interference()
# =====================================================================


class TestAnalyzeInterference:
    """Tests for per-outcome interference classification."""

    def test_classifies_constructive_and_destructive(self, in_phase, out_of_phase):
        analysis = analyze_interference([in_phase, out_of_phase])
        assert isinstance(analysis, InterferenceAnalysis)

        (gain,) = analysis.constructive
        assert gain.outcome == "Y"
        assert gain.ratio == pytest.approx(2.0)
        assert gain.combined_probability == pytest.approx(1.0)
        assert gain.average_probability == pytest.approx(0.5)

        (loss,) = analysis.destructive
        assert loss.outcome == "X"
        assert loss.ratio == pytest.approx(0.0)
        assert analysis.neutral == []

    def test_neutral(self):
        a = Superposition.certain("X")
        b = Superposition.certain("Y")
        analysis = analyze_interference([a, b])
        assert {p.outcome for p in analysis.neutral} == {"X", "Y"}
        assert analysis.constructive == []
        assert analysis.destructive == []

    def test_custom_thresholds(self, in_phase, out_of_phase):
        analysis = analyze_interference(
            [in_phase, out_of_phase],
            constructive_threshold=3.0,
            destructive_threshold=-1.0,
        )
        assert {p.outcome for p in analysis.neutral} == {"X", "Y"}

    def test_configured_thresholds(self, in_phase, out_of_phase):
        from openquantum.config.settings import OpenQuantumSettings, ThresholdSettings

        configure(
            settings=OpenQuantumSettings(
                thresholds=ThresholdSettings(constructive=5.0, destructive=0.1)
            )
        )
        analysis = analyze_interference([in_phase, out_of_phase])
        assert [p.outcome for p in analysis.neutral] == ["Y"]
        assert [p.outcome for p in analysis.destructive] == ["X"]

    def test_inverted_thresholds_rejected(self, in_phase):
        with pytest.raises(OutOfRangeError):
            analyze_interference(
                [in_phase],
                constructive_threshold=0.5,
                destructive_threshold=0.5,
            )

    def test_non_finite_threshold_rejected(self, in_phase):
        with pytest.raises(OutOfRangeError):
            analyze_interference([in_phase], constructive_threshold=math.inf)

    def test_empty_rejected(self):
        with pytest.raises(EmptyInputError):
            analyze_interference([])

    def test_to_dict(self, in_phase, out_of_phase):
        data = analyze_interference([in_phase, out_of_phase]).to_dict()
        assert data["constructive"][0]["outcome"] == "Y"
        assert data["destructive"][0]["outcome"] == "X"
        assert data["neutral"] == []
