"""Regression tests for correlations between superpositions.

Tests cover:
- Derivation: the target basis follows the source through the mapping.
- Collapse propagation: measuring the source collapses the target.
- Chains and cycles of correlations.
- Lifetime: dispose() unregisters from both endpoints.
"""

from __future__ import annotations

import logging

import pytest

from openquantum.core.amplitude import Amplitude
from openquantum.core.correlation import Correlation
from openquantum.core.superposition import Superposition
from openquantum.exceptions import DegenerateStateError, InvalidArgumentError


def plan_for(weather: str) -> str:
    return "beach" if weather == "sunny" else "movie"


@pytest.fixture
def weather():
    return Superposition([("sunny", Amplitude(0.8)), ("rainy", Amplitude(0.6))])


# =====================================================================
# Derivation
# =====================================================================


class TestDerivation:
    """Tests for rebuilding the target from the source."""

    def test_target_follows_source(self, weather):
        """Probabilities 0.64 / 0.36 carry over to the mapped outcomes."""
        plan = Superposition.certain("undecided")
        Correlation(weather, plan, plan_for)

        probabilities = plan.get_probabilities()
        assert set(probabilities) == {"beach", "movie"}
        assert probabilities["beach"] == pytest.approx(0.64)
        assert probabilities["movie"] == pytest.approx(0.36)
        assert not plan.is_collapsed

    def test_many_to_one_mapping_interferes(self):
        source = Superposition([(1, Amplitude(1)), (-1, Amplitude(1)), (0, Amplitude(1))])
        target = Superposition.certain("?")
        Correlation(source, target, abs)
        assert target.get_probability(1) == pytest.approx(0.8)
        assert target.get_probability(0) == pytest.approx(0.2)

    def test_cancelling_mapping_rejected(self):
        """Opposite-phase amplitudes that land on one outcome cancel out."""
        source = Superposition([("x", Amplitude(1)), ("y", Amplitude(-1))])
        target = Superposition.certain("?")
        with pytest.raises(DegenerateStateError):
            Correlation(source, target, lambda v: "same")
        assert source.correlations == ()
        assert target.correlations == ()

    def test_source_update_propagates(self, weather):
        plan = Superposition.certain("undecided")
        Correlation(weather, plan, plan_for)

        weather.set_amplitude("rainy", Amplitude.zero())
        assert plan.outcomes == ("beach",)

        weather.set_amplitude("rainy", Amplitude(1))
        assert plan.get_probability("movie") == pytest.approx(0.5)

    def test_rejected_source_update_is_rolled_back(self):
        """A new outcome the mapping cannot handle leaves both ends as they were."""
        source = Superposition([("a", Amplitude(1)), ("b", Amplitude(1))])
        target = Superposition.certain("?")
        Correlation(source, target, {"a": "A", "b": "B"}.get)

        with pytest.raises(InvalidArgumentError):
            source.set_amplitude("c", Amplitude(1))

        assert source.outcomes == ("a", "b")
        assert source.get_probability("a") == pytest.approx(0.5)
        assert target.get_probabilities() == pytest.approx({"A": 0.5, "B": 0.5})

    def test_cancelling_source_update_is_rolled_back(self):
        source = Superposition([("a", Amplitude(1)), ("b", Amplitude(1))])
        target = Superposition.certain("?")
        Correlation(source, target, lambda v: "same" if v in ("a", "c") else "other")

        source.set_amplitude("b", Amplitude.zero())
        assert target.outcomes == ("same",)

        with pytest.raises(DegenerateStateError):
            source.set_amplitude("c", Amplitude(-1))

        assert source.outcomes == ("a",)
        assert target.outcomes == ("same",)

    def test_rollback_restores_earlier_targets(self):
        """Targets updated before the failing correlation follow the restore."""
        source = Superposition([("a", Amplitude(1)), ("b", Amplitude(1))])
        first = Superposition.certain("?")
        second = Superposition.certain("?")
        Correlation(source, first, lambda v: v.upper())
        Correlation(source, second, {"a": 1, "b": 2}.get)

        with pytest.raises(InvalidArgumentError):
            source.set_amplitude("c", Amplitude(1))

        assert first.outcomes == ("A", "B")
        assert second.outcomes == (1, 2)

    def test_source_unchanged_by_target_update(self, weather):
        plan = Superposition.certain("undecided")
        Correlation(weather, plan, plan_for)
        plan.set_amplitude("beach", Amplitude(5))
        assert weather.get_probability("sunny") == pytest.approx(0.64)

    def test_creation_logged(self, weather, caplog):
        plan = Superposition.certain("undecided")
        with caplog.at_level(logging.INFO, logger="openquantum"):
            Correlation(weather, plan, plan_for)
        assert any("Correlation created" in r.getMessage() for r in caplog.records)


# =====================================================================
# Collapse propagation
# =====================================================================


class TestCollapsePropagation:
    """Tests for forcing the target when the source collapses."""

    def test_measuring_source_collapses_target(self, weather):
        plan = Superposition.certain("undecided")
        Correlation(weather, plan, plan_for)

        assert weather.measure(rng=lambda: 0.1) == "sunny"
        assert plan.is_collapsed
        assert plan.collapsed_value == "beach"
        assert plan.measurement_history[-1].reason == "correlation-collapse"

    def test_collapse_to_propagates(self, weather):
        plan = Superposition.certain("undecided")
        Correlation(weather, plan, plan_for)
        weather.collapse_to("rainy")
        assert plan.collapsed_value == "movie"

    def test_collapsed_source_forces_target_on_creation(self):
        """A source pruned down to one outcome is already collapsed."""
        source = Superposition([(0, Amplitude(1)), (1, Amplitude(0))])
        target = Superposition([("a", Amplitude(1)), ("b", Amplitude(1))])
        Correlation(source, target, lambda v: "zero" if v == 0 else "one")

        assert target.is_collapsed
        assert target.collapsed_value == "zero"
        assert target.outcomes == ("zero",)
        (record,) = target.measurement_history
        assert record.reason == "correlation-collapse"
        assert record.distribution["a"] == pytest.approx(0.5)

    def test_absent_mapped_outcome_is_injected(self, weather):
        """The target collapses to the mapped outcome even if it dropped it."""
        plan = Superposition.certain("undecided")
        Correlation(weather, plan, plan_for)
        plan.set_amplitude("beach", Amplitude.zero())
        assert "beach" not in plan

        weather.measure(rng=lambda: 0.1)
        assert plan.collapsed_value == "beach"
        assert plan.get_probabilities() == {"beach": 1.0}

    def test_measuring_target_leaves_source(self, weather):
        plan = Superposition.certain("undecided")
        Correlation(weather, plan, plan_for)
        plan.measure(rng=lambda: 0.1)
        assert plan.is_collapsed
        assert not weather.is_collapsed

    def test_chain_propagates(self):
        """A -> B -> C collapses all three from one measurement."""
        a = Superposition([(1, Amplitude(1)), (2, Amplitude(1))])
        b = Superposition.certain("?")
        c = Superposition.certain("?")
        Correlation(a, b, lambda v: v * 10)
        Correlation(b, c, lambda v: f"value-{v}")

        assert c.get_probability("value-10") == pytest.approx(0.5)
        a.measure(rng=lambda: 0.9)
        assert b.collapsed_value == 20
        assert c.collapsed_value == "value-20"

    def test_chain_propagates_updates(self):
        a = Superposition([(1, Amplitude(1)), (2, Amplitude(1))])
        b = Superposition.certain("?")
        c = Superposition.certain("?")
        Correlation(a, b, lambda v: v * 10)
        Correlation(b, c, lambda v: v + 1)

        a.set_amplitude(2, Amplitude.zero())
        assert c.outcomes == (11,)

    def test_cycle_terminates(self):
        a = Superposition([("x", Amplitude(1)), ("y", Amplitude(1))])
        b = Superposition.certain("?")
        Correlation(a, b, lambda v: v)
        Correlation(b, a, lambda v: v)

        a.measure(rng=lambda: 0.1)
        assert a.collapsed_value == "x"
        assert b.collapsed_value == "x"
        assert len(a.measurement_history) == 1


# =====================================================================
# Validation and lifetime
# =====================================================================


class TestCorrelationLifetime:
    """Tests for argument validation and dispose()."""

    def test_same_object_rejected(self, weather):
        with pytest.raises(InvalidArgumentError):
            Correlation(weather, weather, plan_for)

    def test_non_superposition_rejected(self, weather):
        with pytest.raises(InvalidArgumentError):
            Correlation(weather, "plan", plan_for)

    def test_non_callable_mapping_rejected(self, weather):
        with pytest.raises(InvalidArgumentError):
            Correlation(weather, Superposition.certain("?"), {"sunny": "beach"})

    def test_mapping_to_none_rejected(self, weather):
        target = Superposition.certain("?")
        with pytest.raises(InvalidArgumentError):
            Correlation(weather, target, lambda w: None)
        assert weather.correlations == ()

    def test_mapping_to_unhashable_rejected(self, weather):
        with pytest.raises(InvalidArgumentError):
            Correlation(weather, Superposition.certain("?"), lambda w: [w])

    def test_registered_on_both_endpoints(self, weather):
        plan = Superposition.certain("undecided")
        link = Correlation(weather, plan, plan_for)
        assert weather.correlations == (link,)
        assert plan.correlations == (link,)

    def test_dispose_unregisters(self, weather):
        plan = Superposition.certain("undecided")
        link = Correlation(weather, plan, plan_for)
        link.dispose()

        assert not link.is_active
        assert weather.correlations == ()
        assert plan.correlations == ()

        weather.measure(rng=lambda: 0.1)
        assert not plan.is_collapsed

    def test_dispose_is_idempotent(self, weather):
        link = Correlation(weather, Superposition.certain("?"), plan_for)
        link.dispose()
        link.dispose()
        assert "disposed" in repr(link)
