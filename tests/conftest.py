"""Pytest configuration and fixtures for Open Quantum tests."""

from __future__ import annotations

import math
import os
import random

import pytest

from openquantum.config.settings import reset_settings


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    """Give every test default settings, unaffected by the environment."""
    for name in list(os.environ):
        if name.startswith("OPENQUANTUM_"):
            monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def rng():
    """A seeded random source for reproducible measurements."""
    return random.Random(1234)


@pytest.fixture
def coin():
    """An equal two-outcome superposition."""
    from openquantum import Amplitude, Superposition

    half = 1 / math.sqrt(2)
    return Superposition([("heads", Amplitude(half, 0)), ("tails", Amplitude(half, 0))])
