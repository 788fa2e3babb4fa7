"""Configuration module for Open Quantum."""

from openquantum.config.settings import (
    EnsembleSettings,
    LoopSettings,
    OpenQuantumSettings,
    ThresholdSettings,
    configure,
    get_settings,
    reset_settings,
    setup_logging,
)

__all__ = [
    "OpenQuantumSettings",
    "ThresholdSettings",
    "LoopSettings",
    "EnsembleSettings",
    "configure",
    "get_settings",
    "reset_settings",
    "setup_logging",
]
