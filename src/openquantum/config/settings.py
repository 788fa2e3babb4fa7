"""
Configuration settings for Open Quantum.

Uses Pydantic Settings for environment variable and file-based configuration.
Only tunable defaults live here (thresholds, loop guards, logging).  The
numerical epsilons that define a valid superposition are invariants and stay
as constants in :mod:`openquantum.core.superposition`.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pythonjsonlogger import jsonlogger

from openquantum.exceptions import ConfigurationError


class ThresholdSettings(BaseSettings):
    """Default thresholds used by measurement diagnostics and operators."""

    model_config = SettingsConfigDict(
        env_prefix="OPENQUANTUM_THRESHOLDS_",
        env_file=".env",
        extra="ignore",
    )

    # Superposition.is_near_classical
    classical: float = Field(default=0.999999, gt=0.0, le=1.0)

    # analyze_interference ratio bands
    constructive: float = Field(default=1.2, gt=0.0)
    destructive: float = Field(default=0.8, ge=0.0)

    # gates.amplify
    amplify_factor: float = Field(default=1.5, gt=0.0)

    @model_validator(mode="after")
    def _check_bands(self) -> ThresholdSettings:
        if self.destructive >= self.constructive:
            raise ValueError("destructive threshold must be below constructive threshold")
        return self


class LoopSettings(BaseSettings):
    """Guards for the superposed loop combinators."""

    model_config = SettingsConfigDict(
        env_prefix="OPENQUANTUM_LOOPS_",
        env_file=".env",
        extra="ignore",
    )

    max_while_iterations: int = Field(default=100, ge=0)


class EnsembleSettings(BaseSettings):
    """Defaults for turning model responses into superpositions."""

    model_config = SettingsConfigDict(
        env_prefix="OPENQUANTUM_ENSEMBLE_",
        env_file=".env",
        extra="ignore",
    )

    # Confidence assumed when a response does not report one
    default_confidence: float = Field(default=0.8, ge=0.0, le=1.0)


class OpenQuantumSettings(BaseSettings):
    """
    Main configuration for Open Quantum.

    Supports loading from:
    - Environment variables (OPENQUANTUM_* prefix)
    - .env file
    - YAML/JSON config files
    """

    model_config = SettingsConfigDict(
        env_prefix="OPENQUANTUM_",
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    environment: str = "development"
    debug: bool = False

    # Nested configurations
    thresholds: ThresholdSettings = Field(default_factory=ThresholdSettings)
    loops: LoopSettings = Field(default_factory=LoopSettings)
    ensemble: EnsembleSettings = Field(default_factory=EnsembleSettings)

    # Logging
    log_level: str = "INFO"
    log_format: Literal["text", "json"] = "text"

    @classmethod
    def from_file(cls, path: str | Path) -> OpenQuantumSettings:
        """Load settings from a YAML or JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        content = path.read_text()

        if path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(content) or {}
        elif path.suffix == ".json":
            data = json.loads(content)
        else:
            raise ConfigurationError(
                f"Unsupported config file format: {path.suffix}",
                details={"path": str(path)},
            )

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Config file must contain a mapping at the top level: {path}",
                details={"path": str(path)},
            )

        return cls(**data)

    def to_dict(self) -> dict[str, Any]:
        """Convert settings to a plain dictionary."""
        return self.model_dump()


# Global settings instance (lazy-loaded)
_settings: OpenQuantumSettings | None = None


def get_settings() -> OpenQuantumSettings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = OpenQuantumSettings()
    return _settings


def configure(
    settings: OpenQuantumSettings | None = None,
    *,
    classical_threshold: float | None = None,
    amplify_factor: float | None = None,
    max_while_iterations: int | None = None,
    log_level: str | None = None,
    debug: bool | None = None,
) -> OpenQuantumSettings:
    """
    Configure Open Quantum defaults.

    Simple usage - override a single default:
        import openquantum
        openquantum.configure(max_while_iterations=500)

    Full settings:
        from openquantum.config import OpenQuantumSettings
        openquantum.configure(settings=OpenQuantumSettings(...))

    Args:
        settings: Full settings object (optional)
        classical_threshold: Default for ``Superposition.is_near_classical``
        amplify_factor: Default factor for ``gates.amplify``
        max_while_iterations: Default guard for ``quantum_while``
        log_level: Level applied by ``setup_logging``
        debug: Enable debug mode

    Returns:
        The active settings instance.
    """
    global _settings

    if settings is not None:
        _settings = settings
        return _settings

    current = get_settings()
    thresholds: dict[str, Any] = {}
    if classical_threshold is not None:
        thresholds["classical"] = classical_threshold
    if amplify_factor is not None:
        thresholds["amplify_factor"] = amplify_factor

    update: dict[str, Any] = {}
    if thresholds:
        update["thresholds"] = ThresholdSettings(
            **{**current.thresholds.model_dump(), **thresholds}
        )
    if max_while_iterations is not None:
        update["loops"] = LoopSettings(max_while_iterations=max_while_iterations)
    if log_level is not None:
        update["log_level"] = log_level
    if debug is not None:
        update["debug"] = debug

    if update:
        _settings = current.model_copy(update=update)
    return get_settings()


def reset_settings() -> None:
    """Drop the global settings so the next ``get_settings`` reloads them."""
    global _settings
    _settings = None


def _json_formatter() -> logging.Formatter:
    return jsonlogger.JsonFormatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s",
        rename_fields={"asctime": "time", "levelname": "level", "name": "logger"},
    )


def setup_logging(settings: OpenQuantumSettings | None = None) -> logging.Logger:
    """
    Attach a stream handler to the ``openquantum`` logger.

    Level and format come from ``log_level`` / ``log_format``.  Calling it
    again replaces the handler installed by the previous call.

    Args:
        settings: Settings to read from (defaults to the global instance).

    Returns:
        The configured package logger.
    """
    settings = settings or get_settings()
    logger = logging.getLogger("openquantum")

    for handler in list(logger.handlers):
        if getattr(handler, "_openquantum", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler._openquantum = True  # type: ignore[attr-defined]
    if settings.log_format == "json":
        handler.setFormatter(_json_formatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
        )

    logger.addHandler(handler)
    logger.setLevel(settings.log_level.upper())
    return logger
