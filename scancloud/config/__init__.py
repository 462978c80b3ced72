"""Configuration loading utilities for scancloud."""

from .schema import (
    IntegratorConfig,
    ScenarioConfig,
    load_config,
)

__all__ = ["IntegratorConfig", "ScenarioConfig", "load_config"]
