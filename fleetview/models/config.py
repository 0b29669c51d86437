# Defines the dashboard configuration: operating bounds, animation easing and validation policy.

import json                                             # Config files are plain JSON
from pathlib import Path
from typing import Literal, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError  # Pydantic BaseModel and aliases

from .position import Bounds

EasingName = Literal["linear", "ease_in_out", "ease_out"]


class ConfigError(ValueError):
    """Raised when a configuration file is missing or fails validation."""


class DisplayConfig(BaseModel):                         # Model for dashboard configuration
    model_config = ConfigDict(extra="forbid")           # A misspelt key fails loudly instead of falling back to defaults

    bounds: Bounds = Field(default_factory=Bounds)      # Valid operating area, [0,70] x [0,50] grid units by default
    animation_speed: float = Field(                     # Cosmetic easing rate, never affects resolved positions
        0.3, gt=0.0, le=10.0, validation_alias=AliasChoices("animation_speed", "animationSpeed"))
    easing: EasingName = "ease_out"                     # Easing curve used by the smoothing layer
    frame_interval_ms: int = Field(                     # Reference wall-clock tick of the smoothing layer (20 fps)
        50, gt=0, validation_alias=AliasChoices("frame_interval_ms", "frameIntervalMs"))
    movement_threshold: float = Field(                  # Below this distance the smoothed marker snaps to target
        0.1, ge=0.0, validation_alias=AliasChoices("movement_threshold", "movementThreshold"))
    strict_mode: bool = Field(                          # Reject records with out-of-bounds data instead of repairing
        False, validation_alias=AliasChoices("strict_mode", "strictMode"))
    log_corrections: bool = Field(                      # Emit a warning log line per corrected coordinate
        True, validation_alias=AliasChoices("log_corrections", "logCorrections"))
    history_size: int = Field(                          # Entries kept by CorrectionHistory
        50, ge=1, validation_alias=AliasChoices("history_size", "historySize"))


def load_config(path: Union[str, Path]) -> DisplayConfig:
    p = Path(path)
    if not p.exists():
        raise ConfigError(f"Config file not found: {p}")
    try:
        with p.open(encoding="utf-8") as f:
            raw = json.load(f)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Failed to parse config '{p}': {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError("Top-level config must be an object.")
    try:
        return DisplayConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config '{p}': {exc}") from exc
