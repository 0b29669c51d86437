# fleetview/smoothing.py
# Presentation-only easing of a vehicle marker toward its resolved position.
# Never feed the smoothed position back into business logic: use the resolver's output for that.
from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Dict, Optional
import math

from .models import DisplayConfig, Position

MIN_SPEED = 0.0     # exclusive
MAX_SPEED = 10.0    # inclusive
DEFAULT_SPEED = 0.3


def linear(f: float) -> float:
    return f

def ease_in_out(f: float) -> float:
    return 2 * f * f if f < 0.5 else 1 - (-2 * f + 2) ** 3 / 2

def ease_out(f: float) -> float:
    return 1 - (1 - f) ** 3


EASINGS: Dict[str, Callable[[float], float]] = {
    "linear": linear,
    "ease_in_out": ease_in_out,
    "ease_out": ease_out,
}


@dataclass
class SmoothingConfig:
    speed: float = DEFAULT_SPEED          # fraction of the remaining distance covered per reference frame
    easing: str = "ease_out"              # key of EASINGS
    frame_interval: float = 0.05          # reference frame in seconds (50 ms)
    threshold: float = 0.1                # snap to target below this distance (grid units)

    @classmethod
    def from_display(cls, cfg: DisplayConfig) -> "SmoothingConfig":
        return cls(speed=cfg.animation_speed, easing=cfg.easing,
                   frame_interval=cfg.frame_interval_ms / 1000.0, threshold=cfg.movement_threshold)


def smooth(target: Position, previous: Optional[Position], dt: float,
           speed: float = DEFAULT_SPEED, easing: str = "ease_out",
           frame_interval: float = 0.05, threshold: float = 0.1) -> Position:
    """
    Advance the displayed position one step toward `target`.
    `previous` is the position displayed last frame; the caller keeps it (None on the first frame).
    `dt` is wall-clock seconds since that frame, independent of simulation time.
    The result always lies on the segment previous→target, so it stays inside any convex bounds both ends are in.
    """
    if not (MIN_SPEED < speed <= MAX_SPEED):
        raise ValueError(f"speed must be in ({MIN_SPEED}, {MAX_SPEED}], got {speed}")
    if easing not in EASINGS:
        raise ValueError(f"unknown easing '{easing}', use one of {sorted(EASINGS)}")
    if frame_interval <= 0:
        raise ValueError("frame_interval must be positive")

    if previous is None:
        return target
    if math.hypot(target.x - previous.x, target.y - previous.y) < threshold:
        return target

    factor = min(1.0, max(0.0, speed * max(dt, 0.0) / frame_interval))
    k = min(1.0, max(0.0, EASINGS[easing](factor)))
    return Position(x=previous.x + (target.x - previous.x) * k,
                    y=previous.y + (target.y - previous.y) * k)


def smooth_with(cfg: SmoothingConfig, target: Position, previous: Optional[Position], dt: float) -> Position:
    return smooth(target, previous, dt, speed=cfg.speed, easing=cfg.easing,
                  frame_interval=cfg.frame_interval, threshold=cfg.threshold)
