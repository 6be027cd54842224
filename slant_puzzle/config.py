"""Tunable constants for layouts, drags and piece fitting."""

from __future__ import annotations

import copy
from dataclasses import dataclass


@dataclass
class LayoutConfig:
    # pointer distance that still grabs a line
    line_tolerance: float = 20.0
    # smallest edge or corner-to-edge distance a drag may leave in a cell it reshapes
    min_cell_size: float = 10.0
    clamp_iterations: int = 24
    max_fit_scale: float = 1e4
    min_fit_scale: float = 1e-4
    degenerate_eps: float = 1e-9


_LAYOUT_CONFIG = LayoutConfig()


def get_layout_config() -> LayoutConfig:
    return copy.deepcopy(_LAYOUT_CONFIG)


def set_layout_config(config: LayoutConfig) -> None:
    global _LAYOUT_CONFIG
    _LAYOUT_CONFIG = copy.deepcopy(config)


__all__ = ["LayoutConfig", "get_layout_config", "set_layout_config"]
