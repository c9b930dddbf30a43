"""
Configuration & Defaults
========================
This module serves as the central registry for the bundling parameters.

Why is this file needed?
------------------------
1. Single source: Every default of the simulation lives here instead of being
   scattered through the solvers.
2. Snapshot semantics: `BundlingConfig` is an immutable value object. The
   solver reads it once at the start of a run, so changing parameters
   afterwards never affects a run in progress.

Exports:
    BundlingConfig: The parameter set of one run.
    EPS (float): Distance below which electrostatic contributions are skipped.
    suggest_step_size: Step-size heuristic based on the node coordinate scale.
"""
from __future__ import annotations

from dataclasses import dataclass, replace, asdict
import logging
import math
import numbers
from typing import Any, Hashable, Mapping

from forcebundling.model.graph import parse_nodes

logger = logging.getLogger(__name__)

# Global Constants
DEFAULT_BUNDLING_STIFFNESS: float = 0.1   # K
DEFAULT_STEP_SIZE: float = 0.1            # S_initial
DEFAULT_SUBDIVISION_SEED: int = 1         # P_initial
DEFAULT_SUBDIVISION_RATE: float = 2       # P_rate
DEFAULT_CYCLES: int = 4                   # C
DEFAULT_ITERATIONS: float = 90            # I_initial
DEFAULT_ITERATIONS_RATE: float = 1.0 / 3.0  # I_rate
DEFAULT_COMPATIBILITY_THRESHOLD: float = 0.6
EPS: float = 1e-6

# Divisor applied to the mean absolute coordinate by `suggest_step_size`
STEP_SIZE_SCALE_DIVISOR: float = 1000.0


@dataclass(frozen=True)
class BundlingConfig:
    """
    Parameters of the force-directed edge bundling schedule.

    Attributes:
        bundling_stiffness: K, global spring constant controlling edge stiffness.
        step_size: S_initial, displacement step of the first cycle. Halved after each cycle.
        subdivision_points_seed: P_initial, interior points per edge in the first cycle.
        subdivision_rate: P_rate, multiplier applied to the point count after each cycle.
        cycles: C, number of refinement cycles.
        iterations: I_initial, force iterations in the first cycle. May be fractional.
        iterations_rate: I_rate, multiplier applied to the iteration count after each cycle.
        compatibility_threshold: Minimum pairwise score for two edges to attract each other.
        eps: Per-axis distance below which an electrostatic pair is ignored.
        inverse_quadratic: Use 1/d^2 instead of the default 1/d electrostatic law.
    """
    bundling_stiffness: float = DEFAULT_BUNDLING_STIFFNESS
    step_size: float = DEFAULT_STEP_SIZE
    subdivision_points_seed: int = DEFAULT_SUBDIVISION_SEED
    subdivision_rate: float = DEFAULT_SUBDIVISION_RATE
    cycles: int = DEFAULT_CYCLES
    iterations: float = DEFAULT_ITERATIONS
    iterations_rate: float = DEFAULT_ITERATIONS_RATE
    compatibility_threshold: float = DEFAULT_COMPATIBILITY_THRESHOLD
    eps: float = EPS
    inverse_quadratic: bool = False

    def __post_init__(self) -> None:
        for name in ("bundling_stiffness", "step_size", "subdivision_rate", "iterations",
                     "iterations_rate", "compatibility_threshold", "eps",
                     "subdivision_points_seed", "cycles"):
            value = getattr(self, name)
            if not isinstance(value, numbers.Real) or not math.isfinite(value):
                raise ValueError(f"'{name}' must be a finite number, got {value!r}.")

        if int(self.subdivision_points_seed) != self.subdivision_points_seed or self.subdivision_points_seed < 1:
            raise ValueError(f"'subdivision_points_seed' must be an integer >= 1, got {self.subdivision_points_seed!r}.")
        if int(self.cycles) != self.cycles or self.cycles < 0:
            raise ValueError(f"'cycles' must be an integer >= 0, got {self.cycles!r}.")
        if self.iterations < 0:
            raise ValueError(f"'iterations' must be >= 0, got {self.iterations!r}.")
        if self.subdivision_rate <= 0:
            raise ValueError(f"'subdivision_rate' must be positive, got {self.subdivision_rate!r}.")
        if self.iterations_rate <= 0:
            raise ValueError(f"'iterations_rate' must be positive, got {self.iterations_rate!r}.")
        if not 0.0 <= self.compatibility_threshold <= 1.0:
            raise ValueError(f"'compatibility_threshold' must lie in [0, 1], got {self.compatibility_threshold!r}.")
        if self.eps < 0:
            raise ValueError(f"'eps' must be >= 0, got {self.eps!r}.")

        # Normalise integral counts so downstream code can rely on ints
        object.__setattr__(self, "subdivision_points_seed", int(self.subdivision_points_seed))
        object.__setattr__(self, "cycles", int(self.cycles))

    def with_options(self, **changes: Any) -> BundlingConfig:
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def suggest_step_size(nodes: Mapping[Hashable, Any]) -> float:
    """
    Step size matching the coordinate scale of the nodes.

    Averages the mean absolute x and the mean absolute y coordinate and
    divides by 1000, so the first cycle moves points by a small fraction of
    the drawing extent whatever units the caller uses.
    """
    points = parse_nodes(nodes)
    if not points:
        return DEFAULT_STEP_SIZE
    n = len(points)
    x_scale = sum(abs(p.x) for p in points.values()) / n
    y_scale = sum(abs(p.y) for p in points.values()) / n
    scale = (x_scale + y_scale) / 2.0
    if scale == 0.0:
        logger.warning("All nodes sit at the origin; falling back to the default step size.")
        return DEFAULT_STEP_SIZE
    return scale / STEP_SIZE_SCALE_DIVISOR
