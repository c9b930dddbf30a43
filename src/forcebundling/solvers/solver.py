from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Callable, Optional

import numpy as np

from forcebundling.config import BundlingConfig
from forcebundling.solvers.compatibility import compute_compatibility_lists, to_csr
from forcebundling.solvers.forces import resulting_forces, spring_constants
from forcebundling.solvers.subdivision import SubdivisionStore

if TYPE_CHECKING:
    import numpy.typing as npt

    from forcebundling.model.graph import EdgeSet

logger = logging.getLogger(__name__)

CycleCallback = Callable[[int, "npt.NDArray[np.float64]"], None]


class BundlingSolver:
    """
    Class for the force-directed edge bundling schedule.
    """

    def __init__(
        self,
        edge_set: EdgeSet,
        config: Optional[BundlingConfig] = None,
    ) -> None:
        """
        Initialize the solver with a filtered edge set.

        Args:
            edge_set: The edges to bundle. Must not contain self-loops.
            config: Parameters of the run. Defaults are used when omitted.
        """
        self.edge_set = edge_set
        self.config = config or BundlingConfig()

        self.store: Optional[SubdivisionStore] = None
        self.compatibility_lists: list[npt.NDArray[np.int64]] = []

    def initialize(self) -> None:
        """Seed the subdivisions and compute compatibility lists once."""
        cfg = self.config
        self.store = SubdivisionStore(self.edge_set, P=cfg.subdivision_points_seed)
        self.compatibility_lists = compute_compatibility_lists(
            self.edge_set,
            threshold=cfg.compatibility_threshold,
        )

    def iterate(
        self,
        S: float,
        k_p: npt.NDArray[np.float64],
        indptr: npt.NDArray[np.int64],
        indices: npt.NDArray[np.int64],
    ) -> None:
        """One synchronous sweep: compute all displacements, then apply them."""
        displacements = resulting_forces(
            self.store.points,
            k_p=k_p,
            indptr=indptr,
            indices=indices,
            S=S,
            eps=self.config.eps,
            inverse_quadratic=self.config.inverse_quadratic,
        )
        self.store.apply(displacements)

    def solve(self, on_cycle: Optional[CycleCallback] = None) -> npt.NDArray[np.float64]:
        """
        Run all cycles and return the final polylines.

        Args:
            on_cycle: Optional observer called as `on_cycle(cycle, points)` after
                each cycle has been resampled. Receives a copy of the store.

        Returns:
            (E, P + 2, 2) array of bundled polylines.
        """
        cfg = self.config
        S = cfg.step_size
        I = cfg.iterations
        P = cfg.subdivision_points_seed

        self.initialize()
        indptr, indices = to_csr(self.compatibility_lists)
        base_lengths = self.edge_set.lengths

        logger.info(f"Bundling {len(self.edge_set)} edge(s) over {cfg.cycles} cycle(s).")

        for cycle in range(cfg.cycles):
            n_iter = math.ceil(I)
            k_p = spring_constants(base_lengths, cfg.bundling_stiffness, P)
            for iteration in range(n_iter):
                self.iterate(S, k_p, indptr, indices)

            logger.info(f"Cycle {cycle + 1}/{cfg.cycles}: P={P}, S={S:.6g}, iterations={n_iter}")

            # Prepare for next cycle
            S = S / 2.0
            P = max(1, int(round(P * cfg.subdivision_rate)))
            I = I * cfg.iterations_rate

            self.store.update_edge_divisions(P)

            if on_cycle is not None:
                on_cycle(cycle, self.store.points.copy())

        logger.info(f"Bundling finished with {self.store.subdivisions} subdivision point(s) per edge.")
        return self.store.points
