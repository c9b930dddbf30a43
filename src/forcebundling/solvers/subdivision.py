"""
Subdivision points and arc-length resampling.

Every edge is represented by a polyline `[source, p_1, ..., p_P, target]`.
The store keeps all polylines of a run in one (E, P + 2, 2) float64 array;
this works because P is the same for every edge within a cycle.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np
import numba as nb

from forcebundling.model.geometry_primitives import Point

if TYPE_CHECKING:
    import numpy.typing as npt

    from forcebundling.model.graph import EdgeSet

logger = logging.getLogger(__name__)


@nb.jit(cache=True)
def _resample_kernel(
    points: npt.NDArray[np.float64],
    sources: npt.NDArray[np.float64],
    targets: npt.NDArray[np.float64],
    P: int,
) -> npt.NDArray[np.float64]:
    """
    Walk each polyline and place P points at equal arc-length spacing.

    Args:
        points: (E, N, 2) current polylines, N >= 2.
        sources: (E, 2) node positions written to the first row.
        targets: (E, 2) node positions written to the last row.
        P: Number of interior points of the output.

    Returns:
        (E, P + 2, 2) resampled polylines.
    """
    n_edges = points.shape[0]
    n_old = points.shape[1]
    out = np.empty((n_edges, P + 2, 2), dtype=np.float64)
    seg_len = np.empty(n_old - 1, dtype=np.float64)

    for e in range(n_edges):
        total = 0.0
        for i in range(1, n_old):
            dx = points[e, i, 0] - points[e, i - 1, 0]
            dy = points[e, i, 1] - points[e, i - 1, 1]
            seg_len[i - 1] = np.sqrt(dx * dx + dy * dy)
            total += seg_len[i - 1]
        step = total / (P + 1)

        out[e, 0, 0] = sources[e, 0]
        out[e, 0, 1] = sources[e, 1]
        out[e, P + 1, 0] = targets[e, 0]
        out[e, P + 1, 1] = targets[e, 1]

        # `walked` is the arc length up to the start of segment i-1 -> i
        i = 1
        walked = 0.0
        for k in range(1, P + 1):
            target = k * step
            while i < n_old - 1 and walked + seg_len[i - 1] < target:
                walked += seg_len[i - 1]
                i += 1
            length = seg_len[i - 1]
            t = (target - walked) / length if length > 0.0 else 0.0
            if t < 0.0:
                t = 0.0
            elif t > 1.0:
                t = 1.0
            out[e, k, 0] = points[e, i - 1, 0] + t * (points[e, i, 0] - points[e, i - 1, 0])
            out[e, k, 1] = points[e, i - 1, 1] + t * (points[e, i, 1] - points[e, i - 1, 1])

    return out


def straight_lines(edge_set: EdgeSet) -> npt.NDArray[np.float64]:
    """(E, 2, 2) polylines made of the two node positions only."""
    return np.stack((edge_set.sources, edge_set.targets), axis=1)


def resample(points: npt.NDArray[np.float64], edge_set: EdgeSet, P: int) -> npt.NDArray[np.float64]:
    """
    Re-derive exactly P evenly spaced interior points along each polyline.

    The existing bent shape is followed, not the straight line between the
    nodes. The endpoints are copied from the node positions.
    """
    if P < 1:
        raise ValueError(f"Number of subdivision points must be >= 1, got {P}.")
    return _resample_kernel(
        np.ascontiguousarray(points, dtype=np.float64),
        edge_set.sources,
        edge_set.targets,
        int(P),
    )


def initial_subdivisions(edge_set: EdgeSet, P: int = 1) -> npt.NDArray[np.float64]:
    """
    Seed polylines for the first cycle.

    With P == 1 this is `[source, midpoint, target]`; otherwise the straight
    edge is resampled to P interior points.
    """
    if P == 1:
        return np.stack((edge_set.sources, edge_set.midpoints, edge_set.targets), axis=1)
    return resample(straight_lines(edge_set), edge_set, P)


class SubdivisionStore:
    """
    Owns the subdivision points of one run.

    Attributes:
        edge_set: The filtered edges the polylines belong to.
        points: (E, P + 2, 2) array, mutated in place by `apply`.
    """

    def __init__(self, edge_set: EdgeSet, P: int = 1) -> None:
        self.edge_set = edge_set
        self.points: npt.NDArray[np.float64] = initial_subdivisions(edge_set, P)

    @property
    def subdivisions(self) -> int:
        """Current number of interior points P."""
        return self.points.shape[1] - 2

    def apply(self, displacements: npt.NDArray[np.float64]) -> None:
        """Add a buffered displacement field to the interior points."""
        self.points[:, 1:-1] += displacements[:, 1:-1]

    def update_edge_divisions(self, P: int) -> None:
        """Rebuild the store with P interior points per edge."""
        if P == 1:
            self.points = initial_subdivisions(self.edge_set, 1)
        else:
            self.points = resample(self.points, self.edge_set, P)
        logger.debug(f"Resampled {len(self.edge_set)} edge(s) to {P} subdivision point(s).")

    def polyline(self, e_idx: int) -> list[Point]:
        return [Point(x=float(x), y=float(y)) for x, y in self.points[e_idx]]
