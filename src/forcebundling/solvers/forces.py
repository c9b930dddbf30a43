from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numba as nb

if TYPE_CHECKING:
    import numpy.typing as npt


def spring_constants(base_lengths: npt.NDArray[np.float64], K: float, P: int) -> npt.NDArray[np.float64]:
    """
    Per-edge spring constant kP = K / (|e| * (P + 1)).

    Args:
        base_lengths: (E, ) straight-line lengths of the edges between their nodes.
        K: Global bundling stiffness.
        P: Number of interior subdivision points.

    Returns:
        (E, ) array of spring constants.
    """
    return K / (base_lengths * (P + 1))


def spring_forces(points: npt.NDArray[np.float64], k_p: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """
    Pull of every interior point toward its two polyline neighbours.

    Args:
        points: (E, P + 2, 2) subdivision points.
        k_p: (E, ) spring constants.

    Returns:
        (E, P + 2, 2) forces, zero on the endpoint rows.
    """
    forces = np.zeros_like(points)
    crnt = points[:, 1:-1]
    forces[:, 1:-1] = (points[:, :-2] - crnt + points[:, 2:] - crnt) * k_p[:, None, None]
    return forces


@nb.jit(cache=True)
def _electrostatic_kernel(
    points: npt.NDArray[np.float64],
    indptr: npt.NDArray[np.int64],
    indices: npt.NDArray[np.int64],
    eps: float,
    inverse_quadratic: bool,
) -> npt.NDArray[np.float64]:
    n_edges = points.shape[0]
    n_points = points.shape[1]
    forces = np.zeros_like(points)

    for e in range(n_edges):
        for i in range(1, n_points - 1):
            px = points[e, i, 0]
            py = points[e, i, 1]
            fx = 0.0
            fy = 0.0
            for k in range(indptr[e], indptr[e + 1]):
                oe = indices[k]
                dx = points[oe, i, 0] - px
                dy = points[oe, i, 1] - py
                if abs(dx) > eps or abs(dy) > eps:
                    dist = np.sqrt(dx * dx + dy * dy)
                    if inverse_quadratic:
                        weight = 1.0 / (dist * dist)
                    else:
                        weight = 1.0 / dist
                    fx += dx * weight
                    fy += dy * weight
            forces[e, i, 0] = fx
            forces[e, i, 1] = fy

    return forces


def electrostatic_forces(
    points: npt.NDArray[np.float64],
    indptr: npt.NDArray[np.int64],
    indices: npt.NDArray[np.int64],
    eps: float,
    inverse_quadratic: bool = False,
) -> npt.NDArray[np.float64]:
    """
    Attraction of every interior point toward the point with the same index
    on each compatible edge.

    The force law is the unit direction scaled by 1/d (or by 1/d^2 when
    `inverse_quadratic` is set). A pair whose separation is within `eps` on
    both axes contributes nothing.

    Args:
        points: (E, P + 2, 2) subdivision points.
        indptr, indices: Compatibility lists in CSR form, see `to_csr`.
        eps: Per-axis separation below which a pair is skipped.
        inverse_quadratic: Select the 1/d^2 law.

    Returns:
        (E, P + 2, 2) forces, zero on the endpoint rows.
    """
    return _electrostatic_kernel(
        np.ascontiguousarray(points, dtype=np.float64),
        indptr,
        indices,
        float(eps),
        bool(inverse_quadratic),
    )


def resulting_forces(
    points: npt.NDArray[np.float64],
    k_p: npt.NDArray[np.float64],
    indptr: npt.NDArray[np.int64],
    indices: npt.NDArray[np.int64],
    S: float,
    eps: float,
    inverse_quadratic: bool = False,
) -> npt.NDArray[np.float64]:
    """
    Displacement S * (spring + electrostatic) for every subdivision point.

    Reads `points` only; the result is a new buffer so every edge sees the
    same pre-iteration snapshot regardless of update order.
    """
    spring = spring_forces(points, k_p)
    electrostatic = electrostatic_forces(points, indptr, indices, eps, inverse_quadratic)
    return S * (spring + electrostatic)
