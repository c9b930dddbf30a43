"""
Edge compatibility measures.

Two edges attract each other during bundling only when they are similar
enough. Similarity is the product of four sub-scores in [0, 1]:

- angle: parallel or anti-parallel edges score 1, perpendicular ones 0,
- scale: penalises a large length disparity,
- position: penalises distant midpoints,
- visibility: whether each edge spans the other when projected onto it.

The scalar functions score one pair of `Point` segments. The array
functions score all pairs of an `EdgeSet` at once, in row blocks so memory
stays bounded for large graphs.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np
from scipy.spatial.distance import cdist

from forcebundling.model.geometry_primitives import Point
from forcebundling.model.geometry_utils import (
    distance_array,
    edge_as_vector,
    edge_length,
    edge_midpoint,
    euclidean_distance,
    midpoint_array,
    project_point_on_line,
    project_points_on_lines,
    vector_dot_product,
)

if TYPE_CHECKING:
    import numpy.typing as npt

    from forcebundling.model.graph import EdgeSet

logger = logging.getLogger(__name__)

Segment = tuple[Point, Point]

# Rows of the pairwise score matrix evaluated per numpy pass
DEFAULT_BLOCK_SIZE = 256


def angle_compatibility(p: Segment, q: Segment) -> float:
    return abs(vector_dot_product(edge_as_vector(*p), edge_as_vector(*q)) / (edge_length(*p) * edge_length(*q)))


def scale_compatibility(p: Segment, q: Segment) -> float:
    len_p = edge_length(*p)
    len_q = edge_length(*q)
    lavg = (len_p + len_q) / 2.0
    return 2.0 / (lavg / min(len_p, len_q) + max(len_p, len_q) / lavg)


def position_compatibility(p: Segment, q: Segment) -> float:
    lavg = (edge_length(*p) + edge_length(*q)) / 2.0
    return lavg / (lavg + euclidean_distance(edge_midpoint(*p), edge_midpoint(*q)))


def edge_visibility(p: Segment, q: Segment) -> float:
    """
    How much of `p` is covered by `q` projected onto the line of `p`.

    Returns 0 when the projection of `q` collapses to a single point.
    """
    i0 = project_point_on_line(q[0], *p)
    i1 = project_point_on_line(q[1], *p)
    span = euclidean_distance(i0, i1)
    if span == 0.0:
        return 0.0
    mid_i = edge_midpoint(i0, i1)
    mid_p = edge_midpoint(*p)
    return max(0.0, 1.0 - 2.0 * euclidean_distance(mid_p, mid_i) / span)


def visibility_compatibility(p: Segment, q: Segment) -> float:
    return min(edge_visibility(p, q), edge_visibility(q, p))


def compatibility_score(p: Segment, q: Segment) -> float:
    return (angle_compatibility(p, q) * scale_compatibility(p, q) *
            position_compatibility(p, q) * visibility_compatibility(p, q))


def are_compatible(p: Segment, q: Segment, threshold: float) -> bool:
    return compatibility_score(p, q) >= threshold


# ------------------------------
# All-pairs evaluation
# ------------------------------

def _visibility_block(
    p_src: npt.NDArray[np.float64],
    p_tgt: npt.NDArray[np.float64],
    q_src: npt.NDArray[np.float64],
    q_tgt: npt.NDArray[np.float64],
) -> npt.NDArray[np.float64]:
    """
    Visibility of every q edge (columns) from every p edge (rows).

    Args:
        p_src, p_tgt: (B, 2) endpoints of the edges whose lines are projected onto.
        q_src, q_tgt: (E, 2) endpoints of the edges being projected.

    Returns:
        (B, E) array of `edge_visibility(p, q)` values.
    """
    line_src = p_src[:, None, :]
    line_tgt = p_tgt[:, None, :]
    i0 = project_points_on_lines(q_src[None, :, :], line_src, line_tgt)
    i1 = project_points_on_lines(q_tgt[None, :, :], line_src, line_tgt)

    span = distance_array(i0, i1)
    offset = distance_array(midpoint_array(p_src, p_tgt)[:, None, :], midpoint_array(i0, i1))

    with np.errstate(divide="ignore", invalid="ignore"):
        visibility = np.maximum(0.0, 1.0 - 2.0 * offset / span)
    return np.where(span > 0.0, visibility, 0.0)


def compatibility_block(edge_set: EdgeSet, rows: slice) -> npt.NDArray[np.float64]:
    """
    Pairwise compatibility scores of the edges in `rows` against all edges.

    The diagonal entries falling inside the block are set to zero.
    """
    sources, targets = edge_set.sources, edge_set.targets
    vectors = edge_set.vectors
    lengths = edge_set.lengths
    midpoints = edge_set.midpoints

    b_src, b_tgt = sources[rows], targets[rows]
    b_vec, b_len, b_mid = vectors[rows], lengths[rows], midpoints[rows]

    len_i = b_len[:, None]
    len_j = lengths[None, :]

    angle = np.abs(b_vec @ vectors.T) / (len_i * len_j)

    lavg = (len_i + len_j) / 2.0
    scale = 2.0 / (lavg / np.minimum(len_i, len_j) + np.maximum(len_i, len_j) / lavg)

    position = lavg / (lavg + cdist(b_mid, midpoints))

    visibility = np.minimum(
        _visibility_block(b_src, b_tgt, sources, targets),
        _visibility_block(sources, targets, b_src, b_tgt).T,
    )

    scores = angle * scale * position * visibility

    start = rows.start or 0
    block_rows = np.arange(scores.shape[0])
    scores[block_rows, block_rows + start] = 0.0
    return scores


def compatibility_matrix(edge_set: EdgeSet, block_size: int = DEFAULT_BLOCK_SIZE) -> npt.NDArray[np.float64]:
    """Full symmetric (E, E) score matrix with a zero diagonal."""
    n = len(edge_set)
    scores = np.zeros((n, n), dtype=np.float64)
    for start in range(0, n, block_size):
        rows = slice(start, min(start + block_size, n))
        scores[rows] = compatibility_block(edge_set, rows)
    return scores


def compute_compatibility_lists(
    edge_set: EdgeSet,
    threshold: float,
    block_size: int = DEFAULT_BLOCK_SIZE,
) -> list[npt.NDArray[np.int64]]:
    """
    For each edge, the ascending indices of the edges compatible with it.

    Each unordered pair is decided once, from the upper triangle, and
    recorded for both edges, so the lists are symmetric.
    """
    n = len(edge_set)
    pair_i: list[npt.NDArray[np.int64]] = []
    pair_j: list[npt.NDArray[np.int64]] = []

    for start in range(0, n, block_size):
        stop = min(start + block_size, n)
        scores = compatibility_block(edge_set, slice(start, stop))
        rows, cols = np.nonzero(scores >= threshold)
        rows = rows + start
        upper = cols > rows
        pair_i.append(rows[upper])
        pair_j.append(cols[upper])

    compatible = np.zeros((n, n), dtype=bool)
    if n:
        i = np.concatenate(pair_i)
        j = np.concatenate(pair_j)
        compatible[i, j] = True
        compatible[j, i] = True

    lists = [np.flatnonzero(row).astype(np.int64) for row in compatible]

    n_pairs = int(compatible.sum()) // 2
    logger.debug(f"Compatibility: {n_pairs} compatible pair(s) among {n} edge(s) at threshold {threshold}.")
    return lists


def to_csr(lists: list[npt.NDArray[np.int64]]) -> tuple[npt.NDArray[np.int64], npt.NDArray[np.int64]]:
    """Pack per-edge index lists into (indptr, indices) arrays for the force kernels."""
    indptr = np.zeros(len(lists) + 1, dtype=np.int64)
    if lists:
        indptr[1:] = np.cumsum([len(lst) for lst in lists])
        indices = np.concatenate(lists).astype(np.int64)
    else:
        indices = np.empty(0, dtype=np.int64)
    return indptr, indices
