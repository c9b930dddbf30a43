"""
Geometry kernel: vector arithmetic, distances, midpoints and line projection.

Every function exists in two flavours. The scalar ones take `Point`
primitives and are used for one-off pair queries; the `*_array` ones take
numpy arrays whose last axis holds (x, y) and broadcast over the leading
axes, which is what the compatibility engine uses to score all edge pairs
at once.
"""
from __future__ import annotations

from typing import Sequence, TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from numpy import typing as npt

from forcebundling.model.geometry_primitives import Point, Vector


def vector_dot_product(p: Vector, q: Vector) -> float:
    return p.dot(q)


def edge_as_vector(source: Point, target: Point) -> Vector:
    """Direction of the edge, target minus source."""
    return Vector(target.x - source.x, target.y - source.y)


def euclidean_distance(p: Point, q: Point) -> float:
    return p.distance_to(q)


def edge_length(source: Point, target: Point) -> float:
    """Length of an edge given by node positions or by any pair of points."""
    return euclidean_distance(source, target)


def edge_midpoint(source: Point, target: Point) -> Point:
    return Point((source.x + target.x) / 2.0, (source.y + target.y) / 2.0)


def project_point_on_line(p: Point, source: Point, target: Point) -> Point:
    """
    Orthogonal projection of `p` onto the infinite line through source->target.

    Args:
        p: The point to project.
        source: First point of the line.
        target: Second point of the line. Must differ from `source`.

    Returns:
        The foot of the perpendicular from `p` onto the line.
    """
    length_sq = (target.x - source.x) ** 2 + (target.y - source.y) ** 2
    r = ((source.y - p.y) * (source.y - target.y) - (source.x - p.x) * (target.x - source.x)) / length_sq
    return Point(source.x + r * (target.x - source.x), source.y + r * (target.y - source.y))


def polyline_length(points: Sequence[Point]) -> float:
    """Total path length of an ordered sequence of points."""
    return sum(euclidean_distance(a, b) for a, b in zip(points[:-1], points[1:]))


# ------------------------------
# Vectorised counterparts
# ------------------------------

def distance_array(p: npt.NDArray[np.float64], q: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    return np.hypot(p[..., 0] - q[..., 0], p[..., 1] - q[..., 1])


def midpoint_array(source: npt.NDArray[np.float64], target: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    return (source + target) / 2.0


def project_points_on_lines(
    p: npt.NDArray[np.float64],
    source: npt.NDArray[np.float64],
    target: npt.NDArray[np.float64],
) -> npt.NDArray[np.float64]:
    """
    Broadcasting version of `project_point_on_line`.

    Args:
        p: (..., 2) points to project.
        source: (..., 2) first points of the lines.
        target: (..., 2) second points of the lines.

    Returns:
        Array with the broadcast shape of the inputs holding the projections.
    """
    dx = target[..., 0] - source[..., 0]
    dy = target[..., 1] - source[..., 1]
    length_sq = dx * dx + dy * dy
    r = ((source[..., 1] - p[..., 1]) * (-dy) - (source[..., 0] - p[..., 0]) * dx) / length_sq
    return np.stack((source[..., 0] + r * dx, source[..., 1] + r * dy), axis=-1)


def polyline_lengths(points: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """Path lengths of a stack of polylines with shape (E, N, 2)."""
    segments = np.diff(points, axis=-2)
    return np.hypot(segments[..., 0], segments[..., 1]).sum(axis=-1)
