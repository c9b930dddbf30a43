import math

import numpy as np
import pytest

from forcebundling.model.geometry_primitives import Point, Vector
from forcebundling.model.geometry_utils import (
    edge_as_vector,
    edge_length,
    edge_midpoint,
    euclidean_distance,
    polyline_length,
    polyline_lengths,
    project_point_on_line,
    project_points_on_lines,
    vector_dot_product,
)


def test_vector_dot_product():
    assert vector_dot_product(Vector(1.0, 2.0), Vector(3.0, 4.0)) == 11.0


def test_edge_vector_length_and_midpoint():
    source, target = Point(1.0, 1.0), Point(4.0, 5.0)
    assert edge_as_vector(source, target) == Vector(3.0, 4.0)
    assert edge_length(source, target) == pytest.approx(5.0)
    assert edge_midpoint(source, target) == Point(2.5, 3.0)


def test_point_vector_arithmetic():
    p = Point(1.0, 2.0)
    v = Point(4.0, 6.0) - p
    assert v == Vector(3.0, 4.0)
    assert v.magnitude == pytest.approx(5.0)
    assert p + v == Point(4.0, 6.0)
    with pytest.raises(TypeError):
        p + p


def test_point_translation_and_distance():
    p = Point(4.0, 6.0)
    assert p - Vector(3.0, 4.0) == Point(1.0, 2.0)
    assert p.distance_to(Point(1.0, 2.0)) == pytest.approx(5.0)
    assert euclidean_distance(p, Point(1.0, 2.0)) == pytest.approx(5.0)
    with pytest.raises(TypeError):
        p - (3.0, 4.0)


def test_project_point_on_horizontal_line():
    projected = project_point_on_line(Point(2.0, 5.0), Point(0.0, 0.0), Point(10.0, 0.0))
    assert projected.x == pytest.approx(2.0)
    assert projected.y == pytest.approx(0.0)


def test_project_point_on_diagonal_line():
    projected = project_point_on_line(Point(0.0, 2.0), Point(0.0, 0.0), Point(2.0, 2.0))
    assert projected.x == pytest.approx(1.0)
    assert projected.y == pytest.approx(1.0)


def test_projection_beyond_segment_stays_on_infinite_line():
    projected = project_point_on_line(Point(20.0, 3.0), Point(0.0, 0.0), Point(10.0, 0.0))
    assert projected.x == pytest.approx(20.0)
    assert projected.y == pytest.approx(0.0)


def test_vectorised_projection_matches_scalar():
    rng = np.random.default_rng(0)
    p = rng.normal(size=(8, 2))
    src = rng.normal(size=(8, 2))
    tgt = src + rng.normal(size=(8, 2))
    projected = project_points_on_lines(p, src, tgt)
    for k in range(8):
        expected = project_point_on_line(Point(*p[k]), Point(*src[k]), Point(*tgt[k]))
        assert projected[k, 0] == pytest.approx(expected.x)
        assert projected[k, 1] == pytest.approx(expected.y)


def test_polyline_lengths():
    points = [Point(0.0, 0.0), Point(3.0, 4.0), Point(3.0, 10.0)]
    assert polyline_length(points) == pytest.approx(11.0)

    stacked = np.array([[[0.0, 0.0], [3.0, 4.0], [3.0, 10.0]],
                        [[0.0, 0.0], [1.0, 0.0], [1.0, 1.0]]])
    np.testing.assert_allclose(polyline_lengths(stacked), [11.0, 2.0])


def test_point_array_round_trip():
    p = Point(1.5, -2.0)
    assert Point.from_array(p.to_array()) == p
    assert math.isclose(Vector(3.0, 4.0).to_array()[1], 4.0)
