import numpy as np
import pytest

from forcebundling import EdgeSet
from forcebundling.model.geometry_utils import polyline_lengths
from forcebundling.solvers.subdivision import (
    SubdivisionStore,
    initial_subdivisions,
    resample,
    straight_lines,
)


@pytest.fixture
def corner_edge():
    # a single edge (0,0) -> (2,2)
    return EdgeSet.build({"a": (0.0, 0.0), "b": (2.0, 2.0)}, [("a", "b")])


def test_initial_subdivision_is_midpoint(corner_edge):
    points = initial_subdivisions(corner_edge, 1)
    np.testing.assert_array_equal(points, [[[0.0, 0.0], [1.0, 1.0], [2.0, 2.0]]])


def test_initial_subdivisions_with_larger_seed(corner_edge):
    points = initial_subdivisions(corner_edge, 3)
    assert points.shape == (1, 5, 2)
    np.testing.assert_allclose(points[0, :, 0], [0.0, 0.5, 1.0, 1.5, 2.0])
    np.testing.assert_allclose(points[0, :, 1], [0.0, 0.5, 1.0, 1.5, 2.0])


def test_resample_straight_line_is_uniform(corner_edge):
    points = resample(straight_lines(corner_edge), corner_edge, 4)
    expected = np.linspace(0.0, 2.0, 6)
    np.testing.assert_allclose(points[0, :, 0], expected)
    np.testing.assert_allclose(points[0, :, 1], expected)


def test_resample_follows_bent_polyline(corner_edge):
    bent = np.array([[[0.0, 0.0], [2.0, 0.0], [2.0, 2.0]]])
    points = resample(bent, corner_edge, 3)
    np.testing.assert_allclose(points[0], [[0.0, 0.0], [1.0, 0.0], [2.0, 0.0], [2.0, 1.0], [2.0, 2.0]])


def test_resample_handles_zero_length_segments(corner_edge):
    bent = np.array([[[0.0, 0.0], [2.0, 0.0], [2.0, 0.0], [2.0, 2.0]]])
    points = resample(bent, corner_edge, 3)
    np.testing.assert_allclose(points[0], [[0.0, 0.0], [1.0, 0.0], [2.0, 0.0], [2.0, 1.0], [2.0, 2.0]])


@pytest.mark.parametrize("P", [1, 2, 5, 16, 33])
def test_resample_produces_exact_point_count(random_graph, P):
    edge_set = EdgeSet.build(*random_graph)
    rng = np.random.default_rng(3)
    wobbly = initial_subdivisions(edge_set, 7)
    wobbly[:, 1:-1] += rng.normal(scale=2.0, size=wobbly[:, 1:-1].shape)

    points = resample(wobbly, edge_set, P)

    assert points.shape == (len(edge_set), P + 2, 2)
    np.testing.assert_array_equal(points[:, 0], edge_set.sources)
    np.testing.assert_array_equal(points[:, -1], edge_set.targets)
    # resampling cuts corners, it never lengthens the path
    assert np.all(polyline_lengths(points) <= polyline_lengths(wobbly) + 1e-9)


def test_resample_spacing_is_uniform_along_path(random_graph):
    edge_set = EdgeSet.build(*random_graph)
    rng = np.random.default_rng(11)
    wobbly = initial_subdivisions(edge_set, 3)
    wobbly[:, 1:-1] += rng.normal(scale=1.0, size=wobbly[:, 1:-1].shape)

    # dense resampling of a polyline stays close to its length
    dense = resample(wobbly, edge_set, 200)
    np.testing.assert_allclose(polyline_lengths(dense), polyline_lengths(wobbly), rtol=1e-2)


def test_resample_rejects_non_positive_count(corner_edge):
    with pytest.raises(ValueError):
        resample(straight_lines(corner_edge), corner_edge, 0)


def test_store_apply_never_moves_endpoints(corner_edge):
    store = SubdivisionStore(corner_edge, P=1)
    displacement = np.full_like(store.points, 0.25)
    store.apply(displacement)
    np.testing.assert_array_equal(store.points[0, 0], [0.0, 0.0])
    np.testing.assert_array_equal(store.points[0, -1], [2.0, 2.0])
    np.testing.assert_allclose(store.points[0, 1], [1.25, 1.25])


def test_store_update_edge_divisions(corner_edge):
    store = SubdivisionStore(corner_edge, P=1)
    assert store.subdivisions == 1
    store.update_edge_divisions(2)
    assert store.subdivisions == 2
    store.update_edge_divisions(4)
    assert store.points.shape == (1, 6, 2)
    polyline = store.polyline(0)
    assert polyline[0].x == 0.0 and polyline[-1].y == 2.0
