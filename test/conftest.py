import numpy as np
import pytest

from forcebundling import EdgeSet


def _make_edge_set(segments):
    """EdgeSet from a list of ((x0, y0), (x1, y1)) segments with generated node ids."""
    nodes = {}
    edges = []
    for k, (p, q) in enumerate(segments):
        nodes[f"s{k}"] = p
        nodes[f"t{k}"] = q
        edges.append((f"s{k}", f"t{k}"))
    return EdgeSet.build(nodes, edges)


@pytest.fixture
def make_edge_set():
    return _make_edge_set


@pytest.fixture
def parallel_pair():
    """Two nearly overlapping parallel edges that should bundle."""
    nodes = {"a": (0.0, 0.0), "b": (100.0, 10.0), "c": (0.0, 5.0), "d": (100.0, 15.0)}
    edges = [("a", "b"), ("c", "d")]
    return nodes, edges


@pytest.fixture
def perpendicular_pair():
    """A long edge and a short edge exactly perpendicular to it."""
    nodes = {"a": (0.0, 0.0), "b": (10.0, 1.0), "c": (5.0, -1.0), "d": (4.8, 1.0)}
    edges = [("a", "b"), ("c", "d")]
    return nodes, edges


@pytest.fixture
def random_graph():
    rng = np.random.default_rng(42)
    coords = rng.uniform(-50.0, 50.0, size=(20, 2))
    nodes = {i: (float(x), float(y)) for i, (x, y) in enumerate(coords)}
    pairs = set()
    while len(pairs) < 30:
        i, j = rng.choice(20, size=2, replace=False)
        pairs.add((int(i), int(j)))
    return nodes, sorted(pairs)
