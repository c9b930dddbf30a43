"""
Graph Input (Data Model)
========================
Turns caller supplied node positions and edge lists into the working set
used by the solvers.

Why is this file needed?
------------------------
1. Validation: Unknown node ids and malformed entries are caller errors and
   fail fast with `InvalidInputError`.
2. Filtering: Edges whose endpoints coincide have no direction or length and
   are dropped from the working set without raising.
3. Layout: The retained edges are packed into float64 endpoint arrays so the
   compatibility and force passes can work on whole arrays.

Classes:
    Edge: A source/target pair of node ids.
    EdgeSet: The filtered working set of one bundling run.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
import math
from typing import Any, Hashable, Iterable, Mapping, TYPE_CHECKING

import numpy as np

from forcebundling.model.geometry_primitives import Point

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)

NodeMapping = Mapping[Hashable, Point]


class InvalidInputError(ValueError):
    """Raised when nodes or edges passed to the bundler cannot be used."""


@dataclass(frozen=True)
class Edge:
    source: Hashable
    target: Hashable

    @classmethod
    def coerce(cls, raw: Any) -> Edge:
        """Accepts an Edge, a {'source', 'target'} mapping or a (source, target) pair."""
        if isinstance(raw, Edge):
            return raw
        if isinstance(raw, Mapping):
            try:
                return cls(source=raw["source"], target=raw["target"])
            except KeyError as e:
                raise InvalidInputError(f"Edge mapping is missing key {e}: {raw!r}") from e
        try:
            source, target = raw
        except (TypeError, ValueError) as e:
            raise InvalidInputError(f"Cannot interpret {raw!r} as an edge.") from e
        return cls(source=source, target=target)


def _coerce_point(node_id: Hashable, raw: Any) -> Point:
    if isinstance(raw, Point):
        x, y = raw.x, raw.y
    elif isinstance(raw, Mapping):
        try:
            x, y = raw["x"], raw["y"]
        except KeyError as e:
            raise InvalidInputError(f"Node {node_id!r} is missing coordinate {e}.") from e
    else:
        try:
            x, y = raw
        except (TypeError, ValueError) as e:
            raise InvalidInputError(f"Cannot interpret {raw!r} as the position of node {node_id!r}.") from e

    try:
        x, y = float(x), float(y)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"Node {node_id!r} has non-numeric coordinates ({x!r}, {y!r}).") from e
    if not (math.isfinite(x) and math.isfinite(y)):
        raise InvalidInputError(f"Node {node_id!r} has non-finite coordinates ({x}, {y}).")
    return Point(x=x, y=y)


def parse_nodes(nodes: Mapping[Hashable, Any]) -> dict[Hashable, Point]:
    """
    Normalise a node mapping to id -> Point.

    Values may be `Point` objects, mappings with 'x' and 'y' keys or
    (x, y) pairs.
    """
    if not isinstance(nodes, Mapping):
        raise InvalidInputError(f"Nodes must be a mapping of id -> position, got {type(nodes).__name__}.")
    return {node_id: _coerce_point(node_id, raw) for node_id, raw in nodes.items()}


def resolve_edges(nodes: NodeMapping, edges: Iterable[Any]) -> list[Edge]:
    """
    Coerce every entry to an `Edge` and check both ids exist in `nodes`.

    Raises:
        InvalidInputError: On the first edge that cannot be resolved.
    """
    resolved: list[Edge] = []
    for position, raw in enumerate(edges):
        edge = Edge.coerce(raw)
        for end in (edge.source, edge.target):
            try:
                known = end in nodes
            except TypeError as e:
                raise InvalidInputError(f"Edge {position} refers to unhashable node id {end!r}.") from e
            if not known:
                raise InvalidInputError(f"Edge {position} refers to unknown node {end!r}.")
        resolved.append(edge)
    return resolved


def is_self_loop(nodes: NodeMapping, edge: Edge) -> bool:
    """
    An edge is treated as a self-loop unless its endpoints differ in both
    x and y. Axis-aligned edges are therefore excluded as well.
    """
    source = nodes[edge.source]
    target = nodes[edge.target]
    return not (source.x != target.x and source.y != target.y)


def filter_self_loops(nodes: NodeMapping, edges: Iterable[Edge]) -> tuple[list[Edge], list[int]]:
    """
    Drop degenerate edges from an already resolved edge list.

    Returns:
        The retained edges and, for each of them, its position in `edges`.
    """
    kept: list[Edge] = []
    kept_index: list[int] = []
    dropped = 0
    for position, edge in enumerate(edges):
        if is_self_loop(nodes, edge):
            dropped += 1
            logger.debug(f"Dropping degenerate edge {position}: {edge.source!r} -> {edge.target!r}")
            continue
        kept.append(edge)
        kept_index.append(position)

    if dropped:
        logger.info(f"Filtered {dropped} self-loop edge(s); {len(kept)} edge(s) remain.")
    return kept, kept_index


@dataclass
class EdgeSet:
    """
    The filtered working set of one run.

    Edge identity inside the solvers is the row index into these arrays.
    """
    edges: list[Edge]
    source_index: npt.NDArray[np.int64]
    sources: npt.NDArray[np.float64]
    targets: npt.NDArray[np.float64]
    nodes: dict[Hashable, Point] = field(default_factory=dict, repr=False)

    @classmethod
    def build(cls, nodes: Mapping[Hashable, Any], edges: Iterable[Any]) -> EdgeSet:
        """Parse, resolve and filter in one step."""
        points = parse_nodes(nodes)
        resolved = resolve_edges(points, edges)
        kept, kept_index = filter_self_loops(points, resolved)
        return cls.from_filtered(points, kept, kept_index)

    @classmethod
    def from_filtered(cls, nodes: dict[Hashable, Point], edges: list[Edge], source_index: list[int]) -> EdgeSet:
        sources = np.array([[nodes[e.source].x, nodes[e.source].y] for e in edges], dtype=np.float64).reshape(-1, 2)
        targets = np.array([[nodes[e.target].x, nodes[e.target].y] for e in edges], dtype=np.float64).reshape(-1, 2)
        return cls(
            edges=list(edges),
            source_index=np.asarray(source_index, dtype=np.int64),
            sources=sources,
            targets=targets,
            nodes=nodes,
        )

    def __len__(self) -> int:
        return len(self.edges)

    @property
    def vectors(self) -> npt.NDArray[np.float64]:
        return self.targets - self.sources

    @property
    def lengths(self) -> npt.NDArray[np.float64]:
        v = self.vectors
        return np.hypot(v[:, 0], v[:, 1])

    @property
    def midpoints(self) -> npt.NDArray[np.float64]:
        return (self.sources + self.targets) / 2.0
