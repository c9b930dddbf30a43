"""
Public facade of the bundling library.

`EdgeBundler` holds the inputs and parameters between runs; `bundle_edges`
is the one-shot functional form. Both return a `BundlingResult`, which maps
the index of every retained edge to its bundled polyline.
"""
from __future__ import annotations

from collections.abc import Mapping as MappingABC
from dataclasses import dataclass, field
import logging
from typing import Any, Hashable, Iterable, Iterator, Mapping, Optional, TYPE_CHECKING

import numpy as np

from forcebundling.config import BundlingConfig
from forcebundling.model.geometry_primitives import Point
from forcebundling.model.graph import Edge, EdgeSet, InvalidInputError, parse_nodes
from forcebundling.solvers.solver import BundlingSolver, CycleCallback

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class BundlingResult(MappingABC):
    """
    Bundled polylines keyed by position in the filtered edge list.

    Attributes:
        points: (E, P + 2, 2) array of polylines.
        edges: The retained edges, in the same order.
        source_index: For each retained edge, its position in the caller's edge list.
        compatibility_lists: Compatible edge indices per retained edge.
    """
    points: npt.NDArray[np.float64]
    edges: list[Edge]
    source_index: npt.NDArray[np.int64]
    compatibility_lists: list[npt.NDArray[np.int64]] = field(default_factory=list, repr=False)

    def __getitem__(self, e_idx: int) -> list[Point]:
        if not isinstance(e_idx, (int, np.integer)) or not 0 <= e_idx < len(self.edges):
            raise KeyError(e_idx)
        return [Point(x=float(x), y=float(y)) for x, y in self.points[e_idx]]

    def __iter__(self) -> Iterator[int]:
        return iter(range(len(self.edges)))

    def __len__(self) -> int:
        return len(self.edges)

    def to_list(self) -> list[list[dict[str, float]]]:
        """Polylines as plain {'x', 'y'} dictionaries, ready for a renderer."""
        return [[{"x": float(x), "y": float(y)} for x, y in polyline] for polyline in self.points]


class EdgeBundler:
    """
    Force-directed edge bundling of a fixed node layout.

    Nodes and edges may be set in any order. Assigning either re-resolves the
    edge list against the nodes and drops self-loops. Parameters are read
    from `config` when `run` starts; changing them later has no effect on a
    finished or running bundling.

    Example:
        >>> bundler = EdgeBundler(nodes={"a": (0, 0), "b": (10, 5)}, edges=[("a", "b")])
        >>> result = bundler.run()
    """

    def __init__(
        self,
        nodes: Optional[Mapping[Hashable, Any]] = None,
        edges: Optional[Iterable[Any]] = None,
        config: Optional[BundlingConfig] = None,
    ) -> None:
        self._nodes: dict[Hashable, Point] = {}
        self._raw_edges: list[Any] = []
        self._edge_set: EdgeSet = EdgeSet.from_filtered({}, [], [])
        self._config: BundlingConfig = config or BundlingConfig()

        if nodes is not None:
            self.nodes = nodes
        if edges is not None:
            self.edges = edges

    # --- Inputs ---
    @property
    def nodes(self) -> dict[Hashable, Point]:
        return dict(self._nodes)

    @nodes.setter
    def nodes(self, nodes: Mapping[Hashable, Any]) -> None:
        self._commit(parse_nodes(nodes), self._raw_edges)

    @property
    def edges(self) -> list[Edge]:
        """The filtered working set."""
        return list(self._edge_set.edges)

    @edges.setter
    def edges(self, edges: Iterable[Any]) -> None:
        self._commit(self._nodes, list(edges))

    @property
    def edge_set(self) -> EdgeSet:
        return self._edge_set

    def _commit(self, nodes: dict[Hashable, Point], raw_edges: list[Any]) -> None:
        # Nothing is stored unless the new edge set resolves
        if raw_edges and not nodes:
            raise InvalidInputError("Nodes must be set before edges can be resolved.")
        if raw_edges:
            edge_set = EdgeSet.build(nodes, raw_edges)
            logger.debug(f"Resolved {len(raw_edges)} edge(s); {len(edge_set)} retained.")
        else:
            edge_set = EdgeSet.from_filtered(nodes, [], [])
        self._nodes, self._raw_edges, self._edge_set = nodes, raw_edges, edge_set

    # --- Parameters ---
    @property
    def config(self) -> BundlingConfig:
        return self._config

    @config.setter
    def config(self, config: BundlingConfig) -> None:
        if not isinstance(config, BundlingConfig):
            raise TypeError(f"Expected BundlingConfig, got {type(config).__name__}.")
        self._config = config

    def configure(self, **changes: Any) -> EdgeBundler:
        """Replace individual parameters; returns self for chaining."""
        self._config = self._config.with_options(**changes)
        return self

    @property
    def bundling_stiffness(self) -> float:
        return self._config.bundling_stiffness

    @property
    def step_size(self) -> float:
        return self._config.step_size

    @property
    def subdivision_points_seed(self) -> int:
        return self._config.subdivision_points_seed

    @property
    def subdivision_rate(self) -> float:
        return self._config.subdivision_rate

    @property
    def cycles(self) -> int:
        return self._config.cycles

    @property
    def iterations(self) -> float:
        return self._config.iterations

    @property
    def iterations_rate(self) -> float:
        return self._config.iterations_rate

    @property
    def compatibility_threshold(self) -> float:
        return self._config.compatibility_threshold

    # --- Run ---
    def run(self, on_cycle: Optional[CycleCallback] = None) -> BundlingResult:
        """
        Bundle the current edges with the current configuration.

        Args:
            on_cycle: Optional observer, see `BundlingSolver.solve`.

        Returns:
            The bundled polylines of all retained edges.
        """
        solver = BundlingSolver(self._edge_set, self._config)
        points = solver.solve(on_cycle=on_cycle)
        return BundlingResult(
            points=points,
            edges=list(self._edge_set.edges),
            source_index=self._edge_set.source_index.copy(),
            compatibility_lists=solver.compatibility_lists,
        )

    __call__ = run


def bundle_edges(
    nodes: Mapping[Hashable, Any],
    edges: Iterable[Any],
    config: Optional[BundlingConfig] = None,
    **options: Any,
) -> BundlingResult:
    """
    Bundle `edges` between fixed `nodes` in one call.

    Args:
        nodes: Mapping of node id -> position (Point, {'x', 'y'} mapping or pair).
        edges: Sequence of edges (Edge, {'source', 'target'} mapping or pair).
        config: Base parameters; defaults are used when omitted.
        **options: Individual `BundlingConfig` fields overriding `config`.

    Raises:
        InvalidInputError: If an edge refers to an unknown node or an entry is malformed.
    """
    config = config or BundlingConfig()
    if options:
        config = config.with_options(**options)
    return EdgeBundler(nodes=nodes, edges=edges, config=config).run()
