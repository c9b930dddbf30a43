"""Force-directed edge bundling of node-link diagrams."""
from forcebundling.config import BundlingConfig, suggest_step_size
from forcebundling.model.geometry_primitives import Point, Vector
from forcebundling.model.graph import Edge, EdgeSet, InvalidInputError
from forcebundling.bundler import BundlingResult, EdgeBundler, bundle_edges

__all__ = [
    "BundlingConfig",
    "BundlingResult",
    "Edge",
    "EdgeBundler",
    "EdgeSet",
    "InvalidInputError",
    "Point",
    "Vector",
    "bundle_edges",
    "suggest_step_size",
]
