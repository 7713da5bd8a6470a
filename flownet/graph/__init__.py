"""Graph primitives and views.

This package provides the strict multi-directed graph type `StrictMultiDiGraph`,
its default edge type `Edge`, and the lazily filtered view `FilteredGraph`.
"""

from flownet.graph.filtered import FilteredGraph, accept_all
from flownet.graph.strict_multidigraph import (
    Edge,
    EdgeFactory,
    EdgeID,
    NodeID,
    StrictMultiDiGraph,
    VertexFactory,
)

__all__ = [
    "Edge",
    "EdgeFactory",
    "EdgeID",
    "FilteredGraph",
    "NodeID",
    "StrictMultiDiGraph",
    "VertexFactory",
    "accept_all",
]
