"""Residual-capacity edge predicates and the residual views built on them."""

from __future__ import annotations

from typing import Mapping

from flownet.graph.filtered import FilteredGraph, accept_all
from flownet.graph.strict_multidigraph import EdgeID, StrictMultiDiGraph


class ResidualEdgePredicate:
    """Keep edges whose residual capacity is still positive.

    Holds a reference to the live residual map, so every call sees the
    latest value.
    """

    def __init__(self, residual_capacities: Mapping[EdgeID, float]) -> None:
        self.residual_capacities = residual_capacities

    def __call__(self, edge: EdgeID) -> bool:
        return self.residual_capacities[edge] > 0


class ReversedResidualEdgePredicate:
    """Keep edges whose paired reverse edge has positive residual capacity.

    An edge missing from ``reversed_edges`` raises KeyError: every edge must
    have been paired by the reversed-edge augmentation beforehand.
    """

    def __init__(
        self,
        residual_capacities: Mapping[EdgeID, float],
        reversed_edges: Mapping[EdgeID, EdgeID],
    ) -> None:
        self.residual_capacities = residual_capacities
        self.reversed_edges = reversed_edges

    def __call__(self, edge: EdgeID) -> bool:
        return self.residual_capacities[self.reversed_edges[edge]] > 0


def residual_view(
    graph: StrictMultiDiGraph, residual_capacities: Mapping[EdgeID, float]
) -> FilteredGraph:
    """Return the lazy residual graph: all vertices, edges with residual > 0."""
    return FilteredGraph(graph, accept_all, ResidualEdgePredicate(residual_capacities))


def reversed_residual_view(
    graph: StrictMultiDiGraph,
    residual_capacities: Mapping[EdgeID, float],
    reversed_edges: Mapping[EdgeID, EdgeID],
) -> FilteredGraph:
    """Return the lazy view of edges whose reverse edge still has residual > 0."""
    return FilteredGraph(
        graph,
        accept_all,
        ReversedResidualEdgePredicate(residual_capacities, reversed_edges),
    )
