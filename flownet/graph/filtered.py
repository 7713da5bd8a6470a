"""Lazily filtered, read-only views over a `StrictMultiDiGraph`.

A `FilteredGraph` keeps a reference to its base graph plus two predicates and
re-evaluates them on every query. Nothing is snapshotted, so when the data a
predicate reads changes (for example residual capacities during a max-flow
computation), the very next query reflects it. Counting queries walk the
filtered sequence; no auxiliary counters are maintained.
"""

from __future__ import annotations

from typing import Callable, Iterator

import networkx as nx

from flownet.exceptions import VertexNotFoundError
from flownet.graph.strict_multidigraph import EdgeID, NodeID, StrictMultiDiGraph

NodePredicate = Callable[[NodeID], bool]
EdgePredicate = Callable[[EdgeID], bool]


def accept_all(_item: object) -> bool:
    """Predicate that keeps everything."""
    return True


class FilteredGraph:
    """Read-only view of the vertices and edges passing two predicates.

    An edge is part of the view when the edge predicate accepts it and both
    of its endpoints pass the vertex predicate.

    Attributes:
        base_graph: The viewed graph. The view never mutates it.
        node_predicate: Vertex filter.
        edge_predicate: Edge filter, called with the edge key.
    """

    def __init__(
        self,
        base_graph: StrictMultiDiGraph,
        node_predicate: NodePredicate = accept_all,
        edge_predicate: EdgePredicate = accept_all,
    ) -> None:
        self.base_graph = base_graph
        self.node_predicate = node_predicate
        self.edge_predicate = edge_predicate

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(base_graph={self.base_graph!r})"

    def __contains__(self, node: object) -> bool:
        return self.contains_node(node)

    #
    # Vertices
    #
    def contains_node(self, node: NodeID) -> bool:
        """Return True if ``node`` is in the base graph and passes the filter."""
        return node in self.base_graph and self.node_predicate(node)

    def nodes(self) -> Iterator[NodeID]:
        """Iterate over visible vertices in base graph order."""
        for node in self.base_graph:
            if self.node_predicate(node):
                yield node

    @property
    def node_count(self) -> int:
        return sum(1 for _ in self.nodes())

    @property
    def is_nodes_empty(self) -> bool:
        return not any(True for _ in self.nodes())

    #
    # Edges
    #
    def _edge_visible(self, u: NodeID, v: NodeID, key: EdgeID) -> bool:
        return (
            self.node_predicate(u)
            and self.node_predicate(v)
            and self.edge_predicate(key)
        )

    def contains_edge(self, key: EdgeID) -> bool:
        """Return True if the edge exists in the base graph and is visible."""
        if not self.base_graph.has_edge_by_id(key):
            return False
        u, v, _, _ = self.base_graph.get_edges()[key]
        return self._edge_visible(u, v, key)

    def contains_edge_between(self, u: NodeID, v: NodeID) -> bool:
        """Return True if at least one visible edge goes from ``u`` to ``v``."""
        if not (self.contains_node(u) and self.contains_node(v)):
            return False
        return any(self.edge_predicate(k) for k in self.base_graph.edges_between(u, v))

    def edges(self) -> Iterator[EdgeID]:
        """Iterate over visible edge keys in base graph order."""
        for key, (u, v, _, _) in self.base_graph.get_edges().items():
            if self._edge_visible(u, v, key):
                yield key

    @property
    def edge_count(self) -> int:
        return sum(1 for _ in self.edges())

    @property
    def is_edges_empty(self) -> bool:
        return not any(True for _ in self.edges())

    def edge_source(self, key: EdgeID) -> NodeID:
        """Return the source vertex of an edge of the base graph."""
        return self.base_graph.edge_source(key)

    def edge_target(self, key: EdgeID) -> NodeID:
        """Return the target vertex of an edge of the base graph."""
        return self.base_graph.edge_target(key)

    #
    # Adjacency
    #
    def _require_node(self, node: NodeID) -> None:
        if not self.contains_node(node):
            raise VertexNotFoundError(f"Vertex '{node}' is not part of the filtered graph.")

    def out_edges_of(self, node: NodeID) -> Iterator[EdgeID]:
        """Iterate over visible edges leaving ``node``.

        Raises:
            VertexNotFoundError: If ``node`` is absent or filtered out. The
                check happens on the call, not on the first iteration.
        """
        self._require_node(node)
        return self._iter_adjacent(self.base_graph.succ[node])

    def in_edges_of(self, node: NodeID) -> Iterator[EdgeID]:
        """Iterate over visible edges entering ``node``.

        Raises:
            VertexNotFoundError: If ``node`` is absent or filtered out.
        """
        self._require_node(node)
        return self._iter_adjacent(self.base_graph.pred[node])

    def _iter_adjacent(self, adjacency) -> Iterator[EdgeID]:
        for nbr, keydict in adjacency.items():
            if not self.node_predicate(nbr):
                continue
            for key in keydict:
                if self.edge_predicate(key):
                    yield key

    def out_degree(self, node: NodeID) -> int:
        return sum(1 for _ in self.out_edges_of(node))

    def in_degree(self, node: NodeID) -> int:
        return sum(1 for _ in self.in_edges_of(node))

    def is_out_edges_empty(self, node: NodeID) -> bool:
        return not any(True for _ in self.out_edges_of(node))

    def is_in_edges_empty(self, node: NodeID) -> bool:
        return not any(True for _ in self.in_edges_of(node))

    #
    # Interop
    #
    def to_networkx_view(self) -> nx.MultiDiGraph:
        """Return a `networkx.subgraph_view` applying the same predicates.

        The returned view is just as lazy as this one and can be handed to
        any networkx algorithm.
        """
        edge_predicate = self.edge_predicate

        def filter_edge(_u: NodeID, _v: NodeID, key: EdgeID) -> bool:
            return edge_predicate(key)

        return nx.subgraph_view(
            self.base_graph,
            filter_node=self.node_predicate,
            filter_edge=filter_edge,
        )
