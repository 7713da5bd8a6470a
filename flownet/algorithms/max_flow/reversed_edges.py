"""Reverse-edge augmentation required by augmenting-path max-flow solvers.

Every edge ``u -> v`` gets a companion ``v -> u`` used to cancel flow pushed
earlier. The companion is always a new zero-capacity edge, even when an
opposite input edge exists, so the mapping pairs each created edge with
exactly one input edge and stays an involution.
The augmentation must run exactly once before a flow computation and can be
undone with `ReversedEdgeAugmentor.remove_reversed_edges()`.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from flownet.config import FLOW_CONFIG
from flownet.exceptions import GraphAlreadyAugmentedError, GraphNotAugmentedError
from flownet.graph.strict_multidigraph import (
    EdgeFactory,
    EdgeID,
    NodeID,
    StrictMultiDiGraph,
)
from flownet.logging import get_logger

logger = get_logger(__name__)


class ReversedEdgeAugmentor:
    """Add (and later remove) reverse edges on a graph.

    Attributes:
        visited_graph: The graph being augmented.
        edge_factory: Creates the key of a new reverse edge.
        reversed_edges: Map edge -> its reverse edge, filled by augmentation.
        augmented_edges: Reverse edges created by this augmentor.
        reversed_edge_added: Callbacks receiving each created reverse edge.
    """

    def __init__(
        self,
        visited_graph: StrictMultiDiGraph,
        edge_factory: EdgeFactory,
        reversed_edge_attr: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Initialize the augmentor.

        Args:
            visited_graph: Graph to augment.
            edge_factory: Callable ``(source, target) -> edge key``.
            reversed_edge_attr: Attributes for created reverse edges. Defaults
                to a zero capacity under ``FLOW_CONFIG.capacity_attr``.
        """
        if visited_graph is None:
            raise ValueError("visited_graph must not be None.")
        if edge_factory is None:
            raise ValueError("edge_factory must not be None.")
        self.visited_graph = visited_graph
        self.edge_factory = edge_factory
        self.reversed_edge_attr: Dict[str, Any] = (
            {FLOW_CONFIG.capacity_attr: 0.0}
            if reversed_edge_attr is None
            else dict(reversed_edge_attr)
        )
        self.reversed_edges: Dict[EdgeID, EdgeID] = {}
        self._augmented_edges: List[EdgeID] = []
        self._augmented = False
        self.reversed_edge_added: List[Callable[[EdgeID], None]] = []

    @property
    def augmented(self) -> bool:
        return self._augmented

    @property
    def augmented_edges(self) -> List[EdgeID]:
        return list(self._augmented_edges)

    def _new_reversed_key(self, source: NodeID, target: NodeID) -> EdgeID:
        graph = self.visited_graph
        key = self.edge_factory(target, source)
        # Value-equal keys collide with antiparallel input edges and with the
        # reverse of an earlier parallel edge; fall back to a generated key.
        while graph.has_edge_by_id(key):
            key = graph.new_edge_key(target, source)
        return key

    def _add_reversed_edges(self, edges: List[EdgeID]) -> None:
        graph = self.visited_graph
        for edge in edges:
            source, target, _, _ = graph.get_edges()[edge]
            reversed_edge = self._new_reversed_key(source, target)
            graph.add_edge(target, source, key=reversed_edge, **self.reversed_edge_attr)

            self._augmented_edges.append(reversed_edge)
            self.reversed_edges[edge] = reversed_edge
            self.reversed_edges[reversed_edge] = edge
            for callback in list(self.reversed_edge_added):
                callback(reversed_edge)

    def add_reversed_edges(self) -> None:
        """Create a reverse edge for every edge of the graph.

        Raises:
            GraphAlreadyAugmentedError: If this augmentor already ran.
        """
        if self._augmented:
            raise GraphAlreadyAugmentedError("Graph already augmented.")

        # Materialize before mutating the graph.
        self._add_reversed_edges(list(self.visited_graph.get_edges()))
        self._augmented = True
        logger.debug("Added %d reversed edges", len(self._augmented_edges))

    def remove_reversed_edges(self) -> None:
        """Remove the reverse edges created by `add_reversed_edges()`.

        Raises:
            GraphNotAugmentedError: If the graph is not augmented.
        """
        if not self._augmented:
            raise GraphNotAugmentedError("Graph is not augmented yet.")

        for edge in self._augmented_edges:
            if self.visited_graph.has_edge_by_id(edge):
                self.visited_graph.remove_edge_by_id(edge)

        self._augmented_edges.clear()
        self.reversed_edges.clear()
        self._augmented = False

    def __enter__(self) -> ReversedEdgeAugmentor:
        if not self._augmented:
            self.add_reversed_edges()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._augmented:
            self.remove_reversed_edges()
