"""Search observers attached to a traversal for the duration of one run.

A search algorithm notifies every attached `SearchObserver` of vertex and edge
events. Observers are attached with ``with observer.attach(search): ...`` and
detached automatically when the block exits, even on error.
"""

from __future__ import annotations

from contextlib import contextmanager
from enum import IntEnum
from typing import TYPE_CHECKING, Dict, Iterator, List, Optional

from flownet.graph.strict_multidigraph import EdgeID, NodeID

if TYPE_CHECKING:
    from flownet.algorithms.bfs import BreadthFirstSearch


class GraphColor(IntEnum):
    """Traversal state of a vertex."""

    WHITE = 0  # not visited yet
    GRAY = 1  # discovered, still queued
    BLACK = 2  # finished


class SearchObserver:
    """No-op base; override the events you care about."""

    def initialize_vertex(self, vertex: NodeID) -> None:
        pass

    def start_vertex(self, vertex: NodeID) -> None:
        pass

    def discover_vertex(self, vertex: NodeID) -> None:
        pass

    def examine_vertex(self, vertex: NodeID) -> None:
        pass

    def examine_edge(self, source: NodeID, target: NodeID, edge: EdgeID) -> None:
        pass

    def tree_edge(self, source: NodeID, target: NodeID, edge: EdgeID) -> None:
        pass

    def non_tree_edge(self, source: NodeID, target: NodeID, edge: EdgeID) -> None:
        pass

    def gray_target(self, source: NodeID, target: NodeID, edge: EdgeID) -> None:
        pass

    def black_target(self, source: NodeID, target: NodeID, edge: EdgeID) -> None:
        pass

    def finish_vertex(self, vertex: NodeID) -> None:
        pass

    @contextmanager
    def attach(self, algorithm: BreadthFirstSearch) -> Iterator[SearchObserver]:
        """Attach to ``algorithm`` for the duration of the ``with`` block."""
        algorithm.add_observer(self)
        try:
            yield self
        finally:
            algorithm.remove_observer(self)


class VertexPredecessorRecorderObserver(SearchObserver):
    """Record, for each discovered vertex, the tree edge that reached it.

    Attributes:
        vertex_predecessors: Map vertex -> edge by which it was first reached.
            May be supplied by the caller so the map outlives the observer.
    """

    def __init__(self, vertex_predecessors: Optional[Dict[NodeID, EdgeID]] = None) -> None:
        self.vertex_predecessors: Dict[NodeID, EdgeID] = (
            {} if vertex_predecessors is None else vertex_predecessors
        )
        self._edge_sources: Dict[EdgeID, NodeID] = {}

    def tree_edge(self, source: NodeID, target: NodeID, edge: EdgeID) -> None:
        self.vertex_predecessors[target] = edge
        self._edge_sources[edge] = source

    def path(self, vertex: NodeID) -> Optional[List[EdgeID]]:
        """Return the root-to-``vertex`` edge path.

        Returns None for vertices without a recorded tree edge, which
        includes the root itself.
        """
        if vertex not in self.vertex_predecessors:
            return None
        path: List[EdgeID] = []
        current = vertex
        while current in self.vertex_predecessors:
            edge = self.vertex_predecessors[current]
            path.append(edge)
            current = self._edge_sources[edge]
            if len(path) > len(self.vertex_predecessors):
                raise ValueError("Predecessor map contains a cycle.")
        path.reverse()
        return path
