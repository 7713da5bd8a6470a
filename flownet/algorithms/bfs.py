"""Breadth-first search with observer notifications.

Works on anything exposing ``nodes()``, ``out_edges_of(v)``, ``edge_target(e)``
and ``__contains__``: a `StrictMultiDiGraph` or a `FilteredGraph` over one.
Because vertices are examined in FIFO order, the tree edges recorded during a
run form fewest-edges paths from the root.
"""

from __future__ import annotations

from collections import deque
from typing import Deque, Dict, List, Optional, Union

from flownet.algorithms.base import AlgorithmBase, RootedAlgorithmBase
from flownet.algorithms.observers import GraphColor, SearchObserver
from flownet.graph.filtered import FilteredGraph
from flownet.graph.strict_multidigraph import NodeID, StrictMultiDiGraph

SearchableGraph = Union[StrictMultiDiGraph, FilteredGraph]


class BreadthFirstSearch(RootedAlgorithmBase[SearchableGraph]):
    """Breadth-first traversal from a root vertex.

    Args:
        visited_graph: Graph or view to traverse.
        vertex_colors: Color map to fill; may be shared with a caller that
            inspects colors after the run.
        queue: Work queue; a fresh deque by default.
        host: Hosting algorithm whose cancel manager is polled.
    """

    def __init__(
        self,
        visited_graph: SearchableGraph,
        vertex_colors: Optional[Dict[NodeID, GraphColor]] = None,
        queue: Optional[Deque[NodeID]] = None,
        host: Optional[AlgorithmBase] = None,
    ) -> None:
        super().__init__(visited_graph, host)
        self.vertex_colors: Dict[NodeID, GraphColor] = (
            {} if vertex_colors is None else vertex_colors
        )
        self._queue: Deque[NodeID] = deque() if queue is None else queue
        self._observers: List[SearchObserver] = []

    def add_observer(self, observer: SearchObserver) -> None:
        self._observers.append(observer)

    def remove_observer(self, observer: SearchObserver) -> None:
        self._observers.remove(observer)

    def get_vertex_color(self, vertex: NodeID) -> GraphColor:
        """Return the color of ``vertex`` after (or during) a run.

        Raises:
            KeyError: If the vertex was never initialized by this search.
        """
        return self.vertex_colors[vertex]

    def _initialize(self) -> None:
        self._throw_if_cancellation_requested()
        self._queue.clear()
        for vertex in self.visited_graph.nodes():
            self.vertex_colors[vertex] = GraphColor.WHITE
            for observer in self._observers:
                observer.initialize_vertex(vertex)

    def _internal_compute(self) -> None:
        root = self._require_root()
        self._enqueue_root(root)
        self._flush_visit_queue()

    def _enqueue_root(self, vertex: NodeID) -> None:
        for observer in self._observers:
            observer.start_vertex(vertex)
        self.vertex_colors[vertex] = GraphColor.GRAY
        for observer in self._observers:
            observer.discover_vertex(vertex)
        self._queue.append(vertex)

    def _flush_visit_queue(self) -> None:
        graph = self.visited_graph
        colors = self.vertex_colors
        observers = self._observers
        while self._queue:
            self._throw_if_cancellation_requested()

            u = self._queue.popleft()
            for observer in observers:
                observer.examine_vertex(u)

            for edge in graph.out_edges_of(u):
                v = graph.edge_target(edge)
                for observer in observers:
                    observer.examine_edge(u, v, edge)

                v_color = colors[v]
                if v_color == GraphColor.WHITE:
                    for observer in observers:
                        observer.tree_edge(u, v, edge)
                    colors[v] = GraphColor.GRAY
                    for observer in observers:
                        observer.discover_vertex(v)
                    self._queue.append(v)
                else:
                    for observer in observers:
                        observer.non_tree_edge(u, v, edge)
                    if v_color == GraphColor.GRAY:
                        for observer in observers:
                            observer.gray_target(u, v, edge)
                    else:
                        for observer in observers:
                            observer.black_target(u, v, edge)

            colors[u] = GraphColor.BLACK
            for observer in observers:
                observer.finish_vertex(u)
