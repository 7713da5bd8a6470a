"""Graph augmentors that collapse many sources/sinks into a single pair.

Max-flow solvers need exactly one source and one sink. An augmentor adds a
synthetic super-source and/or super-sink to the visited graph and wires them
to a set of vertices:

- `MultiSourceSinkGraphAugmentor`: every vertex without in-edges becomes fed by
  the super-source, every vertex without out-edges drains into the super-sink.
- `AllVerticesGraphAugmentor`: every original vertex is wired both ways.
- `BipartiteToMaximumFlowGraphAugmentor`: explicit left/right vertex sets.

Super vertices are created lazily, the first time an edge needs them, so a
graph without deficient vertices of a kind gets no super vertex of that kind.
Augmentors are single use: `rollback()` (or leaving a ``with`` block) removes
everything they added. Running a second augmentor on an already augmented
graph adds a second super pair; run exactly one per working graph.

Synthetic edges carry only ``augmented_edge_attr``. Without a capacity there,
`capacity_from_attr` reads 0 for them and the flow between the super vertices
is 0. Pass a finite capacity at least as large as the total capacity around
the wired vertices; an infinite one turns the flow value into NaN.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Any, Callable, Dict, Iterable, List, Optional

from flownet.algorithms.base import AlgorithmBase
from flownet.exceptions import GraphAlreadyAugmentedError
from flownet.graph.strict_multidigraph import (
    EdgeFactory,
    EdgeID,
    NodeID,
    StrictMultiDiGraph,
    VertexFactory,
)
from flownet.logging import get_logger

logger = get_logger(__name__)


class GraphAugmentorBase(AlgorithmBase[StrictMultiDiGraph]):
    """Shared machinery of super-source/super-sink augmentors.

    Attributes:
        vertex_factory: Creates super vertices.
        edge_factory: Creates keys of synthetic edges.
        augmented_edge_attr: Attributes set on every synthetic edge. Must
            include a capacity for the edges to carry flow.
        super_source_added: Callbacks receiving the created super-source.
        super_sink_added: Callbacks receiving the created super-sink.
        edge_added: Callbacks receiving each synthetic edge.
    """

    def __init__(
        self,
        visited_graph: StrictMultiDiGraph,
        vertex_factory: VertexFactory,
        edge_factory: EdgeFactory,
        augmented_edge_attr: Optional[Dict[str, Any]] = None,
        host: Optional[AlgorithmBase] = None,
    ) -> None:
        super().__init__(visited_graph, host)
        if vertex_factory is None:
            raise ValueError("vertex_factory must not be None.")
        if edge_factory is None:
            raise ValueError("edge_factory must not be None.")
        self.vertex_factory = vertex_factory
        self.edge_factory = edge_factory
        self.augmented_edge_attr: Dict[str, Any] = dict(augmented_edge_attr or {})
        self._super_source: Optional[NodeID] = None
        self._super_sink: Optional[NodeID] = None
        self._has_super_source = False
        self._has_super_sink = False
        self._augmented = False
        self._augmented_edges: List[EdgeID] = []
        self.super_source_added: List[Callable[[NodeID], None]] = []
        self.super_sink_added: List[Callable[[NodeID], None]] = []
        self.edge_added: List[Callable[[EdgeID], None]] = []

    @property
    def super_source(self) -> Optional[NodeID]:
        return self._super_source

    @property
    def super_sink(self) -> Optional[NodeID]:
        return self._super_sink

    @property
    def augmented(self) -> bool:
        return self._augmented

    @property
    def augmented_edges(self) -> List[EdgeID]:
        return list(self._augmented_edges)

    def _internal_compute(self) -> None:
        if self._augmented:
            raise GraphAlreadyAugmentedError("Graph already augmented.")
        self._augment_graph()
        self._augmented = True
        logger.debug(
            "%s added %d edges (super_source=%r, super_sink=%r)",
            type(self).__name__,
            len(self._augmented_edges),
            self._super_source,
            self._super_sink,
        )

    @abstractmethod
    def _augment_graph(self) -> None:
        """Add the synthetic edges; use `_add_augmented_edge()`."""

    def _ensure_super_source(self) -> NodeID:
        if not self._has_super_source:
            vertex = self.vertex_factory()
            self.visited_graph.add_node(vertex)
            self._super_source = vertex
            self._has_super_source = True
            for callback in list(self.super_source_added):
                callback(vertex)
        return self._super_source

    def _ensure_super_sink(self) -> NodeID:
        if not self._has_super_sink:
            vertex = self.vertex_factory()
            self.visited_graph.add_node(vertex)
            self._super_sink = vertex
            self._has_super_sink = True
            for callback in list(self.super_sink_added):
                callback(vertex)
        return self._super_sink

    def _add_augmented_edge(self, source: NodeID, target: NodeID) -> EdgeID:
        edge = self.edge_factory(source, target)
        self.visited_graph.add_edge(source, target, key=edge, **self.augmented_edge_attr)
        self._augmented_edges.append(edge)
        for callback in list(self.edge_added):
            callback(edge)
        return edge

    def _connect_from_super_source(self, vertex: NodeID) -> EdgeID:
        return self._add_augmented_edge(self._ensure_super_source(), vertex)

    def _connect_to_super_sink(self, vertex: NodeID) -> EdgeID:
        return self._add_augmented_edge(vertex, self._ensure_super_sink())

    def _clean(self) -> None:
        # A failed or aborted run must not leave half an augmentation behind.
        if not self._augmented:
            self._remove_added()

    def rollback(self) -> None:
        """Remove the super vertices and every synthetic edge."""
        if not self._augmented:
            return
        self._augmented = False
        self._remove_added()

    def _remove_added(self) -> None:
        graph = self.visited_graph
        for edge in self._augmented_edges:
            if graph.has_edge_by_id(edge):
                graph.remove_edge_by_id(edge)
        if self._has_super_source and self._super_source in graph:
            graph.remove_node(self._super_source)
        if self._has_super_sink and self._super_sink in graph:
            graph.remove_node(self._super_sink)
        self._super_source = None
        self._super_sink = None
        self._has_super_source = False
        self._has_super_sink = False
        self._augmented_edges.clear()

    def __enter__(self) -> GraphAugmentorBase:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.rollback()


class MultiSourceSinkGraphAugmentor(GraphAugmentorBase):
    """Feed every in-degree-0 vertex from a super-source and drain every
    out-degree-0 vertex into a super-sink."""

    def _augment_graph(self) -> None:
        graph = self.visited_graph
        # Deficiency is decided on the original graph; super vertices are new.
        for vertex in list(graph.nodes):
            self._throw_if_cancellation_requested()
            if graph.is_in_edges_empty(vertex):
                self._connect_from_super_source(vertex)
            if graph.is_out_edges_empty(vertex):
                self._connect_to_super_sink(vertex)


class AllVerticesGraphAugmentor(GraphAugmentorBase):
    """Wire the super-source to, and the super-sink from, every vertex."""

    def _augment_graph(self) -> None:
        for vertex in list(self.visited_graph.nodes):
            self._throw_if_cancellation_requested()
            self._connect_from_super_source(vertex)
            self._connect_to_super_sink(vertex)


class BipartiteToMaximumFlowGraphAugmentor(GraphAugmentorBase):
    """Wire the super-source to a left vertex set and a right set to the super-sink.

    Attributes:
        source_to_vertices: Vertices fed by the super-source.
        vertices_to_sink: Vertices draining into the super-sink.
    """

    def __init__(
        self,
        visited_graph: StrictMultiDiGraph,
        source_to_vertices: Iterable[NodeID],
        vertices_to_sink: Iterable[NodeID],
        vertex_factory: VertexFactory,
        edge_factory: EdgeFactory,
        augmented_edge_attr: Optional[Dict[str, Any]] = None,
        host: Optional[AlgorithmBase] = None,
    ) -> None:
        super().__init__(
            visited_graph, vertex_factory, edge_factory, augmented_edge_attr, host
        )
        if source_to_vertices is None:
            raise ValueError("source_to_vertices must not be None.")
        if vertices_to_sink is None:
            raise ValueError("vertices_to_sink must not be None.")
        self.source_to_vertices = list(source_to_vertices)
        self.vertices_to_sink = list(vertices_to_sink)

    def _augment_graph(self) -> None:
        for vertex in self.source_to_vertices:
            self._throw_if_cancellation_requested()
            self._connect_from_super_source(vertex)
        for vertex in self.vertices_to_sink:
            self._throw_if_cancellation_requested()
            self._connect_to_super_sink(vertex)
