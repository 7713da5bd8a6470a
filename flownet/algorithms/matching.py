"""Maximum bipartite matching reduced to a unit-capacity max-flow problem."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Set

from flownet.algorithms.base import AlgorithmBase
from flownet.algorithms.max_flow.augmentors import BipartiteToMaximumFlowGraphAugmentor
from flownet.algorithms.max_flow.edmonds_karp import EdmondsKarpMaximumFlow
from flownet.algorithms.max_flow.reversed_edges import ReversedEdgeAugmentor
from flownet.config import FLOW_CONFIG
from flownet.graph.strict_multidigraph import (
    EdgeFactory,
    EdgeID,
    NodeID,
    StrictMultiDiGraph,
    VertexFactory,
)
from flownet.logging import get_logger

logger = get_logger(__name__)


class MaximumBipartiteMatching(AlgorithmBase[StrictMultiDiGraph]):
    """Find a maximum matching between two vertex sets.

    The graph is temporarily extended with a super-source feeding
    ``source_to_vertices``, a super-sink drained by ``vertices_to_sink`` and
    reverse edges, then Edmonds-Karp runs with unit capacities. Every
    saturated edge not touching a super vertex is a matched edge. Both
    augmentations are rolled back when the computation ends, whatever the
    outcome.

    Attributes:
        source_to_vertices: Left vertex set.
        vertices_to_sink: Right vertex set.
        vertex_factory: Creates the super vertices.
        edge_factory: Creates synthetic and reverse edge keys.
        matched_edges: Edges of the matching found by the last run.
    """

    def __init__(
        self,
        visited_graph: StrictMultiDiGraph,
        source_to_vertices: Iterable[NodeID],
        vertices_to_sink: Iterable[NodeID],
        vertex_factory: VertexFactory,
        edge_factory: EdgeFactory,
        host: Optional[AlgorithmBase] = None,
    ) -> None:
        super().__init__(visited_graph, host)
        if source_to_vertices is None:
            raise ValueError("source_to_vertices must not be None.")
        if vertices_to_sink is None:
            raise ValueError("vertices_to_sink must not be None.")
        if vertex_factory is None:
            raise ValueError("vertex_factory must not be None.")
        if edge_factory is None:
            raise ValueError("edge_factory must not be None.")
        self.source_to_vertices = list(source_to_vertices)
        self.vertices_to_sink = list(vertices_to_sink)
        self.vertex_factory = vertex_factory
        self.edge_factory = edge_factory
        self.matched_edges: List[EdgeID] = []

    def _internal_compute(self) -> None:
        self.matched_edges.clear()
        graph = self.visited_graph

        augmentor: Optional[BipartiteToMaximumFlowGraphAugmentor] = None
        reverser: Optional[ReversedEdgeAugmentor] = None
        try:
            self._throw_if_cancellation_requested()
            augmentor = BipartiteToMaximumFlowGraphAugmentor(
                graph,
                self.source_to_vertices,
                self.vertices_to_sink,
                self.vertex_factory,
                self.edge_factory,
                host=self,
            )
            augmentor.compute()
            if augmentor.super_source is None or augmentor.super_sink is None:
                # One side is empty: nothing can be matched.
                return

            self._throw_if_cancellation_requested()
            reverser = ReversedEdgeAugmentor(graph, self.edge_factory)
            reverser.add_reversed_edges()

            created: Set[EdgeID] = set(reverser.augmented_edges)
            capacities: Dict[EdgeID, float] = {
                edge: 0.0 if edge in created else 1.0 for edge in graph.get_edges()
            }

            self._throw_if_cancellation_requested()
            flow = EdmondsKarpMaximumFlow(
                graph, capacities.__getitem__, self.edge_factory, reverser, host=self
            )
            flow.compute(augmentor.super_source, augmentor.super_sink)

            supers = {augmentor.super_source, augmentor.super_sink}
            edges = graph.get_edges()
            for edge, residual in flow.residual_capacities.items():
                if edge in created or not FLOW_CONFIG.is_saturated(residual):
                    continue
                source, target, _, _ = edges[edge]
                if source in supers or target in supers:
                    continue
                self.matched_edges.append(edge)

            logger.debug(
                "Matched %d edges between %d and %d vertices",
                len(self.matched_edges),
                len(self.source_to_vertices),
                len(self.vertices_to_sink),
            )
        finally:
            if reverser is not None and reverser.augmented:
                reverser.remove_reversed_edges()
            if augmentor is not None and augmentor.augmented:
                augmentor.rollback()
