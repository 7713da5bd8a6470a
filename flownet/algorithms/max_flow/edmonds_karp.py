"""Maximum flow via Edmonds-Karp shortest augmenting paths.

Each round runs a breadth-first search from the source over a lazily filtered
residual view (edges with positive residual capacity). If the sink is reached,
the bottleneck residual along the predecessor path is pushed: subtracted from
every forward edge and added to each paired reverse edge, which lets later
rounds cancel flow. The loop ends when the sink becomes unreachable.

Breadth-first order makes every augmenting path a fewest-edges path, which
bounds the number of rounds by O(V * E) independently of capacities.

The graph must carry reverse edges before the run; see
`flownet.algorithms.max_flow.reversed_edges.ReversedEdgeAugmentor`.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from flownet.algorithms.base import AlgorithmBase, ComputationAborted, ComputationState
from flownet.algorithms.bfs import BreadthFirstSearch
from flownet.algorithms.max_flow.base import (
    CapacityFunc,
    FlowPhase,
    MaximumFlowAlgorithm,
)
from flownet.algorithms.max_flow.predicates import residual_view
from flownet.algorithms.max_flow.reversed_edges import ReversedEdgeAugmentor
from flownet.algorithms.observers import GraphColor, VertexPredecessorRecorderObserver
from flownet.config import FLOW_CONFIG
from flownet.exceptions import GraphNotAugmentedError, NegativeCapacityError
from flownet.graph.strict_multidigraph import (
    EdgeFactory,
    EdgeID,
    NodeID,
    StrictMultiDiGraph,
)
from flownet.logging import get_logger, log_duration

logger = get_logger(__name__)


class EdmondsKarpMaximumFlow(MaximumFlowAlgorithm):
    """Edmonds-Karp maximum flow on a directed graph with non-negative capacities.

    Example:
        >>> from flownet.algorithms.max_flow import capacity_from_attr
        >>> from flownet.graph import Edge
        >>> g = StrictMultiDiGraph()
        >>> for v in "ST":
        ...     g.add_node(v)
        >>> _ = g.insert_edge(Edge("S", "T"), capacity=7.0)
        >>> reverser = ReversedEdgeAugmentor(g, Edge)
        >>> reverser.add_reversed_edges()
        >>> algo = EdmondsKarpMaximumFlow(g, capacity_from_attr(g), Edge, reverser)
        >>> algo.compute("S", "T")
        >>> algo.max_flow
        7.0

    Attributes:
        rounds: Number of augmenting paths pushed by the last run.
    """

    def __init__(
        self,
        visited_graph: StrictMultiDiGraph,
        capacities: CapacityFunc,
        edge_factory: EdgeFactory,
        reversed_edge_augmentor: ReversedEdgeAugmentor,
        host: Optional[AlgorithmBase] = None,
    ) -> None:
        """Initialize the solver.

        Args:
            visited_graph: Flow network, already carrying (or about to carry)
                reverse edges.
            capacities: Edge -> capacity. Must return 0 for created reverse edges.
            edge_factory: Edge factory of the network; stored as
                `edge_factory` and not called by the solver.
            reversed_edge_augmentor: Augmentor bound to ``visited_graph``.
            host: Hosting algorithm sharing its cancel manager.

        Raises:
            ValueError: If an argument is None or the augmentor targets a
                different graph instance.
        """
        super().__init__(visited_graph, capacities, edge_factory, host)
        if reversed_edge_augmentor is None:
            raise ValueError("reversed_edge_augmentor must not be None.")
        if reversed_edge_augmentor.visited_graph is not visited_graph:
            raise ValueError("Must target the same graph.")
        self._reverser = reversed_edge_augmentor
        self._seeded_capacities: Dict[EdgeID, float] = {}
        self.rounds = 0

    @property
    def reversed_edges(self) -> Dict[EdgeID, EdgeID]:
        return self._reverser.reversed_edges

    def compute(  # type: ignore[override]
        self, source: Optional[NodeID] = None, sink: Optional[NodeID] = None
    ) -> None:
        """Compute the maximum flow, optionally setting source and sink first.

        Raises:
            GraphNotAugmentedError: Reverse edges were not added yet.
            MissingEndpointError: Source or sink is not set.
            EndpointNotInGraphError: Source or sink is not in the graph.
            NegativeCapacityError: An edge has a negative capacity.
        """
        if source is not None:
            self.source = source
        if sink is not None:
            self.sink = sink
        try:
            super().compute()
        except ComputationAborted:
            self._set_phase(FlowPhase.ABORTED)
            raise
        except Exception:
            self._set_phase(FlowPhase.FAILED)
            raise
        if self.state == ComputationState.ABORTED:
            self._set_phase(FlowPhase.ABORTED)
        else:
            self._set_phase(FlowPhase.DONE)

    def _initialize(self) -> None:
        # Preconditions are checked before any state is reset.
        self._set_phase(FlowPhase.INITIALIZING)
        if not self._reverser.augmented:
            raise GraphNotAugmentedError(
                "The graph has not been augmented yet. Call "
                "ReversedEdgeAugmentor.add_reversed_edges() before running this algorithm."
            )
        self._validate_endpoints()
        super()._initialize()
        self.rounds = 0
        self._seeded_capacities = {}

    def edge_flow(self, edge: EdgeID) -> float:
        """Return ``capacity - residual`` of an edge after a run.

        Created reverse edges report the negated flow of their partner.
        """
        return self._seeded_capacities[edge] - self.residual_capacities[edge]

    def _seed_residual_capacities(self) -> None:
        graph = self.visited_graph
        seeded: Dict[EdgeID, float] = {}
        for vertex in graph.nodes:
            for edge in graph.out_edges_of(vertex):
                capacity = float(self.capacities(edge))
                if capacity < 0:
                    raise NegativeCapacityError(edge, capacity)
                seeded[edge] = capacity
        # Written only once every capacity has been validated.
        self._seeded_capacities = dict(seeded)
        self.residual_capacities.update(seeded)

    def _search_augmenting_path(self, source: NodeID) -> None:
        self._set_phase(FlowPhase.SEARCHING)
        self.predecessors.clear()
        bfs = BreadthFirstSearch(
            residual_view(self.visited_graph, self.residual_capacities),
            vertex_colors=self.vertex_colors,
            host=self,
        )
        recorder = VertexPredecessorRecorderObserver(self.predecessors)
        with recorder.attach(bfs):
            bfs.compute(source)

    def _augmenting_path(self, source: NodeID, sink: NodeID) -> List[EdgeID]:
        """Return the predecessor path as edges from ``sink`` back to ``source``."""
        graph = self.visited_graph
        path: List[EdgeID] = []
        u = sink
        while u != source:
            edge = self.predecessors[u]
            path.append(edge)
            u = graph.edge_source(edge)
        return path

    def _augment(self, source: NodeID, sink: NodeID) -> float:
        self._set_phase(FlowPhase.AUGMENTING)
        residuals = self.residual_capacities
        reversed_edges = self.reversed_edges
        path = self._augmenting_path(source, sink)

        delta = min(residuals[edge] for edge in path)

        for edge in path:
            residuals[edge] -= delta
            reversed_edge = reversed_edges.get(edge)
            if reversed_edge is not None:
                residuals[reversed_edge] += delta
        return delta

    def _internal_compute(self) -> None:
        source, sink = self.source, self.sink
        assert source is not None and sink is not None

        self._throw_if_cancellation_requested()
        with log_duration(logger, f"Edmonds-Karp {source!r}->{sink!r}"):
            self._seed_residual_capacities()

            # Flow from a vertex to itself is zero by conservation.
            if source != sink:
                self._run_rounds(source, sink)

            max_flow = 0.0
            for edge in self.visited_graph.out_edges_of(source):
                max_flow += self._seeded_capacities[edge] - self.residual_capacities[edge]
            self._max_flow = max_flow

        logger.debug(
            "Max flow %r->%r = %s after %d rounds", source, sink, max_flow, self.rounds
        )

    def _run_rounds(self, source: NodeID, sink: NodeID) -> None:
        interval = FLOW_CONFIG.progress_log_interval
        while True:
            self._throw_if_cancellation_requested()
            self._search_augmenting_path(source)
            if self.vertex_colors[sink] == GraphColor.WHITE:
                break

            self._throw_if_cancellation_requested()
            delta = self._augment(source, sink)
            self.rounds += 1
            if interval > 0 and self.rounds % interval == 0:
                logger.debug("Round %d pushed %s", self.rounds, delta)
