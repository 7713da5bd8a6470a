"""State shared by maximum-flow algorithms."""

from __future__ import annotations

from enum import IntEnum
from typing import Callable, Dict, List, Optional

from flownet.algorithms.base import AlgorithmBase
from flownet.algorithms.observers import GraphColor
from flownet.exceptions import EndpointNotInGraphError, MissingEndpointError
from flownet.graph.strict_multidigraph import (
    EdgeFactory,
    EdgeID,
    NodeID,
    StrictMultiDiGraph,
)

#: Maps an edge to its (non-negative) capacity.
CapacityFunc = Callable[[EdgeID], float]


class FlowPhase(IntEnum):
    """Progress of a max-flow computation."""

    IDLE = 1
    INITIALIZING = 2
    SEARCHING = 3
    AUGMENTING = 4
    DONE = 5
    ABORTED = 6
    FAILED = 7


class MaximumFlowAlgorithm(AlgorithmBase[StrictMultiDiGraph]):
    """Base class for source/sink maximum-flow algorithms.

    Attributes:
        capacities: Capacity function queried once per edge at initialization.
        edge_factory: Edge factory of the flow network. Solvers keep it for
            callers building further edges on the same network; they never
            call it themselves, since reverse edges come from the augmentor.
        residual_capacities: Live residual capacity per edge. Kept after the
            run for inspection.
        predecessors: Tree edge by which each vertex was reached in the last
            augmenting-path search.
        vertex_colors: Traversal colors of the last search.
        phase_changed: Callbacks receiving each new `FlowPhase`.
    """

    def __init__(
        self,
        visited_graph: StrictMultiDiGraph,
        capacities: CapacityFunc,
        edge_factory: EdgeFactory,
        host: Optional[AlgorithmBase] = None,
    ) -> None:
        super().__init__(visited_graph, host)
        if capacities is None:
            raise ValueError("capacities must not be None.")
        if edge_factory is None:
            raise ValueError("edge_factory must not be None.")
        self.capacities = capacities
        self.edge_factory = edge_factory
        self.residual_capacities: Dict[EdgeID, float] = {}
        self.predecessors: Dict[NodeID, EdgeID] = {}
        self.vertex_colors: Dict[NodeID, GraphColor] = {}
        self.phase_changed: List[Callable[[FlowPhase], None]] = []
        self._phase = FlowPhase.IDLE
        self._source: Optional[NodeID] = None
        self._sink: Optional[NodeID] = None
        self._max_flow: Optional[float] = None

    # networkx rejects None as a node, so None safely means "not set".
    @property
    def source(self) -> Optional[NodeID]:
        return self._source

    @source.setter
    def source(self, vertex: NodeID) -> None:
        self._source = vertex

    @property
    def sink(self) -> Optional[NodeID]:
        return self._sink

    @sink.setter
    def sink(self, vertex: NodeID) -> None:
        self._sink = vertex

    @property
    def max_flow(self) -> Optional[float]:
        """Flow value of the last completed run; None before or after an aborted run."""
        return self._max_flow

    @property
    def phase(self) -> FlowPhase:
        return self._phase

    def _set_phase(self, phase: FlowPhase) -> None:
        if phase == self._phase:
            return
        self._phase = phase
        for callback in list(self.phase_changed):
            callback(phase)

    def _initialize(self) -> None:
        self._set_phase(FlowPhase.INITIALIZING)
        self._max_flow = None
        self.residual_capacities.clear()
        self.predecessors.clear()
        self.vertex_colors.clear()

    def _validate_endpoints(self) -> None:
        if self._source is None:
            raise MissingEndpointError("Source is not specified.")
        if self._sink is None:
            raise MissingEndpointError("Sink is not specified.")
        if self._source not in self.visited_graph:
            raise EndpointNotInGraphError(
                f"Source vertex '{self._source}' is not part of the graph."
            )
        if self._sink not in self.visited_graph:
            raise EndpointNotInGraphError(
                f"Sink vertex '{self._sink}' is not part of the graph."
            )
