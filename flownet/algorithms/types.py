"""Types and data structures for algorithm analytics."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Set

from flownet.graph.strict_multidigraph import EdgeID, NodeID


@dataclass(frozen=True)
class FlowSummary:
    """Summary of a max-flow computation.

    Only edges of the input graph are reported; reverse edges created for the
    computation are left out.

    Attributes:
        total_flow: The maximum flow value achieved.
        edge_flow: Flow on each edge (``capacity - residual``).
        residual_cap: Remaining capacity on each edge.
        reachable: Vertices reachable from the source in the final residual graph.
        min_cut: Saturated edges from a reachable to an unreachable vertex.
    """

    total_flow: float
    edge_flow: Dict[EdgeID, float]
    residual_cap: Dict[EdgeID, float]
    reachable: Set[NodeID]
    min_cut: List[EdgeID]

    @property
    def min_cut_capacity(self) -> float:
        """Total flow crossing the min-cut; equals ``total_flow`` by duality."""
        return sum(self.edge_flow[edge] for edge in self.min_cut)
