"""flownet: maximum flow on strict multi-directed graphs.

flownet computes maximum flows with the Edmonds-Karp algorithm over
`networkx`-based graphs whose edges are addressed by unique keys.

Primary API:
    calc_max_flow() - One-call max flow between two nodes
    EdmondsKarpMaximumFlow - Configurable solver with residual inspection
    ReversedEdgeAugmentor - Reverse-edge augmentation required by the solver
    MultiSourceSinkGraphAugmentor - Collapse many sources/sinks into one pair
    MaximumBipartiteMatching - Matching via unit-capacity max flow

Example:
    from flownet import Edge, StrictMultiDiGraph, calc_max_flow

    g = StrictMultiDiGraph()
    for n in ("A", "B", "C"):
        g.add_node(n)
    g.add_edge("A", "B", capacity=3.0)
    g.add_edge("B", "C", capacity=2.0)

    flow, summary = calc_max_flow(g, "A", "C", return_summary=True)
"""

from __future__ import annotations

from flownet import logging
from flownet._version import __version__
from flownet.algorithms.base import ComputationState
from flownet.algorithms.matching import MaximumBipartiteMatching
from flownet.algorithms.max_flow import (
    AllVerticesGraphAugmentor,
    BipartiteToMaximumFlowGraphAugmentor,
    EdmondsKarpMaximumFlow,
    FlowPhase,
    MultiSourceSinkGraphAugmentor,
    ReversedEdgeAugmentor,
    calc_max_flow,
    capacity_from_attr,
)
from flownet.algorithms.types import FlowSummary
from flownet.config import FLOW_CONFIG, FlowEngineConfig
from flownet.exceptions import (
    EndpointNotInGraphError,
    FlowNetError,
    GraphAlreadyAugmentedError,
    GraphNotAugmentedError,
    MissingEndpointError,
    NegativeCapacityError,
    VertexNotFoundError,
)
from flownet.graph import Edge, FilteredGraph, StrictMultiDiGraph

__all__ = [
    # Version
    "__version__",
    # Graph
    "Edge",
    "FilteredGraph",
    "StrictMultiDiGraph",
    # Algorithms
    "calc_max_flow",
    "capacity_from_attr",
    "EdmondsKarpMaximumFlow",
    "ReversedEdgeAugmentor",
    "MultiSourceSinkGraphAugmentor",
    "AllVerticesGraphAugmentor",
    "BipartiteToMaximumFlowGraphAugmentor",
    "MaximumBipartiteMatching",
    "ComputationState",
    "FlowPhase",
    # Results
    "FlowSummary",
    # Configuration
    "FLOW_CONFIG",
    "FlowEngineConfig",
    # Errors
    "FlowNetError",
    "NegativeCapacityError",
    "GraphNotAugmentedError",
    "GraphAlreadyAugmentedError",
    "MissingEndpointError",
    "EndpointNotInGraphError",
    "VertexNotFoundError",
    # Utilities
    "logging",
]
