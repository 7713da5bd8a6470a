"""Maximum-flow algorithms and the graph augmentations they rely on."""

from flownet.algorithms.max_flow.augmentors import (
    AllVerticesGraphAugmentor,
    BipartiteToMaximumFlowGraphAugmentor,
    GraphAugmentorBase,
    MultiSourceSinkGraphAugmentor,
)
from flownet.algorithms.max_flow.base import (
    CapacityFunc,
    FlowPhase,
    MaximumFlowAlgorithm,
)
from flownet.algorithms.max_flow.calc import calc_max_flow, capacity_from_attr
from flownet.algorithms.max_flow.edmonds_karp import EdmondsKarpMaximumFlow
from flownet.algorithms.max_flow.predicates import (
    ResidualEdgePredicate,
    ReversedResidualEdgePredicate,
    residual_view,
    reversed_residual_view,
)
from flownet.algorithms.max_flow.reversed_edges import ReversedEdgeAugmentor

__all__ = [
    "AllVerticesGraphAugmentor",
    "BipartiteToMaximumFlowGraphAugmentor",
    "CapacityFunc",
    "EdmondsKarpMaximumFlow",
    "FlowPhase",
    "GraphAugmentorBase",
    "MaximumFlowAlgorithm",
    "MultiSourceSinkGraphAugmentor",
    "ResidualEdgePredicate",
    "ReversedEdgeAugmentor",
    "ReversedResidualEdgePredicate",
    "calc_max_flow",
    "capacity_from_attr",
    "residual_view",
    "reversed_residual_view",
]
