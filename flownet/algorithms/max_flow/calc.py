"""One-call max-flow helpers over attribute-carrying graphs."""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple, Union

import networkx as nx

from flownet.algorithms.max_flow.base import CapacityFunc
from flownet.algorithms.max_flow.edmonds_karp import EdmondsKarpMaximumFlow
from flownet.algorithms.max_flow.predicates import residual_view
from flownet.algorithms.max_flow.reversed_edges import ReversedEdgeAugmentor
from flownet.algorithms.types import FlowSummary
from flownet.config import FLOW_CONFIG
from flownet.graph.strict_multidigraph import (
    Edge,
    EdgeFactory,
    EdgeID,
    NodeID,
    StrictMultiDiGraph,
)


def capacity_from_attr(
    graph: StrictMultiDiGraph,
    capacity_attr: Optional[str] = None,
    default: float = 0.0,
) -> CapacityFunc:
    """Build a capacity function reading an edge attribute.

    The lookup is done on every call, so edges added after this function was
    built (such as reverse edges) are found too.

    Args:
        graph: Graph whose edges carry the attribute.
        capacity_attr: Attribute name; defaults to ``FLOW_CONFIG.capacity_attr``.
        default: Capacity of edges without the attribute.
    """
    attr = capacity_attr or FLOW_CONFIG.capacity_attr
    edges = graph.get_edges()

    def capacity(edge: EdgeID) -> float:
        return edges[edge][3].get(attr, default)

    return capacity


def calc_max_flow(
    graph: StrictMultiDiGraph,
    src_node: NodeID,
    dst_node: NodeID,
    *,
    capacity_attr: Optional[str] = None,
    edge_factory: EdgeFactory = Edge,
    copy_graph: bool = True,
    return_summary: bool = False,
    tolerance: Optional[float] = None,
) -> Union[float, Tuple[float, FlowSummary]]:
    """Compute the max flow between two nodes with Edmonds-Karp.

    Adds reverse edges to a working graph, runs `EdmondsKarpMaximumFlow` and
    optionally summarizes the result.

    Args:
        graph: Graph with a capacity attribute on each edge.
        src_node: Source node.
        dst_node: Destination node.
        capacity_attr: Edge capacity attribute; defaults to ``FLOW_CONFIG.capacity_attr``.
        edge_factory: Factory for reverse edge keys.
        copy_graph: If True, work on a copy so ``graph`` is never touched.
            Otherwise the reverse edges are removed again before returning.
        return_summary: If True, also return a `FlowSummary`.
        tolerance: Residual at or below which an edge counts as saturated in
            the min-cut; defaults to ``FLOW_CONFIG.saturation_tolerance``.

    Returns:
        The total flow, or ``(total_flow, FlowSummary)`` if ``return_summary``.

    Examples:
        >>> g = StrictMultiDiGraph()
        >>> for n in ("A", "B", "C"):
        ...     g.add_node(n)
        >>> _ = g.add_edge("A", "B", capacity=10.0)
        >>> _ = g.add_edge("B", "C", capacity=5.0)
        >>> calc_max_flow(g, "A", "C")
        5.0
    """
    attr = capacity_attr or FLOW_CONFIG.capacity_attr
    tol = FLOW_CONFIG.saturation_tolerance if tolerance is None else tolerance

    flow_graph = graph.copy() if copy_graph else graph
    input_edges: List[EdgeID] = list(flow_graph.get_edges())

    reverser = ReversedEdgeAugmentor(flow_graph, edge_factory, {attr: 0.0})
    reverser.add_reversed_edges()
    try:
        algorithm = EdmondsKarpMaximumFlow(
            flow_graph,
            capacity_from_attr(flow_graph, attr),
            edge_factory,
            reverser,
        )
        algorithm.compute(src_node, dst_node)
        total_flow = algorithm.max_flow
        assert total_flow is not None

        if not return_summary:
            return total_flow
        summary = _build_summary(
            flow_graph, algorithm, input_edges, src_node, total_flow, tol
        )
        return total_flow, summary
    finally:
        if not copy_graph:
            reverser.remove_reversed_edges()


def _build_summary(
    flow_graph: StrictMultiDiGraph,
    algorithm: EdmondsKarpMaximumFlow,
    input_edges: List[EdgeID],
    src_node: NodeID,
    total_flow: float,
    tolerance: float,
) -> FlowSummary:
    residuals = algorithm.residual_capacities
    edge_flow: Dict[EdgeID, float] = {e: algorithm.edge_flow(e) for e in input_edges}
    residual_cap: Dict[EdgeID, float] = {e: residuals[e] for e in input_edges}

    view = residual_view(flow_graph, residuals).to_networkx_view()
    reachable = set(nx.descendants(view, src_node)) | {src_node}

    edges = flow_graph.get_edges()
    min_cut: List[EdgeID] = []
    for edge in input_edges:
        u, v, _, _ = edges[edge]
        if u in reachable and v not in reachable and residual_cap[edge] <= tolerance:
            min_cut.append(edge)

    return FlowSummary(
        total_flow=total_flow,
        edge_flow=edge_flow,
        residual_cap=residual_cap,
        reachable=reachable,
        min_cut=min_cut,
    )
