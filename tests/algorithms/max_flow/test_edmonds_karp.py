"""
Tests for EdmondsKarpMaximumFlow.

This module contains tests for:
- Flow values on known networks
- Properties of the resulting flow (feasibility, conservation, bounds)
- Precondition enforcement and error ordering
- Phase tracking, cancellation and logging
- Cross-checks against networkx on random networks
"""

import logging
import random

import networkx as nx
import pytest
from pytest import approx

from flownet.algorithms.base import ComputationState
from flownet.algorithms.max_flow import (
    EdmondsKarpMaximumFlow,
    FlowPhase,
    ReversedEdgeAugmentor,
    capacity_from_attr,
)
from flownet.config import FLOW_CONFIG
from flownet.exceptions import (
    EndpointNotInGraphError,
    GraphNotAugmentedError,
    MissingEndpointError,
    NegativeCapacityError,
)
from flownet.graph.strict_multidigraph import Edge, StrictMultiDiGraph


def make_solver(graph, augment=True):
    reverser = ReversedEdgeAugmentor(graph, Edge)
    if augment:
        reverser.add_reversed_edges()
    return EdmondsKarpMaximumFlow(graph, capacity_from_attr(graph), Edge, reverser)


def input_edges(solver):
    created = set(solver._reverser.augmented_edges)
    return [e for e in solver.visited_graph.get_edges() if e not in created]


def to_networkx(graph):
    oracle = nx.DiGraph()
    oracle.add_nodes_from(graph.nodes)
    for u, v, _, attr in graph.get_edges().values():
        if oracle.has_edge(u, v):
            oracle[u][v]["capacity"] += attr["capacity"]
        else:
            oracle.add_edge(u, v, capacity=attr["capacity"])
    return oracle


def random_network(seed, n=8, p=0.35):
    rng = random.Random(seed)
    g = StrictMultiDiGraph()
    for i in range(n):
        g.add_node(i)
    for u in range(n):
        for v in range(n):
            if u != v and rng.random() < p:
                g.add_edge(u, v, capacity=float(rng.randint(0, 10)))
    return g


class TestKnownNetworks:
    def test_diamond(self, diamond):
        solver = make_solver(diamond)
        solver.compute("S", "T")
        assert solver.max_flow == approx(5.0)
        assert solver.state == ComputationState.FINISHED
        assert solver.phase == FlowPhase.DONE

    def test_zero_capacity(self, zero_capacity):
        solver = make_solver(zero_capacity)
        solver.compute("S", "T")
        assert solver.max_flow == 0.0
        assert solver.rounds == 0
        assert solver.vertex_colors["T"] == 0

    def test_single_edge(self, single_edge):
        solver = make_solver(single_edge)
        solver.compute("S", "T")
        assert solver.max_flow == 7.0
        assert solver.rounds == 1
        assert solver.residual_capacities[Edge("S", "T")] == 0.0
        assert solver.residual_capacities[Edge("T", "S")] == 7.0
        assert solver.edge_flow(Edge("S", "T")) == 7.0
        assert solver.edge_flow(Edge("T", "S")) == -7.0

    def test_flow_network(self, flow_network):
        solver = make_solver(flow_network)
        solver.compute("s", "t")
        assert solver.max_flow == approx(23.0)

    def test_parallel_edges(self, parallel_edges):
        solver = make_solver(parallel_edges)
        solver.compute("A", "C")
        assert solver.max_flow == approx(8.0)
        assert solver.edge_flow(Edge("A", "B", 0)) == approx(5.0)
        assert solver.edge_flow(Edge("A", "B", 1)) == approx(3.0)

    def test_existing_antiparallel_edges(self):
        g = StrictMultiDiGraph()
        for n in "SAT":
            g.add_node(n)
        sa = g.add_edge("S", "A", capacity=4.0)
        back = g.add_edge("A", "S", capacity=2.0)
        g.add_edge("A", "T", capacity=3.0)
        solver = make_solver(g)
        solver.compute("S", "T")
        assert solver.max_flow == approx(3.0)
        assert solver.edge_flow(sa) == approx(3.0)
        assert solver.edge_flow(back) == 0.0
        assert solver.residual_capacities[back] == 2.0

    def test_unreachable_sink(self, flow_network):
        solver = make_solver(flow_network)
        solver.compute("s", "x")
        assert solver.max_flow == 0.0
        assert solver.rounds == 0

    def test_source_equals_sink(self, diamond):
        solver = make_solver(diamond)
        solver.compute("S", "S")
        assert solver.max_flow == 0.0
        assert solver.rounds == 0
        assert solver.phase == FlowPhase.DONE

    def test_custom_capacity_function(self, diamond):
        reverser = ReversedEdgeAugmentor(diamond, Edge)
        reverser.add_reversed_edges()
        created = set(reverser.augmented_edges)
        solver = EdmondsKarpMaximumFlow(
            diamond, lambda e: 0.0 if e in created else 1.0, Edge, reverser
        )
        solver.compute("S", "T")
        assert solver.max_flow == 2.0


class TestFlowProperties:
    def test_capacity_feasibility(self, flow_network):
        solver = make_solver(flow_network)
        solver.compute("s", "t")
        for edge in input_edges(solver):
            capacity = flow_network.get_edge_attr(edge)["capacity"]
            assert 0.0 <= solver.residual_capacities[edge] <= capacity

    def test_feasibility_with_antiparallel_edges(self):
        g = StrictMultiDiGraph()
        for n in "SABT":
            g.add_node(n)
        g.add_edge("S", "A", capacity=5.0)
        g.add_edge("S", "B", capacity=2.0)
        g.add_edge("A", "B", capacity=4.0)
        g.add_edge("B", "A", capacity=3.0)
        g.add_edge("B", "T", capacity=6.0)
        g.add_edge("A", "T", capacity=1.0)
        solver = make_solver(g)
        solver.compute("S", "T")

        assert solver.max_flow == approx(7.0)
        for edge in input_edges(solver):
            capacity = g.get_edge_attr(edge)["capacity"]
            assert 0.0 <= solver.edge_flow(edge) <= capacity
            assert 0.0 <= solver.residual_capacities[edge] <= capacity


    def test_conservation(self, flow_network):
        solver = make_solver(flow_network)
        solver.compute("s", "t")
        edges = input_edges(solver)
        for vertex in flow_network.nodes:
            if vertex in ("s", "t"):
                continue
            inflow = sum(
                solver.edge_flow(e) for e in edges if flow_network.edge_target(e) == vertex
            )
            outflow = sum(
                solver.edge_flow(e) for e in edges if flow_network.edge_source(e) == vertex
            )
            assert inflow == approx(outflow)

    def test_reverse_residual_matches_forward_flow(self, flow_network):
        solver = make_solver(flow_network)
        solver.compute("s", "t")
        for edge in input_edges(solver):
            partner = solver.reversed_edges[edge]
            assert solver.residual_capacities[partner] == approx(solver.edge_flow(edge))

    def test_saturation_bounds(self, flow_network):
        solver = make_solver(flow_network)
        solver.compute("s", "t")
        out_cap = sum(
            flow_network.get_edge_attr(e)["capacity"] for e in flow_network.out_edges_of("s")
        )
        in_cap = sum(
            flow_network.get_edge_attr(e)["capacity"] for e in flow_network.in_edges_of("t")
        )
        assert 0.0 <= solver.max_flow <= min(out_cap, in_cap)

    def test_deterministic(self, flow_network):
        first = make_solver(flow_network.copy())
        second = make_solver(flow_network.copy())
        first.compute("s", "t")
        second.compute("s", "t")
        assert first.max_flow == second.max_flow
        assert first.rounds == second.rounds
        assert first.residual_capacities == second.residual_capacities

    def test_rerun_gives_same_result(self, diamond):
        solver = make_solver(diamond)
        solver.compute("S", "T")
        residuals = dict(solver.residual_capacities)
        solver.compute()
        assert solver.max_flow == approx(5.0)
        assert solver.residual_capacities == residuals

    @pytest.mark.parametrize("seed", range(12))
    def test_matches_networkx(self, seed):
        g = random_network(seed)
        expected = nx.maximum_flow_value(to_networkx(g), 0, 7)
        solver = make_solver(g)
        solver.compute(0, 7)
        assert solver.max_flow == approx(expected)
        edges = input_edges(solver)
        for edge in edges:
            capacity = g.get_edge_attr(edge)["capacity"]
            assert -1e-9 <= solver.edge_flow(edge) <= capacity + 1e-9
        for vertex in range(1, 7):
            inflow = sum(solver.edge_flow(e) for e in edges if g.edge_target(e) == vertex)
            outflow = sum(solver.edge_flow(e) for e in edges if g.edge_source(e) == vertex)
            assert inflow == approx(outflow)


class TestPreconditions:
    def test_requires_augmented_graph(self, diamond):
        solver = make_solver(diamond, augment=False)
        with pytest.raises(GraphNotAugmentedError):
            solver.compute("S", "T")
        assert solver.state == ComputationState.FAILED
        assert solver.phase == FlowPhase.FAILED
        assert solver.max_flow is None

    def test_augmentation_checked_before_endpoints(self, diamond):
        solver = make_solver(diamond, augment=False)
        with pytest.raises(GraphNotAugmentedError):
            solver.compute()

    def test_missing_source(self, diamond):
        solver = make_solver(diamond)
        solver.sink = "T"
        with pytest.raises(MissingEndpointError, match="Source"):
            solver.compute()

    def test_missing_sink(self, diamond):
        solver = make_solver(diamond)
        with pytest.raises(MissingEndpointError, match="Sink"):
            solver.compute(source="S")

    def test_source_not_in_graph(self, diamond):
        solver = make_solver(diamond)
        with pytest.raises(EndpointNotInGraphError, match="Source"):
            solver.compute("Z", "T")

    def test_sink_not_in_graph(self, diamond):
        solver = make_solver(diamond)
        with pytest.raises(EndpointNotInGraphError, match="Sink"):
            solver.compute("S", "Z")

    def test_failed_precondition_keeps_previous_result(self, diamond):
        solver = make_solver(diamond)
        solver.compute("S", "T")
        with pytest.raises(EndpointNotInGraphError):
            solver.compute("S", "Z")
        assert solver.max_flow == approx(5.0)

    def test_negative_capacity(self, diamond):
        diamond.update_edge_attr(Edge("B", "T"), capacity=-1.0)
        solver = make_solver(diamond)
        with pytest.raises(NegativeCapacityError) as excinfo:
            solver.compute("S", "T")
        assert excinfo.value.edge == Edge("B", "T")
        assert excinfo.value.capacity == -1.0
        assert solver.residual_capacities == {}
        assert solver.max_flow is None

    def test_augmentor_on_other_graph(self, diamond):
        reverser = ReversedEdgeAugmentor(diamond.copy(), Edge)
        with pytest.raises(ValueError, match="same graph"):
            EdmondsKarpMaximumFlow(diamond, capacity_from_attr(diamond), Edge, reverser)

    def test_none_arguments(self, diamond):
        reverser = ReversedEdgeAugmentor(diamond, Edge)
        capacity = capacity_from_attr(diamond)
        with pytest.raises(ValueError):
            EdmondsKarpMaximumFlow(diamond, None, Edge, reverser)
        with pytest.raises(ValueError):
            EdmondsKarpMaximumFlow(diamond, capacity, None, reverser)
        with pytest.raises(ValueError):
            EdmondsKarpMaximumFlow(diamond, capacity, Edge, None)


class TestLifecycle:
    def test_phases(self, diamond):
        solver = make_solver(diamond)
        phases = []
        solver.phase_changed.append(phases.append)
        assert solver.phase == FlowPhase.IDLE

        solver.compute("S", "T")

        assert phases[0] == FlowPhase.INITIALIZING
        assert phases[-1] == FlowPhase.DONE
        assert phases.count(FlowPhase.AUGMENTING) == solver.rounds
        assert phases.count(FlowPhase.SEARCHING) == solver.rounds + 1

    def test_abort_leaves_max_flow_unset(self, diamond):
        solver = make_solver(diamond)

        def on_phase(phase):
            if phase == FlowPhase.AUGMENTING:
                solver.abort()

        solver.phase_changed.append(on_phase)
        solver.compute("S", "T")

        assert solver.state == ComputationState.ABORTED
        assert solver.phase == FlowPhase.ABORTED
        assert solver.max_flow is None
        assert solver.rounds == 1

    def test_abort_during_search(self, flow_network):
        solver = make_solver(flow_network)
        solver.phase_changed.append(
            lambda phase: solver.abort() if phase == FlowPhase.SEARCHING else None
        )
        solver.compute("s", "t")
        assert solver.state == ComputationState.ABORTED
        assert solver.rounds == 0
        assert solver.max_flow is None

    def test_progress_logging(self, diamond, caplog, monkeypatch):
        monkeypatch.setattr(FLOW_CONFIG, "progress_log_interval", 1)
        caplog.set_level(logging.DEBUG, logger="flownet")
        solver = make_solver(diamond)
        solver.compute("S", "T")
        assert "Round 1 pushed" in caplog.text
        assert "Max flow 'S'->'T' = 5.0" in caplog.text

    def test_abort_is_logged(self, diamond, caplog):
        caplog.set_level(logging.WARNING, logger="flownet")
        solver = make_solver(diamond)
        solver.phase_changed.append(
            lambda phase: solver.abort() if phase == FlowPhase.AUGMENTING else None
        )
        solver.compute("S", "T")
        assert "EdmondsKarpMaximumFlow aborted" in caplog.text

    def test_abort_before_compute_is_ignored(self, diamond):
        solver = make_solver(diamond)
        solver.abort()
        solver.compute("S", "T")
        assert solver.state == ComputationState.FINISHED
        assert solver.max_flow == approx(5.0)

    def test_rerun_after_abort(self, diamond):
        solver = make_solver(diamond)

        def on_phase(phase):
            if phase == FlowPhase.AUGMENTING:
                solver.abort()

        solver.phase_changed.append(on_phase)
        solver.compute("S", "T")
        assert solver.state == ComputationState.ABORTED

        solver.phase_changed.remove(on_phase)
        solver.compute("S", "T")
        assert solver.state == ComputationState.FINISHED
        assert solver.phase == FlowPhase.DONE
        assert solver.max_flow == approx(5.0)


def test_solver_never_creates_edges(diamond):
    def edge_factory(source, target):
        raise AssertionError("the solver must not create edges")

    reverser = ReversedEdgeAugmentor(diamond, Edge)
    reverser.add_reversed_edges()
    edges = set(diamond.get_edges())
    solver = EdmondsKarpMaximumFlow(
        diamond, capacity_from_attr(diamond), edge_factory, reverser
    )
    solver.compute("S", "T")
    assert solver.edge_factory is edge_factory
    assert solver.max_flow == approx(5.0)
    assert set(diamond.get_edges()) == edges
