"""Shared fixtures: small flow networks used across the test suite."""

from __future__ import annotations

import itertools

import pytest

from flownet.graph.strict_multidigraph import Edge, StrictMultiDiGraph


def build_graph(nodes, edges):
    """Build a graph from nodes and ``(source, target, capacity)`` triples.

    Edges get `Edge(source, target)` keys, or `Edge(source, target, i)` when a
    4th tuple element ``i`` is given for parallel edges.
    """
    g = StrictMultiDiGraph()
    for node in nodes:
        g.add_node(node)
    for row in edges:
        source, target, capacity = row[:3]
        key = row[3] if len(row) > 3 else None
        g.insert_edge(Edge(source, target, key), capacity=capacity)
    return g


@pytest.fixture
def diamond():
    """S->A:3, S->B:2, A->B:1, A->T:2, B->T:3. Max flow S->T is 5."""
    return build_graph(
        "SABT",
        [
            ("S", "A", 3.0),
            ("S", "B", 2.0),
            ("A", "B", 1.0),
            ("A", "T", 2.0),
            ("B", "T", 3.0),
        ],
    )


@pytest.fixture
def star():
    """X->Z, Y->Z, Z->W: two in-degree-0 vertices and one out-degree-0 vertex."""
    return build_graph(
        "XYZW",
        [("X", "Z", 1.0), ("Y", "Z", 1.0), ("Z", "W", 1.0)],
    )


@pytest.fixture
def zero_capacity():
    """Diamond-shaped network where every capacity is 0."""
    return build_graph(
        "SABT",
        [("S", "A", 0.0), ("S", "B", 0.0), ("A", "T", 0.0), ("B", "T", 0.0)],
    )


@pytest.fixture
def single_edge():
    """S->T with capacity 7."""
    return build_graph("ST", [("S", "T", 7.0)])


@pytest.fixture
def flow_network():
    """Seven-vertex network with a cross edge and a back edge. Max flow s->t is 23.

    Classic CLRS network: s->v1:16, s->v2:13, v2->v1:4, v1->v3:12, v3->v2:9,
    v2->v4:14, v4->v3:7, v3->t:20, v4->t:4, plus an isolated vertex "x".
    """
    return build_graph(
        ["s", "v1", "v2", "v3", "v4", "t", "x"],
        [
            ("s", "v1", 16.0),
            ("s", "v2", 13.0),
            ("v2", "v1", 4.0),
            ("v1", "v3", 12.0),
            ("v3", "v2", 9.0),
            ("v2", "v4", 14.0),
            ("v4", "v3", 7.0),
            ("v3", "t", 20.0),
            ("v4", "t", 4.0),
        ],
    )


@pytest.fixture
def parallel_edges():
    """Two parallel A->B edges (5 and 3) followed by B->C:10. Max flow A->C is 8."""
    return build_graph(
        "ABC",
        [("A", "B", 5.0, 0), ("A", "B", 3.0, 1), ("B", "C", 10.0)],
    )


@pytest.fixture
def vertex_factory():
    """Vertex factory yielding "super0", "super1", ..."""
    counter = itertools.count()
    return lambda: f"super{next(counter)}"
