"""Multi-directed graph with explicit vertices and globally unique edge keys.

`StrictMultiDiGraph` is a `networkx.MultiDiGraph` that refuses to create
vertices implicitly and treats each edge key as the edge's identity across the
whole graph. Keys may be any hashable; the default key type is `Edge`, a small
value object carrying its own endpoints. A key index maps each key to its
endpoints so flow algorithms can resolve an edge without scanning adjacency.
"""

from __future__ import annotations

from dataclasses import dataclass
from pickle import dumps, loads
from typing import Any, Callable, Dict, Hashable, Iterator, List, Optional, Tuple

import networkx as nx

NodeID = Hashable
EdgeID = Hashable
AttrDict = Dict[str, Any]
EdgeTuple = Tuple[NodeID, NodeID, EdgeID, AttrDict]

#: Creates a new vertex, e.g. a super-source.
VertexFactory = Callable[[], NodeID]
#: Creates a new edge key for ``(source, target)``.
EdgeFactory = Callable[[NodeID, NodeID], EdgeID]


@dataclass(frozen=True)
class Edge:
    """Directed edge identified by value.

    Two edges are equal when source, target and key are equal, so parallel
    edges need distinct keys.

    Attributes:
        source: Source vertex.
        target: Target vertex.
        key: Optional discriminator between parallel edges.
    """

    source: NodeID
    target: NodeID
    key: Optional[Hashable] = None

    def __repr__(self) -> str:
        if self.key is None:
            return f"Edge({self.source!r}->{self.target!r})"
        return f"Edge({self.source!r}->{self.target!r}#{self.key!r})"


class StrictMultiDiGraph(nx.MultiDiGraph):
    """Multi-directed graph with strict vertex and edge bookkeeping.

    Rules:
      - Adding an edge never creates its endpoints; they must exist.
      - Adding an existing vertex or an existing edge key raises ValueError.
      - Removing or querying a missing vertex or edge raises ValueError.
      - Edge keys are unique in the whole graph, not just per vertex pair.
        Without an explicit key, ``Edge(u, v, n)`` is generated with a
        graph-wide counter ``n``.
      - ``copy()`` deep-copies through pickle unless told otherwise.
    """

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        # key -> (source, target, key, attr dict shared with networkx storage)
        self._edges: Dict[EdgeID, EdgeTuple] = {}
        # Only advances; removed edges never give their discriminator back.
        self._next_edge_id: int = 0

    def new_edge_key(self, u: NodeID, v: NodeID, key: Optional[int] = None) -> Edge:  # type: ignore[override]
        """Return a fresh `Edge` key for ``u -> v``.

        Overrides the networkx hook of the same name; ``key`` is accepted for
        signature compatibility and ignored.
        """
        n = self._next_edge_id
        self._next_edge_id += 1
        return Edge(u, v, n)

    def copy(self, as_view: bool = False, pickle: bool = True) -> StrictMultiDiGraph:
        """Return a copy of the graph.

        Args:
            as_view: Return a read-only networkx view; honored only when
                ``pickle`` is False.
            pickle: Deep-copy through pickle, carrying the key index and the
                key counter along.
        """
        if pickle:
            return loads(dumps(self))
        return super().copy(as_view=as_view)  # type: ignore[return-value]

    def _edge_record(self, key: EdgeID) -> EdgeTuple:
        try:
            return self._edges[key]
        except KeyError:
            raise ValueError(f"Edge with id='{key}' not found.") from None

    def _require_node(self, node: NodeID, role: str = "Node") -> None:
        if node not in self:
            raise ValueError(f"{role} '{node}' does not exist.")

    #
    # Vertices
    #
    def add_node(self, node_for_adding: NodeID, **attr: Any) -> None:
        """Add a vertex.

        Raises:
            ValueError: If the vertex is already present.
        """
        if node_for_adding in self:
            raise ValueError(f"Node '{node_for_adding}' already exists in this graph.")
        super().add_node(node_for_adding, **attr)

    def remove_node(self, n: NodeID) -> None:
        """Remove a vertex together with every edge touching it.

        Raises:
            ValueError: If the vertex is absent.
        """
        self._require_node(n)
        incident = set(self.out_edges_of(n))
        incident.update(self.in_edges_of(n))
        for key in incident:
            del self._edges[key]
        super().remove_node(n)

    #
    # Edges
    #
    def add_edge(  # pyright: ignore[reportIncompatibleMethodOverride]
        self,
        u_for_edge: NodeID,
        v_for_edge: NodeID,
        key: Optional[EdgeID] = None,
        **attr: Any,
    ) -> EdgeID:
        """Add the edge ``u_for_edge -> v_for_edge`` and return its key.

        Args:
            u_for_edge: Existing source vertex.
            v_for_edge: Existing target vertex.
            key: Edge key; generated when omitted. An `Edge` key must name the
                same endpoints.
            **attr: Edge attributes, e.g. ``capacity``.

        Raises:
            ValueError: On a missing endpoint, a key already in use, or an
                `Edge` key whose endpoints disagree.
        """
        self._require_node(u_for_edge, "Source node")
        self._require_node(v_for_edge, "Target node")

        if key is None:
            key = self.new_edge_key(u_for_edge, v_for_edge)
            while key in self._edges:
                key = self.new_edge_key(u_for_edge, v_for_edge)
        elif key in self._edges:
            raise ValueError(f"Edge with id '{key}' already exists.")
        elif isinstance(key, Edge) and (key.source, key.target) != (u_for_edge, v_for_edge):
            raise ValueError(
                f"Edge {key!r} does not connect '{u_for_edge}' to '{v_for_edge}'."
            )

        super().add_edge(u_for_edge, v_for_edge, key=key, **attr)
        data = self.succ[u_for_edge][v_for_edge][key]
        self._edges[key] = (u_for_edge, v_for_edge, key, data)
        return key

    def insert_edge(self, edge: Edge, **attr: Any) -> Edge:
        """Add an `Edge` between its own endpoints and return it."""
        self.add_edge(edge.source, edge.target, key=edge, **attr)
        return edge

    def remove_edge(
        self,
        u: NodeID,
        v: NodeID,
        key: Optional[EdgeID] = None,
    ) -> None:
        """Remove edge ``key`` from ``u`` to ``v``, or every ``u -> v`` edge.

        Raises:
            ValueError: On a missing endpoint, an unknown key, a key joining
                other vertices, or no ``u -> v`` edge at all.
        """
        self._require_node(u, "Source node")
        self._require_node(v, "Target node")

        if key is None:
            keys = self.edges_between(u, v)
            if not keys:
                raise ValueError(f"No edges from '{u}' to '{v}' to remove.")
            for k in keys:
                self.remove_edge_by_id(k)
            return

        source, target, _, _ = self._edge_record(key)
        if (source, target) != (u, v):
            raise ValueError(
                f"Edge with id='{key}' is actually from {source} to {target}, "
                f"not from {u} to {v}."
            )
        self.remove_edge_by_id(key)

    def remove_edge_by_id(self, key: EdgeID) -> None:
        """Remove the edge with this key.

        Raises:
            ValueError: If the key is unknown.
        """
        source, target, _, _ = self._edge_record(key)
        del self._edges[key]
        super().remove_edge(source, target, key=key)

    #
    # Queries
    #
    def get_nodes(self) -> Dict[NodeID, AttrDict]:
        """Return a ``{vertex: attributes}`` snapshot."""
        return dict(self.nodes(data=True))

    def get_edges(self) -> Dict[EdgeID, EdgeTuple]:
        """Return the live key index.

        Maps each key to ``(source, target, key, attributes)``; the attribute
        dict is the one networkx stores, so updates show up on both sides.
        Copy it before mutating the graph while iterating.
        """
        return self._edges

    def get_edge_attr(self, key: EdgeID) -> AttrDict:
        """Return the attribute dict of an edge.

        Raises:
            ValueError: If the key is unknown.
        """
        return self._edge_record(key)[3]

    def has_edge_by_id(self, key: EdgeID) -> bool:
        return key in self._edges

    def edge_source(self, key: EdgeID) -> NodeID:
        """Return the source vertex of an edge; ValueError if unknown."""
        return self._edge_record(key)[0]

    def edge_target(self, key: EdgeID) -> NodeID:
        """Return the target vertex of an edge; ValueError if unknown."""
        return self._edge_record(key)[1]

    def edges_between(self, u: NodeID, v: NodeID) -> List[EdgeID]:
        """Return the keys of all ``u -> v`` edges, oldest first."""
        return list(self.succ.get(u, {}).get(v, {}))

    def contains_edge_between(self, u: NodeID, v: NodeID) -> bool:
        return bool(self.edges_between(u, v))

    def out_edges_of(self, node: NodeID) -> Iterator[EdgeID]:
        """Yield keys of edges leaving ``node``, grouped by target in insertion order.

        Raises:
            ValueError: If the vertex is absent (on first iteration).
        """
        self._require_node(node)
        for keydict in self.succ[node].values():
            yield from keydict

    def in_edges_of(self, node: NodeID) -> Iterator[EdgeID]:
        """Yield keys of edges entering ``node``, grouped by source in insertion order.

        Raises:
            ValueError: If the vertex is absent (on first iteration).
        """
        self._require_node(node)
        for keydict in self.pred[node].values():
            yield from keydict

    def is_out_edges_empty(self, node: NodeID) -> bool:
        self._require_node(node)
        return self.out_degree(node) == 0

    def is_in_edges_empty(self, node: NodeID) -> bool:
        self._require_node(node)
        return self.in_degree(node) == 0

    def update_edge_attr(self, key: EdgeID, **attr: Any) -> None:
        """Merge ``attr`` into an edge's attributes.

        Raises:
            ValueError: If the key is unknown.
        """
        self._edge_record(key)[3].update(attr)
