"""Exception types raised by flownet algorithms.

Each error also derives from the builtin exception callers would naturally
expect (``ValueError`` for bad input, ``RuntimeError`` for wrong call order),
so code that only catches builtins keeps working.
"""

from __future__ import annotations


class FlowNetError(Exception):
    """Root of all flownet-specific errors."""


class NegativeCapacityError(FlowNetError, ValueError):
    """An edge capacity function returned a negative value."""

    def __init__(self, edge: object, capacity: float) -> None:
        super().__init__(f"Negative capacity {capacity} on edge {edge!r}.")
        self.edge = edge
        self.capacity = capacity


class GraphNotAugmentedError(FlowNetError, RuntimeError):
    """An operation requires a graph augmentation that has not run yet."""


class GraphAlreadyAugmentedError(FlowNetError, RuntimeError):
    """An augmentation was requested twice on the same augmentor."""


class MissingEndpointError(FlowNetError, ValueError):
    """The flow source or sink was never assigned."""


class EndpointNotInGraphError(FlowNetError, ValueError):
    """The flow source or sink is not a vertex of the visited graph."""


class VertexNotFoundError(FlowNetError, ValueError):
    """A vertex queried on a graph or view is not part of it."""
