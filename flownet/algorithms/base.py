"""Algorithm lifecycle shared by every flownet algorithm.

`AlgorithmBase.compute()` wraps the abstract `_internal_compute()` with state
tracking, notifications and cooperative cancellation:

    NOT_RUNNING -> RUNNING -> FINISHED
                      |  \\-> FAILED   (any exception, re-raised)
                      \\----> ABORTED  (cancel manager polled by the algorithm)

Algorithms built on top of others pass themselves as ``host`` so the whole
stack shares one `AlgorithmServices` and therefore one `CancelManager`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import IntEnum
from typing import Callable, Generic, List, Optional, TypeVar

from flownet.exceptions import VertexNotFoundError
from flownet.graph.strict_multidigraph import NodeID
from flownet.logging import get_logger

logger = get_logger(__name__)

GraphT = TypeVar("GraphT")


class ComputationState(IntEnum):
    """Lifecycle states of an algorithm."""

    NOT_RUNNING = 1
    RUNNING = 2
    PENDING_ABORTION = 3
    FINISHED = 4
    ABORTED = 5
    FAILED = 6


class ComputationAborted(Exception):
    """Raised inside an algorithm when a cancellation request is observed.

    Never escapes a top-level `AlgorithmBase.compute()` call.
    """


class CancelManager:
    """Cooperative cancellation flag shared by a stack of algorithms."""

    def __init__(self) -> None:
        self._cancelling = False
        self.cancel_requested: List[Callable[[], None]] = []
        self.cancel_reset: List[Callable[[], None]] = []

    @property
    def is_cancelling(self) -> bool:
        return self._cancelling

    def cancel(self) -> None:
        """Request cancellation; algorithms stop at their next check."""
        if self._cancelling:
            return
        self._cancelling = True
        for callback in list(self.cancel_requested):
            callback()

    def reset_cancel(self) -> None:
        """Clear a previous cancellation request."""
        if not self._cancelling:
            return
        self._cancelling = False
        for callback in list(self.cancel_reset):
            callback()


class AlgorithmServices:
    """Services handle passed down from a host algorithm to its helpers."""

    def __init__(self, cancel_manager: Optional[CancelManager] = None) -> None:
        self.cancel_manager = cancel_manager or CancelManager()


AlgorithmCallback = Callable[["AlgorithmBase"], None]


class AlgorithmBase(ABC, Generic[GraphT]):
    """Base class for algorithms visiting a graph.

    Attributes:
        visited_graph: Graph (or view) the algorithm runs on.
        host: Hosting algorithm whose services are shared, if any.
        services: Shared services, including the cancel manager.
        started: Callbacks fired when a computation starts.
        finished: Callbacks fired when a computation completes normally.
        aborted: Callbacks fired when a computation is cancelled.
        state_changed: Callbacks fired on every state transition.
    """

    def __init__(
        self, visited_graph: GraphT, host: Optional[AlgorithmBase] = None
    ) -> None:
        if visited_graph is None:
            raise ValueError("visited_graph must not be None.")
        self.visited_graph = visited_graph
        self.host = host
        self.services: AlgorithmServices = (
            host.services if host is not None else AlgorithmServices()
        )
        self._state = ComputationState.NOT_RUNNING
        self.started: List[AlgorithmCallback] = []
        self.finished: List[AlgorithmCallback] = []
        self.aborted: List[AlgorithmCallback] = []
        self.state_changed: List[AlgorithmCallback] = []

    @property
    def state(self) -> ComputationState:
        return self._state

    def _set_state(self, state: ComputationState) -> None:
        if state == self._state:
            return
        self._state = state
        self._fire(self.state_changed)

    def _fire(self, callbacks: List[AlgorithmCallback]) -> None:
        for callback in list(callbacks):
            callback(self)

    def compute(self) -> None:
        """Run the algorithm to completion, failure or cancellation.

        Raises:
            Exception: Any error from `_initialize()` or `_internal_compute()`
                is re-raised unchanged after the state moves to FAILED.
        """
        self._set_state(ComputationState.RUNNING)
        self._fire(self.started)
        try:
            self._initialize()
            self._internal_compute()
        except ComputationAborted:
            self._set_state(ComputationState.ABORTED)
            self._fire(self.aborted)
            logger.warning("%s aborted on cancellation request", type(self).__name__)
            if self.host is not None:
                # Let the hosting algorithm unwind as well.
                raise
            return
        except Exception:
            self._set_state(ComputationState.FAILED)
            raise
        finally:
            self._clean()
            if self.host is None:
                # Hosted runs share the flag; only the outermost run clears it.
                self.services.cancel_manager.reset_cancel()
        self._set_state(ComputationState.FINISHED)
        self._fire(self.finished)

    def abort(self) -> None:
        """Request cancellation of the running computation.

        Does nothing unless the algorithm is RUNNING.
        """
        if self._state != ComputationState.RUNNING:
            return
        self.services.cancel_manager.cancel()
        self._set_state(ComputationState.PENDING_ABORTION)

    @property
    def is_cancelling(self) -> bool:
        return self.services.cancel_manager.is_cancelling

    def _throw_if_cancellation_requested(self) -> None:
        if self.services.cancel_manager.is_cancelling:
            raise ComputationAborted()

    def _initialize(self) -> None:
        """Prepare state before `_internal_compute()`; override as needed."""

    def _clean(self) -> None:
        """Release per-run resources; called after every run."""

    @abstractmethod
    def _internal_compute(self) -> None:
        """Algorithm body."""


class RootedAlgorithmBase(AlgorithmBase[GraphT]):
    """Algorithm started from a single root vertex."""

    def __init__(
        self, visited_graph: GraphT, host: Optional[AlgorithmBase] = None
    ) -> None:
        super().__init__(visited_graph, host)
        self._root_vertex: Optional[NodeID] = None
        self._has_root = False

    @property
    def root_vertex(self) -> Optional[NodeID]:
        return self._root_vertex

    def set_root_vertex(self, root: NodeID) -> None:
        self._root_vertex = root
        self._has_root = True

    def clear_root_vertex(self) -> None:
        self._root_vertex = None
        self._has_root = False

    def _require_root(self) -> NodeID:
        if not self._has_root:
            raise ValueError("Root vertex is not specified.")
        if not self._contains_vertex(self._root_vertex):
            raise VertexNotFoundError(
                f"Root vertex '{self._root_vertex}' is not part of the graph."
            )
        return self._root_vertex

    def _contains_vertex(self, vertex: NodeID) -> bool:
        return vertex in self.visited_graph  # type: ignore[operator]

    def compute(self, root: Optional[NodeID] = None) -> None:  # type: ignore[override]
        """Run from ``root`` if given, otherwise from the stored root."""
        if root is not None:
            self.set_root_vertex(root)
        super().compute()
