# src/tinygraph/engine/graph.py
"""Graph: node registry, transition table and the step/run loop.

Construction is a builder phase: register nodes with node(), wire the legal
moves with edge(), then pick the entry point with set_start(). Execution is
a loop of step() calls, each of which invokes exactly one node, merges its
patch into the context and follows its transition if the transition is
wired.

Error containment:
    Only set_start() raises to the caller (GraphConfigurationError). Once a
    run is under way, a node that raises, a patch that cannot be applied
    and a transition that is not wired all end the run the same way: the
    failure is logged, recorded on last_error/termination, and step()
    returns False. run() therefore always returns a context, which is the
    last one successfully committed before the failure.

Example:
    graph = (
        Graph()
        .node("fetch", FetchNode())
        .node("summarise", SummariseNode())
        .edge("fetch", "summarise")
        .set_start("fetch")
    )
    context = await graph.run({"url": "https://example.com"})
"""

from __future__ import annotations

import asyncio
import inspect
import traceback
from collections.abc import Callable
from typing import Any

import structlog

from tinygraph.contracts.context import Context, PatchLike, apply_patch, as_patch, empty_context
from tinygraph.contracts.enums import RunState, TerminationReason
from tinygraph.contracts.errors import (
    ExecutionError,
    GraphConfigurationError,
    InvalidTransitionError,
    UnknownNodeError,
)
from tinygraph.contracts.node import Node, NodeResult
from tinygraph.contracts.results import Termination

TerminationHook = Callable[[Termination], None]


class Graph:
    """Directed graph of named nodes traversed by named transitions.

    A Graph instance owns its context and pointer; it is not safe to step
    the same instance from concurrent tasks. Use one instance per run.

    Args:
        name: Bound onto every log line as ``graph``
        logger: structlog-compatible logger. Defaults to the module logger.
        on_terminate: Called with the Termination record whenever a step
            ends the run, exactly once per terminal step. Exceptions raised
            by the hook are logged as graph_terminate_hook_error and do not
            change the recorded termination.
    """

    def __init__(
        self,
        name: str = "graph",
        *,
        logger: Any | None = None,
        on_terminate: TerminationHook | None = None,
    ) -> None:
        self.name = name
        self._log = (logger or structlog.get_logger(__name__)).bind(graph=name)
        self._on_terminate = on_terminate
        self._nodes: dict[str, Node] = {}
        self._transitions: dict[str, set[str]] = {}
        self._context: Context = empty_context()
        self._current: tuple[str, Node] | None = None
        self._state = RunState.UNSTARTED
        self._steps = 0
        self._termination: Termination | None = None

    # ------------------------------------------------------------------
    # Builder
    # ------------------------------------------------------------------

    def node(self, name: str, instance: Node) -> Graph:
        """Register a node under name, replacing any previous registration.

        Returns:
            self, for chaining
        """
        self._nodes[name] = instance
        return self

    def edge(self, source: str, target: str) -> Graph:
        """Allow source to transition to target. Repeating an edge is a no-op.

        Neither name has to be registered yet; an edge to a name that is
        still unregistered when the transition is taken ends the run.

        Returns:
            self, for chaining
        """
        self._transitions.setdefault(source, set()).add(target)
        return self

    def set_start(self, name: str) -> Graph:
        """Set the entry point. Must be called after the node is registered.

        Raises:
            GraphConfigurationError: If name has not been registered

        Returns:
            self, for chaining
        """
        if name not in self._nodes:
            raise GraphConfigurationError(
                f"Cannot start from node '{name}' that has not been registered in graph. "
                "Start should be set after adding nodes."
            )
        self._current = (name, self._nodes[name])
        return self

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def context(self) -> Context:
        """Current context snapshot."""
        return self._context

    @property
    def current(self) -> str | None:
        """Name of the active node, None before set_start()."""
        return self._current[0] if self._current is not None else None

    @property
    def available_transitions(self) -> frozenset[str]:
        """Transitions wired from the active node."""
        if self._current is None:
            return frozenset()
        return self.transitions_from(self._current[0])

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def steps_taken(self) -> int:
        """Number of node invocations so far."""
        return self._steps

    @property
    def termination(self) -> Termination | None:
        """Record of the most recent terminal step, if any."""
        return self._termination

    @property
    def last_error(self) -> ExecutionError | None:
        """Failure payload of the most recent terminal step, if it failed."""
        return self._termination.error if self._termination is not None else None

    @property
    def node_names(self) -> frozenset[str]:
        return frozenset(self._nodes)

    def has_node(self, name: str) -> bool:
        return name in self._nodes

    def transitions_from(self, name: str) -> frozenset[str]:
        """Transitions wired from name (empty if none)."""
        return frozenset(self._transitions.get(name, ()))

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def run(self, context: PatchLike | None = None) -> Context:
        """Run from the current node until a step reports completion.

        Args:
            context: Patch merged once, before the first node runs

        Returns:
            The final context. Never raises for anything that happens
            after set_start(); failures are visible through last_error.
        """
        self._log.debug("graph_run_started", start=self.current)
        proceed = await self.step(context)
        while proceed:
            proceed = await self.step()
        return self._context

    def run_sync(self, context: PatchLike | None = None) -> Context:
        """Blocking wrapper around run() for callers without an event loop."""
        return asyncio.run(self.run(context))

    async def step(self, context: PatchLike | None = None) -> bool:
        """Invoke the active node once and follow its transition.

        Useful for stepping through a graph manually. Only pass seed values
        on the first call; any patch passed here is merged again on every
        call that receives it.

        Args:
            context: Patch merged into the context before the node runs

        Returns:
            True if the graph moved to another node, False if the run is
            over (normally or because of a contained failure).
        """
        if self._current is None:
            self._log.warning("graph_step_without_start")
            self._terminate(RunState.UNSTARTED, TerminationReason.NOT_STARTED, None)
            return False

        name, node = self._current
        self._state = RunState.RUNNING

        try:
            completion = await self._advance(name, node, context)
        except Exception as e:
            reason = (
                TerminationReason.INVALID_TRANSITION
                if isinstance(e, InvalidTransitionError)
                else TerminationReason.NODE_ERROR
            )
            self._log.error(
                "graph_execution_error",
                node=name,
                reason=reason,
                error=str(e),
                error_type=type(e).__name__,
                exc_info=e,
            )
            error: ExecutionError = {
                "node": name,
                "exception": str(e),
                "type": type(e).__name__,
                "traceback": "".join(traceback.format_exception(e)),
            }
            self._terminate(RunState.FAILED, reason, name, error)
            return False

        if completion is not None:
            self._log.debug("graph_completed", node=name, reason=completion)
            self._terminate(RunState.COMPLETED, completion, name)
            return False
        return True

    async def _advance(self, name: str, node: Node, context: PatchLike | None) -> TerminationReason | None:
        """Run one node and move the pointer.

        Returns the reason the run completed, or None if the pointer moved.
        Raises whatever the node, a patch or the transition check raises.
        """
        self._context = apply_patch(self._context, as_patch(context))
        available = self.transitions_from(name)
        self._log.debug("graph_step_started", node=name, transitions=sorted(available))

        self._steps += 1
        outcome = node.next(self._context, available)
        if inspect.isawaitable(outcome):
            outcome = await outcome

        if outcome is None:
            return TerminationReason.NO_RESULT
        if not isinstance(outcome, NodeResult):
            raise TypeError(f"Node '{name}' returned {type(outcome).__name__}, expected NodeResult or None")

        patch = as_patch(outcome.context_patch)
        if patch is not None:
            self._context = apply_patch(self._context, patch)
            self._log.debug("graph_patch_applied", node=name, keys=sorted(self._context))

        transition = outcome.transition
        if not transition:
            return TerminationReason.NO_TRANSITION
        if transition not in available:
            raise InvalidTransitionError(name, transition, available)
        if transition not in self._nodes:
            raise UnknownNodeError(name, transition, available)

        self._log.debug("graph_transition", source=name, target=transition)
        self._current = (transition, self._nodes[transition])
        return None

    def _terminate(
        self,
        state: RunState,
        reason: TerminationReason,
        node: str | None,
        error: ExecutionError | None = None,
    ) -> None:
        self._state = state
        self._termination = Termination(
            state=state,
            reason=reason,
            node=node,
            steps=self._steps,
            error=error,
        )
        if self._on_terminate is None:
            return
        try:
            self._on_terminate(self._termination)
        except Exception as e:
            self._log.error(
                "graph_terminate_hook_error",
                node=node,
                error=str(e),
                error_type=type(e).__name__,
                exc_info=e,
            )
