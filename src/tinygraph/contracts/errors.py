"""Error taxonomy and error payload schemas.

Only GraphConfigurationError ever reaches the caller of the engine. The
other conditions are contained by Graph.step() and surface as an
ExecutionError payload on Graph.last_error and in the logs.
"""

from typing import NotRequired, TypedDict


class ExecutionError(TypedDict):
    """Schema for a contained execution failure.

    Recorded by the engine whenever a step ends in the error-terminal state.
    """

    node: str  # Name of the node that was active
    exception: str  # String representation of the exception
    type: str  # Exception class name (e.g., "ValueError")
    traceback: NotRequired[str]  # Optional full traceback


class TinygraphError(Exception):
    """Base class for errors raised by tinygraph."""


class GraphConfigurationError(TinygraphError):
    """Raised synchronously while building a graph.

    The only case today is set_start() with a name that was never
    registered with node().
    """


class InvalidTransitionError(TinygraphError):
    """A node asked to move somewhere it is not wired to.

    Raised inside Graph.step() and contained there; callers see it only via
    Graph.last_error.

    Attributes:
        source: Name of the node that returned the transition
        target: The transition it returned
        available: Transitions that were legal for the step
    """

    def __init__(
        self,
        source: str,
        target: str,
        available: frozenset[str],
        message: str | None = None,
    ) -> None:
        self.source = source
        self.target = target
        self.available = available
        if message is None:
            allowed = ", ".join(sorted(available)) or "none"
            message = f"Invalid transition from {source} > {target} (allowed: {allowed})"
        super().__init__(message)


class UnknownNodeError(InvalidTransitionError):
    """Transition is wired but its target was never registered."""

    def __init__(self, source: str, target: str, available: frozenset[str]) -> None:
        super().__init__(
            source,
            target,
            available,
            f"Transition from {source} > {target} targets a node that is not registered",
        )
