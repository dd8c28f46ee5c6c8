"""Status codes used across the engine boundary."""

from enum import StrEnum


class RunState(StrEnum):
    """Lifecycle state of a graph run.

    UNSTARTED until the first step after set_start(). COMPLETED and FAILED
    are both terminal; callers of run()/step() cannot tell them apart, only
    Graph.state, Graph.termination and the logs can.
    """

    UNSTARTED = "unstarted"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class TerminationReason(StrEnum):
    """Why the most recent step ended the run.

    Values:
        NO_RESULT: Node returned None (or an awaitable resolving to None)
        NO_TRANSITION: Node returned a result without a transition
        NODE_ERROR: Node raised, or a patch could not be applied
        INVALID_TRANSITION: Node named a transition that is not wired
        NOT_STARTED: step() was called before set_start()
    """

    NO_RESULT = "no_result"
    NO_TRANSITION = "no_transition"
    NODE_ERROR = "node_error"
    INVALID_TRANSITION = "invalid_transition"
    NOT_STARTED = "not_started"
