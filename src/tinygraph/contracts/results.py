"""Terminal step records."""

from __future__ import annotations

from dataclasses import dataclass

from tinygraph.contracts.enums import RunState, TerminationReason
from tinygraph.contracts.errors import ExecutionError


@dataclass(frozen=True, slots=True)
class Termination:
    """How and where a run stopped.

    Attributes:
        state: RunState.COMPLETED or RunState.FAILED (RunState.UNSTARTED
            when step() was called before set_start())
        reason: Which condition ended the run
        node: Name of the node active on the final step (None if the graph
            was never started)
        steps: Node invocations performed since the graph was built
        error: Failure payload for RunState.FAILED, otherwise None
    """

    state: RunState
    reason: TerminationReason
    node: str | None
    steps: int
    error: ExecutionError | None = None

    @property
    def failed(self) -> bool:
        return self.state is RunState.FAILED
