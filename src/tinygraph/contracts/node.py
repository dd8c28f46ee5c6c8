"""The node capability contract.

Every step in a pipeline is an object with a single ``next`` method. The
engine passes it the current context snapshot and the names of the nodes it
may legally hand over to, and awaits whatever comes back.

Example:
    class Greet:
        def next(self, context, transitions):
            return NodeResult(context_patch={"greeting": f"hi {context['name']}"})

    class Route:
        async def next(self, context, transitions):
            target = await pick_one(sorted(transitions))
            return NodeResult(transition=target)
"""

from __future__ import annotations

from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from tinygraph.contracts.context import Context, PatchLike


@dataclass(frozen=True, slots=True)
class NodeResult:
    """What a node hands back to the engine.

    Attributes:
        context_patch: Merged into the context before the transition is
            checked. Accepts a mapping, a callable or a tagged Patch.
        transition: Name of the next node. Must be one of the transitions
            the node was offered; None ends the run normally.
    """

    context_patch: PatchLike | None = None
    transition: str | None = None


NodeOutcome = NodeResult | None | Awaitable[NodeResult | None]


@runtime_checkable
class Node(Protocol):
    """Protocol for pipeline nodes.

    Nodes may implement ``next`` as a plain method or a coroutine. Returning
    None (or a NodeResult with neither field set) ends the run normally.
    Raising ends it in the error-terminal state; the engine logs the error
    and does not propagate it.
    """

    def next(
        self,
        context: Context,
        transitions: frozenset[str],
    ) -> NodeOutcome:
        """Inspect context and decide the patch and next node."""
        ...
