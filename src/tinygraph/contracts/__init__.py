"""Shared contracts: context snapshots, patches, the node protocol and errors.

These modules import nothing from tinygraph.engine, so nodes can depend on
them without pulling in the runner.
"""

from tinygraph.contracts.context import (
    ComputedPatch,
    Context,
    Patch,
    PatchFn,
    PatchLike,
    StaticPatch,
    apply_patch,
    as_patch,
    empty_context,
    freeze,
)
from tinygraph.contracts.enums import RunState, TerminationReason
from tinygraph.contracts.errors import (
    ExecutionError,
    GraphConfigurationError,
    InvalidTransitionError,
    TinygraphError,
    UnknownNodeError,
)
from tinygraph.contracts.node import Node, NodeOutcome, NodeResult
from tinygraph.contracts.results import Termination

__all__ = [
    "ComputedPatch",
    "Context",
    "ExecutionError",
    "GraphConfigurationError",
    "InvalidTransitionError",
    "Node",
    "NodeOutcome",
    "NodeResult",
    "Patch",
    "PatchFn",
    "PatchLike",
    "RunState",
    "StaticPatch",
    "Termination",
    "TerminationReason",
    "TinygraphError",
    "UnknownNodeError",
    "apply_patch",
    "as_patch",
    "empty_context",
    "freeze",
]
