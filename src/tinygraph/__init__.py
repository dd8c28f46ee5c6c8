"""
tinygraph: a minimal in-process directed-graph runner.

Nodes read an accumulated context, optionally patch it, and name the next
node to run. The engine validates each move against the wired transitions
and keeps going until a node stops or fails.
"""

from tinygraph.contracts import (
    ComputedPatch,
    Context,
    ExecutionError,
    GraphConfigurationError,
    InvalidTransitionError,
    Node,
    NodeResult,
    Patch,
    RunState,
    StaticPatch,
    Termination,
    TerminationReason,
    TinygraphError,
    apply_patch,
)
from tinygraph.engine import Graph

__version__ = "0.1.0"

__all__ = [
    "ComputedPatch",
    "Context",
    "ExecutionError",
    "Graph",
    "GraphConfigurationError",
    "InvalidTransitionError",
    "Node",
    "NodeResult",
    "Patch",
    "RunState",
    "StaticPatch",
    "Termination",
    "TerminationReason",
    "TinygraphError",
    "__version__",
    "apply_patch",
]
