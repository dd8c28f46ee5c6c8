# tests/conftest.py
"""Shared test fixtures and helper nodes.

Helper Nodes:
- PatchNode: returns a fixed patch and (optionally) a transition
- SilentNode: returns None
- FailingNode: raises from next()
- AsyncPatchNode: coroutine variant of PatchNode
- RecordingNode: remembers every context and transition set it was given

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any

import pytest
from hypothesis import Phase, Verbosity, settings

from tinygraph.contracts import Context, NodeResult
from tinygraph.engine import Graph

# =============================================================================
# Hypothesis Profiles
# =============================================================================

settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Disable deadline for CI (timing varies)
)

settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))


# =============================================================================
# Helper Nodes
# =============================================================================


class PatchNode:
    """Returns a fixed patch and transition."""

    def __init__(self, patch: Mapping[str, Any] | None = None, transition: str | None = None) -> None:
        self.patch = patch
        self.transition = transition
        self.calls = 0

    def next(self, context: Context, transitions: frozenset[str]) -> NodeResult:
        self.calls += 1
        return NodeResult(context_patch=self.patch, transition=self.transition)


class AsyncPatchNode(PatchNode):
    """PatchNode whose next() is a coroutine."""

    async def next(self, context: Context, transitions: frozenset[str]) -> NodeResult:  # type: ignore[override]
        self.calls += 1
        return NodeResult(context_patch=self.patch, transition=self.transition)


class SilentNode:
    """Returns None: ends the run normally."""

    def __init__(self) -> None:
        self.calls = 0

    def next(self, context: Context, transitions: frozenset[str]) -> None:
        self.calls += 1


class FailingNode:
    """Raises the given exception."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error or RuntimeError("node exploded")
        self.calls = 0

    def next(self, context: Context, transitions: frozenset[str]) -> NodeResult:
        self.calls += 1
        raise self.error


class RecordingNode:
    """Records its inputs, then delegates to an optional inner node."""

    def __init__(self, inner: Any | None = None) -> None:
        self.inner = inner
        self.contexts: list[Context] = []
        self.transitions: list[frozenset[str]] = []

    def next(self, context: Context, transitions: frozenset[str]) -> Any:
        self.contexts.append(context)
        self.transitions.append(transitions)
        if self.inner is None:
            return None
        return self.inner.next(context, transitions)


@pytest.fixture
def graph() -> Graph:
    """Empty graph."""
    return Graph("test")
