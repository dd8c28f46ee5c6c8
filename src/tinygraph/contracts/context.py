"""Context snapshots and the patch model.

A context is the accumulated state of a run: a read-only mapping from field
name to value. Nodes never mutate it. Instead they hand back a patch, and
the engine produces a fresh snapshot by shallow-merging that patch over the
current one.

Patches come in two tagged variants:
- StaticPatch: a partial mapping merged as-is
- ComputedPatch: a function of the current snapshot returning the mapping

Callers may pass a plain mapping or a callable anywhere a patch is accepted;
as_patch() normalises those once at the API boundary so that apply_patch()
only ever dispatches on the tag.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

Context = Mapping[str, Any]
"""Read-only snapshot of pipeline state."""

PatchFn = Callable[[Context], Mapping[str, Any]]


@dataclass(frozen=True, slots=True)
class StaticPatch:
    """Partial mapping whose keys overwrite the same keys in the context."""

    values: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ComputedPatch:
    """Patch derived from the pre-merge snapshot.

    The function is invoked exactly once per merge and must return a mapping.
    """

    fn: PatchFn


Patch = StaticPatch | ComputedPatch
PatchLike = Patch | Mapping[str, Any] | PatchFn


def empty_context() -> Context:
    """Return a new, empty snapshot."""
    return MappingProxyType({})


def freeze(values: Mapping[str, Any]) -> Context:
    """Wrap a copy of values in a read-only snapshot."""
    return MappingProxyType(dict(values))


def as_patch(value: PatchLike | None) -> Patch | None:
    """Normalise a user-supplied patch into its tagged variant.

    Raises:
        TypeError: If value is neither a mapping, a callable nor a Patch
    """
    if value is None or isinstance(value, StaticPatch | ComputedPatch):
        return value
    if isinstance(value, Mapping):
        return StaticPatch(value)
    if callable(value):
        return ComputedPatch(value)
    raise TypeError(f"Patch must be a mapping or a callable, got {type(value).__name__}")


def apply_patch(context: Context, patch: Patch | None) -> Context:
    """Shallow-merge patch into context, returning a new snapshot.

    Args:
        context: Current snapshot (not modified)
        patch: Tagged patch, or None for "no change"

    Returns:
        The same snapshot when patch is None, otherwise a new snapshot where
        every key of the patch overwrites the key in context and all other
        keys are retained.

    Raises:
        TypeError: If a ComputedPatch returns something other than a mapping
    """
    match patch:
        case None:
            return context
        case StaticPatch(values=values):
            return MappingProxyType({**context, **values})
        case ComputedPatch(fn=fn):
            values = fn(context)
            if not isinstance(values, Mapping):
                raise TypeError(f"Computed patch must return a mapping, got {type(values).__name__}")
            return MappingProxyType({**context, **values})
    raise TypeError(f"Unsupported patch type: {type(patch).__name__}")
