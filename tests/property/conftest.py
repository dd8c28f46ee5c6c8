# tests/property/conftest.py
"""Shared Hypothesis strategies for property-based tests.

Usage:
    from tests.property.conftest import contexts, patches

    @given(ctx=contexts, patch=patches)
    def test_merge(ctx, patch) -> None:
        ...
"""

from __future__ import annotations

from hypothesis import strategies as st

# Short lowercase field names so that contexts and patches collide often
field_names = st.text(alphabet="abcdefgh", min_size=1, max_size=3)

json_primitives = (
    st.none()
    | st.booleans()
    | st.integers(min_value=-(2**31), max_value=2**31)
    | st.text(max_size=20)
)

json_values = st.recursive(
    json_primitives,
    lambda children: st.lists(children, max_size=3) | st.dictionaries(field_names, children, max_size=3),
    max_leaves=8,
)

contexts = st.dictionaries(field_names, json_values, max_size=8)
patches = st.dictionaries(field_names, json_values, max_size=6)

node_names = st.sampled_from(["a", "b", "c", "d", "e"])
