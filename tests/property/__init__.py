# tests/property/__init__.py
"""Property-based tests for tinygraph.

Property-based testing validates invariants that must hold for ALL inputs,
not just the specific examples we think of. Here that means patch merging
and the run loop: keys only accumulate, and the pointer only ever moves
along wired edges.
"""
