# src/tinygraph/engine/__init__.py
"""Execution engine for tinygraph pipelines.

Example:
    from tinygraph.engine import Graph

    graph = Graph().node("a", NodeA()).node("b", NodeB()).edge("a", "b").set_start("a")
    context = await graph.run({"input": "..."})
"""

from tinygraph.engine.graph import Graph, TerminationHook

__all__ = [
    "Graph",
    "TerminationHook",
]
