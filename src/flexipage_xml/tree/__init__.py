"""Tree building from parse event streams.

Key Components:
    EventTreeBuilder: assembles a ParseEventStream into an lxml element tree
    LocatedTree: element tree plus lines past the lxml line limit
    build_tree: convenience wrapper around EventTreeBuilder
"""

from .builder import MAX_SOURCELINE, EventTreeBuilder, LocatedTree, build_tree

__all__ = [
    "MAX_SOURCELINE",
    "EventTreeBuilder",
    "LocatedTree",
    "build_tree",
]
