"""Application engine for skgraph.

Applying an abstraction `Pair(Binder B, body)` to an argument consumes B:
every Slot bound to B is replaced by its own fresh clone of the argument and
B itself becomes Empty, leaving `Pair(Empty, body')` for `collapse` to strip.
Anything that is not an abstraction cannot consume an argument, so the
application is returned as a plain (stuck) Pair.

Nodes are immutable; substitution rebuilds only the Pairs on the way to a
replaced Slot and shares every untouched subtree, ids included.
"""

from __future__ import annotations

from skgraph.types.graph import Graph
from skgraph.types.nodes import Node, Pair, Binder, Slot


def find_open_binder(op: Node) -> Binder | None:
    """The outermost open binder of `op`, i.e. its own binder if `op` is an abstraction.

    Binders deeper inside `op` belong to abstractions that are not in
    operator position and must not capture this argument.
    """
    match op:
        case Pair(Binder() as binder, _):
            return binder
    return None


def substitute(graph: Graph, node: Node, binder_id: int, arg: Node) -> Node:
    """Replace slots of `binder_id` by clones of `arg` and consume the binder itself."""

    def replace(leaf: Node) -> Node:
        match leaf:
            case Binder(bid) if bid == binder_id:
                return graph.empty()
            case Slot(_, bid) if bid == binder_id:
                return graph.clone(arg)
        return leaf

    return graph.map_leaves(node, replace)


def apply(graph: Graph, op: Node, arg: Node) -> Node:
    """Apply `op` to `arg`; the result still needs `collapse`."""
    binder = find_open_binder(op)
    if binder is None:
        return graph.pair(op, arg)
    return substitute(graph, op, binder.id, arg)
