"""Graph container: a root node plus the per-graph id counters.

Nodes are immutable, so a graph state is fully described by its root. The
counters make node uids, binder ids and slot ids unique within one graph;
every node that ends up in a graph is allocated through it. Links
(slot -> binder, binder -> value) are derived on demand and never stored.
"""

from __future__ import annotations

from itertools import count
from typing import Callable, Iterator, NamedTuple, Optional

from skgraph import NodeId
from skgraph.types.nodes import Node, Empty, Symbol, Pair, Binder, Slot, is_abstraction


class Link(NamedTuple):
    kind: str  # "reentry" (slot -> binder) or "value" (binder -> argument)
    source: Node
    target: Node


def node_id(node: Node) -> NodeId:
    return f"n{node.uid}"


class Graph:
    """An expression graph owned by a single evaluation."""

    __slots__ = ("root", "_uids", "_binder_ids", "_slot_ids")

    def __init__(self, root: Optional[Node] = None):
        self.root: Optional[Node] = root
        self._uids = count()
        self._binder_ids = count()
        self._slot_ids = count()

    @property
    def root_id(self) -> NodeId:
        if self.root is None:
            raise ValueError("graph has no root")
        return node_id(self.root)

    # --- Allocation ---
    def empty(self) -> Empty:
        return Empty(uid=next(self._uids))

    def symbol(self, name: str) -> Symbol:
        return Symbol(name, uid=next(self._uids))

    def pair(self, left: Node, right: Node) -> Pair:
        return Pair(left, right, uid=next(self._uids))

    def binder(self, path: str = "") -> Binder:
        return Binder(next(self._binder_ids), path, uid=next(self._uids))

    def slot(self, binder_id: int | None, path: str = "") -> Slot:
        return Slot(next(self._slot_ids), binder_id, path, uid=next(self._uids))

    def rebuild(self, node: Pair, left: Node, right: Node) -> Pair:
        """Return `node` itself when both children are unchanged, else a new Pair."""
        if left is node.left and right is node.right:
            return node
        return self.pair(left, right)

    def map_leaves(
        self,
        node: Node,
        leaf: Callable[[Node], Node],
        combine: Callable[[Pair, Node, Node], Node] | None = None,
    ) -> Node:
        """Rebuild `node` bottom-up on an explicit stack.

        `leaf` maps every non-Pair node, strictly left to right. Each Pair is
        then rebuilt from its mapped children by `combine` (default `rebuild`).
        """
        combine = combine or self.rebuild
        results: list[Node] = []
        stack: list[tuple[Node, bool]] = [(node, False)]
        while stack:
            current, children_done = stack.pop()
            if not isinstance(current, Pair):
                results.append(leaf(current))
            elif children_done:
                right = results.pop()
                left = results.pop()
                results.append(combine(current, left, right))
            else:
                stack.append((current, True))
                stack.append((current.right, False))
                stack.append((current.left, False))
        return results[0]

    def clone(self, node: Node) -> Node:
        """Deep copy `node` into this graph.

        Binders inside the copied subtree get fresh ids and their slots are
        rewired to them; slots pointing outside the subtree keep their target.
        `node` may come from another graph (environment entries do).
        """
        renamed: dict[int, int] = {}

        def copy_leaf(leaf: Node) -> Node:
            match leaf:
                case Empty():
                    return self.empty()
                case Symbol(name):
                    return self.symbol(name)
                case Binder(old_id, path):
                    # Leaves run left to right, so a binder is seen before its body
                    fresh = self.binder(path)
                    renamed[old_id] = fresh.id
                    return fresh
                case Slot(_, binder_id, path):
                    return self.slot(renamed.get(binder_id, binder_id), path)
            raise TypeError(f"Not a graph node: {leaf!r}")

        return self.map_leaves(node, copy_leaf, lambda _, left, right: self.pair(left, right))

    # --- Derived views ---
    def walk(self) -> Iterator[Node]:
        """Pre-order, left-to-right traversal of everything reachable from the root."""
        if self.root is None:
            return
        stack: list[Node] = [self.root]
        while stack:
            node = stack.pop()
            yield node
            if isinstance(node, Pair):
                stack.append(node.right)
                stack.append(node.left)

    def nodes(self) -> list[Node]:
        """Reachable nodes in creation order."""
        seen: dict[int, Node] = {}
        for node in self.walk():
            seen.setdefault(node.uid, node)
        return [seen[uid] for uid in sorted(seen)]

    def links(self) -> list[Link]:
        nodes = self.nodes()
        binders = {n.id: n for n in nodes if isinstance(n, Binder)}
        links: list[Link] = []
        for node in nodes:
            if isinstance(node, Slot) and node.binder_id in binders:
                links.append(Link("reentry", node, binders[node.binder_id]))
            elif isinstance(node, Pair) and is_abstraction(node.left):
                links.append(Link("value", node.left.left, node.right))
        return links

    def __str__(self) -> str:
        return "<empty graph>" if self.root is None else str(self.root)

    def __repr__(self) -> str:
        n = 0 if self.root is None else len(self.nodes())
        return f"<Graph root={self.root_id if self.root is not None else None} nodes={n}>"
