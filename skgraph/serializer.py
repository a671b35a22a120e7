"""Render graphs back to source text.

Binders print as `()` heads of binding forms. A slot prints as `()` when it
refers to the innermost enclosing binder and as a De Bruijn `#n` otherwise,
so the output reads back into an equivalent graph. An innermost slot in
operator position prints as `#0` instead, since `(() x)` would open a new
binder. Dangling slots have no binder to point at and print as `()`.
"""

from __future__ import annotations

from skgraph import SExpression
from skgraph.reader.parser import format_sexpr
from skgraph.types.graph import Graph
from skgraph.types.nodes import Node, Empty, Symbol, Pair, Binder, Slot


def _slot_ref(binder_id: int | None, scopes: tuple[int, ...], head: bool = False) -> SExpression:
    for depth, bid in enumerate(reversed(scopes)):
        if bid == binder_id:
            # `(() x)` would read back as a binding form
            return "#0" if depth == 0 and head else ([] if depth == 0 else f"#{depth}")
    return []


# Pending-work markers: wrap the last result as a binding form or pair the last two
_BINDING = object()
_APPLICATION = object()


def to_sexpr(node: Node) -> SExpression:
    results: list[SExpression] = []
    tasks: list = [(node, ())]
    while tasks:
        task = tasks.pop()
        if task is _BINDING:
            results.append([[], results.pop()])
            continue
        if task is _APPLICATION:
            right = results.pop()
            results.append([results.pop(), right])
            continue

        current, scopes = task
        match current:
            case Empty() | Binder():
                results.append([])
            case Symbol(name):
                results.append(name)
            case Slot(_, binder_id):
                results.append(_slot_ref(binder_id, scopes))
            case Pair(Binder(bid), body):
                tasks.append(_BINDING)
                tasks.append((body, scopes + (bid,)))
            case Pair(Slot(_, binder_id), right):
                results.append(_slot_ref(binder_id, scopes, head=True))
                tasks.append(_APPLICATION)
                tasks.append((right, scopes))
            case Pair(left, right):
                tasks.append(_APPLICATION)
                tasks.append((right, scopes))
                tasks.append((left, scopes))
            case _:
                raise TypeError(f"Not a graph node: {current!r}")
    return results[0]


def serialize(node: Node) -> str:
    return format_sexpr(to_sexpr(node))


def serialize_graph(graph: Graph) -> str:
    if graph.root is None:
        raise ValueError("graph has no root")
    return serialize(graph.root)
