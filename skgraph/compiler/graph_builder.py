"""Graph builder: nested lists -> pointer graph.

Walks a (folded) s-expression depth-first with a stack of open binders,
innermost last:

- `()` inside a binding form becomes a Slot pointing at the innermost binder;
  `()` with no binder open is Empty.
- `(() body)` opens a binder for `body` and yields `Pair(Binder, body)`.
- `#n` is a De Bruijn slot reference (`#0` innermost, same as `()`).
- Atoms naming an enclosing `defn` parameter become slots of that binder.
- Any other 2-element list is a plain Pair; other lengths raise ShapeError.

The binder stack is an immutable tuple carried by each pending task; all id
counters live on the Graph created for the top-level call.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, NamedTuple, Optional

from skgraph import SExpression
from skgraph.errors import ShapeError
from skgraph.reader.parser import format_sexpr
from skgraph.types.graph import Graph
from skgraph.types.nodes import Node, Binder

logger = logging.getLogger(__name__)

DE_BRUIJN_RE = re.compile(r"#(\d+)")
ROOT_PATH = "@"

SymbolResolver = Callable[[Graph, str], Optional[Node]]


class Param:
    """Named binder marker produced when desugaring `(defn name (x y) body)`."""

    __slots__ = ("name",)

    def __init__(self, name: str):
        self.name = name

    def __eq__(self, other) -> bool:
        return isinstance(other, Param) and self.name == other.name

    def __hash__(self) -> int:
        return hash(("Param", self.name))

    def __repr__(self) -> str:
        return f"Param({self.name!r})"


class _Scope(NamedTuple):
    binder_id: int
    name: Optional[str]


def _is_binding_marker(expr: SExpression) -> bool:
    return isinstance(expr, Param) or (isinstance(expr, list) and not expr)


def _build_atom(
    graph: Graph,
    atom: str,
    stack: tuple[_Scope, ...],
    path: str,
    resolve_symbol: SymbolResolver | None,
) -> Node:
    m = DE_BRUIJN_RE.fullmatch(atom)
    if m:
        depth = int(m.group(1))
        if depth < len(stack):
            return graph.slot(stack[-1 - depth].binder_id, path)
        logger.debug("Dangling slot reference %s at %s", atom, path)
        return graph.slot(None, path)

    for scope in reversed(stack):
        if scope.name == atom:
            return graph.slot(scope.binder_id, path)

    if resolve_symbol is not None:
        resolved = resolve_symbol(graph, atom)
        if resolved is not None:
            return resolved

    return graph.symbol(atom)


class _Task(NamedTuple):
    expr: SExpression
    stack: tuple[_Scope, ...]
    path: str


class _Join(NamedTuple):
    # Binder opened for the body just built, or None for an application
    binder: Optional[Binder]


def _build(graph: Graph, expr: SExpression, resolve_symbol: SymbolResolver | None) -> Node:
    results: list[Node] = []
    tasks: list[_Task | _Join] = [_Task(expr, (), ROOT_PATH)]
    while tasks:
        task = tasks.pop()
        if isinstance(task, _Join):
            right = results.pop()
            left = task.binder if task.binder is not None else results.pop()
            results.append(graph.pair(left, right))
            continue

        expr, stack, path = task
        match expr:
            case []:
                results.append(graph.slot(stack[-1].binder_id, path) if stack else graph.empty())
            case [marker, body] if _is_binding_marker(marker):
                binder = graph.binder(path)
                name = marker.name if isinstance(marker, Param) else None
                tasks.append(_Join(binder))
                tasks.append(_Task(body, stack + (_Scope(binder.id, name),), f"{path}.1"))
            case [left, right]:
                tasks.append(_Join(None))
                tasks.append(_Task(right, stack, f"{path}.1"))
                tasks.append(_Task(left, stack, f"{path}.0"))
            case list():
                raise ShapeError(
                    f"Expected a list of 0 or 2 elements at {path}, "
                    f"got {len(expr)}: {format_sexpr(expr)}"
                )
            case str():
                results.append(_build_atom(graph, expr, stack, path, resolve_symbol))
            case _:
                raise ShapeError(f"Cannot build a graph node from {expr!r} at {path}")
    return results[0]


def build_graph(expr: SExpression, resolve_symbol: SymbolResolver | None = None) -> Graph:
    """Build a fresh Graph for one top-level expression.

    `resolve_symbol(graph, name)` may return a node (already allocated in
    `graph`) to use in place of a free Symbol; this is how definitions are
    inlined ahead of reduction.
    """
    graph = Graph()
    graph.root = _build(graph, expr, resolve_symbol)
    return graph
