"""Normal-order reducer for the pointer graph.

`step` finds the leftmost-outermost reducible position of the whole graph and
rewrites it:

- expand:   a Symbol bound in the Environment becomes a fresh clone of its graph
- apply:    `(abstraction arg)` becomes `collapse(apply(abstraction, arg))`
- collapse: `(() arg)` becomes `arg` (an application whose head is Empty)

Reduction goes under binders, so `evaluate` ends at a full normal form. Only
the ancestors of a rewritten position are rebuilt; the root is repointed
after every step and the previous state is left to the garbage collector.
"""

from __future__ import annotations

import logging
from typing import NamedTuple, Optional, Protocol

from skgraph.evaluation.apply import apply
from skgraph.types.environment import Environment
from skgraph.types.graph import Graph, node_id
from skgraph.types.nodes import Node, Empty, Symbol, Pair, Binder, is_abstraction

logger = logging.getLogger(__name__)


# Linked (parent pair, child index, rest) frames, innermost first; None at the root
Frame = Optional[tuple[Pair, int, "Frame"]]


class Step(NamedTuple):
    note: str  # "expand", "apply" or "collapse"
    focus: Node  # the node that took the redex's place
    position: tuple[int, ...] = ()  # child indices from the root down to `focus`


class StepRecorder(Protocol):
    def record(self, graph: Graph, note: str, focus: Node) -> None: ...


def collapse(graph: Graph, node: Node) -> Node:
    """Post-order: replace every `Pair(Empty, x)` by `x`, peeling nested wrappers inside-out."""

    def strip(pair: Pair, left: Node, right: Node) -> Node:
        if isinstance(left, Empty):
            return right
        return graph.rebuild(pair, left, right)

    return graph.map_leaves(node, lambda leaf: leaf, strip)


def find_redex(root: Node, env: Environment | None = None) -> Optional[tuple[Node, Frame, str]]:
    """Leftmost-outermost reducible node, the path to it and the rewrite to perform."""
    stack: list[tuple[Node, Frame]] = [(root, None)]
    while stack:
        node, path = stack.pop()
        match node:
            case Symbol(name) if env is not None and name in env:
                return node, path, "expand"
            case Pair(Empty(), _):
                return node, path, "collapse"
            case Pair(left, _) if is_abstraction(left):
                return node, path, "apply"
            case Pair(Binder(), body):
                # Abstraction not in operator position: reduce its body
                stack.append((body, (node, 1, path)))
            case Pair(left, right):
                stack.append((right, (node, 1, path)))
                stack.append((left, (node, 0, path)))
    return None


def replace_at(graph: Graph, path: Frame, replacement: Node) -> Node:
    """Rebuild the ancestors along `path` around `replacement`; returns the new root."""
    node = replacement
    while path is not None:
        parent, index, path = path
        if index == 0:
            node = graph.pair(node, parent.right)
        else:
            node = graph.pair(parent.left, node)
    return node


def _position(path: Frame) -> tuple[int, ...]:
    indices = []
    while path is not None:
        _, index, path = path
        indices.append(index)
    return tuple(reversed(indices))


def node_at(root: Node, position: tuple[int, ...]) -> Node:
    node = root
    for index in position:
        node = node.left if index == 0 else node.right
    return node


def _rewrite(graph: Graph, env: Environment | None, redex: Node, path: Frame, note: str) -> Step:
    if note == "expand":
        replacement = env.resolve_symbol(graph, redex)
    else:
        replacement = collapse(graph, apply(graph, redex.left, redex.right))

    graph.root = replace_at(graph, path, replacement)
    position = _position(path)
    logger.debug("%s at %s (depth %d) -> %s", note, node_id(redex), len(position), node_id(replacement))
    return Step(note, replacement, position)


def step(graph: Graph, env: Environment | None = None) -> Step | None:
    """Perform one reduction step on `graph` in place. Returns None at normal form."""
    if graph.root is None:
        return None
    found = find_redex(graph.root, env)
    if found is None:
        return None
    return _rewrite(graph, env, *found)


def _record(tracer: StepRecorder, graph: Graph, cycle: Step) -> None:
    # Expansions only replace Symbol leaves, so the cycle's position still
    # leads to the node now standing in for its focus
    tracer.record(graph, cycle.note, node_at(graph.root, cycle.position))


def run(graph: Graph, env: Environment | None = None, tracer: StepRecorder | None = None) -> int:
    """Reduce `graph` to normal form; returns the number of apply/collapse cycles.

    Environment expansions are steps too but are not counted. Each cycle's
    snapshot is taken once the expansions that follow it are done, so the
    last snapshot always shows the final graph.
    """
    cycles = 0
    pending: Step | None = None
    while graph.root is not None and (found := find_redex(graph.root, env)) is not None:
        redex, path, note = found
        if note != "expand" and pending is not None:
            _record(tracer, graph, pending)
            pending = None
        current = _rewrite(graph, env, redex, path, note)
        if note == "expand":
            continue
        cycles += 1
        if tracer is not None:
            pending = current
    if pending is not None:
        _record(tracer, graph, pending)
    return cycles


def evaluate(graph: Graph, env: Environment | None = None, tracer: StepRecorder | None = None) -> Node:
    """Reduce `graph` to normal form and return its new root.

    Evaluating a graph that is already in normal form changes nothing.
    """
    run(graph, env, tracer)
    return graph.root
