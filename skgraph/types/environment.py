"""Definition environment for skgraph.

The Environment maps names to immutable Graphs built from `(def ...)` forms.
Entries are never handed out directly: every lookup clones the stored graph
into the caller's graph with fresh ids, so no two evaluations (and no two
occurrences inside one evaluation) ever share a definition's nodes.
"""

from __future__ import annotations

import logging
from io import StringIO
from typing import Iterator, Optional

from skgraph.errors import RecursiveDefinitionError
from skgraph.types.graph import Graph
from skgraph.types.nodes import Node, Symbol

logger = logging.getLogger(__name__)


class Environment:
    """Mapping from definition names to their (pre-expanded) graphs."""

    __slots__ = ("defs",)

    def __init__(self):
        self.defs: dict[str, Graph] = {}

    def define(self, name: str, graph: Graph) -> None:
        """Bind `name` to `graph`. A later definition replaces an earlier one."""
        if graph.root is None:
            raise ValueError(f"Cannot define {name} as an empty graph")
        if name in self.defs:
            logger.warning("Redefining %s", name)
        self.defs[name] = graph

    def lookup(self, name: str, into: Graph) -> Optional[Node]:
        """Fresh clone of the definition of `name` allocated in `into`, or None."""
        stored = self.defs.get(name)
        if stored is None:
            return None
        return into.clone(stored.root)

    def resolve_symbol(self, graph: Graph, symbol: Symbol) -> Node:
        """Clone of the bound graph if `symbol` is defined, else the Symbol unchanged."""
        resolved = self.lookup(symbol.name, graph)
        return symbol if resolved is None else resolved

    def expand(self, graph: Graph, node: Node) -> Node:
        """Replace every defined Symbol under `node` by a clone of its definition.

        One pass is enough for definitions loaded in order: stored graphs are
        already expanded against everything defined before them.
        """
        def expand_leaf(leaf: Node) -> Node:
            match leaf:
                case Symbol(name) if name in self.defs:
                    return self.lookup(name, graph)
            return leaf

        return graph.map_leaves(node, expand_leaf)

    def inline(self, graph: Graph, name: str, _active: frozenset[str] = frozenset()) -> Optional[Node]:
        """Clone `name` with every reachable definition expanded, forward references included.

        Raises RecursiveDefinitionError when a definition reaches itself.
        """
        if name not in self.defs:
            return None
        if name in _active:
            raise RecursiveDefinitionError(f"Recursive definition: {name}")
        active = _active | {name}
        return self._inline_all(graph, self.lookup(name, graph), active)

    def _inline_all(self, graph: Graph, node: Node, active: frozenset[str]) -> Node:
        def inline_leaf(leaf: Node) -> Node:
            match leaf:
                case Symbol(name) if name in self.defs:
                    return self.inline(graph, name, active)
            return leaf

        return graph.map_leaves(node, inline_leaf)

    def update(self, other: Environment) -> None:
        """Bulk-define every entry of `other` in this environment."""
        for name, graph in other.defs.items():
            self.define(name, graph)

    def names(self) -> list[str]:
        return list(self.defs)

    def __contains__(self, name: object) -> bool:
        return name in self.defs

    def __len__(self) -> int:
        return len(self.defs)

    def __iter__(self) -> Iterator[str]:
        return iter(self.defs)

    def __str__(self) -> str:
        with StringIO() as buffer:
            buffer.write("{")
            buffer.write(", ".join(f"{k}: {g}" for k, g in self.defs.items()))
            buffer.write("}")
            return buffer.getvalue()

    def __repr__(self) -> str:
        return f"<Environment {len(self.defs)} definitions: {' '.join(self.defs)}>"
