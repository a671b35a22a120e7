"""Node variants of the pointer graph.

Five immutable kinds. `Pair` is the only interior node; the rest are leaves.
`uid` is the graph-wide creation index used for snapshot ids and `path` is a
diagnostic label from the builder; neither takes part in equality, so two
graphs compare equal exactly when they have the same shape, symbols and
binder wiring.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True, slots=True)
class Empty:
    uid: int = field(default=-1, compare=False)

    def __str__(self) -> str:
        return "()"


@dataclass(frozen=True, slots=True)
class Symbol:
    name: str
    uid: int = field(default=-1, compare=False)

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class Pair:
    left: Node
    right: Node
    uid: int = field(default=-1, compare=False)

    def __str__(self) -> str:
        return f"({self.left} {self.right})"


@dataclass(frozen=True, slots=True)
class Binder:
    id: int
    path: str = field(default="", compare=False)
    uid: int = field(default=-1, compare=False)

    def __str__(self) -> str:
        return f"<binder {self.id}>"


@dataclass(frozen=True, slots=True)
class Slot:
    id: int = field(compare=False)
    binder_id: int | None
    path: str = field(default="", compare=False)
    uid: int = field(default=-1, compare=False)

    def __str__(self) -> str:
        return f"<slot {self.binder_id if self.binder_id is not None else '?'}>"


Node = Union[Empty, Symbol, Pair, Binder, Slot]


def is_abstraction(node: Node) -> bool:
    """True for a binding form `(() body)`: a Pair whose left child is a Binder."""
    return isinstance(node, Pair) and isinstance(node.left, Binder)


def kind_of(node: Node) -> str:
    match node:
        case Empty():
            return "empty"
        case Symbol():
            return "symbol"
        case Pair():
            return "pair"
        case Binder():
            return "binder"
        case Slot():
            return "slot"
    raise TypeError(f"Not a graph node: {node!r}")
