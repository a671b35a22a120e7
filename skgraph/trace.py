"""Step traces for visualization and debugging.

A snapshot is a JSON-ready dict describing the whole graph after one
apply/collapse cycle: its reachable nodes in creation order, the derived
pointer links, and the serialized expression. Binder nodes carry an
`anchorKey` and slot nodes the matching `aliasKey` so a viewer can draw each
slot next to the binder it re-enters. Snapshots are view-only: recording
one never touches the graph.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable

from skgraph.serializer import serialize
from skgraph.types.graph import Graph, Link, node_id
from skgraph.types.nodes import Node, Empty, Symbol, Pair, Binder, Slot

Snapshot = dict[str, Any]


def _binder_key(binder_id: int) -> str:
    return f"b{binder_id}"


def node_record(node: Node) -> dict[str, Any]:
    record: dict[str, Any] = {"id": node_id(node)}
    match node:
        case Empty():
            record.update(kind="empty", label="()")
        case Symbol(name):
            record.update(kind="symbol", label=name)
        case Pair(left, right):
            record.update(kind="pair", children=[node_id(left), node_id(right)])
        case Binder(bid, path):
            record.update(kind="binder", binderId=bid, path=path, anchorKey=_binder_key(bid))
        case Slot(sid, bid, path):
            record.update(kind="slot", slotId=sid, binderId=bid, path=path)
            if bid is not None:
                record["aliasKey"] = _binder_key(bid)
    return record


def link_record(link: Link) -> dict[str, Any]:
    source, target = node_id(link.source), node_id(link.target)
    return {"id": f"{link.kind}:{source}", "kind": link.kind, "from": source, "to": target}


def snapshot_from_graph(graph: Graph, note: str, focus: Node | None = None, step: int = 0) -> Snapshot:
    return {
        "step": step,
        "note": note,
        "rootId": graph.root_id,
        "focus": node_id(focus) if focus is not None else None,
        "text": serialize(graph.root),
        "nodes": [node_record(n) for n in graph.nodes()],
        "links": [link_record(link) for link in graph.links()],
    }


class Tracer:
    """Append-only recorder of one snapshot per reduction cycle."""

    def __init__(self):
        self._snapshots: list[Snapshot] = []

    def record(self, graph: Graph, note: str, focus: Node | None = None) -> None:
        self._snapshots.append(snapshot_from_graph(graph, note, focus, len(self._snapshots) + 1))

    @property
    def snapshots(self) -> tuple[Snapshot, ...]:
        return tuple(self._snapshots)

    def __len__(self) -> int:
        return len(self._snapshots)


def trace_payload(results: Iterable[tuple[str, Iterable[Snapshot]]]) -> list[dict[str, Any]]:
    return [{"expression": expression, "snapshots": list(snapshots)} for expression, snapshots in results]


def export_trace(results: Iterable[tuple[str, Iterable[Snapshot]]], path: str | Path) -> Path:
    """Write `[{"expression", "snapshots"}, ...]` as JSON. I/O errors propagate."""
    p = Path(path)
    p.write_text(json.dumps(trace_payload(results), indent=2), encoding='utf-8')
    return p
