"""Command-line front end: reduce expressions against a basis file.

    skgraph "(I a)" "((K a) b)"
    skgraph --trace=trace.json "(((S K) K) x)"
    skgraph --defs=my-basis.lisp --no-precompile "(SELF z)"

Each expression is evaluated on its own; a failing expression is reported on
stderr and the remaining ones still run. Only an unreadable basis file or an
unwritable trace file makes the run fail.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from skgraph.config import DEFAULT_EXPRESSIONS, get_definitions_path
from skgraph.errors import SKError
from skgraph.interpreter import Interpreter
from skgraph.trace import export_trace
from skgraph.types.nodes import Node, Empty, Symbol, Pair, Binder, Slot

logger = logging.getLogger(__name__)


def describe_node(node: Node | None) -> str:
    match node:
        case None:
            return "<missing>"
        case Symbol(name):
            return name
        case Empty():
            return "()"
        case Pair():
            return f"pair(n{node.uid})"
        case Binder():
            return f"binder(n{node.uid})"
        case Slot(_, binder_id):
            return f"slot({binder_id if binder_id is not None else '?'})"
    return repr(node)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="skgraph", description="Reduce SK expressions on a pointer graph.")
    parser.add_argument("expressions", nargs="*", help="expressions to evaluate (default: %s)" % " ".join(DEFAULT_EXPRESSIONS))
    parser.add_argument("--defs", metavar="PATH", help="basis file of (def ...) forms (default: $SKGRAPH_DEFS_PATH or the bundled basis)")
    parser.add_argument("--trace", metavar="PATH", help="write a JSON trace of every reduction step")
    parser.add_argument(
        "--precompile",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="inline definitions before reducing (default: on when tracing)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="log reduction steps")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    defs_path = args.defs or get_definitions_path()
    precompile = args.precompile if args.precompile is not None else args.trace is not None
    try:
        itp = Interpreter(defs_path, precompile=precompile)
    except (OSError, SKError) as e:
        print(f"Failed to load definitions from {defs_path}: {e}", file=sys.stderr)
        return 1

    traces = []
    for source in args.expressions or DEFAULT_EXPRESSIONS:
        try:
            result = itp.evaluate(source, trace=args.trace is not None)
        except (SKError, RecursionError) as e:
            logger.debug("Evaluation of %s failed", source, exc_info=True)
            print(f"Failed to evaluate {source}: {e}", file=sys.stderr)
            continue
        traces.append((source, result.snapshots))
        print(f"Expression: {source}")
        print(f"  Result: {result}")
        print(f"  Focus: {describe_node(result.root)}")
        print(f"  Nodes: {len(result.graph.nodes())}, Links: {len(result.graph.links())}, Steps: {result.steps}")

    if args.trace is not None:
        try:
            export_trace(traces, args.trace)
        except OSError as e:
            print(f"Failed to write trace to {args.trace}: {e}", file=sys.stderr)
            return 1
        print(f"Trace written to {args.trace}")
    return 0
