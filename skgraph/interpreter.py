from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from skgraph import SExpression
from skgraph.compiler.graph_builder import build_graph
from skgraph.config import get_definitions_path
from skgraph.errors import ParseError
from skgraph.evaluation.evaluator import run
from skgraph.modules.definitions import load_definitions, parse_definitions
from skgraph.reader.parser import parse_sexpr, format_sexpr
from skgraph.serializer import serialize
from skgraph.trace import Snapshot, Tracer
from skgraph.types.environment import Environment
from skgraph.types.graph import Graph
from skgraph.types.nodes import Node

logger = logging.getLogger(__name__)


@dataclass
class Evaluation:
    """Outcome of reducing one expression."""

    expression: str
    graph: Graph
    steps: int
    snapshots: tuple[Snapshot, ...] = ()

    @property
    def root(self) -> Node:
        return self.graph.root

    def __str__(self) -> str:
        return serialize(self.graph.root)


class Interpreter:
    """
    Owns a definition Environment and reduces expressions against it.

    With `precompile=True` every defined name is inlined while the graph is
    built and reduction runs without lookups; otherwise names are expanded
    lazily when reduction reaches them. Both give the same normal form.
    """

    def __init__(
        self,
        definitions: str | Path | None | Literal['auto'] = 'auto',
        *,
        precompile: bool = False,
    ):
        self.env: Environment = Environment()
        self.precompile = precompile

        if definitions is None:
            pass  # explicit: no definitions
        elif definitions == 'auto':
            try:
                self.load(get_definitions_path())
            except FileNotFoundError:
                # Be permissive: no basis file found -> proceed with an empty environment
                logger.warning("No basis file at %s", get_definitions_path())
        else:
            self.load(definitions)

    def load(self, path: str | Path) -> None:
        load_definitions(path, self.env)

    def define(self, code: str) -> None:
        """Add the `(def ...)`/`(defn ...)` forms in `code` to the environment."""
        parse_definitions(code, self.env)

    def build(self, expr: SExpression) -> Graph:
        if self.precompile:
            return build_graph(expr, resolve_symbol=self.env.inline)
        return build_graph(expr)

    def evaluate(self, source: str | SExpression, trace: bool = False) -> Evaluation:
        if isinstance(source, str):
            expr = parse_sexpr(source)
            if expr is None:
                raise ParseError("Empty expression")
            text = source
        else:
            expr = source
            text = format_sexpr(source)

        graph = self.build(expr)
        tracer = Tracer() if trace else None
        steps = run(graph, None if self.precompile else self.env, tracer)
        return Evaluation(text, graph, steps, tracer.snapshots if tracer is not None else ())

    def eval(self, source: str | SExpression) -> str:
        return str(self.evaluate(source))
