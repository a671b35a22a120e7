from __future__ import annotations

import logging
from pathlib import Path

from skgraph import SExpression
from skgraph.compiler.graph_builder import Param, build_graph, DE_BRUIJN_RE
from skgraph.errors import DefinitionFormError
from skgraph.reader.parser import TokenStream, lex, fold_applications, format_sexpr
from skgraph.types.environment import Environment

logger = logging.getLogger(__name__)


def _check_name(name: SExpression, what: str) -> str:
    if not isinstance(name, str) or DE_BRUIJN_RE.fullmatch(name):
        raise DefinitionFormError(f"{what} must be a plain atom, got {format_sexpr(name)}")
    return name


def _desugar_params(params: list[str], body: SExpression) -> SExpression:
    """(defn name (x y) body) -> nested named binders: [Param(x), [Param(y), body]]"""
    if not params:
        return body
    first, *rest = params
    return [Param(first), _desugar_params(rest, body)]


def normalize_definition(form: SExpression) -> tuple[str, SExpression]:
    """
    (def name body) | (defn name (params ...) body) -> (name, body)
    The body comes back folded and, for defn, wrapped in named binders.
    """
    if not isinstance(form, list) or not form:
        raise DefinitionFormError(f"Each form must be (def name body), got {format_sexpr(form)}")

    head = form[0]
    if head == "def":
        if len(form) != 3:
            raise DefinitionFormError(f"def requires exactly 2 arguments: {format_sexpr(form)}")
        _, name, body = form
        return _check_name(name, "def name"), fold_applications(body)

    if head == "defn":
        if len(form) != 4:
            raise DefinitionFormError(f"defn requires a name, a parameter list and a body: {format_sexpr(form)}")
        _, name, params, body = form
        name = _check_name(name, "defn name")
        if not isinstance(params, list):
            raise DefinitionFormError(f"defn parameters must be a list, got {format_sexpr(params)}")
        params = [_check_name(p, "defn parameter") for p in params]
        return name, _desugar_params(params, fold_applications(body))

    raise DefinitionFormError(f"Unsupported form {format_sexpr(head)}")


def parse_definitions(source: str, env: Environment | None = None) -> Environment:
    """Load every definition in `source` into `env` (a new Environment if None).

    Each body is built into its own graph and then expanded against the
    definitions loaded so far; names not yet defined stay free Symbols.
    """
    if env is None:
        env = Environment()
    for form in TokenStream(lex(source)).parse_all():
        name, body = normalize_definition(form)
        graph = build_graph(body)
        graph.root = env.expand(graph, graph.root)
        env.define(name, graph)
        logger.debug("Defined %s (%d nodes)", name, len(graph.nodes()))
    return env


def load_definitions(path: str | Path, env: Environment | None = None) -> Environment:
    p = Path(path)
    code = p.read_text(encoding='utf-8')
    env = parse_definitions(code, env)
    logger.debug("Loaded %d definitions from %s", len(env), p)
    return env
