"""
  S-expression Reader, Lexer and Parser

- Streaming, lazy lexing
- Emits plain Python values:

    - atoms -> str
    - lists -> Python list
    - `;` starts a comment running to the end of the line

  There are no other literal types: numbers, strings and quote forms are all
  just atoms. The public `parse_sexpr`/`parse_many` entry points fold lists of
  three or more items into nested pairs, so `(S K K x)` reads as
  `(((S K) K) x)`. The raw `TokenStream` reader does not fold; the definition
  loader needs the unfolded `(def name body)` shape.
"""

from __future__ import annotations

import re
from functools import reduce
from typing import Iterator, Optional

from skgraph import SExpression
from skgraph.errors import ParseError


TOKEN_RE = re.compile(
    r"\s*("
    r"(?P<comment>;[^\n]*)"  # single-line comment
    r"|(?P<lparen>\()"  # (
    r"|(?P<rparen>\))"  # )
    r"|(?P<atom>[^\s();]+)"  # everything else up to a delimiter
    r")",
    re.DOTALL,
)

Token = tuple[str, str, int]


def lex(source: str) -> Iterator[Token]:
    """Token generator: yields (token_type, token_value, offset) tuples."""
    pos = 0
    n = len(source)
    while pos < n:
        m = TOKEN_RE.match(source, pos)
        if not m:
            # Only trailing whitespace is left
            break
        pos = m.end()
        if m.group("comment"):
            continue
        for nm in ("lparen", "rparen", "atom"):
            if m.group(nm):
                yield nm, m.group(nm), m.start(nm)
                break


class TokenStream:
    def __init__(self, token_iter: Iterator[Token]):
        self.tokens = iter(token_iter)
        self.buffer: list[Token] = []

    def peek(self) -> tuple[Optional[str], Optional[str], int]:
        if not self.buffer:
            try:
                self.buffer.append(next(self.tokens))
            except StopIteration:
                return None, None, -1
        return self.buffer[0]

    def advance(self) -> tuple[Optional[str], Optional[str], int]:
        if self.buffer:
            return self.buffer.pop(0)
        return next(self.tokens, (None, None, -1))

    def parse_expr(self) -> SExpression:
        """Read one raw form; returns None at end of input."""
        tok_type, tok_val, tok_pos = self.peek()
        if tok_type is None:
            return None

        if tok_type == "rparen":
            raise ParseError("Unexpected ')'", tok_pos)

        self.advance()
        if tok_type == "atom":
            return tok_val

        # List: one (items, offset) entry per open paren, innermost last
        open_lists: list[tuple[list, int]] = [([], tok_pos)]
        while True:
            tok_type, tok_val, tok_pos = self.advance()
            if tok_type is None:
                raise ParseError("Unmatched '('", open_lists[-1][1])
            if tok_type == "lparen":
                open_lists.append(([], tok_pos))
            elif tok_type == "atom":
                open_lists[-1][0].append(tok_val)
            else:
                items, _ = open_lists.pop()
                if not open_lists:
                    return items
                open_lists[-1][0].append(items)

    def parse_all(self) -> Iterator[SExpression]:
        while True:
            tok_type = self.peek()[0]
            if tok_type is None:
                break
            yield self.parse_expr()


def fold_applications(expr: SExpression) -> SExpression:
    """Fold every list of 3+ items left-associatively: (f a b) -> ((f a) b)."""
    results: list[SExpression] = []
    stack: list[tuple[SExpression, bool]] = [(expr, False)]
    while stack:
        current, items_done = stack.pop()
        if not isinstance(current, list):
            results.append(current)
        elif items_done:
            start = len(results) - len(current)
            items = results[start:]
            del results[start:]
            if len(items) >= 3:
                items = reduce(lambda acc, item: [acc, item], items[2:], items[:2])
            results.append(items)
        else:
            stack.append((current, True))
            stack.extend((item, False) for item in reversed(current))
    return results[0]


def parse_sexpr(source: str) -> SExpression:
    """Parse exactly one folded form. Returns None for blank input."""
    stream = TokenStream(lex(source))
    expr = stream.parse_expr()
    if expr is None:
        return None
    tok_type, tok_val, tok_pos = stream.peek()
    if tok_type is not None:
        raise ParseError(f"Extra content after expression: {tok_val!r}", tok_pos)
    return fold_applications(expr)


def parse_many(source: str) -> list[SExpression]:
    return [fold_applications(e) for e in TokenStream(lex(source)).parse_all()]


_CLOSE = object()


def format_sexpr(expr: SExpression) -> str:
    out: list[str] = []
    separate = False
    stack: list = [expr]
    while stack:
        item = stack.pop()
        if item is _CLOSE:
            out.append(")")
            separate = True
            continue
        if separate:
            out.append(" ")
        if isinstance(item, list):
            out.append("(")
            separate = False
            stack.append(_CLOSE)
            stack.extend(reversed(item))
        else:
            out.append(str(item))
            separate = True
    return "".join(out)
