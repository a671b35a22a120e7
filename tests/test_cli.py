import json

import pytest

from skgraph.cli import build_arg_parser, describe_node, main
from skgraph.types.graph import Graph


def test_single_expression(capsys):
    assert main(["(I a)"]) == 0
    out = capsys.readouterr().out
    assert out.splitlines() == [
        "Expression: (I a)",
        "  Result: a",
        "  Focus: a",
        "  Nodes: 1, Links: 0, Steps: 1",
    ]


def test_default_expressions(capsys):
    assert main([]) == 0
    out = capsys.readouterr().out
    assert "Expression: (I a)" in out
    assert "Expression: ((K a) b)" in out
    assert out.count("  Result: a") == 2


def test_failing_expression_does_not_stop_the_run(capsys):
    assert main(["(a b", "(a)", "(I a)"]) == 0
    captured = capsys.readouterr()
    assert "Failed to evaluate (a b" in captured.err
    assert "Failed to evaluate (a)" in captured.err
    assert "Expression: (I a)" in captured.out
    assert "Expression: (a b" not in captured.out


def test_trace_file(tmp_path, capsys):
    path = tmp_path / "trace.json"
    assert main([f"--trace={path}", "(I a)", "((K a) b)"]) == 0
    assert f"Trace written to {path}" in capsys.readouterr().out
    data = json.loads(path.read_text(encoding="utf-8"))
    assert [entry["expression"] for entry in data] == ["(I a)", "((K a) b)"]
    assert [len(entry["snapshots"]) for entry in data] == [1, 2]
    assert data[1]["snapshots"][-1]["text"] == "a"


def test_trace_skips_failed_expressions(tmp_path):
    path = tmp_path / "trace.json"
    assert main(["--trace", str(path), "--no-precompile", "(a b", "(I a)"]) == 0
    data = json.loads(path.read_text(encoding="utf-8"))
    assert [entry["expression"] for entry in data] == ["(I a)"]


def test_unwritable_trace_fails(tmp_path, capsys):
    path = tmp_path / "missing" / "trace.json"
    assert main(["--trace", str(path), "(I a)"]) == 1
    captured = capsys.readouterr()
    assert "Result: a" in captured.out
    assert "Failed to write trace" in captured.err


def test_missing_definitions_fail(tmp_path, capsys):
    assert main(["--defs", str(tmp_path / "missing.lisp"), "(I a)"]) == 1
    captured = capsys.readouterr()
    assert "Failed to load definitions" in captured.err
    assert captured.out == ""


def test_malformed_definitions_fail(tmp_path, capsys):
    p = tmp_path / "bad.lisp"
    p.write_text("(foo)", encoding="utf-8")
    assert main(["--defs", str(p)]) == 1
    assert "Failed to load definitions" in capsys.readouterr().err


def test_custom_definitions(tmp_path, capsys):
    p = tmp_path / "basis.lisp"
    p.write_text("(def ID (() ()))", encoding="utf-8")
    assert main(["--defs", str(p), "--precompile", "(ID q)"]) == 0
    assert "  Result: q" in capsys.readouterr().out


def test_definitions_from_environment(monkeypatch, tmp_path, capsys):
    p = tmp_path / "basis.lisp"
    p.write_text("(def ID (() ()))", encoding="utf-8")
    monkeypatch.setenv("SKGRAPH_DEFS_PATH", str(p))
    assert main(["(ID q)"]) == 0
    assert "  Result: q" in capsys.readouterr().out


@pytest.mark.parametrize(
    "argv, expected",
    [
        ([], None),
        (["--precompile"], True),
        (["--no-precompile"], False),
    ]
)
def test_precompile_flag(argv, expected):
    assert build_arg_parser().parse_args(argv).precompile is expected


def test_describe_node():
    g = Graph()
    assert describe_node(None) == "<missing>"
    assert describe_node(g.symbol("a")) == "a"
    assert describe_node(g.empty()) == "()"
    assert describe_node(g.slot(None)) == "slot(?)"
    assert describe_node(g.slot(3)) == "slot(3)"
    binder = g.binder()
    assert describe_node(binder) == f"binder(n{binder.uid})"
    pair = g.pair(binder, g.empty())
    assert describe_node(pair) == f"pair(n{pair.uid})"
