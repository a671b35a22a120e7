import pytest

from skgraph.errors import ParseError, RecursiveDefinitionError, ShapeError
from skgraph.evaluation.evaluator import run, step
from skgraph.interpreter import Interpreter
from skgraph.reader.parser import parse_sexpr
from skgraph.types.nodes import Binder, Slot, Symbol

# -----------------------------------------------------
# Combinator behaviour over the bundled basis
# -----------------------------------------------------

test_cases = [
    ("(I a)", "a"),
    ("((K a) b)", "a"),
    ("(((S K) K) x)", "x"),
    ("(S K K x)", "x"),
    ("(I z)", "z"),
    ("((TRUE a) b)", "a"),
    ("((FALSE a) b)", "b"),
    ("(((NOT TRUE) a) b)", "b"),
    ("(((NOT FALSE) a) b)", "a"),
    ("((((AND TRUE) TRUE) a) b)", "a"),
    ("((((AND TRUE) FALSE) a) b)", "b"),
    ("((((OR FALSE) TRUE) a) b)", "a"),
    ("((((OR FALSE) FALSE) a) b)", "b"),
    ("((LEFT foo) bar)", "foo"),
    ("((RIGHT foo) bar)", "bar"),
    ("(SELF z)", "z"),
    ("(((C K) a) b)", "b"),
    ("((W K) a)", "a"),
    ("(((S a) b) c)", "((a c) (b c))"),
    ("(((B K) SELF) a)", "(() a)"),
    ("(((PAIR a) b) LEFT)", "a"),
    ("(((PAIR a) b) RIGHT)", "b"),
    ("(FIRST ((PAIR a) b))", "a"),
    ("(SECOND ((PAIR a) b))", "b"),
    ("((ZERO f) x)", "x"),
    ("((ONE f) x)", "(f x)"),
    ("((TWO f) x)", "(f (f x))"),
    ("(((SUCC ZERO) f) x)", "(f x)"),
    ("(((SUCC ONE) f) x)", "(f (f x))"),
    ("((((ADD ONE) TWO) f) x)", "(f (f (f x)))"),
    ("((((MUL TWO) TWO) f) x)", "(f (f (f (f x))))"),
    ("(MUL TWO TWO f x)", "(f (f (f (f x))))"),
]


@pytest.mark.parametrize("source, expected", test_cases)
def test_combinators(itp, source, expected):
    assert itp.eval(source) == expected


@pytest.mark.parametrize(
    "source, expected",
    [
        ("I", "(() ())"),
        ("K", "(() (() #1))"),
        ("(K a)", "(() a)"),
        ("(S K)", "(() (() ()))"),
        ("W", "(() (() ((#1 ()) ())))"),
        ("(I ())", "()"),
        ("(foo bar)", "(foo bar)"),
        ("undefined", "undefined"),
    ]
)
def test_normal_forms(itp, source, expected):
    assert itp.eval(source) == expected


@pytest.mark.parametrize(
    "source",
    ["K", "S", "W", "(S K)", "(((B K) SELF) a)", "((((ADD ONE) TWO) f) x)", "(() (#0 #0))"],
)
def test_result_reparses_to_itself(itp, source):
    text = itp.eval(source)
    assert itp.eval(text) == text


def test_evaluate_is_idempotent(itp):
    result = itp.evaluate("(((S K) K) x)")
    root = result.root
    assert run(result.graph, itp.env) == 0
    assert result.graph.root is root


def test_evaluation_record(itp):
    result = itp.evaluate("((K a) b)")
    assert result.expression == "((K a) b)"
    assert result.root == Symbol("a")
    assert result.steps == 2
    assert result.snapshots == ()
    assert str(result) == "a"


def test_evaluate_parsed_expression(itp):
    result = itp.evaluate(parse_sexpr("(S K K x)"))
    assert result.expression == "(((S K) K) x)"
    assert str(result) == "x"


def test_dangling_slot_result(itp):
    root = itp.evaluate("((() #2) a)").root
    assert isinstance(root, Slot) and root.binder_id is None


@pytest.mark.parametrize("source", ["", "   ", "(a b", ")", "a b"])
def test_bad_source(itp, source):
    with pytest.raises(ParseError):
        itp.evaluate(source)


def test_bad_shape(itp):
    with pytest.raises(ShapeError):
        itp.evaluate("(a)")


def test_binder_ids_stay_unique_while_reducing(itp):
    graph = itp.build(parse_sexpr("((((MUL TWO) TWO) f) x)"))
    env = None if itp.precompile else itp.env
    while step(graph, env) is not None:
        ids = [n.id for n in graph.walk() if isinstance(n, Binder)]
        assert len(ids) == len(set(ids))


def test_definitions_added_later(itp):
    itp.define("(defn TWICE (f x) (f (f x)))")
    assert itp.eval("(TWICE g y)") == "(g (g y))"


# -----------------------------------------------------
# Lazy expansion vs precompile
# -----------------------------------------------------

@pytest.mark.parametrize("source", [s for s, _ in test_cases])
def test_precompile_matches_lazy_expansion(source):
    lazy = Interpreter().evaluate(source)
    eager = Interpreter(precompile=True).evaluate(source)
    assert str(lazy) == str(eager)
    assert lazy.steps == eager.steps


def test_precompiled_graph_has_no_defined_symbols():
    itp = Interpreter(precompile=True)
    graph = itp.build(parse_sexpr("(((S K) K) x)"))
    names = {n.name for n in graph.walk() if isinstance(n, Symbol)}
    assert names == {"x"}


def test_forward_reference_resolves_lazily():
    itp = Interpreter(None)
    itp.define("(def A (B x)) (def B (() ()))")
    assert itp.eval("A") == "x"


def test_precompile_rejects_recursive_definitions():
    itp = Interpreter(None, precompile=True)
    itp.define("(def LOOP (LOOP a))")
    with pytest.raises(RecursiveDefinitionError):
        itp.evaluate("LOOP")


def test_lazy_recursive_definition_unfolds_on_demand():
    # Never reaches a normal form, but every single step is well defined
    itp = Interpreter(None)
    itp.define("(def LOOP (LOOP a))")
    graph = itp.build("LOOP")
    for _ in range(5):
        assert step(graph, itp.env).note == "expand"
    assert str(graph) == "(((((LOOP a) a) a) a) a)"


@pytest.mark.parametrize("expansion_mode", ["lazy", "precompile"])
def test_unreached_recursive_definition(expansion_mode):
    itp = Interpreter(precompile=expansion_mode == "precompile")
    itp.define("(def LOOP (LOOP a))")
    if itp.precompile:
        # Inlining happens while building, before K can discard its argument
        with pytest.raises(RecursiveDefinitionError):
            itp.evaluate("((K a) LOOP)")
    else:
        assert itp.eval("((K a) LOOP)") == "a"


# -----------------------------------------------------
# Deep terms
# -----------------------------------------------------

def nested_applications(depth, head="f", tail="x"):
    return f"({head} " * depth + tail + ")" * depth


def test_deeply_nested_source(itp):
    source = nested_applications(3000)
    assert itp.eval(source) == source


def test_deeply_nested_binders(itp):
    source = "(() " * 2000 + "x" + ")" * 2000
    assert itp.eval(source) == source


def test_deep_normal_form(itp):
    # 1024 = (2^2)^2 squared, times 4
    source = "(MUL (MUL ((TWO TWO) TWO) ((TWO TWO) TWO)) (MUL TWO TWO) f x)"
    assert itp.eval(source) == nested_applications(1024)
