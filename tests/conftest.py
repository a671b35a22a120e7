import pytest

from skgraph.interpreter import Interpreter

# Evaluation tests run twice:
# 1) expanding definitions lazily as reduction reaches them ["lazy"]
# 2) inlining every definition while the graph is built ["precompile"]
# Both must reach the same normal forms, so tests that take the `itp`
# fixture check that equivalence without any extra code.


@pytest.fixture(autouse=True)
def _bundled_basis(monkeypatch):
    # Never pick up a developer's SKGRAPH_DEFS_PATH
    monkeypatch.delenv("SKGRAPH_DEFS_PATH", raising=False)


@pytest.fixture(params=["lazy", "precompile"])
def expansion_mode(request):
    return request.param


@pytest.fixture
def itp(expansion_mode):
    return Interpreter(precompile=expansion_mode == "precompile")
