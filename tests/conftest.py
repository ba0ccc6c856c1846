import pytest

from secdc.compiler import Compiler
from secdc.config import CompilerOptions
from secdc.types.scope import Scope
from secdc.types.symbol import Symbol


@pytest.fixture
def compiler():
    return Compiler()


@pytest.fixture
def sharing_compiler():
    return Compiler(CompilerOptions(share_branches=True))


@pytest.fixture
def scope_ab():
    # a frame binding a -> slot 0, b -> slot 1
    return Scope.from_params([Symbol("a"), Symbol("b")])


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for var in ("SECDC_SHARE_BRANCHES", "SECDC_COMMENTS", "SECDC_DISASM"):
        monkeypatch.delenv(var, raising=False)
