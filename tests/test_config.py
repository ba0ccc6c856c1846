import pytest

from secdc.config import CompilerOptions, flag_from_env


@pytest.mark.parametrize(
    "raw,expected",
    [("1", True), ("yes", True), ("ON", True), ("0", False), ("off", False), ("maybe", None), ("", None)],
)
def test_flag_from_env(monkeypatch, raw, expected):
    monkeypatch.setenv("SECDC_TEST_FLAG", raw)
    for default in (True, False):
        result = flag_from_env("SECDC_TEST_FLAG", default)
        assert result == (default if expected is None else expected)


def test_defaults_without_environment():
    assert CompilerOptions.from_env() == CompilerOptions(share_branches=False, comments=True, addresses=False)


def test_options_from_environment(monkeypatch):
    monkeypatch.setenv("SECDC_SHARE_BRANCHES", "true")
    monkeypatch.setenv("SECDC_COMMENTS", "no")
    monkeypatch.setenv("SECDC_DISASM", "1")
    assert CompilerOptions.from_env() == CompilerOptions(share_branches=True, comments=False, addresses=True)
