import logging

import pytest

from secdc.__main__ import main

PROGRAM = """
(defn twice (x) (* x 2))
(defentry (n) (if (> n 0) (twice n) 0))
"""


@pytest.fixture
def source(tmp_path):
    path = tmp_path / "prog.lisp"
    path.write_text(PROGRAM)
    return path


def test_no_arguments_prints_usage(capsys):
    assert main([]) == 1
    assert "usage: secdc" in capsys.readouterr().err


def test_missing_file(tmp_path, capsys):
    missing = tmp_path / "nope.lisp"
    assert main([str(missing)]) == 1
    assert f"No such file: {missing}" in capsys.readouterr().err


def test_unknown_flag_exits_with_one(source, capsys):
    with pytest.raises(SystemExit) as err:
        main(["--bogus", str(source)])
    assert err.value.code == 1


def test_compiles_to_stdout(source, capsys):
    assert main([str(source)]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out[0] == "; entry := (n) (if (> n 0) (twice n) 0)"
    assert "  SEL 9 13" in out
    assert out[-1] == "  JOIN"


def test_compile_error_reports_message(tmp_path, capsys):
    path = tmp_path / "bad.lisp"
    path.write_text("(defn f (a b) a) (defentry () (f 1))")
    assert main([str(path)]) == 1
    err = capsys.readouterr().err
    assert "f: defined function expected 2 arguments but got 1" in err


def test_missing_entry_reports_message(tmp_path, capsys):
    path = tmp_path / "lib.lisp"
    path.write_text("(defn f (a) a)")
    assert main([str(path)]) == 1
    assert "no entry point" in capsys.readouterr().err


def test_syntax_error_reports_message(tmp_path, capsys):
    path = tmp_path / "open.lisp"
    path.write_text("(defentry () (+ 1 2)")
    assert main([str(path)]) == 1
    assert "unmatched '('" in capsys.readouterr().err


def test_output_file_and_flags(source, tmp_path, capsys):
    out_path = tmp_path / "prog.asm"
    assert main(["--no-comments", "--addresses", "-o", str(out_path), str(source)]) == 0
    assert capsys.readouterr().out == ""
    lines = out_path.read_text().splitlines()
    assert lines[0] == "0000: LD 0 0 ; n"
    assert not any(";" == line.strip()[:1] for line in lines)


def test_share_branches_from_environment(tmp_path, capsys, monkeypatch):
    path = tmp_path / "same.lisp"
    path.write_text("(defentry (n) (if n 0 0))")
    assert main([str(path)]) == 0
    assert "  SEL 3 5" in capsys.readouterr().out

    monkeypatch.setenv("SECDC_SHARE_BRANCHES", "1")
    assert main([str(path)]) == 0
    assert "  SEL 3 3" in capsys.readouterr().out


def test_verbose_logs_layout(source, caplog):
    with caplog.at_level(logging.DEBUG, logger="secdc"):
        assert main(["-v", str(source)]) == 0
    assert any("layout" in record.getMessage() for record in caplog.records)


def test_undecodable_source_exits_with_one(tmp_path, capsys):
    path = tmp_path / "binary.lisp"
    path.write_bytes(b"(defentry () \xff)")
    assert main([str(path)]) == 1
    assert "source is not valid UTF-8: byte 13" in capsys.readouterr().err


def test_deeply_nested_source_exits_with_one(tmp_path, capsys):
    path = tmp_path / "deep.lisp"
    path.write_text("(defentry () " + "(car " * 5000 + "1" + ")" * 5000 + ")")
    assert main([str(path)]) == 1
    assert "expression nested too deeply" in capsys.readouterr().err
