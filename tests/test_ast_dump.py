import io

import pytest

from nixfront.ast_dump import main, render_diagnostic, source_lines
from nixfront.diagnostic import DiagnosticEngine, DiagnosticKind, Fix, OffsetRange
from nixfront.parser import parse


@pytest.mark.parametrize(
    "src, rng, expected",
    [
        ("a\nbc\nd", OffsetRange(3, 4), "bc\n"),
        ("a\nbc\nd", OffsetRange(0), "a\n"),
        ("a\nbc\nd", OffsetRange(5, 6), "d"),
        ("one line", OffsetRange(2, 4), "one line"),
    ],
)
def test_source_lines(src, rng, expected):
    assert source_lines(src, rng) == expected


def test_source_lines_spanning_lines():
    src = "x\nab\ncd\ny"
    assert source_lines(src, OffsetRange(3, 6)) == "ab\ncd\n"


def test_render_plain_header_and_source():
    src = "a\nbc\nd"
    engine = DiagnosticEngine()
    diag = engine.diag(DiagnosticKind.EXPECTED, OffsetRange(3, 4))
    diag << "x"
    text = render_diagnostic(src, diag, False)
    assert text == "fatal: expected x\nbc\n"
    assert "\033[" not in text


def test_render_warning_label():
    src = "00.5"
    engine = DiagnosticEngine()
    parse(src, engine)
    text = render_diagnostic(src, engine.diags[0], False)
    assert text.startswith(
        "warning: float begins with extra zeros `00.5` is nixf extension\n"
    )
    assert text.endswith(src)


def test_render_removal_fix():
    src = "a b\n"
    engine = DiagnosticEngine()
    diag = engine.diag(DiagnosticKind.UNEXPECTED_TEXT, OffsetRange(1, 3))
    diag << "here"
    diag.fix(Fix.removal(OffsetRange(1, 3)))
    text = render_diagnostic(src, diag, False)
    assert text.endswith("fixes: a\n")


def test_render_color_marks_range():
    src = "a b\n"
    engine = DiagnosticEngine()
    diag = engine.diag(DiagnosticKind.UNEXPECTED_TEXT, OffsetRange(1, 3))
    diag << "here"
    colored = render_diagnostic(src, diag, True)
    assert "\033[36m" in colored
    plain = render_diagnostic(src, diag, False)
    assert len(colored) > len(plain)


def test_render_includes_notes():
    src = "/* open"
    engine = DiagnosticEngine()
    parse(src, engine)
    text = render_diagnostic(src, engine.diags[0], False)
    assert "unterminated /* comment" in text
    assert "note: /* comment begins at here\n" in text


def test_main_dumps_tree(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("1 + 2"))
    assert main([]) == 0
    captured = capsys.readouterr()
    assert captured.out == parse("1 + 2").dump_ast(True, 0)
    assert captured.err == ""


def test_main_reports_diagnostics(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("00.5"))
    assert main([]) == 0
    err = capsys.readouterr().err
    assert "float begins with extra zeros `00.5` is nixf extension" in err
    assert err.startswith("warning: ")