"""Command that parses Nix source from stdin, dumps its syntax tree and reports diagnostics."""

from __future__ import annotations

import argparse
import enum
import sys
from collections.abc import Sequence

from nixfront.diagnostic import Diagnostic, Fix, Note, OffsetRange, Severity
from nixfront.parser import parse

_RESET = "\033[00m"
_BOLD = "\033[1m"
_CROSSED = "\033[9m"
_RED = "\033[31m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_MAGENTA = "\033[35m"
_CYAN = "\033[36m"

_SEVERITY_STYLE = {
    Severity.FATAL: (_RED, "fatal: "),
    Severity.ERROR: (_RED, "error: "),
    Severity.WARNING: (_YELLOW, "warning: "),
}


def source_lines(src: str, range: OffsetRange) -> str:
    """Return the whole lines of ``src`` that ``range`` touches.

    The result ends with the newline of the last line, if there is one.
    """
    begin = min(range.begin, len(src))
    end = min(range.end, len(src))

    # Look back until a newline (outside the range start) or the beginning.
    while begin > 0:
        if begin < len(src) and src[begin] == "\n" and begin != range.begin:
            begin += 1
            break
        begin -= 1

    # Look forward until a newline (included) or the end of the source.
    while end < len(src):
        if src[end] == "\n":
            end += 1
            break
        end += 1
    return src[begin:end]


class _State(enum.Enum):
    NORMAL = _RESET
    DELETE = _CROSSED
    DIAG = _CYAN


class _Writer:
    """Accumulates output text, emitting escape codes only when colouring."""

    def __init__(self, color: bool) -> None:
        self.color = color
        self.parts: list[str] = []
        self._stack: list[_State] = []

    def text(self, value: str) -> None:
        self.parts.append(value)

    def style(self, *codes: str) -> None:
        if self.color:
            self.parts.extend(codes)

    def _replay(self) -> None:
        self.style(*(state.value for state in self._stack))

    def push(self, state: _State) -> None:
        self._stack.append(state)
        self._replay()

    def pop(self) -> None:
        if self._stack:
            self._stack.pop()
        self._replay()

    def result(self) -> str:
        return "".join(self.parts)


def _write_source(
    out: _Writer, src: str, range: OffsetRange, fixes: Sequence[Fix]
) -> None:
    lines = source_lines(src, range)
    start = src.find(lines, max(0, min(range.begin, len(src)) - len(lines)))
    if start < 0:
        start = 0

    out.push(_State.NORMAL)
    for cur in range_(start, start + len(lines)):
        for fix in fixes:
            if fix.is_insertion():
                continue
            if cur == fix.old_range.begin:
                out.push(_State.DELETE)
            if cur == fix.old_range.end:
                out.pop()
        if cur == range.begin:
            out.push(_State.DIAG)
        if cur == range.end:
            out.pop()
        out.text(src[cur])

    for fix in fixes:
        out.style(_BOLD, _GREEN)
        out.text("fixes: ")
        out.style(_RESET)
        fix_lines = source_lines(src, fix.old_range)
        fix_start = _line_start(src, fix.old_range, fix_lines)
        cur = fix_start
        fix_end = fix_start + len(fix_lines)
        while cur < fix_end:
            if cur == fix.old_range.begin:
                out.style(_GREEN)
                out.text(fix.new_text)
                out.style(_RESET)
                cur = fix.old_range.end
            if cur < len(src):
                out.text(src[cur])
            cur += 1


def _line_start(src: str, range: OffsetRange, lines: str) -> int:
    # The lines always end at or after the range end, so their start follows.
    end_of_lines = min(range.end, len(src))
    while end_of_lines < len(src) and src[end_of_lines - 1 : end_of_lines] != "\n":
        if src[end_of_lines] == "\n":
            end_of_lines += 1
            break
        end_of_lines += 1
    return max(0, end_of_lines - len(lines))


def range_(begin: int, end: int):
    return iter(range(begin, end))


def _write_note(out: _Writer, src: str, note: Note) -> None:
    out.style(_BOLD, _MAGENTA)
    out.text("note: ")
    out.style(_RESET, _BOLD)
    out.text(note.format() + "\n")
    out.style(_RESET)
    _write_source(out, src, note.range, ())


def render_diagnostic(src: str, diag: Diagnostic, color: bool = False) -> str:
    """Render ``diag`` with its source lines, fixes and notes as text."""
    out = _Writer(color)
    code, label = _SEVERITY_STYLE[diag.severity]
    out.style(_BOLD, code)
    out.text(label)
    out.style(_RESET, _BOLD)
    out.text(diag.format() + "\n")
    out.style(_RESET)
    _write_source(out, src, diag.range, diag.fixes)
    for note in diag.notes:
        _write_note(out, src, note)
    return out.result()


def main(argv: Sequence[str] | None = None) -> int:
    """Read source from stdin, print the tree to stdout and diagnostics to stderr."""
    argparse.ArgumentParser(
        prog="nixf-ast-dump",
        description="Dump the syntax tree of Nix source read from stdin.",
    ).parse_args(argv)

    src = sys.stdin.read()
    from nixfront.diagnostic import DiagnosticEngine

    diags = DiagnosticEngine()
    root = parse(src, diags)
    sys.stdout.write(root.dump_ast(True, 0))

    color = sys.stderr.isatty()
    for diag in diags.diags:
        sys.stderr.write(render_diagnostic(src, diag, color))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())