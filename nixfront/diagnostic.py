"""Diagnostics, notes and fix-it hints produced while lexing and parsing."""

from __future__ import annotations

import abc
import enum
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class OffsetRange:
    """A half-open range of offsets into the source text.

    When ``end`` is omitted the range is empty and sits at ``begin``.
    """

    begin: int
    end: int | None = None

    def __post_init__(self) -> None:
        if self.end is None:
            object.__setattr__(self, "end", self.begin)


@dataclass(frozen=True)
class Fix:
    """Fix-it hint: replace the text at ``old_range`` with ``new_text``.

    An insertion has an empty ``old_range``; a removal has empty ``new_text``.
    """

    old_range: OffsetRange
    new_text: str

    def __post_init__(self) -> None:
        if self.old_range.begin == self.old_range.end and not self.new_text:
            raise ValueError("a fix must change something: empty range and empty text")

    @classmethod
    def insertion(cls, loc: int, new_text: str) -> Fix:
        return cls(OffsetRange(loc, loc), new_text)

    @classmethod
    def removal(cls, old_range: OffsetRange) -> Fix:
        return cls(old_range, "")

    def is_replace(self) -> bool:
        return not self.is_removal() and not self.is_insertion()

    def is_removal(self) -> bool:
        return not self.new_text

    def is_insertion(self) -> bool:
        return self.old_range.begin == self.old_range.end


class Severity(enum.IntEnum):
    """How serious a diagnostic is.

    FATAL: the code should not be evaluated (e.g. a parse error).
    ERROR: evaluation would fail, but the code can be recovered.
    WARNING: just a warning.
    """

    FATAL = 0
    ERROR = 1
    WARNING = 2


class DiagnosticKind(enum.Enum):
    """Every kind of diagnostic, with its short name, severity and message."""

    UNTERMINATED_BCOMMENT = (
        "lex-unterminated-bcomment",
        Severity.FATAL,
        "unterminated /* comment",
    )
    FLOAT_NO_EXP = (
        "lex-float-no-exp",
        Severity.FATAL,
        "float point has trailing `{}` but has no exponential part",
    )
    FLOAT_LEADING_ZERO = (
        "lex-float-leading-zero",
        Severity.WARNING,
        "float begins with extra zeros `{}` is nixf extension",
    )
    EXPECTED = ("parse-expected", Severity.FATAL, "expected {}")
    UNEXPECTED_BETWEEN = (
        "parse-unexpected-between",
        Severity.FATAL,
        "unexpected {} between {} and {}",
    )
    UNEXPECTED_TEXT = ("parse-unexpected", Severity.FATAL, "unexpected text {}")
    MISSING_SEP_FORMALS = (
        "parse-missing-sep-formals",
        Severity.FATAL,
        "missing separator `,` between two lambda formals",
    )
    OR_IDENTIFIER = (
        "parse-or-identifier",
        Severity.WARNING,
        "keyword `or` used as an identifier",
    )

    def __init__(self, sname: str, severity: Severity, message: str) -> None:
        self.sname = sname
        self.severity = severity
        self.message = message


class NoteKind(enum.Enum):
    """Every kind of note attached to a diagnostic."""

    BCOMMENT_BEGIN = ("note-bcomment-begin", "/* comment begins at here")
    TO_MATCH_THIS = ("note-to-match-this", "to match this {}")
    DECLARES_AT_HERE = ("note-declares-at-here", "{} declares at here")

    def __init__(self, sname: str, message: str) -> None:
        self.sname = sname
        self.message = message


class PartialDiagnostic(abc.ABC):
    """A located message whose placeholders are filled by ``<<`` arguments."""

    def __init__(self, range: OffsetRange) -> None:
        self.range = range
        self.args: list[Any] = []
        self._result: str | None = None

    @property
    @abc.abstractmethod
    def message(self) -> str:
        """The unformatted message template."""

    def format(self) -> str:
        """Fill the template with the arguments; the result is cached."""
        if self._result is None:
            self._result = self.message.format(*self.args)
        return self._result

    def __lshift__(self, value: Any) -> PartialDiagnostic:
        self.args.append(value)
        return self


class Note(PartialDiagnostic):
    """Additional information attached to a diagnostic."""

    def __init__(self, kind: NoteKind, range: OffsetRange) -> None:
        super().__init__(range)
        self.kind = kind

    @property
    def message(self) -> str:
        return self.kind.message


class Diagnostic(PartialDiagnostic):
    """A diagnostic with optional notes and fix-it hints."""

    def __init__(self, kind: DiagnosticKind, range: OffsetRange) -> None:
        super().__init__(range)
        self.kind = kind
        self.notes: list[Note] = []
        self.fixes: list[Fix] = []

    @property
    def message(self) -> str:
        return self.kind.message

    @property
    def severity(self) -> Severity:
        return self.kind.severity

    @property
    def sname(self) -> str:
        return self.kind.sname

    def note(self, kind: NoteKind, range: OffsetRange) -> Note:
        """Attach a new note and return it."""
        new_note = Note(kind, range)
        self.notes.append(new_note)
        return new_note

    def fix(self, fix: Fix) -> Diagnostic:
        """Attach a fix-it hint and return this diagnostic."""
        self.fixes.append(fix)
        return self


class DiagnosticEngine:
    """Collects the diagnostics emitted during a run."""

    def __init__(self) -> None:
        self.diags: list[Diagnostic] = []

    def diag(self, kind: DiagnosticKind, range: OffsetRange) -> Diagnostic:
        """Create, record and return a new diagnostic."""
        new_diag = Diagnostic(kind, range)
        self.diags.append(new_diag)
        return new_diag

    def severity(self, kind: DiagnosticKind) -> Severity:
        return kind.severity