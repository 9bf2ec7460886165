# nixfront

An error-tolerant front end for the Nix expression language. It lexes and
parses Nix source into a lossless concrete syntax tree: every token keeps its
leading trivia (whitespace and comments), so dumping the root with trivia
gives back the source text. When the input is broken, the parser recovers and
records diagnostics with notes and fix-it hints (insertions, removals and
replacements) instead of stopping.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Command line

`nixf-ast-dump` reads Nix source from standard input, prints the syntax tree
to standard output, and reports diagnostics on standard error together with
the affected source lines, any suggested fixes and any notes:

```
echo '{ a = 1 b = 2; }' | nixf-ast-dump
```

Each line of the tree shows the node kind and its text length, indented by
one space per level of depth; tokens also show their text (without trivia).
Diagnostics are coloured with ANSI escape codes when standard error is a
terminal.

## Library use

```python
from nixfront.diagnostic import DiagnosticEngine
from nixfront.parser import parse

diags = DiagnosticEngine()
root = parse("let x = 1; in x + 2", diags)

print(root.dump_ast())
print(root.dump(discard_trivia=False))  # the original text
for diag in diags.diags:
    print(diags.severity(diag.kind).name, diag.format())
```

The main pieces:

- `nixfront.lexer.Lexer` turns source text into `LexedToken`s (a `Token` with
  its begin and end offsets). `lex`, `lex_string`, `lex_ind_string` and
  `lex_path` cover normal code, double-quoted strings, indented strings and
  path continuations; `set_cur` moves the cursor.
- `nixfront.parser.Parser` and `nixfront.parser.parse` build a `RawTwine`
  tree whose root has kind `SyntaxKind.ROOT`. `parse` creates a fresh
  `DiagnosticEngine` when none is given. `nixfront.parser_base.ParserBase`
  holds the token buffer and error-recovery machinery the parser builds on.
- `nixfront.syntax` holds the tree types (`RawNode`, `RawTwine`, `Token`,
  `Trivia`, `TriviaPiece`, `RawTwineBuilder`) together with `SyntaxKind`,
  `TokenKind` and `TriviaKind`, and the helpers `space_trivia_kind`,
  `space_trivia_ch` and `is_space_trivia`.
- `nixfront.diagnostic` holds `DiagnosticEngine`, `Diagnostic`, `Note`, `Fix`,
  `OffsetRange` and the `Severity`, `DiagnosticKind` and `NoteKind` enums.
  Message placeholders are filled with `<<`, e.g. `diag << "argument"`.
- `nixfront.ast_dump` offers `render_diagnostic(src, diag, color=False)` to
  format a diagnostic against its source, `source_lines` to pull out the
  whole lines a range covers, and `main`, the entry point of the command.

## What it does not do

nixfront only builds syntax trees and reports syntax problems. It does not
evaluate Nix expressions, resolve variables or perform any other semantic
analysis.