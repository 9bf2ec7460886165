"""Hand-written lexer for the Nix expression language."""

from __future__ import annotations

from dataclasses import dataclass

from nixfront.diagnostic import (
    DiagnosticEngine,
    DiagnosticKind,
    Fix,
    NoteKind,
    OffsetRange,
)
from nixfront.syntax import Token, TokenKind, Trivia, TriviaKind, TriviaPiece

_SPACES = frozenset(" \t\n\v\f\r")
_DIGITS = frozenset("0123456789")
_ALPHAS = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ")
_ALNUMS = _DIGITS | _ALPHAS
_PATH_CHARS = _ALNUMS | frozenset("._-+")
_URI_SCHEME_CHARS = _ALNUMS | frozenset("+-.")
_URI_PATH_CHARS = _ALNUMS | frozenset("%/?:@&=+$,-_.!~*'")
_IDENTIFIER_CHARS = _ALNUMS | frozenset("_'-")

_KEYWORDS = {kind.keyword: kind for kind in TokenKind if kind.is_keyword}

_WHITESPACE_KINDS = {
    " ": TriviaKind.SPACE,
    "\t": TriviaKind.TAB,
    "\v": TriviaKind.VERTICAL_TAB,
    "\f": TriviaKind.FORMFEED,
    "\n": TriviaKind.NEWLINE,
    "\r": TriviaKind.CARRIAGE_RETURN,
}

# Punctuation that always forms a one-character token.
_SINGLE_CHAR_TOKENS = {
    "*": TokenKind.OP_MUL,
    '"': TokenKind.DQUOTE,
    "}": TokenKind.R_CURLY,
    "@": TokenKind.AT,
    ":": TokenKind.COLON,
    "?": TokenKind.QUESTION,
    ";": TokenKind.SEMI_COLON,
    "{": TokenKind.L_CURLY,
    "(": TokenKind.L_PAREN,
    ")": TokenKind.R_PAREN,
    "[": TokenKind.L_BRACKET,
    "]": TokenKind.R_BRACKET,
    ",": TokenKind.COMMA,
}

# Punctuation that is either a two/three-character token or, failing that,
# a one-character token (None: the single character is unknown).
_COMPOUND_TOKENS = {
    "'": ("''", TokenKind.QUOTE2, None),
    "+": ("++", TokenKind.OP_CONCAT, TokenKind.OP_ADD),
    "-": ("->", TokenKind.OP_IMPL, TokenKind.OP_NEGATE),
    "/": ("//", TokenKind.OP_UPDATE, TokenKind.OP_DIV),
    "|": ("||", TokenKind.OP_OR, None),
    "!": ("!=", TokenKind.OP_NEQ, TokenKind.OP_NOT),
    "<": ("<=", TokenKind.OP_LE, TokenKind.OP_LT),
    ">": (">=", TokenKind.OP_GE, TokenKind.OP_GT),
    "&": ("&&", TokenKind.OP_AND, None),
    ".": ("...", TokenKind.ELLIPSIS, TokenKind.DOT),
    "=": ("==", TokenKind.OP_EQ, TokenKind.EQ),
    "$": ("${", TokenKind.DOLLAR_CURLY, None),
}


@dataclass(frozen=True)
class LexedToken:
    """A token together with the offsets of its content in the source."""

    token: Token
    begin: int
    end: int

    @property
    def kind(self) -> TokenKind:
        return self.token.kind

    @property
    def range(self) -> OffsetRange:
        return OffsetRange(self.begin, self.end)


class Lexer:
    """Splits source text into tokens, reporting problems to ``diags``.

    Different lexing modes are exposed as separate methods, because the
    meaning of characters depends on the context chosen by the parser.
    """

    def __init__(self, src: str, diags: DiagnosticEngine) -> None:
        self.src = src
        self.diags = diags
        self._cur = 0
        self._tok_start = 0
        self._tok = TokenKind.UNKNOWN
        self._leading_trivia: Trivia | None = None

    @property
    def cur(self) -> int:
        """Current offset of the lexer in the source."""
        return self._cur

    def set_cur(self, pos: int) -> None:
        """Move the cursor to the zero-based offset ``pos``."""
        if not 0 <= pos <= len(self.src):
            raise ValueError(f"cursor {pos} is outside the source")
        self._cur = pos

    # Cursor helpers.

    def _eof(self, pos: int | None = None) -> bool:
        return (self._cur if pos is None else pos) >= len(self.src)

    def _char(self, pos: int | None = None) -> str:
        return self.src[self._cur if pos is None else pos]

    def _prefix(self, prefix: str) -> bool:
        return self.src.startswith(prefix, self._cur)

    def _consume_prefix(self, prefix: str) -> bool:
        if self._prefix(prefix):
            self._cur += len(prefix)
            return True
        return False

    def _consume_eol(self) -> bool:
        return self._consume_prefix("\r\n") or self._consume_prefix("\n")

    def _skip(self, chars: frozenset[str]) -> None:
        while not self._eof() and self._char() in chars:
            self._cur += 1

    def _tok_str(self) -> str:
        return self.src[self._tok_start : self._cur]

    def _start_token(self) -> None:
        self._tok = TokenKind.UNKNOWN
        self._tok_start = self._cur

    def _finish_token(self) -> LexedToken:
        leading, self._leading_trivia = self._leading_trivia, None
        token = Token(self._tok, self._tok_str(), leading, None)
        return LexedToken(token, self._tok_start, self._cur)

    # Trivia.

    def _try_consume_whitespaces(self) -> TriviaPiece | None:
        if self._eof() or self._char() not in _SPACES:
            return None
        begin = self._cur
        ch = self._char()
        while not self._eof() and self._char() == ch:
            self._cur += 1
        return TriviaPiece(_WHITESPACE_KINDS[ch], self.src[begin : self._cur])

    def _try_consume_comments(self) -> TriviaPiece | None:
        if self._eof():
            return None
        begin = self._cur
        if self._consume_prefix("/*"):
            while True:
                if self._eof():
                    missing = OffsetRange(self._cur - 1, self._cur)
                    diag = self.diags.diag(DiagnosticKind.UNTERMINATED_BCOMMENT, missing)
                    diag.note(NoteKind.BCOMMENT_BEGIN, OffsetRange(begin, begin + 2))
                    diag.fix(Fix.insertion(missing.begin, "*/"))
                    return TriviaPiece(TriviaKind.BLOCK_COMMENT, self.src[begin:])
                if self._consume_prefix("*/"):
                    return TriviaPiece(
                        TriviaKind.BLOCK_COMMENT, self.src[begin : self._cur]
                    )
                self._cur += 1
        if self._consume_prefix("#"):
            while not (self._eof() or self._consume_eol()):
                self._cur += 1
            return TriviaPiece(TriviaKind.LINE_COMMENT, self.src[begin : self._cur])
        return None

    def _consume_trivia(self) -> Trivia:
        pieces: list[TriviaPiece] = []
        while not self._eof():
            piece = self._try_consume_whitespaces() or self._try_consume_comments()
            if piece is None:
                break
            pieces.append(piece)
        return Trivia(pieces)

    # Numbers, identifiers, paths and URIs.

    def _lex_float_exp(self) -> bool:
        """Accept the exponent part ``([Ee][+-]?[0-9]+)?`` of a float."""
        if self._eof() or self._char() not in "Ee":
            return True
        exp_pos = self._cur
        self._cur += 1
        if not self._eof() and self._char() in "+-":
            self._cur += 1
        if not self._eof() and self._char() in _DIGITS:
            self._skip(_DIGITS)
            return True
        diag = self.diags.diag(
            DiagnosticKind.FLOAT_NO_EXP, OffsetRange(exp_pos, exp_pos + 1)
        )
        diag << self.src[exp_pos:]
        return False

    def _lex_numbers(self) -> None:
        # Accepts [0-9]+(\.[0-9]*([Ee][+-]?[0-9]+)?)?, warning on floats
        # with leading zeros.
        start = self._cur
        self._skip(_DIGITS)
        if not self._eof() and self._char() == ".":
            self._tok = TokenKind.FLOAT
            self._cur += 1
            self._skip(_DIGITS)
            self._lex_float_exp()
        else:
            self._tok = TokenKind.INT
        if self._tok is TokenKind.FLOAT and self._tok_str().startswith("00"):
            diag = self.diags.diag(
                DiagnosticKind.FLOAT_LEADING_ZERO, OffsetRange(start, start + 2)
            )
            diag << self._tok_str()

    def _check_path_start(self) -> int | None:
        """End of a leading path fragment at the cursor, if there is one."""
        pos = self._cur
        while not self._eof(pos) and self.src[pos] in _PATH_CHARS:
            pos += 1
        if not self._eof(pos) and self.src[pos] == "/":
            pos += 1
            if not self._eof(pos) and self.src[pos] in _PATH_CHARS:
                return pos
            if self.src.startswith("${", pos):
                return pos
        return None

    def _check_uri_start(self) -> int | None:
        """End of a URI starting at the cursor, if there is one."""
        pos = self._cur
        while not self._eof(pos) and self.src[pos] in _URI_SCHEME_CHARS:
            pos += 1
        if not self._eof(pos) and self.src[pos] == ":":
            pos += 1
            if not self._eof(pos) and self.src[pos] in _URI_PATH_CHARS:
                while not self._eof(pos) and self.src[pos] in _URI_PATH_CHARS:
                    pos += 1
                return pos
        return None

    def _lex_identifier(self) -> None:
        self._cur += 1
        self._skip(_IDENTIFIER_CHARS)
        self._tok = _KEYWORDS.get(self._tok_str(), TokenKind.ID)

    def _lex_punctuation(self) -> None:
        ch = self._char()
        if ch in _SINGLE_CHAR_TOKENS:
            self._cur += 1
            self._tok = _SINGLE_CHAR_TOKENS[ch]
        elif ch in _COMPOUND_TOKENS:
            longer, longer_kind, single_kind = _COMPOUND_TOKENS[ch]
            if self._consume_prefix(longer):
                self._tok = longer_kind
            elif single_kind is not None:
                self._cur += 1
                self._tok = single_kind

    # Public lexing modes.

    def lex(self) -> LexedToken:
        """Lex a token in normal expression context, with leading trivia."""
        self._leading_trivia = self._consume_trivia()
        self._start_token()

        if self._eof():
            self._tok = TokenKind.EOF
            return self._finish_token()

        ch = self._char()
        # a/b (including 1/2) is a path, not a division.
        if ch in _PATH_CHARS or ch == "/":
            end = self._check_path_start()
            if end is not None:
                self._cur = end
                self._tok = TokenKind.PATH_FRAGMENT
                return self._finish_token()

        if ch in _ALPHAS:
            end = self._check_uri_start()
            if end is not None:
                self._cur = end
                self._tok = TokenKind.URI
                return self._finish_token()

        if ch in _DIGITS:
            self._lex_numbers()
            return self._finish_token()

        if ch in _ALPHAS or ch == "_":
            self._lex_identifier()
            return self._finish_token()

        self._lex_punctuation()
        if self._tok is TokenKind.UNKNOWN:
            self._cur += 1
        return self._finish_token()

    def lex_string(self) -> LexedToken:
        """Lex a token inside a double-quoted string."""
        self._start_token()
        if self._eof():
            self._tok = TokenKind.EOF
            return self._finish_token()

        ch = self._char()
        if ch == '"':
            self._cur += 1
            self._tok = TokenKind.DQUOTE
            return self._finish_token()
        if ch == "\\":
            self._cur = min(self._cur + 2, len(self.src))
            self._tok = TokenKind.STRING_ESCAPE
            return self._finish_token()
        if self._consume_prefix("${"):
            self._tok = TokenKind.DOLLAR_CURLY
            return self._finish_token()

        self._tok = TokenKind.STRING_PART
        while not self._eof():
            if self._char() in '\\"':
                break
            # "$${" escapes an interpolation.
            if self._consume_prefix("$${"):
                continue
            if self._prefix("${"):
                break
            self._cur += 1
        return self._finish_token()

    def lex_ind_string(self) -> LexedToken:
        """Lex a token inside an indented ('' ... '') string."""
        self._start_token()
        if self._eof():
            self._tok = TokenKind.EOF
            return self._finish_token()

        if self._consume_prefix("''"):
            self._tok = TokenKind.QUOTE2
            if any(self._consume_prefix(p) for p in ("$", "\\", "'")):
                self._tok = TokenKind.STRING_ESCAPE
            return self._finish_token()

        if self._consume_prefix("${"):
            self._tok = TokenKind.DOLLAR_CURLY
            return self._finish_token()

        self._tok = TokenKind.STRING_PART
        while not self._eof():
            if self._prefix("''"):
                break
            if self._consume_prefix("$${"):
                continue
            if self._prefix("${"):
                break
            self._cur += 1
        return self._finish_token()

    def lex_path(self) -> LexedToken:
        """Lex the continuation of a path after its first fragment."""
        self._start_token()
        self._tok = TokenKind.PATH_END
        if self._eof():
            self._tok = TokenKind.EOF
            return self._finish_token()

        ch = self._char()
        if ch == "$":
            if self._consume_prefix("${"):
                self._tok = TokenKind.DOLLAR_CURLY
            return self._finish_token()

        if ch in _PATH_CHARS or ch == "/":
            self._tok = TokenKind.PATH_FRAGMENT
            while not self._eof() and (self._char() in _PATH_CHARS or self._char() == "/"):
                if self._prefix("${"):
                    break
                self._cur += 1
        return self._finish_token()