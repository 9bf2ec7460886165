"""Token buffering, error-recovery guards and bracket matching for the parser."""

from __future__ import annotations

import contextlib
from collections import Counter, deque
from collections.abc import Callable, Iterator

from nixfront.diagnostic import (
    Diagnostic,
    DiagnosticEngine,
    DiagnosticKind,
    Fix,
    NoteKind,
    OffsetRange,
)
from nixfront.lexer import LexedToken, Lexer
from nixfront.syntax import RawNode, RawTwine, RawTwineBuilder, SyntaxKind, Token, TokenKind

LexMode = Callable[[], LexedToken]

# Tokens that can never start an expression. Keywords are excluded as well,
# except `or`, which may be used as an identifier.
_NOT_EXPR_START = frozenset(
    {
        TokenKind.DOT,
        TokenKind.R_BRACKET,
        TokenKind.R_CURLY,
        TokenKind.R_PAREN,
        TokenKind.EOF,
        TokenKind.ELLIPSIS,
        TokenKind.COMMA,
        TokenKind.SEMI_COLON,
        TokenKind.EQ,
        TokenKind.QUESTION,
        TokenKind.AT,
        TokenKind.COLON,
    }
)

_BRACKET_SPELLINGS = {
    TokenKind.L_CURLY: "{",
    TokenKind.L_BRACKET: "[",
    TokenKind.L_PAREN: "(",
    TokenKind.R_CURLY: "}",
    TokenKind.R_BRACKET: "]",
    TokenKind.R_PAREN: ")",
    TokenKind.QUOTE2: "''",
    TokenKind.DQUOTE: '"',
}

# Binary operators: (left binding power, right binding power).
#
# %right ->
# %left ||
# %left &&
# %nonassoc == !=
# %nonassoc < > <= >=
# %right //
# %left NOT
# %left + -
# %left * /
# %right ++
_BINDING_POWERS = {
    TokenKind.OP_IMPL: (2, 1),
    TokenKind.OP_OR: (3, 4),
    TokenKind.OP_AND: (5, 6),
    TokenKind.OP_EQ: (7, 7),
    TokenKind.OP_NEQ: (7, 7),
    TokenKind.OP_LT: (8, 8),
    TokenKind.OP_LE: (8, 8),
    TokenKind.OP_GE: (8, 8),
    TokenKind.OP_GT: (8, 8),
    TokenKind.OP_UPDATE: (10, 9),
    TokenKind.OP_ADD: (12, 13),
    TokenKind.OP_NEGATE: (12, 13),
    TokenKind.OP_MUL: (14, 15),
    TokenKind.OP_DIV: (17, 16),
    TokenKind.OP_CONCAT: (17, 16),
}

_UNARY_BINDING_POWERS = {
    TokenKind.OP_NOT: 11,
    TokenKind.OP_NEGATE: 100,
}


class ParserBase:
    """Shared machinery of the recursive-descent parser.

    Holds the lexer, a look-ahead token buffer, the twine builder and the
    set of guard tokens that error recovery must not swallow.
    """

    def __init__(self, src: str, diags: DiagnosticEngine) -> None:
        self.src = src
        self.diags = diags
        self._lexer = Lexer(src, diags)
        self._builder = RawTwineBuilder()
        self._guard_tokens: Counter[TokenKind] = Counter()
        self._lookahead: deque[LexedToken] = deque()
        self._last_token: LexedToken | None = None

    # Token classification.

    @staticmethod
    def _can_be_expr_start(kind: TokenKind) -> bool:
        if kind in _NOT_EXPR_START:
            return False
        return not kind.is_keyword or kind is TokenKind.KW_OR

    @staticmethod
    def _bracket_spelling(kind: TokenKind) -> str:
        try:
            return _BRACKET_SPELLINGS[kind]
        except KeyError:
            raise ValueError(f"not a bracket token: {kind!r}") from None

    @staticmethod
    def _binding_power(kind: TokenKind) -> tuple[int, int]:
        try:
            return _BINDING_POWERS[kind]
        except KeyError:
            raise ValueError(f"not a binary operator: {kind!r}") from None

    @staticmethod
    def _unary_binding_power(kind: TokenKind) -> int:
        try:
            return _UNARY_BINDING_POWERS[kind]
        except KeyError:
            raise ValueError(f"not a unary operator: {kind!r}") from None

    # Token buffer.

    def _peek(self, n: int = 0, mode: LexMode | None = None) -> LexedToken:
        """Look at the ``n``-th buffered token, lexing more with ``mode``."""
        lex = mode or self._lexer.lex
        while n >= len(self._lookahead):
            self._lookahead.append(lex())
        return self._lookahead[n]

    def _pop_front(self) -> Token:
        """Drop the front token from the buffer and return it."""
        if not self._lookahead:
            self._peek()
        front = self._lookahead.popleft()
        self._last_token = front
        return front.token

    def _consume(self) -> None:
        """Move the front token into the twine being built."""
        self._builder.push(self._pop_front())

    def _reset_cur(self, pos: int) -> None:
        """Rewind the lexer to ``pos`` and forget every buffered token."""
        self._lexer.set_cur(pos)
        self._lookahead.clear()

    def _last_token_end(self) -> int:
        if self._last_token is None:
            raise RuntimeError("no token has been consumed yet")
        return self._last_token.end

    # Error recovery.

    @contextlib.contextmanager
    def _guard(self, kind: TokenKind) -> Iterator[None]:
        """Protect ``kind`` from being eaten by error recovery."""
        self._guard_tokens[kind] += 1
        try:
            yield
        finally:
            self._guard_tokens[kind] -= 1

    def _is_guarded(self, kind: TokenKind) -> bool:
        return self._guard_tokens[kind] > 0

    def _diag_null_expr(self, loc: int, as_what: str) -> Diagnostic:
        diag = self.diags.diag(DiagnosticKind.EXPECTED, OffsetRange(loc))
        diag << "an expression as " + as_what
        diag.fix(Fix.insertion(loc, " expr"))
        return diag

    def _add_expr_with_check(self, as_what: str, expr: RawNode | None) -> None:
        """Push ``expr``, or report a missing expression if it is None."""
        end = self._last_token_end()
        if expr is not None:
            self._builder.push(expr)
        else:
            self._diag_null_expr(end, as_what)

    def _parse_unknown_until_guard(self) -> RawTwine:
        """Collect tokens into an Unknown node until a guarded token shows up."""
        self._builder.start(SyntaxKind.UNKNOWN)
        while True:
            kind = self._peek().kind
            if self._is_guarded(kind) or kind is TokenKind.EOF:
                break
            self._consume()
        return self._builder.finish()

    def _match_bracket(
        self,
        left: TokenKind,
        inner_parse: Callable[[], RawNode | None],
        right: TokenKind,
    ) -> None:
        """Parse ``left inner right`` into the current twine, recovering if needed.

        Either the left bracket is present, or some token has already been
        consumed before it.
        """
        with self._guard(right):
            left_str = self._bracket_spelling(left)
            right_str = self._bracket_spelling(right)

            left_tok = self._peek()
            if left_tok.kind is left:
                self._consume()
                self._builder.push(inner_parse())
                if self._peek().kind is right:
                    self._consume()
                    return
                end = self._last_token_end()
                diag = self.diags.diag(DiagnosticKind.EXPECTED, OffsetRange(end, end))
                diag << right_str
                note = diag.note(NoteKind.TO_MATCH_THIS, left_tok.range)
                note << left_str
                diag.fix(Fix.insertion(end, right_str))
                return

            end = self._last_token_end()
            diag = self.diags.diag(DiagnosticKind.EXPECTED, left_tok.range)
            diag << left_str
            if left_tok.kind is right:
                # sth } -> sth { }
                diag.fix(Fix.insertion(end, " " + left_str))
            else:
                # sth ?? -> sth { } ??
                diag.fix(Fix.insertion(end, " " + left_str + " " + right_str))