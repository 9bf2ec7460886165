"""Concrete syntax nodes: tokens, trivia and twines, plus a tree builder."""

from __future__ import annotations

import abc
import enum
from collections.abc import Iterable, Sequence


class SyntaxKind(enum.Enum):
    """Kinds of syntax nodes; the value is the printable name."""

    # Expressions, which evaluate to values.
    INTERPOLATION = "Interpolation"
    STRING = "String"
    IND_STRING = "IndString"
    PATH = "Path"
    ATTR_SET = "AttrSet"
    PAREN = "Paren"
    LEGACY_LET = "LegacyLet"
    LIST = "List"
    LAMBDA = "Lambda"
    CALL = "Call"
    SELECT = "Select"
    OP_NOT = "OpNot"
    OP_NEGATE = "OpNegate"
    OP_BINARY = "OpBinary"
    IF = "If"
    LET = "Let"
    ASSERT = "Assert"
    WITH = "With"
    # Other nodes.
    STRING_PARTS = "StringParts"
    IND_STRING_PARTS = "IndStringParts"
    BINDING = "Binding"
    ATTR_PATH = "AttrPath"
    INHERIT = "Inherit"
    BINDS = "Binds"
    LIST_BODY = "ListBody"
    FORMAL = "Formal"
    FORMALS = "Formals"
    BRACED_FORMALS = "BracedFormals"
    LAMBDA_ARG = "LambdaArg"
    UNKNOWN = "Unknown"
    ROOT = "Root"
    EOF = "EOF"
    TOKEN = "Token"
    TRIVIA = "Trivia"
    TRIVIA_PIECE = "TriviaPiece"


class TokenKind(enum.Enum):
    """Kinds of lexical tokens."""

    UNKNOWN = "unknown"
    EOF = "eof"
    INT = "int"
    FLOAT = "float"
    ID = "id"
    URI = "uri"
    PATH_FRAGMENT = "path_fragment"
    PATH_END = "path_end"
    DQUOTE = "dquote"
    QUOTE2 = "quote2"
    STRING_PART = "string_part"
    STRING_ESCAPE = "string_escape"
    DOLLAR_CURLY = "dollar_curly"

    KW_IF = "kw_if"
    KW_THEN = "kw_then"
    KW_ELSE = "kw_else"
    KW_ASSERT = "kw_assert"
    KW_WITH = "kw_with"
    KW_LET = "kw_let"
    KW_IN = "kw_in"
    KW_REC = "kw_rec"
    KW_INHERIT = "kw_inherit"
    KW_OR = "kw_or"

    OP_IMPL = "op_impl"
    OP_OR = "op_or"
    OP_AND = "op_and"
    OP_EQ = "op_eq"
    OP_NEQ = "op_neq"
    OP_LT = "op_lt"
    OP_LE = "op_le"
    OP_GT = "op_gt"
    OP_GE = "op_ge"
    OP_UPDATE = "op_update"
    OP_ADD = "op_add"
    OP_NEGATE = "op_negate"
    OP_MUL = "op_mul"
    OP_DIV = "op_div"
    OP_CONCAT = "op_concat"
    OP_NOT = "op_not"

    L_CURLY = "l_curly"
    R_CURLY = "r_curly"
    L_PAREN = "l_paren"
    R_PAREN = "r_paren"
    L_BRACKET = "l_bracket"
    R_BRACKET = "r_bracket"
    ELLIPSIS = "ellipsis"
    DOT = "dot"
    AT = "at"
    COLON = "colon"
    QUESTION = "question"
    SEMI_COLON = "semi_colon"
    EQ = "eq"
    COMMA = "comma"

    @property
    def is_keyword(self) -> bool:
        return self.value.startswith("kw_")

    @property
    def keyword(self) -> str | None:
        """The spelling of a keyword token, or None for other tokens."""
        return self.value[3:] if self.is_keyword else None

    @property
    def is_binary_op(self) -> bool:
        return self.value.startswith("op_") and self is not TokenKind.OP_NOT


class TriviaKind(enum.IntEnum):
    """Kinds of trivia: whitespace runs and comments."""

    SPACE = 0
    TAB = 1
    VERTICAL_TAB = 2
    FORMFEED = 3
    NEWLINE = 4
    CARRIAGE_RETURN = 5
    LINE_COMMENT = 6
    BLOCK_COMMENT = 7


_SPACE_CHARS = {
    " ": TriviaKind.SPACE,
    "\t": TriviaKind.TAB,
    "\v": TriviaKind.VERTICAL_TAB,
    "\f": TriviaKind.FORMFEED,
    "\n": TriviaKind.NEWLINE,
    "\r": TriviaKind.CARRIAGE_RETURN,
}
_SPACE_KINDS = {kind: ch for ch, kind in _SPACE_CHARS.items()}


def space_trivia_kind(ch: str) -> TriviaKind:
    """Trivia kind of a whitespace character."""
    try:
        return _SPACE_CHARS[ch]
    except KeyError:
        raise ValueError(f"not a whitespace character: {ch!r}") from None


def space_trivia_ch(kind: TriviaKind) -> str:
    """The whitespace character of a space trivia kind."""
    try:
        return _SPACE_KINDS[kind]
    except KeyError:
        raise ValueError(f"not a space trivia kind: {kind!r}") from None


def is_space_trivia(kind: TriviaKind) -> bool:
    return TriviaKind.SPACE <= kind < TriviaKind.LINE_COMMENT


class RawNode(abc.ABC):
    """A node of the concrete syntax tree; it knows its text length."""

    def __init__(self, syntax_kind: SyntaxKind, length: int = 0) -> None:
        self.syntax_kind = syntax_kind
        self.length = length

    @abc.abstractmethod
    def dump(self, discard_trivia: bool = True) -> str:
        """Source text of this node, optionally without trivia."""

    @property
    def kind_name(self) -> str:
        return self.syntax_kind.value

    @property
    def children(self) -> Sequence[RawNode | None]:
        return ()

    def dump_ast(self, discard_trivia: bool = True, depth: int = 0) -> str:
        """An indented outline of the tree: kind, length and token text."""
        line = f"{' ' * depth}{self.kind_name} {self.length} "
        if self.syntax_kind is SyntaxKind.TOKEN:
            line += self.dump(discard_trivia)
        parts = [line + "\n"]
        parts.extend(
            child.dump_ast(discard_trivia, depth + 1)
            for child in self.children
            if child is not None
        )
        return "".join(parts)


class TriviaPiece(RawNode):
    """A run of one kind of whitespace, or a single comment."""

    def __init__(self, kind: TriviaKind, text: str) -> None:
        super().__init__(SyntaxKind.TRIVIA_PIECE, len(text))
        self.kind = kind
        self.text = text

    def dump(self, discard_trivia: bool = True) -> str:
        return "" if discard_trivia else self.text


class Trivia(RawNode):
    """A sequence of trivia pieces."""

    def __init__(self, pieces: Iterable[TriviaPiece] = ()) -> None:
        self.pieces = tuple(pieces)
        super().__init__(SyntaxKind.TRIVIA, sum(p.length for p in self.pieces))

    def dump(self, discard_trivia: bool = True) -> str:
        return "".join(p.dump(discard_trivia) for p in self.pieces)


class Token(RawNode):
    """A lexical token with its leading and trailing trivia."""

    def __init__(
        self,
        kind: TokenKind,
        content: str,
        leading_trivia: Trivia | None = None,
        trailing_trivia: Trivia | None = None,
    ) -> None:
        length = len(content)
        for trivia in (leading_trivia, trailing_trivia):
            if trivia is not None:
                length += trivia.length
        super().__init__(SyntaxKind.TOKEN, length)
        self.kind = kind
        self.content = content
        self.leading_trivia = leading_trivia
        self.trailing_trivia = trailing_trivia

    def dump(self, discard_trivia: bool = True) -> str:
        leading = self.leading_trivia.dump(discard_trivia) if self.leading_trivia else ""
        trailing = (
            self.trailing_trivia.dump(discard_trivia) if self.trailing_trivia else ""
        )
        return leading + self.content + trailing


class RawTwine(RawNode):
    """A non-terminal construct; some children may be missing (None)."""

    def __init__(self, kind: SyntaxKind, layout: Iterable[RawNode | None]) -> None:
        self.layout = tuple(layout)
        super().__init__(
            kind, sum(child.length for child in self.layout if child is not None)
        )

    @property
    def children(self) -> Sequence[RawNode | None]:
        return self.layout

    def dump(self, discard_trivia: bool = True) -> str:
        return "".join(
            child.dump(discard_trivia) for child in self.layout if child is not None
        )


class RawTwineBuilder:
    """Builds nested twines: start a node, push children, finish it."""

    def __init__(self) -> None:
        self._stack: list[tuple[SyntaxKind, list[RawNode | None]]] = []

    def _top(self) -> tuple[SyntaxKind, list[RawNode | None]]:
        if not self._stack:
            raise IndexError("no twine has been started")
        return self._stack[-1]

    def start(self, kind: SyntaxKind) -> None:
        self._stack.append((kind, []))

    def reset(self, kind: SyntaxKind) -> None:
        """Change the kind of the twine being built."""
        _, layout = self._top()
        self._stack[-1] = (kind, layout)

    def push(self, node: RawNode | None) -> None:
        self._top()[1].append(node)

    def pop(self) -> RawNode | None:
        """Remove and return the last child of the twine being built."""
        layout = self._top()[1]
        if not layout:
            raise IndexError("the current twine has no children")
        return layout.pop()

    def finish(self) -> RawTwine:
        kind, layout = self._top()
        self._stack.pop()
        return RawTwine(kind, layout)