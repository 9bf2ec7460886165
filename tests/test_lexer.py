import pytest

from nixfront.diagnostic import DiagnosticEngine, DiagnosticKind, Fix, OffsetRange
from nixfront.lexer import Lexer
from nixfront.syntax import TokenKind


@pytest.fixture
def diags():
    return DiagnosticEngine()


def collect(lexer, method):
    tokens = []
    while True:
        tok = method(lexer)
        if tok.kind is TokenKind.EOF:
            return tokens
        tokens.append(tok)


@pytest.mark.parametrize("src", ["1", "1123123", "00023121123123"])
def test_integer(diags, src):
    tok = Lexer(src, diags).lex()
    assert tok.kind is TokenKind.INT
    assert tok.token.content == src
    assert diags.diags == []


def test_trivia1(diags):
    trivia = "\r\n /* */# line comment\n\f \v\r \n"
    tok = Lexer(trivia + "3", diags).lex()
    assert tok.kind is TokenKind.INT
    assert tok.token.leading_trivia.dump(discard_trivia=False) == trivia
    assert tok.token.content == "3"
    assert diags.diags == []


def test_trivia_line_comment(diags):
    tok = Lexer("# single line comment\n\n3\n", diags).lex()
    assert tok.kind is TokenKind.INT
    assert tok.token.leading_trivia.dump(False) == "# single line comment\n\n"
    assert tok.token.content == "3"
    assert diags.diags == []


def test_trivia_block_comment(diags):
    tok = Lexer("/* block comment\naaa\n*/", diags).lex()
    assert tok.kind is TokenKind.EOF
    assert tok.token.leading_trivia.dump(False) == "/* block comment\naaa\n*/"
    assert tok.token.content == ""
    assert diags.diags == []


def test_trivia_block_comment_unterminated(diags):
    src = "/* block comment\naaa\n"
    tok = Lexer(src, diags).lex()
    assert tok.kind is TokenKind.EOF
    assert tok.token.content == ""
    assert tok.token.leading_trivia.dump(False) == src
    assert len(diags.diags) == 1
    diag = diags.diags[0]
    assert diag.kind is DiagnosticKind.UNTERMINATED_BCOMMENT
    assert diag.format() == "unterminated /* comment"
    assert diag.notes[0].format() == "/* comment begins at here"
    assert diag.range == OffsetRange(20, 21)
    assert diag.notes[0].range == OffsetRange(0, 2)
    assert diag.fixes == [Fix.insertion(20, "*/")]


def test_float_leading_zero(diags):
    tok = Lexer("00.33", diags).lex()
    assert tok.kind is TokenKind.FLOAT
    assert tok.token.content == "00.33"
    assert diags.diags[0].format() == (
        "float begins with extra zeros `00.33` is nixf extension"
    )
    assert diags.diags[0].range == OffsetRange(0, 2)


def test_float_with_exponent(diags):
    tok = Lexer("1.5e+3", diags).lex()
    assert tok.kind is TokenKind.FLOAT
    assert tok.token.content == "1.5e+3"
    assert diags.diags == []


def test_float_missing_exponent(diags):
    tok = Lexer("1.5e", diags).lex()
    assert tok.kind is TokenKind.FLOAT
    assert tok.token.content == "1.5e"
    assert diags.diags[0].kind is DiagnosticKind.FLOAT_NO_EXP
    assert diags.diags[0].range == OffsetRange(3, 4)
    assert diags.diags[0].format() == (
        "float point has trailing `e` but has no exponential part"
    )


def test_lex_string(diags):
    lexer = Lexer(r'"aa bb \\ \t \" \n ${}"', diags)
    expected = [
        TokenKind.DQUOTE,
        TokenKind.STRING_PART,
        TokenKind.STRING_ESCAPE,
        TokenKind.STRING_PART,
        TokenKind.STRING_ESCAPE,
        TokenKind.STRING_PART,
        TokenKind.STRING_ESCAPE,
        TokenKind.STRING_PART,
        TokenKind.STRING_ESCAPE,
        TokenKind.STRING_PART,
        TokenKind.DOLLAR_CURLY,
        TokenKind.STRING_PART,
        TokenKind.DQUOTE,
    ]
    assert [t.kind for t in collect(lexer, Lexer.lex_string)] == expected


def test_lex_string_escaped_interpolation(diags):
    tokens = collect(Lexer("a$${b}", diags), Lexer.lex_string)
    assert [(t.kind, t.token.content) for t in tokens] == [
        (TokenKind.STRING_PART, "a$${b}")
    ]


def test_lex_id_path(diags):
    tokens = collect(Lexer("id pa/t", diags), Lexer.lex)
    assert [(t.kind, t.token.content) for t in tokens] == [
        (TokenKind.ID, "id"),
        (TokenKind.PATH_FRAGMENT, "pa/"),
        (TokenKind.ID, "t"),
    ]


def test_lex_keywords(diags):
    tokens = collect(Lexer("if then", diags), Lexer.lex)
    assert [t.kind for t in tokens] == [TokenKind.KW_IF, TokenKind.KW_THEN]


def test_keyword_prefix_is_identifier(diags):
    tokens = collect(Lexer("or orange a-b'c_d", diags), Lexer.lex)
    assert [(t.kind, t.token.content) for t in tokens] == [
        (TokenKind.KW_OR, "or"),
        (TokenKind.ID, "orange"),
        (TokenKind.ID, "a-b'c_d"),
    ]


def test_lex_uri(diags):
    tokens = collect(Lexer("https://example.com/some/path", diags), Lexer.lex)
    assert [(t.kind, t.token.content) for t in tokens] == [
        (TokenKind.URI, "https://example.com/some/path")
    ]


def test_operators_and_punctuation(diags):
    src = "++ -> // != <= >= && || == ... . @ : ? ; = { } ( ) [ ] , + - * / ! < > ${ ''"
    tokens = collect(Lexer(src, diags), Lexer.lex)
    assert [t.kind for t in tokens] == [
        TokenKind.OP_CONCAT,
        TokenKind.OP_IMPL,
        TokenKind.OP_UPDATE,
        TokenKind.OP_NEQ,
        TokenKind.OP_LE,
        TokenKind.OP_GE,
        TokenKind.OP_AND,
        TokenKind.OP_OR,
        TokenKind.OP_EQ,
        TokenKind.ELLIPSIS,
        TokenKind.DOT,
        TokenKind.AT,
        TokenKind.COLON,
        TokenKind.QUESTION,
        TokenKind.SEMI_COLON,
        TokenKind.EQ,
        TokenKind.L_CURLY,
        TokenKind.R_CURLY,
        TokenKind.L_PAREN,
        TokenKind.R_PAREN,
        TokenKind.L_BRACKET,
        TokenKind.R_BRACKET,
        TokenKind.COMMA,
        TokenKind.OP_ADD,
        TokenKind.OP_NEGATE,
        TokenKind.OP_MUL,
        TokenKind.OP_DIV,
        TokenKind.OP_NOT,
        TokenKind.OP_LT,
        TokenKind.OP_GT,
        TokenKind.DOLLAR_CURLY,
        TokenKind.QUOTE2,
    ]


def test_unknown_single_characters(diags):
    tokens = collect(Lexer("& | $", diags), Lexer.lex)
    assert [(t.kind, t.token.content) for t in tokens] == [
        (TokenKind.UNKNOWN, "&"),
        (TokenKind.UNKNOWN, "|"),
        (TokenKind.UNKNOWN, "$"),
    ]


def test_lex_path_continuation(diags):
    lexer = Lexer("./foo/bar", diags)
    first = lexer.lex()
    assert (first.kind, first.token.content) == (TokenKind.PATH_FRAGMENT, "./")
    rest = lexer.lex_path()
    assert (rest.kind, rest.token.content) == (TokenKind.PATH_FRAGMENT, "foo/bar")
    assert lexer.lex_path().kind is TokenKind.EOF


def test_lex_path_interpolation(diags):
    lexer = Lexer("./a${x} b", diags)
    assert lexer.lex().token.content == "./"
    frag = lexer.lex_path()
    assert (frag.kind, frag.token.content) == (TokenKind.PATH_FRAGMENT, "a")
    assert lexer.lex_path().kind is TokenKind.DOLLAR_CURLY
    assert lexer.lex().kind is TokenKind.ID
    assert lexer.lex().kind is TokenKind.R_CURLY
    end = lexer.lex_path()
    assert (end.kind, end.token.content) == (TokenKind.PATH_END, "")


def test_lex_ind_string(diags):
    tokens = collect(Lexer("''a''$b${''", diags), Lexer.lex_ind_string)
    assert [(t.kind, t.token.content) for t in tokens] == [
        (TokenKind.QUOTE2, "''"),
        (TokenKind.STRING_PART, "a"),
        (TokenKind.STRING_ESCAPE, "''$"),
        (TokenKind.STRING_PART, "b"),
        (TokenKind.DOLLAR_CURLY, "${"),
        (TokenKind.QUOTE2, "''"),
    ]


def test_token_offsets_and_length(diags):
    tok = Lexer("  foo", diags).lex()
    assert tok.range == OffsetRange(2, 5)
    assert tok.token.length == 5
    assert tok.token.dump() == "foo"
    assert tok.token.dump(discard_trivia=False) == "  foo"


def test_string_tokens_have_no_trivia(diags):
    tok = Lexer("abc", diags).lex_string()
    assert tok.token.leading_trivia is None
    assert tok.token.length == 3


def test_line_comment_ends_at_crlf(diags):
    tok = Lexer("# c\r\n1", diags).lex()
    assert tok.token.leading_trivia.dump(False) == "# c\r\n"
    assert tok.token.content == "1"


def test_set_cur_relexes(diags):
    lexer = Lexer("a b", diags)
    lexer.lex()
    lexer.lex()
    assert lexer.cur == 3
    lexer.set_cur(0)
    tok = lexer.lex()
    assert (tok.kind, tok.token.content) == (TokenKind.ID, "a")


def test_set_cur_out_of_range(diags):
    with pytest.raises(ValueError):
        Lexer("a", diags).set_cur(10)