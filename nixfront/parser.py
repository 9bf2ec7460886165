"""Error-tolerant recursive-descent parser for the Nix expression language."""

from __future__ import annotations

import itertools

from nixfront.diagnostic import (
    DiagnosticEngine,
    DiagnosticKind,
    Fix,
    NoteKind,
    OffsetRange,
)
from nixfront.parser_base import ParserBase
from nixfront.syntax import RawNode, RawTwine, SyntaxKind, TokenKind

_DEFAULT_EXPR_NAME = "default expression of the formal"


class Parser(ParserBase):
    """Parses Nix source into a lossless concrete syntax tree.

    Problems are reported to the diagnostic engine and the parser recovers,
    so a tree is always produced.
    """

    def __init__(self, src: str, diags: DiagnosticEngine) -> None:
        super().__init__(src, diags)

    def _last_range(self) -> OffsetRange:
        if self._last_token is None:
            raise RuntimeError("no token has been consumed yet")
        return self._last_token.range

    # Strings, paths and interpolations.

    def _parse_interpolation(self) -> RawTwine:
        """interpolation : '${' expr '}'"""
        self._builder.start(SyntaxKind.INTERPOLATION)
        self._consume()
        self._add_expr_with_check("interpolation", self._parse_expr())
        if self._peek().kind is TokenKind.R_CURLY:
            self._consume()
        return self._builder.finish()

    def _parse_string_parts(self) -> RawTwine:
        """string_parts : ( string_part | interpolation | string_escape )*"""
        self._builder.start(SyntaxKind.STRING_PARTS)
        while True:
            kind = self._peek(0, self._lexer.lex_string).kind
            if kind is TokenKind.DOLLAR_CURLY:
                self._builder.push(self._parse_interpolation())
            elif kind in (TokenKind.STRING_PART, TokenKind.STRING_ESCAPE):
                self._consume()
            else:
                return self._builder.finish()

    def _parse_string(self) -> RawTwine:
        """string : '"' string_parts '"'"""
        self._builder.start(SyntaxKind.STRING)
        self._match_bracket(TokenKind.DQUOTE, self._parse_string_parts, TokenKind.DQUOTE)
        return self._builder.finish()

    def _parse_ind_string(self) -> RawTwine:
        """ind_string : "''" ind_string_parts "''" """
        self._builder.start(SyntaxKind.IND_STRING)
        self._match_bracket(
            TokenKind.QUOTE2, self._parse_ind_string_parts, TokenKind.QUOTE2
        )
        return self._builder.finish()

    def _parse_ind_string_parts(self) -> RawTwine:
        """ind_string_parts : ( string_part | interpolation | string_escape )*"""
        self._builder.start(SyntaxKind.IND_STRING_PARTS)
        while True:
            kind = self._peek(0, self._lexer.lex_ind_string).kind
            if kind is TokenKind.DOLLAR_CURLY:
                self._builder.push(self._parse_interpolation())
            elif kind in (TokenKind.STRING_PART, TokenKind.STRING_ESCAPE):
                self._consume()
            else:
                return self._builder.finish()

    def _parse_path(self) -> RawTwine:
        """path : path_fragment ( path_fragment | interpolation )*"""
        self._builder.start(SyntaxKind.PATH)
        self._consume()
        while True:
            kind = self._peek(0, self._lexer.lex_path).kind
            if kind is TokenKind.PATH_FRAGMENT:
                self._consume()
            elif kind is TokenKind.DOLLAR_CURLY:
                self._builder.push(self._parse_interpolation())
            elif kind is TokenKind.PATH_END:
                self._pop_front()
                break
            else:
                # End of input: leave the token for the caller.
                break
        return self._builder.finish()

    # Attribute sets and bindings.

    def _parse_attr_name(self) -> RawNode | None:
        """attrname : ID | 'or' | string | interpolation"""
        tok = self._peek()
        if tok.kind is TokenKind.KW_OR:
            self.diags.diag(DiagnosticKind.OR_IDENTIFIER, tok.range)
            return self._pop_front()
        if tok.kind is TokenKind.ID:
            return self._pop_front()
        if tok.kind is TokenKind.DQUOTE:
            return self._parse_string()
        if tok.kind is TokenKind.DOLLAR_CURLY:
            return self._parse_interpolation()
        return None

    def _parse_attr_path(self) -> RawTwine | None:
        """attrpath : attrname ('.' attrname)*"""
        name = self._parse_attr_name()
        if name is None:
            return None
        self._builder.start(SyntaxKind.ATTR_PATH)
        self._builder.push(name)
        while True:
            tok = self._peek()
            if tok.kind is not TokenKind.DOT:
                break
            self._consume()
            name = self._parse_attr_name()
            if name is None:
                # attr. = 1
                #     ^ guess an extra '.'
                diag = self.diags.diag(DiagnosticKind.EXPECTED, tok.range)
                diag << "attrname after `.`"
                diag.fix(Fix.removal(tok.range))
                break
            self._builder.push(name)
        return self._builder.finish()

    def _parse_binding(self) -> RawTwine | None:
        """binding : attrpath '=' expr ';'"""
        with self._guard(TokenKind.EQ), self._guard(TokenKind.SEMI_COLON):
            attr_begin = self._peek().begin
            attr_path = self._parse_attr_path()
            attr_end = self._lexer.cur - self._peek().token.length
            if attr_path is None:
                return None

            self._builder.start(SyntaxKind.BINDING)
            self._builder.push(attr_path)
            attr_range = OffsetRange(attr_begin, attr_end)

            if self._peek().kind is TokenKind.EQ:
                self._consume()
            else:
                ins_point = self._last_token_end()
                unk_begin = self._peek().begin
                self._builder.push(self._parse_unknown_until_guard())
                unk_end = self._peek().begin
                tok = self._peek()
                if tok.kind is TokenKind.EQ:
                    # attrpath UNKNOWN '=' -> remove UNKNOWN.
                    unk_range = OffsetRange(unk_begin, unk_end)
                    diag = self.diags.diag(DiagnosticKind.UNEXPECTED_BETWEEN, unk_range)
                    diag << "text"
                    diag << "attrpath"
                    diag << "`=`"
                    diag.note(NoteKind.DECLARES_AT_HERE, attr_range) << "attrname"
                    diag.note(NoteKind.DECLARES_AT_HERE, tok.range) << "`=`"
                    diag.fix(Fix.removal(unk_range))
                    self._consume()
                elif tok.kind is TokenKind.SEMI_COLON:
                    # attrpath UNKNOWN ';' -> insert '=', reparse UNKNOWN.
                    diag = self.diags.diag(DiagnosticKind.EXPECTED, tok.range)
                    diag << "="
                    diag.note(NoteKind.TO_MATCH_THIS, attr_range) << "attrname"
                    diag.fix(Fix.insertion(ins_point, " ="))
                    self._builder.pop()
                    self._reset_cur(unk_begin)
                else:
                    # attrpath UNKNOWN -> remove everything.
                    self._builder.reset(SyntaxKind.UNKNOWN)
                    removed = OffsetRange(attr_begin, unk_end)
                    diag = self.diags.diag(DiagnosticKind.UNEXPECTED_TEXT, removed)
                    diag << "in binding declaration"
                    diag.fix(Fix.removal(removed))
                    return self._builder.finish()

            # With missing ';', "{ a = 1 b = 2; }" reads "1 b" as a call.
            # Remember where the body starts so it can be parsed again.
            saved_cur = self._lexer.cur
            body = self._parse_expr()
            body_call = (
                body
                if isinstance(body, RawTwine) and body.syntax_kind is SyntaxKind.CALL
                else None
            )
            self._add_expr_with_check("attr body", body)
            if self._peek().kind is TokenKind.SEMI_COLON:
                self._consume()
            else:
                if self._peek().kind is TokenKind.EQ and body_call is not None:
                    n_body = len(body_call.children)
                    self._builder.pop()
                    self._reset_cur(saved_cur)
                    self._builder.push(self._parse_expr_app(n_body - 1))
                end = self._last_token_end()
                diag = self.diags.diag(DiagnosticKind.EXPECTED, OffsetRange(end))
                diag << "; at the end of binding"
                diag.note(NoteKind.DECLARES_AT_HERE, attr_range) << "attrname"
                diag.fix(Fix.insertion(end, ";"))
            return self._builder.finish()

    def _parse_inherit(self) -> RawTwine:
        """inherit : 'inherit' ( '(' expr ')' )? attrname* ';'"""
        self._builder.start(SyntaxKind.INHERIT)
        self._consume()
        tok = self._peek()
        if tok.kind is TokenKind.L_PAREN:
            self._consume()
            self._add_expr_with_check("inherited", self._parse_expr())
            closing = self._peek()
            if closing.kind is TokenKind.R_PAREN:
                self._consume()
            else:
                diag = self.diags.diag(DiagnosticKind.EXPECTED, closing.range)
                diag << ")"
                diag.note(NoteKind.TO_MATCH_THIS, tok.range) << "("
                diag.fix(Fix.insertion(self._last_token_end(), ")"))

        while True:
            if self._peek().kind is TokenKind.SEMI_COLON:
                self._consume()
                break
            name = self._parse_attr_name()
            if name is None:
                break
            self._builder.push(name)
        return self._builder.finish()

    def _parse_binds(self) -> RawTwine:
        """binds : ( binding | inherit )*"""
        self._builder.start(SyntaxKind.BINDS)
        while True:
            if self._peek().kind is TokenKind.KW_INHERIT:
                self._builder.push(self._parse_inherit())
                continue
            binding = self._parse_binding()
            if binding is None:
                break
            self._builder.push(binding)
        return self._builder.finish()

    def _parse_attr_set_expr(self) -> RawTwine:
        """attrset_expr : 'rec'? '{' binds '}'"""
        self._builder.start(SyntaxKind.ATTR_SET)
        if self._peek().kind is TokenKind.KW_REC:
            self._consume()
        self._match_bracket(TokenKind.L_CURLY, self._parse_binds, TokenKind.R_CURLY)
        return self._builder.finish()

    def _parse_paren_expr(self) -> RawTwine:
        """paren_expr : '(' expr ')'"""
        self._builder.start(SyntaxKind.PAREN)
        self._match_bracket(TokenKind.L_PAREN, self._parse_expr, TokenKind.R_PAREN)
        return self._builder.finish()

    def _parse_legacy_let(self) -> RawTwine:
        """legacy_let : 'let' '{' binds '}'"""
        self._builder.start(SyntaxKind.LEGACY_LET)
        self._consume()
        self._match_bracket(TokenKind.L_CURLY, self._parse_binds, TokenKind.R_CURLY)
        return self._builder.finish()

    def _parse_list_body(self) -> RawTwine:
        """list_body : expr_select*"""
        self._builder.start(SyntaxKind.LIST_BODY)
        while (expr := self._parse_expr_select()) is not None:
            self._builder.push(expr)
        return self._builder.finish()

    def _parse_list_expr(self) -> RawTwine:
        """list : '[' list_body ']'"""
        self._builder.start(SyntaxKind.LIST)
        self._match_bracket(
            TokenKind.L_BRACKET, self._parse_list_body, TokenKind.R_BRACKET
        )
        return self._builder.finish()

    # Lambdas.

    def _parse_formal(self) -> RawTwine:
        """formal : ID | ID '?' expr | '...'"""
        self._builder.start(SyntaxKind.FORMAL)
        kind = self._peek().kind
        if kind is TokenKind.ELLIPSIS:
            self._consume()
            return self._builder.finish()
        if kind is not TokenKind.ID:
            return self._builder.finish()
        self._consume()
        tok = self._peek()
        if tok.kind is TokenKind.QUESTION:
            self._consume()
            self._add_expr_with_check(_DEFAULT_EXPR_NAME, self._parse_expr())
        elif self._can_be_expr_start(tok.kind):
            if tok.kind is not TokenKind.ID or self._peek(1).kind is TokenKind.DOT:
                # { a   1
                #    ^ guess a missing '?'
                end = self._last_token_end()
                diag = self.diags.diag(DiagnosticKind.EXPECTED, OffsetRange(end))
                diag << "?"
                diag.note(NoteKind.DECLARES_AT_HERE, self._last_range()) << "formal"
                diag.fix(Fix.insertion(end, " ? "))
                self._add_expr_with_check(_DEFAULT_EXPR_NAME, self._parse_expr())
        return self._builder.finish()

    def _parse_formals(self) -> RawTwine:
        """formals : formal? (',' formal)*"""
        self._builder.start(SyntaxKind.FORMALS)
        first = self._peek()
        if first.kind in (TokenKind.ELLIPSIS, TokenKind.ID):
            self._builder.push(self._parse_formal())
            while True:
                kind = self._peek().kind
                if kind is TokenKind.COMMA:
                    self._consume()
                    self._builder.push(self._parse_formal())
                elif kind in (TokenKind.ELLIPSIS, TokenKind.ID):
                    diag = self.diags.diag(
                        DiagnosticKind.MISSING_SEP_FORMALS, OffsetRange(first.end)
                    )
                    diag.fix(Fix.insertion(self._last_token_end(), ","))
                    self._builder.push(self._parse_formals())
                else:
                    break
        return self._builder.finish()

    def _parse_braced_formals(self) -> RawTwine:
        """braced_formals : '{' formals '}'"""
        self._builder.start(SyntaxKind.BRACED_FORMALS)
        self._match_bracket(TokenKind.L_CURLY, self._parse_formals, TokenKind.R_CURLY)
        return self._builder.finish()

    def _parse_lambda_arg(self) -> RawTwine:
        """lambda_arg : ID | ID '@' braced_formals | braced_formals ('@' ID)?"""
        self._builder.start(SyntaxKind.LAMBDA_ARG)
        kind = self._peek().kind
        if kind is TokenKind.ID:
            self._consume()
            if self._peek().kind is TokenKind.AT:
                self._consume()
                self._builder.push(self._parse_braced_formals())
        elif kind is TokenKind.L_CURLY:
            self._builder.push(self._parse_braced_formals())
            if self._peek().kind is TokenKind.AT:
                self._consume()
                if self._peek().kind is TokenKind.ID:
                    self._consume()
                else:
                    end = self._last_token_end()
                    diag = self.diags.diag(DiagnosticKind.EXPECTED, OffsetRange(end))
                    diag << "an identifier"
                    diag.fix(Fix.insertion(end, "arg"))
        else:
            raise ValueError("a lambda argument starts with an identifier or `{`")
        return self._builder.finish()

    def _parse_lambda_expr(self) -> RawTwine:
        """lambda_expr : lambda_arg ':' expr"""
        self._builder.start(SyntaxKind.LAMBDA)
        self._builder.push(self._parse_lambda_arg())
        if self._peek().kind is TokenKind.COLON:
            self._consume()
        else:
            end = self._last_token_end()
            diag = self.diags.diag(DiagnosticKind.EXPECTED, OffsetRange(end, end))
            diag << ":"
            diag.fix(Fix.insertion(end, ":"))
        self._add_expr_with_check("lambda body", self._parse_expr())
        return self._builder.finish()

    # Simple expressions, selections and applications.

    def _parse_expr_simple(self) -> RawNode | None:
        kind = self._peek().kind
        if kind in (TokenKind.INT, TokenKind.FLOAT, TokenKind.ID, TokenKind.URI):
            return self._pop_front()
        if kind is TokenKind.DQUOTE:
            return self._parse_string()
        if kind is TokenKind.QUOTE2:
            return self._parse_ind_string()
        if kind in (TokenKind.L_CURLY, TokenKind.KW_REC):
            return self._parse_attr_set_expr()
        if kind is TokenKind.PATH_FRAGMENT:
            return self._parse_path()
        if kind is TokenKind.L_PAREN:
            return self._parse_paren_expr()
        if kind is TokenKind.KW_LET:
            return self._parse_legacy_let()
        if kind is TokenKind.L_BRACKET:
            return self._parse_list_expr()
        return None

    def _parse_expr_select(self) -> RawNode | None:
        """expr_select : expr_simple ('.' attrpath ('or' expr_select)?)?
        | expr_simple 'or'
        """
        simple = self._parse_expr_simple()
        if simple is None:
            return None
        tok = self._peek()
        if tok.kind is TokenKind.DOT:
            self._builder.start(SyntaxKind.SELECT)
            self._builder.push(simple)
            self._consume()
            attr_path = self._parse_attr_path()
            if attr_path is None:
                # expr. -> guess an extra '.'
                diag = self.diags.diag(DiagnosticKind.EXPECTED, tok.range)
                diag << "attrpath after `.`"
                diag.fix(Fix.removal(tok.range))
                return self._builder.finish()
            self._builder.push(attr_path)
            if self._peek().kind is TokenKind.KW_OR:
                self._consume()
                self._builder.push(self._parse_expr_select())
            return self._builder.finish()
        if tok.kind is TokenKind.KW_OR:
            self._builder.start(SyntaxKind.CALL)
            self._builder.push(simple)
            self.diags.diag(DiagnosticKind.OR_IDENTIFIER, tok.range)
            self._consume()
            return self._builder.finish()
        return simple

    def _parse_expr_app(self, limit: int | None = None) -> RawNode | None:
        """expr_app : expr_select+, taking at most ``limit`` of them."""
        first = self._parse_expr_select()
        if first is None:
            return None
        nodes: list[RawNode] = [first]
        counter = itertools.count(1) if limit is None else range(1, limit)
        for _ in counter:
            following = self._parse_expr_select()
            if following is None:
                break
            nodes.append(following)
        if len(nodes) == 1:
            return first
        return RawTwine(SyntaxKind.CALL, nodes)

    # Operators (Pratt parsing).

    def _parse_unary(self, kind: SyntaxKind, op: TokenKind, symbol: str) -> RawTwine:
        self._builder.start(kind)
        self._consume()
        body = self._parse_expr_op_bp(self._unary_binding_power(op))
        self._add_expr_with_check(f"the body of operator `{symbol}`", body)
        return self._builder.finish()

    def _parse_expr_op_bp(self, left_rbp: int) -> RawNode | None:
        """expr_op : '!' expr_op | '-' expr_op | expr_op BINARY_OP expr_op"""
        kind = self._peek().kind
        prefix: RawNode | None
        if kind is TokenKind.OP_NOT:
            prefix = self._parse_unary(SyntaxKind.OP_NOT, TokenKind.OP_NOT, "!")
        elif kind is TokenKind.OP_NEGATE:
            prefix = self._parse_unary(SyntaxKind.OP_NEGATE, TokenKind.OP_NEGATE, "-")
        else:
            prefix = self._parse_expr_app()
        if prefix is None:
            return None

        while True:
            tok = self._peek()
            if not tok.kind.is_binary_op:
                return prefix
            lbp, rbp = self._binding_power(tok.kind)
            if left_rbp > lbp:
                return prefix
            self._builder.start(SyntaxKind.OP_BINARY)
            self._builder.push(prefix)
            self._consume()
            rhs = self._parse_expr_op_bp(rbp)
            if rhs is not None:
                self._builder.push(rhs)
            else:
                self._diag_null_expr(self._last_token_end(), "right hand side")
            prefix = self._builder.finish()

    def _parse_expr_op(self) -> RawNode | None:
        return self._parse_expr_op_bp(0)

    # Keyword expressions.

    def _expect_keyword(self, kind: TokenKind, spelling: str, body: str) -> None:
        if self._peek().kind is kind:
            self._consume()
            self._add_expr_with_check(f"`{spelling}` body", self._parse_expr())
            return
        end = self._last_token_end()
        diag = self.diags.diag(DiagnosticKind.EXPECTED, OffsetRange(end))
        diag << f"`{spelling}`"
        diag.fix(Fix.insertion(end, f" {spelling} "))

    def _parse_if_expr(self) -> RawTwine:
        """if_expr : 'if' expr 'then' expr 'else' expr"""
        self._builder.start(SyntaxKind.IF)
        self._consume()
        self._add_expr_with_check("`if` body", self._parse_expr())
        self._expect_keyword(TokenKind.KW_THEN, "then", "`then` body")
        self._expect_keyword(TokenKind.KW_ELSE, "else", "`else` body")
        return self._builder.finish()

    def _parse_let_in_expr(self) -> RawTwine:
        """let_in_expr : 'let' binds 'in' expr"""
        with self._guard(TokenKind.KW_IN):
            self._builder.start(SyntaxKind.LET)
            let_begin = self._peek().begin
            self._consume()
            self._builder.push(self._parse_binds())

            if self._peek().kind is TokenKind.KW_IN:
                self._consume()
            else:
                ins_point = self._last_token_end()
                expr = self._parse_expr()
                if expr is not None:
                    # let ... expr -> missing 'in'
                    self._builder.push(expr)
                    diag = self.diags.diag(
                        DiagnosticKind.EXPECTED, OffsetRange(ins_point)
                    )
                    diag << "`in`"
                    diag.fix(Fix.insertion(ins_point, " in "))
                    return self._builder.finish()

                unk_begin = self._peek().begin
                self._builder.push(self._parse_unknown_until_guard())
                unk_end = self._peek().begin
                tok = self._peek()
                if tok.kind is TokenKind.KW_IN:
                    # let binds UNKNOWN 'in' -> remove UNKNOWN.
                    unk_range = OffsetRange(unk_begin, unk_end)
                    diag = self.diags.diag(DiagnosticKind.UNEXPECTED_BETWEEN, unk_range)
                    diag << "text"
                    diag << "let"
                    diag << "`in`"
                    diag.note(NoteKind.DECLARES_AT_HERE, tok.range) << "`in`"
                    diag.fix(Fix.removal(unk_range))
                    self._consume()
                else:
                    # let ... UNKNOWN -> remove everything.
                    self._builder.reset(SyntaxKind.UNKNOWN)
                    removed = OffsetRange(let_begin, unk_end)
                    diag = self.diags.diag(DiagnosticKind.UNEXPECTED_TEXT, removed)
                    diag << "in let-in expression"
                    diag.fix(Fix.removal(removed))
                    return self._builder.finish()

            self._add_expr_with_check("body", self._parse_expr())
            return self._builder.finish()

    def _parse_assert_expr(self) -> RawTwine:
        """assert_expr : 'assert' expr ';' expr"""
        self._builder.start(SyntaxKind.ASSERT)
        self._consume()
        self._add_expr_with_check("assert cond", self._parse_expr())
        if self._peek().kind is TokenKind.SEMI_COLON:
            self._consume()
        self._add_expr_with_check("assert cond", self._parse_expr())
        return self._builder.finish()

    def _parse_with_expr(self) -> RawTwine:
        """with_expr : 'with' expr ';' expr"""
        self._builder.start(SyntaxKind.WITH)
        self._consume()
        self._add_expr_with_check("with cond", self._parse_expr())
        if self._peek().kind is TokenKind.SEMI_COLON:
            self._consume()
        self._add_expr_with_check("with body", self._parse_expr())
        return self._builder.finish()

    # Expressions.

    def _parse_expr(self) -> RawNode | None:
        """expr : lambda | assert | with | let_in | if | expr_op"""
        kind = self._peek().kind
        if kind is TokenKind.ID:
            if self._peek(1).kind in (TokenKind.AT, TokenKind.COLON):
                return self._parse_lambda_expr()
            return self._parse_expr_op()
        if kind is TokenKind.L_CURLY:
            second = self._peek(1).kind
            if second is TokenKind.ID:
                if self._peek(2).kind in (
                    TokenKind.COMMA,
                    TokenKind.ELLIPSIS,
                    TokenKind.R_CURLY,
                    TokenKind.AT,
                    TokenKind.QUESTION,
                ):
                    return self._parse_lambda_expr()
            elif second is TokenKind.R_CURLY:
                if self._peek(2).kind in (TokenKind.COLON, TokenKind.AT):
                    return self._parse_lambda_expr()
            return self._parse_attr_set_expr()
        if kind is TokenKind.KW_IF:
            return self._parse_if_expr()
        if kind is TokenKind.KW_ASSERT:
            return self._parse_assert_expr()
        if kind is TokenKind.KW_WITH:
            return self._parse_with_expr()
        if kind is TokenKind.KW_LET:
            if self._peek(1).kind is TokenKind.L_CURLY:
                return self._parse_legacy_let()
            return self._parse_let_in_expr()
        return self._parse_expr_op()

    def parse(self) -> RawTwine:
        """Parse the whole source into a Root node.

        Dumping the root with trivia gives back the source text.
        """
        with self._guard(TokenKind.EOF):
            self._builder.start(SyntaxKind.ROOT)
            while True:
                if self._peek().kind is TokenKind.EOF:
                    self._builder.start(SyntaxKind.EOF)
                    self._consume()
                    self._builder.push(self._builder.finish())
                    break
                expr = self._parse_expr()
                if expr is not None:
                    self._builder.push(expr)
                else:
                    self._builder.start(SyntaxKind.UNKNOWN)
                    self._consume()
                    self._builder.push(self._builder.finish())
            return self._builder.finish()


def parse(src: str, diags: DiagnosticEngine | None = None) -> RawTwine:
    """Parse ``src``, reporting problems to ``diags`` (a new engine if omitted)."""
    return Parser(src, diags if diags is not None else DiagnosticEngine()).parse()