"""Error-tolerant lexer and parser for the Nix expression language."""

__version__ = "0.1.0"
__all__ = ["diagnostic", "syntax", "lexer", "parser_base", "parser", "ast_dump"]