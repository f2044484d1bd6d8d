"""
Recursive-descent parser turning a token list into FabLang statements.

    Program    := (Statement NEWLINE?)* EOF
    Statement  := 'echo' Expr | '$' IDENT '=' Expr
    Expr       := Primary ('.' '$' IDENT)*
    Primary    := STRING | NUMBER | '$' IDENT | MapLiteral
    MapLiteral := '[' ( '$' IDENT '=' Expr (',' '$' IDENT '=' Expr)* )? ']'

The first violation raises FabSyntaxError; there is no recovery.
"""
from typing import List

from fab.fab_lexer import Token, TokenType
from fab.fab_datatypes import (
    FabSyntaxError, Node, Stmt, Expr,
    Echo, Assign, StringLiteral, NumberLiteral, VarRef, PathAccess, MapLiteral,
)


class Parser:
    def __init__(self, tokens: List[Token]):
        if not tokens or tokens[-1].kind is not TokenType.EOF:
            raise ValueError("Token list must end with an EOF token.")
        self.tokens = tokens
        self.pos = 0

    # --- Token cursor ---

    def peek(self, k: int = 0) -> Token:
        """Looks `k` tokens ahead without consuming; clamps to the EOF token."""
        j = self.pos + k
        return self.tokens[j] if j < len(self.tokens) else self.tokens[-1]

    def advance(self) -> Token:
        tok = self.peek()
        if tok.kind is not TokenType.EOF:
            self.pos += 1
        return tok

    def check(self, kind: TokenType) -> bool:
        return self.peek().kind is kind

    def match(self, kind: TokenType) -> bool:
        if self.check(kind):
            self.advance()
            return True
        return False

    def expect(self, kind: TokenType, expected: str) -> Token:
        if not self.check(kind):
            self.error(expected)
        return self.advance()

    def error(self, expected: str):
        tok = self.peek()
        raise FabSyntaxError(tok.line, tok.col, expected, tok.describe())

    def _at(self, node: Node, tok: Token) -> Node:
        node.loc = {'line': tok.line, 'col': tok.col}
        return node

    # --- Grammar ---

    def parse(self) -> List[Stmt]:
        statements: List[Stmt] = []
        while not self.check(TokenType.EOF):
            if self.match(TokenType.NEWLINE):
                continue
            statements.append(self.parse_statement())
            self.match(TokenType.NEWLINE)
        return statements

    def parse_statement(self) -> Stmt:
        tok = self.peek()
        if self.match(TokenType.ECHO):
            return self._at(Echo(self.parse_expr()), tok)
        if self.match(TokenType.DOLLAR):
            name = self.expect(TokenType.IDENT, "variable name after $").lexeme
            self.expect(TokenType.EQUAL, "'=' after variable")
            return self._at(Assign(name, self.parse_expr()), tok)
        self.error("statement ('echo' or '$name = ...')")

    def parse_expr(self) -> Expr:
        expr = self.parse_primary()
        while self.check(TokenType.DOT):
            dot = self.advance()
            self.expect(TokenType.DOLLAR, "'$' after '.' for path access")
            key = self.expect(TokenType.IDENT, "key after '.$'").lexeme
            expr = self._at(PathAccess(expr, key), dot)
        return expr

    def parse_primary(self) -> Expr:
        tok = self.peek()
        match tok.kind:
            case TokenType.STRING:
                self.advance()
                return self._at(StringLiteral(tok.lexeme), tok)
            case TokenType.NUMBER:
                self.advance()
                return self._at(NumberLiteral(float(tok.lexeme)), tok)
            case TokenType.DOLLAR:
                self.advance()
                name = self.expect(TokenType.IDENT, "variable name after $").lexeme
                return self._at(VarRef(name), tok)
            case TokenType.LBRACKET:
                return self.parse_map_literal()
            case _:
                self.error("expression")

    def parse_map_literal(self) -> MapLiteral:
        start = self.expect(TokenType.LBRACKET, "'['")
        node = MapLiteral()
        if not self.match(TokenType.RBRACKET):
            while True:
                node.entries.append(self._parse_map_entry())
                if self.match(TokenType.COMMA):
                    continue
                if self.match(TokenType.RBRACKET):
                    break
                self.error("',' or ']' in map literal")
        return self._at(node, start)

    def _parse_map_entry(self):
        self.expect(TokenType.DOLLAR, "'$' to start key in map literal")
        key = self.expect(TokenType.IDENT, "identifier after '$' in map literal").lexeme
        self.expect(TokenType.EQUAL, "'=' after key in map literal")
        return key, self.parse_expr()


def parse(tokens: List[Token]) -> List[Stmt]:
    """Parses a full token list into an ordered list of statements."""
    return Parser(tokens).parse()
