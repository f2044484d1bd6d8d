"""
Tokenizer for FabLang source text.

Comments are stripped before scanning (block comments first, then line
comments). Token positions always refer to the original, unstripped text.
"""
import bisect
import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple

from fab.fab_datatypes import LexicalError


BLOCK_COMMENT = re.compile(r"#\*[\s\S]*?\*#")
LINE_COMMENT = re.compile(r"/#[^\n\r]*")

ESCAPES = {'n': '\n', 'r': '\r', 't': '\t', '"': '"', '\\': '\\'}


class TokenType(Enum):
    EOF = "end of input"
    DOLLAR = "'$'"
    IDENT = "identifier"
    NUMBER = "number"
    STRING = "string"
    EQUAL = "'='"
    LBRACKET = "'['"
    RBRACKET = "']'"
    COMMA = "','"
    DOT = "'.'"
    ECHO = "'echo'"
    NEWLINE = "newline"


PUNCTUATION = {
    '$': TokenType.DOLLAR,
    '=': TokenType.EQUAL,
    '[': TokenType.LBRACKET,
    ']': TokenType.RBRACKET,
    ',': TokenType.COMMA,
    '.': TokenType.DOT,
}

KEYWORDS = {'echo': TokenType.ECHO}


@dataclass(frozen=True)
class Token:
    kind: TokenType
    lexeme: str
    line: int
    col: int

    def describe(self) -> str:
        """A short human-readable description, used in syntax errors."""
        if self.kind in (TokenType.EOF, TokenType.NEWLINE):
            return self.kind.value
        return f"{self.kind.name} {self.lexeme!r}"

    def __repr__(self) -> str:
        return f"{self.kind.name} {self.lexeme!r} @ {self.line}:{self.col}"


def strip_comments(source: str) -> Tuple[str, List[int]]:
    """Removes block then line comments.

    Returns the stripped text together with, for every character kept, its
    offset in the original source.
    """
    text = source
    origins = list(range(len(source)))
    for pattern in (BLOCK_COMMENT, LINE_COMMENT):
        pieces: List[str] = []
        kept: List[int] = []
        last = 0
        for m in pattern.finditer(text):
            pieces.append(text[last:m.start()])
            kept.extend(origins[last:m.start()])
            last = m.end()
        pieces.append(text[last:])
        kept.extend(origins[last:])
        text, origins = "".join(pieces), kept
    return text, origins


class Lexer:
    """Converts source text into a flat list of Tokens."""

    def __init__(self, source: str):
        self.source = source
        self.text, self._origins = strip_comments(source)
        self._newlines = [i for i, c in enumerate(source) if c == '\n']
        self._i = 0

    # --- Position helpers ---

    def _position(self, index: int) -> Tuple[int, int]:
        """Maps an index into the stripped text to a (line, col) in the original source."""
        offset = self._origins[index] if index < len(self._origins) else len(self.source)
        line_idx = bisect.bisect_left(self._newlines, offset)
        line_start = self._newlines[line_idx - 1] + 1 if line_idx > 0 else 0
        return line_idx + 1, offset - line_start + 1

    def _peek(self, k: int = 0) -> str:
        j = self._i + k
        return self.text[j] if j < len(self.text) else ''

    @property
    def _at_end(self) -> bool:
        return self._i >= len(self.text)

    # --- Scanning ---

    def tokenize(self) -> List[Token]:
        tokens: List[Token] = []
        while not self._at_end:
            c = self._peek()
            if c in ' \t\r':
                self._i += 1
                continue
            line, col = self._position(self._i)
            if c == '\n':
                self._i += 1
                tokens.append(Token(TokenType.NEWLINE, "\\n", line, col))
            elif c in PUNCTUATION:
                self._i += 1
                tokens.append(Token(PUNCTUATION[c], c, line, col))
            elif c == '"':
                tokens.append(self._lex_string(line, col))
            elif c.isdecimal() or (c == '-' and self._peek(1).isdecimal()):
                tokens.append(self._lex_number(line, col))
            elif c.isalpha() or c == '_':
                tokens.append(self._lex_identifier(line, col))
            else:
                raise LexicalError(line, col, c)
        line, col = self._position(len(self.text))
        tokens.append(Token(TokenType.EOF, "", line, col))
        return tokens

    def _lex_string(self, line: int, col: int) -> Token:
        self._i += 1  # opening quote
        chars: List[str] = []
        while True:
            if self._at_end:
                end_line, end_col = self._position(self._i)
                raise LexicalError(end_line, end_col, None, "unterminated string literal")
            c = self._peek()
            self._i += 1
            if c == '"':
                break
            if c == '\\':
                if self._at_end:
                    continue  # reported as unterminated on the next pass
                n = self._peek()
                self._i += 1
                chars.append(ESCAPES.get(n, n))
            else:
                chars.append(c)
        return Token(TokenType.STRING, "".join(chars), line, col)

    def _lex_number(self, line: int, col: int) -> Token:
        start = self._i
        if self._peek() == '-':
            self._i += 1
        while self._peek().isdecimal():
            self._i += 1
        # A '.' is only part of the number when digits follow it.
        if self._peek() == '.' and self._peek(1).isdecimal():
            self._i += 1
            while self._peek().isdecimal():
                self._i += 1
        return Token(TokenType.NUMBER, self.text[start:self._i], line, col)

    def _lex_identifier(self, line: int, col: int) -> Token:
        start = self._i
        while self._peek().isalpha() or self._peek().isdecimal() or self._peek() == '_':
            self._i += 1
        lexeme = self.text[start:self._i]
        return Token(KEYWORDS.get(lexeme, TokenType.IDENT), lexeme, line, col)


def tokenize(source: str) -> List[Token]:
    """Tokenizes `source`, raising LexicalError on the first bad character."""
    return Lexer(source).tokenize()
