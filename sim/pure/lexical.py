"""Tokenizer for the sim language. Converts raw source text into an ordered list of Tokens.

Lexical grammar:

```
<token>      ::= <keyword> | <identifier> | <integer> | <string> | <symbol>
<keyword>    ::= "function" | "if" | "else" | "while" | "return"
<identifier> ::= (<letter> | "_") (<letter> | <digit> | "_")*   ; reclassified as <keyword> on exact match
<integer>    ::= <digit>+                                       ; must fit in a signed 64-bit integer
<string>     ::= '"' <any char but '"'>* '"'                    ; no escape sequences
<symbol>     ::= "==" | "(" | ")" | "{" | "}" | ";" | "," | "+" | "-" | "*" | "/" | "%" | "<" | ">" | "="
<comment>    ::= "//" <any char but newline>*                   ; skipped, like whitespace
```

At each position the alternatives above are tried in a fixed order and the first one that matches is committed to.
Two-character symbols are tried before their one-character prefixes, so "==" is never read as "=" "=".
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, List

from sim.lang.error import LexicalError

INT_MIN = -2 ** 63
INT_MAX = 2 ** 63 - 1


@dataclass(frozen=True)
class Location:
    """1-based line and column of a character, plus its 0-based offset into the source."""
    line: int
    column: int
    offset: int

    def __str__(self):
        return f"{self.line}:{self.column}"


class TokenType(Enum):
    # keywords
    FUNCTION = "function"
    IF = "if"
    ELSE = "else"
    WHILE = "while"
    RETURN = "return"

    # single character symbols
    LPAREN = "("
    RPAREN = ")"
    LBRACE = "{"
    RBRACE = "}"
    SEMICOLON = ";"
    COMMA = ","
    PLUS = "+"
    MINUS = "-"
    STAR = "*"
    SLASH = "/"
    PERCENT = "%"
    LESS_THAN = "<"
    GREATER_THAN = ">"
    ASSIGN = "="

    # double character symbols
    EQUAL = "=="

    # other
    INTEGER = "INTEGER"
    STRING = "STRING"
    IDENTIFIER = "IDENTIFIER"
    EOF = "EOF"

    @classmethod
    def _build_reserved_dict(cls, start, end):
        token_list = list(cls)
        return {token_type.value: token_type
                for token_type in token_list[token_list.index(start):token_list.index(end) + 1]}

    @classmethod
    def keywords(cls):
        return cls._build_reserved_dict(cls.FUNCTION, cls.RETURN)

    @classmethod
    def single_character_symbols(cls):
        return cls._build_reserved_dict(cls.LPAREN, cls.ASSIGN)

    @classmethod
    def double_character_symbols(cls):
        return cls._build_reserved_dict(cls.EQUAL, cls.EQUAL)

    def describe(self):
        """Human readable name, used in parser error messages."""
        if self in (TokenType.INTEGER, TokenType.STRING, TokenType.IDENTIFIER):
            return self.value.lower()
        if self is TokenType.EOF:
            return "end of input"
        return f"'{self.value}'"


@dataclass(frozen=True)
class Token:
    type: TokenType
    value: Any
    start: Location
    end: Location

    def describe(self):
        """Human readable description of this token, used in parser error messages."""
        if self.type is TokenType.STRING:
            return f'string "{self.value}"'
        if self.type in (TokenType.INTEGER, TokenType.IDENTIFIER):
            return f"{self.type.describe()} '{self.value}'"
        return self.type.describe()

    def __repr__(self):
        return f"Token({self.type.name}, {self.value!r}, {self.start})"


class Tokenizer:
    """Single pass tokenizer over a complete source text. Call tokenize once; the result ends with an EOF token."""

    def __init__(self, text):
        self.text = text
        self.position = 0
        self.line = 1
        self.column = 1

    @property
    def current_char(self):
        return self.text[self.position] if self.position < len(self.text) else None

    @property
    def next_char(self):
        return self.text[self.position + 1] if self.position + 1 < len(self.text) else None

    def location(self):
        return Location(self.line, self.column, self.position)

    def advance(self):
        if self.current_char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.position += 1

    def error(self, msg, exprs, start, length=1):
        return LexicalError.at(msg, exprs, self.text, start, length)

    def tokenize(self) -> List[Token]:
        tokens = []
        token = self.next_token()
        while token.type is not TokenType.EOF:
            tokens.append(token)
            token = self.next_token()
        tokens.append(token)
        return tokens

    def next_token(self):
        """Skips whitespace and comments, then reads one token."""
        while self.current_char is not None:
            if self.current_char.isspace():
                self.advance()
            elif self.current_char == "/" and self.next_char == "/":
                while self.current_char is not None and self.current_char != "\n":
                    self.advance()
            else:
                break

        start = self.location()
        char = self.current_char

        if char is None:
            return Token(TokenType.EOF, None, start, start)
        elif "0" <= char <= "9":
            return self.read_integer(start)
        elif char.isalpha() or char == "_":
            return self.read_word(start)
        elif char == "\"":
            return self.read_string(start)
        return self.read_symbol(start)

    def read_integer(self, start):
        digits = ""
        while self.current_char is not None and "0" <= self.current_char <= "9":
            digits += self.current_char
            self.advance()

        value = int(digits)
        if value > INT_MAX:
            raise self.error("integer literal '{}' does not fit in 64 bits", digits, start, len(digits))
        return Token(TokenType.INTEGER, value, start, self.location())

    def read_word(self, start):
        word = ""
        while self.current_char is not None and (self.current_char.isalnum() or self.current_char == "_"):
            word += self.current_char
            self.advance()

        token_type = TokenType.keywords().get(word, TokenType.IDENTIFIER)
        return Token(token_type, word, start, self.location())

    def read_string(self, start):
        self.advance()  # opening quote
        value = ""
        while self.current_char != "\"":
            if self.current_char is None:
                raise self.error("unterminated string literal", None, start, self.position - start.offset)
            value += self.current_char
            self.advance()
        self.advance()  # closing quote
        return Token(TokenType.STRING, value, start, self.location())

    def read_symbol(self, start):
        if self.next_char is not None:
            token_type = TokenType.double_character_symbols().get(self.current_char + self.next_char)
            if token_type is not None:
                self.advance()
                self.advance()
                return Token(token_type, token_type.value, start, self.location())

        token_type = TokenType.single_character_symbols().get(self.current_char)
        if token_type is None:
            raise self.error("unrecognized character '{}'", self.current_char, start)
        self.advance()
        return Token(token_type, token_type.value, start, self.location())


def tokenize(text):
    """Returns the complete token list of text, ending with an EOF token."""
    return Tokenizer(text).tokenize()
