"""
stackcalc Lexer
Splits one input line on whitespace and classifies each substring into a Token
"""

from typing import List, Optional, Union
from dataclasses import dataclass, field
from enum import Enum
import sys
import re

# Import pyparsing with error handling
try:
    from pyparsing import (
        Regex, ZeroOrMore, StringEnd, ParseBaseException, ParseFatalException
    )
except ImportError:
    raise ImportError("pyparsing library not found. Install with: pip install pyparsing")


class TokenKind(Enum):
    """Closed set of token kinds"""
    ADD = "ADD"
    SUBTRACT = "SUBTRACT"
    ASSIGN = "ASSIGN"
    PRINT = "PRINT"
    NAME = "NAME"
    NUMBER = "NUMBER"


OPERATOR_KINDS = frozenset({TokenKind.ADD, TokenKind.SUBTRACT, TokenKind.ASSIGN, TokenKind.PRINT})


@dataclass(frozen=True)
class Token:
    """stackcalc token; value is the name for NAME, the integer for NUMBER, else None"""
    kind: TokenKind
    value: Optional[Union[str, int]] = None
    column: int = field(default=0, compare=False)

    @property
    def is_operator(self) -> bool:
        return self.kind in OPERATOR_KINDS

    def __str__(self) -> str:
        if self.value is None:
            return self.kind.value
        return f"{self.kind.value}({self.value})"


# Import enhanced error handling
from error_handling import CalcSyntaxError, enhance_parse_exception


# Every character str.split() treats as a separator
WHITESPACE = (
    "\t\n\x0b\x0c\r\x1c\x1d\x1e\x1f \x85\xa0\u1680"
    "\u2000\u2001\u2002\u2003\u2004\u2005\u2006\u2007\u2008\u2009\u200a"
    "\u2028\u2029\u202f\u205f\u3000"
)

DIGITS = re.compile(r'[0-9]+')

# Number literals are signed 64-bit
INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1
INT64_DIGITS = len(str(INT64_MAX))


def _abbreviate(text: str, limit: int = 24) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


class TokenGrammar:
    """Token grammar definition using pyparsing"""

    def __init__(self, debug: bool = False):
        self.debug = debug
        self._setup_grammar()

    def _setup_grammar(self):
        """One pattern per token class, keyed on the first character of a substring"""

        def word(pattern: str) -> Regex:
            return Regex(pattern).set_whitespace_chars(WHITESPACE)

        # Operators: the rest of the substring is ignored
        add = word(r'\+\S*').set_parse_action(lambda s, l, t: Token(TokenKind.ADD, column=l + 1))
        subtract = word(r'-\S*').set_parse_action(lambda s, l, t: Token(TokenKind.SUBTRACT, column=l + 1))
        assign = word(r'=\S*').set_parse_action(lambda s, l, t: Token(TokenKind.ASSIGN, column=l + 1))
        print_op = word(r'@\S*').set_parse_action(lambda s, l, t: Token(TokenKind.PRINT, column=l + 1))

        # Operands
        name = word(r'[a-z]\S*').set_parse_action(
            lambda s, l, t: Token(TokenKind.NAME, t[0], column=l + 1)
        )
        number = word(r'[0-9]\S*').set_parse_action(self._make_number)

        # Anything else is rejected outright
        unknown = word(r'\S+').set_parse_action(self._reject)

        self.operator = add | subtract | assign | print_op
        self.operand = name | number
        self.token = self.operator | self.operand | unknown
        self.line = ZeroOrMore(self.token) + StringEnd().set_whitespace_chars(WHITESPACE)
        # Columns refer to the raw line
        self.line.parse_with_tabs()

    @staticmethod
    def _make_number(s: str, loc: int, toks) -> Token:
        text = toks[0]
        if not DIGITS.fullmatch(text):
            raise ParseFatalException(s, loc, f"invalid integer literal '{text}'")

        # Longer than any int64 literal; also keeps int() under its digit limit
        if len(text.lstrip('0')) > INT64_DIGITS:
            raise ParseFatalException(s, loc, f"integer literal out of range '{_abbreviate(text)}'")

        value = int(text)
        if not INT64_MIN <= value <= INT64_MAX:
            raise ParseFatalException(s, loc, f"integer literal out of range '{text}'")
        return Token(TokenKind.NUMBER, value, column=loc + 1)

    @staticmethod
    def _reject(s: str, loc: int, toks):
        raise ParseFatalException(s, loc, f"unrecognized token '{toks[0]}'")


class Lexer:
    """stackcalc lexer; pure function of each input line"""

    def __init__(self, debug: bool = False):
        self.debug = debug
        self.grammar = TokenGrammar(debug=debug)

    def tokenize(self, line: str) -> List[Token]:
        """Tokenize one line of input"""
        line = line.rstrip('\r\n')
        try:
            tokens = list(self.grammar.line.parse_string(line))
        except ParseBaseException as e:
            raise enhance_parse_exception(e, line) from e

        if self.debug:
            print(f"Tokens: {[str(token) for token in tokens]}", file=sys.stderr)

        return tokens


def create_lexer(debug: bool = False) -> Lexer:
    """Create a stackcalc lexer"""
    return Lexer(debug=debug)


def create_debug_lexer() -> Lexer:
    """Create a stackcalc lexer with debug enabled"""
    return Lexer(debug=True)


_default_lexer: Optional[Lexer] = None


def tokenize(line: str) -> List[Token]:
    """Tokenize one line with a shared non-debug lexer"""
    global _default_lexer
    if _default_lexer is None:
        _default_lexer = create_lexer()
    return _default_lexer.tokenize(line)


__all__ = [
    'TokenKind', 'Token', 'TokenGrammar', 'Lexer', 'CalcSyntaxError',
    'create_lexer', 'create_debug_lexer', 'tokenize',
]
