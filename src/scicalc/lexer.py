from collections import namedtuple
from enum import Enum
from functools import reduce
import operator

import regex

from .errors import ErrorKind
from .tables import OPERATORS, FUNCTIONS
from .util import CalculatorError, parse_number


class TokenKind(Enum):
    NUMBER = 'number'
    OPERATOR = 'operator'
    FUNCTION = 'function'
    OPEN_PAREN = 'open'
    CLOSE_PAREN = 'close'
    CONSTANT = 'constant'


class Token(namedtuple('Token', 'kind text value')):
    '''
    Lexeme: kind, literal text, and numeric value for numbers and constants.
    '''
    __slots__ = ()

    def __new__(cls, kind, text, value=None):
        return super().__new__(cls, kind, text, value)

    def __str__(self):
        return '{}: {}'.format(self.kind.name, self.text)


class Lexer:
    '''
    Lexer for infix calculator expressions.

    For consistency, for now, needs to be instantiated, despite holding no
    internal state.
    '''
    # Number: digits with at most one decimal separator, '.' or ','.
    # A lone separator still matches, and then fails to convert.
    NUMBER = r'''
              (?:
                  # 1, 12, 1.5, 1,5, 1. (notice trailing dot)
                  \d+
                  (?:
                      [.,]
                      \d*
                  )?
              )|(?:
                  # .5, or just .
                  [.,]
                  \d*
              )
              '''
    SYMBOLS = OPERATORS.symbols() + OPERATORS.synonyms()
    assert not [symbol
                for symbol
                in SYMBOLS
                if len(symbol) != 1]
    OPERATOR = r'(?:' + r'|'.join(map(regex.escape, SYMBOLS)) + r')'
    # Function names and constants. π is a letter as far as Unicode goes.
    WORD = r'\p{L}+'
    OPEN = r'\('
    CLOSE = r'\)'
    SPACE = r'\s+'

    # All possible lexemes.
    LEXEME = r'(?<number>' + NUMBER + r')|' \
             r'(?<operator>' + OPERATOR + r')|' \
             r'(?<word>' + WORD + r')|' \
             r'(?<open>' + OPEN + r')|' \
             r'(?<close>' + CLOSE + r')|' \
             r'(?<space>' + SPACE + r')'
    # Default regex flags for matching lexemes
    FLAGS = reduce(operator.__or__,
                   {regex.POSIX,
                    regex.VERSION1,
                    regex.VERBOSE},
                   0)

    def __init__(self):
        self.pattern = regex.compile(type(self).LEXEME,
                                     flags=type(self).FLAGS)

    def lex(self, line):
        '''
        Take a line and yield all tokens, skipping whitespace.

        Raises CalculatorError on the first bad lexeme.
        '''
        position = 0
        while position < len(line):
            match = self.pattern.match(line, position)
            if match is None:
                raise CalculatorError(
                    ErrorKind.SYNTAX,
                    'Invalid character {}'.format(line[position]))
            position = match.end()
            if match.group('space') is None:
                yield self.token(match)

    def tokenize(self, line):
        return list(self.lex(line))

    def token(self, match):
        '''
        Build the Token for a lexeme match.
        '''
        kind = match.lastgroup
        text = match.group(0)
        if kind == 'number':
            try:
                return Token(TokenKind.NUMBER, text, parse_number(text))
            except ValueError:
                raise CalculatorError(ErrorKind.SYNTAX,
                                      'Invalid number {}'.format(text))
        elif kind == 'operator':
            return Token(TokenKind.OPERATOR, text)
        elif kind == 'open':
            return Token(TokenKind.OPEN_PAREN, text)
        elif kind == 'close':
            return Token(TokenKind.CLOSE_PAREN, text)
        elif FUNCTIONS.is_constant(text):
            return Token(TokenKind.CONSTANT, text, FUNCTIONS.constant(text))
        elif text in FUNCTIONS:
            return Token(TokenKind.FUNCTION, text)
        raise CalculatorError(ErrorKind.SYNTAX,
                              'Unknown symbol {}'.format(text))
