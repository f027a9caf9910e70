from functools import wraps
import math

import regex


# Plain decimal literal, optionally signed, with an optional exponent. Stricter
# than float(): no 'inf', 'nan', underscores or surrounding garbage.
_NUMBER = regex.compile(r'''
                        [+-]?
                        (?:
                            \d+ (?: \. \d* )?
                            |
                            \. \d+
                        )
                        (?: [eE] [+-]? \d+ )?
                        ''', flags=regex.VERBOSE)


class CalculatorError(Exception):
    '''
    User-facing calculator error.

    args[0] is always the user message, so front ends can just print it.
    '''

    def __init__(self, kind, detail=None):
        super().__init__(kind.message, detail)
        self.kind = kind
        self.detail = detail

    @property
    def message(self):
        return self.kind.message

    def __str__(self):
        if self.detail:
            return '{}: {}'.format(self.kind.message, self.detail)
        return self.kind.message


def wrap_user_errors(kind, fmt):
    '''
    Decorator that converts unexpected exceptions to CalculatorErrors.

    Passes through CalculatorErrors.
    '''
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            try:
                return f(*args, **kwargs)
            except CalculatorError:
                raise
            except Exception as e:
                raise CalculatorError(kind,
                                      fmt.format(*args, **kwargs)) from e
        return wrapper
    return decorator


def parse_number(text):
    '''
    Parse calculator number text, accepting ',' as the decimal separator.

    Raises ValueError on anything that isn't a plain number.
    '''
    if not text or not text.strip():
        raise ValueError('empty number')
    normalized = text.strip().replace(',', '.')
    if not _NUMBER.fullmatch(normalized):
        raise ValueError('not a number: {!r}'.format(text))
    return float(normalized)


def number_text(value):
    '''
    Shortest text that parses back to exactly value.
    '''
    if math.isfinite(value) and value == int(value) and abs(value) < 1e15:
        return str(int(value))
    return repr(value)
