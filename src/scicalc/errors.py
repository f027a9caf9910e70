'''
Error taxonomy, classification of numeric outcomes, and the error log.
'''

from collections import Counter, deque, namedtuple
from datetime import datetime
from enum import Enum
import math

from .util import CalculatorError


class ErrorKind(Enum):
    '''
    Fixed error taxonomy: user message and display font size hint.
    '''
    DIVISION_BY_ZERO = ('Cannot divide by zero', 15)
    SYNTAX = ('Syntax error', 16)
    MATH = ('Math error', 18)
    DOMAIN = ('Domain error', 16)
    OVERFLOW = ('Overflow', 16)
    INVALID_OPERATION = ('Invalid operation', 16)
    UNKNOWN = ('Unknown error', 16)

    def __init__(self, message, font_size):
        self.message = message
        self.font_size = font_size


ErrorRecord = namedtuple('ErrorRecord', 'kind message detail timestamp')


def classify(value, symbol=None, operand=None):
    '''
    Classify a numeric outcome, or None if it is a usable number.

    :param symbol: Operator or Function that produced value, if any.
    :param operand: The divisor, or the function's input.
    '''
    # Late import: tables raises CalculatorErrors built from ErrorKind.
    from .tables import EPSILON, Operator, Function

    if (symbol is Operator.DIVIDE and operand is not None
            and abs(operand) < EPSILON):
        return ErrorKind.DIVISION_BY_ZERO
    if math.isnan(value):
        if (isinstance(symbol, Function) and operand is not None
                and not symbol.in_domain(operand)):
            return ErrorKind.DOMAIN
        return ErrorKind.MATH
    if math.isinf(value):
        return ErrorKind.OVERFLOW
    return None


def check(value, symbol=None, operand=None, detail=None):
    '''
    Return value if usable, otherwise raise its classified CalculatorError.
    '''
    kind = classify(value, symbol, operand)
    if kind is not None:
        raise CalculatorError(kind, detail)
    return value


class ErrorLog:
    '''
    Bounded, append-only log of reported errors. Oldest evicted first.
    '''

    DEFAULT_CAPACITY = 50

    def __init__(self, capacity=None):
        if capacity is None:
            capacity = type(self).DEFAULT_CAPACITY
        if capacity <= 0:
            raise ValueError('capacity must be positive')
        self.records = deque(maxlen=capacity)

    @property
    def capacity(self):
        return self.records.maxlen

    def report(self, kind, message=None, detail=None):
        '''
        Record an error of the given kind. Returns the new record.
        '''
        record = ErrorRecord(kind,
                             kind.message if message is None else message,
                             detail,
                             datetime.now())
        self.records.append(record)
        return record

    def report_exception(self, error):
        '''
        Record a CalculatorError, or any other exception as UNKNOWN.
        '''
        if isinstance(error, CalculatorError):
            return self.report(error.kind, detail=error.detail)
        return self.report(ErrorKind.UNKNOWN, detail=str(error))

    @property
    def last(self):
        return self.records[-1] if self.records else None

    def statistics(self):
        '''
        Count of recorded errors per kind.
        '''
        return Counter(record.kind for record in self.records)

    def most_common(self):
        '''
        Most frequently recorded error kind, None if nothing was recorded.
        '''
        common = self.statistics().most_common(1)
        return common[0][0] if common else None

    def clear(self):
        self.records.clear()

    def __len__(self):
        return len(self.records)

    def __iter__(self):
        return iter(self.records)

    def __repr__(self):
        return '<ErrorLog {}/{}>'.format(len(self), self.capacity)
