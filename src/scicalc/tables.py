'''
Operator and function tables.

Immutable, built once at import time and shared by the batch evaluator and
the live input machine.
'''

from collections import namedtuple
from enum import Enum
import math
import operator

from .errors import ErrorKind
from .util import CalculatorError


# Below this magnitude a divisor counts as zero.
EPSILON = 1e-10


class Operator(Enum):
    '''
    Binary operators, by display symbol. '*', '/' and the minus sign '−'
    are accepted synonyms.
    '''
    ADD = '+'
    SUBTRACT = '-'
    MULTIPLY = '×'
    DIVIDE = '÷'

    @classmethod
    def _missing_(cls, value):
        return {'*': cls.MULTIPLY,
                '/': cls.DIVIDE,
                '−': cls.SUBTRACT}.get(value)

    @property
    def precedence(self):
        if self in (Operator.MULTIPLY, Operator.DIVIDE):
            return 2
        return 1

    @property
    def symbol(self):
        return self.value


class Function(Enum):
    '''
    Scientific functions, by name.
    '''
    SIN = 'sin'
    COS = 'cos'
    TAN = 'tan'
    ARCSIN = 'arcsin'
    ARCCOS = 'arccos'
    ARCTAN = 'arctan'

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            return cls._value2member_map_.get(value.lower())
        return None

    @property
    def is_inverse(self):
        return self in (Function.ARCSIN, Function.ARCCOS, Function.ARCTAN)

    def in_domain(self, value):
        '''
        Return True if value is a valid input.
        '''
        if self in (Function.ARCSIN, Function.ARCCOS):
            return -1.0 <= value <= 1.0
        return math.isfinite(value)


class Constant(Enum):
    '''
    Insertable constants, by display symbol. 'pi' is accepted for π.
    '''
    PI = 'π'
    E = 'e'

    @classmethod
    def _missing_(cls, value):
        return {'pi': cls.PI}.get(value)

    @property
    def number(self):
        return math.pi if self is Constant.PI else math.e

    @property
    def symbol(self):
        return self.value


FunctionInfo = namedtuple('FunctionInfo',
                          'name description category domain range')


def _scaled(f):
    '''
    Give a one-argument math function the f(value, multiplier=None) convention.

    The multiplier, when given, scales the result. Inputs outside the math
    domain (asin(2), sin(inf)) give NaN rather than ValueError.
    '''
    def wrapped(value, multiplier=None):
        try:
            result = f(value)
        except ValueError:
            result = math.nan
        if multiplier is None:
            return result
        return multiplier * result
    wrapped.__doc__ = f.__doc__
    wrapped.__name__ = f.__name__
    return wrapped


def _divide(a, b):
    '''
    IEEE division: ±inf or NaN for a zero divisor rather than an exception.
    '''
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


class OperatorTable:
    '''
    Binary arithmetic operators keyed by Operator.
    '''

    BUILTINS = {
        Operator.ADD: operator.__add__,
        Operator.SUBTRACT: operator.__sub__,
        Operator.MULTIPLY: operator.__mul__,
        Operator.DIVIDE: _divide,
    }

    def lookup(self, symbol):
        '''
        Operator for a symbol or Operator. Unknown symbols are syntax errors.
        '''
        try:
            return Operator(symbol)
        except ValueError:
            raise CalculatorError(ErrorKind.SYNTAX,
                                  'Unknown operator {}'.format(symbol))

    def __contains__(self, symbol):
        try:
            Operator(symbol)
        except ValueError:
            return False
        return True

    def precedence(self, symbol):
        return self.lookup(symbol).precedence

    def apply(self, symbol, a, b):
        '''
        Apply without guards. Division by zero yields ±inf or NaN.
        '''
        return type(self).BUILTINS[self.lookup(symbol)](a, b)

    def calculate(self, a, b, symbol):
        '''
        Apply operator to a and b, refusing to divide by (near) zero.
        '''
        op = self.lookup(symbol)
        if op is Operator.DIVIDE and abs(b) < EPSILON:
            raise CalculatorError(ErrorKind.DIVISION_BY_ZERO,
                                  'Attempt to divide {} by zero'.format(a))
        return type(self).BUILTINS[op](a, b)

    def validate(self, symbol, a, b):
        '''
        Return True if calculate(a, b, symbol) would give a usable number.
        '''
        if symbol not in self:
            return False
        if not all(map(math.isfinite, (a, b))):
            return False
        return not (Operator(symbol) is Operator.DIVIDE
                    and abs(b) < EPSILON)

    def symbols(self):
        return [op.symbol for op in type(self).BUILTINS]

    def synonyms(self):
        return ['*', '/', '−']


class FunctionTable:
    '''
    Scientific functions keyed by Function, and the constants.

    Functions take radians (direct) or return radians (inverse); the
    *_degrees helpers wrap them for the degree-based calculator.
    '''

    MATH = {
        Function.SIN: _scaled(math.sin),
        Function.COS: _scaled(math.cos),
        Function.TAN: _scaled(math.tan),
        Function.ARCSIN: _scaled(math.asin),
        Function.ARCCOS: _scaled(math.acos),
        Function.ARCTAN: _scaled(math.atan),
    }

    INFO = {
        Function.SIN: FunctionInfo('sin', 'Sine of an angle',
                                   'Trigonometric', 'ℝ (degrees)',
                                   '[-1, 1]'),
        Function.COS: FunctionInfo('cos', 'Cosine of an angle',
                                   'Trigonometric', 'ℝ (degrees)',
                                   '[-1, 1]'),
        Function.TAN: FunctionInfo('tan', 'Tangent of an angle',
                                   'Trigonometric',
                                   'ℝ \\ {90 + 180k} (degrees)', 'ℝ'),
        Function.ARCSIN: FunctionInfo('arcsin', 'Inverse sine',
                                      'Inverse trigonometric', '[-1, 1]',
                                      '[-90, 90] (degrees)'),
        Function.ARCCOS: FunctionInfo('arccos', 'Inverse cosine',
                                      'Inverse trigonometric', '[-1, 1]',
                                      '[0, 180] (degrees)'),
        Function.ARCTAN: FunctionInfo('arctan', 'Inverse tangent',
                                      'Inverse trigonometric', 'ℝ',
                                      ']-90, 90[ (degrees)'),
    }

    # Degree results this close to an integer are snapped to it, so that
    # e.g. arcsin(0.5) is 30 rather than 30.000000000000004.
    ANGLE_SNAP = 1e-9

    def lookup(self, name):
        try:
            return Function(name)
        except ValueError:
            raise CalculatorError(ErrorKind.SYNTAX,
                                  'Unknown function {}'.format(name))

    def __contains__(self, name):
        try:
            Function(name)
        except ValueError:
            return False
        return True

    def is_constant(self, name):
        try:
            Constant(name)
        except ValueError:
            return False
        return True

    def constant(self, name):
        '''
        Value of a constant by name or symbol.
        '''
        try:
            return Constant(name).number
        except ValueError:
            raise CalculatorError(ErrorKind.SYNTAX,
                                  'Unknown constant {}'.format(name))

    def apply(self, name, value, multiplier=None):
        '''
        Call a function on radians. arcsin/arccos give NaN outside [-1, 1].
        '''
        return type(self).MATH[self.lookup(name)](value, multiplier)

    def apply_degrees(self, name, value, multiplier=None):
        '''
        Call a function in degree mode.

        Direct functions get value converted to radians; inverse functions
        have their result converted to degrees, then snapped per ANGLE_SNAP.
        '''
        function = self.lookup(name)
        if not function.is_inverse:
            return self.apply(function, math.radians(value), multiplier)
        result = math.degrees(self.apply(function, value))
        if math.isfinite(result):
            nearest = round(result)
            if abs(result - nearest) < type(self).ANGLE_SNAP:
                result = float(nearest)
        if multiplier is None:
            return result
        return multiplier * result

    def in_domain(self, name, value):
        return self.lookup(name).in_domain(value)

    def validate(self, name, value):
        '''
        Return True if name is known and value lies in its domain.
        '''
        if name not in self or math.isnan(value):
            return False
        return self.in_domain(name, value)

    def describe(self, name):
        return type(self).INFO[self.lookup(name)]

    def names(self):
        return [function.value for function in type(self).MATH]

    def categories(self):
        return sorted({info.category for info in type(self).INFO.values()})


OPERATORS = OperatorTable()
FUNCTIONS = FunctionTable()
