'''
Operator and function table tests
'''

import math

import regex

from scicalc.errors import ErrorKind
from scicalc.tables import OPERATORS, FUNCTIONS, Operator, Function, Constant
from scicalc.util import CalculatorError

from pytest import raises, approx


def test_operator_synonyms():
    assert Operator('*') is Operator.MULTIPLY
    assert Operator('/') is Operator.DIVIDE
    assert '×' in OPERATORS
    assert '^' not in OPERATORS


def test_symbols():
    assert OPERATORS.symbols() == ['+', '-', '×', '÷']


def test_precedence():
    assert OPERATORS.precedence('×') == OPERATORS.precedence('/')
    assert OPERATORS.precedence('+') == OPERATORS.precedence('-')
    assert OPERATORS.precedence('÷') > OPERATORS.precedence('-')


def test_unknown_operator():
    with raises(CalculatorError, match=regex.escape('Unknown operator ^')):
        OPERATORS.lookup('^')


def test_calculate():
    assert OPERATORS.calculate(6, 3, '÷') == 2
    assert OPERATORS.calculate(6, 3, '/') == 2
    assert OPERATORS.calculate(6, 3, Operator.SUBTRACT) == 3
    assert OPERATORS.calculate(0.1, 0.2, '+') == approx(0.3)


def test_calculate_refuses_zero_divisor():
    for divisor in (0, 0.0, -0.0, 1e-11, -1e-11):
        with raises(CalculatorError) as e:
            OPERATORS.calculate(1, divisor, '÷')
        assert e.value.kind is ErrorKind.DIVISION_BY_ZERO
    assert OPERATORS.calculate(1, 1e-9, '÷') == approx(1e9)


def test_apply_is_unguarded():
    assert OPERATORS.apply('÷', 1, 0) == math.inf
    assert OPERATORS.apply('÷', -1, 0) == -math.inf
    assert math.isnan(OPERATORS.apply('/', 0, 0))


def test_operator_validate():
    assert OPERATORS.validate('×', 2, 3)
    assert not OPERATORS.validate('÷', 1, 0)
    assert not OPERATORS.validate('+', 1, math.inf)
    assert not OPERATORS.validate('+', math.nan, 1)
    assert not OPERATORS.validate('?', 1, 2)


def test_function_lookup():
    assert FUNCTIONS.lookup('SIN') is Function.SIN
    assert 'arccos' in FUNCTIONS
    assert 'log' not in FUNCTIONS
    with raises(CalculatorError, match='Unknown function log'):
        FUNCTIONS.lookup('log')


def test_apply_radians():
    assert FUNCTIONS.apply('sin', math.pi / 2) == approx(1)
    assert FUNCTIONS.apply('cos', 0, 3) == 3
    assert math.isnan(FUNCTIONS.apply('arcsin', 2))
    assert math.isnan(FUNCTIONS.apply('arccos', -1.5, 2))


def test_apply_degrees():
    assert FUNCTIONS.apply_degrees('sin', 30) == approx(0.5)
    assert FUNCTIONS.apply_degrees('sin', 30, 2) == approx(1)
    assert FUNCTIONS.apply_degrees('tan', 45) == approx(1)
    assert FUNCTIONS.apply_degrees('arctan', 1) == 45
    assert FUNCTIONS.apply_degrees('arcsin', 0.5, 2) == 60
    assert math.isnan(FUNCTIONS.apply_degrees('arcsin', 2))


def test_angle_snap_only_near_integers():
    assert FUNCTIONS.apply_degrees('arccos', 0.5) == 60
    assert FUNCTIONS.apply_degrees('arcsin', 0.3) != \
        round(FUNCTIONS.apply_degrees('arcsin', 0.3))


def test_domain():
    assert FUNCTIONS.in_domain('arcsin', 1)
    assert not FUNCTIONS.in_domain('arcsin', 1.5)
    assert FUNCTIONS.in_domain('arctan', 1e9)
    assert not FUNCTIONS.in_domain('sin', math.inf)


def test_function_validate():
    assert FUNCTIONS.validate('arccos', -1)
    assert not FUNCTIONS.validate('arccos', -1.01)
    assert not FUNCTIONS.validate('sin', math.nan)
    assert not FUNCTIONS.validate('log', 1)


def test_describe():
    info = FUNCTIONS.describe('arcsin')
    assert info.name == 'arcsin'
    assert info.category == 'Inverse trigonometric'
    assert info.domain == '[-1, 1]'


def test_names_and_categories():
    assert FUNCTIONS.names() == ['sin', 'cos', 'tan',
                                 'arcsin', 'arccos', 'arctan']
    assert FUNCTIONS.categories() == ['Inverse trigonometric',
                                      'Trigonometric']


def test_constants():
    assert FUNCTIONS.constant('π') == math.pi
    assert FUNCTIONS.constant('pi') == math.pi
    assert FUNCTIONS.constant('e') == math.e
    assert FUNCTIONS.is_constant('pi')
    assert not FUNCTIONS.is_constant('tau')
    assert Constant('pi').symbol == 'π'
    with raises(CalculatorError, match='Unknown constant tau'):
        FUNCTIONS.constant('tau')


def test_minus_sign_synonym():
    assert Operator('−') is Operator.SUBTRACT
    assert '−' in OPERATORS.synonyms()
    assert OPERATORS.calculate(9, 4, '−') == 5
