'''
Batch evaluation tests: shunting-yard, RPN machine, facade.
'''

import math

import regex

from scicalc.errors import ErrorKind
from scicalc.evaluator import ShuntingYard, RPNEvaluator, evaluate
from scicalc.lexer import Lexer
from scicalc.util import CalculatorError

from pytest import raises, approx, mark


def rpn_text(evaluator, expression):
    return ' '.join(token.text for token in evaluator.rpn(expression))


def test_precedence(evaluator):
    assert evaluator.evaluate('5+3×2') == 11
    assert evaluator.evaluate('5×3+2') == 17


@mark.parametrize('expression, expected', [
    ('10-4-3', 3),
    ('100/10/5', 2),
    ('2×3÷4', 1.5),
    ('8÷4×2', 4),
])
def test_left_associative(evaluator, expression, expected):
    assert evaluator.evaluate(expression) == expected


def test_rpn_order(evaluator):
    assert rpn_text(evaluator, '1 + 2 × 3') == '1 2 3 × +'
    assert rpn_text(evaluator, '(1 + 2) × 3') == '1 2 + 3 ×'
    assert rpn_text(evaluator, '1 - 2 - 3') == '1 2 - 3 -'


def test_function_popped_after_parenthesis(evaluator):
    assert rpn_text(evaluator, 'sin(30) + 1') == '30 sin 1 +'
    assert rpn_text(evaluator, 'cos(60 × 2)') == '60 2 × cos'


def test_nested_functions(evaluator):
    assert evaluator.evaluate('arcsin(sin(30))') == approx(30)


def test_degrees(evaluator):
    assert evaluator.evaluate('sin(45)') == approx(0.70710678)
    assert evaluator.evaluate('cos(60)') == approx(0.5)
    assert evaluator.evaluate('tan(45)') == approx(1)


def test_inverse_trig_snaps_to_whole_degrees(evaluator):
    assert evaluator.evaluate('arcsin(0.5)') == 30
    assert evaluator.evaluate('arccos(0.5)') == 60
    assert evaluator.evaluate('arctan(1)') == 45


def test_inverse_trig_keeps_fractions(evaluator):
    assert evaluator.evaluate('arcsin(0.3)') == approx(17.457603123)


def test_constants(evaluator):
    assert evaluator.evaluate('2 × π') == approx(2 * math.pi)
    assert evaluator.evaluate('e') == approx(math.e)


def test_comma_decimal(evaluator):
    assert evaluator.evaluate('1,5 + 1.5') == 3


def test_division_by_zero(evaluator):
    with raises(CalculatorError) as e:
        evaluator.evaluate('1 ÷ (2 - 2)')
    assert e.value.kind is ErrorKind.DIVISION_BY_ZERO
    assert e.value.args[0] == 'Cannot divide by zero'


def test_division_by_almost_zero(evaluator):
    with raises(CalculatorError) as e:
        evaluator.evaluate('1 / 0.00000000001')
    assert e.value.kind is ErrorKind.DIVISION_BY_ZERO


def test_domain_error(evaluator):
    with raises(CalculatorError) as e:
        evaluator.evaluate('arcsin(2)')
    assert e.value.kind is ErrorKind.DOMAIN


@mark.parametrize('expression, message', [
    ('(1 + 2', 'Unbalanced parentheses'),
    ('1 + 2)', 'Unbalanced parentheses'),
    ('1 +', 'Not enough operands for +'),
    ('sin()', 'Missing operand for sin'),
    ('1 2', 'Invalid expression'),
])
def test_syntax_errors(evaluator, expression, message):
    with raises(CalculatorError, match=regex.escape(message)) as e:
        evaluator.evaluate(expression)
    assert e.value.kind is ErrorKind.SYNTAX


@mark.parametrize('expression', ['', '   '])
def test_empty(evaluator, expression):
    with raises(CalculatorError, match='Empty expression'):
        evaluator.evaluate(expression)


def test_validate(evaluator):
    assert evaluator.validate('sin(30) + (1 × 2)')
    assert not evaluator.validate('(1 + 2')
    assert not evaluator.validate(')1 + 2(')
    assert not evaluator.validate('1 $ 2')
    assert not evaluator.validate('')
    # Balanced, lexes: valid, even though it cannot be evaluated.
    assert evaluator.validate('1 +')


def test_stages_are_reusable():
    lexer = Lexer()
    converter = ShuntingYard()
    machine = RPNEvaluator()
    for expression, expected in [('1 + 1', 2), ('2 × (3 + 4)', 14)]:
        tokens = converter.convert(lexer.tokenize(expression))
        assert machine.evaluate(tokens) == expected


def test_module_level_evaluate():
    assert evaluate('7 - 2 × 3') == 1


def test_minus_sign_synonym(evaluator):
    assert evaluator.evaluate('9 − 4 − 1') == 4
    assert rpn_text(evaluator, '9 − 4') == '9 4 −'
