'''
One-shot evaluation of infix expressions: lex, convert to RPN, run.

Pure and reentrant: all state is local to a call, the tables are read-only.
'''

from collections import deque

from .errors import ErrorKind, check
from .lexer import Lexer, TokenKind
from .tables import OPERATORS, FUNCTIONS, Operator, Function
from .util import CalculatorError


class ShuntingYard:
    '''
    Infix to RPN conversion, left-associative.
    '''

    def convert(self, tokens):
        '''
        Return tokens reordered into RPN.

        Raises CalculatorError on unbalanced parentheses.
        '''
        output = []
        stack = deque()
        for token in tokens:
            if token.kind in (TokenKind.NUMBER, TokenKind.CONSTANT):
                output.append(token)
            elif token.kind in (TokenKind.FUNCTION, TokenKind.OPEN_PAREN):
                stack.append(token)
            elif token.kind is TokenKind.OPERATOR:
                precedence = OPERATORS.precedence(token.text)
                # >= rather than >: a-b-c is (a-b)-c.
                while (stack and stack[-1].kind is TokenKind.OPERATOR and
                       OPERATORS.precedence(stack[-1].text) >= precedence):
                    output.append(stack.pop())
                stack.append(token)
            elif token.kind is TokenKind.CLOSE_PAREN:
                while stack and stack[-1].kind is not TokenKind.OPEN_PAREN:
                    output.append(stack.pop())
                if not stack:
                    raise CalculatorError(ErrorKind.SYNTAX,
                                          'Unbalanced parentheses')
                stack.pop()
                if stack and stack[-1].kind is TokenKind.FUNCTION:
                    output.append(stack.pop())
        while stack:
            token = stack.pop()
            if token.kind is TokenKind.OPEN_PAREN:
                raise CalculatorError(ErrorKind.SYNTAX,
                                      'Unbalanced parentheses')
            output.append(token)
        return output


class RPNEvaluator:
    '''
    Stack machine over RPN tokens. Angles are in degrees.
    '''

    def evaluate(self, tokens):
        stack = deque()
        for token in tokens:
            if token.kind in (TokenKind.NUMBER, TokenKind.CONSTANT):
                stack.append(token.value)
            elif token.kind is TokenKind.OPERATOR:
                if len(stack) < 2:
                    raise CalculatorError(
                        ErrorKind.SYNTAX,
                        'Not enough operands for {}'.format(token.text))
                # Pushed a then b, so popped b then a.
                b = stack.pop()
                a = stack.pop()
                symbol = Operator(token.text)
                result = OPERATORS.calculate(a, b, symbol)
                stack.append(check(result, symbol, b,
                                   '{} {} {}'.format(a, token.text, b)))
            elif token.kind is TokenKind.FUNCTION:
                if not stack:
                    raise CalculatorError(
                        ErrorKind.SYNTAX,
                        'Missing operand for {}'.format(token.text))
                value = stack.pop()
                function = Function(token.text)
                result = FUNCTIONS.apply_degrees(function, value)
                stack.append(check(result, function, value,
                                   '{}({})'.format(token.text, value)))
            else:
                raise CalculatorError(ErrorKind.SYNTAX,
                                      'Unexpected {}'.format(token.text))
        if len(stack) != 1:
            raise CalculatorError(ErrorKind.SYNTAX, 'Invalid expression')
        return stack.pop()


class ExpressionEvaluator:
    '''
    Facade: Lexer, then ShuntingYard, then RPNEvaluator.
    '''

    def __init__(self):
        self.lexer = Lexer()
        self.converter = ShuntingYard()
        self.machine = RPNEvaluator()

    def rpn(self, expression):
        '''
        Tokens of expression, in RPN order.
        '''
        if not expression or not expression.strip():
            raise CalculatorError(ErrorKind.SYNTAX, 'Empty expression')
        return self.converter.convert(self.lexer.tokenize(expression))

    def evaluate(self, expression):
        '''
        Value of a complete infix expression.

        Raises CalculatorError, classified per ErrorKind.
        '''
        return self.machine.evaluate(self.rpn(expression))

    def validate(self, expression):
        '''
        Return True if expression lexes and its parentheses balance.
        '''
        if not expression or not expression.strip():
            return False
        try:
            tokens = self.lexer.tokenize(expression)
        except CalculatorError:
            return False
        depth = 0
        for token in tokens:
            if token.kind is TokenKind.OPEN_PAREN:
                depth += 1
            elif token.kind is TokenKind.CLOSE_PAREN:
                depth -= 1
                if depth < 0:
                    return False
        return depth == 0


_DEFAULT = ExpressionEvaluator()


def evaluate(expression):
    '''
    Evaluate expression with a shared ExpressionEvaluator.
    '''
    return _DEFAULT.evaluate(expression)
