'''
Scientific calculator.

Plain arithmetic and degree-based trigonometry, two ways:

- ExpressionEvaluator: whole infix expressions, with precedence, through
  the shunting-yard algorithm and an RPN stack machine.
- Machine: a live, key by key calculator, chaining left to right like a
  pocket calculator, with a live preview and an operation trail.

Both share the operator and function tables, the error taxonomy, and the
display formatter.
'''

from .cli import CLI
from .errors import ErrorKind, ErrorLog
from .evaluator import ExpressionEvaluator, evaluate
from .history import OperationHistory
from .lexer import Lexer
from .machine import Machine
from .util import CalculatorError


__all__ = ('CLI', 'CalculatorError', 'ErrorKind', 'ErrorLog',
           'ExpressionEvaluator', 'Lexer', 'Machine', 'OperationHistory',
           'evaluate')
