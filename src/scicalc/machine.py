'''
Live input machine: the calculator driven one key press at a time.

Top-level binary operators commit as soon as the next one is pressed, left
to right, without precedence: 5 + 3 × 2 = is 16. Only one function scope is
ever open; opening another closes the current one first.
'''

from collections import namedtuple
from enum import Enum
from functools import wraps
import math

import regex

from .errors import ErrorKind, ErrorLog, check
from .formatter import format_result, format_result_strict
from .history import OperationHistory
from .tables import OPERATORS, FUNCTIONS, Operator, Constant
from .util import CalculatorError, parse_number, number_text, \
    wrap_user_errors


# Trailing number of an operation trail fragment, e.g. the 3.50 of "2×3.50".
_TRAILING_NUMBER = regex.compile(r'[\d.,]+$')
_OPERATOR_CHARS = frozenset(OPERATORS.symbols() + OPERATORS.synonyms())
_CONSTANT_CHARS = frozenset(constant.symbol for constant in Constant)
_DIGITS = '0123456789'


class CalculatorState:
    '''
    Everything the live machine remembers between key presses.

    Invariants, checked by violations():
    - is_operator_set implies current_operator is set.
    - is_sub_operator_set implies sub_operator is set.
    - a function scope is never both open and just closed.

    Bookkeeping for front ends, never read back by the machine:
    - is_operation_just_done: an operator was just committed.
    - sub_first_value: operand of the last closed scope.
    - is_sub_operation_started: something was typed in the open scope.
    '''

    DEFAULTS = {
        # Committed binary operation.
        'result': 0.0,
        'first_value': 0.0,
        'second_value': 0.0,
        'current_operator': None,
        # The single function scope.
        'sub_operator': None,
        'sub_first_value': 0.0,
        'sub_second_value': None,
        'sub_result': 0.0,
        'sub_expression': '',
        # Injected constant, with its sign and leading multiplier.
        'sub_constant': 1.0,
        'is_operator_set': False,
        'is_sub_operator_set': False,
        'is_parenthesis_open': False,
        'is_parenthesis_just_closed': False,
        'is_constant_used': False,
        'is_operation_just_done': False,
        'is_equal_done': False,
        'is_error_state': False,
        'is_sub_operation_started': False,
        'input_buffer': '',
        'operation_count': 0,
    }

    SCOPE_FIELDS = ('sub_operator', 'sub_first_value', 'sub_second_value',
                    'sub_result', 'sub_expression', 'is_sub_operator_set',
                    'is_parenthesis_open', 'is_parenthesis_just_closed',
                    'is_sub_operation_started')

    __slots__ = tuple(DEFAULTS)

    def __init__(self):
        self.reset()

    def _checked(self, names):
        unknown = set(names) - type(self).DEFAULTS.keys()
        if unknown:
            raise KeyError('No such state field(s): {}'.format(
                ', '.join(sorted(unknown))))
        return names

    def reset(self, *keep):
        '''
        Reset every field to its default, except those named in keep.
        '''
        keep = self._checked(keep)
        for name, default in type(self).DEFAULTS.items():
            if name not in keep:
                setattr(self, name, default)

    def clear(self, *names):
        '''
        Reset only the named fields.
        '''
        for name in self._checked(names):
            setattr(self, name, type(self).DEFAULTS[name])

    def violations(self):
        '''
        List the invariants the current state breaks. Empty when sound.
        '''
        broken = []
        if self.is_operator_set and self.current_operator is None:
            broken.append('operator set without an operator')
        if self.is_sub_operator_set and self.sub_operator is None:
            broken.append('function scope set without a function')
        if self.is_parenthesis_open and self.is_parenthesis_just_closed:
            broken.append('scope both open and just closed')
        return broken

    def as_dict(self):
        return {name: getattr(self, name) for name in type(self).DEFAULTS}

    def __repr__(self):
        changed = ['{}={!r}'.format(name, value)
                   for name, value
                   in self.as_dict().items()
                   if value != type(self).DEFAULTS[name]]
        return '<CalculatorState {}>'.format(' '.join(changed))


class Display:
    '''
    The three text fields a front end shows, plus error styling hints.

    entry: what is being typed. preview: live result. trail: operation log.
    '''

    DEFAULT_ENTRY = '0'
    DEFAULT_PREVIEW = '0'

    def __init__(self):
        self.reset()

    def reset(self):
        self.entry = type(self).DEFAULT_ENTRY
        self.preview = type(self).DEFAULT_PREVIEW
        self.trail = ''
        self.error = False
        self.font_size = None

    def __iter__(self):
        return iter((self.entry, self.preview, self.trail))

    def __repr__(self):
        return '<Display entry={!r} preview={!r} trail={!r}{}>'.format(
            self.entry, self.preview, self.trail,
            ' error' if self.error else '')


class EventKind(Enum):
    DIGIT = 'digit'
    DECIMAL_POINT = 'decimal_point'
    OPERATOR = 'operator'
    FUNCTION = 'function'
    CONSTANT = 'constant'
    EQUALS = 'equals'
    BACKSPACE = 'backspace'
    CLEAR_ENTRY = 'clear_entry'
    CLEAR_ALL = 'clear_all'
    SIGN_TOGGLE = 'sign_toggle'


Event = namedtuple('Event', 'kind value', defaults=(None,))


def _event(f):
    '''
    Make f a key handler.

    While an error is shown, any key only acknowledges it: the calculator
    resets and the key is dropped. Otherwise f runs and the live preview is
    refreshed.
    '''
    @wraps(f)
    def wrapper(self, *args):
        if self.state.is_error_state:
            self.acknowledge()
            return
        f(self, *args)
        self._refresh_preview()
    return wrapper


class Machine:
    '''
    Incremental calculator.

    Feed it key presses, read self.display. Completed calculations go to
    the history sink (anything with record(expression, result)), errors to
    the error sink (anything with report(kind, message, detail)).
    '''

    MAX_INPUT_LENGTH = 13
    MAX_OPERATION_LENGTH = 30
    DEFAULT_HISTORY_SIZE = 100
    DEFAULT_ERROR_HISTORY_SIZE = 50

    # Text commands understood by feed(), besides digits, operators,
    # functions and constants.
    KEYS = {
        '=': EventKind.EQUALS,
        'C': EventKind.CLEAR_ALL,
        'CE': EventKind.CLEAR_ENTRY,
        '<': EventKind.BACKSPACE,
        '⌫': EventKind.BACKSPACE,
        '±': EventKind.SIGN_TOGGLE,
        # Negative number prefix, as in dc.
        '_': EventKind.SIGN_TOGGLE,
    }

    def __init__(self, history=None, errors=None):
        cls = type(self)
        self.state = CalculatorState()
        self.display = Display()
        if history is None:
            history = OperationHistory(cls.DEFAULT_HISTORY_SIZE)
        if errors is None:
            errors = ErrorLog(cls.DEFAULT_ERROR_HISTORY_SIZE)
        self.history = history
        self.errors = errors

    # -- Command input -----------------------------------------------------

    def parse(self, command):
        '''
        Translate a text command into events.

        A run of digits and decimal separators becomes one event per key.
        '''
        kind = type(self).KEYS.get(command)
        if kind is not None:
            return [Event(kind)]
        if command in OPERATORS:
            return [Event(EventKind.OPERATOR, command)]
        if command in FUNCTIONS:
            return [Event(EventKind.FUNCTION, command)]
        if FUNCTIONS.is_constant(command):
            return [Event(EventKind.CONSTANT, command)]
        if command and all(c in _DIGITS + '.,' for c in command):
            return [Event(EventKind.DIGIT, c)
                    if c in _DIGITS
                    else Event(EventKind.DECIMAL_POINT)
                    for c in command]
        raise CalculatorError(ErrorKind.INVALID_OPERATION,
                              'Unknown command {!r}'.format(command))

    def feed(self, command):
        '''
        Run a text command (see parse) on the machine.
        '''
        for event in self.parse(command):
            self.apply(event)

    @wrap_user_errors(ErrorKind.UNKNOWN, 'Cannot handle {1}')
    def apply(self, event):
        '''
        Run one Event.
        '''
        handler = getattr(self, event.kind.value)
        if event.value is None:
            handler()
        else:
            handler(event.value)

    # -- Key handlers ------------------------------------------------------

    def acknowledge(self):
        '''
        Dismiss a pending error, resetting the calculator.
        '''
        if not self.state.is_error_state:
            return
        self.state.reset()
        self.display.reset()

    @_event
    def digit(self, digit):
        digit = str(digit)
        if len(digit) != 1 or digit not in _DIGITS:
            raise CalculatorError(ErrorKind.INVALID_OPERATION,
                                  'Not a digit: {!r}'.format(digit))
        if not self._implicit_multiply():
            return
        self._append(digit)

    @_event
    def decimal_point(self):
        if not self._implicit_multiply():
            return
        st = self.state
        if st.is_equal_done:
            self._start_over()
        number = st.sub_expression if st.is_parenthesis_open \
            else st.input_buffer
        if '.' in number or ',' in number:
            return
        self._append('.' if number else '0.')

    @_event
    def operator(self, symbol):
        self._operator(OPERATORS.lookup(symbol))

    @_event
    def function(self, name):
        '''
        Open a function scope, e.g. sin(.

        A number typed just before is the scope's multiplier: 2sin(30) is 1.
        Right after =, the function is applied to the result at once.
        '''
        function = FUNCTIONS.lookup(name)
        st = self.state
        if st.is_constant_used or st.is_parenthesis_just_closed:
            self._operator(Operator.MULTIPLY)
            if st.is_error_state:
                return
        if st.is_equal_done:
            result = st.result
            st.reset('result')
            self.display.reset()
            self._open_scope(function)
            # Seeded with the result as displayed.
            self._append(format_result(result))
            self._close_scope()
            if not st.is_error_state:
                self._equals()
            return
        if st.is_parenthesis_open:
            self._close_scope()
            if st.is_error_state:
                return
            self._operator(Operator.MULTIPLY)
            if st.is_error_state:
                return
        if (len(st.input_buffer) + len(function.value) + 1 >=
                type(self).MAX_OPERATION_LENGTH):
            return
        try:
            st.sub_second_value = parse_number(st.input_buffer)
        except ValueError:
            st.sub_second_value = None
        self._open_scope(function)

    @_event
    def constant(self, name):
        try:
            constant = Constant(name)
        except ValueError:
            raise CalculatorError(ErrorKind.SYNTAX,
                                  'Unknown constant {}'.format(name))
        st = self.state
        if (st.is_constant_used or st.is_parenthesis_just_closed or
                st.is_equal_done):
            self._operator(Operator.MULTIPLY)
            if st.is_error_state:
                return
        if len(st.input_buffer) >= type(self).MAX_INPUT_LENGTH:
            return
        number = st.sub_expression if st.is_parenthesis_open \
            else st.input_buffer
        try:
            multiplier = parse_number(number)
        except ValueError:
            # A lone sign: -π
            multiplier = -1.0 if number == '-' else 1.0
        st.sub_constant = constant.number * multiplier
        st.input_buffer += constant.symbol
        st.is_constant_used = True
        if st.is_parenthesis_open:
            st.sub_expression += constant.symbol
            self._close_scope()
            st.is_constant_used = False
            return
        self._show_entry()

    @_event
    def equals(self):
        self._equals()

    @_event
    def backspace(self):
        st = self.state
        display = self.display
        if st.is_equal_done:
            return
        if not st.input_buffer:
            # Edit the trail instead, but never eat the pending operator.
            if display.trail and display.trail[-1] not in _OPERATOR_CHARS:
                display.trail = display.trail[:-1]
            return
        if st.is_parenthesis_open and not st.sub_expression:
            # At the opening parenthesis: undo the whole scope.
            opening = len(st.sub_operator.value) + 1
            st.input_buffer = st.input_buffer[:-opening]
            st.clear(*CalculatorState.SCOPE_FIELDS)
            self._show_entry()
            return
        last = st.input_buffer[-1]
        st.input_buffer = st.input_buffer[:-1]
        if last == ')':
            # Reopen the scope, with its constant if that's what closed it.
            st.is_parenthesis_just_closed = False
            st.is_parenthesis_open = True
            st.is_sub_operator_set = True
            st.is_constant_used = st.sub_expression[-1:] in _CONSTANT_CHARS
        else:
            if last in _CONSTANT_CHARS:
                st.is_constant_used = False
                st.sub_constant = 1.0
            if st.is_parenthesis_open:
                st.sub_expression = st.sub_expression[:-1]
                st.is_sub_operation_started = bool(st.sub_expression)
        self._show_entry()

    @_event
    def clear_entry(self):
        '''
        Drop what is being typed, and any open scope. Keeps the pending
        operand and operator.
        '''
        st = self.state
        if st.is_equal_done:
            return
        st.clear('input_buffer', 'is_operation_just_done',
                 'is_constant_used', 'sub_constant',
                 *CalculatorState.SCOPE_FIELDS)
        self.display.entry = Display.DEFAULT_ENTRY

    @_event
    def clear_all(self):
        self.state.reset()
        self.display.reset()

    @_event
    def sign_toggle(self):
        st = self.state
        if st.is_equal_done:
            result = -st.result
            st.reset('result')
            self.display.reset()
            st.result = result
            st.input_buffer = number_text(result)
        elif st.is_parenthesis_open:
            if not st.sub_expression:
                return
            head = st.input_buffer[:-len(st.sub_expression)]
            st.sub_expression = _toggled(st.sub_expression)
            st.input_buffer = head + st.sub_expression
            if st.is_constant_used:
                st.sub_constant = -st.sub_constant
        elif st.is_parenthesis_just_closed:
            # -2sin(30): negate the multiplier, so reopening agrees.
            st.input_buffer = _toggled(st.input_buffer)
            st.sub_second_value = -1.0 if st.sub_second_value is None \
                else -st.sub_second_value
            st.sub_result = -st.sub_result
        else:
            if not st.input_buffer:
                return
            st.input_buffer = _toggled(st.input_buffer)
            if st.is_constant_used:
                st.sub_constant = -st.sub_constant
        self._show_entry()

    # -- Transitions -------------------------------------------------------

    def _operator(self, op):
        st = self.state
        display = self.display
        if st.is_parenthesis_open:
            self._close_scope()
            if st.is_error_state:
                return
        if st.is_equal_done:
            # Continue the chain from the previous result.
            st.reset('result')
            display.reset()
            st.first_value = st.result
            st.current_operator = op
            st.is_operator_set = True
            display.trail = format_result_strict(st.first_value) + op.symbol
            display.preview = format_result(st.result)
            return
        if not st.input_buffer and st.is_operator_set:
            # Operator pressed twice: the last one wins.
            if display.trail and display.trail[-1] in _OPERATOR_CHARS:
                display.trail = display.trail[:-1] + op.symbol
            st.current_operator = op
            return
        value = self._operand()
        if value is None:
            return
        if not st.is_operator_set:
            st.first_value = value
        else:
            st.second_value = value
            self._compute()
            if st.is_error_state:
                return
            st.first_value = st.result
        st.current_operator = op
        st.is_operator_set = True
        if st.input_buffer:
            self._extend_trail(_grouped(st.input_buffer) + op.symbol)
        st.input_buffer = ''
        st.sub_expression = ''
        display.entry = Display.DEFAULT_ENTRY

    def _equals(self):
        st = self.state
        display = self.display
        if st.is_equal_done:
            return
        if st.is_parenthesis_open:
            self._close_scope()
            if st.is_error_state:
                return
        value = self._operand()
        if value is None:
            return
        if not st.is_operator_set:
            st.result = value
        else:
            st.second_value = value
            self._compute()
            if st.is_error_state:
                return
        st.is_equal_done = True
        if display.trail:
            self._extend_trail(_grouped(st.input_buffer))
        else:
            self._extend_trail(st.input_buffer)
        display.preview = format_result(st.result)
        display.entry = display.preview
        st.first_value = st.result
        st.is_operator_set = False
        st.current_operator = None
        st.sub_expression = ''
        if math.isfinite(st.result):
            st.input_buffer = number_text(st.result)
            self.history.record(display.trail, st.result)
        else:
            st.input_buffer = ''

    def _compute(self):
        '''
        Commit current_operator(first_value, second_value) into result.
        '''
        st = self.state
        op = st.current_operator
        if op is None:
            return
        st.operation_count += 1
        a, b = st.first_value, st.second_value
        try:
            result = check(OPERATORS.calculate(a, b, op), op, b,
                           '{} {} {}'.format(a, op.symbol, b))
        except CalculatorError as e:
            st.result = 0.0
            self._show_error(e.kind, in_preview=True, detail=e.detail)
            return
        st.result = result
        self.display.preview = format_result(result)
        st.is_operator_set = False
        st.is_operation_just_done = True

    def _open_scope(self, function):
        st = self.state
        if st.is_equal_done:
            self._start_over()
        st.input_buffer += function.value + '('
        st.sub_expression = ''
        st.sub_operator = function
        st.is_sub_operator_set = True
        st.is_parenthesis_open = True
        st.is_parenthesis_just_closed = False
        st.is_sub_operation_started = False
        self._show_entry()

    def _close_scope(self):
        '''
        Close the open function scope, computing its value into sub_result.

        The scope's operand is the number typed inside it or, failing
        that, a constant typed inside it.
        '''
        st = self.state
        if not st.is_parenthesis_open:
            return
        st.is_parenthesis_open = False
        if st.is_sub_operator_set and st.sub_operator is not None:
            try:
                operand = parse_number(st.sub_expression)
            except ValueError:
                if not st.is_constant_used:
                    self._show_error(
                        ErrorKind.SYNTAX, in_preview=False,
                        detail='Nothing to apply {} to'.format(
                            st.sub_operator.value))
                    return
                operand = st.sub_constant
            st.sub_first_value = operand
            try:
                st.sub_result = self._scope_value(operand)
            except CalculatorError as e:
                self._show_error(e.kind, in_preview=True, detail=e.detail)
                return
        st.input_buffer += ')'
        st.is_sub_operator_set = False
        st.is_parenthesis_just_closed = True
        self._show_entry()

    def _scope_value(self, operand):
        '''
        Value of the open scope's function on operand, in degrees.
        '''
        st = self.state
        function = st.sub_operator
        result = FUNCTIONS.apply_degrees(function, operand,
                                         st.sub_second_value)
        return check(result, function, operand,
                     '{}({})'.format(function.value, operand))

    def _operand(self):
        '''
        The number just entered: the input buffer if it is a plain number,
        else the closed scope's result, else the pending constant.

        Shows a syntax error and returns None if there is none.
        '''
        st = self.state
        try:
            return parse_number(st.input_buffer)
        except ValueError:
            pass
        if st.is_parenthesis_just_closed:
            st.is_parenthesis_just_closed = False
            return st.sub_result
        if st.is_constant_used:
            st.is_constant_used = False
            return st.sub_constant
        self._show_error(ErrorKind.SYNTAX, in_preview=False,
                         detail='No operand in {!r}'.format(st.input_buffer))
        return None

    def _implicit_multiply(self):
        '''
        Insert × after a closed scope or a constant, before more input.

        Returns False if that failed with an error.
        '''
        st = self.state
        if st.is_parenthesis_just_closed or st.is_constant_used:
            self._operator(Operator.MULTIPLY)
            st.is_parenthesis_just_closed = False
            st.is_constant_used = False
        return not st.is_error_state

    def _append(self, text):
        st = self.state
        if st.is_equal_done:
            self._start_over()
        if len(st.input_buffer) >= type(self).MAX_INPUT_LENGTH:
            return
        st.input_buffer += text
        if st.is_parenthesis_open:
            st.sub_expression += text
            st.is_sub_operation_started = True
        st.is_operation_just_done = False
        self._show_entry()

    def _start_over(self):
        self.state.reset()
        self.display.reset()

    # -- Display -----------------------------------------------------------

    def _show_entry(self):
        text = self.state.input_buffer
        self.display.entry = text if text not in ('', '-') \
            else Display.DEFAULT_ENTRY

    def _show_error(self, kind, in_preview, detail=None):
        '''
        Enter the error state and report kind to the error sink.
        '''
        st = self.state
        display = self.display
        if in_preview:
            display.preview = kind.message
        else:
            display.entry = kind.message
        display.error = True
        display.font_size = kind.font_size
        st.is_error_state = True
        st.is_operator_set = False
        st.current_operator = None
        self.errors.report(kind, kind.message, detail)

    def _extend_trail(self, added):
        '''
        Append to the operation trail, re-rendering its last number.
        '''
        sign = ''
        body = added
        if body and body[-1] in _OPERATOR_CHARS:
            body, sign = body[:-1], body[-1]
        match = _TRAILING_NUMBER.search(body)
        if match is not None:
            try:
                number = parse_number(match.group(0))
            except ValueError:
                pass
            else:
                body = body[:match.start()] + format_result_strict(number)
        self.display.trail += body + sign

    def _refresh_preview(self):
        '''
        Recompute the live preview: what = would show right now.
        '''
        st = self.state
        display = self.display
        if st.is_error_state or st.is_equal_done:
            return
        try:
            value = parse_number(st.input_buffer)
        except ValueError:
            if st.is_parenthesis_open and st.is_sub_operator_set:
                try:
                    operand = parse_number(st.sub_expression)
                except ValueError:
                    return
                try:
                    value = self._scope_value(operand)
                except CalculatorError as e:
                    display.preview = e.message
                    return
            elif st.is_parenthesis_just_closed:
                value = st.sub_result
            elif st.is_constant_used:
                value = st.sub_constant
            else:
                pending = st.first_value if st.is_operator_set else st.result
                display.preview = format_result(pending)
                return
        if st.is_operator_set:
            op = st.current_operator
            try:
                value = check(OPERATORS.calculate(st.first_value, value, op),
                              op, value)
            except CalculatorError as e:
                display.preview = e.message
                return
        display.preview = format_result(value)


def _toggled(text):
    return text[1:] if text.startswith('-') else '-' + text


def _grouped(text):
    '''
    Parenthesize a negative operand for the trail: 5×(-3).
    '''
    return '({})'.format(text) if text.startswith('-') else text
