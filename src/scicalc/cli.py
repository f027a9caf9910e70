from os import isatty
from sys import stdin, stdout, stderr, exit
from argparse import ArgumentParser, ArgumentTypeError, REMAINDER, OPTIONAL
from traceback import print_exception

from prompt_toolkit import PromptSession

from .errors import ErrorLog
from .evaluator import ExpressionEvaluator
from .formatter import format_result
from .history import OperationHistory
from .lexer import Lexer
from .machine import Machine
from .tables import FUNCTIONS
from .util import CalculatorError


class InteractiveInput:
    def __init__(self, prompt):
        self.prompt = prompt

    def __iter__(self):
        try:
            session = PromptSession(message=self.prompt,
                                    vi_mode=True,
                                    enable_suspend=True,
                                    enable_open_in_editor=True,
                                    prompt_continuation=' ' * len(self.prompt),
                                    # Debatable. Interferes with X11 selection.
                                    mouse_support=True,
                                    erase_when_done=False)
            while True:
                yield session.prompt()
        except EOFError:
            return


def _positive(text):
    try:
        value = int(text)
    except ValueError:
        raise ArgumentTypeError('not an integer: {}'.format(text))
    if value <= 0:
        raise ArgumentTypeError('must be positive: {}'.format(text))
    return value


class CLI:
    '''
    Command line interface to the calculator.

    Lines are infix expressions by default, or, with -k, space separated key
    commands for the live input machine (e.g. "5 + 3 × 2 =").
    '''

    DEFAULT_PROMPT = '> '

    def _report(self, error):
        '''
        Print a user error, and log it.
        '''
        self.errors.report_exception(error)
        print(error.args[0], file=stderr)
        if self.args.verbose:
            print_exception(type(error), error, error.__traceback__,
                            file=stderr)

    def _lines(self):
        for line in self.args.expressions:
            line = line.strip()
            if line:
                yield line

    def executor(self):
        '''
        Evaluate each line as a complete expression.
        '''
        evaluator = ExpressionEvaluator()
        for line in self._lines():
            try:
                result = evaluator.evaluate(line)
            except CalculatorError as e:
                self._report(e)
                continue
            self.history.record(line, result)
            print(format_result(result))

    def keys(self):
        '''
        Feed each line's words to the live input machine, then print its
        display: entry, preview and trail.
        '''
        machine = Machine(history=self.history, errors=self.errors)
        for line in self._lines():
            try:
                for word in line.split():
                    machine.feed(word)
            # Drop the rest of the line
            except CalculatorError as e:
                self._report(e)
            print(*machine.display, sep='\t')

    def dumper(self):
        '''
        Dump all tokens, then the RPN form, of each line.
        '''
        evaluator = ExpressionEvaluator()
        print('<kind>\t<repr(text)>\t<value>')
        for line in self._lines():
            try:
                for token in evaluator.lexer.lex(line):
                    print(token.kind.name, repr(token.text), token.value,
                          sep='\t')
                print('RPN', ' '.join(token.text
                                      for token
                                      in evaluator.rpn(line)),
                      sep='\t')
            except CalculatorError as e:
                self._report(e)

    def raw_grammar(self):
        '''
        Print current internally defined grammar.
        '''
        lexer = Lexer()
        print(lexer.LEXEME)

    def list_functions(self):
        '''
        Print the function table.
        '''
        for name in FUNCTIONS.names():
            info = FUNCTIONS.describe(name)
            print(info.name, info.category, info.domain, info.range,
                  info.description, sep='\t')

    def print_history(self):
        for operation in self.history:
            print(operation)
        if self.args.verbose and len(self.errors):
            for kind, count in self.errors.statistics().most_common():
                print(kind.message, count, sep='\t', file=stderr)

    def _prompting_input(self):
        '''
        Return prompting stdin.__iter__ decorator...

        If either:
        - prompt explicitly specified.
        - both stdin/out are a tty
        '''
        if self.args.prompt or \
           isatty(stdin.fileno()) and isatty(stdout.fileno()):
            return InteractiveInput(prompt=self.args.prompt or
                                    self.DEFAULT_PROMPT)
        else:
            return stdin

    def __init__(self):
        '''
        Create ready to run CLI.

        Does not run or parse command line arguments.
        '''
        self.argument_parser = ArgumentParser(
            description='Scientific calculator')
        self.argument_parser.add_argument('-v', '--verbose',
                                          action='store_true')
        self.argument_parser.add_argument('-H', '--history',
                                          action='store_true',
                                          help='print operation history at '
                                               'exit')
        self.argument_parser.add_argument('--history-size',
                                          type=_positive,
                                          default=Machine.DEFAULT_HISTORY_SIZE,
                                          metavar='N')
        int_nonint_groups = self.argument_parser.add_mutually_exclusive_group()
        int_nonint_groups.add_argument('-e', '--expression',
                                       nargs=REMAINDER,
                                       dest='expressions')
        int_nonint_groups.add_argument('-p', '--prompt',
                                       nargs=OPTIONAL,
                                       const=self.DEFAULT_PROMPT)
        main_groups = self.argument_parser.add_mutually_exclusive_group()
        for short_, long_, action in [('-G', '--raw-grammar',
                                       self.raw_grammar),
                                      ('-D', '--dump', self.dumper),
                                      ('-k', '--keys', self.keys),
                                      ('-l', '--list', self.list_functions)]:
            main_groups.add_argument(short_, long_,
                                     action='store_const',
                                     const=action,
                                     dest='action')
        self.argument_parser.set_defaults(action=self.executor,
                                          expressions=stdin)

    def run(self, *, args=None):
        '''
        Run CLI, given these args, or previously passed CLI args.
        '''
        self.args = self.argument_parser.parse_args(args)
        self.history = OperationHistory(self.args.history_size)
        self.errors = ErrorLog(Machine.DEFAULT_ERROR_HISTORY_SIZE)
        if self.args.expressions is stdin:
            self.args.expressions = self._prompting_input()
        try:
            self.args.action()
        except KeyboardInterrupt:
            exit(1)
        if self.args.history:
            self.print_history()
