from pytest import Item, fixture

from scicalc.errors import ErrorLog
from scicalc.evaluator import ExpressionEvaluator
from scicalc.history import OperationHistory
from scicalc.machine import Machine


def pytest_assertion_pass(item: Item,
                          lineno: int,
                          orig: str,
                          expl: str) -> None:
    '''
    Log every assertion, in case we later need to audit a run.

    Excessive in most cases.

    Use with pytest -rP.
    '''
    print('given', item.name + ':' + str(lineno), str(orig))  # no repr()!)
    print('actual', item.name + ':' + str(lineno),
          # Get rid of full-diff, -vv for full diff, etc.
          '\n'.join(str(expl).splitlines()[:-2]))


@fixture
def evaluator():
    return ExpressionEvaluator()


@fixture
def machine():
    return Machine(history=OperationHistory(), errors=ErrorLog())


@fixture
def press(machine):
    '''
    Feed space separated key commands to the machine; return its display.
    '''
    def press(keys):
        for key in keys.split():
            machine.feed(key)
        return machine.display
    return press
