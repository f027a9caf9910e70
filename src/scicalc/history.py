from collections import deque, namedtuple
from datetime import datetime
from statistics import mean


class Operation(namedtuple('Operation', 'expression result timestamp')):
    '''
    A completed calculation.
    '''
    __slots__ = ()

    def __str__(self):
        return '{} = {:g} ({:%H:%M:%S})'.format(self.expression,
                                                self.result,
                                                self.timestamp)


class OperationHistory:
    '''
    Bounded FIFO log of completed calculations.

    Append-only from the calculator's side; the oldest entry is evicted once
    capacity is reached.
    '''

    DEFAULT_CAPACITY = 100

    def __init__(self, capacity=None):
        if capacity is None:
            capacity = type(self).DEFAULT_CAPACITY
        if capacity <= 0:
            raise ValueError('capacity must be positive')
        self.operations = deque(maxlen=capacity)

    @property
    def capacity(self):
        return self.operations.maxlen

    def record(self, expression, result):
        '''
        Append a completed calculation. Returns the new Operation.
        '''
        operation = Operation(expression, result, datetime.now())
        self.operations.append(operation)
        return operation

    def last(self, count=None):
        '''
        Most recent operation, or the count most recent ones, oldest first.
        '''
        if count is None:
            return self.operations[-1] if self.operations else None
        if count <= 0:
            return []
        return list(self.operations)[-count:]

    def search(self, term, case_sensitive=False):
        '''
        Operations whose expression contains term.
        '''
        if not term or not term.strip():
            return []
        if case_sensitive:
            return [operation
                    for operation
                    in self.operations
                    if term in operation.expression]
        term = term.casefold()
        return [operation
                for operation
                in self.operations
                if term in operation.expression.casefold()]

    def average(self):
        if not self.operations:
            return None
        return mean(operation.result for operation in self.operations)

    def minimum(self):
        if not self.operations:
            return None
        return min(operation.result for operation in self.operations)

    def maximum(self):
        if not self.operations:
            return None
        return max(operation.result for operation in self.operations)

    def clear(self):
        self.operations.clear()

    def __len__(self):
        return len(self.operations)

    def __iter__(self):
        return iter(self.operations)

    def __repr__(self):
        return '<OperationHistory {}/{}>'.format(len(self), self.capacity)
