import os

import pytest

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'LazySeqProject.settings')

from django.conf import settings

settings.TESTING_MODE = True

from .LazySequence import LazySequence


class CountingRule:
    """
    Fibonacci rule that records how often it was called for each index.
    """
    def __init__(self):
        self.calls = {}

    def __call__(self, n: int, seq: LazySequence):
        self.calls[n] = self.calls.get(n, 0) + 1
        return seq[n-1] + seq[n-2]


@pytest.fixture(scope='function')
def counting_rule():
    return CountingRule()


@pytest.fixture(scope='function')
def fib(counting_rule):
    return LazySequence([0, 1], counting_rule)
