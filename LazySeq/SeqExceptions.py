"""
This module defines the exceptions raised by lazy sequences.
All of them derive from LazySequenceError, so callers can catch everything the library raises with a single clause.
"""
from __future__ import annotations
from typing import Optional, Tuple, Iterable


class LazySequenceError(Exception):
    pass


class ConfigurationError(LazySequenceError, ValueError):
    """
    Invalid arguments when creating a LazySequence (e.g. a bound that does not cover the seeds). Only raised on construction.
    """
    pass


class DomainError(LazySequenceError, IndexError):
    """
    Raised when reading an index that is negative or exceeds the configured bound. The cache is never modified.
    """
    def __init__(self, index: int, bound: Optional[int] = None, reason: str = ""):
        self.index = index
        self.bound = bound
        if not reason:
            if index < 0:
                reason = "negative index %d is not supported" % index
            else:
                reason = "index %d exceeds bound %s" % (index, bound)
        super().__init__(reason)


class CycleError(LazySequenceError):
    """
    Raised when the value at index is needed to compute itself.
    chain is the sequence of indices that were under evaluation when the cycle was detected, starting with the
    outermost one and ending with index again (e.g. (5, 4, 5)).
    """
    def __init__(self, index: int, chain: Iterable[int] = ()):
        self.index = index
        self.chain: Tuple[int, ...] = tuple(chain)
        if self.chain:
            super().__init__("cyclic dependency on index %d: %s" % (index, " -> ".join(map(str, self.chain))))
        else:
            super().__init__("cyclic dependency on index %d" % index)


class GeneratorError(LazySequenceError):
    """
    Wraps an exception raised by the generator rule while computing index. The original exception is available as
    cause (and as __cause__, since we always raise this from the original).
    """
    def __init__(self, index: int, cause: BaseException):
        self.index = index
        self.cause = cause
        super().__init__("generator rule failed for index %d: %r" % (index, cause))
