"""
Defines LazySequence, a random-access sequence whose entries are computed on demand and cached.
Usage:
fib = LazySequence([0, 1], lambda n, seq: seq[n-1] + seq[n-2])
fib[10] >> 55
The first entries are given literally (the seeds), every other entry is computed by calling rule(index, seq) the first
time index is read. The rule gets the sequence itself as its second argument, so it can read other entries, which may
in turn trigger their computation. Each index is computed at most once; after that, reads are served from the cache.
(e.g. after fib[10], fib[7] does not call the rule again)

Note that evaluation is entirely demand-driven and recursive: the first read of fib[n] on a cold sequence needs a call
stack depth proportional to n. Use fill(n) to compute entries in ascending order if that becomes a problem.

If an index's rule (directly or indirectly) needs the value at that very index, we raise a CycleError rather than
recursing forever. If the rule raises, the caller receives a GeneratorError and the entry stays uncomputed, so a later
read retries.

By default, a LazySequence may be read from several threads. Evaluation of the rule happens outside the lock.
A thread that needs an entry some other thread is currently computing waits for it. We keep track of who waits for whom,
so that threads that wait on each other get a CycleError instead of a deadlock.
"""
from __future__ import annotations
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Union, Hashable, Final
import contextlib
import itertools
import logging
import operator
import threading

from .CellStore import CellStore, CellState
from .SeqExceptions import LazySequenceError, ConfigurationError, DomainError, CycleError, GeneratorError
from .conf import get_setting
from LazySeqProject.conditional_log import conditional_log

sequence_logger = logging.getLogger('lazyseq.sequence')

Rule = Callable[[int, "LazySequence"], Any]

# Default for bound: use LAZY_SEQUENCE_DEFAULT_BOUND. An explicit None always means unbounded.
FROM_SETTINGS: Final = object()


class LazySequence:
    """
    Lazily evaluated, memoizing sequence. See the module docstring.
    seeds are the (finitely many) literal values at indices 0, 1, ..., len(seeds)-1.
    rule(index, seq) computes the value at any other index. It is never called for seeds and never during __init__.
    bound, if not None, is the largest valid index. Without a bound, every non-negative index is valid. If bound is
    not given at all, LAZY_SEQUENCE_DEFAULT_BOUND is used.
    thread_safe=False skips all locking. Only do that if the sequence is never shared between threads.
    """
    __slots__ = ['_seeds', '_rule', '_bound', '_cells', '_thread_safe', '_lock', '_waiting', '_local', '_evaluations']

    def __init__(self, seeds: Iterable = (), rule: Rule = None, /, bound: Optional[int] = FROM_SETTINGS, *, thread_safe: Optional[bool] = None):
        self._seeds: tuple = tuple(seeds)
        if bound is FROM_SETTINGS:
            bound = get_setting('LAZY_SEQUENCE_DEFAULT_BOUND')
        if thread_safe is None:
            thread_safe = get_setting('LAZY_SEQUENCE_THREAD_SAFE')
        try:  # catch and re-raise for logging.
            if not callable(rule):
                raise ConfigurationError("rule must be callable")
            if bound is not None:
                if type(bound) is bool or not isinstance(bound, int):
                    raise ConfigurationError("bound must be an integer or None")
                if bound < len(self._seeds) - 1:
                    raise ConfigurationError("bound %d is smaller than the largest seed index %d" % (bound, len(self._seeds) - 1))
        except ConfigurationError:
            sequence_logger.exception("Invalid LazySequence configuration")
            raise
        self._rule: Rule = rule
        self._bound: Optional[int] = bound
        self._cells: CellStore = CellStore(self._seeds)
        self._thread_safe: bool = bool(thread_safe)
        # _lock guards _cells and _waiting. Without thread safety, it is a no-op context manager.
        self._lock: Union[threading.Condition, contextlib.nullcontext] = threading.Condition() if self._thread_safe else contextlib.nullcontext()
        self._waiting: Dict[Hashable, int] = {}  # thread ident -> index that thread waits for
        self._local = threading.local()  # per-thread stack of indices currently under evaluation
        self._evaluations: int = 0

    def __repr__(self) -> str:
        return "LazySequence(seeds=%r, computed=%d, bound=%r)" % (self._seeds, len(self._cells.computed_indices()), self._bound)

    @property
    def seeds(self, /) -> tuple:
        return self._seeds

    @property
    def rule(self, /) -> Rule:
        return self._rule

    @property
    def bound(self, /) -> Optional[int]:
        return self._bound

    def has_bound(self, /) -> bool:
        return self._bound is not None

    @property
    def length(self, /) -> Optional[int]:
        """
        Number of valid indices, i.e. bound + 1. None indicates that the sequence is unbounded.
        """
        if self._bound is None:
            return None
        return self._bound + 1

    @property
    def thread_safe(self, /) -> bool:
        return self._thread_safe

    @property
    def evaluations(self, /) -> int:
        """
        Number of times the rule successfully computed a value.
        """
        return self._evaluations

    def __len__(self, /) -> int:
        if self._bound is None:
            raise TypeError("unbounded LazySequence has no len()")
        return self._bound + 1

    def _check_index(self, index: int, /) -> int:
        if type(index) is bool:
            raise TypeError("index must be an integer, not bool")
        index = operator.index(index)
        if index < 0 or (self._bound is not None and index > self._bound):
            raise DomainError(index, self._bound)
        return index

    def _chain(self, /) -> List[int]:
        try:
            return self._local.chain
        except AttributeError:
            self._local.chain = []
            return self._local.chain

    def _cycle(self, index: int, /) -> CycleError:
        chain = self._chain() + [index]
        conditional_log(sequence_logger, "Cyclic dependency detected: %s", " -> ".join(map(str, chain)),
                        normal_level='warning', test_level='info')
        return CycleError(index, chain)

    def _waits_for(self, owner: Hashable, me: Hashable, /) -> bool:
        """
        Checks whether owner (transitively) waits for a cell that is being computed by me. Needs to hold _lock.
        """
        seen = set()
        while owner is not None and owner not in seen:
            if owner == me:
                return True
            seen.add(owner)
            waited_index = self._waiting.get(owner)
            if waited_index is None:
                return False
            owner = self._cells.owner(waited_index)
        return False

    def get(self, index: int, /) -> Any:
        """
        Returns the value at index, computing it (and everything it depends on) first if needed.
        Raises DomainError for invalid indices, CycleError if the value depends on itself and GeneratorError if
        the rule raised.
        """
        index = self._check_index(index)
        cells = self._cells
        me = threading.get_ident()
        with self._lock:
            while True:
                state = cells.state(index)
                if state is CellState.COMPUTED:
                    return cells.value(index)
                if state is CellState.EMPTY:
                    cells.mark_computing(index, me)
                    break
                assert state is CellState.COMPUTING
                owner = cells.owner(index)
                # Without thread safety, we assume a single owner, so anything COMPUTING is an ancestor of this call.
                if not self._thread_safe or owner == me or self._waits_for(owner, me):
                    raise self._cycle(index)
                self._waiting[me] = index
                try:
                    self._lock.wait()
                finally:
                    del self._waiting[me]
        if self._chain():
            return self._evaluate(index)
        # Outermost read of this thread: the per-frame cleanup in _evaluate may itself fail when we are close to the
        # recursion limit, so we release whatever this thread still holds once the stack has unwound.
        try:
            return self._evaluate(index)
        except BaseException:
            self._chain().clear()
            self._release_owned(me)
            raise

    def _release_owned(self, me: Hashable, /) -> None:
        with self._lock:
            released = self._cells.reset_owned(me)
            if released:
                sequence_logger.debug("Released %d cells left behind by a failed evaluation", len(released))
                if self._thread_safe:
                    self._lock.notify_all()

    def _evaluate(self, index: int, /) -> Any:
        sequence_logger.debug("Computing index %d", index)
        chain = self._chain()
        chain.append(index)
        try:
            value = self._rule(index, self)
        except LazySequenceError:
            # Errors from nested reads (cycles, domain errors, failed rules for other indices) are passed on unchanged.
            self._abandon(index)
            raise
        except Exception as e:
            self._abandon(index)
            sequence_logger.info("Rule failed for index %d: %r", index, e)
            raise GeneratorError(index, e) from e
        except BaseException:
            self._abandon(index)
            raise
        finally:
            chain.pop()
        with self._lock:
            self._cells.store(index, value)
            self._evaluations += 1
            if self._thread_safe:
                self._lock.notify_all()
        return value

    def _abandon(self, index: int, /) -> None:
        with self._lock:
            self._cells.reset(index)
            if self._thread_safe:
                self._lock.notify_all()

    def __getitem__(self, item: Union[int, slice], /) -> Any:
        if isinstance(item, slice):
            return [self.get(i) for i in self._slice_indices(item)]
        return self.get(item)

    def _slice_indices(self, item: slice, /) -> range:
        if any(x is not None and x < 0 for x in (item.start, item.stop)):
            raise DomainError(min(x for x in (item.start, item.stop) if x is not None and x < 0), self._bound,
                              "negative indexes are not supported")
        if self._bound is not None:
            return range(*item.indices(self._bound + 1))
        step = 1 if item.step is None else item.step
        if step == 0:
            raise ValueError("slice step cannot be zero")
        if step > 0:
            if item.stop is None:
                raise ValueError("slices of an unbounded LazySequence need a stop")
            return range(0 if item.start is None else item.start, item.stop, step)
        if item.start is None:
            raise ValueError("slices of an unbounded LazySequence with negative step need a start")
        if item.stop is None:
            return range(item.start, -1, step)
        return range(item.start, item.stop, step)

    def __iter__(self, /) -> Iterator:
        """
        Iterates over all entries, starting at index 0. This never terminates for unbounded sequences.
        """
        indices = itertools.count() if self._bound is None else range(self._bound + 1)
        for i in indices:
            yield self.get(i)

    def fill(self, stop: int, /) -> None:
        """
        Computes all entries with index < stop in ascending order. For rules that depend on the previous entries, this
        keeps the recursion depth of each evaluation small.
        """
        if stop > len(self._seeds):
            self._check_index(stop - 1)
        sequence_logger.debug("Filling up to index %d", stop)
        for i in range(len(self._seeds), stop):
            self.get(i)

    def clear(self, /) -> int:
        """
        Forgets all computed entries (seeds are kept). Returns the number of forgotten entries.
        """
        with self._lock:
            return self._cells.clear()

    def replace_rule(self, rule: Rule, /) -> None:
        """
        Sets a new rule. Already computed entries are kept, only entries computed afterwards use the new rule.
        """
        if not callable(rule):
            raise ConfigurationError("rule must be callable")
        with self._lock:
            self._rule = rule

    def state(self, index: int, /) -> CellState:
        index = self._check_index(index)
        with self._lock:
            return self._cells.state(index)

    def is_computed(self, index: int, /) -> bool:
        return self.state(index) is CellState.COMPUTED

    def computed_indices(self, /) -> List[int]:
        with self._lock:
            return self._cells.computed_indices()

    def snapshot(self, /) -> Dict[int, Any]:
        """
        Returns a dict index -> value of everything that has been computed so far, including seeds.
        """
        with self._lock:
            return self._cells.snapshot()


def create(seeds: Iterable, rule: Rule, bound: Optional[int] = FROM_SETTINGS, *, thread_safe: Optional[bool] = None) -> LazySequence:
    """
    Same as LazySequence(seeds, rule, bound, thread_safe=thread_safe).
    """
    return LazySequence(seeds, rule, bound, thread_safe=thread_safe)
