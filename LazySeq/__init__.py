from __future__ import annotations
from .LazySequence import LazySequence, create
from .CellStore import CellStore, CellState, Cell
from .SeqExceptions import LazySequenceError, ConfigurationError, DomainError, CycleError, GeneratorError
