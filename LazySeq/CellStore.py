"""
Defines CellStore, the buffer that holds the (partially) evaluated entries of a LazySequence.
Every index has an associated Cell, which is in one of the states EMPTY, COMPUTING or COMPUTED.
Cells for indices that were never read are not materialized; they are implicitly EMPTY.
The allowed transitions are
EMPTY -> COMPUTING  (evaluation of the index starts)
COMPUTING -> COMPUTED  (evaluation finished, the value is cached forever)
COMPUTING -> EMPTY  (evaluation failed, a later read may retry)
Cells for seed values start out as COMPUTED and can never change.
CellStore itself does no locking and knows nothing about rules; the logic what constitutes demand is in LazySequence.
"""
from __future__ import annotations
from enum import IntEnum
from typing import Any, Dict, List, Optional, Iterable, Hashable
import logging

cell_logger = logging.getLogger('lazyseq.cells')


class CellState(IntEnum):
    EMPTY = 0
    COMPUTING = 1
    COMPUTED = 2


class Cell:
    """
    Evaluation state of a single index. value is only meaningful if state is COMPUTED.
    owner is set while state is COMPUTING and identifies who is evaluating the cell (a thread identifier).
    """
    __slots__ = ['state', 'value', 'owner']

    def __init__(self, /, state: CellState = CellState.EMPTY, value: Any = None, owner: Optional[Hashable] = None):
        self.state: CellState = state
        self.value: Any = value
        self.owner: Optional[Hashable] = owner

    def __repr__(self) -> str:
        if self.state is CellState.COMPUTED:
            return "Cell(COMPUTED, %r)" % (self.value,)
        elif self.state is CellState.COMPUTING:
            return "Cell(COMPUTING, owner=%r)" % (self.owner,)
        return "Cell(EMPTY)"


class CellStore:
    """
    Mapping index -> Cell. The first seed_count indices are pre-populated with the seeds on construction.
    """
    __slots__ = ['cells', 'seed_count']

    def __init__(self, seeds: Iterable = (), /):
        self.cells: Dict[int, Cell] = {}
        for i, seed in enumerate(seeds):
            self.cells[i] = Cell(CellState.COMPUTED, seed)
        self.seed_count: int = len(self.cells)

    def __len__(self, /) -> int:
        """Number of materialized (i.e. COMPUTING or COMPUTED) cells"""
        return len(self.cells)

    def __contains__(self, index: int, /) -> bool:
        """index in store iff the value at index is cached."""
        return self.state(index) is CellState.COMPUTED

    def is_seed(self, index: int, /) -> bool:
        return 0 <= index < self.seed_count

    def state(self, index: int, /) -> CellState:
        cell = self.cells.get(index)
        if cell is None:
            return CellState.EMPTY
        return cell.state

    def owner(self, index: int, /) -> Optional[Hashable]:
        cell = self.cells.get(index)
        if cell is None:
            return None
        return cell.owner

    def value(self, index: int, /) -> Any:
        cell = self.cells.get(index)
        if cell is None or cell.state is not CellState.COMPUTED:
            raise KeyError(index)
        return cell.value

    def mark_computing(self, index: int, owner: Hashable, /) -> None:
        if self.state(index) is not CellState.EMPTY:
            raise ValueError("Cell %d is not empty" % index)
        self.cells[index] = Cell(CellState.COMPUTING, owner=owner)

    def store(self, index: int, value: Any, /) -> None:
        cell = self.cells.get(index)
        if cell is None or cell.state is not CellState.COMPUTING:
            raise ValueError("Cell %d is not being computed" % index)
        cell.state = CellState.COMPUTED
        cell.value = value
        cell.owner = None

    def reset(self, index: int, /) -> None:
        """
        Undo mark_computing after a failed evaluation. Resetting an EMPTY cell does nothing.
        """
        if self.is_seed(index):
            raise ValueError("Seed cell %d can not be reset" % index)
        cell = self.cells.get(index)
        if cell is None:
            return
        if cell.state is CellState.COMPUTED:
            raise ValueError("Cell %d is already computed" % index)
        del self.cells[index]

    def reset_owned(self, owner: Hashable, /) -> List[int]:
        """
        Resets every COMPUTING cell owned by owner and returns their indices.
        """
        to_reset = [i for i, cell in self.cells.items() if cell.state is CellState.COMPUTING and cell.owner == owner]
        for i in to_reset:
            del self.cells[i]
        return to_reset

    def clear(self, /) -> int:
        """
        Drops all computed non-seed cells and returns their number. Cells that are currently COMPUTING are kept.
        """
        to_drop = [i for i, cell in self.cells.items() if i >= self.seed_count and cell.state is CellState.COMPUTED]
        for i in to_drop:
            del self.cells[i]
        cell_logger.debug("Dropped %d cached cells", len(to_drop))
        return len(to_drop)

    def computed_indices(self, /) -> List[int]:
        return sorted(i for i, cell in self.cells.items() if cell.state is CellState.COMPUTED)

    def snapshot(self, /) -> Dict[int, Any]:
        """
        Returns a dict index -> value of all COMPUTED cells, ordered by index.
        """
        return {i: self.cells[i].value for i in self.computed_indices()}
