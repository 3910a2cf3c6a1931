from LazySeq.CellStore import CellStore, CellState, Cell
import unittest


class TestCellStore(unittest.TestCase):
    def setUp(self):
        self.store = CellStore([10, 20])

    def test_seeds(self):
        assert self.store.seed_count == 2
        assert self.store.state(0) is CellState.COMPUTED
        assert self.store.value(1) == 20
        assert 1 in self.store
        assert self.store.is_seed(1)
        assert not self.store.is_seed(2)
        assert self.store.computed_indices() == [0, 1]

    def test_empty_store(self):
        store = CellStore()
        assert store.seed_count == 0
        assert len(store) == 0
        assert store.state(0) is CellState.EMPTY

    def test_missing_is_empty(self):
        assert self.store.state(5) is CellState.EMPTY
        assert 5 not in self.store
        assert self.store.owner(5) is None
        with self.assertRaises(KeyError):
            self.store.value(5)
        assert len(self.store) == 2

    def test_transitions(self):
        self.store.mark_computing(5, "me")
        assert self.store.state(5) is CellState.COMPUTING
        assert self.store.owner(5) == "me"
        assert 5 not in self.store
        with self.assertRaises(KeyError):
            self.store.value(5)
        with self.assertRaises(ValueError):
            self.store.mark_computing(5, "someone else")
        self.store.store(5, 50)
        assert self.store.state(5) is CellState.COMPUTED
        assert self.store.owner(5) is None
        assert self.store.value(5) == 50
        assert self.store.computed_indices() == [0, 1, 5]
        assert self.store.snapshot() == {0: 10, 1: 20, 5: 50}

    def test_reset(self):
        self.store.mark_computing(3, 1)
        self.store.reset(3)
        assert self.store.state(3) is CellState.EMPTY
        assert len(self.store) == 2
        self.store.reset(3)  # resetting an empty cell does nothing
        self.store.mark_computing(3, 1)
        self.store.store(3, 30)
        with self.assertRaises(ValueError):
            self.store.reset(3)
        with self.assertRaises(ValueError):
            self.store.reset(0)
        assert self.store.value(0) == 10

    def test_store_requires_computing(self):
        with self.assertRaises(ValueError):
            self.store.store(4, 40)
        with self.assertRaises(ValueError):
            self.store.store(0, 40)
        assert self.store.value(0) == 10

    def test_reset_owned(self):
        self.store.mark_computing(2, "a")
        self.store.mark_computing(3, "b")
        self.store.mark_computing(4, "a")
        self.store.store(4, 40)
        assert self.store.reset_owned("a") == [2]
        assert self.store.state(2) is CellState.EMPTY
        assert self.store.state(3) is CellState.COMPUTING
        assert self.store.value(4) == 40
        assert self.store.reset_owned("a") == []

    def test_clear(self):
        for i in (2, 3):
            self.store.mark_computing(i, None)
            self.store.store(i, i)
        self.store.mark_computing(4, None)
        assert self.store.clear() == 2
        assert self.store.computed_indices() == [0, 1]
        assert self.store.state(4) is CellState.COMPUTING

    def test_cell_repr(self):
        assert repr(Cell()) == "Cell(EMPTY)"
        assert repr(Cell(CellState.COMPUTED, 3)) == "Cell(COMPUTED, 3)"
        assert repr(Cell(CellState.COMPUTING, owner=7)) == "Cell(COMPUTING, owner=7)"
