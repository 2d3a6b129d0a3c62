import unittest

from parkfinder.store import LoadState, LotStore

from fakes import make_lot


class TestLotStore(unittest.TestCase):
    def setUp(self):
        self.store = LotStore()
        self.store.replace([make_lot(1, capacity=10, available=3), make_lot(2, capacity=2, available=0)])

    def test_replace_sets_ready(self):
        self.assertEqual(self.store.state, LoadState.READY)
        self.assertEqual([l.id for l in self.store.lots], [1, 2])

    def test_replace_is_whole_list(self):
        before = self.store.lots
        self.store.replace([make_lot(3)])
        self.assertEqual([l.id for l in self.store.lots], [3])
        self.assertEqual(len(before), 2)

    def test_selection_follows_list(self):
        self.store.select(1)
        self.store.adjust_available(1, -1)
        self.assertEqual(self.store.selected.available, 2)

    def test_select_unknown(self):
        with self.assertRaises(KeyError):
            self.store.select(99)

    def test_selection_gone_after_refresh(self):
        self.store.select(2)
        self.store.replace([make_lot(1)])
        self.assertIsNone(self.store.selected)

    def test_adjust_refuses_below_zero(self):
        self.assertFalse(self.store.adjust_available(2, -1))
        self.assertEqual(self.store.get(2).available, 0)

    def test_adjust_refuses_above_capacity(self):
        self.store.replace([make_lot(1, capacity=3, available=3)])
        self.assertFalse(self.store.adjust_available(1, +1))
        self.assertEqual(self.store.get(1).available, 3)

    def test_adjust_unknown_lot(self):
        self.assertFalse(self.store.adjust_available(42, -1))

    def test_adjust_leaves_other_lots(self):
        other = self.store.get(2)
        self.store.adjust_available(1, -1)
        self.assertIs(self.store.get(2), other)

    def test_failure_keeps_list(self):
        self.store.mark_failed("Failed to fetch parking lots")
        self.assertEqual(self.store.state, LoadState.ERROR)
        self.assertEqual(len(self.store.lots), 2)
        self.store.replace([])
        self.assertIsNone(self.store.error)

    def test_loading_clears_previous_error(self):
        self.store.mark_failed("Failed to fetch parking lots")
        self.store.mark_loading()
        self.assertEqual(self.store.state, LoadState.LOADING)
        self.assertIsNone(self.store.error)

    def test_generation_counts_replaces_only(self):
        start = self.store.generation
        self.store.adjust_available(1, -1)
        self.store.select(1)
        self.assertEqual(self.store.generation, start)
        self.store.replace([make_lot(1)])
        self.assertEqual(self.store.generation, start + 1)


if __name__ == "__main__":
    unittest.main()
