import unittest

from twinpane.core.selection import SelectionModel
from twinpane.services.files_base import Entry, parent_entry


def _entries():
    return [parent_entry("/d")] + [Entry(n, f"/d/{n}", False) for n in ("a", "b", "c", "d")]


class SelectionBasicsTests(unittest.TestCase):
    def setUp(self):
        self.sel = SelectionModel()
        self.entries = _entries()

    def test_select_only_and_toggle(self):
        self.sel.select_only("/d/a")
        self.sel.toggle("/d/b")
        self.assertEqual(self.sel.paths, ["/d/a", "/d/b"])
        self.sel.toggle("/d/a")
        self.assertEqual(self.sel.paths, ["/d/b"])

    def test_select_all_skips_parent(self):
        self.sel.select_all(self.entries)
        self.assertEqual(self.sel.paths, ["/d/a", "/d/b", "/d/c", "/d/d"])
        self.assertNotIn("/d", self.sel)

    def test_select_range(self):
        self.sel.select_only("/d/b")
        self.sel.select_range(self.entries, "/d/d")
        self.assertEqual(sorted(self.sel.paths), ["/d/b", "/d/c", "/d/d"])

    def test_selected_entries_excludes_parent(self):
        self.sel.select_only("/d")
        self.assertEqual(self.sel.selected_entries(self.entries), [])

    def test_prune_drops_vanished_paths(self):
        self.sel.select_all(self.entries)
        self.sel.prune(self.entries[:2])
        self.assertEqual(self.sel.paths, ["/d/a"])

    def test_listeners_fire_only_on_change(self):
        calls = []
        unsubscribe = self.sel.subscribe(lambda: calls.append(1))
        self.sel.select_only("/d/a")
        self.sel.select_only("/d/a")
        self.assertEqual(len(calls), 1)
        unsubscribe()
        self.sel.clear()
        self.assertEqual(len(calls), 1)


class PointerDisambiguationTests(unittest.TestCase):
    def setUp(self):
        self.sel = SelectionModel()
        self.entries = _entries()
        self.sel.select_all(self.entries)

    def test_pointer_down_on_selected_keeps_multi_selection(self):
        self.sel.pointer_down(self.entries[2])
        self.assertEqual(len(self.sel), 4)

    def test_click_collapses_to_single(self):
        self.sel.pointer_down(self.entries[2])
        self.sel.click(self.entries[2])
        self.assertEqual(self.sel.paths, ["/d/b"])

    def test_pointer_down_on_unselected_replaces(self):
        self.sel.select_only("/d/a")
        self.sel.pointer_down(self.entries[3])
        self.assertEqual(self.sel.paths, ["/d/c"])

    def test_ctrl_pointer_down_toggles(self):
        self.sel.pointer_down(self.entries[1], ctrl=True)
        self.assertNotIn("/d/a", self.sel)
        self.sel.click(self.entries[1], ctrl=True)
        self.assertEqual(len(self.sel), 3)

    def test_parent_is_ignored(self):
        self.sel.pointer_down(self.entries[0])
        self.sel.click(self.entries[0])
        self.assertEqual(len(self.sel), 4)


class KeyboardTests(unittest.TestCase):
    def setUp(self):
        self.sel = SelectionModel()
        self.entries = _entries()

    def test_down_from_nothing_selects_first(self):
        target = self.sel.move_cursor(self.entries, "down")
        self.assertEqual(target.path, "/d")

    def test_moves_replace_selection(self):
        self.sel.select_only("/d/a")
        self.sel.move_cursor(self.entries, "down")
        self.assertEqual(self.sel.paths, ["/d/b"])
        self.sel.move_cursor(self.entries, "end")
        self.assertEqual(self.sel.paths, ["/d/d"])
        self.sel.move_cursor(self.entries, "home")
        self.assertEqual(self.sel.paths, ["/d"])

    def test_bounds_are_clamped(self):
        self.sel.select_only("/d/d")
        self.sel.move_cursor(self.entries, "down")
        self.assertEqual(self.sel.paths, ["/d/d"])
        self.sel.move_cursor(self.entries, "page_up", page_size=10)
        self.assertEqual(self.sel.paths, ["/d"])

    def test_page_down(self):
        self.sel.select_only("/d/a")
        self.sel.move_cursor(self.entries, "page_down", page_size=2)
        self.assertEqual(self.sel.paths, ["/d/c"])

    def test_shift_extends(self):
        self.sel.select_only("/d/a")
        self.sel.move_cursor(self.entries, "down", extend=True)
        self.sel.move_cursor(self.entries, "down", extend=True)
        self.assertEqual(self.sel.paths, ["/d/a", "/d/b", "/d/c"])
        self.assertEqual(self.sel.last, "/d/c")

    def test_unknown_key_raises(self):
        with self.assertRaises(ValueError):
            self.sel.move_cursor(self.entries, "left")

    def test_empty_listing(self):
        self.assertIsNone(self.sel.move_cursor([], "down"))


if __name__ == "__main__":
    unittest.main()
