import asyncio
import unittest

from twinpane.core.notifications import Notifier, ToastLevel
from twinpane.core.pane import PaneController, PaneId
from twinpane.services.file_ops import FileOperations
from twinpane.services.files_mock import MockFilesBackend


class PaneControllerTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.local = MockFilesBackend({"C:/w/doc.txt": "d"}, dirs=("C:/",))
        self.remote = MockFilesBackend({
            "/pub/readme.txt": "r",
            "/pub/reports/f10.csv": "",
            "/pub/reports/f2.csv": "",
            "/pub/reports/2024/s.csv": "",
        })
        self.notifier = Notifier(ttl=0)
        self.changes = []
        ops = FileOperations(self.local, self.remote)
        self.pane = PaneController(
            PaneId.REMOTE, ops, self.notifier, on_path_changed=lambda p, path: self.changes.append(path)
        )
        self.local_pane = PaneController(PaneId.LOCAL, ops, self.notifier)

    async def test_load_prepends_parent_row_below_root(self):
        self.assertTrue(await self.pane.load("/pub"))
        entries = self.pane.state.entries
        self.assertTrue(entries[0].is_parent)
        self.assertEqual(entries[0].path, "/pub")
        self.assertEqual([e.name for e in entries[1:]], ["reports", "readme.txt"])
        self.assertEqual(self.pane.state.breadcrumbs, ("pub",))
        self.assertFalse(self.pane.state.is_loading)

        await self.pane.load("/")
        self.assertFalse(any(e.is_parent for e in self.pane.state.entries))
        self.assertEqual(self.changes, ["/pub", "/"])

    async def test_failed_load_keeps_state_and_posts_one_error(self):
        await self.pane.load("/pub")
        before = self.pane.state
        self.assertFalse(await self.pane.load("/nope"))
        self.assertEqual(self.pane.state, before)
        self.assertEqual(len(self.notifier.messages(ToastLevel.ERROR)), 1)
        self.assertEqual(self.pane.history.stack, ("/pub",))

    async def test_duplicate_load_is_dropped(self):
        results = await asyncio.gather(self.pane.load("/pub"), self.pane.load("/pub"))
        self.assertEqual(sorted(results), [False, True])
        self.assertEqual(self.remote.calls.count(("list", "/pub")), 1)

    async def test_older_listing_is_discarded(self):
        results = await asyncio.gather(self.pane.load("/pub"), self.pane.load("/pub/reports"))
        self.assertEqual(results, [False, True])
        self.assertEqual(self.pane.current_path, "/pub/reports")
        self.assertEqual(self.pane.history.stack, ("/pub/reports",))

    async def test_back_and_forward(self):
        await self.pane.navigate("/pub")
        await self.pane.navigate("/pub/reports")
        self.assertTrue(await self.pane.go_back())
        self.assertEqual(self.pane.current_path, "/pub")
        self.assertTrue(await self.pane.go_forward())
        self.assertEqual(self.pane.current_path, "/pub/reports")
        self.assertFalse(await self.pane.go_forward())

        await self.pane.go_back()
        await self.pane.navigate("/")
        self.assertEqual(self.pane.history.stack, ("/pub", "/"))

    async def test_refresh_does_not_touch_history(self):
        self.assertFalse(await self.pane.refresh())
        await self.pane.navigate("/pub")
        await self.pane.refresh()
        await self.pane.navigate("/pub")
        self.assertEqual(self.pane.history.stack, ("/pub",))

    async def test_breadcrumb_and_up(self):
        await self.pane.navigate("/pub/reports/2024")
        await self.pane.navigate_breadcrumb(0)
        self.assertEqual(self.pane.current_path, "/pub")
        self.assertFalse(await self.pane.navigate_breadcrumb(7))
        await self.pane.navigate_up()
        self.assertEqual(self.pane.current_path, "/")
        self.assertFalse(await self.pane.navigate_up())

    async def test_local_drive_paths(self):
        await self.local_pane.navigate("C:/w")
        self.assertTrue(self.local_pane.state.entries[0].is_parent)
        await self.local_pane.navigate_up()
        self.assertEqual(self.local_pane.current_path, "C:/")
        self.assertFalse(self.local_pane.state.entries[0].is_parent)
        await self.local_pane.navigate("C:/w")
        await self.local_pane.go_home()
        self.assertEqual(self.local_pane.current_path, "C:/")

    async def test_filter_and_natural_order(self):
        await self.pane.navigate("/pub/reports")
        self.assertEqual([e.name for e in self.pane.visible_entries()], ["..", "2024", "f2.csv", "f10.csv"])
        self.pane.set_filter(" F1 ")
        self.assertEqual([e.name for e in self.pane.visible_entries()], ["..", "f10.csv"])

    async def test_selection_pruned_on_reload(self):
        await self.pane.navigate("/pub")
        self.pane.selection.select_only("/pub/readme.txt")
        self.remote.remove("/pub/readme.txt")
        await self.pane.refresh()
        self.assertEqual(self.pane.selection.paths, [])

    async def test_open_entry(self):
        await self.pane.navigate("/pub")
        readme = self.pane.entry_for("/pub/readme.txt")
        self.assertFalse(await self.pane.open_entry(readme))
        await self.pane.open_entry(self.pane.entry_for("/pub/reports"))
        self.assertEqual(self.pane.current_path, "/pub/reports")
        await self.pane.open_entry(self.pane.state.entries[0])
        self.assertEqual(self.pane.current_path, "/pub")

    async def test_observers_see_loading_flag(self):
        seen = []
        unsubscribe = self.pane.subscribe(lambda: seen.append(self.pane.state.is_loading))
        await self.pane.navigate("/pub")
        unsubscribe()
        await self.pane.navigate("/")
        self.assertEqual(seen, [True, False])


if __name__ == "__main__":
    unittest.main()
