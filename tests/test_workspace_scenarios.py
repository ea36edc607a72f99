import asyncio
import unittest

from _support import ScriptedPrompter, fast_config, make_workspace, publish_rows, row_center
from twinpane.core.commands import KeyEvent
from twinpane.core.drag import PointerEvent
from twinpane.core.pane import PaneId
from twinpane.core.transfer_queue import TransferStatus
from twinpane.core.workspace import Workspace
from twinpane.services.file_ops import FileOperations
from twinpane.services.files_mock import MockFilesBackend

LOCAL, REMOTE = PaneId.LOCAL, PaneId.REMOTE


class DragDownloadScenario(unittest.IsolatedAsyncioTestCase):
    async def test_remote_file_dropped_on_local_background(self):
        ws, local, remote = make_workspace({}, {"/report.pdf": b"%PDF"})
        await ws.start("C:/", "/")
        publish_rows(ws)

        seen = []

        def track():
            if ws.transfers and (not seen or seen[-1] != ws.transfers[0].status):
                seen.append(ws.transfers[0].status)

        ws.queue.subscribe(track)

        x, y = row_center(ws, REMOTE, "report.pdf")
        ws.begin_drag(REMOTE, PointerEvent(x, y), ws.visible_entries(REMOTE)[0])
        ws.pointer_move(PointerEvent(x - 50, y))
        ws.pointer_move(PointerEvent(200, 300))
        request = ws.pointer_up(PointerEvent(200, 300))
        self.assertEqual(request.source_paths, ("/report.pdf",))
        self.assertFalse(request.dest_is_remote)

        await ws.drain()
        self.assertEqual(seen, [TransferStatus.QUEUED, TransferStatus.TRANSFERRING, TransferStatus.SUCCESS])
        self.assertEqual(ws.transfers[0].status, TransferStatus.SUCCESS)
        self.assertEqual(local.read_bytes("C:/report.pdf"), b"%PDF")
        self.assertEqual([e.name for e in ws.visible_entries(LOCAL)], ["report.pdf"])
        self.assertEqual(ws.notifier.messages(), ["Downloaded report.pdf"])


class DeleteKeyScenario(unittest.IsolatedAsyncioTestCase):
    async def test_partial_delete_failure(self):
        prompter = ScriptedPrompter(confirm=True)
        ws, local, _ = make_workspace(
            {"C:/one.txt": "1", "C:/two.txt": "2", "C:/three.txt": "3"}, {}, prompter=prompter
        )
        local.fail_on["C:/two.txt"] = "in use"
        await ws.start("C:/", "/")
        ws.select_all(LOCAL)

        await ws.key_press(KeyEvent("delete"))

        self.assertEqual(prompter.confirmations, ["Delete 3 item(s)?"])
        self.assertEqual(ws.notifier.messages(), ["Deleted 2 item(s)", "Failed to delete 1 item(s)"])
        self.assertEqual([e.name for e in ws.visible_entries(LOCAL)], ["two.txt"])
        failed = [i for i in ws.transfers if i.status is TransferStatus.FAILED]
        self.assertEqual([(i.file_name, i.error) for i in failed], [("two.txt", "in use")])
        self.assertEqual(ws.selection(LOCAL), ("C:/two.txt",))


class LifecycleTests(unittest.IsolatedAsyncioTestCase):
    async def test_start_without_remote_then_attach(self):
        local = MockFilesBackend({"C:/w/f": "f"}, dirs=("C:/",))
        paths = []
        ws = Workspace(FileOperations(local), fast_config(), on_local_path_changed=paths.append)
        await ws.start("C:/")
        self.assertEqual(ws.pane_state(REMOTE).current_path, "")
        await ws.navigate(LOCAL, "C:/w")
        self.assertEqual(paths, ["C:/", "C:/w"])

        remote = MockFilesBackend.demo()
        self.assertTrue(await ws.attach_remote(remote, "/pub"))
        self.assertEqual([e.name for e in ws.visible_entries(REMOTE)][:2], ["..", "reports"])
        self.assertFalse(await ws.attach_remote(None))
        self.assertFalse(ws.ops.has_remote)

    async def test_task_errors_are_reported(self):
        ws, _, _ = make_workspace()
        errors = []
        ws.on_task_error = lambda exc, err_id: errors.append((type(exc), err_id))

        async def boom():
            raise RuntimeError("boom")

        ws.spawn(boom())
        await ws.drain()
        await asyncio.sleep(0)
        self.assertEqual(len(errors), 1)
        self.assertIs(errors[0][0], RuntimeError)
        self.assertTrue(errors[0][1])

    async def test_clear_completed_transfers(self):
        ws, _, remote = make_workspace({}, {"/r.txt": "r"})
        await ws.start("C:/", "/")
        await ws.executor.transfer_entries(ws.visible_entries(REMOTE), REMOTE)
        self.assertEqual(len(ws.transfers), 1)
        ws.clear_completed_transfers()
        self.assertEqual(ws.transfers, ())
        self.assertIsNone(ws.current_transfer)


if __name__ == "__main__":
    unittest.main()
