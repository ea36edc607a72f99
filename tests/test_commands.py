import unittest

from _support import ScriptedPrompter, entry, make_workspace
from twinpane.core.commands import Action, KeyEvent
from twinpane.core.pane import PaneId

LOCAL, REMOTE = PaneId.LOCAL, PaneId.REMOTE


class CommandTestCase(unittest.IsolatedAsyncioTestCase):
    texts = ()
    confirm = True

    async def asyncSetUp(self):
        self.prompter = ScriptedPrompter(list(self.texts), confirm=self.confirm)
        self.ws, self.local, self.remote = make_workspace(
            {"C:/a.txt": "a", "C:/b.txt": "b", "C:/dir/x": "x"},
            {"/pub/r.txt": "r", "/pub/q.txt": "q"},
            prompter=self.prompter,
        )
        await self.ws.start("C:/dir", "/pub")
        await self.ws.navigate_up(LOCAL)

    async def key(self, key, **mods):
        return await self.ws.key_press(KeyEvent(key, **mods))

    def names(self, pane):
        return [e.name for e in self.ws.visible_entries(pane)]


class MenuTests(CommandTestCase):
    async def test_entry_action_needs_an_entry(self):
        with self.assertRaises(ValueError):
            await self.ws.dispatch_command(Action.DELETE)
        with self.assertRaises(ValueError):
            await self.ws.dispatch_command("explode", entry(self.ws, LOCAL, "a.txt"))

    async def test_parent_row_only_opens(self):
        await self.ws.navigate(LOCAL, "C:/dir")
        parent = self.ws.visible_entries(LOCAL)[0]
        self.assertFalse(await self.ws.dispatch_command(Action.DELETE, parent, LOCAL))
        self.assertEqual(self.prompter.confirmations, [])
        self.assertTrue(await self.ws.dispatch_command(Action.OPEN, parent, LOCAL))
        self.assertEqual(self.ws.pane(LOCAL).current_path, "C:/")

    async def test_delete_uses_the_multi_selection(self):
        self.ws.select_only(LOCAL, entry(self.ws, LOCAL, "a.txt"))
        self.ws.select_toggle(LOCAL, entry(self.ws, LOCAL, "b.txt"))
        self.assertTrue(await self.ws.dispatch_command(Action.DELETE, entry(self.ws, LOCAL, "a.txt"), LOCAL))
        self.assertEqual(self.prompter.confirmations, ["Delete 2 item(s)?"])
        self.assertEqual(self.names(LOCAL), ["dir"])

    async def test_download_of_unselected_entry_sends_only_it(self):
        self.ws.select_only(REMOTE, entry(self.ws, REMOTE, "q.txt"))
        await self.ws.dispatch_command(Action.DOWNLOAD, entry(self.ws, REMOTE, "r.txt"), REMOTE)
        self.assertTrue(self.local.exists("C:/r.txt"))
        self.assertFalse(self.local.exists("C:/q.txt"))

    async def test_download_multi_selection(self):
        self.ws.select_all(REMOTE)
        self.assertTrue(await self.ws.dispatch_command(Action.DOWNLOAD, entry(self.ws, REMOTE, "r.txt"), REMOTE))
        self.assertTrue(self.local.exists("C:/r.txt"))
        self.assertTrue(self.local.exists("C:/q.txt"))
        self.assertEqual(self.ws.notifier.messages()[-1], "Completed: 2 succeeded, 0 failed")

    async def test_move_to_other_pane(self):
        self.assertTrue(await self.ws.dispatch_command(Action.MOVE, entry(self.ws, LOCAL, "b.txt"), LOCAL))
        self.assertTrue(self.remote.exists("/pub/b.txt"))
        self.assertNotIn("b.txt", self.names(LOCAL))

    async def test_cancelled_create_does_nothing(self):
        self.assertFalse(await self.ws.dispatch_command(Action.CREATE_FILE, pane=REMOTE))
        self.assertEqual(self.ws.transfers, ())


class CreatePromptTests(CommandTestCase):
    texts = ("fresh",)

    async def test_create_dir_and_open(self):
        self.assertTrue(await self.ws.dispatch_command(Action.CREATE_DIR_OPEN, pane=REMOTE))
        self.assertEqual(self.ws.pane(REMOTE).current_path, "/pub/fresh")
        self.assertEqual(self.prompter.asked[0][0], "New folder")


class DeclinedDeleteTests(CommandTestCase):
    confirm = False

    async def test_delete_key_without_confirmation(self):
        self.ws.select_only(LOCAL, entry(self.ws, LOCAL, "a.txt"))
        self.assertFalse(await self.key("delete"))
        self.assertTrue(self.local.exists("C:/a.txt"))
        self.assertEqual(self.prompter.confirmations, ["Delete 1 item(s)?"])


class ShortcutTests(CommandTestCase):
    texts = ("z.txt",)

    async def test_f2_renames_single_selection_and_ctrl_z_undoes(self):
        self.ws.select_only(LOCAL, entry(self.ws, LOCAL, "a.txt"))
        self.assertTrue(await self.key("f2"))
        self.assertEqual(self.prompter.asked[0][2], "a.txt")
        self.assertTrue(self.local.exists("C:/z.txt"))
        self.assertTrue(await self.key("z", ctrl=True))
        self.assertTrue(self.local.exists("C:/a.txt"))

    async def test_f2_needs_exactly_one_selected(self):
        self.ws.select_all(LOCAL)
        self.assertFalse(await self.key("f2"))
        self.assertEqual(self.prompter.asked, [])

    async def test_ctrl_a_selects_everything_but_parent(self):
        await self.ws.navigate(LOCAL, "C:/dir")
        await self.key("a", ctrl=True)
        self.assertEqual(self.ws.selection(LOCAL), ("C:/dir/x",))

    async def test_cursor_then_enter_opens_directory(self):
        self.assertTrue(await self.key("down"))
        self.assertEqual(self.ws.selection(LOCAL), ("C:/dir",))
        self.assertTrue(await self.key("enter"))
        self.assertEqual(self.ws.pane(LOCAL).current_path, "C:/dir")
        self.assertTrue(await self.key("backspace"))
        self.assertEqual(self.ws.pane(LOCAL).current_path, "C:/")

    async def test_history_keys_and_mouse_buttons(self):
        self.assertTrue(await self.key("left", alt=True))
        self.assertEqual(self.ws.pane(LOCAL).current_path, "C:/dir")
        self.assertTrue(await self.key("right", alt=True))
        self.assertEqual(self.ws.pane(LOCAL).current_path, "C:/")
        self.assertTrue(await self.ws.mouse_button(3))
        self.assertEqual(self.ws.pane(LOCAL).current_path, "C:/dir")
        self.assertTrue(await self.ws.mouse_button(4))
        self.assertIsNone(self.ws.mouse_button(1))

    async def test_shortcuts_follow_active_pane(self):
        self.ws.set_active_pane(REMOTE)
        await self.key("end")
        self.assertEqual(self.ws.selection(REMOTE), ("/pub/r.txt",))
        self.assertEqual(self.ws.selection(LOCAL), ())
        self.assertTrue(await self.key("f3"))
        self.assertTrue(self.ws.notifier.messages()[-1].startswith("Path: /pub/r.txt"))

    async def test_unbound_key(self):
        self.assertFalse(await self.key("f12"))
        self.assertTrue(await self.key("f5"))


if __name__ == "__main__":
    unittest.main()
