import unittest

from twinpane.services.files_mock import MockFilesBackend


class MockBackendTests(unittest.TestCase):
    def setUp(self):
        self.be = MockFilesBackend({"/a/x.txt": "x", "/a/b/y.txt": "yy", "C:/w/z": b"\x00"})

    def test_listing_root_and_nested(self):
        self.assertEqual([e.path for e in self.be.listdir_entries("/")], ["/a"])
        entries = self.be.listdir_entries("/a/")
        self.assertEqual([(e.name, e.path, e.is_dir) for e in entries], [("b", "/a/b", True), ("x.txt", "/a/x.txt", False)])

    def test_drive_paths(self):
        self.assertTrue(self.be.is_dir("C:/"))
        self.assertEqual([e.path for e in self.be.listdir_entries("C:/w")], ["C:/w/z"])

    def test_fail_on_and_hidden(self):
        self.be.fail_on["/a/x.txt"] = "denied"
        with self.assertRaisesRegex(PermissionError, "denied"):
            self.be.read_bytes("/a/x.txt")
        self.be.hidden.add("b")
        self.assertEqual([e.name for e in self.be.listdir_entries("/a")], ["x.txt"])
        self.assertTrue(self.be.exists("/a/b"))

    def test_rename_directory_moves_children(self):
        self.be.rename("/a", "/c")
        self.assertEqual(self.be.read_text("/c/b/y.txt"), "yy")
        self.assertFalse(self.be.exists("/a"))
        self.assertIn(("rename", "/a", "/c"), self.be.calls)

    def test_write_requires_parent(self):
        with self.assertRaises(FileNotFoundError):
            self.be.write_bytes("/nope/f", b"")

    def test_remove_non_empty_dir_needs_recursive(self):
        with self.assertRaises(OSError):
            self.be.remove("/a")
        self.be.remove("/a", recursive=True)
        self.assertFalse(self.be.exists("/a/b/y.txt"))


if __name__ == "__main__":
    unittest.main()
