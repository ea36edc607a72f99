import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from twinpane.config import storage
from twinpane.config.models import AppConfig, SFTPConfig


class ConfigStorageTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.home = Path(self._tmp.name)
        patcher = mock.patch.dict(os.environ, {"TWINPANE_HOME": str(self.home)})
        patcher.start()
        self.addCleanup(patcher.stop)
        self.addCleanup(self._tmp.cleanup)

    def test_missing_file_gives_defaults(self):
        self.assertEqual(storage.load_config(), {})
        self.assertEqual(storage.load_app_config(), AppConfig())

    def test_app_config_round_trip_and_coercion(self):
        storage.save_config({"app": {"drag_threshold_px": "8", "page_size": "bad", "unknown": 1}})
        cfg = storage.load_app_config()
        self.assertEqual(cfg.drag_threshold_px, 8.0)
        self.assertEqual(cfg.page_size, 10)
        cfg.language = "tr"
        storage.save_app_config(cfg)
        self.assertEqual(storage.load_app_config().language, "tr")

    def test_corrupt_file_is_moved_aside(self):
        (self.home / "config.json").write_text("{not json", encoding="utf-8")
        self.assertEqual(storage.load_config(), {})
        self.assertTrue((self.home / "config.json.bak").exists())

    def test_recent_folders(self):
        for p in ("/a", "/b", "/a"):
            storage.add_recent_folder(p)
        self.assertEqual(storage.load_recent_folders(), ["/a", "/b"])
        for i in range(20):
            storage.add_recent_folder(f"/d{i}")
        self.assertEqual(len(storage.load_recent_folders()), storage.RECENT_LIMIT)

    def test_initial_local_path_prefers_existing_saved_path(self):
        storage.save_last_local_path(str(self.home))
        self.assertEqual(storage.initial_local_path(), str(self.home))
        storage.save_last_local_path(str(self.home / "gone"))
        self.assertNotEqual(storage.initial_local_path(), str(self.home / "gone"))

    def test_connection_never_stores_password(self):
        storage.save_connection(SFTPConfig(host="h", port=2222, username="u", password="secret"))
        raw = json.loads((self.home / "config.json").read_text(encoding="utf-8"))
        self.assertNotIn("password", raw["connection"])
        conn = storage.load_connection()
        self.assertEqual((conn.host, conn.port, conn.username, conn.password), ("h", 2222, "u", ""))

    def test_connection_requires_host(self):
        with self.assertRaises(ValueError):
            storage.save_connection(SFTPConfig(host=" "))


if __name__ == "__main__":
    unittest.main()
