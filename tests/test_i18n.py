import unittest

from twinpane.core import i18n


class I18nTests(unittest.TestCase):
    def tearDown(self):
        i18n.set_language("en")

    def test_language_files_have_the_same_keys(self):
        self.assertEqual(i18n.validate_language_files(), {"en": [], "tr": []})

    def test_english_messages(self):
        i18n.set_language("en")
        self.assertEqual(i18n.t("transfer.downloaded", name="report.pdf"), "Downloaded report.pdf")
        self.assertEqual(i18n.t("transfer.completed", ok=2, failed=1), "Completed: 2 succeeded, 1 failed")
        self.assertEqual(i18n.t("delete.done", count=2), "Deleted 2 item(s)")

    def test_unknown_key(self):
        self.assertEqual(i18n.t("no.such.key"), "[no.such.key]")
        self.assertEqual(i18n.t("transfer"), "[transfer]")

    def test_switch_language(self):
        i18n.set_language("tr")
        self.assertEqual(i18n.current_language(), "tr")
        self.assertEqual(i18n.t("transfer.same_path"), "Kaynak ve hedef aynı")

    def test_unsupported_language(self):
        with self.assertRaises(ValueError):
            i18n.set_language("xx")


if __name__ == "__main__":
    unittest.main()
