import json
import sys
import tempfile
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "core"))
sys.path.insert(0, str(ROOT / "packages" / "display_protocol"))

from xsession_core.config import SessionConfig, load_config, save_config


class ConfigTests(unittest.TestCase):
    def test_load_default_when_missing(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "missing.json"
            cfg = load_config(path)
            self.assertIsInstance(cfg, SessionConfig)
            self.assertTrue(cfg.auth.allow_fallback)
            self.assertEqual(cfg.auth.xauth_command, "xauth")
            self.assertIsNone(cfg.connect.timeout_s)
            self.assertEqual(cfg.display.default, "")

    def test_save_and_reload(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            cfg = load_config(path)
            cfg.display.default = "remote:1"
            cfg.auth.allow_fallback = False
            cfg.connect.timeout_s = 3.5
            save_config(cfg, path)
            reloaded = load_config(path)
            self.assertEqual(reloaded.display.default, "remote:1")
            self.assertFalse(reloaded.auth.allow_fallback)
            self.assertEqual(reloaded.connect.timeout_s, 3.5)

    def test_corrupt_file_yields_defaults(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            path.write_text("{not json", encoding="utf-8")
            cfg = load_config(path)
            self.assertTrue(cfg.auth.allow_fallback)

    def test_normalization(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            raw = {
                "auth": {"xauth_command": "", "authority_file": "", "unknown": 1},
                "connect": {"timeout_s": -2},
                "diagnostics": {"keep_log_files": 0},
            }
            path.write_text(json.dumps(raw), encoding="utf-8")
            cfg = load_config(path)
            self.assertEqual(cfg.auth.xauth_command, "xauth")
            self.assertIsNone(cfg.auth.authority_file)
            self.assertFalse(hasattr(cfg.auth, "unknown"))
            self.assertIsNone(cfg.connect.timeout_s)
            self.assertEqual(cfg.diagnostics.keep_log_files, 2)


if __name__ == "__main__":
    unittest.main()
