import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "display_protocol"))

from xsession_display.display_spec import parse_display, resolve_display
from xsession_display.errors import EmptyDisplaySpec, MalformedDisplaySpec


class ParseDisplayTests(unittest.TestCase):
    def test_local_display(self):
        spec = parse_display(":0")
        self.assertEqual(spec.display_number, 0)
        self.assertEqual(spec.screen_number, 0)
        self.assertEqual(spec.host, "")
        self.assertEqual(spec.socket_path, "")
        self.assertEqual(spec.protocol, "")

    def test_local_display_with_screen(self):
        spec = parse_display(":1.2")
        self.assertEqual((spec.display_number, spec.screen_number), (1, 2))

    def test_host(self):
        spec = parse_display("host:0")
        self.assertEqual(spec.host, "host")
        self.assertEqual(spec.display_number, 0)
        self.assertEqual(spec.protocol, "")

    def test_host_with_screen(self):
        spec = parse_display("host:0.1")
        self.assertEqual((spec.host, spec.display_number, spec.screen_number), ("host", 0, 1))

    def test_protocol_and_host(self):
        spec = parse_display("unix/host:0")
        self.assertEqual(spec.protocol, "unix")
        self.assertEqual(spec.host, "host")
        self.assertEqual(spec.display_number, 0)

    def test_socket_path(self):
        spec = parse_display("/tmp/s:0")
        self.assertEqual(spec.socket_path, "/tmp/s")
        self.assertEqual(spec.host, "")
        self.assertEqual(spec.protocol, "")
        self.assertEqual(spec.display_number, 0)

    def test_launchd_socket_path(self):
        spec = parse_display("/tmp/launch-abc/org.xquartz:0")
        self.assertEqual(spec.socket_path, "/tmp/launch-abc/org.xquartz")
        self.assertEqual(spec.display_number, 0)

    def test_last_separators_win(self):
        spec = parse_display("a/b/c:d:3.2")
        self.assertEqual(spec.protocol, "a/b")
        self.assertEqual(spec.host, "c:d")
        self.assertEqual(spec.display_number, 3)
        self.assertEqual(spec.screen_number, 2)

    def test_ipv6_style_host_uses_last_colon(self):
        spec = parse_display("::1:5")
        self.assertEqual(spec.host, "::1")
        self.assertEqual(spec.display_number, 5)

    def test_empty(self):
        with self.assertRaises(EmptyDisplaySpec):
            parse_display("")

    def test_malformed_inputs(self):
        for raw in ("bogus", "host:", ":x", ":-1", ":1.x", ": 1", ":.", ":1.2.3"):
            with self.subTest(raw=raw):
                with self.assertRaises(MalformedDisplaySpec) as ctx:
                    parse_display(raw)
                self.assertEqual(ctx.exception.raw, raw)

    def test_signed_display_number_accepted(self):
        self.assertEqual(parse_display(":+3").display_number, 3)

    def test_canonical_echoes_raw(self):
        self.assertEqual(parse_display("tcp/host:2.1").canonical(), "tcp/host:2.1")


class ResolveDisplayTests(unittest.TestCase):
    def test_explicit_string_ignores_environment(self):
        spec = resolve_display("host:4", env={"DISPLAY": ":9"})
        self.assertEqual(spec.display_number, 4)

    def test_falls_back_to_environment(self):
        spec = resolve_display("", env={"DISPLAY": ":9.1"})
        self.assertEqual((spec.display_number, spec.screen_number), (9, 1))

    def test_missing_environment_is_empty_spec(self):
        with self.assertRaises(EmptyDisplaySpec):
            resolve_display("", env={})


if __name__ == "__main__":
    unittest.main()
