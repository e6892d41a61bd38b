import socket
import sys
import unittest
from pathlib import Path
from unittest.mock import patch

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "display_protocol"))
sys.path.insert(0, str(ROOT / "tests"))

from fakes import FakeSocket, RecordingConnector
from xsession_display.display_spec import parse_display
from xsession_display.errors import ConnectError, TransportFailed
from xsession_display.models import DialTarget
from xsession_display.transport import SocketTransport, connect_socket, open_transport, select_target


class SelectTargetTests(unittest.TestCase):
    def test_socket_path_wins(self):
        target = select_target(parse_display("/tmp/launch-x/org.xquartz:0"))
        self.assertEqual(target, DialTarget("unix", "/tmp/launch-x/org.xquartz:0"))

    def test_host_defaults_to_tcp(self):
        target = select_target(parse_display("remote:2"))
        self.assertEqual(target, DialTarget("tcp", ("remote", 6002)))

    def test_host_with_protocol(self):
        target = select_target(parse_display("tcp6/remote:1"))
        self.assertEqual(target, DialTarget("tcp6", ("remote", 6001)))

    def test_unix_protocol_with_host_dials_a_path(self):
        target = select_target(parse_display("unix/host:0"))
        self.assertEqual(target, DialTarget("unix", "host:6000"))

    def test_neither_uses_conventional_socket(self):
        target = select_target(parse_display(":3.1"))
        self.assertEqual(target, DialTarget("unix", "/tmp/.X11-unix/X3"))

    def test_socket_name_uses_parsed_number(self):
        self.assertEqual(select_target(parse_display(":01")), DialTarget("unix", "/tmp/.X11-unix/X1"))
        self.assertEqual(select_target(parse_display("/tmp/sock:007")), DialTarget("unix", "/tmp/sock:7"))

    def test_protocol_without_host_uses_conventional_socket(self):
        target = select_target(parse_display("tcp/:1"))
        self.assertEqual(target, DialTarget("unix", "/tmp/.X11-unix/X1"))


class OpenTransportTests(unittest.TestCase):
    def test_uses_connector_once(self):
        connector = RecordingConnector()
        transport = open_transport(parse_display("remote:0"), connector=connector, timeout=2.5)
        self.assertTrue(transport.is_open)
        self.assertEqual(connector.targets, [DialTarget("tcp", ("remote", 6000))])
        self.assertEqual(connector.timeouts, [2.5])
        self.assertEqual(transport.target, connector.targets[0])

    def test_connect_failure_is_wrapped(self):
        cause = ConnectionRefusedError(111, "Connection refused")
        connector = RecordingConnector(error=cause)
        spec = parse_display(":7")
        with self.assertRaises(ConnectError) as ctx:
            open_transport(spec, connector=connector)
        self.assertIs(ctx.exception.cause, cause)
        self.assertEqual(ctx.exception.spec, spec)
        self.assertIn(":7", str(ctx.exception))
        self.assertEqual(len(connector.targets), 1)

    def test_unknown_network_is_connect_error(self):
        with self.assertRaises(ConnectError) as ctx:
            open_transport(parse_display("decnet/host:0"))
        self.assertIsInstance(ctx.exception.cause, ValueError)

    def test_missing_unix_socket_is_connect_error(self):
        spec = parse_display("/nonexistent/xsession-test-socket:0")
        with self.assertRaises(ConnectError) as ctx:
            open_transport(spec)
        self.assertIsInstance(ctx.exception.cause, OSError)


class SocketTransportTests(unittest.TestCase):
    def test_read_exact_reassembles_chunks(self):
        transport = SocketTransport(FakeSocket(b"0123456789abcdef", chunk=3))
        self.assertEqual(transport.read_exact(10), b"0123456789")
        self.assertEqual(transport.read_exact(6), b"abcdef")

    def test_short_read_fails(self):
        transport = SocketTransport(FakeSocket(b"abc"))
        with self.assertRaises(TransportFailed):
            transport.read_exact(8)

    def test_write_and_close(self):
        sock = FakeSocket()
        transport = SocketTransport(sock)
        self.assertEqual(transport.write(b"hello"), 5)
        self.assertEqual(bytes(sock.sent), b"hello")
        transport.close()
        self.assertTrue(sock.closed)
        self.assertFalse(transport.is_open)
        with self.assertRaises(TransportFailed):
            transport.write(b"x")

    def test_socket_errors_are_wrapped(self):
        sock = FakeSocket()
        sock.close()
        transport = SocketTransport(sock)
        with self.assertRaises(TransportFailed) as ctx:
            transport.write(b"x")
        self.assertIsInstance(ctx.exception.cause, OSError)

    @unittest.skipUnless(hasattr(socket, "AF_UNIX"), "unix sockets required")
    def test_connect_socket_over_real_unix_socket(self):
        import tempfile

        with tempfile.TemporaryDirectory() as tmp:
            path = str(Path(tmp) / "X0")
            server = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
            server.bind(path)
            server.listen(1)
            try:
                client = connect_socket(DialTarget("unix", path))
                peer, _ = server.accept()
                with SocketTransport(client) as transport:
                    peer.sendall(b"ping")
                    self.assertEqual(transport.read_exact(4), b"ping")
                peer.close()
            finally:
                server.close()

    def test_fileno_follows_socket(self):
        sock = FakeSocket()
        transport = SocketTransport(sock)
        self.assertEqual(transport.fileno(), 99)
        transport.close()
        self.assertEqual(transport.fileno(), -1)


class ConnectSocketTcpTests(unittest.TestCase):
    def setUp(self):
        self.server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self.server.bind(("127.0.0.1", 0))
        self.server.listen(2)
        self.port = self.server.getsockname()[1]

    def tearDown(self):
        self.server.close()

    def _assert_dials(self, network):
        client = connect_socket(DialTarget(network, ("127.0.0.1", self.port)), timeout=5)
        peer, _ = self.server.accept()
        try:
            self.assertEqual(client.family, socket.AF_INET)
            with SocketTransport(client) as transport:
                transport.write(b"ping")
                self.assertEqual(peer.recv(4), b"ping")
        finally:
            peer.close()

    def test_tcp_dials_listener(self):
        self._assert_dials("tcp")

    def test_tcp4_dials_listener(self):
        self._assert_dials("tcp4")

    def test_tcp4_rejects_ipv6_only_host(self):
        with self.assertRaises(OSError):
            connect_socket(DialTarget("tcp4", ("::1", self.port)))

    def test_every_address_failing_is_connect_error(self):
        self.server.close()
        closed = ("127.0.0.1", self.port)
        infos = [(socket.AF_INET, socket.SOCK_STREAM, 0, "", closed)] * 2
        with patch("xsession_display.transport.socket.getaddrinfo", return_value=infos) as lookup:
            with self.assertRaises(OSError):
                connect_socket(DialTarget("tcp4", closed))
            with self.assertRaises(ConnectError) as ctx:
                open_transport(parse_display("tcp4/127.0.0.1:0"), connector=connect_socket)
        self.assertIsInstance(ctx.exception.cause, ConnectionRefusedError)
        self.assertEqual(lookup.call_args[0][2], socket.AF_INET)

    def test_no_addresses_is_os_error(self):
        with patch("xsession_display.transport.socket.getaddrinfo", return_value=[]):
            with self.assertRaises(OSError):
                connect_socket(DialTarget("tcp6", ("nowhere", 6000)))


if __name__ == "__main__":
    unittest.main()
