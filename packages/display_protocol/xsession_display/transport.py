"""Socket transport and dialer for reaching an X server."""

from __future__ import annotations

import logging
import socket
from typing import Any, Callable

from .errors import ConnectError, TransportFailed
from .models import DialTarget, DisplaySpec


logger = logging.getLogger(__name__)

X_TCP_PORT = 6000
X_UNIX_DIR = "/tmp/.X11-unix"

_INET_FAMILIES = {
    "tcp4": socket.AF_INET,
    "tcp6": socket.AF_INET6,
}

Connector = Callable[[DialTarget, "float | None"], Any]


class SocketTransport:
    """Blocking byte stream over a connected socket, owned exclusively."""

    def __init__(self, sock: Any, target: DialTarget | None = None) -> None:
        self._sock: Any | None = sock
        self.target = target

    @property
    def is_open(self) -> bool:
        return self._sock is not None

    def fileno(self) -> int:
        if self._sock is None:
            return -1
        return self._sock.fileno()

    def write(self, payload: bytes) -> int:
        if self._sock is None:
            raise TransportFailed("transport is closed")
        try:
            self._sock.sendall(payload)
        except OSError as exc:
            raise TransportFailed(exc) from exc
        return len(payload)

    def read_exact(self, n: int) -> bytes:
        if self._sock is None:
            raise TransportFailed("transport is closed")
        chunks: list[bytes] = []
        remaining = n
        while remaining > 0:
            try:
                chunk = self._sock.recv(remaining)
            except OSError as exc:
                raise TransportFailed(exc) from exc
            if not chunk:
                raise TransportFailed(f"short read: got {n - remaining} of {n} bytes")
            chunks.append(chunk)
            remaining -= len(chunk)
        return b"".join(chunks)

    def close(self) -> None:
        if self._sock is not None:
            try:
                self._sock.close()
            finally:
                self._sock = None

    def __enter__(self) -> "SocketTransport":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def select_target(spec: DisplaySpec) -> DialTarget:
    """Pick the address to dial; explicit socket path, then host, then local socket."""
    if spec.socket_path:
        return DialTarget("unix", f"{spec.socket_path}:{spec.display_number}")
    if spec.host:
        protocol = spec.protocol or "tcp"
        port = X_TCP_PORT + spec.display_number
        if protocol == "unix":
            # Dialing "unix" with a host:port treats the pair as a filesystem path.
            return DialTarget("unix", f"{spec.host}:{port}")
        return DialTarget(protocol, (spec.host, port))
    return DialTarget("unix", f"{X_UNIX_DIR}/X{spec.display_number}")


def connect_socket(target: DialTarget, timeout: float | None = None) -> socket.socket:
    if target.network == "unix":
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            sock.settimeout(timeout)
            sock.connect(target.address)
        except BaseException:
            sock.close()
            raise
        return sock

    if not isinstance(target.address, tuple):
        raise ValueError(f"network {target.network} needs a host and port")

    if target.network == "tcp":
        return socket.create_connection(target.address, timeout=timeout)

    family = _INET_FAMILIES.get(target.network)
    if family is None:
        raise ValueError(f"unknown network {target.network}")

    host, port = target.address
    infos = socket.getaddrinfo(host, port, family, socket.SOCK_STREAM)
    last_error: OSError | None = None
    for af, socktype, proto, _canon, sockaddr in infos:
        sock = socket.socket(af, socktype, proto)
        try:
            sock.settimeout(timeout)
            sock.connect(sockaddr)
            return sock
        except OSError as exc:
            sock.close()
            last_error = exc
    raise last_error or OSError(f"no addresses for {host}")


def open_transport(
    spec: DisplaySpec,
    connector: Connector | None = None,
    timeout: float | None = None,
) -> SocketTransport:
    """Open the single transport ``spec`` selects. Failures are not retried."""
    target = select_target(spec)
    dial = connector or connect_socket
    logger.debug("dialing %s", target.describe(), extra={"event": "dial", "target": target.describe()})
    try:
        sock = dial(target, timeout)
    except (OSError, ValueError) as exc:
        raise ConnectError(spec, exc) from exc
    return SocketTransport(sock, target=target)
