"""Connection setup: client hello encoding and server reply decoding."""

from __future__ import annotations

import logging
from typing import Any

from .codec import get8, get16, padded, put16
from .errors import ConnectionRefused, TransportFailed, VersionMismatch
from .models import AuthCredential, HandshakeState, ServerResponseHeader


logger = logging.getLogger(__name__)

BYTE_ORDER_LSB = 0x6C
PROTOCOL_MAJOR = 11
PROTOCOL_MINOR = 0

HELLO_HEADER_LEN = 12
REPLY_HEADER_LEN = 8
STATUS_FAILED = 0


def encode_hello(credential: AuthCredential) -> bytes:
    name = credential.name.encode("latin-1")
    data = credential.data
    name_end = HELLO_HEADER_LEN + padded(len(name))

    buf = bytearray(name_end + padded(len(data)))
    buf[0] = BYTE_ORDER_LSB
    buf[1] = 0
    put16(buf, 2, PROTOCOL_MAJOR)
    put16(buf, 4, PROTOCOL_MINOR)
    put16(buf, 6, len(name))
    put16(buf, 8, len(data))
    put16(buf, 10, 0)
    buf[HELLO_HEADER_LEN : HELLO_HEADER_LEN + len(name)] = name
    buf[name_end : name_end + len(data)] = data
    return bytes(buf)


def decode_header(head: bytes) -> ServerResponseHeader:
    if len(head) < REPLY_HEADER_LEN:
        raise TransportFailed(f"short reply header: {len(head)} bytes")
    return ServerResponseHeader(
        status_code=get8(head, 0),
        reason_length=get8(head, 1),
        protocol_major=get16(head, 2),
        protocol_minor=get16(head, 4),
        body_units=get16(head, 6),
    )


class Handshake:
    """One-shot setup exchange over an open transport.

    ``run`` writes the hello and returns the full reply (8-byte header plus
    body) once the server accepts. The terminal state is left in ``state``
    whichever way the exchange ends.
    """

    def __init__(self, transport: Any) -> None:
        self.transport = transport
        self.state = HandshakeState.AWAITING_HEADER
        self.header: ServerResponseHeader | None = None

    def _read(self, n: int) -> bytes:
        try:
            return self.transport.read_exact(n)
        except TransportFailed:
            self.state = HandshakeState.TRANSPORT_FAILED
            raise

    def run(self, credential: AuthCredential) -> bytes:
        try:
            self.transport.write(encode_hello(credential))
        except TransportFailed:
            self.state = HandshakeState.TRANSPORT_FAILED
            raise

        head = self._read(REPLY_HEADER_LEN)
        header = decode_header(head)
        self.header = header

        if header.protocol_major != PROTOCOL_MAJOR or header.protocol_minor != PROTOCOL_MINOR:
            self.state = HandshakeState.VERSION_MISMATCH
            raise VersionMismatch(header.protocol_major, header.protocol_minor)

        self.state = HandshakeState.AWAITING_BODY
        body = self._read(header.body_length) if header.body_length else b""

        if header.status_code == STATUS_FAILED:
            self.state = HandshakeState.REFUSED
            reason = body[: header.reason_length].decode("utf-8", errors="replace")
            raise ConnectionRefused(reason)

        # Status 2 (authenticate) is not told apart from 1 (success).
        self.state = HandshakeState.ACCEPTED
        logger.debug(
            "setup accepted",
            extra={"event": "setup_accepted", "status": header.status_code, "body_length": header.body_length},
        )
        return head + body
