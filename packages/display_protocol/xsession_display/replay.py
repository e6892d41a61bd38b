"""Replay/analysis utilities for captured connection-setup transcripts."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from pathlib import Path

from .codec import get16, padded
from .errors import XSessionError, TransportFailed
from .handshake import BYTE_ORDER_LSB, HELLO_HEADER_LEN, Handshake
from .models import AuthCredential, HandshakeState


_HEX_CLEAN = re.compile(r"[^0-9a-fA-F]")

CLIENT_TO_SERVER = "client_to_server"
SERVER_TO_CLIENT = "server_to_client"


@dataclass(frozen=True)
class ReplayEvent:
    line: int
    direction: str
    payload: bytes


@dataclass
class ReplayReport:
    total_events: int = 0
    client_events: int = 0
    server_events: int = 0
    raw_bytes_total: int = 0
    hello_count: int = 0
    auth_name: str | None = None
    auth_data_length: int = 0
    handshake_state: str | None = None
    reply_status: int | None = None
    protocol_major: int | None = None
    protocol_minor: int | None = None
    body_bytes: int = 0
    detail: str | None = None
    errors: list[str] = field(default_factory=list)


class ReplayTransport:
    """Serves recorded server bytes to a ``Handshake`` and records its writes."""

    def __init__(self, server_bytes: bytes) -> None:
        self._pending = bytes(server_bytes)
        self.writes: list[bytes] = []
        self.is_open = True

    def write(self, payload: bytes) -> int:
        self.writes.append(bytes(payload))
        return len(payload)

    def read_exact(self, n: int) -> bytes:
        if len(self._pending) < n:
            got = len(self._pending)
            self._pending = b""
            raise TransportFailed(f"short read: got {got} of {n} bytes")
        chunk, self._pending = self._pending[:n], self._pending[n:]
        return chunk

    def close(self) -> None:
        self.is_open = False


def decode_hello_credential(hello: bytes) -> AuthCredential | None:
    if len(hello) < HELLO_HEADER_LEN or hello[0] != BYTE_ORDER_LSB:
        return None
    name_len = get16(hello, 6)
    data_len = get16(hello, 8)
    name_end = HELLO_HEADER_LEN + padded(name_len)
    if len(hello) < name_end + data_len:
        return None
    name = hello[HELLO_HEADER_LEN : HELLO_HEADER_LEN + name_len].decode("latin-1")
    return AuthCredential(name=name, data=hello[name_end : name_end + data_len])


class ReplayRunner:
    @staticmethod
    def _decode_hex(value: str) -> bytes:
        cleaned = _HEX_CLEAN.sub("", value)
        if len(cleaned) % 2 == 1:
            cleaned = cleaned[:-1]
        if not cleaned:
            return b""
        return bytes.fromhex(cleaned)

    def _parse_line(self, line_no: int, line: str) -> ReplayEvent | None:
        stripped = line.strip()
        if not stripped:
            return None
        obj = json.loads(stripped)
        direction = obj.get("dir") or obj.get("direction") or "unknown"
        hex_value = obj.get("payload_hex") or obj.get("hex") or ""
        return ReplayEvent(line=line_no, direction=direction, payload=self._decode_hex(str(hex_value)))

    def parse(self, transcript_path: Path) -> list[ReplayEvent]:
        events: list[ReplayEvent] = []
        for idx, line in enumerate(transcript_path.read_text(encoding="utf-8").splitlines(), start=1):
            event = self._parse_line(idx, line)
            if event is not None:
                events.append(event)
        return events

    def analyze(self, events: list[ReplayEvent], strict: bool = True) -> ReplayReport:
        report = ReplayReport(total_events=len(events))
        client_stream = bytearray()
        server_stream = bytearray()

        for event in events:
            report.raw_bytes_total += len(event.payload)
            if event.direction == CLIENT_TO_SERVER:
                report.client_events += 1
                client_stream += event.payload
            elif event.direction == SERVER_TO_CLIENT:
                report.server_events += 1
                server_stream += event.payload

        credential = decode_hello_credential(bytes(client_stream))
        if credential is not None:
            report.hello_count = 1
            report.auth_name = credential.name
            report.auth_data_length = len(credential.data)
        elif strict:
            report.errors.append("missing_hello")

        if not server_stream:
            if strict:
                report.errors.append("missing_reply")
            return report

        handshake = Handshake(ReplayTransport(bytes(server_stream)))
        try:
            handshake.run(credential or AuthCredential())
        except XSessionError as exc:
            report.detail = str(exc)
        report.handshake_state = handshake.state.value

        if handshake.header is not None:
            report.reply_status = handshake.header.status_code
            report.protocol_major = handshake.header.protocol_major
            report.protocol_minor = handshake.header.protocol_minor
            report.body_bytes = handshake.header.body_length

        if handshake.state == HandshakeState.VERSION_MISMATCH:
            report.errors.append("version_mismatch")
        elif handshake.state == HandshakeState.REFUSED:
            report.errors.append("refused")
        elif handshake.state == HandshakeState.TRANSPORT_FAILED:
            report.errors.append("short_body" if handshake.header is not None else "short_header")

        return report

    def run(self, transcript_path: Path, strict: bool = True) -> ReplayReport:
        return self.analyze(self.parse(transcript_path), strict=strict)
