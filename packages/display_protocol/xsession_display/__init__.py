"""X11 connection setup: display strings, transports, credentials and the setup handshake."""

from .auth import Authenticator, StaticAuthority, XauthCommandAuthority
from .connection import Connection, connect
from .display_spec import parse_display, resolve_display
from .errors import (
    AuthorityLookupError,
    AuthorityUnavailable,
    ConnectError,
    ConnectionRefused,
    DisplaySpecError,
    EmptyDisplaySpec,
    MalformedDisplaySpec,
    SetupDecodeError,
    TransportFailed,
    UnsupportedAuthProtocol,
    VersionMismatch,
    XSessionError,
)
from .handshake import Handshake, decode_header, encode_hello
from .models import AuthCredential, DialTarget, DisplaySpec, HandshakeState, ServerResponseHeader, SetupInfo
from .replay import ReplayEvent, ReplayReport, ReplayRunner, ReplayTransport
from .setup import parse_setup
from .transport import SocketTransport, open_transport, select_target

__all__ = [
    "AuthCredential",
    "Authenticator",
    "AuthorityLookupError",
    "AuthorityUnavailable",
    "ConnectError",
    "Connection",
    "ConnectionRefused",
    "DialTarget",
    "DisplaySpec",
    "DisplaySpecError",
    "EmptyDisplaySpec",
    "Handshake",
    "HandshakeState",
    "MalformedDisplaySpec",
    "ReplayEvent",
    "ReplayReport",
    "ReplayRunner",
    "ReplayTransport",
    "ServerResponseHeader",
    "SetupDecodeError",
    "SetupInfo",
    "SocketTransport",
    "StaticAuthority",
    "TransportFailed",
    "UnsupportedAuthProtocol",
    "VersionMismatch",
    "XSessionError",
    "XauthCommandAuthority",
    "connect",
    "decode_header",
    "encode_hello",
    "open_transport",
    "parse_display",
    "parse_setup",
    "resolve_display",
    "select_target",
]
