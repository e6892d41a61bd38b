"""Assemble a live X connection from a display string."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from .auth import Authenticator, Authority, XauthCommandAuthority
from .display_spec import resolve_display
from .handshake import Handshake
from .setup import parse_setup
from .transport import Connector, SocketTransport, open_transport


logger = logging.getLogger(__name__)

SetupParser = Callable[[bytes], Any]


@dataclass
class Connection:
    """An accepted session. Owns ``transport`` until ``close``."""

    transport: SocketTransport
    host: str
    display_number: int
    default_screen: int
    setup: Any
    authenticated: bool = False

    @property
    def closed(self) -> bool:
        return not self.transport.is_open

    @property
    def default_root(self) -> Any:
        return self.setup.roots[self.default_screen]

    def close(self) -> None:
        self.transport.close()

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def clamp_screen(requested: int, screen_count: int) -> int:
    if 0 <= requested < screen_count:
        return requested
    return 0


def connect(
    display: str = "",
    *,
    env: Mapping[str, str] | None = None,
    authority: Authority | None = None,
    allow_fallback: bool = True,
    connector: Connector | None = None,
    timeout: float | None = None,
    setup_parser: SetupParser = parse_setup,
) -> Connection:
    """Dial, authenticate and complete the setup handshake.

    On any failure the transport is closed before the error propagates and
    no ``Connection`` exists.
    """
    spec = resolve_display(display, env=env)
    logger.info(
        f"connecting to {spec.canonical()}",
        extra={"event": "connect_start", "display": spec.canonical()},
    )

    transport = open_transport(spec, connector=connector, timeout=timeout)
    try:
        authenticator = Authenticator(authority or XauthCommandAuthority(), allow_fallback=allow_fallback)
        credential, using_auth = authenticator.credential(spec.host, spec.display_number)

        handshake = Handshake(transport)
        buffer = handshake.run(credential)
        setup = setup_parser(buffer)
        screen_count = len(setup.roots)
        conn = Connection(
            transport=transport,
            host=spec.host,
            display_number=spec.display_number,
            default_screen=clamp_screen(spec.screen_number, screen_count),
            setup=setup,
            authenticated=using_auth,
        )
    except BaseException:
        transport.close()
        raise

    logger.info(
        f"connected to {spec.canonical()}",
        extra={
            "event": "connect_ok",
            "display": spec.canonical(),
            "authenticated": using_auth,
            "screens": screen_count,
        },
    )
    return conn
