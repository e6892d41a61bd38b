"""Open X connections using persisted settings."""

from __future__ import annotations

from typing import Any, Mapping

from xsession_display import Connection, StaticAuthority, XauthCommandAuthority, connect
from xsession_display.auth import Authority

from .config import SessionConfig


def build_authority(cfg: SessionConfig, cookie_hex: str | None = None) -> Authority:
    if cookie_hex:
        return StaticAuthority.from_hex(cookie_hex)
    return XauthCommandAuthority(command=cfg.auth.xauth_command, authority_file=cfg.auth.authority_file)


def open_session(
    cfg: SessionConfig,
    display: str = "",
    cookie_hex: str | None = None,
    allow_fallback: bool | None = None,
    timeout_s: float | None = None,
    env: Mapping[str, str] | None = None,
    connector: Any = None,
) -> Connection:
    """Connect with CLI overrides layered over ``cfg``."""
    return connect(
        display or cfg.display.default,
        env=env,
        authority=build_authority(cfg, cookie_hex),
        allow_fallback=cfg.auth.allow_fallback if allow_fallback is None else allow_fallback,
        connector=connector,
        timeout=timeout_s if timeout_s is not None else cfg.connect.timeout_s,
    )
