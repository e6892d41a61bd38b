"""Credential lookup and validation for the connection handshake."""

from __future__ import annotations

import logging
import subprocess
from typing import Protocol

from .errors import AuthorityLookupError, AuthorityUnavailable, UnsupportedAuthProtocol
from .models import AuthCredential


logger = logging.getLogger(__name__)

MIT_MAGIC_COOKIE = "MIT-MAGIC-COOKIE-1"
MIT_MAGIC_COOKIE_LEN = 16


class Authority(Protocol):
    def lookup(self, host: str, display_number: int) -> tuple[str, bytes]:
        """Return ``(auth_name, auth_data)`` or raise ``AuthorityLookupError``."""
        ...


class StaticAuthority:
    """Always hands out the same credential."""

    def __init__(self, name: str = MIT_MAGIC_COOKIE, data: bytes = b"") -> None:
        self.name = name
        self.data = bytes(data)

    @classmethod
    def from_hex(cls, cookie_hex: str, name: str = MIT_MAGIC_COOKIE) -> "StaticAuthority":
        return cls(name=name, data=bytes.fromhex(cookie_hex))

    def lookup(self, host: str, display_number: int) -> tuple[str, bytes]:
        return self.name, self.data


class XauthCommandAuthority:
    """Ask the system ``xauth`` tool for the cookie of a display.

    ``xauth list`` prints one entry per line::

        myhost/unix:0  MIT-MAGIC-COOKIE-1  9f0c...
    """

    def __init__(self, command: str = "xauth", authority_file: str | None = None) -> None:
        self.command = command
        self.authority_file = authority_file

    def _argv(self, display: str) -> list[str]:
        argv = [self.command]
        if self.authority_file:
            argv += ["-f", self.authority_file]
        argv += ["list", display]
        return argv

    @staticmethod
    def parse_listing(output: str) -> list[tuple[str, bytes]]:
        entries: list[tuple[str, bytes]] = []
        for line in output.splitlines():
            fields = line.split()
            if len(fields) != 3:
                continue
            try:
                entries.append((fields[1], bytes.fromhex(fields[2])))
            except ValueError:
                continue
        return entries

    def lookup(self, host: str, display_number: int) -> tuple[str, bytes]:
        display = f"{host}:{display_number}"
        try:
            output = subprocess.check_output(
                self._argv(display),
                stderr=subprocess.DEVNULL,
                text=True,
            )
        except subprocess.CalledProcessError as exc:
            raise AuthorityLookupError(f"{self.command} exited with status {exc.returncode}") from exc
        except FileNotFoundError as exc:
            raise AuthorityLookupError(f"{self.command} not found") from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise AuthorityLookupError(f"could not run {self.command}: {exc}") from exc

        entries = self.parse_listing(output)
        if not entries:
            raise AuthorityLookupError(f"no authority entry for {display}")
        for name, data in entries:
            if name == MIT_MAGIC_COOKIE:
                return name, data
        return entries[0]


def validate_credential(credential: AuthCredential) -> AuthCredential:
    if credential.name != MIT_MAGIC_COOKIE or len(credential.data) != MIT_MAGIC_COOKIE_LEN:
        raise UnsupportedAuthProtocol(credential.name)
    return credential


class Authenticator:
    """Resolve the credential for a handshake.

    A failed lookup degrades to an empty credential and a single
    ``auth_fallback`` warning, unless ``allow_fallback`` is off.
    """

    def __init__(self, authority: Authority, allow_fallback: bool = True) -> None:
        self.authority = authority
        self.allow_fallback = allow_fallback

    def credential(self, host: str, display_number: int) -> tuple[AuthCredential, bool]:
        try:
            name, data = self.authority.lookup(host, display_number)
        except AuthorityLookupError as exc:
            if not self.allow_fallback:
                raise AuthorityUnavailable(host, display_number, exc) from exc
            logger.warning(
                f"could not get authority info for {host}:{display_number}: {exc}; "
                "trying connection without authority info",
                extra={"event": "auth_fallback", "host": host, "display_number": display_number},
            )
            return AuthCredential(), False

        return validate_credential(AuthCredential(name=name, data=bytes(data))), True
