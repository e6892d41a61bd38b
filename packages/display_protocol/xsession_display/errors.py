"""
Exception types for the X11 connection handshake.

Every error here is terminal for one connection attempt. Nothing is
retried internally; retry policy belongs to the caller.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import DisplaySpec


class XSessionError(Exception):
    """Base exception for all xsession errors."""
    pass


# =============================================================================
# Display string errors
# =============================================================================


class DisplaySpecError(XSessionError):
    """Raised when a display string cannot be resolved."""
    pass


class EmptyDisplaySpec(DisplaySpecError):
    """No display string given and none found in the environment."""

    def __init__(self) -> None:
        super().__init__("empty display string")


class MalformedDisplaySpec(DisplaySpecError):
    def __init__(self, raw: str) -> None:
        self.raw = raw
        super().__init__(f"bad display string: {raw}")

    def __repr__(self) -> str:
        return f"MalformedDisplaySpec(raw={self.raw!r})"


# =============================================================================
# Transport errors
# =============================================================================


class ConnectError(XSessionError):
    """
    Raised when the transport to the display server cannot be opened.

    Carries the parsed spec and the underlying cause (usually an
    ``OSError`` from the socket layer).
    """

    def __init__(self, spec: "DisplaySpec", cause: BaseException) -> None:
        self.spec = spec
        self.cause = cause
        super().__init__(f"cannot connect to {spec.canonical()}: {cause}")

    def __repr__(self) -> str:
        return f"ConnectError(spec={self.spec!r}, cause={self.cause!r})"


class TransportFailed(XSessionError):
    """Raised when a read or write on an open transport fails or comes up short."""

    def __init__(self, cause: BaseException | str) -> None:
        self.cause = cause
        super().__init__(f"transport failed: {cause}")


# =============================================================================
# Authentication errors
# =============================================================================


class AuthorityLookupError(XSessionError):
    """
    Raised by an authority collaborator when no credential is available.

    The authenticator recovers from this by falling back to an
    unauthenticated attempt, unless the fallback is disabled.
    """
    pass


class AuthorityUnavailable(XSessionError):
    """Raised instead of falling back when unauthenticated attempts are disabled."""

    def __init__(self, host: str, display_number: int, cause: BaseException) -> None:
        self.host = host
        self.display_number = display_number
        self.cause = cause
        super().__init__(f"no authority for {host}:{display_number}: {cause}")


class UnsupportedAuthProtocol(XSessionError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"unsupported auth protocol {name}")


# =============================================================================
# Handshake errors
# =============================================================================


class VersionMismatch(XSessionError):
    def __init__(self, major: int, minor: int) -> None:
        self.major = major
        self.minor = minor
        super().__init__(f"x protocol version mismatch: {major}.{minor}")

    def __repr__(self) -> str:
        return f"VersionMismatch(major={self.major}, minor={self.minor})"


class ConnectionRefused(XSessionError):
    """
    Raised when the server answers the hello with a failure status.

    ``reason`` is the server's own explanation, e.g. "No protocol specified".
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"x protocol authentication refused: {reason}")

    def __repr__(self) -> str:
        return f"ConnectionRefused(reason={self.reason!r})"


class SetupDecodeError(XSessionError):
    """Raised when the server setup reply is truncated or inconsistent."""
    pass
