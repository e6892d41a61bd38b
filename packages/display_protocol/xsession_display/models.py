"""Typed models for display addressing, handshake state, and server setup."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class HandshakeState(str, Enum):
    AWAITING_HEADER = "AwaitingHeader"
    AWAITING_BODY = "AwaitingBody"
    ACCEPTED = "Accepted"
    REFUSED = "Refused"
    VERSION_MISMATCH = "VersionMismatch"
    TRANSPORT_FAILED = "TransportFailed"

    @property
    def terminal(self) -> bool:
        return self not in (HandshakeState.AWAITING_HEADER, HandshakeState.AWAITING_BODY)


@dataclass(frozen=True)
class DisplaySpec:
    display_number: int
    screen_number: int = 0
    protocol: str = ""
    socket_path: str = ""
    host: str = ""
    raw: str = field(default="", compare=False)

    def canonical(self) -> str:
        if self.raw:
            return self.raw
        if self.socket_path:
            prefix = self.socket_path
        elif self.protocol:
            prefix = f"{self.protocol}/{self.host}"
        else:
            prefix = self.host
        return f"{prefix}:{self.display_number}.{self.screen_number}"


@dataclass(frozen=True)
class DialTarget:
    network: str
    address: str | tuple[str, int]

    def describe(self) -> str:
        if isinstance(self.address, tuple):
            return f"{self.network}:{self.address[0]}:{self.address[1]}"
        return f"{self.network}:{self.address}"


@dataclass(frozen=True)
class AuthCredential:
    name: str = ""
    data: bytes = b""

    def __repr__(self) -> str:
        # Cookie bytes stay out of logs and tracebacks.
        return f"AuthCredential(name={self.name!r}, data=<{len(self.data)} bytes>)"


@dataclass(frozen=True)
class ServerResponseHeader:
    status_code: int
    reason_length: int
    protocol_major: int
    protocol_minor: int
    body_units: int

    @property
    def body_length(self) -> int:
        return self.body_units * 4


@dataclass(frozen=True)
class Format:
    depth: int
    bits_per_pixel: int
    scanline_pad: int


@dataclass(frozen=True)
class VisualType:
    visual_id: int
    visual_class: int
    bits_per_rgb_value: int
    colormap_entries: int
    red_mask: int
    green_mask: int
    blue_mask: int


@dataclass(frozen=True)
class Depth:
    depth: int
    visuals: tuple[VisualType, ...] = ()


@dataclass(frozen=True)
class Screen:
    root: int
    default_colormap: int
    white_pixel: int
    black_pixel: int
    current_input_masks: int
    width_in_pixels: int
    height_in_pixels: int
    width_in_millimeters: int
    height_in_millimeters: int
    min_installed_maps: int
    max_installed_maps: int
    root_visual: int
    backing_stores: int
    save_unders: bool
    root_depth: int
    allowed_depths: tuple[Depth, ...] = ()


@dataclass(frozen=True)
class SetupInfo:
    status: int
    protocol_major: int
    protocol_minor: int
    release_number: int
    resource_id_base: int
    resource_id_mask: int
    motion_buffer_size: int
    maximum_request_length: int
    image_byte_order: int
    bitmap_format_bit_order: int
    bitmap_format_scanline_unit: int
    bitmap_format_scanline_pad: int
    min_keycode: int
    max_keycode: int
    vendor: str
    pixmap_formats: tuple[Format, ...] = ()
    roots: tuple[Screen, ...] = ()
