"""Decoder for the server setup reply that follows a successful hello."""

from __future__ import annotations

from .codec import get8, get16, get32, padded
from .errors import SetupDecodeError
from .models import Depth, Format, Screen, SetupInfo, VisualType


SETUP_FIXED_LEN = 40
FORMAT_LEN = 8
SCREEN_FIXED_LEN = 40
DEPTH_FIXED_LEN = 8
VISUAL_LEN = 24


def _need(buf: bytes, end: int, what: str) -> None:
    if end > len(buf):
        raise SetupDecodeError(f"setup reply truncated in {what}: need {end} bytes, have {len(buf)}")


def _read_visual(buf: bytes, off: int) -> VisualType:
    return VisualType(
        visual_id=get32(buf, off),
        visual_class=get8(buf, off + 4),
        bits_per_rgb_value=get8(buf, off + 5),
        colormap_entries=get16(buf, off + 6),
        red_mask=get32(buf, off + 8),
        green_mask=get32(buf, off + 12),
        blue_mask=get32(buf, off + 16),
    )


def _read_depth(buf: bytes, off: int) -> tuple[Depth, int]:
    _need(buf, off + DEPTH_FIXED_LEN, "depth")
    depth = get8(buf, off)
    n_visuals = get16(buf, off + 2)
    off += DEPTH_FIXED_LEN
    _need(buf, off + n_visuals * VISUAL_LEN, "visuals")
    visuals = tuple(_read_visual(buf, off + i * VISUAL_LEN) for i in range(n_visuals))
    return Depth(depth=depth, visuals=visuals), off + n_visuals * VISUAL_LEN


def _read_screen(buf: bytes, off: int) -> tuple[Screen, int]:
    _need(buf, off + SCREEN_FIXED_LEN, "screen")
    n_depths = get8(buf, off + 39)
    depths: list[Depth] = []
    cursor = off + SCREEN_FIXED_LEN
    for _ in range(n_depths):
        depth, cursor = _read_depth(buf, cursor)
        depths.append(depth)

    screen = Screen(
        root=get32(buf, off),
        default_colormap=get32(buf, off + 4),
        white_pixel=get32(buf, off + 8),
        black_pixel=get32(buf, off + 12),
        current_input_masks=get32(buf, off + 16),
        width_in_pixels=get16(buf, off + 20),
        height_in_pixels=get16(buf, off + 22),
        width_in_millimeters=get16(buf, off + 24),
        height_in_millimeters=get16(buf, off + 26),
        min_installed_maps=get16(buf, off + 28),
        max_installed_maps=get16(buf, off + 30),
        root_visual=get32(buf, off + 32),
        backing_stores=get8(buf, off + 36),
        save_unders=bool(get8(buf, off + 37)),
        root_depth=get8(buf, off + 38),
        allowed_depths=tuple(depths),
    )
    return screen, cursor


def parse_setup(buf: bytes) -> SetupInfo:
    """Decode a full setup reply, 8-byte header included."""
    _need(buf, SETUP_FIXED_LEN, "header")

    vendor_len = get16(buf, 24)
    n_roots = get8(buf, 28)
    n_formats = get8(buf, 29)

    off = SETUP_FIXED_LEN
    _need(buf, off + vendor_len, "vendor")
    vendor = bytes(buf[off : off + vendor_len]).decode("latin-1")
    off += padded(vendor_len)

    _need(buf, off + n_formats * FORMAT_LEN, "pixmap formats")
    formats = tuple(
        Format(
            depth=get8(buf, off + i * FORMAT_LEN),
            bits_per_pixel=get8(buf, off + i * FORMAT_LEN + 1),
            scanline_pad=get8(buf, off + i * FORMAT_LEN + 2),
        )
        for i in range(n_formats)
    )
    off += n_formats * FORMAT_LEN

    roots: list[Screen] = []
    for _ in range(n_roots):
        screen, off = _read_screen(buf, off)
        roots.append(screen)

    return SetupInfo(
        status=get8(buf, 0),
        protocol_major=get16(buf, 2),
        protocol_minor=get16(buf, 4),
        release_number=get32(buf, 8),
        resource_id_base=get32(buf, 12),
        resource_id_mask=get32(buf, 16),
        motion_buffer_size=get32(buf, 20),
        maximum_request_length=get16(buf, 26),
        image_byte_order=get8(buf, 30),
        bitmap_format_bit_order=get8(buf, 31),
        bitmap_format_scanline_unit=get8(buf, 32),
        bitmap_format_scanline_pad=get8(buf, 33),
        min_keycode=get8(buf, 34),
        max_keycode=get8(buf, 35),
        vendor=vendor,
        pixmap_formats=formats,
        roots=tuple(roots),
    )
