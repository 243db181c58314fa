# SPDX-License-Identifier: Apache-2.0
"""Unit conversion and ctypes helpers for pypdfium2's raw API."""

import ctypes

POINTS_PER_MM = 72.0 / 25.4


def mm_to_pt(value: float) -> float:
    """Convert millimeters to PDF points."""
    return value * POINTS_PER_MM


def to_widestring(text: str) -> ctypes.Array:
    """Encode text as FPDF_WIDESTRING (UTF-16LE, null-terminated).

    Example:
        >>> ws = to_widestring("Title")
        >>> # pass to FPDFText_SetText
    """
    encoded = text.encode("utf-16-le") + b"\x00\x00"
    count = len(encoded) // 2
    return (ctypes.c_ushort * count).from_buffer_copy(encoded)


def to_byte_array(data: bytes) -> ctypes.Array:
    """Copy bytes into a ctypes c_ubyte array (for FPDFText_LoadFont)."""
    return (ctypes.c_ubyte * len(data)).from_buffer_copy(data)
