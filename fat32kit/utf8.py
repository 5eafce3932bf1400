"""Encoding and decoding of single Unicode code points as UTF-8."""

from __future__ import annotations

from typing import NamedTuple


class _Form(NamedTuple):
    """One row of the UTF-8 layout table."""

    mask: int
    lead: int
    first: int
    last: int
    bits: int


_CONTINUATION = _Form(0b00111111, 0b10000000, 0x0, 0x0, 6)

_FORMS = (
    _CONTINUATION,
    _Form(0b01111111, 0b00000000, 0x0, 0x7F, 7),
    _Form(0b00011111, 0b11000000, 0x80, 0x7FF, 5),
    _Form(0b00001111, 0b11100000, 0x800, 0xFFFF, 4),
    _Form(0b00000111, 0b11110000, 0x10000, 0x10FFFF, 3),
)


def codepoint_len(cp: int) -> int:
    """Return the number of UTF-8 bytes needed for code point ``cp``.

    Code point 0 falls in the table's first row and yields 0.
    """
    if cp < 0:
        raise ValueError(f"negative code point: {cp}")
    for length, form in enumerate(_FORMS):
        if form.first <= cp <= form.last:
            return length
    raise ValueError(f"code point out of range: {cp:#x}")


def utf8_len(lead: int) -> int:
    """Return the encoded length announced by the byte ``lead``.

    A continuation byte yields 0; a byte that cannot start a character
    raises ``ValueError``.
    """
    if not 0 <= lead <= 0xFF:
        raise ValueError(f"not a byte: {lead}")
    for length, form in enumerate(_FORMS):
        if (lead & ~form.mask & 0xFF) == form.lead:
            return length
    raise ValueError(f"malformed leading byte: {lead:#x}")


def to_utf8(cp: int) -> bytes:
    """Encode one code point as UTF-8 bytes."""
    length = codepoint_len(cp)
    if length == 0:
        return b""
    form = _FORMS[length]
    step = _CONTINUATION.bits
    shift = step * (length - 1)
    out = bytearray([((cp >> shift) & form.mask) | form.lead])
    for shift in range(shift - step, -1, -step):
        out.append(((cp >> shift) & _CONTINUATION.mask) | _CONTINUATION.lead)
    return bytes(out)


def to_cp(data: bytes) -> int:
    """Decode the first UTF-8 character of ``data`` into a code point."""
    if not data:
        raise ValueError("no bytes to decode")
    length = utf8_len(data[0])
    if length == 0:
        raise ValueError("continuation byte cannot start a character")
    if len(data) < length:
        raise ValueError(f"truncated character: need {length} bytes, got {len(data)}")
    form = _FORMS[length]
    cp = data[0] & form.mask
    for byte in data[1:length]:
        cp = (cp << _CONTINUATION.bits) | (byte & _CONTINUATION.mask)
    return cp