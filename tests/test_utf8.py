import pytest
from hypothesis import given
from hypothesis import strategies as st

from fat32kit.utf8 import codepoint_len, to_cp, to_utf8, utf8_len

TABLE = [
    (0x0041, bytes([0x41])),
    (0x00F6, bytes([0xC3, 0xB6])),
    (0x0416, bytes([0xD0, 0x96])),
    (0x20AC, bytes([0xE2, 0x82, 0xAC])),
    (0x1D11E, bytes([0xF0, 0x9D, 0x84, 0x9E])),
    (ord("f"), b"f"),
    (ord("G"), b"G"),
]


@pytest.mark.parametrize("cp, encoded", TABLE)
def test_encode_table(cp, encoded):
    assert to_utf8(cp) == encoded


@pytest.mark.parametrize("cp, encoded", TABLE)
def test_decode_table(cp, encoded):
    assert to_cp(encoded) == cp


@pytest.mark.parametrize("cp, encoded", TABLE)
def test_lengths_agree_with_table(cp, encoded):
    assert codepoint_len(cp) == len(encoded)
    assert utf8_len(encoded[0]) == len(encoded)


def test_zero_code_point_encodes_to_nothing():
    assert codepoint_len(0) == 0
    assert to_utf8(0) == b""


def test_out_of_range_code_point():
    with pytest.raises(ValueError):
        codepoint_len(0x110000)
    with pytest.raises(ValueError):
        to_utf8(0x110000)


def test_negative_code_point():
    with pytest.raises(ValueError):
        to_utf8(-1)


def test_continuation_byte_length_is_zero():
    assert utf8_len(0x80) == 0
    assert utf8_len(0xBF) == 0


def test_malformed_lead_byte():
    with pytest.raises(ValueError):
        utf8_len(0xF8)
    with pytest.raises(ValueError):
        utf8_len(0xFF)


def test_decode_rejects_continuation_start():
    with pytest.raises(ValueError):
        to_cp(b"\x80")


def test_decode_rejects_truncated():
    with pytest.raises(ValueError):
        to_cp(b"\xe2\x82")


def test_decode_rejects_empty():
    with pytest.raises(ValueError):
        to_cp(b"")


def test_decode_reads_only_first_character():
    assert to_cp("€A".encode("utf-8")) == 0x20AC


@given(st.integers(min_value=1, max_value=0x10FFFF).filter(lambda c: not 0xD800 <= c <= 0xDFFF))
def test_matches_standard_encoding(cp):
    assert to_utf8(cp) == chr(cp).encode("utf-8")


@given(st.integers(min_value=1, max_value=0x10FFFF))
def test_round_trip(cp):
    encoded = to_utf8(cp)
    assert to_cp(encoded) == cp
    assert utf8_len(encoded[0]) == len(encoded) == codepoint_len(cp)