"""Tests for the Kwik obfuscation decoder."""

from __future__ import annotations

import string
from collections.abc import Callable

import pytest

from kwikresolver.domain.kwik.decoder import (
    _code_point,
    convert_base,
    decode_segment,
    to_decimal,
)

ALPHABET = "pQrStUvWxY"
OFFSET = 13
RADIX = 7


class TestConvertBase:
    def test_hex_to_decimal(self) -> None:
        assert convert_base("ff", 16, 10) == "255"

    def test_decimal_to_hex(self) -> None:
        assert convert_base("255", 10, 16) == "ff"

    def test_binary_to_decimal(self) -> None:
        assert convert_base("1010", 2, 10) == "10"

    def test_zero_renders_first_symbol(self) -> None:
        assert convert_base("0", 10, 2) == "0"
        assert convert_base("", 10, 16) == "0"

    def test_base_64_symbols(self) -> None:
        assert convert_base("/", 64, 10) == "63"
        assert convert_base("10", 64, 10) == "64"

    def test_radix_above_64_rejected(self) -> None:
        with pytest.raises(ValueError):
            convert_base("1", 65, 10)

    def test_radix_below_2_rejected(self) -> None:
        with pytest.raises(ValueError):
            convert_base("1", 10, 1)


class TestToDecimal:
    def test_out_of_alphabet_characters_contribute_zero(self) -> None:
        # "z" is not a base-10 digit; the "1" still sits in the tens place.
        assert to_decimal("1z", 10) == 10

    def test_digit_beyond_radix_contributes_zero(self) -> None:
        assert to_decimal("19", 8) == 8

    def test_long_numeral_stays_exact(self) -> None:
        assert to_decimal("1" + "0" * 5000, 2) == 2**5000


class TestCodePoint:
    def test_in_range(self) -> None:
        assert _code_point(65) == "A"

    def test_above_unicode_range_is_truncated(self) -> None:
        assert _code_point(0x110041) == "A"

    def test_negative_is_truncated(self) -> None:
        assert _code_point(-1) == "\uffff"


class TestDecodeSegment:
    def test_decodes_known_cipher(self, kwik_encode: Callable[..., str]) -> None:
        cipher = kwik_encode("Hi")
        assert decode_segment(cipher, ALPHABET, OFFSET, RADIX) == "Hi"

    def test_round_trip_printable_ascii(
        self, kwik_encode: Callable[..., str]
    ) -> None:
        text = string.printable.strip()
        cipher = kwik_encode(text)
        assert decode_segment(cipher, ALPHABET, OFFSET, RADIX) == text

    def test_round_trip_other_radix(self, kwik_encode: Callable[..., str]) -> None:
        alphabet = "ghijklmnopq"
        cipher = kwik_encode('"https://kwik.si/f/xyz"', alphabet, 3, 10)
        assert decode_segment(cipher, alphabet, 3, 10) == '"https://kwik.si/f/xyz"'

    def test_deterministic(self, kwik_encode: Callable[..., str]) -> None:
        cipher = kwik_encode("<form action>")
        first = decode_segment(cipher, ALPHABET, OFFSET, RADIX)
        second = decode_segment(cipher, ALPHABET, OFFSET, RADIX)
        assert first == second

    def test_missing_trailing_separator(
        self, kwik_encode: Callable[..., str]
    ) -> None:
        cipher = kwik_encode("abc")
        assert cipher.endswith("W")
        assert decode_segment(cipher[:-1], ALPHABET, OFFSET, RADIX) == "abc"

    def test_empty_cipher(self) -> None:
        assert decode_segment("", ALPHABET, OFFSET, RADIX) == ""

    def test_foreign_characters_decode_leniently(self) -> None:
        # "z" is no alphabet symbol and becomes a zero-valued digit.
        result = decode_segment("zW", ALPHABET, 0, RADIX)
        assert result == "\x00"

    def test_consecutive_separators_yield_empty_segment(self) -> None:
        assert decode_segment("pWWpW", ALPHABET, 0, RADIX) == "\x00\x00\x00"

    def test_leading_separator_yields_empty_segment(self) -> None:
        assert decode_segment("WpW", ALPHABET, 0, RADIX) == "\x00\x00"

    def test_empty_segment_still_subtracts_offset(self) -> None:
        # 0 - 13 wraps to 16 bits like any other out-of-range value.
        assert decode_segment("W", ALPHABET, OFFSET, RADIX) == "\ufff3"

    def test_oversized_segment_decodes_without_error(self) -> None:
        # "Q" is digit 1, so the numeral is 6000 ones in base 7: far beyond
        # the interpreter's int/str conversion limit once written in decimal.
        value = (RADIX**6000 - 1) // (RADIX - 1)
        result = decode_segment("Q" * 6000 + "W", ALPHABET, 0, RADIX)
        assert result == chr(value & 0xFFFF)

    def test_alphabet_without_separator_rejected(self) -> None:
        with pytest.raises(ValueError, match="separator"):
            decode_segment("pQW", "pQr", OFFSET, 3)

    def test_radix_out_of_range_rejected(self) -> None:
        with pytest.raises(ValueError):
            decode_segment("pQW", ALPHABET * 10, OFFSET, 65)
