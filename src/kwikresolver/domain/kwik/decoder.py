"""Decoder for the Kwik substitution + mixed-radix obfuscation scheme.

Kwik pages hide their links inside an inline script of the form::

    eval(function(h,u,n,t,e,r){...}("<cipher>",17,"<alphabet>",<offset>,<radix>,24))

The cipher text is a run of segments separated by ``alphabet[radix]``.  Each
segment spells one character: alphabet symbols stand for their index, the
resulting digit string is a numeral in base ``radix``, and the numeral minus
``offset`` is the character code.

Characters that do not belong to the digit alphabet contribute zero.  That is
how the site's own script behaves, so it is reproduced rather than rejected.
"""

from __future__ import annotations

BASE_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ+/"

_MAX_CODE_POINT = 0x10FFFF


def _check_radix(radix: int, limit: int = len(BASE_ALPHABET)) -> None:
    if not 2 <= radix <= limit:
        raise ValueError(f"radix must be between 2 and {limit}, got {radix}")


def to_decimal(encoded: str, from_base: int) -> int:
    """Read *encoded* as a base-*from_base* numeral, last character least significant."""
    _check_radix(from_base)
    digits = BASE_ALPHABET[:from_base]
    value = 0
    for char in encoded:
        value = value * from_base + max(digits.find(char), 0)
    return value


def convert_base(encoded: str, from_base: int, to_base: int) -> str:
    """Convert a numeral between two bases of the 64-symbol alphabet.

    A zero value renders as the target alphabet's first symbol.
    """
    _check_radix(to_base)
    digits = BASE_ALPHABET[:to_base]
    value = to_decimal(encoded, from_base)
    if value == 0:
        return digits[0]

    out: list[str] = []
    while value > 0:
        value, remainder = divmod(value, to_base)
        out.append(digits[remainder])
    return "".join(reversed(out))


def _substitute(segment: str, alphabet: str) -> str:
    # Sequential on purpose: later symbols may rewrite digits produced by
    # earlier ones, exactly like the page script.
    for index, symbol in enumerate(alphabet):
        segment = segment.replace(symbol, str(index))
    return segment


def _code_point(value: int) -> str:
    if 0 <= value <= _MAX_CODE_POINT:
        return chr(value)
    # Same truncation as String.fromCharCode in the browser.
    return chr(value & 0xFFFF)


def _split_segments(cipher_text: str, separator: str) -> list[str]:
    segments = cipher_text.split(separator)
    # A trailing separator closes the last segment, it does not open a new one.
    if segments and segments[-1] == "":
        segments.pop()
    return segments


def decode_segment(cipher_text: str, alphabet: str, offset: int, radix: int) -> str:
    """Decode an obfuscated string back to its original text.

    Args:
        cipher_text: The obfuscated string (first argument of the page call).
        alphabet: Substitution alphabet; ``alphabet[radix]`` separates segments.
        offset: Value subtracted from every decoded numeral.
        radix: Base of the numerals, at most 64.

    Returns:
        The decoded text, one character per segment.

    Raises:
        ValueError: *radix* is outside 2..64 or *alphabet* has no separator
            at position *radix*.
    """
    _check_radix(radix)
    if len(alphabet) <= radix:
        raise ValueError(
            f"alphabet of length {len(alphabet)} has no separator at index {radix}"
        )

    separator = alphabet[radix]
    decoded: list[str] = []
    for segment in _split_segments(cipher_text, separator):
        numeral = _substitute(segment, alphabet)
        value = to_decimal(numeral, radix)
        decoded.append(_code_point(value - offset))
    return "".join(decoded)
