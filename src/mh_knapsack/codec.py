from typing import TypeAlias

from mh_knapsack.errors import InvalidBinaryLength, InvalidBitstring, UnsupportedCharacter

BITS_PER_CHAR = 8

Bitstring: TypeAlias = str


def encode(text: str) -> Bitstring:
    """Convert text to its 8-bit big-endian binary representation.

    Each character becomes exactly eight '0'/'1' characters, concatenated in
    input order, so the result is ``8 * len(text)`` long.
    """
    bits = []
    for position, character in enumerate(text):
        code = ord(character)
        if code >= 1 << BITS_PER_CHAR:
            raise UnsupportedCharacter(character, position)
        bits.append(f"{code:08b}")
    return "".join(bits)


def decode(bitstring: Bitstring) -> str:
    """Convert a binary string back to text, 8 bits (MSB first) per character."""
    if len(bitstring) % BITS_PER_CHAR != 0:
        raise InvalidBinaryLength(
            f"Binary string length {len(bitstring)} is not a multiple of {BITS_PER_CHAR}"
        )
    check_bits(bitstring)

    chars = []
    for i in range(0, len(bitstring), BITS_PER_CHAR):
        chars.append(chr(int(bitstring[i:i + BITS_PER_CHAR], 2)))
    return "".join(chars)


def check_bits(bitstring: Bitstring) -> None:
    """Raise InvalidBitstring unless every character is '0' or '1'."""
    for position, bit in enumerate(bitstring):
        if bit not in ("0", "1"):
            raise InvalidBitstring(f"Invalid bit {bit!r} at position {position}")
