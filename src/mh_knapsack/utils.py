from typing import Iterable, List, Tuple

from mh_knapsack.models.keys import KeyPair


def load_messages(file_path: str, *, encoding: str = "utf-8") -> List[str]:
    """Load one plaintext per line from a file, skipping empty lines.

    Lines holding only whitespace are kept; they are valid plaintexts.
    """
    with open(file_path, "r", encoding=encoding, newline=None) as f:
        lines = [line.rstrip("\n") for line in f]
    return [line for line in lines if line]


def parse_int(value: str) -> int:
    """Parse a decimal integer, the wire form of ciphertexts and key elements."""
    value = value.strip()
    if not value.lstrip("-").isdigit():
        raise ValueError(f"Not a decimal integer: {value!r}")
    return int(value)


def parse_int_list(value: str) -> Tuple[int, ...]:
    """Parse a comma separated list of decimal integers."""
    if not value.strip():
        return ()
    return tuple(parse_int(item) for item in value.split(","))


def int_strings(values: Iterable[int]) -> List[str]:
    return [str(v) for v in values]


def key_pair_as_strings(key_pair: KeyPair) -> dict:
    """Serialize a key pair with every integer in decimal string form."""
    private = key_pair.private
    return {
        "bit_count": key_pair.bit_count,
        "private": {
            "w": int_strings(private.w),
            "q": str(private.q),
            "r": str(private.r),
        },
        "public": {
            "b": int_strings(key_pair.public.b),
        },
    }
