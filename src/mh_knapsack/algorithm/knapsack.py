from typing import Sequence

import structlog

from mh_knapsack.codec import Bitstring, check_bits
from mh_knapsack.errors import IndexOutOfRange, NoModularInverse


log = structlog.get_logger()


def encrypt(bitstring: Bitstring, b: Sequence[int]) -> int:
    """Sum the public key elements selected by the '1' bits of the plaintext."""
    if len(bitstring) > len(b):
        raise IndexOutOfRange(
            f"Bit string of length {len(bitstring)} exceeds public key of length {len(b)}"
        )
    check_bits(bitstring)

    ciphertext = sum(b_i for bit, b_i in zip(bitstring, b) if bit == "1")
    log.debug("encrypted", bit_count=len(bitstring), ciphertext_bits=ciphertext.bit_length())
    return ciphertext


def modular_inverse(r: int, q: int) -> int:
    """Return r_inv such that (r * r_inv) % q == 1."""
    try:
        return pow(r, -1, q)
    except ValueError as e:
        raise NoModularInverse("Multiplier has no inverse modulo q; key material is corrupt") from e


def decrypt(ciphertext: int, r: int, q: int, w: Sequence[int]) -> Bitstring:
    """Recover the plaintext bits from a ciphertext with the private key.

    The ciphertext is unblinded with r^-1 mod q, then the subset sum over the
    superincreasing w is solved greedily from the largest element down. Every
    element exceeds the sum of all smaller-indexed ones, so whenever w[i] fits
    in the remainder it must be part of the subset.
    """
    r_inverse = modular_inverse(r, q)
    remaining = (ciphertext * r_inverse) % q

    bits = ["0"] * len(w)
    for i in reversed(range(len(w))):
        if w[i] <= remaining:
            bits[i] = "1"
            remaining -= w[i]

    if remaining:
        # Not a subset sum of w: the ciphertext was made with another key.
        log.warning("ciphertext not fully consumed", bit_count=len(w), remainder_bits=remaining.bit_length())
    log.debug("decrypted", bit_count=len(w))
    return "".join(bits)
