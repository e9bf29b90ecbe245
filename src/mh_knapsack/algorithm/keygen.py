"""Merkle-Hellman key generation.

Every function takes the randomness source explicitly so a key pair is a pure
function of ``(bit_count, rng)``. Any ``random.Random`` compatible object
works; a seeded ``random.Random`` makes keys reproducible in tests, and
``random.SystemRandom`` draws from the OS. Neither makes the scheme secure:
Merkle-Hellman falls to lattice basis reduction whatever the key source.
"""
from math import gcd
from random import Random
from typing import Sequence, Tuple

import structlog

from mh_knapsack.config import BIT_LENGTH, MAX_COPRIME_ATTEMPTS
from mh_knapsack.errors import KeyGenerationFailure
from mh_knapsack.models.keys import KeyPair, PrivateKey, PublicKey


log = structlog.get_logger()


def generate_coprime_pair(
    bit_length: int,
    rng: Random,
    *,
    max_attempts: int = MAX_COPRIME_ATTEMPTS,
) -> Tuple[int, int]:
    """Draw a multiplier r and modulus q of ``bit_length`` bits with gcd(r, q) == 1.

    q is drawn once with its top bit set, so it is exactly ``bit_length`` bits
    long. Only r is redrawn, at most ``max_attempts`` times in total.
    """
    if bit_length < 1:
        raise KeyGenerationFailure(f"bit_length must be positive, got {bit_length}")

    q = rng.getrandbits(bit_length) | (1 << (bit_length - 1))
    for attempt in range(1, max_attempts + 1):
        r = rng.getrandbits(bit_length)
        if gcd(r, q) == 1:
            log.debug("coprime pair found", bit_length=bit_length, attempts=attempt)
            return r, q

    log.error("coprime search exhausted", bit_length=bit_length, attempts=max_attempts)
    raise KeyGenerationFailure(
        f"No multiplier coprime to the modulus found after {max_attempts} attempts"
    )


def generate_superincreasing(n: int, bit_budget: int, rng: Random) -> Tuple[int, ...]:
    """Build n elements, each the running sum plus a random (bit_budget // n)-bit value plus one."""
    if n < 0:
        raise KeyGenerationFailure(f"Sequence length must not be negative, got {n}")
    if n == 0:
        return ()
    if n > bit_budget:
        raise KeyGenerationFailure(
            f"Cannot spread a {bit_budget}-bit budget over {n} elements"
        )

    bits_per_element = bit_budget // n
    w = []
    running_sum = 0
    for _ in range(n):
        w_i = running_sum + rng.getrandbits(bits_per_element) + 1
        w.append(w_i)
        running_sum += w_i
    return tuple(w)


def derive_public_key(w: Sequence[int], r: int, q: int) -> Tuple[int, ...]:
    """b[i] = (r * w[i]) mod q."""
    return tuple((r * w_i) % q for w_i in w)


def generate_key_pair(
    bit_count: int,
    rng: Random,
    *,
    bit_length: int = BIT_LENGTH,
    max_attempts: int = MAX_COPRIME_ATTEMPTS,
) -> KeyPair:
    """Generate a fresh key pair able to carry ``bit_count`` plaintext bits.

    The modulus is widened past ``bit_length`` when the sequence sum needs it,
    so q > sum(w) holds for long messages too.
    """
    w = generate_superincreasing(bit_count, bit_length, rng)
    modulus_bits = max(bit_length, sum(w).bit_length() + 1)
    r, q = generate_coprime_pair(modulus_bits, rng, max_attempts=max_attempts)
    b = derive_public_key(w, r, q)

    log.info(
        "keys generated",
        bit_count=bit_count,
        bit_length=bit_length,
        modulus_bits=q.bit_length(),
    )
    return KeyPair(private=PrivateKey(w=w, q=q, r=r), public=PublicKey(b=b))
