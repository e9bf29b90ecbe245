from dataclasses import dataclass
from math import gcd
from typing import Tuple


@dataclass(frozen=True, slots=True)
class PrivateKey:
    """Superincreasing sequence w, modulus q and multiplier r."""

    w: Tuple[int, ...]
    q: int
    r: int

    def is_superincreasing(self) -> bool:
        running_sum = 0
        for w_i in self.w:
            if w_i <= running_sum:
                return False
            running_sum += w_i
        return True


@dataclass(frozen=True, slots=True)
class PublicKey:
    """General knapsack b, where b[i] = (r * w[i]) mod q."""

    b: Tuple[int, ...]


@dataclass(frozen=True, slots=True)
class KeyPair:
    private: PrivateKey
    public: PublicKey

    @property
    def bit_count(self) -> int:
        return len(self.private.w)

    def check(self) -> list[str]:
        """Return the key invariants this pair violates (empty when valid)."""
        problems = []
        private = self.private
        if not private.is_superincreasing():
            problems.append("w is not superincreasing")
        if private.q <= sum(private.w):
            problems.append("q is not greater than sum(w)")
        if gcd(private.r, private.q) != 1:
            problems.append("r and q are not coprime")
        if len(self.public.b) != len(private.w):
            problems.append("len(b) differs from len(w)")
        elif any(b_i != (private.r * w_i) % private.q for w_i, b_i in zip(private.w, self.public.b)):
            problems.append("b is not derived from (w, r, q)")
        return problems
