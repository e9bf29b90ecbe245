import random
from math import gcd

import pytest
from mh_knapsack.algorithm.keygen import (
    derive_public_key,
    generate_coprime_pair,
    generate_key_pair,
    generate_superincreasing,
)
from mh_knapsack.config import BIT_LENGTH, MAX_MESSAGE_LENGTH
from mh_knapsack.errors import KeyGenerationFailure


class EvenRandom(random.Random):
    """Generator that only ever yields even numbers, so no pair is ever coprime."""

    def __init__(self, seed=None):
        super().__init__(seed)
        self.calls = 0

    def getrandbits(self, k):
        self.calls += 1
        return super().getrandbits(k) & ~1


class TestGenerateCoprimePair:
    """Test suite for the bounded coprime search"""

    @pytest.mark.parametrize("seed", range(10))
    def test_coprime(self, seed):
        """Test r and q are coprime"""
        r, q = generate_coprime_pair(BIT_LENGTH, random.Random(seed))
        assert gcd(r, q) == 1

    def test_bit_lengths(self):
        """Test q has exactly bit_length bits and r at most that many"""
        r, q = generate_coprime_pair(64, random.Random(7))
        assert q.bit_length() == 64
        assert 0 <= r < 2 ** 64

    def test_reproducible(self):
        """Test the same seed yields the same pair"""
        assert generate_coprime_pair(128, random.Random(3)) == generate_coprime_pair(128, random.Random(3))

    def test_exhaustion_raises(self):
        """Test the search gives up after max_attempts redraws of r"""
        rng = EvenRandom(1)
        with pytest.raises(KeyGenerationFailure, match="after 5 attempts"):
            generate_coprime_pair(32, rng, max_attempts=5)
        # One draw for q, then one per attempt for r.
        assert rng.calls == 6

    def test_exhaustion_is_runtime_error(self):
        """Test KeyGenerationFailure can be caught as RuntimeError"""
        with pytest.raises(RuntimeError):
            generate_coprime_pair(32, EvenRandom(2), max_attempts=1)

    def test_invalid_bit_length(self):
        """Test a non-positive bit length is rejected"""
        with pytest.raises(KeyGenerationFailure, match="must be positive"):
            generate_coprime_pair(0, random.Random(0))


class TestGenerateSuperincreasing:
    """Test suite for superincreasing sequence generation"""

    @pytest.mark.parametrize("n", [1, 8, 16, 100, BIT_LENGTH])
    def test_superincreasing(self, n):
        """Test every element exceeds the sum of all previous ones"""
        w = generate_superincreasing(n, BIT_LENGTH, random.Random(n))
        assert len(w) == n
        running_sum = 0
        for w_i in w:
            assert w_i > running_sum
            running_sum += w_i

    def test_element_bounds(self):
        """Test each element is running sum + 1 + at most (budget // n) random bits"""
        n, budget = 8, 64
        w = generate_superincreasing(n, budget, random.Random(11))
        running_sum = 0
        for w_i in w:
            assert running_sum + 1 <= w_i <= running_sum + 2 ** (budget // n)
            running_sum += w_i

    def test_empty(self):
        """Test n = 0 yields an empty sequence"""
        assert generate_superincreasing(0, BIT_LENGTH, random.Random(0)) == ()

    def test_budget_too_small(self):
        """Test n larger than the bit budget is rejected"""
        with pytest.raises(KeyGenerationFailure, match="641 elements"):
            generate_superincreasing(BIT_LENGTH + 1, BIT_LENGTH, random.Random(0))

    def test_negative_length(self):
        """Test a negative length is rejected"""
        with pytest.raises(KeyGenerationFailure):
            generate_superincreasing(-1, BIT_LENGTH, random.Random(0))

    def test_one_bit_per_element(self):
        """Test n == budget still gives a valid sequence"""
        w = generate_superincreasing(16, 16, random.Random(5))
        assert all(w[i] > sum(w[:i]) for i in range(len(w)))


class TestDerivePublicKey:
    """Test suite for public key derivation"""

    def test_small_example(self):
        """Test b for w = [2, 3, 7, 20], r = 5, q = 41"""
        assert derive_public_key([2, 3, 7, 20], 5, 41) == (10, 15, 35, 18)

    def test_elementwise(self):
        """Test b[i] == (r * w[i]) mod q for generated material"""
        rng = random.Random(99)
        w = generate_superincreasing(40, BIT_LENGTH, rng)
        r, q = generate_coprime_pair(BIT_LENGTH + 64, rng)
        b = derive_public_key(w, r, q)
        assert len(b) == len(w)
        for w_i, b_i in zip(w, b):
            assert b_i == (r * w_i) % q

    def test_empty(self):
        """Test an empty sequence derives an empty public key"""
        assert derive_public_key((), 5, 41) == ()


class TestGenerateKeyPair:
    """Test suite for whole key pair generation"""

    @pytest.mark.parametrize("bit_count", [0, 8, 16, 88, 8 * MAX_MESSAGE_LENGTH])
    def test_invariants(self, bit_count):
        """Test every key invariant holds"""
        key_pair = generate_key_pair(bit_count, random.Random(bit_count))
        private = key_pair.private
        assert key_pair.bit_count == bit_count
        assert key_pair.check() == []
        assert private.q > sum(private.w)
        assert gcd(private.r, private.q) == 1
        assert len(key_pair.public.b) == len(private.w)

    def test_modulus_widened_for_long_messages(self):
        """Test q outgrows bit_length when sum(w) needs more bits"""
        key_pair = generate_key_pair(8 * MAX_MESSAGE_LENGTH, random.Random(4))
        assert sum(key_pair.private.w).bit_length() >= BIT_LENGTH
        assert key_pair.private.q.bit_length() > BIT_LENGTH

    def test_default_modulus_for_short_messages(self):
        """Test q keeps bit_length bits when the sequence sum is small"""
        key_pair = generate_key_pair(16, random.Random(4))
        assert key_pair.private.q.bit_length() == BIT_LENGTH

    def test_reproducible(self):
        """Test the same seed yields the same key pair"""
        assert generate_key_pair(24, random.Random(42)) == generate_key_pair(24, random.Random(42))

    def test_fresh_keys_differ(self):
        """Test different seeds yield different key pairs"""
        assert generate_key_pair(24, random.Random(1)) != generate_key_pair(24, random.Random(2))

    def test_custom_bit_length(self):
        """Test a smaller budget still gives valid keys"""
        key_pair = generate_key_pair(16, random.Random(8), bit_length=32)
        assert key_pair.check() == []
