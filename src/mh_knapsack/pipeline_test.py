import random

import pytest
from mh_knapsack.config import MAX_MESSAGE_LENGTH
from mh_knapsack.errors import MessageTooLong, UnsupportedCharacter
from mh_knapsack.models.round_trip import PipelineStage
from mh_knapsack.pipeline import make_rng, round_trip, round_trip_many


class TestMakeRng:
    """Test suite for randomness source selection"""

    def test_seeded_is_reproducible(self):
        """Test a seed gives a reproducible generator"""
        assert make_rng(5).getrandbits(64) == make_rng(5).getrandbits(64)

    def test_unseeded_is_system_random(self):
        """Test no seed gives an OS entropy generator"""
        assert isinstance(make_rng(None), random.SystemRandom)


class TestRoundTrip:
    """Test suite for the single message pipeline"""

    def test_hello(self):
        """Test a simple message reaches the decrypted stage intact"""
        result = round_trip("Hello, world!", random.Random(1))
        assert result.ok
        assert result.recovered == "Hello, world!"
        assert result.stage == PipelineStage.DECRYPTED
        assert result.bit_count == 8 * 13
        assert result.key_pair.bit_count == 8 * 13
        assert result.recovered_bitstring == result.bitstring

    def test_empty(self):
        """Test the empty message encrypts to 0 and decrypts to ''"""
        result = round_trip("", random.Random(0))
        assert result.ciphertext == 0
        assert result.recovered_bitstring == ""
        assert result.recovered == ""

    def test_max_length_message(self):
        """Test an 80 character message round trips"""
        text = "x" * MAX_MESSAGE_LENGTH
        result = round_trip(text, random.Random(80), max_length=MAX_MESSAGE_LENGTH)
        assert result.ok

    def test_too_long(self):
        """Test the caller bound is enforced before keys are generated"""
        with pytest.raises(MessageTooLong, match="too long"):
            round_trip("x" * (MAX_MESSAGE_LENGTH + 1), random.Random(0), max_length=MAX_MESSAGE_LENGTH)

    def test_no_bound_by_default(self):
        """Test the core accepts long messages when no bound is given"""
        assert round_trip("y" * 90, random.Random(90), bit_length=720).ok

    def test_unsupported_character(self):
        """Test characters outside 8 bits fail without a partial result"""
        with pytest.raises(UnsupportedCharacter):
            round_trip("snow ☃", random.Random(0))

    def test_fresh_keys_per_message(self):
        """Test two runs of the same message use different key pairs"""
        rng = random.Random(3)
        first = round_trip("Hi", rng)
        second = round_trip("Hi", rng)
        assert first.key_pair != second.key_pair
        assert first.ok and second.ok

    def test_hi_scenario(self):
        """Test 'Hi' round trips across many seeded trials"""
        for seed in range(100):
            assert round_trip("Hi", random.Random(seed)).recovered == "Hi"


class TestRoundTripMany:
    """Test suite for the concurrent batch runner"""

    def test_order_preserved(self):
        """Test results come back in input order"""
        texts = ["alpha", "beta", "", "gamma delta", "\xe9t\xe9"]
        results = round_trip_many(texts, seed=1, workers=3)
        assert [result.plaintext for result in results] == texts
        assert all(result.ok for result in results)

    def test_seeded_is_reproducible(self):
        """Test a seed gives the same ciphertexts whatever the scheduling"""
        texts = [f"message {i}" for i in range(8)]
        first = round_trip_many(texts, seed=9, workers=4)
        second = round_trip_many(texts, seed=9, workers=2)
        assert [r.ciphertext for r in first] == [r.ciphertext for r in second]

    def test_unseeded(self):
        """Test the system generator path round trips"""
        assert all(result.ok for result in round_trip_many(["a", "b"]))

    def test_on_complete_called_per_message(self):
        """Test the progress callback fires once per message"""
        seen = []
        round_trip_many(["a", "b", "c"], seed=0, on_complete=lambda index, result: seen.append(index))
        assert sorted(seen) == [0, 1, 2]

    def test_error_propagates(self):
        """Test a failing message surfaces its error"""
        with pytest.raises(MessageTooLong):
            round_trip_many(["ok", "z" * 100], seed=0, max_length=MAX_MESSAGE_LENGTH)
