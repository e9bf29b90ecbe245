from concurrent.futures import ThreadPoolExecutor, as_completed
from random import Random, SystemRandom
from typing import Callable, Iterable, Optional

import structlog

from mh_knapsack import codec
from mh_knapsack.algorithm.keygen import generate_key_pair
from mh_knapsack.algorithm.knapsack import decrypt, encrypt
from mh_knapsack.config import BIT_LENGTH
from mh_knapsack.errors import MessageTooLong
from mh_knapsack.models.round_trip import PipelineStage, RoundTrip


log = structlog.get_logger()

OnComplete = Callable[[int, RoundTrip], None]


def make_rng(seed: Optional[int | str] = None) -> Random:
    """Seeded, reproducible generator when a seed is given, OS entropy otherwise."""
    if seed is None:
        return SystemRandom()
    return Random(seed)


def round_trip(
    text: str,
    rng: Random,
    *,
    bit_length: int = BIT_LENGTH,
    max_length: Optional[int] = None,
) -> RoundTrip:
    """Generate a fresh key pair for ``text``, encrypt it and decrypt it again.

    The key pair is sized to the message (8 bits per character) and only lives
    for this call.
    """
    if max_length is not None and len(text) > max_length:
        raise MessageTooLong(len(text), max_length)

    stage = PipelineStage.IDLE
    bitstring = codec.encode(text)
    pipeline_log = log.bind(bit_count=len(bitstring))
    pipeline_log.debug("stage", stage=str(stage))

    key_pair = generate_key_pair(len(bitstring), rng, bit_length=bit_length)
    stage = PipelineStage.KEYS_GENERATED
    pipeline_log.debug("stage", stage=str(stage))

    ciphertext = encrypt(bitstring, key_pair.public.b)
    stage = PipelineStage.ENCRYPTED
    pipeline_log.debug("stage", stage=str(stage), ciphertext_bits=ciphertext.bit_length())

    private = key_pair.private
    recovered_bits = decrypt(ciphertext, private.r, private.q, private.w)
    recovered = codec.decode(recovered_bits)
    stage = PipelineStage.DECRYPTED
    pipeline_log.info("round trip complete", stage=str(stage), ok=recovered == text)

    return RoundTrip(
        plaintext=text,
        bitstring=bitstring,
        ciphertext=ciphertext,
        recovered_bitstring=recovered_bits,
        recovered=recovered,
        key_pair=key_pair,
        stage=stage,
    )


def round_trip_many(
    texts: Iterable[str],
    *,
    seed: Optional[int] = None,
    bit_length: int = BIT_LENGTH,
    max_length: Optional[int] = None,
    workers: Optional[int] = None,
    on_complete: Optional[OnComplete] = None,
) -> list[RoundTrip]:
    """Round-trip every message independently on a thread pool.

    Each message gets its own generator, derived from ``seed`` and its index,
    so results are reproducible regardless of scheduling. Results come back in
    input order.
    """
    texts = list(texts)
    shared = SystemRandom() if seed is None else None
    results: list[Optional[RoundTrip]] = [None] * len(texts)

    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = {}
        for index, text in enumerate(texts):
            rng = shared if shared is not None else make_rng(f"{seed}:{index}")
            future = executor.submit(round_trip, text, rng, bit_length=bit_length, max_length=max_length)
            futures[future] = index

        for future in as_completed(futures):
            index = futures[future]
            results[index] = future.result()
            if on_complete is not None:
                on_complete(index, results[index])

    log.info("batch complete", messages=len(texts), failures=sum(1 for r in results if not r.ok))
    return results
