from dataclasses import dataclass
from enum import Enum

from mh_knapsack.models.keys import KeyPair


class PipelineStage(str, Enum):
    IDLE = "idle"
    KEYS_GENERATED = "keys-generated"
    ENCRYPTED = "encrypted"
    DECRYPTED = "decrypted"

    def __str__(self):
        return self.value


@dataclass(frozen=True, slots=True)
class RoundTrip:
    """Immutable record of one generate -> encrypt -> decrypt run."""

    plaintext: str
    bitstring: str
    ciphertext: int
    recovered_bitstring: str
    recovered: str
    key_pair: KeyPair
    stage: PipelineStage = PipelineStage.DECRYPTED

    @property
    def ok(self) -> bool:
        return self.recovered == self.plaintext

    @property
    def bit_count(self) -> int:
        return len(self.bitstring)
