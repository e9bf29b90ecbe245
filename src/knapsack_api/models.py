from typing import List, Optional

from pydantic import BaseModel, Field


class KeysRequest(BaseModel):
    bit_count: int = Field(ge=0)
    seed: Optional[int] = None


class PrivateKeyModel(BaseModel):
    w: List[str]
    q: str
    r: str


class PublicKeyModel(BaseModel):
    b: List[str]


class KeysResponse(BaseModel):
    bit_count: int
    private: PrivateKeyModel
    public: PublicKeyModel


class EncryptRequest(BaseModel):
    plaintext: str
    seed: Optional[int] = None


class EncryptResponse(BaseModel):
    ciphertext: str
    bit_count: int
    private: PrivateKeyModel
    public: PublicKeyModel


class DecryptRequest(BaseModel):
    ciphertext: str
    r: str
    q: str
    w: List[str]


class DecryptResponse(BaseModel):
    bitstring: str
    plaintext: str


class RoundTripRequest(BaseModel):
    plaintext: str
    seed: Optional[int] = None


class RoundTripResponse(BaseModel):
    plaintext: str
    ciphertext: str
    recovered: str
    bit_count: int
    ok: bool
