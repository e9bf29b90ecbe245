from contextlib import asynccontextmanager

from fastapi import FastAPI, APIRouter, HTTPException
import structlog

from mh_knapsack import codec
from mh_knapsack.algorithm.keygen import generate_key_pair
from mh_knapsack.algorithm.knapsack import decrypt, encrypt
from mh_knapsack.config import MAX_MESSAGE_LENGTH
from mh_knapsack.errors import KnapsackError, MessageTooLong
from mh_knapsack.logs import configure_logging_from_env
from mh_knapsack.pipeline import make_rng, round_trip
from mh_knapsack.utils import key_pair_as_strings, parse_int

from . import models

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging_from_env()
    yield


# Create the FastAPI app
app = FastAPI(title="Merkle-Hellman Knapsack Demo API", lifespan=lifespan)

# Create the router for API endpoints
router = APIRouter()

DEMO_PLAINTEXT = "Hello, world!"


def build_round_trip_response(plaintext: str, seed: int | None = None) -> models.RoundTripResponse:
    """ Round-trip the plaintext with a fresh key pair and report the result. """
    result = round_trip(plaintext, make_rng(seed), max_length=MAX_MESSAGE_LENGTH)
    return models.RoundTripResponse(
        plaintext=result.plaintext,
        ciphertext=str(result.ciphertext),
        recovered=result.recovered,
        bit_count=result.bit_count,
        ok=result.ok,
    )


@router.get("/demo", response_model=models.RoundTripResponse)
def demo():
    """ Round trip of a fixed message with fresh keys. """
    return build_round_trip_response(DEMO_PLAINTEXT)


@router.post("/keys", response_model=models.KeysResponse)
def keys(req: models.KeysRequest):
    """ Generate a key pair able to carry the requested number of bits. """
    try:
        key_pair = generate_key_pair(req.bit_count, make_rng(req.seed))
    except KnapsackError as e:
        raise HTTPException(status_code=400, detail=f"Key generation error: {e}")
    return models.KeysResponse(**key_pair_as_strings(key_pair))


@router.post("/encrypt", response_model=models.EncryptResponse)
def encrypt_api(req: models.EncryptRequest):
    """ Encrypt the plaintext under a fresh key pair.
    Keys are not kept server side, so the private key is returned with the ciphertext.
    """
    try:
        if len(req.plaintext) > MAX_MESSAGE_LENGTH:
            raise MessageTooLong(len(req.plaintext), MAX_MESSAGE_LENGTH)
        bitstring = codec.encode(req.plaintext)
        key_pair = generate_key_pair(len(bitstring), make_rng(req.seed))
        ciphertext = encrypt(bitstring, key_pair.public.b)
    except KnapsackError as e:
        log.warning("encryption rejected", error=str(e))
        raise HTTPException(status_code=400, detail=f"Encryption error: {e}")

    log.info("encrypted", bit_count=key_pair.bit_count, ciphertext=str(ciphertext))
    key_material = key_pair_as_strings(key_pair)
    return models.EncryptResponse(
        ciphertext=str(ciphertext),
        bit_count=key_pair.bit_count,
        private=key_material["private"],
        public=key_material["public"],
    )


@router.post("/decrypt", response_model=models.DecryptResponse)
def decrypt_api(req: models.DecryptRequest):
    """ Decrypt a ciphertext with caller supplied private key material. """
    try:
        ciphertext = parse_int(req.ciphertext)
        r = parse_int(req.r)
        q = parse_int(req.q)
        w = tuple(parse_int(w_i) for w_i in req.w)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"{e}")

    try:
        bitstring = decrypt(ciphertext, r, q, w)
        plaintext = codec.decode(bitstring)
    except KnapsackError as e:
        log.warning("decryption failed", error=str(e), bit_count=len(w))
        raise HTTPException(status_code=400, detail=f"Decryption error: {e}")

    log.info("decrypted", bit_count=len(w))
    return models.DecryptResponse(bitstring=bitstring, plaintext=plaintext)


@router.post("/roundtrip", response_model=models.RoundTripResponse)
def round_trip_api(req: models.RoundTripRequest):
    """ Generate keys, encrypt and decrypt the plaintext in one call. """
    try:
        return build_round_trip_response(req.plaintext, req.seed)
    except KnapsackError as e:
        log.warning("round trip rejected", error=str(e))
        raise HTTPException(status_code=400, detail=f"{e}")


# Include the router in the app (after all routes are defined)
app.include_router(router, prefix="/api")
