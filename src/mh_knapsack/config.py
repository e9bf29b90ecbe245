"""Defaults shared by the CLI, the pipeline and the demo API."""

# Randomness budget (in bits) for r, q and the superincreasing sequence.
BIT_LENGTH = 640

# Caller-side bound on plaintext length; the core itself accepts any length.
MAX_MESSAGE_LENGTH = 80

MAX_COPRIME_ATTEMPTS = 1000

ENV_PREFIX = "MH_KNAPSACK"

DEFAULT_API_HOST = "127.0.0.1"
DEFAULT_API_PORT = 8000
DEFAULT_API_ENDPOINT = f"http://{DEFAULT_API_HOST}:{DEFAULT_API_PORT}/api/roundtrip"
