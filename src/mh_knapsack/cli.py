import json
import os
from typing import Optional

import click
import requests
from rich.console import Console

from mh_knapsack import codec
from mh_knapsack.algorithm.keygen import generate_key_pair
from mh_knapsack.algorithm.knapsack import decrypt as decrypt_bits
from mh_knapsack.config import (
    BIT_LENGTH,
    DEFAULT_API_ENDPOINT,
    DEFAULT_API_HOST,
    DEFAULT_API_PORT,
    ENV_PREFIX,
    MAX_MESSAGE_LENGTH,
)
from mh_knapsack.errors import KnapsackError
from mh_knapsack.logs import JSON_LOGS_ENV, LOG_LEVEL_ENV, LOG_LEVELS, configure_logging
from mh_knapsack.pipeline import make_rng, round_trip, round_trip_many
from mh_knapsack.ui import batch_progress, render_batch_summary, render_key_pair, render_round_trip
from mh_knapsack.utils import key_pair_as_strings, load_messages, parse_int, parse_int_list


seed_option = click.option("--seed", "-s", type=int, default=None, help="Seed for reproducible keys (not secure).")
bit_length_option = click.option(
    "--bit-length",
    "-b",
    type=click.IntRange(min=1),
    default=BIT_LENGTH,
    show_default=True,
    envvar=f"{ENV_PREFIX}_BIT_LENGTH",
    help="Randomness budget in bits for r, q and the superincreasing sequence.",
)


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    envvar=LOG_LEVEL_ENV,
)
@click.option("--json-logs", is_flag=True, envvar=JSON_LOGS_ENV, help="Render log events as JSON.")
def cli(log_level: str, json_logs: bool):
    configure_logging(log_level, json=json_logs)


def read_line() -> str:
    """Read one line of plaintext from stdin."""
    click.echo("Enter a string and I will encrypt it as a single large integer.")
    return click.get_text_stream("stdin").readline().rstrip("\r\n")


@cli.command()
@click.option("--text", "-t", default=None, help="Plaintext to encrypt. Read from stdin when omitted.")
@seed_option
@bit_length_option
def encrypt(text: Optional[str], seed: Optional[int], bit_length: int):
    """Encrypt one line of text with fresh keys, then decrypt it again."""
    if text is None:
        text = read_line()

    try:
        result = round_trip(text, make_rng(seed), bit_length=bit_length, max_length=MAX_MESSAGE_LENGTH)
    except KnapsackError as e:
        raise click.ClickException(str(e))

    Console().print(render_round_trip(result))


@cli.command()
@click.option("--bits", "-n", "bit_count", type=click.IntRange(min=0), required=True, help="Plaintext bits to carry.")
@seed_option
@bit_length_option
@click.option("--show-values", is_flag=True, help="List the key elements.")
@click.option("--json", "as_json", is_flag=True, help="Print key material as JSON.")
def keys(bit_count: int, seed: Optional[int], bit_length: int, show_values: bool, as_json: bool):
    """Generate a key pair and check its invariants."""
    try:
        key_pair = generate_key_pair(bit_count, make_rng(seed), bit_length=bit_length)
    except KnapsackError as e:
        raise click.ClickException(str(e))

    if as_json:
        click.echo(json.dumps(key_pair_as_strings(key_pair), indent=2))
        return
    Console().print(render_key_pair(key_pair, show_values=show_values, problems=key_pair.check()))


@cli.command()
@click.option("--ciphertext", "-c", required=True, help="Ciphertext as a decimal integer.")
@click.option("-r", "r", required=True, help="Multiplier r.")
@click.option("-q", "q", required=True, help="Modulus q.")
@click.option("-w", "w", required=True, help="Comma separated superincreasing sequence.")
def decrypt(ciphertext: str, r: str, q: str, w: str):
    """Decrypt a ciphertext with explicit private key material."""
    try:
        values = parse_int(ciphertext), parse_int(r), parse_int(q), parse_int_list(w)
    except ValueError as e:
        raise click.BadParameter(str(e))

    try:
        bitstring = decrypt_bits(*values)
    except KnapsackError as e:
        raise click.ClickException(str(e))

    click.echo(f"Bits: {bitstring}")
    # Raw bit patterns (e.g. hand-made keys) need not be whole characters.
    if len(bitstring) % codec.BITS_PER_CHAR == 0:
        click.echo(f"Result of decryption: {codec.decode(bitstring)}")


@cli.command()
@click.option("--input", "-i", "input_path", required=True, type=click.Path(exists=True, dir_okay=False))
@seed_option
@bit_length_option
@click.option("--workers", "-w", type=click.IntRange(min=1), default=None, help="Worker threads.")
@click.option("--encoding", default="utf-8", show_default=True, help="Text encoding of the input file.")
def batch(input_path: str, seed: Optional[int], bit_length: int, workers: Optional[int], encoding: str):
    """Round-trip every line of a file, each with its own key pair."""
    try:
        messages = load_messages(input_path, encoding=encoding)
    except (LookupError, UnicodeDecodeError) as e:
        raise click.ClickException(f"Cannot read {input_path} as {encoding}: {e}")
    console = Console()

    with batch_progress(console) as progress:
        task = progress.add_task("Round-tripping", total=len(messages))
        try:
            results = round_trip_many(
                messages,
                seed=seed,
                bit_length=bit_length,
                max_length=MAX_MESSAGE_LENGTH,
                workers=workers,
                on_complete=lambda *_: progress.advance(task),
            )
        except KnapsackError as e:
            raise click.ClickException(str(e))

    console.print(render_batch_summary(results))
    failures = sum(1 for result in results if not result.ok)
    if failures:
        raise click.ClickException(f"{failures} of {len(results)} messages did not round-trip")


@cli.command("demo-api")
@click.option("--host", default=DEFAULT_API_HOST, help="Host to bind the server to")
@click.option("--port", default=DEFAULT_API_PORT, help="Port to bind the server to")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development")
@click.pass_context
def demo_api(ctx: click.Context, host: str, port: int, reload: bool):
    """Start the demo API server."""
    # The server configures logging from the environment at startup, which
    # also reaches the worker process spawned in reload mode.
    os.environ[LOG_LEVEL_ENV] = ctx.parent.params["log_level"].upper()
    os.environ[JSON_LOGS_ENV] = "1" if ctx.parent.params["json_logs"] else "0"

    try:
        import uvicorn
        from knapsack_api.api import app
    except ImportError as e:
        click.echo(f"Error: Demo API dependencies not available: {e}")
        click.echo("Install with: pip install 'mh-knapsack[demo]'")
        raise click.Abort()

    click.echo(f"Starting demo API server on http://{host}:{port}")
    click.echo("Available endpoints:")
    click.echo("  - GET  /api/demo      - Round trip of a fixed message")
    click.echo("  - POST /api/keys      - Generate a key pair")
    click.echo("  - POST /api/encrypt   - Encrypt plaintext under fresh keys")
    click.echo("  - POST /api/decrypt   - Decrypt with explicit private key")
    click.echo("  - POST /api/roundtrip - Generate, encrypt and decrypt")
    click.echo("\nPress Ctrl+C to stop the server")

    if reload:
        # Use import string for reload mode
        uvicorn.run("knapsack_api.api:app", host=host, port=port, reload=True)
    else:
        uvicorn.run(app, host=host, port=port, reload=False)


def fetch_round_trip(endpoint: str, text: str, seed: Optional[int] = None) -> dict:
    """POST a plaintext to the demo API's round-trip endpoint."""
    response = requests.post(endpoint, json={"plaintext": text, "seed": seed}, timeout=10)
    if response.status_code != 200:
        raise click.ClickException(
            f"Failed to post to {endpoint}: {response.status_code} {response.text}"
        )
    return response.json()


@cli.command()
@click.option("--endpoint", "-e", default=DEFAULT_API_ENDPOINT, show_default=True)
@click.option("--text", "-t", default=None, help="Plaintext to send. Read from stdin when omitted.")
@seed_option
def remote(endpoint: str, text: Optional[str], seed: Optional[int]):
    """Round-trip a plaintext through a running demo API."""
    if text is None:
        text = read_line()

    try:
        data = fetch_round_trip(endpoint, text, seed)
    except requests.RequestException as e:
        raise click.ClickException(f"Request failed: {e}")

    click.echo(f"Clear text: {data['plaintext']}")
    click.echo(f"Encrypted as: {data['ciphertext']}")
    click.echo(f"Result of decryption: {data['recovered']}")


if __name__ == "__main__":
    cli()
