from typing import Literal, Optional, Sequence, TypeAlias

from rich.console import Console, Group
from rich.markup import escape
from rich.panel import Panel
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from mh_knapsack.models.keys import KeyPair
from mh_knapsack.models.round_trip import RoundTrip


COLORS = {
    "plaintext": "spring_green2",
    "ciphertext": "bright_red",
    "recovered": {
        "ok": "turquoise2",
        "mismatch": "bold red",
    },
    "private": "yellow",
    "public": "cyan",
}

KeyPart: TypeAlias = Literal["private", "public"]


def styled(value: str, style: str) -> str:
    return f"[{style}]{escape(value)}[/{style}]"


def abbreviate(value: int, width: int = 48) -> str:
    """Decimal form of a big integer, middle elided past ``width`` digits."""
    digits = str(value)
    if len(digits) <= width:
        return digits
    half = (width - 3) // 2
    return f"{digits[:half]}...{digits[-half:]} ({len(digits)} digits)"


def render_round_trip(result: RoundTrip) -> Table:
    """Render cleartext, ciphertext and decryption result of one message."""
    recovered_style = COLORS["recovered"]["ok" if result.ok else "mismatch"]

    table = Table(title="Merkle-Hellman Knapsack", show_header=False)
    table.add_column("Field", justify="right", style="dim", no_wrap=True)
    table.add_column("Value", overflow="fold")
    table.add_row("Clear text", styled(result.plaintext, COLORS["plaintext"]))
    table.add_row("Clear text bytes", str(len(result.plaintext.encode("utf-8"))))
    table.add_row("Encrypted as", styled(str(result.ciphertext), COLORS["ciphertext"]))
    table.add_row("Result of decryption", styled(result.recovered, recovered_style))
    return table


def key_values_table(values: Sequence[int], part: KeyPart, name: str, limit: int = 16) -> Table:
    table = Table(show_header=True, show_edge=False, padding=(0, 1))
    table.add_column("i", justify="right", style="dim")
    table.add_column(name, style=COLORS[part], no_wrap=True, overflow="crop")
    for i, value in enumerate(values[:limit]):
        table.add_row(str(i), abbreviate(value))
    if len(values) > limit:
        table.add_row("...", f"{len(values) - limit} more")
    return table


def render_key_pair(key_pair: KeyPair, show_values: bool = False, problems: Optional[list[str]] = None) -> Panel:
    """Render key sizes, invariant status and optionally the key elements."""
    private = key_pair.private

    summary = Table(show_header=False, show_edge=False)
    summary.add_column("Field", justify="right", style="dim", no_wrap=True)
    summary.add_column("Value")
    summary.add_row("Bits", str(key_pair.bit_count))
    summary.add_row("q", styled(abbreviate(private.q), COLORS["private"]))
    summary.add_row("r", styled(abbreviate(private.r), COLORS["private"]))
    summary.add_row("sum(w)", abbreviate(sum(private.w)))
    if problems:
        summary.add_row("Invariants", styled("; ".join(problems), "bold red"))
    else:
        summary.add_row("Invariants", styled("ok", "green"))

    parts = [summary]
    if show_values:
        parts.append(key_values_table(private.w, "private", "w (private)"))
        parts.append(key_values_table(key_pair.public.b, "public", "b (public)"))
    return Panel(Group(*parts), title="Key pair", border_style="dim")


def render_batch_summary(results: Sequence[RoundTrip]) -> Table:
    table = Table(title=f"{len(results)} messages")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Clear text", style=COLORS["plaintext"], overflow="ellipsis", max_width=40)
    table.add_column("Bits", justify="right")
    table.add_column("Ciphertext", style=COLORS["ciphertext"], no_wrap=True, overflow="crop")
    table.add_column("Status", justify="center")
    for index, result in enumerate(results):
        status = styled("ok", "green") if result.ok else styled("mismatch", "bold red")
        table.add_row(str(index), escape(result.plaintext), str(result.bit_count), abbreviate(result.ciphertext, 32), status)
    return table


def batch_progress(console: Optional[Console] = None) -> Progress:
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        console=console,
        transient=True,
    )
