"""gremlink CLI - manage vertices and edges on a Gremlin endpoint.

This module provides the command-line interface for gremlink,
enabling connectivity checks, upserts, deletes, and subgraph search.
"""

from __future__ import annotations

import json
import logging
import traceback
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Annotated, Any, Optional

import typer
from dotenv import load_dotenv
from rich.console import Console

from gremlink.core.errors import ConnectionError as GraphConnectionError
from gremlink.core.errors import GremlinkError

# Load environment variables from .env file
load_dotenv()

app = typer.Typer(
    name="gremlink",
    help="Retrying Gremlin client with idempotent upserts and subgraph search",
    no_args_is_help=True,
)

# Rich console for formatted output
console = Console()
err_console = Console(stderr=True)

# Global verbose flag
_verbose: bool = False


def set_verbose(verbose: bool) -> None:
    """Set global verbose mode."""
    global _verbose
    _verbose = verbose


def is_verbose() -> bool:
    """Check if verbose mode is enabled."""
    return _verbose


def print_exception(e: Exception) -> None:
    """Print exception details in verbose mode."""
    if _verbose:
        err_console.print("\n[dim]--- Traceback (verbose mode) ---[/dim]")
        err_console.print(f"[dim]{traceback.format_exc()}[/dim]")


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging and full tracebacks"),
    ] = False,
) -> None:
    """gremlink CLI - Gremlin endpoint toolkit."""
    from gremlink.core.config import get_config

    set_verbose(verbose)
    level = logging.DEBUG if verbose else get_config().log_level.upper()
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def parse_value(raw: str) -> Any:
    """Parse a CLI value as JSON, falling back to the raw string."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def parse_properties(items: list[str] | None) -> dict[str, Any]:
    """Parse repeated ``key=value`` options into a property mapping."""
    properties: dict[str, Any] = {}
    for item in items or []:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"Expected key=value, got {item!r}")
        properties[key] = parse_value(value)
    return properties


def get_client():
    """Get a connected client with error handling."""
    from gremlink.client import GremlinkClient

    try:
        client = GremlinkClient()
        client.connect()
        return client
    except GraphConnectionError as e:
        err_console.print(f"[red]Error:[/red] Failed to connect: {e}")
        err_console.print(
            "[yellow]Hint:[/yellow] Check NEPTUNE_ENDPOINT, NEPTUNE_PORT, USE_IAM and AWS credentials"
        )
        print_exception(e)
        raise typer.Exit(1)


@contextmanager
def open_client() -> Iterator[Any]:
    """Context manager that opens a client and reports library errors."""
    client = get_client()
    try:
        yield client
    except GremlinkError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        print_exception(e)
        raise typer.Exit(1)
    finally:
        client.close()


@app.command()
def ping() -> None:
    """Check that the endpoint answers a trivial traversal."""
    with open_client() as client:
        count = client.query(lambda g: g.V().limit(1).count().next())
        console.print(f"[green]✓[/green] Connected ({count} vertex sampled)")


@app.command()
def search(
    focus: Annotated[
        Optional[str],
        typer.Option("--focus", "-f", help="Anchor vertex as LABEL:KEY:VALUE"),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output machine-readable JSON"),
    ] = False,
) -> None:
    """Search the graph, optionally around one vertex.

    Example:
        gremlink search --focus person:name:Eric
    """
    from gremlink.cli._tables import build_edges_table, build_nodes_table
    from gremlink.core.models import Focus, SearchOptions

    options = SearchOptions()
    if focus:
        parts = focus.split(":", 2)
        if len(parts) != 3:
            err_console.print(f"[red]Error:[/red] Invalid focus: {focus}")
            err_console.print("  Expected LABEL:KEY:VALUE")
            raise typer.Exit(1)
        label, key, value = parts
        options = SearchOptions(focus=Focus(label=label, key=key, value=parse_value(value)))

    with open_client() as client:
        result = client.search(options)

        if json_output:
            payload = result.model_dump(by_alias=True)
            typer.echo(json.dumps(payload, ensure_ascii=False, indent=2, default=str))
            return

        if not result.nodes:
            console.print("[yellow]No nodes found[/yellow]")
            return
        console.print(build_nodes_table(result.nodes))
        if result.edges:
            console.print(build_edges_table(result.edges))


@app.command("save-node")
def save_node(
    node_id: Annotated[str, typer.Argument(help="Vertex ID")],
    labels: Annotated[
        list[str],
        typer.Option("--label", "-l", help="Vertex label (repeatable, ordered)"),
    ],
    props: Annotated[
        Optional[list[str]],
        typer.Option("--prop", "-p", help="Property as key=value (repeatable)"),
    ] = None,
) -> None:
    """Create or update a vertex; its properties become exactly --prop.

    Example:
        gremlink save-node v1 -l person -p name=Eric -p age=42
    """
    from gremlink.core.models import Node

    node = Node(id=node_id, labels=labels, properties=parse_properties(props))
    with open_client() as client:
        result = client.save_node(node)
        verb = "Created" if result.created else "Updated"
        console.print(f"[green]✓[/green] {verb} node {node_id}")


@app.command("delete-node")
def delete_node(
    node_id: Annotated[str, typer.Argument(help="Vertex ID")],
) -> None:
    """Delete a vertex and all of its edges."""
    with open_client() as client:
        client.delete_node(node_id)
        console.print(f"[green]✓[/green] Deleted node {node_id}")


@app.command("save-edge")
def save_edge(
    edge_id: Annotated[str, typer.Argument(help="Edge ID")],
    label: Annotated[str, typer.Option("--label", "-l", help="Edge label")],
    from_id: Annotated[str, typer.Option("--from", help="Source vertex ID")],
    to_id: Annotated[str, typer.Option("--to", help="Target vertex ID")],
    props: Annotated[
        Optional[list[str]],
        typer.Option("--prop", "-p", help="Property as key=value (repeatable)"),
    ] = None,
) -> None:
    """Create or update an edge; label and endpoints only apply on creation.

    Example:
        gremlink save-edge e1 -l owns --from v1 --to v2 -p since=2020
    """
    from gremlink.core.models import Edge

    edge = Edge(
        id=edge_id,
        label=label,
        to=to_id,
        properties=parse_properties(props),
        **{"from": from_id},
    )
    with open_client() as client:
        result = client.save_edge(edge)
        verb = "Created" if result.created else "Updated"
        console.print(f"[green]✓[/green] {verb} edge {edge_id}")


@app.command("delete-edge")
def delete_edge(
    edge_id: Annotated[str, typer.Argument(help="Edge ID")],
) -> None:
    """Delete an edge."""
    with open_client() as client:
        client.delete_edge(edge_id)
        console.print(f"[green]✓[/green] Deleted edge {edge_id}")


if __name__ == "__main__":
    app()
