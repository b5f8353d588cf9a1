"""Rich table builders used by the CLI.

Search results are shown as one table of nodes and one of edges.
"""

from __future__ import annotations

import json

from rich.table import Table


def _format_properties(properties: dict) -> str:
    return ", ".join(f"{k}={json.dumps(v, default=str)}" for k, v in properties.items())


def build_nodes_table(nodes) -> Table:
    """Build a (ID, Labels, Properties) table."""
    table = Table(show_header=True, title="Nodes")
    table.add_column("ID", style="cyan")
    table.add_column("Labels")
    table.add_column("Properties")
    for node in nodes:
        table.add_row(node.id, ", ".join(node.labels), _format_properties(node.properties))
    return table


def build_edges_table(edges) -> Table:
    """Build a (ID, Label, From, To, Properties) table."""
    table = Table(show_header=True, title="Edges")
    table.add_column("ID", style="cyan")
    table.add_column("Label")
    table.add_column("From")
    table.add_column("To")
    table.add_column("Properties")
    for edge in edges:
        table.add_row(
            edge.id,
            edge.label,
            edge.from_,
            edge.to,
            _format_properties(edge.properties),
        )
    return table
