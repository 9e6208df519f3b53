"""Console rendering helpers for report_uploader CLI."""
from __future__ import annotations

from typing import Any, Dict, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

console = Console(stderr=True)


def mask_secret(value: Optional[str]) -> str:
    if not value:
        return "-"
    return "*" * 8


def render_configuration_summary(config: Dict[str, Any], target: Optional[Console] = None) -> None:
    """Render startup configuration summary."""
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold cyan", justify="right")
    table.add_column(style="white")

    for key, value in config.items():
        rendered = "-" if value is None else str(value)
        table.add_row(key, rendered)

    panel = Panel(
        table,
        title="[bold green]ssrs-up[/bold green]",
        subtitle="[dim]report uploader[/dim]",
        border_style="blue",
    )
    (target or console).print(panel)
