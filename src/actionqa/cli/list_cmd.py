"""actionqa list — Show the tests a suite registers.

Loads the suite without a browser; every test is compiled at registration, so
the step tree is available before anything runs.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

from actionqa.cli.suite import SuiteLoadError, load_suite
from actionqa.dsl import Automation

console = Console()


def _add_steps(tree: Tree, action: dict[str, Any]) -> None:
    for step in action.get("steps", []):
        branch = tree.add(f"[dim]{step['type']}[/dim]  {step['description']}")
        if step.get("steps"):
            _add_steps(branch, step)


def list_tests(
    suite: Path = typer.Argument(..., help="Python suite file exposing install(automation)."),
    steps: bool = typer.Option(False, "--steps", "-s", help="Show each test's compiled step tree."),
) -> None:
    """List registered tests."""
    automation = Automation()
    try:
        load_suite(suite, automation)
    except SuiteLoadError as exc:
        console.print(Panel(str(exc), title="[red]Suite Error[/red]", border_style="red"))
        raise typer.Exit(code=2)

    tests = automation.registry.tests
    if not tests:
        console.print(f"[yellow]No tests registered by {suite}[/yellow]")
        return

    table = Table(title=f"Tests in {suite.name}", show_lines=False)
    table.add_column("Test ID", style="cyan")
    table.add_column("Steps", justify="right")
    for registered in tests:
        table.add_row(registered.id, str(len(registered.action.steps)))
    console.print(table)

    if steps:
        for registered in tests:
            tree = Tree(f"[bold]{registered.id}[/bold]")
            _add_steps(tree, registered.action.to_json())
            console.print(tree)
