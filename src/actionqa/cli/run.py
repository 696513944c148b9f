"""actionqa run — Execute a suite's tests in a real browser.

Resolves config, loads the suite, opens the target URL in Chromium through
Playwright and runs the selected tests one after the other, printing a line
per finished step and a summary panel at the end.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel

from actionqa.cli.reporter import ConsoleReporter, TestResult
from actionqa.cli.suite import SuiteLoadError, load_suite, resolve_config
from actionqa.config import ActionQAConfig, ActionQAConfigError, speed_to_delay
from actionqa.dsl import Automation
from actionqa.engine.errors import UnknownTestError

console = Console(stderr=True)
output_console = Console()  # stdout for machine-readable output

logger = logging.getLogger("actionqa.cli.run")


def _config_error(exc: Exception, title: str = "Config Error") -> typer.Exit:
    console.print(Panel(f"[red]{exc}[/red]", title=f"[red]{title}[/red]", border_style="red"))
    return typer.Exit(code=2)


def _print_run_header(suite: Path, config: ActionQAConfig, test_ids: list[str]) -> None:
    info_lines = [
        f"[bold]Suite:[/bold]     {suite}",
        f"[bold]URL:[/bold]       {config.base_url}",
        f"[bold]Tests:[/bold]     {', '.join(test_ids)}",
        f"[bold]Step delay:[/bold] {config.step_delay_ms}ms",
        f"[bold]Headless:[/bold]  {config.headless}",
    ]
    console.print()
    console.print(Panel("\n".join(info_lines), title="[bold cyan]ActionQA Run[/bold cyan]", border_style="cyan"))


def _print_summary_panel(results: list[TestResult], duration: float) -> None:
    passed = sum(1 for r in results if r.passed)
    if passed == len(results):
        border = "green"
        verdict = "[bold green]ALL TESTS PASSED[/bold green]"
    else:
        border = "red"
        verdict = "[bold red]TESTS FAILED[/bold red]"

    summary_lines = [
        verdict,
        "",
        f"  Tests:     {passed}/{len(results)} passed",
        f"  Steps:     {sum(r.steps_passed for r in results)} passed, {sum(r.steps_failed for r in results)} failed",
        f"  Duration:  {duration:.1f}s",
    ]
    for result in results:
        if not result.passed:
            summary_lines.append(f"  [red]✗ {result.id}[/red]  [dim]{result.error}[/dim]")

    console.print()
    console.print(Panel("\n".join(summary_lines), border_style=border))
    console.print()


def _write_junit_xml(junit_path: Path, suite_name: str, results: list[TestResult], duration: float) -> None:
    """Write a JUnit XML report for CI integration."""
    import xml.etree.ElementTree as ET

    testsuite = ET.Element("testsuite")
    testsuite.set("name", f"actionqa-{suite_name}")
    testsuite.set("tests", str(len(results)))
    testsuite.set("time", f"{duration:.2f}")

    failures = 0
    for result in results:
        testcase = ET.SubElement(testsuite, "testcase")
        testcase.set("name", result.id)
        testcase.set("classname", f"actionqa.{suite_name}")
        testcase.set("time", f"{result.duration_seconds:.2f}")
        if not result.passed:
            failures += 1
            failure = ET.SubElement(testcase, "failure")
            failure.set("message", result.error or "Test failed")
            failure.text = result.error

    testsuite.set("failures", str(failures))
    tree = ET.ElementTree(testsuite)
    ET.indent(tree, space="  ")
    tree.write(str(junit_path), xml_declaration=True, encoding="unicode")


async def _run_in_browser(automation: Automation, test_ids: list[str]) -> None:
    from actionqa.engine.playwright_provider import PlaywrightElementProvider, close_page, open_page

    config = automation.config
    playwright, browser, page = await open_page(config.base_url, headless=config.headless, viewport=config.viewport)
    try:
        automation.attach(PlaywrightElementProvider(page))
        for test_id in test_ids:
            await automation.run_test(test_id)
    finally:
        await close_page(playwright, browser)


def run(
    suite: Path = typer.Argument(..., help="Python suite file exposing install(automation)."),
    url: Optional[str] = typer.Option(None, "--url", "-u", help="Page to open before running (overrides base_url)."),
    test: Optional[list[str]] = typer.Option(
        None,
        "--test",
        "-t",
        help="Test ID to run; repeat for several. Default: every registered test.",
    ),
    speed: Optional[str] = typer.Option(None, "--speed", help="Step delay preset: slow, normal or fast."),
    headed: bool = typer.Option(False, "--headed", help="Show the browser window."),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config.yaml."),
    junit_xml: Optional[Path] = typer.Option(
        None,
        "--junit-xml",
        help="Path to write JUnit XML report (for CI integration).",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print results as JSON on stdout."),
) -> None:
    """Run a suite's tests against a page.

    Exit codes: 0 all passed, 1 a test failed, 2 config or suite error,
    3 browser or infrastructure error.
    """
    try:
        config = resolve_config(config_path)
        if url:
            config.base_url = url
        if speed:
            config.step_delay_ms = speed_to_delay(speed)
        if headed:
            config.headless = False
    except ActionQAConfigError as exc:
        raise _config_error(exc)

    if not config.base_url:
        raise _config_error(
            ActionQAConfigError("No URL to open.\n\nTo fix: pass --url or set base_url in .actionqa/config.yaml")
        )

    automation = Automation(config=config)
    try:
        load_suite(suite, automation)
    except SuiteLoadError as exc:
        raise _config_error(exc, title="Suite Error")

    test_ids = list(test) if test else [t.id for t in automation.registry.tests]
    try:
        for test_id in test_ids:
            automation.registry.get(test_id)
    except UnknownTestError as exc:
        raise _config_error(exc, title="Suite Error")
    if not test_ids:
        console.print(f"[yellow]No tests registered by {suite}[/yellow]")
        raise typer.Exit(code=0)

    reporter = ConsoleReporter(console)
    reporter.subscribe(automation.events)
    if not as_json:
        _print_run_header(suite, config, test_ids)

    start_time = time.monotonic()
    try:
        asyncio.run(_run_in_browser(automation, test_ids))
    except KeyboardInterrupt:
        console.print("\n[yellow]Run interrupted by user.[/yellow]")
        raise typer.Exit(code=1)
    except ImportError as exc:
        console.print(
            Panel(
                f"[red]Failed to import Playwright:[/red] {exc}\n\n"
                "Try: [bold]pip install actionqa[browser][/bold]\n"
                "Then: [bold]playwright install chromium[/bold]",
                title="[red]Import Error[/red]",
                border_style="red",
            )
        )
        raise typer.Exit(code=3)
    except Exception as exc:
        logger.exception("Unexpected error during run")
        console.print(
            Panel(
                f"[red]Unexpected error:[/red] {exc}\n\n"
                "Run with [bold]--verbose[/bold] for full traceback.",
                title="[red]Infrastructure Error[/red]",
                border_style="red",
            )
        )
        raise typer.Exit(code=3)
    duration = time.monotonic() - start_time

    results = reporter.results
    all_passed = all(r.passed for r in results)
    if as_json:
        output_console.print(
            json.dumps(
                {
                    "passed": all_passed,
                    "duration_seconds": round(duration, 2),
                    "tests": [r.to_dict() for r in results],
                },
                indent=2,
            )
        )
    else:
        _print_summary_panel(results, duration)

    if junit_xml:
        try:
            _write_junit_xml(junit_xml, suite.stem, results, duration)
        except OSError as exc:
            console.print(f"[yellow]Warning: Failed to write JUnit XML: {exc}[/yellow]")

    if not all_passed:
        raise typer.Exit(code=1)
