"""CLI entry point for visual comparison runs."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from visual_compare.imaging.comparator import PageComparator
from visual_compare.imaging.normalizer import ImageNormalizer
from visual_compare.imaging.pixel_diff import PixelDiffEngine
from visual_compare.imaging.scorer import classify, format_outcome
from visual_compare.models.config import EnvironmentConfig, FrameworkConfig
from visual_compare.orchestrator import Orchestrator
from visual_compare.reporter.reporter import Reporter

console = Console()

STATUS_STYLE = {"pass": "green", "fail": "red", "error": "yellow"}


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _load_config(config: str) -> FrameworkConfig:
    try:
        return FrameworkConfig.load(config)
    except FileNotFoundError:
        console.print(f"[red]Config file not found: {config}[/red]")
        console.print("Run 'visual-compare init' to create a default config.")
        sys.exit(1)
    except ValidationError as e:
        console.print(f"[red]Invalid config {config}:[/red]\n{e}")
        sys.exit(1)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Visual comparison of a candidate environment against a reference one."""
    setup_logging(verbose)


@cli.command()
@click.option("--config", "-c", default="visual-config.json", help="Config file path")
@click.option("--device", "-d", "devices", multiple=True, help="Only run these devices")
def run(config: str, devices: tuple[str, ...]) -> None:
    """Capture, compare and report every configured page."""
    cfg = _load_config(config)
    orchestrator = Orchestrator(cfg)
    try:
        outcomes = orchestrator.run(list(devices) or None)
    except KeyError as e:
        console.print(f"[red]{e.args[0]}[/red]")
        sys.exit(1)

    any_failures = False
    for device, outcome in outcomes.items():
        run_result = outcome["run_result"]
        table = Table(title=f"{device} ({run_result.run_id})")
        table.add_column("Metric", style="bold")
        table.add_column("Value")
        table.add_row("Duration", f"{run_result.duration_seconds}s")
        table.add_row("Total Pages", str(run_result.total))
        table.add_row("Passed", f"[green]{run_result.passed}[/green]")
        table.add_row("Failed", f"[red]{run_result.failed}[/red]")
        table.add_row("Errors", f"[yellow]{run_result.errors}[/yellow]")
        if run_result.timed_out:
            table.add_row("Timed out", "[red]yes[/red]")
        console.print(table)
        for fmt, path in outcome["reports"].items():
            console.print(f"  {fmt.upper()} report: [blue]{path}[/blue]")
        if run_result.failed or run_result.errors:
            any_failures = True

    if any_failures:
        sys.exit(1)


@cli.command()
@click.argument("reference", type=click.Path(dir_okay=False))
@click.argument("candidate", type=click.Path(dir_okay=False))
@click.option("--diff", "diff_path", default="diff.png", help="Where to write the diff image")
@click.option("--alt-color/--no-alt-color", default=False,
              help="Paint pixels where the reference is brighter in orange")
def compare(reference: str, candidate: str, diff_path: str, alt_color: bool) -> None:
    """Compare two image files. Both are normalized in place."""
    comparator = PageComparator(
        ImageNormalizer(),
        PixelDiffEngine(alt_color=(255, 165, 0) if alt_color else None),
    )
    result = comparator.compare(Path(reference), Path(candidate), Path(diff_path))
    status = classify(result.outcome)
    style = STATUS_STYLE[status]
    console.print(f"Similarity: [bold]{format_outcome(result.outcome)}[/bold] "
                  f"[{style}]{status.upper()}[/{style}]")
    if result.diff_path:
        console.print(f"Diff image: [blue]{result.diff_path}[/blue]")
    if status != "pass":
        sys.exit(1)


@cli.command()
@click.option("--reference-url", prompt="Reference (prod) base URL", help="Base URL of the reference environment")
@click.option("--candidate-url", prompt="Candidate (staging) base URL", help="Base URL of the candidate environment")
@click.option("--config", "-c", default="visual-config.json", help="Config file path")
def init(reference_url: str, candidate_url: str, config: str) -> None:
    """Create a default configuration file."""
    config_path = Path(config)
    if config_path.exists():
        if not click.confirm(f"{config_path} already exists. Overwrite?"):
            return

    cfg = FrameworkConfig(environments={
        "prod": EnvironmentConfig(base_url=reference_url, urls=["/"]),
        "staging": EnvironmentConfig(base_url=candidate_url, urls=["/"]),
    })
    cfg.save(config_path)
    console.print(f"[green]Created {config_path}[/green]")
    console.print("\nAdd page paths to the staging 'urls' list, then run:")
    console.print("  [blue]visual-compare run[/blue]")


@cli.command()
@click.option("--config", "-c", default="visual-config.json", help="Config file path")
@click.option("--device", "-d", required=True, help="Device whose last run to re-render")
def report(config: str, device: str) -> None:
    """Re-render reports from the last saved run of a device."""
    cfg = _load_config(config)
    reporter = Reporter(cfg)
    run_result = reporter.load_previous_run(device)
    if run_result is None:
        console.print(f"[yellow]No saved run for {device}. Run 'visual-compare run' first.[/yellow]")
        sys.exit(1)
    regressions = reporter.load_saved_regressions(device)
    for fmt, path in reporter.generate_reports(run_result, regressions=regressions).items():
        console.print(f"  {fmt.upper()} report: [blue]{path}[/blue]")


if __name__ == "__main__":
    cli()
