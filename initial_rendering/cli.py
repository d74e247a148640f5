"""CLI entry point for initial rendering comparisons."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Optional

import click
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from initial_rendering.capture.devices import DeviceRegistry
from initial_rendering.errors import InitialRenderingError
from initial_rendering.models.config import DEFAULT_DEVICE, RenderingConfig, ServerConfig
from initial_rendering.models.report import RenderingReport
from initial_rendering.orchestrator import Orchestrator
from initial_rendering.reporter.html_report import format_number, generate_html_report
from initial_rendering.reporter.json_report import generate_json_report, load_json_report

console = Console()

DEFAULT_CONFIG_PATH = "initial-rendering.json"


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def build_config(
    url: Optional[str],
    config_path: Optional[str],
    overrides: dict[str, Any],
) -> RenderingConfig:
    """Merge a config file (if any), the URL argument and command line overrides."""
    data: dict[str, Any] = {}
    if config_path:
        data = RenderingConfig.load(config_path).model_dump()
    if url:
        data["url"] = url
    if not data.get("url"):
        raise click.UsageError("A URL is required (argument or config file)")
    data.update({k: v for k, v in overrides.items() if v is not None})
    return RenderingConfig(**data)


def print_summary(report: RenderingReport) -> None:
    table = Table(title=f"Initial rendering of {report.url}")
    table.add_column("Step", style="bold")
    table.add_column("Diff pixels", justify="right")
    table.add_column("Ratio", justify="right")
    for step in report.steps:
        color = "green" if step.num_diff_pixels == 0 else "yellow"
        table.add_row(step.name, format_number(step.num_diff_pixels), f"[{color}]{step.ratio:.2f}%[/{color}]")
    console.print(table)
    console.print(
        f"Device: {report.device} · {report.width}x{report.height} "
        f"({format_number(report.total_pixels)}px) · v{report.version}"
    )


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Compare the initial, no-assets and fully loaded rendering of a page."""
    setup_logging(verbose)


@cli.command()
@click.argument("url", required=False)
@click.option("--config", "-c", "config_path", default=None, help="Config file path")
@click.option("--device", "-d", default=None, help=f"Device profile name (default: {DEFAULT_DEVICE})")
@click.option("--username", default=None, help="HTTP basic-auth username")
@click.option("--password", default=None, help="HTTP basic-auth password (or env:VAR)")
@click.option("--no-screenshots", is_flag=True, help="Omit base64 images from the report")
@click.option("--executable-path", default=None, help="Chromium executable to launch")
@click.option("--threshold", type=float, default=None, help="Pixel diff threshold (0-1)")
@click.option("--full-page", is_flag=True, help="Capture the full scrollable page")
@click.option("--playwright-devices", is_flag=True, help="Resolve --device against Playwright's device table")
@click.option("--output", "-o", default=None, help="Write the JSON report to this path")
@click.option("--html", "html_path", default=None, help="Write the HTML report to this path")
def render(
    url: Optional[str],
    config_path: Optional[str],
    device: Optional[str],
    username: Optional[str],
    password: Optional[str],
    no_screenshots: bool,
    executable_path: Optional[str],
    threshold: Optional[float],
    full_page: bool,
    playwright_devices: bool,
    output: Optional[str],
    html_path: Optional[str],
) -> None:
    """Capture URL in three stages and report the pixel differences."""
    overrides: dict[str, Any] = {
        "device": device,
        "diff_threshold": threshold,
    }
    if full_page:
        overrides["full_page"] = True
    if playwright_devices:
        overrides["playwright_devices"] = True
    if no_screenshots:
        overrides["return_screenshots"] = False
    if username is not None or password is not None:
        overrides["auth"] = {"username": username, "password": password}
    if executable_path:
        overrides["browser_launch_options"] = {"executable_path": executable_path}

    try:
        cfg = build_config(url, config_path, overrides)
        report = Orchestrator(cfg).run()
    except FileNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)
    except ValidationError as e:
        errors = "; ".join(f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors())
        console.print(f"[red]Invalid configuration:[/red] {escape(errors)}")
        sys.exit(1)
    except InitialRenderingError as e:
        console.print(f"[red]Rendering failed:[/red] {e.message}")
        sys.exit(1)

    print_summary(report)

    if output:
        generate_json_report(report, Path(output))
        console.print(f"  JSON report: [blue]{output}[/blue]")
    if html_path:
        generate_html_report(report, Path(html_path))
        console.print(f"  HTML report: [blue]{html_path}[/blue]")


@cli.command()
@click.option("--devices-file", default=None, help="JSON file with extra device profiles")
@click.option("--playwright", "use_playwright", is_flag=True, help="List Playwright's device table")
def devices(devices_file: Optional[str], use_playwright: bool) -> None:
    """List the available device profiles."""
    base = asyncio.run(DeviceRegistry.from_engine()) if use_playwright else DeviceRegistry.default()
    registry = DeviceRegistry.load(devices_file, base=base) if devices_file else base
    table = Table(title="Device profiles")
    table.add_column("Name", style="bold")
    table.add_column("Viewport")
    table.add_column("Scale", justify="right")
    table.add_column("Screenshot")
    table.add_column("Mobile")
    for profile in registry:
        width, height = profile.screenshot_size
        table.add_row(
            profile.name,
            f"{profile.viewport.width}x{profile.viewport.height}",
            f"{profile.device_scale_factor:g}",
            f"{width}x{height}",
            "yes" if profile.is_mobile else "no",
        )
    console.print(table)


@cli.command()
@click.argument("report_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--output", "-o", required=True, help="HTML output path")
def html(report_file: str, output: str) -> None:
    """Render a saved JSON report as HTML."""
    report = load_json_report(Path(report_file))
    generate_html_report(report, Path(output))
    console.print(f"[green]Wrote {output}[/green]")


@cli.command()
@click.option("--target", "-t", prompt="Target URL", help="Website URL to compare")
@click.option("--config", "-c", "config_path", default=DEFAULT_CONFIG_PATH, help="Config file path")
def init(target: str, config_path: str) -> None:
    """Create a default configuration file."""
    path = Path(config_path)
    if path.exists():
        if not click.confirm(f"{path} already exists. Overwrite?"):
            return

    cfg = RenderingConfig(url=target)
    cfg.save(path)
    console.print(f"[green]Created {path}[/green]")
    console.print("\nYou can now customize this file and run:")
    console.print(f"  [blue]initial-rendering render -c {path}[/blue]")


@cli.command()
@click.option("--config", "-c", "config_path", default=None, help="Server config file path")
@click.option("--host", default=None, help="Bind address")
@click.option("--port", "-p", type=int, default=None, help="Bind port")
def serve(config_path: Optional[str], host: Optional[str], port: Optional[int]) -> None:
    """Run the demo HTTP server."""
    import uvicorn

    from initial_rendering.server.app import create_app

    cfg = ServerConfig.load(config_path) if config_path else ServerConfig()
    if host:
        cfg = cfg.model_copy(update={"host": host})
    if port:
        cfg = cfg.model_copy(update={"port": port})
    console.print(f"Serving initial rendering of [blue]{cfg.rendering.url}[/blue] "
                  f"on http://{cfg.host}:{cfg.port}")
    uvicorn.run(create_app(cfg), host=cfg.host, port=cfg.port)


if __name__ == "__main__":
    cli()
