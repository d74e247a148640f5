"""HTML report generator: a self-contained page with the stage comparisons inline."""

from __future__ import annotations

import html
import logging
from datetime import datetime, timezone
from pathlib import Path

from initial_rendering.models.report import RenderingReport, RenderingStep

logger = logging.getLogger(__name__)


def format_number(num: int) -> str:
    """Thousands-separated integer, e.g. 1,234,567."""
    return f"{num:,}"


def format_execution(timestamp_ms: int) -> str:
    dt = datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)
    return dt.strftime("%Y-%m-%d %H:%M:%S")


def _image_cell(src: str | None, label: str) -> str:
    if not src:
        return ""
    return (f'<td><div class="shot"><img src="{html.escape(src)}" alt="{label}"/>'
            f'<div class="shot-label">{label}</div></div></td>')


def _build_step_section(step: RenderingStep, full: str | None) -> str:
    """Build the comparison block for one stage."""
    section = f'''
    <div class="step">
      <h2>{html.escape(step.name)} compared to full</h2>
      <div class="step-meta">Diff pixels: {format_number(step.num_diff_pixels)}</div>
      <div class="step-meta">Ratio: {step.ratio:g}%</div>
    '''
    cells = (
        _image_cell(step.screenshot, html.escape(step.name))
        + _image_cell(full, "full")
        + _image_cell(step.diff, "diff")
    )
    if cells:
        section += f'<table><tr>{cells}</tr></table>'
    section += '</div>'
    return section


def build_html_report(report: RenderingReport) -> str:
    """Render ``report`` as a complete HTML document."""
    url = html.escape(report.url)
    steps = "".join(_build_step_section(s, report.full) for s in report.steps)

    return f'''<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<title>initial rendering of {url}</title>
<style>
  :root {{ --bg: #f8fafc; --card: white; --border: #e2e8f0; --text: #1e293b; --muted: #64748b; }}
  body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; background: var(--bg); color: var(--text); line-height: 1.6; padding: 1.5rem; }}
  h1 {{ font-size: 1.6rem; margin-bottom: 0.5rem; }}
  h2 {{ font-size: 1.1rem; margin: 1.2rem 0 0.3rem 0; }}
  .meta, .step-meta {{ color: var(--muted); font-size: 0.9rem; }}
  .step {{ background: var(--card); border-radius: 8px; padding: 0.5rem 1rem 1rem 1rem; margin-top: 1rem; box-shadow: 0 1px 3px rgba(0,0,0,0.08); }}
  table {{ width: 100%; border-collapse: collapse; margin-top: 0.6rem; }}
  td {{ vertical-align: top; padding: 0.3rem; }}
  img {{ max-width: 100%; border: 1px solid var(--border); border-radius: 4px; }}
  .shot-label {{ font-size: 0.75rem; color: var(--muted); text-align: center; }}
</style>
</head>
<body>
  <h1>initial rendering of {url}</h1>
  <div class="meta">Execution: {format_execution(report.execution)}</div>
  <div class="meta">Device: {html.escape(report.device)}</div>
  <div class="meta">Screenshot dimensions: {report.width}x{report.height} ({format_number(report.total_pixels)}px)</div>
  <div class="meta">Lib version: {html.escape(report.version)}</div>
  {steps}
</body>
</html>'''


def generate_html_report(report: RenderingReport, output_path: Path) -> None:
    """Write the HTML report to ``output_path``."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        f.write(build_html_report(report))
    logger.debug("Wrote HTML report to %s", output_path)
