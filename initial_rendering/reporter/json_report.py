"""JSON report output."""

from __future__ import annotations

import json
from pathlib import Path

from initial_rendering.models.report import RenderingReport


def generate_json_report(report: RenderingReport, output_path: Path) -> None:
    """Write a machine-readable JSON report."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        json.dump(report.to_dict(), f, indent=2)


def load_json_report(path: Path) -> RenderingReport:
    with open(path) as f:
        return RenderingReport.model_validate(json.load(f))
