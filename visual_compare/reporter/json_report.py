"""JSON report: the saved form of a device run, reloaded for regression checks."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from pathlib import Path

from visual_compare.models.comparison import RunResult

from .regression_detector import Regression

logger = logging.getLogger(__name__)

# Keys added next to the RunResult fields; stripped again on load.
EXTRA_KEYS = ("regressions",)


def generate_json_report(
    run_result: RunResult,
    regressions: list[Regression],
    output_path: Path,
) -> None:
    """Write the run, with any regressions, as indented JSON."""
    payload = run_result.model_dump(mode="json")
    payload["regressions"] = [asdict(r) for r in regressions]
    Path(output_path).write_text(json.dumps(payload, indent=2), encoding="utf-8")
    logger.debug("Saved %d results for %s", len(run_result.results), run_result.device)


def load_json_report(path: Path) -> RunResult:
    """Rebuild the RunResult stored by ``generate_json_report``."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    for key in EXTRA_KEYS:
        data.pop(key, None)
    return RunResult.model_validate(data)


def load_json_regressions(path: Path) -> list[Regression]:
    """Regressions recorded alongside the run in a JSON report."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return [Regression(**r) for r in data.get("regressions", [])]
