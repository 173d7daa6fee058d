"""Report generation orchestration."""

from __future__ import annotations

import logging
from pathlib import Path

from visual_compare.models.comparison import RunResult
from visual_compare.models.config import FrameworkConfig

from .aggregator import apply_summary
from .html_report import generate_html_report, report_filename
from .json_report import generate_json_report, load_json_regressions, load_json_report
from .regression_detector import Regression, detect_regressions

logger = logging.getLogger(__name__)


class Reporter:
    """Writes the per-device report artifacts for a run."""

    def __init__(self, config: FrameworkConfig):
        self.config = config

    @property
    def output_dir(self) -> Path:
        return Path(self.config.output_dir)

    def json_report_path(self, device: str) -> Path:
        return self.output_dir / report_filename(device, ".json")

    def load_previous_run(self, device: str) -> RunResult | None:
        """Load the last run saved for ``device``, if any."""
        path = self.json_report_path(device)
        if not path.exists():
            return None
        try:
            return load_json_report(path)
        except Exception as e:
            logger.debug("Could not load previous run from %s: %s", path, e)
            return None

    def load_saved_regressions(self, device: str) -> list[Regression]:
        """Regressions stored with the last saved run of ``device``."""
        path = self.json_report_path(device)
        if not path.exists():
            return []
        try:
            return load_json_regressions(path)
        except Exception as e:
            logger.debug("Could not load regressions from %s: %s", path, e)
            return []

    def generate_reports(
        self,
        run_result: RunResult,
        previous_run: RunResult | None = None,
        regressions: list[Regression] | None = None,
    ) -> dict[str, str]:
        """Generate all configured report formats. Returns format -> file path.

        ``regressions`` are written as given; when omitted they are detected
        against ``previous_run``.
        """
        out_dir = self.output_dir
        out_dir.mkdir(parents=True, exist_ok=True)
        apply_summary(run_result)
        generated = {}

        if regressions is None:
            regressions = []
            if previous_run:
                logger.debug("Detecting regressions against run %s...", previous_run.run_id)
                regressions = detect_regressions(previous_run, run_result)

        if "html" in self.config.report_formats:
            path = out_dir / report_filename(run_result.device)
            generate_html_report(run_result, regressions, path)
            generated["html"] = str(path)
            logger.info("HTML report: %s", path)

        if "json" in self.config.report_formats:
            path = self.json_report_path(run_result.device)
            generate_json_report(run_result, regressions, path)
            generated["json"] = str(path)
            logger.info("JSON report: %s", path)

        return generated
