"""Tests for reporter orchestration."""

import json
from pathlib import Path

from visual_compare.reporter.regression_detector import Regression
from visual_compare.reporter.reporter import Reporter


class TestGenerateReports:
    def test_writes_configured_formats(self, framework_config, make_run):
        reporter = Reporter(framework_config)

        generated = reporter.generate_reports(make_run())

        out = Path(framework_config.output_dir)
        assert generated == {
            "html": str(out / "visual_comparison_report_Desktop.html"),
            "json": str(out / "visual_comparison_report_Desktop.json"),
        }
        assert Path(generated["html"]).exists()
        assert Path(generated["json"]).exists()

    def test_html_only(self, framework_config, make_run):
        framework_config.report_formats = ["html"]
        generated = Reporter(framework_config).generate_reports(make_run())
        assert list(generated) == ["html"]

    def test_refreshes_counters(self, framework_config, make_result, make_run):
        run = make_run([make_result("/a", 99.0)])
        run.results.append(make_result("/b", 10.0))

        Reporter(framework_config).generate_reports(run)

        assert (run.total, run.passed, run.failed) == (2, 1, 1)

    def test_regressions_against_previous_run(self, framework_config, make_result, make_run):
        previous = make_run([make_result("/a", 99.0)], run_id="run_old")
        current = make_run([make_result("/a", 12.0)], run_id="run_new")

        generated = Reporter(framework_config).generate_reports(current, previous_run=previous)

        data = json.loads(Path(generated["json"]).read_text())
        assert [r["page_path"] for r in data["regressions"]] == ["/a"]
        assert "Regressions (1)" in Path(generated["html"]).read_text(encoding="utf-8")


class TestLoadPreviousRun:
    def test_none_when_missing(self, framework_config):
        assert Reporter(framework_config).load_previous_run("Desktop") is None

    def test_loads_saved_run(self, framework_config, make_result, make_run):
        reporter = Reporter(framework_config)
        reporter.generate_reports(make_run([make_result("/a", 97.0)], run_id="run_saved"))

        loaded = reporter.load_previous_run("Desktop")

        assert loaded.run_id == "run_saved"
        assert loaded.results[0].score == 97.0

    def test_unreadable_report_ignored(self, framework_config):
        reporter = Reporter(framework_config)
        path = reporter.json_report_path("Desktop")
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("{not json")
        assert reporter.load_previous_run("Desktop") is None


class TestSavedRegressions:
    def test_empty_when_missing(self, framework_config):
        assert Reporter(framework_config).load_saved_regressions("Desktop") == []

    def test_loads_regressions_of_saved_run(self, framework_config, make_result, make_run):
        reporter = Reporter(framework_config)
        previous = make_run([make_result("/a", 99.0)], run_id="run_old")
        reporter.generate_reports(make_run([make_result("/a", 12.0)], run_id="run_new"), previous_run=previous)

        regressions = reporter.load_saved_regressions("Desktop")

        assert [(r.page_path, r.current_result) for r in regressions] == [("/a", "fail")]

    def test_given_regressions_written_as_is(self, framework_config, make_result, make_run):
        reporter = Reporter(framework_config)
        regression = Regression("/a", "pass", "fail", "99.00%", "12.00%")
        current = make_run([make_result("/a", 12.0)])

        generated = reporter.generate_reports(current, regressions=[regression])

        data = json.loads(Path(generated["json"]).read_text())
        assert data["regressions"][0]["current_similarity"] == "12.00%"
        assert "Regressions (1)" in Path(generated["html"]).read_text(encoding="utf-8")

    def test_given_regressions_skip_detection(self, framework_config, make_result, make_run):
        reporter = Reporter(framework_config)
        previous = make_run([make_result("/a", 99.0)])

        generated = reporter.generate_reports(make_run([make_result("/a", 12.0)]),
                                              previous_run=previous, regressions=[])

        assert json.loads(Path(generated["json"]).read_text())["regressions"] == []
