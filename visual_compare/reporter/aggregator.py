"""Result aggregation: summary counts and failures-first ordering."""

from __future__ import annotations

from dataclasses import dataclass

from visual_compare.imaging.scorer import ERROR, FAIL, PASS
from visual_compare.models.comparison import ComparisonResult, RunResult


@dataclass
class Summary:
    total: int = 0
    passed: int = 0
    failed: int = 0
    errors: int = 0


def summarize(results: list[ComparisonResult]) -> Summary:
    summary = Summary(total=len(results))
    for r in results:
        if r.status == PASS:
            summary.passed += 1
        elif r.status == FAIL:
            summary.failed += 1
        elif r.status == ERROR:
            summary.errors += 1
    return summary


def order_results(results: list[ComparisonResult]) -> list[ComparisonResult]:
    """Failing and errored pages first; input order kept within each group."""
    return sorted(results, key=lambda r: r.status == PASS)


def apply_summary(run_result: RunResult) -> RunResult:
    """Refresh the counters stored on a run from its results."""
    summary = summarize(run_result.results)
    run_result.total = summary.total
    run_result.passed = summary.passed
    run_result.failed = summary.failed
    run_result.errors = summary.errors
    return run_result
