"""HTML report generator: one self-contained page per device with thumbnails and diffs."""

from __future__ import annotations

import html
import logging
from pathlib import Path

from visual_compare.imaging.scorer import format_outcome
from visual_compare.models.comparison import CaptureError, ComparisonResult, RunResult, SizeMismatch

from .aggregator import order_results, summarize
from .regression_detector import Regression

logger = logging.getLogger(__name__)

REPORT_PREFIX = "visual_comparison_report_"


def report_filename(device: str, suffix: str = ".html") -> str:
    return f"{REPORT_PREFIX}{device}{suffix}"


def _thumbnail(rel_path: str | None, label: str, css_class: str, report_dir: Path) -> str:
    """Thumbnail linking to an image, or empty string when the image was never written."""
    if not rel_path or not (report_dir / rel_path).exists():
        return ""
    src = html.escape(Path(rel_path).as_posix(), quote=True)
    return (
        f'<div class="thumbnail-wrapper">'
        f'<img src="{src}" onclick="openModal(this.src)" alt="{html.escape(label)}" loading="lazy">'
        f'<div class="thumbnail-label {css_class}">{html.escape(label)}</div></div>'
    )


def _build_row(r: ComparisonResult, run_result: RunResult, report_dir: Path) -> str:
    """Build a single table row for one page."""
    reference_link = (
        f'<a href="{html.escape(r.reference_url, quote=True)}" target="_blank" class="reference">'
        f'{html.escape(run_result.reference_name.capitalize())}</a>'
    )
    candidate_link = (
        f'<a href="{html.escape(r.candidate_url, quote=True)}" target="_blank" class="candidate">'
        f'{html.escape(run_result.candidate_name.capitalize())}</a>'
    )
    thumbs = "".join([
        _thumbnail(r.candidate_image, run_result.candidate_name.capitalize(), "candidate", report_dir),
        _thumbnail(r.reference_image, run_result.reference_name.capitalize(), "reference", report_dir),
        _thumbnail(r.diff_image, "Diff", "diff", report_dir),
    ])

    reason = ""
    if isinstance(r.outcome, CaptureError) and r.outcome.reason:
        reason = f'<div class="reason">{html.escape(r.outcome.reason[:300])}</div>'
    elif isinstance(r.outcome, SizeMismatch):
        ref_w, ref_h = r.outcome.reference_size
        cand_w, cand_h = r.outcome.candidate_size
        reason = f'<div class="reason">{ref_w}x{ref_h} vs {cand_w}x{cand_h}</div>'

    return f'''
      <tr class="row-{r.status}">
        <td class="page-cell"><code>{html.escape(r.page_path or "/")}</code><br>{candidate_link} | {reference_link}</td>
        <td>{html.escape(format_outcome(r.outcome))}{reason}</td>
        <td class="{r.status}">{r.status.capitalize()}</td>
        <td>{thumbs}</td>
      </tr>'''


def generate_html_report(
    run_result: RunResult,
    regressions: list[Regression],
    output_path: Path,
) -> None:
    """Generate the HTML comparison report for one device."""
    report_dir = output_path.parent
    summary = summarize(run_result.results)
    device = html.escape(run_result.device)

    environments = (
        f'<a href="{html.escape(run_result.candidate_base_url, quote=True)}" target="_blank" class="candidate">'
        f'{html.escape(run_result.candidate_name.capitalize())}</a>, '
        f'<a href="{html.escape(run_result.reference_base_url, quote=True)}" target="_blank" class="reference">'
        f'{html.escape(run_result.reference_name.capitalize())}</a>'
    )

    timeout_banner = ""
    if run_result.timed_out:
        timeout_banner = ('<div class="timeout-banner">The run hit its time limit. '
                          'Pages that were not reached are listed as errors.</div>')

    reg_section = ""
    if regressions:
        items = ""
        for reg in regressions:
            items += (f"<li><code>{html.escape(reg.page_path or '/')}</code>: "
                      f"{reg.previous_result} ({html.escape(reg.previous_similarity)}) &rarr; "
                      f"{reg.current_result} ({html.escape(reg.current_similarity)})</li>")
        reg_section = f'<div class="regressions"><h3>&#9888; Regressions ({len(regressions)})</h3><ul>{items}</ul></div>'

    rows = "".join(_build_row(r, run_result, report_dir) for r in order_results(run_result.results))

    report_html = f'''<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<title>Visual Comparison Report - {device}</title>
<style>
  body {{ font-family: Arial, sans-serif; line-height: 1.5; margin: 20px; }}
  h1, h2 {{ text-align: center; }}
  .summary {{ text-align: center; margin: 20px 0; }}
  table {{ width: 100%; border-collapse: collapse; margin: 20px 0; }}
  th, td {{ border: 1px solid #ddd; padding: 8px; text-align: center; vertical-align: middle; }}
  th {{ background-color: #f2f2f2; }}
  .pass {{ color: green; font-weight: bold; }}
  .fail {{ color: red; font-weight: bold; }}
  .error {{ color: orange; font-weight: bold; }}
  .reason {{ font-size: 12px; color: #64748b; }}
  .candidate {{ color: rgb(255, 165, 0); font-weight: bold; }}
  .reference {{ color: rgb(0, 0, 255); font-weight: bold; }}
  .diff {{ color: red; font-weight: bold; }}
  img {{ max-width: 200px; cursor: pointer; margin: 5px; }}
  .thumbnail-wrapper {{ display: inline-block; text-align: center; margin: 5px; }}
  .thumbnail-label {{ font-size: 12px; margin-top: 5px; }}
  .timeout-banner {{ background: #fefce8; border: 1px solid #fde68a; color: #92400e; padding: 10px; margin: 10px 0; text-align: center; }}
  .regressions {{ background: #fef2f2; border-left: 4px solid red; padding: 10px 20px; margin: 10px 0; }}
  .modal {{ display: none; position: fixed; z-index: 1000; padding: 50px; left: 0; top: 0; width: 100%; height: 100%; overflow: auto; background-color: rgba(0,0,0,0.8); }}
  .modal img {{ margin: auto; display: block; max-width: 90%; max-height: 90%; cursor: default; }}
  .modal-close {{ position: absolute; top: 15px; right: 35px; color: #fff; font-size: 40px; font-weight: bold; cursor: pointer; }}
</style>
</head>
<body>
  <h1>Visual Comparison Report</h1>
  <h2>Device: {device}</h2>
  <div class="summary">
    <p>Total Pages Tested: {summary.total}</p>
    <p>Failed: {summary.failed}</p>
    <p>Passed: {summary.passed}</p>
    <p>Errors: {summary.errors}</p>
    <p>Last Run: {html.escape(run_result.completed_at or run_result.started_at)}</p>
    <p>Environments Tested: {environments}</p>
  </div>
  {timeout_banner}
  {reg_section}
  <table>
    <thead>
      <tr><th>Page</th><th>Similarity</th><th>Status</th><th>Thumbnails</th></tr>
    </thead>
    <tbody>{rows}
    </tbody>
  </table>

  <div id="modal" class="modal" onclick="closeModal()">
    <span class="modal-close">&times;</span>
    <img id="modal-image" alt="">
  </div>

<script>
function openModal(src) {{
  document.getElementById("modal-image").src = src;
  document.getElementById("modal").style.display = "block";
}}
function closeModal() {{
  document.getElementById("modal").style.display = "none";
}}
</script>
</body>
</html>'''

    with open(output_path, "w", encoding="utf-8") as f:
        f.write(report_html)
    logger.debug("Wrote %d rows to %s", summary.total, output_path)
