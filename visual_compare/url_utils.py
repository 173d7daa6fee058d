"""Shared URL and artifact-path utilities."""

from __future__ import annotations

from pathlib import Path

SCREENSHOTS_DIR = "screenshots"
DIFF_DIR = "diff"
IMAGE_SUFFIX = ".png"


def join_url(base_url: str, page_path: str) -> str:
    """Append a relative page path to an environment base URL."""
    if not page_path:
        return base_url
    if base_url.endswith("/") and page_path.startswith("/"):
        return base_url + page_path[1:]
    if not base_url.endswith("/") and not page_path.startswith("/"):
        return f"{base_url}/{page_path}"
    return base_url + page_path


def sanitize_page_path(page_path: str) -> str:
    """Turn a page path into a flat file stem: '/about/team' -> '_about_team'."""
    return page_path.replace("/", "_")


def artifact_path(device: str, kind: str, page_path: str) -> Path:
    """Relative path of a screenshot or diff image for one page.

    ``kind`` is an environment name or ``"diff"``; the layout is
    ``screenshots/<device>/<kind>/<sanitized-page-path>.png``.
    """
    return Path(SCREENSHOTS_DIR) / device / kind / f"{sanitize_page_path(page_path)}{IMAGE_SUFFIX}"
