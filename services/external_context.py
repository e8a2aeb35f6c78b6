"""Supplementary context handed to the workflow generator.

Currently a text builder only: it restates the requirement and lists the
URLs the user marked as important.  No search or scraping is performed.
"""

from __future__ import annotations

from collections.abc import Iterable


def normalize_target_urls(urls: Iterable[object] | None) -> list[str]:
    """Keep non-blank string URLs, stripped, in their original order."""
    if not urls:
        return []
    return [u.strip() for u in urls if isinstance(u, str) and u.strip()]


def build_external_context(
    description: str,
    target_urls: Iterable[object] | None = None,
    enable_web_search: bool = False,
) -> str:
    """Build the ``external_context`` block for the generation prompt."""
    lines = ["[Requirement summary]", description]

    urls = normalize_target_urls(target_urls)
    if urls:
        lines.append("")
        lines.append("[URLs the user marked as important]")
        lines.extend(f"- {url}" for url in urls)

    if enable_web_search:
        lines.append("")
        lines.append("[Note] Web search was requested; search results are not available yet.")

    return "\n".join(lines)
