"""Offline catalog builders — template index and embedding catalog.

Both jobs are batch and non-interactive; each run overwrites its output file
in full.  The CLI entry points live in ``scripts/``.

Expected source layout::

    <templates_root>/
        <category>/          # any folder holding *.json or README.md
            some-flow.json   # an exported n8n workflow
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any

from errors import EmbeddingError
from models.template import Template, TemplateEmbedding
from services.embedding_provider import EmbeddingProvider

logger = logging.getLogger(__name__)

SKIP_DIRS = frozenset({"scripts", "templates", "node_modules"})


# ── Template index ───────────────────────────────────────────


def is_category_directory(path: Path) -> bool:
    """A category folder contains at least one ``.json`` file or a ``README.md``."""
    try:
        return any(
            entry.is_file()
            and (entry.name.lower().endswith(".json") or entry.name.lower() == "readme.md")
            for entry in path.iterdir()
        )
    except OSError as exc:
        logger.error("Failed to inspect directory %s: %s", path, exc)
        return False


def extract_node_types(workflow: dict[str, Any]) -> list[str]:
    """Distinct string node ``type`` values, in first-seen order."""
    nodes = workflow.get("nodes")
    if not isinstance(nodes, list):
        return []
    seen: dict[str, None] = {}
    for node in nodes:
        node_type = node.get("type") if isinstance(node, dict) else None
        if isinstance(node_type, str):
            seen.setdefault(node_type, None)
    return list(seen)


def build_template(category_dir: Path, file_name: str) -> Template | None:
    """Build a Template from one workflow file; ``None`` if it cannot be read."""
    category = category_dir.name
    workflow_path = category_dir / file_name
    stem = Path(file_name).stem
    try:
        with open(workflow_path, "r", encoding="utf-8") as f:
            workflow = json.load(f)
    except (OSError, ValueError) as exc:  # JSONDecodeError, UnicodeDecodeError
        logger.error("Failed to process %s: %s", workflow_path, exc)
        return None

    if not isinstance(workflow, dict):
        logger.error("Failed to process %s: top-level JSON is not an object", workflow_path)
        return None

    name = workflow.get("name")
    title = name if isinstance(name, str) and name.strip() else stem

    return Template(
        id=f"{category}/{stem}",
        file_name=file_name,
        category=category,
        title=title,
        description="",
        tags=[],
        node_types=extract_node_types(workflow),
        workflow=workflow,
    )


def collect_templates(root: Path) -> list[Template]:
    """Scan *root* for category folders and build a Template per JSON file."""
    templates: list[Template] = []
    for entry in sorted(root.iterdir(), key=lambda p: p.name):
        if not entry.is_dir() or entry.name in SKIP_DIRS or entry.name.startswith("."):
            continue
        if not is_category_directory(entry):
            continue

        json_files = sorted(
            f.name for f in entry.iterdir()
            if f.is_file() and f.name.lower().endswith(".json")
        )
        for file_name in json_files:
            template = build_template(entry, file_name)
            if template is not None:
                templates.append(template)

    logger.info("Collected %d templates from %s", len(templates), root)
    return templates


def write_template_index(templates: Iterable[Template], path: Path) -> int:
    """Write the template catalog (camelCase) and return the record count."""
    records = [t.model_dump(by_alias=True) for t in templates]
    _write_json(records, path)
    return len(records)


# ── Embedding catalog ────────────────────────────────────────


def build_embedding_input(template: Template) -> str:
    """Text that represents a template in embedding space."""
    return "\n".join([
        f"Category: {template.category}",
        f"Title: {template.title}",
        f"Description: {template.description or ''}",
        f"Tags: {' '.join(template.tags)}",
        f"NodeTypes: {' '.join(template.node_types)}",
    ])


async def build_embeddings(
    templates: Sequence[Template],
    embedder: EmbeddingProvider,
    delay: float = 0.0,
) -> list[TemplateEmbedding]:
    """Embed each template in order; failures are logged and skipped.

    *delay* seconds are awaited after each successful call to stay under
    provider rate limits.
    """
    records: list[TemplateEmbedding] = []
    for template in templates:
        try:
            vector = await embedder.embed(build_embedding_input(template))
        except EmbeddingError as exc:
            logger.error("Skipping %s due to embedding failure: %s", template.id, exc)
            continue

        records.append(TemplateEmbedding(id=template.id, embedding=vector))
        if delay > 0:
            await asyncio.sleep(delay)
    return records


def write_embeddings(records: Iterable[TemplateEmbedding], path: Path) -> int:
    rows = [r.model_dump(by_alias=True) for r in records]
    _write_json(rows, path)
    return len(rows)


def _write_json(data: Any, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
