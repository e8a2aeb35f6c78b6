"""Tests for services/template_ingest.py — index and embedding batch builders."""

import json

import pytest

from errors import EmbeddingError
from models.template import TemplateEmbedding
from services.template_ingest import (
    build_embedding_input,
    build_embeddings,
    build_template,
    collect_templates,
    extract_node_types,
    is_category_directory,
    write_embeddings,
    write_template_index,
)
from tests.fakes import FakeEmbeddingProvider, make_template


def _write_workflow(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")


@pytest.fixture
def workflows_root(tmp_path):
    root = tmp_path / "workflows"
    _write_workflow(root / "Gmail" / "daily-digest.json", {
        "name": "Daily digest",
        "nodes": [
            {"name": "Cron", "type": "n8n-nodes-base.cron"},
            {"name": "Gmail", "type": "n8n-nodes-base.gmail"},
            {"name": "Gmail 2", "type": "n8n-nodes-base.gmail"},
        ],
        "connections": {},
    })
    _write_workflow(root / "Gmail" / "archive.json", {"nodes": []})
    _write_workflow(root / "Slack" / "broken.json", {"nodes": []})
    (root / "Slack" / "broken.json").write_text("{not json", encoding="utf-8")
    _write_workflow(root / "Slack" / "alert.json", {"name": "  ", "nodes": "oops"})
    (root / "Docs").mkdir()
    (root / "Docs" / "README.md").write_text("# docs", encoding="utf-8")
    (root / "Empty").mkdir()
    _write_workflow(root / "scripts" / "tool.json", {"name": "skip me"})
    _write_workflow(root / ".cache" / "hidden.json", {"name": "skip me"})
    return root


# ---------------------------------------------------------------------------
# Template index
# ---------------------------------------------------------------------------


def test_extract_node_types_distinct_in_first_seen_order():
    workflow = {"nodes": [
        {"type": "b"}, {"type": "a"}, {"type": "b"}, {"type": 3}, "junk", {"name": "no type"},
    ]}
    assert extract_node_types(workflow) == ["b", "a"]
    assert extract_node_types({"nodes": "oops"}) == []
    assert extract_node_types({}) == []


def test_is_category_directory(workflows_root):
    assert is_category_directory(workflows_root / "Gmail")
    assert is_category_directory(workflows_root / "Docs")
    assert not is_category_directory(workflows_root / "Empty")


def test_build_template_from_file(workflows_root):
    template = build_template(workflows_root / "Gmail", "daily-digest.json")

    assert template.id == "Gmail/daily-digest"
    assert template.file_name == "daily-digest.json"
    assert template.category == "Gmail"
    assert template.title == "Daily digest"
    assert template.description == ""
    assert template.tags == []
    assert template.node_types == ["n8n-nodes-base.cron", "n8n-nodes-base.gmail"]
    assert template.workflow["name"] == "Daily digest"


def test_build_template_title_falls_back_to_stem(workflows_root):
    assert build_template(workflows_root / "Gmail", "archive.json").title == "archive"
    assert build_template(workflows_root / "Slack", "alert.json").title == "alert"


def test_build_template_skips_unreadable_file(workflows_root):
    assert build_template(workflows_root / "Slack", "broken.json") is None
    assert build_template(workflows_root / "Slack", "missing.json") is None


def test_collect_templates(workflows_root):
    templates = collect_templates(workflows_root)

    assert [t.id for t in templates] == [
        "Gmail/archive",
        "Gmail/daily-digest",
        "Slack/alert",
    ]


def test_write_template_index_uses_camel_case(tmp_path, workflows_root):
    output = tmp_path / "out" / "index.json"

    count = write_template_index(collect_templates(workflows_root), output)

    data = json.loads(output.read_text(encoding="utf-8"))
    assert count == 3 == len(data)
    assert set(data[0]) == {
        "id", "fileName", "category", "title", "description", "tags", "nodeTypes", "workflow",
    }


# ---------------------------------------------------------------------------
# Embedding catalog
# ---------------------------------------------------------------------------


def test_build_embedding_input():
    template = make_template(
        "Gmail/digest",
        title="Daily digest",
        description="Mails a summary",
        tags=["email", "report"],
        node_types=["n8n-nodes-base.cron", "n8n-nodes-base.gmail"],
    )
    assert build_embedding_input(template) == (
        "Category: Gmail\n"
        "Title: Daily digest\n"
        "Description: Mails a summary\n"
        "Tags: email report\n"
        "NodeTypes: n8n-nodes-base.cron n8n-nodes-base.gmail"
    )


@pytest.mark.asyncio
async def test_build_embeddings_in_catalog_order():
    templates = [make_template("a/one"), make_template("a/two")]
    embedder = FakeEmbeddingProvider(default=[0.5, 0.5])

    records = await build_embeddings(templates, embedder)

    assert records == [
        TemplateEmbedding(id="a/one", embedding=[0.5, 0.5]),
        TemplateEmbedding(id="a/two", embedding=[0.5, 0.5]),
    ]
    assert embedder.calls == [build_embedding_input(t) for t in templates]


class _FlakyEmbedder(FakeEmbeddingProvider):
    async def _create_embedding(self, text):
        if "Title: Bad" in text:
            raise EmbeddingError("rate limited")
        return await super()._create_embedding(text)


@pytest.mark.asyncio
async def test_build_embeddings_skips_failures():
    templates = [make_template("a/good"), make_template("a/bad"), make_template("a/fine")]

    records = await build_embeddings(templates, _FlakyEmbedder())

    assert [r.id for r in records] == ["a/good", "a/fine"]


def test_write_embeddings(tmp_path):
    path = tmp_path / "embeddings.json"
    count = write_embeddings([TemplateEmbedding(id="a/b", embedding=[0.1, 0.2])], path)

    assert count == 1
    assert json.loads(path.read_text(encoding="utf-8")) == [{"id": "a/b", "embedding": [0.1, 0.2]}]


def test_non_utf8_workflow_is_skipped(tmp_path):
    root = tmp_path / "workflows"
    _write_workflow(root / "mail" / "good.json", {"name": "Good", "nodes": []})
    (root / "mail" / "bad.json").write_bytes(b'{"name": "\xff"}')

    assert build_template(root / "mail", "bad.json") is None
    assert [t.id for t in collect_templates(root)] == ["mail/good"]
