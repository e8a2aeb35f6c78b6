"""Tests for services/template_store.py — catalog loading and staleness policy."""

import json

import pytest

from errors import StoreLoadError
from services.template_store import (
    InMemoryTemplateStore,
    JsonTemplateStore,
    ReloadPolicy,
    load_embedding_catalog,
    load_template_index,
)
from tests.fakes import CountingTemplateStore, make_template


# ---------------------------------------------------------------------------
# JsonTemplateStore — loading
# ---------------------------------------------------------------------------


def test_load_templates_reads_camel_case_catalog(catalog_files):
    index_path, embeddings_path = catalog_files
    store = JsonTemplateStore(index_path, embeddings_path)

    templates = store.load_templates()

    assert [t.id for t in templates] == ["email/send", "sheets/sync", "slack/notify"]
    assert templates[0].file_name == "send.json"
    assert templates[0].node_types == ["n8n-nodes-base.gmail"]
    assert templates[0].workflow["name"] == "send"


def test_load_embeddings_returns_float_vectors(catalog_files):
    store = JsonTemplateStore(*catalog_files)

    embeddings = store.load_embeddings()

    assert list(embeddings) == ["email/send", "slack/notify"]
    assert embeddings["slack/notify"] == [1.0, 1.0]
    assert all(isinstance(v, float) for v in embeddings["email/send"])


def test_missing_index_raises(tmp_path):
    store = JsonTemplateStore(tmp_path / "nope.json", tmp_path / "emb.json")
    with pytest.raises(StoreLoadError, match="file not found") as exc_info:
        store.load_templates()
    assert exc_info.value.path.endswith("nope.json")


def test_invalid_json_raises(tmp_path):
    index = tmp_path / "index.json"
    index.write_text("[{oops", encoding="utf-8")
    with pytest.raises(StoreLoadError, match="invalid JSON"):
        JsonTemplateStore(index, index).load_templates()


def test_non_list_root_raises(tmp_path):
    index = tmp_path / "index.json"
    index.write_text(json.dumps({"id": "x"}), encoding="utf-8")
    with pytest.raises(StoreLoadError, match="expected a JSON array"):
        JsonTemplateStore(index, index).load_templates()


def test_one_malformed_record_aborts_whole_load(tmp_path):
    index = tmp_path / "index.json"
    index.write_text(json.dumps([
        {"id": "ok/one", "workflow": {}},
        {"title": "missing id"},
    ]), encoding="utf-8")
    with pytest.raises(StoreLoadError, match="record 1"):
        JsonTemplateStore(index, index).load_templates()


def test_malformed_embedding_vector_raises(tmp_path):
    emb = tmp_path / "embeddings.json"
    emb.write_text(json.dumps([{"id": "a", "embedding": ["x", "y"]}]), encoding="utf-8")
    with pytest.raises(StoreLoadError):
        JsonTemplateStore(tmp_path / "index.json", emb).load_embeddings()


def test_duplicate_template_ids_raise(tmp_path):
    index = tmp_path / "index.json"
    index.write_text(json.dumps([{"id": "a/b"}, {"id": "a/b"}]), encoding="utf-8")
    with pytest.raises(StoreLoadError, match="duplicate id 'a/b'"):
        JsonTemplateStore(index, index).load_templates()


def test_empty_embedding_catalog_is_valid(tmp_path):
    emb = tmp_path / "embeddings.json"
    emb.write_text("[]", encoding="utf-8")
    assert JsonTemplateStore(tmp_path / "index.json", emb).load_embeddings() == {}


def test_non_utf8_catalog_raises(tmp_path):
    index = tmp_path / "index.json"
    index.write_bytes(b'[{"id": "a\xff"}]')
    with pytest.raises(StoreLoadError, match="not valid UTF-8"):
        JsonTemplateStore(index, index).load_templates()


@pytest.mark.parametrize("token", ["NaN", "Infinity", "-Infinity"])
def test_non_finite_embedding_raises(tmp_path, token):
    emb = tmp_path / "embeddings.json"
    emb.write_text(f'[{{"id": "email/send", "embedding": [{token}, 0]}}]', encoding="utf-8")
    with pytest.raises(StoreLoadError, match="record 0.embedding.0"):
        load_embedding_catalog(emb)


def test_load_template_index_without_embeddings(catalog_files):
    index_path, _ = catalog_files
    templates = load_template_index(index_path)
    assert [t.id for t in templates] == ["email/send", "sheets/sync", "slack/notify"]


# ---------------------------------------------------------------------------
# Snapshot join
# ---------------------------------------------------------------------------


def test_embedded_vectors_skips_unembedded_and_unknown_ids(templates):
    store = InMemoryTemplateStore(
        templates,
        {"slack/notify": [1.0, 1.0], "ghost/id": [0.5, 0.5], "email/send": [1.0, 0.0]},
    )

    vectors = store.snapshot().embedded_vectors()

    # catalog order, sheets/sync has no vector, ghost/id is not in the catalog
    assert list(vectors) == ["email/send", "slack/notify"]


def test_snapshot_is_read_only(embedded_store):
    snapshot = embedded_store.snapshot()
    with pytest.raises(TypeError):
        snapshot.embeddings["email/send"] = (0.0, 0.0)  # type: ignore[index]
    assert isinstance(snapshot.templates, tuple)


def test_snapshot_get(embedded_store):
    snapshot = embedded_store.snapshot()
    assert snapshot.get("sheets/sync").title == "Sync"
    assert snapshot.get("missing") is None


# ---------------------------------------------------------------------------
# Staleness policy
# ---------------------------------------------------------------------------


def test_always_policy_reloads_every_snapshot(templates):
    store = CountingTemplateStore(templates, {}, policy=ReloadPolicy.ALWAYS)

    store.snapshot()
    store.snapshot()

    assert store.template_loads == 2
    assert store.embedding_loads == 2


def test_cached_policy_loads_once_until_invalidated(templates):
    store = CountingTemplateStore(templates, {}, policy="cached")

    first = store.snapshot()
    second = store.snapshot()
    assert first is second
    assert store.template_loads == 1

    store.invalidate()
    third = store.snapshot()
    assert third is not first
    assert store.template_loads == 2


def test_cached_json_store_serves_stale_data_until_reload(catalog_files):
    index_path, embeddings_path = catalog_files
    store = JsonTemplateStore(index_path, embeddings_path, policy=ReloadPolicy.CACHED)
    assert len(store.snapshot().templates) == 3

    index_path.write_text(
        json.dumps([make_template("only/one").model_dump(by_alias=True)]), encoding="utf-8"
    )
    assert len(store.snapshot().templates) == 3

    store.reload()
    assert [t.id for t in store.snapshot().templates] == ["only/one"]


def test_failed_reload_keeps_previous_snapshot(catalog_files):
    index_path, embeddings_path = catalog_files
    store = JsonTemplateStore(index_path, embeddings_path, policy=ReloadPolicy.CACHED)
    before = store.snapshot()

    embeddings_path.write_text("not json", encoding="utf-8")
    with pytest.raises(StoreLoadError):
        store.reload()

    assert store.snapshot() is before


def test_policy_accepts_string_values():
    assert InMemoryTemplateStore(policy="always").policy is ReloadPolicy.ALWAYS
    with pytest.raises(ValueError):
        InMemoryTemplateStore(policy="sometimes")
