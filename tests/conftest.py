"""Shared pytest fixtures.

Provides:
- ``templates``: three templates ``email/send``, ``sheets/sync``, ``slack/notify``
- ``embedded_store``: in-memory store with 2-D vectors ``[1,0]``, ``[0,1]``, ``[1,1]``
- ``fake_embedder``: embedding provider returning ``[1, 0]`` by default
- ``retrieval_service``: service wired to the two fixtures above
- ``catalog_files``: ``index.json`` + ``embeddings.json`` written to ``tmp_path``
"""

from __future__ import annotations

import json

import pytest

from services.retrieval_service import TemplateRetrievalService
from services.template_store import InMemoryTemplateStore
from tests.fakes import FakeEmbeddingProvider, make_template


@pytest.fixture
def templates():
    return [
        make_template("email/send", tags=["mail"], node_types=["n8n-nodes-base.gmail"]),
        make_template("sheets/sync", node_types=["n8n-nodes-base.googleSheets"]),
        make_template("slack/notify", tags=["chat"], node_types=["n8n-nodes-base.slack"]),
    ]


@pytest.fixture
def embedded_store(templates) -> InMemoryTemplateStore:
    return InMemoryTemplateStore(
        templates,
        {
            "email/send": [1.0, 0.0],
            "sheets/sync": [0.0, 1.0],
            "slack/notify": [1.0, 1.0],
        },
    )


@pytest.fixture
def fake_embedder() -> FakeEmbeddingProvider:
    return FakeEmbeddingProvider(default=[1.0, 0.0])


@pytest.fixture
def retrieval_service(embedded_store, fake_embedder) -> TemplateRetrievalService:
    return TemplateRetrievalService(embedded_store, fake_embedder)


@pytest.fixture
def catalog_files(tmp_path, templates):
    index_path = tmp_path / "index.json"
    embeddings_path = tmp_path / "embeddings.json"
    index_path.write_text(
        json.dumps([t.model_dump(by_alias=True) for t in templates]), encoding="utf-8"
    )
    embeddings_path.write_text(
        json.dumps([
            {"id": "email/send", "embedding": [1, 0]},
            {"id": "slack/notify", "embedding": [1, 1]},
        ]),
        encoding="utf-8",
    )
    return index_path, embeddings_path
