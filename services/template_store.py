"""Template catalog store — loads templates and embeddings for retrieval.

Provides an abstract interface with a JSON-file implementation (the
persisted catalog written by the ingestion jobs) and an in-memory
implementation (fixtures, tests).

Templates and embeddings are two independent collections joined by ``id``
at query time, so embeddings can be regenerated without touching template
metadata.

Staleness policy
----------------
``ReloadPolicy.ALWAYS``
    Every :meth:`TemplateStore.snapshot` re-reads both catalogs.  Always
    fresh; pays the file read on each request.
``ReloadPolicy.CACHED``
    The first snapshot is cached until :meth:`TemplateStore.invalidate` or
    :meth:`TemplateStore.reload`.  A reload builds a complete new snapshot
    and swaps one reference under a lock, so a reader never sees templates
    joined against a half-loaded embedding set.  Files rewritten by an
    ingestion job are only picked up after an explicit reload.
"""

from __future__ import annotations

import json
import logging
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any

from pydantic import TypeAdapter, ValidationError

from errors import StoreLoadError
from models.template import Template, TemplateEmbedding

logger = logging.getLogger(__name__)

_TEMPLATE_LIST = TypeAdapter(list[Template])
_EMBEDDING_LIST = TypeAdapter(list[TemplateEmbedding])


class ReloadPolicy(str, Enum):
    ALWAYS = "always"
    CACHED = "cached"


@dataclass(frozen=True)
class TemplateSnapshot:
    """Immutable view of the catalog at one point in time."""

    templates: tuple[Template, ...]
    embeddings: Mapping[str, tuple[float, ...]]
    loaded_at: float = field(default_factory=time.time)

    def get(self, template_id: str) -> Template | None:
        for template in self.templates:
            if template.id == template_id:
                return template
        return None

    def embedded_vectors(self) -> dict[str, tuple[float, ...]]:
        """Vectors for catalog templates that have one, in catalog order.

        Templates without an embedding are left out; embeddings whose id is
        not in the catalog are ignored.
        """
        return {
            t.id: self.embeddings[t.id]
            for t in self.templates
            if t.id in self.embeddings
        }


def _freeze(
    templates: Iterable[Template],
    embeddings: Mapping[str, Iterable[float]],
) -> TemplateSnapshot:
    return TemplateSnapshot(
        templates=tuple(templates),
        embeddings=MappingProxyType({k: tuple(v) for k, v in embeddings.items()}),
    )


class TemplateStore(ABC):
    """Abstract template catalog with a configurable staleness policy."""

    def __init__(self, policy: ReloadPolicy | str = ReloadPolicy.ALWAYS) -> None:
        self.policy = ReloadPolicy(policy)
        self._lock = threading.Lock()
        self._cached: TemplateSnapshot | None = None

    @abstractmethod
    def load_templates(self) -> list[Template]:
        """Return every template in catalog order.  Raises StoreLoadError."""

    @abstractmethod
    def load_embeddings(self) -> dict[str, list[float]]:
        """Return an id → vector mapping.  Raises StoreLoadError."""

    def snapshot(self) -> TemplateSnapshot:
        """Return the catalog snapshot according to :attr:`policy`."""
        if self.policy is ReloadPolicy.ALWAYS:
            return self._build_snapshot()

        cached = self._cached
        if cached is not None:
            return cached
        with self._lock:
            if self._cached is None:
                self._cached = self._build_snapshot()
            return self._cached

    def reload(self) -> TemplateSnapshot:
        """Load a fresh snapshot and atomically replace the cached one."""
        fresh = self._build_snapshot()
        with self._lock:
            self._cached = fresh
        return fresh

    def invalidate(self) -> None:
        """Drop the cached snapshot; the next :meth:`snapshot` reloads."""
        with self._lock:
            self._cached = None

    def _build_snapshot(self) -> TemplateSnapshot:
        templates = self.load_templates()
        embeddings = self.load_embeddings()
        snapshot = _freeze(templates, embeddings)
        logger.debug(
            "Template snapshot built — %d templates, %d embeddings",
            len(snapshot.templates), len(snapshot.embeddings),
        )
        return snapshot


class JsonTemplateStore(TemplateStore):
    """Reads ``index.json`` and ``embeddings.json`` written by the batch jobs.

    A single malformed record aborts the whole load; bad records belong to
    ingestion, not to query time.
    """

    def __init__(
        self,
        index_path: str | Path,
        embeddings_path: str | Path,
        policy: ReloadPolicy | str = ReloadPolicy.ALWAYS,
    ) -> None:
        super().__init__(policy)
        self.index_path = Path(index_path)
        self.embeddings_path = Path(embeddings_path)

    def load_templates(self) -> list[Template]:
        return load_template_index(self.index_path)

    def load_embeddings(self) -> dict[str, list[float]]:
        return load_embedding_catalog(self.embeddings_path)


class InMemoryTemplateStore(TemplateStore):
    """Template store backed by Python objects."""

    def __init__(
        self,
        templates: Iterable[Template] = (),
        embeddings: Mapping[str, Iterable[float]] | None = None,
        policy: ReloadPolicy | str = ReloadPolicy.ALWAYS,
    ) -> None:
        super().__init__(policy)
        self._templates = list(templates)
        self._embeddings = {k: list(v) for k, v in (embeddings or {}).items()}

    def load_templates(self) -> list[Template]:
        return list(self._templates)

    def load_embeddings(self) -> dict[str, list[float]]:
        return {k: list(v) for k, v in self._embeddings.items()}


# ── catalog file loaders ─────────────────────────────────────


def load_template_index(path: str | Path) -> list[Template]:
    """Read and validate ``index.json``.  Raises StoreLoadError."""
    path = Path(path)
    try:
        templates = _TEMPLATE_LIST.validate_python(_read_json_list(path))
    except ValidationError as exc:
        raise StoreLoadError(str(path), _first_error(exc)) from exc
    _check_unique((t.id for t in templates), path)
    return templates


def load_embedding_catalog(path: str | Path) -> dict[str, list[float]]:
    """Read and validate ``embeddings.json`` into an id → vector mapping.

    Non-finite components (``NaN``/``Infinity``, which ``json`` accepts) make
    the record invalid.
    """
    path = Path(path)
    try:
        records = _EMBEDDING_LIST.validate_python(_read_json_list(path))
    except ValidationError as exc:
        raise StoreLoadError(str(path), _first_error(exc)) from exc
    _check_unique((r.id for r in records), path)
    return {r.id: r.embedding for r in records}


# ── helpers ──────────────────────────────────────────────────


def _read_json_list(path: Path) -> list[Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as exc:
        raise StoreLoadError(str(path), "file not found") from exc
    except json.JSONDecodeError as exc:
        raise StoreLoadError(str(path), f"invalid JSON ({exc.msg} at line {exc.lineno})") from exc
    except UnicodeDecodeError as exc:
        raise StoreLoadError(str(path), f"not valid UTF-8 (byte {exc.start})") from exc
    except OSError as exc:
        raise StoreLoadError(str(path), str(exc)) from exc

    if not isinstance(data, list):
        raise StoreLoadError(str(path), f"expected a JSON array, got {type(data).__name__}")
    return data


def _check_unique(ids: Iterable[str], path: Path) -> None:
    seen: set[str] = set()
    for item_id in ids:
        if item_id in seen:
            raise StoreLoadError(str(path), f"duplicate id '{item_id}'")
        seen.add(item_id)


def _first_error(exc: ValidationError) -> str:
    err = exc.errors()[0]
    loc = ".".join(str(p) for p in err["loc"])
    return f"record {loc}: {err['msg']}"
