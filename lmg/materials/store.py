"""Per-kind artifact collections: Postgres or file-based fallback.

Every artifact kind lives in its own collection and every stored item
carries the ``video_id`` of the job that owns it, so "replace all items of
this kind for this job" is a delete-by-job plus an insert, done as one
unit by ``replace_for_job``.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Protocol

from lmg.config import get_settings
from lmg.schemas.materials import ArtifactKind

logger = logging.getLogger(__name__)


class ArtifactStore(Protocol):
    def delete_all_for_job(self, kind: ArtifactKind, job_id: str) -> int: ...
    def insert_many(self, kind: ArtifactKind, items: list[dict[str, Any]]) -> int: ...
    def replace_for_job(self, kind: ArtifactKind, job_id: str, items: list[dict[str, Any]]) -> tuple[int, int]: ...
    def list_for_job(self, kind: ArtifactKind, job_id: str) -> list[dict[str, Any]]: ...


def _owner(item: dict[str, Any]) -> str:
    job_id = item.get("video_id")
    if not job_id:
        raise ValueError("artifact item is missing video_id")
    return str(job_id)


def _owned_by(job_id: str, items: list[dict[str, Any]]) -> None:
    for item in items:
        if _owner(item) != job_id:
            raise ValueError(f"artifact item belongs to {item['video_id']}, not {job_id}")


# ---------------------------------------------------------------------------
# Postgres implementation
# ---------------------------------------------------------------------------

class PostgresArtifactStore:
    """One table per artifact kind, item bodies as JSONB."""

    def __init__(self, database_url: str):
        self._url = database_url
        self._conn = self._connect()

    @staticmethod
    def _table(kind: ArtifactKind) -> str:
        return f"lmg_{kind.value}"

    def _connect(self):
        try:
            import psycopg
            conn = psycopg.connect(self._url, autocommit=True)
            for kind in ArtifactKind:
                table = self._table(kind)
                conn.execute(f"""
                    CREATE TABLE IF NOT EXISTS {table} (
                        id BIGSERIAL PRIMARY KEY,
                        video_id TEXT NOT NULL,
                        body JSONB NOT NULL,
                        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
                    )
                """)
                conn.execute(f"""
                    CREATE INDEX IF NOT EXISTS idx_{table}_video
                    ON {table} (video_id)
                """)
            return conn
        except ImportError:
            raise ImportError(
                "psycopg required for Postgres artifact store. pip install 'psycopg[binary]'"
            )

    def delete_all_for_job(self, kind: ArtifactKind, job_id: str) -> int:
        cur = self._conn.execute(
            f"DELETE FROM {self._table(kind)} WHERE video_id = %s",
            (job_id,),
        )
        return cur.rowcount

    def insert_many(self, kind: ArtifactKind, items: list[dict[str, Any]]) -> int:
        if not items:
            return 0
        rows = [(_owner(item), json.dumps(item, default=str)) for item in items]
        with self._conn.transaction():
            with self._conn.cursor() as cur:
                cur.executemany(
                    f"INSERT INTO {self._table(kind)} (video_id, body) VALUES (%s, %s::jsonb)",
                    rows,
                )
        return len(rows)

    def replace_for_job(
        self, kind: ArtifactKind, job_id: str, items: list[dict[str, Any]]
    ) -> tuple[int, int]:
        """Delete and insert in one transaction; return (removed, written)."""
        _owned_by(job_id, items)
        rows = [(job_id, json.dumps(item, default=str)) for item in items]
        with self._conn.transaction():
            with self._conn.cursor() as cur:
                cur.execute(f"DELETE FROM {self._table(kind)} WHERE video_id = %s", (job_id,))
                removed = cur.rowcount
                if rows:
                    cur.executemany(
                        f"INSERT INTO {self._table(kind)} (video_id, body) VALUES (%s, %s::jsonb)",
                        rows,
                    )
        return removed, len(rows)

    def list_for_job(self, kind: ArtifactKind, job_id: str) -> list[dict[str, Any]]:
        rows = self._conn.execute(
            f"SELECT body FROM {self._table(kind)} WHERE video_id = %s ORDER BY id",
            (job_id,),
        ).fetchall()
        return [r[0] if isinstance(r[0], dict) else json.loads(r[0]) for r in rows]


# ---------------------------------------------------------------------------
# File-based implementation (fallback when no Postgres)
# ---------------------------------------------------------------------------

class FileArtifactStore:
    """Persist artifacts as ``<kind>/<video_id>.json`` lists."""

    def __init__(self, artifacts_dir: Path):
        self._dir = Path(artifacts_dir)
        self._dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def _path(self, kind: ArtifactKind, job_id: str) -> Path:
        return self._dir / kind.value / f"{job_id}.json"

    def delete_all_for_job(self, kind: ArtifactKind, job_id: str) -> int:
        with self._lock:
            existing = self._read(kind, job_id)
            path = self._path(kind, job_id)
            if path.exists():
                path.unlink()
        return len(existing)

    def insert_many(self, kind: ArtifactKind, items: list[dict[str, Any]]) -> int:
        if not items:
            return 0
        by_owner: dict[str, list[dict[str, Any]]] = {}
        for item in items:
            by_owner.setdefault(_owner(item), []).append(item)
        with self._lock:
            for job_id, owned in by_owner.items():
                self._write(kind, job_id, self._read(kind, job_id) + owned)
        return len(items)

    def replace_for_job(
        self, kind: ArtifactKind, job_id: str, items: list[dict[str, Any]]
    ) -> tuple[int, int]:
        """Swap the job's file for the new items in one write; return (removed, written)."""
        _owned_by(job_id, items)
        with self._lock:
            removed = len(self._read(kind, job_id))
            self._write(kind, job_id, list(items))
        return removed, len(items)

    def list_for_job(self, kind: ArtifactKind, job_id: str) -> list[dict[str, Any]]:
        return self._read(kind, job_id)

    def _read(self, kind: ArtifactKind, job_id: str) -> list[dict[str, Any]]:
        path = self._path(kind, job_id)
        if not path.exists():
            return []
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

    def _write(self, kind: ArtifactKind, job_id: str, items: list[dict[str, Any]]) -> None:
        path = self._path(kind, job_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".json.tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(items, f, indent=2, default=str)
        tmp.replace(path)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------

_store: ArtifactStore | None = None


def get_artifact_store() -> ArtifactStore:
    """Return singleton artifact store (Postgres if configured, else file-based)."""
    global _store
    if _store is not None:
        return _store
    settings = get_settings()
    if settings.lmg_database_url:
        try:
            _store = PostgresArtifactStore(settings.lmg_database_url)
            logger.info("Using Postgres artifact store")
        except Exception as e:
            logger.warning("Postgres artifact store failed (%s), falling back to file store", e)
            _store = FileArtifactStore(settings.artifacts_dir)
    else:
        _store = FileArtifactStore(settings.artifacts_dir)
        logger.info("Using file-based artifact store (LMG_DATA_DIR/artifacts)")
    return _store
