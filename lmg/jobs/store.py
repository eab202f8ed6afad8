"""Video job storage: Postgres (preferred) or file-based fallback."""

from __future__ import annotations

import json
import logging
import threading
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Protocol

from lmg.config import get_settings
from lmg.jobs.models import UPDATABLE_FIELDS, ProcessingStatus, VideoJob

logger = logging.getLogger(__name__)


class JobNotFoundError(LookupError):
    """Raised when a job id has no stored record."""


class VideoStore(Protocol):
    def create(self, job: VideoJob) -> VideoJob: ...
    def get(self, job_id: str) -> VideoJob | None: ...
    def find_by_status(self, status: ProcessingStatus) -> list[VideoJob]: ...
    def update_fields(
        self,
        job_id: str,
        fields: dict[str, Any],
        only_if_status: ProcessingStatus | None = None,
    ) -> bool: ...


def _check_fields(fields: dict[str, Any]) -> None:
    unknown = set(fields) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Cannot update job fields: {', '.join(sorted(unknown))}")


def _plain(value: Any) -> Any:
    """Enum members -> their values, recursively through lists."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value


# ---------------------------------------------------------------------------
# Postgres implementation
# ---------------------------------------------------------------------------

_COLUMNS = (
    "job_id", "user_id", "transcript", "processing_status", "materials_status",
    "incomplete_materials", "error_type", "error_message", "embedding",
    "title", "category", "tags", "summary", "chapters",
    "processed_at", "created_at", "updated_at",
)
_JSON_COLUMNS = frozenset({"transcript", "incomplete_materials", "embedding", "tags", "chapters"})


class PostgresVideoStore:
    """Persist video jobs in Postgres. Survives restarts."""

    def __init__(self, database_url: str):
        self._url = database_url
        self._conn = self._connect()

    def _connect(self):
        try:
            import psycopg
            conn = psycopg.connect(self._url, autocommit=True)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS lmg_videos (
                    job_id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL DEFAULT '',
                    transcript JSONB NOT NULL DEFAULT '[]',
                    processing_status TEXT NOT NULL,
                    materials_status TEXT NOT NULL,
                    incomplete_materials JSONB NOT NULL DEFAULT '[]',
                    error_type TEXT,
                    error_message TEXT,
                    embedding JSONB,
                    title TEXT NOT NULL DEFAULT '',
                    category TEXT NOT NULL DEFAULT '',
                    tags JSONB NOT NULL DEFAULT '[]',
                    summary TEXT NOT NULL DEFAULT '',
                    chapters JSONB NOT NULL DEFAULT '[]',
                    processed_at TIMESTAMPTZ,
                    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
                    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_lmg_videos_status
                ON lmg_videos (processing_status, created_at)
            """)
            return conn
        except ImportError:
            raise ImportError(
                "psycopg required for Postgres job store. pip install 'psycopg[binary]'"
            )

    def create(self, job: VideoJob) -> VideoJob:
        data = job.model_dump(mode="json")
        native = job.model_dump()
        placeholders = ", ".join(
            "%s::jsonb" if c in _JSON_COLUMNS else "%s" for c in _COLUMNS
        )
        row = tuple(
            json.dumps(data[c]) if c in _JSON_COLUMNS and data[c] is not None else _plain(native[c])
            for c in _COLUMNS
        )
        self._conn.execute(
            f"INSERT INTO lmg_videos ({', '.join(_COLUMNS)}) VALUES ({placeholders})",
            row,
        )
        return job

    def get(self, job_id: str) -> VideoJob | None:
        row = self._conn.execute(
            f"SELECT {', '.join(_COLUMNS)} FROM lmg_videos WHERE job_id = %s",
            (job_id,),
        ).fetchone()
        if not row:
            return None
        return self._row_to_job(row)

    def find_by_status(self, status: ProcessingStatus) -> list[VideoJob]:
        rows = self._conn.execute(
            f"""
            SELECT {', '.join(_COLUMNS)} FROM lmg_videos
            WHERE processing_status = %s ORDER BY created_at
            """,
            (status.value,),
        ).fetchall()
        return [self._row_to_job(r) for r in rows]

    def update_fields(
        self,
        job_id: str,
        fields: dict[str, Any],
        only_if_status: ProcessingStatus | None = None,
    ) -> bool:
        _check_fields(fields)
        if not fields:
            return True
        assignments: list[str] = []
        params: list[Any] = []
        for name, value in fields.items():
            value = _plain(value)
            if name in _JSON_COLUMNS:
                assignments.append(f"{name} = %s::jsonb")
                params.append(json.dumps(value) if value is not None else None)
            else:
                assignments.append(f"{name} = %s")
                params.append(value)
        sql = f"UPDATE lmg_videos SET {', '.join(assignments)}, updated_at = NOW() WHERE job_id = %s"
        params.append(job_id)
        if only_if_status is not None:
            sql += " AND processing_status = %s"
            params.append(only_if_status.value)
        cur = self._conn.execute(sql, tuple(params))
        return cur.rowcount > 0

    def _row_to_job(self, row) -> VideoJob:
        data = dict(zip(_COLUMNS, row))
        for c in _JSON_COLUMNS:
            if isinstance(data[c], str):
                data[c] = json.loads(data[c])
        for c in ("transcript", "incomplete_materials", "tags", "chapters"):
            if data[c] is None:
                data[c] = []
        return VideoJob.model_validate(data)


# ---------------------------------------------------------------------------
# File-based implementation (fallback when no Postgres)
# ---------------------------------------------------------------------------

class FileVideoStore:
    """Persist jobs as JSON files. Survives restarts within same data dir."""

    def __init__(self, jobs_dir: Path):
        self._dir = Path(jobs_dir)
        self._dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def _job_path(self, job_id: str) -> Path:
        return self._dir / f"{job_id}.json"

    def create(self, job: VideoJob) -> VideoJob:
        with self._lock:
            self._write_job(job)
        return job

    def get(self, job_id: str) -> VideoJob | None:
        path = self._job_path(job_id)
        if not path.exists():
            return None
        return self._read_job(path)

    def find_by_status(self, status: ProcessingStatus) -> list[VideoJob]:
        jobs = [self._read_job(p) for p in sorted(self._dir.glob("*.json"))]
        matching = [j for j in jobs if j.processing_status == status]
        return sorted(matching, key=lambda j: j.created_at)

    def update_fields(
        self,
        job_id: str,
        fields: dict[str, Any],
        only_if_status: ProcessingStatus | None = None,
    ) -> bool:
        _check_fields(fields)
        with self._lock:
            job = self.get(job_id)
            if job is None:
                return False
            if only_if_status is not None and job.processing_status != only_if_status:
                return False
            data = job.model_dump()
            data.update({k: _plain(v) for k, v in fields.items()})
            data["updated_at"] = datetime.now(timezone.utc)
            self._write_job(VideoJob.model_validate(data))
        return True

    def _write_job(self, job: VideoJob) -> None:
        path = self._job_path(job.job_id)
        tmp = path.with_suffix(".json.tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(job.model_dump(mode="json"), f, indent=2, default=str)
        tmp.replace(path)

    def _read_job(self, path: Path) -> VideoJob:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return VideoJob.model_validate(data)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------

_store: VideoStore | None = None


def get_video_store() -> VideoStore:
    """Return singleton video store (Postgres if configured, else file-based)."""
    global _store
    if _store is not None:
        return _store
    settings = get_settings()
    if settings.lmg_database_url:
        try:
            _store = PostgresVideoStore(settings.lmg_database_url)
            logger.info("Using Postgres video store")
        except Exception as e:
            logger.warning("Postgres video store failed (%s), falling back to file store", e)
            _store = FileVideoStore(settings.jobs_dir)
    else:
        _store = FileVideoStore(settings.jobs_dir)
        logger.info("Using file-based video store (LMG_DATA_DIR/jobs)")
    return _store


def require_job(store: VideoStore, job_id: str) -> VideoJob:
    job = store.get(job_id)
    if job is None:
        raise JobNotFoundError(f"Job not found: {job_id}")
    return job
