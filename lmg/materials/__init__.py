"""Artifact persistence: per-kind collections and the replace-all writer."""

from lmg.materials.store import (
    ArtifactStore,
    FileArtifactStore,
    PostgresArtifactStore,
    get_artifact_store,
)
from lmg.materials.writer import GENERATED_BY, MaterialsWriter, case_study_id

__all__ = [
    "ArtifactStore",
    "GENERATED_BY",
    "FileArtifactStore",
    "MaterialsWriter",
    "PostgresArtifactStore",
    "case_study_id",
    "get_artifact_store",
]
