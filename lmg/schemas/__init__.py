"""Artifact schemas for generated learning materials."""

from lmg.schemas.materials import (
    ALL_KINDS,
    ARTIFACT_SCHEMAS,
    ArtifactKind,
    ArtifactPayload,
    CaseStudy,
    CaseStudyArtifact,
    Chapter,
    ConceptEdge,
    ConceptMapArtifact,
    ConceptNode,
    Flashcard,
    FlashcardsArtifact,
    GenerationResult,
    LearningMaterialsResponse,
    MaterialsBundle,
    MetadataArtifact,
    Prerequisite,
    PrerequisitesArtifact,
    QuizQuestion,
    QuizzesArtifact,
    TokenUsage,
    kind_of,
)

__all__ = [
    "ALL_KINDS",
    "ARTIFACT_SCHEMAS",
    "ArtifactKind",
    "ArtifactPayload",
    "CaseStudy",
    "CaseStudyArtifact",
    "Chapter",
    "ConceptEdge",
    "ConceptMapArtifact",
    "ConceptNode",
    "Flashcard",
    "FlashcardsArtifact",
    "GenerationResult",
    "LearningMaterialsResponse",
    "MaterialsBundle",
    "MetadataArtifact",
    "Prerequisite",
    "PrerequisitesArtifact",
    "QuizQuestion",
    "QuizzesArtifact",
    "TokenUsage",
    "kind_of",
]
