"""Pydantic models for generated learning materials.

Each artifact kind has its own schema carrying a literal ``kind`` tag, and
``ArtifactPayload`` is the discriminated union over the six of them. A
``MaterialsBundle`` maps kind -> payload; a kind missing from the bundle was
not produced by this generation pass.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, field_validator


class ArtifactKind(str, Enum):
    METADATA = "metadata"
    FLASHCARDS = "flashcards"
    QUIZZES = "quizzes"
    PREREQUISITES = "prerequisites"
    CASE_STUDY = "casestudies"
    CONCEPT_MAP = "mindmap"

    @classmethod
    def parse(cls, value: ArtifactKind | str) -> ArtifactKind:
        """Resolve a stored kind name, accepting the older spellings."""
        if isinstance(value, ArtifactKind):
            return value
        key = str(value).strip().lower()
        try:
            return cls(key)
        except ValueError:
            pass
        if key in _KIND_ALIASES:
            return _KIND_ALIASES[key]
        raise ValueError(f"Unknown artifact kind: {value!r}")


_KIND_ALIASES: dict[str, ArtifactKind] = {
    "case_study": ArtifactKind.CASE_STUDY,
    "case-study": ArtifactKind.CASE_STUDY,
    "casestudy": ArtifactKind.CASE_STUDY,
    "realworldproblems": ArtifactKind.CASE_STUDY,
    "concept_map": ArtifactKind.CONCEPT_MAP,
    "concept-map": ArtifactKind.CONCEPT_MAP,
    "conceptmap": ArtifactKind.CONCEPT_MAP,
    "mind_map": ArtifactKind.CONCEPT_MAP,
}

# Generation order for a full chunked pass
ALL_KINDS: tuple[ArtifactKind, ...] = (
    ArtifactKind.METADATA,
    ArtifactKind.FLASHCARDS,
    ArtifactKind.QUIZZES,
    ArtifactKind.PREREQUISITES,
    ArtifactKind.CASE_STUDY,
    ArtifactKind.CONCEPT_MAP,
)


# ---------------------------------------------------------------------------
# Item models
# ---------------------------------------------------------------------------

class Chapter(BaseModel):
    id: str = ""
    time_seconds: int = 0
    topic: str = ""
    description: str = ""


class Flashcard(BaseModel):
    id: str = ""
    question: str
    answer: str
    difficulty: Literal["easy", "medium", "hard"] = "medium"


class QuizQuestion(BaseModel):
    id: str = ""
    question_text: str
    options: list[str] = Field(default_factory=list)
    correct_answer_index: int = 0
    explanation: str = ""
    difficulty: Literal["easy", "medium", "hard"] = "medium"


class Prerequisite(BaseModel):
    id: str = ""
    topic: str
    difficulty: Literal["beginner", "intermediate", "advanced"] = "beginner"


class CaseStudy(BaseModel):
    id: str = ""
    title: str
    scenario: str = ""
    hints: list[str] = Field(default_factory=list)


class ConceptNode(BaseModel):
    id: str
    label: str
    type: Literal["root", "concept", "subconcept", "detail"] = "concept"
    description: str = ""
    level: int = 0


class ConceptEdge(BaseModel):
    id: str = ""
    source: str
    target: str
    label: str = ""
    type: Literal["hierarchy", "relation", "dependency"] = "hierarchy"


# ---------------------------------------------------------------------------
# Artifact payloads (tagged union)
# ---------------------------------------------------------------------------

class MetadataArtifact(BaseModel):
    kind: Literal["metadata"] = "metadata"
    title: str
    category: str = ""
    tags: list[str] = Field(default_factory=list)
    summary: str = ""
    chapters: list[Chapter] = Field(default_factory=list)


class FlashcardsArtifact(BaseModel):
    kind: Literal["flashcards"] = "flashcards"
    items: list[Flashcard] = Field(default_factory=list)


class QuizzesArtifact(BaseModel):
    kind: Literal["quizzes"] = "quizzes"
    items: list[QuizQuestion] = Field(default_factory=list)


class PrerequisitesArtifact(BaseModel):
    kind: Literal["prerequisites"] = "prerequisites"
    items: list[Prerequisite] = Field(default_factory=list)


class CaseStudyArtifact(BaseModel):
    """At most one case study per video; extra items from the model are dropped."""

    kind: Literal["casestudies"] = "casestudies"
    items: list[CaseStudy] = Field(default_factory=list)

    @field_validator("items")
    @classmethod
    def _keep_first(cls, v: list[CaseStudy]) -> list[CaseStudy]:
        return v[:1]


class ConceptMapArtifact(BaseModel):
    kind: Literal["mindmap"] = "mindmap"
    nodes: list[ConceptNode] = Field(default_factory=list)
    edges: list[ConceptEdge] = Field(default_factory=list)


ArtifactPayload = Annotated[
    Union[
        MetadataArtifact,
        FlashcardsArtifact,
        QuizzesArtifact,
        PrerequisitesArtifact,
        CaseStudyArtifact,
        ConceptMapArtifact,
    ],
    Field(discriminator="kind"),
]

ARTIFACT_SCHEMAS: dict[ArtifactKind, type[BaseModel]] = {
    ArtifactKind.METADATA: MetadataArtifact,
    ArtifactKind.FLASHCARDS: FlashcardsArtifact,
    ArtifactKind.QUIZZES: QuizzesArtifact,
    ArtifactKind.PREREQUISITES: PrerequisitesArtifact,
    ArtifactKind.CASE_STUDY: CaseStudyArtifact,
    ArtifactKind.CONCEPT_MAP: ConceptMapArtifact,
}


class MaterialsBundle(BaseModel):
    """Artifacts produced by one generation pass, keyed by kind."""

    artifacts: dict[ArtifactKind, ArtifactPayload] = Field(default_factory=dict)

    @field_validator("artifacts")
    @classmethod
    def _keys_match_payloads(cls, v: dict[ArtifactKind, BaseModel]) -> dict[ArtifactKind, BaseModel]:
        for kind, payload in v.items():
            if kind_of(payload) is not kind:
                raise ValueError(f"payload of kind {payload.kind} stored under {kind.value}")
        return v

    def kinds(self) -> set[ArtifactKind]:
        return set(self.artifacts)

    def get(self, kind: ArtifactKind) -> BaseModel | None:
        return self.artifacts.get(kind)

    def put(self, payload: BaseModel) -> None:
        self.artifacts[kind_of(payload)] = payload

    def merge(self, other: MaterialsBundle) -> None:
        self.artifacts.update(other.artifacts)

    @property
    def metadata(self) -> MetadataArtifact | None:
        return self.artifacts.get(ArtifactKind.METADATA)


# ---------------------------------------------------------------------------
# Single-call (full transcript) response schema
# ---------------------------------------------------------------------------

class LearningMaterialsResponse(BaseModel):
    """Shape the model fills in when asked for every artifact in one call."""

    title: str
    category: str = ""
    tags: list[str] = Field(default_factory=list)
    summary: str = ""
    chapters: list[Chapter] = Field(default_factory=list)
    flashcards: list[Flashcard] = Field(default_factory=list)
    quizzes: list[QuizQuestion] = Field(default_factory=list)
    prerequisites: list[Prerequisite] = Field(default_factory=list)
    case_studies: list[CaseStudy] = Field(default_factory=list)
    concept_map: ConceptMapArtifact = Field(default_factory=ConceptMapArtifact)

    def to_bundle(self) -> MaterialsBundle:
        return MaterialsBundle(
            artifacts={
                ArtifactKind.METADATA: MetadataArtifact(
                    title=self.title,
                    category=self.category,
                    tags=self.tags,
                    summary=self.summary,
                    chapters=self.chapters,
                ),
                ArtifactKind.FLASHCARDS: FlashcardsArtifact(items=self.flashcards),
                ArtifactKind.QUIZZES: QuizzesArtifact(items=self.quizzes),
                ArtifactKind.PREREQUISITES: PrerequisitesArtifact(items=self.prerequisites),
                ArtifactKind.CASE_STUDY: CaseStudyArtifact(items=self.case_studies),
                ArtifactKind.CONCEPT_MAP: self.concept_map,
            }
        )


class TokenUsage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def __add__(self, other: TokenUsage) -> TokenUsage:
        return TokenUsage(
            prompt_tokens=self.prompt_tokens + other.prompt_tokens,
            completion_tokens=self.completion_tokens + other.completion_tokens,
            total_tokens=self.total_tokens + other.total_tokens,
        )


class GenerationResult(BaseModel):
    materials: MaterialsBundle
    usage: TokenUsage = Field(default_factory=TokenUsage)


def kind_of(payload: BaseModel) -> ArtifactKind:
    """Artifact kind of a payload, as the enum (payload tags are plain strings)."""
    return ArtifactKind(payload.kind)
