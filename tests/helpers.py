"""Sample payloads and hand-written fakes shared by the test modules."""

from lmg.schemas.materials import (
    ALL_KINDS,
    ArtifactKind,
    CaseStudy,
    CaseStudyArtifact,
    Chapter,
    ConceptEdge,
    ConceptMapArtifact,
    ConceptNode,
    Flashcard,
    FlashcardsArtifact,
    GenerationResult,
    MaterialsBundle,
    MetadataArtifact,
    Prerequisite,
    PrerequisitesArtifact,
    QuizQuestion,
    QuizzesArtifact,
    TokenUsage,
)


def sample_payload(kind: ArtifactKind, n: int = 3):
    """A small, valid payload for ``kind`` (``n`` items for list kinds)."""
    if kind is ArtifactKind.METADATA:
        return MetadataArtifact(
            title="Binary Search Trees",
            category="Computer Science",
            tags=["bst", "data structures"],
            summary="How BSTs keep keys ordered for fast lookup.",
            chapters=[Chapter(id="c1", time_seconds=0, topic="Intro")],
        )
    if kind is ArtifactKind.FLASHCARDS:
        return FlashcardsArtifact(
            items=[Flashcard(question=f"Q{i}?", answer=f"A{i}") for i in range(n)]
        )
    if kind is ArtifactKind.QUIZZES:
        return QuizzesArtifact(
            items=[
                QuizQuestion(question_text=f"Quiz {i}", options=["a", "b", "c", "d"], correct_answer_index=1)
                for i in range(n)
            ]
        )
    if kind is ArtifactKind.PREREQUISITES:
        return PrerequisitesArtifact(items=[Prerequisite(topic=f"Topic {i}") for i in range(n)])
    if kind is ArtifactKind.CASE_STUDY:
        return CaseStudyArtifact(items=[CaseStudy(title="Index a phone book", hints=["sorted keys"])])
    return ConceptMapArtifact(
        nodes=[ConceptNode(id="n1", label="BST", type="root"), ConceptNode(id="n2", label="Rotation")],
        edges=[ConceptEdge(id="e1", source="n1", target="n2")],
    )


def sample_bundle(kinds=ALL_KINDS, n: int = 3) -> MaterialsBundle:
    bundle = MaterialsBundle()
    for kind in kinds:
        bundle.put(sample_payload(kind, n))
    return bundle


class FakeGenerator:
    """Stands in for MaterialsGenerator; records every call.

    ``fail`` maps a kind to the exception its per-kind call raises;
    ``full_error`` is raised by the single full-transcript call.
    """

    def __init__(self, fail=None, full_error=None):
        self.fail = dict(fail or {})
        self.full_error = full_error
        self.calls: list = []

    def generate(self, transcript, target_kinds=None):
        if target_kinds is None:
            self.calls.append(None)
            if self.full_error is not None:
                raise self.full_error
            return GenerationResult(materials=sample_bundle(), usage=TokenUsage(total_tokens=100))
        kinds = [ArtifactKind.parse(k) for k in target_kinds]
        self.calls.extend(kinds)
        for kind in kinds:
            if kind in self.fail:
                raise self.fail[kind]
        return GenerationResult(materials=sample_bundle(kinds), usage=TokenUsage(total_tokens=10))

    @property
    def kinds_requested(self) -> list:
        return [c for c in self.calls if c is not None]


class FakeEmbedder:
    def __init__(self, error=None):
        self.error = error
        self.texts: list[str] = []

    def embed(self, text: str) -> list[float]:
        self.texts.append(text)
        if self.error is not None:
            raise self.error
        return [0.6, 0.8]
