"""Tests for artifact schemas, the tagged payload union and MaterialsBundle."""

import pytest
from pydantic import ValidationError

from lmg.schemas import (
    ALL_KINDS,
    ARTIFACT_SCHEMAS,
    ArtifactKind,
    CaseStudy,
    CaseStudyArtifact,
    FlashcardsArtifact,
    LearningMaterialsResponse,
    MaterialsBundle,
    MetadataArtifact,
    TokenUsage,
    kind_of,
)


class TestArtifactKind:

    def test_values(self):
        assert [k.value for k in ALL_KINDS] == [
            "metadata", "flashcards", "quizzes", "prerequisites", "casestudies", "mindmap",
        ]

    def test_parse_aliases(self):
        assert ArtifactKind.parse("case_study") is ArtifactKind.CASE_STUDY
        assert ArtifactKind.parse("concept_map") is ArtifactKind.CONCEPT_MAP
        assert ArtifactKind.parse(" Flashcards ") is ArtifactKind.FLASHCARDS

    def test_parse_unknown(self):
        with pytest.raises(ValueError, match="Unknown artifact kind"):
            ArtifactKind.parse("podcasts")


def test_every_kind_has_a_schema():
    for kind in ALL_KINDS:
        schema = ARTIFACT_SCHEMAS[kind]
        assert kind_of(schema.model_construct()) is kind


def test_case_study_keeps_only_first():
    art = CaseStudyArtifact(items=[CaseStudy(title="one"), CaseStudy(title="two")])
    assert [c.title for c in art.items] == ["one"]


def test_flashcard_difficulty_defaults_to_medium():
    art = FlashcardsArtifact.model_validate({"items": [{"question": "Q", "answer": "A"}]})
    assert art.items[0].difficulty == "medium"


class TestMaterialsBundle:

    def test_put_keys_by_kind(self):
        bundle = MaterialsBundle()
        bundle.put(FlashcardsArtifact())
        assert bundle.kinds() == {ArtifactKind.FLASHCARDS}
        assert bundle.metadata is None

    def test_rejects_mismatched_key(self):
        with pytest.raises(ValidationError):
            MaterialsBundle(artifacts={ArtifactKind.QUIZZES: FlashcardsArtifact()})

    def test_validates_from_plain_dict(self):
        bundle = MaterialsBundle.model_validate(
            {"artifacts": {"metadata": {"kind": "metadata", "title": "T"}}}
        )
        assert isinstance(bundle.metadata, MetadataArtifact)
        assert bundle.metadata.title == "T"

    def test_merge(self):
        a = MaterialsBundle()
        a.put(FlashcardsArtifact())
        b = MaterialsBundle()
        b.put(MetadataArtifact(title="T"))
        a.merge(b)
        assert a.kinds() == {ArtifactKind.FLASHCARDS, ArtifactKind.METADATA}


def test_full_response_to_bundle_has_every_kind():
    response = LearningMaterialsResponse.model_validate({
        "title": "Sorting",
        "flashcards": [{"question": "Q", "answer": "A"}],
        "case_studies": [{"title": "Sort mail"}],
        "concept_map": {"nodes": [{"id": "n1", "label": "Sorting", "type": "root"}]},
    })
    bundle = response.to_bundle()
    assert bundle.kinds() == set(ALL_KINDS)
    assert bundle.metadata.title == "Sorting"
    assert len(bundle.get(ArtifactKind.FLASHCARDS).items) == 1


def test_token_usage_add():
    total = TokenUsage(prompt_tokens=1, completion_tokens=2, total_tokens=3) + TokenUsage(total_tokens=4)
    assert total.total_tokens == 7
    assert total.prompt_tokens == 1
