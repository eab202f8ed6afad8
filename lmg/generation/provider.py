"""Generate learning materials from a transcript with one or more LLM calls."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from jinja2 import Environment, FileSystemLoader

from lmg.llm.base import LLMProvider
from lmg.schemas.materials import (
    ALL_KINDS,
    ARTIFACT_SCHEMAS,
    ArtifactKind,
    GenerationResult,
    LearningMaterialsResponse,
    MaterialsBundle,
    TokenUsage,
)

logger = logging.getLogger(__name__)
PROMPTS_DIR = Path(__file__).resolve().parent.parent / "prompts"


class MaterialsGenerator:
    """Structured-output generation over an :class:`LLMProvider`.

    Without ``target_kinds`` the whole bundle comes from a single call. With
    ``target_kinds`` each kind is requested on its own, and the first failure
    propagates; callers that want per-kind isolation go through
    :class:`~lmg.generation.chunked.ChunkedGenerator`.
    """

    def __init__(self, llm: LLMProvider, prompts_dir: Path | None = None):
        self._llm = llm
        self._env = Environment(loader=FileSystemLoader(str(prompts_dir or PROMPTS_DIR)))

    def generate(
        self,
        transcript: str,
        target_kinds: Iterable[ArtifactKind] | None = None,
    ) -> GenerationResult:
        if target_kinds is None:
            return self._generate_full(transcript)

        bundle = MaterialsBundle()
        usage = TokenUsage()
        for kind in target_kinds:
            result = self._generate_one(transcript, ArtifactKind.parse(kind))
            bundle.merge(result.materials)
            usage = usage + result.usage
        return GenerationResult(materials=bundle, usage=usage)

    def _generate_full(self, transcript: str) -> GenerationResult:
        prompt = self._env.get_template("learning_materials.j2").render(transcript=transcript)
        completion = self._llm.complete_structured(prompt, LearningMaterialsResponse)
        logger.info(
            "Full generation used %s tokens (%s kinds)",
            completion.usage.total_tokens,
            len(ALL_KINDS),
        )
        return GenerationResult(materials=completion.data.to_bundle(), usage=completion.usage)

    def _generate_one(self, transcript: str, kind: ArtifactKind) -> GenerationResult:
        prompt = self._env.get_template("learning_artifact.j2").render(
            kind=kind.value,
            transcript=transcript,
        )
        completion = self._llm.complete_structured(prompt, ARTIFACT_SCHEMAS[kind])
        logger.debug("Generated %s (%s tokens)", kind.value, completion.usage.total_tokens)
        bundle = MaterialsBundle()
        bundle.put(completion.data)
        return GenerationResult(materials=bundle, usage=completion.usage)
