"""Per-artifact generation that keeps going when one artifact kind fails.

Each targeted kind is an independent call. A failure is classified, logged
and recorded in ``incomplete_materials``; the other kinds still land in the
bundle. The bundle and the incomplete list never share a kind.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Iterable

from lmg.errors.classifier import ClassifiedError, classify_error
from lmg.generation.provider import MaterialsGenerator
from lmg.schemas.materials import (
    ALL_KINDS,
    ArtifactKind,
    MaterialsBundle,
    TokenUsage,
)

logger = logging.getLogger(__name__)


@dataclass
class ChunkedResult:
    materials: MaterialsBundle = field(default_factory=MaterialsBundle)
    incomplete_materials: list[ArtifactKind] = field(default_factory=list)
    failures: dict[ArtifactKind, ClassifiedError] = field(default_factory=dict)
    usage: TokenUsage = field(default_factory=TokenUsage)

    @property
    def metadata_generated(self) -> bool:
        return ArtifactKind.METADATA in self.materials.kinds()

    @property
    def complete(self) -> bool:
        return not self.incomplete_materials


def _known_kinds(names: Iterable[ArtifactKind | str]) -> list[ArtifactKind]:
    kinds: list[ArtifactKind] = []
    for name in names:
        try:
            kind = ArtifactKind.parse(name)
        except ValueError:
            logger.warning("Skipping unknown incomplete material %r", name)
            continue
        if kind not in kinds:
            kinds.append(kind)
    return kinds


class ChunkedGenerator:
    def __init__(self, generator: MaterialsGenerator, max_workers: int = 1):
        self._generator = generator
        self._max_workers = max(1, max_workers)

    def generate(
        self,
        transcript: str,
        only: Iterable[ArtifactKind | str] | None = None,
    ) -> ChunkedResult:
        """Generate each targeted kind separately.

        ``only`` empty or None means all kinds. Names that are not a known
        kind are logged and skipped; if none is left, every kind is targeted.
        """
        targets = _known_kinds(only or [])
        if not targets:
            targets = list(ALL_KINDS)

        result = ChunkedResult()
        if self._max_workers == 1 or len(targets) == 1:
            for kind in targets:
                self._collect(result, kind, lambda k=kind: self._generate_kind(transcript, k))
        else:
            with ThreadPoolExecutor(max_workers=min(self._max_workers, len(targets))) as pool:
                futures = {pool.submit(self._generate_kind, transcript, kind): kind for kind in targets}
                for fut in as_completed(futures):
                    self._collect(result, futures[fut], fut.result)

        # Report incomplete kinds in generation order, not completion order
        result.incomplete_materials.sort(key=targets.index)
        logger.info(
            "Chunked generation: %s/%s kinds ok, incomplete=%s",
            len(targets) - len(result.incomplete_materials),
            len(targets),
            [k.value for k in result.incomplete_materials],
        )
        return result

    def _generate_kind(self, transcript: str, kind: ArtifactKind):
        return self._generator.generate(transcript, target_kinds=[kind])

    def _collect(self, result: ChunkedResult, kind: ArtifactKind, produce) -> None:
        try:
            generated = produce()
        except Exception as e:
            failure = classify_error(e)
            logger.warning(
                "Generating %s failed (%s): %s",
                kind.value,
                failure.kind.value,
                failure.message,
            )
            result.failures[kind] = failure
            result.incomplete_materials.append(kind)
            return
        payload = generated.materials.get(kind)
        if payload is None:
            logger.warning("Generator returned no %s payload", kind.value)
            result.incomplete_materials.append(kind)
            return
        result.materials.put(payload)
        result.usage = result.usage + generated.usage
