"""Learning-material generation: single-call and per-artifact (chunked)."""

from lmg.generation.chunked import ChunkedGenerator, ChunkedResult
from lmg.generation.provider import PROMPTS_DIR, MaterialsGenerator

__all__ = ["ChunkedGenerator", "ChunkedResult", "MaterialsGenerator", "PROMPTS_DIR"]
