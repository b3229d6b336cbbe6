"""Product generation pipeline."""

from .pipeline import (
    GenerationPipeline,
    GenerationResult,
    clean_subcategory,
    normalize_candidates,
    parse_attribute_mapping,
    render_prompt,
)

__all__ = [
    "GenerationPipeline",
    "GenerationResult",
    "clean_subcategory",
    "normalize_candidates",
    "parse_attribute_mapping",
    "render_prompt",
]
