"""Prompt builders for each pipeline stage."""

from .builders import (
    build_format_prompt,
    build_refine_prompt,
    build_retry_prompt,
    build_structure_prompt,
)

__all__ = [
    "build_format_prompt",
    "build_refine_prompt",
    "build_retry_prompt",
    "build_structure_prompt",
]
