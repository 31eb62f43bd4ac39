"""Small pure helpers shared by builders, parsers and the validator."""

from .json_text import (
    extract_json_text,
    remove_code_fences,
    remove_schema_wrappers,
    remove_think_blocks,
    sanitize_model_output,
)
from .ranges import map_to_range

__all__ = [
    "extract_json_text",
    "remove_code_fences",
    "remove_schema_wrappers",
    "remove_think_blocks",
    "sanitize_model_output",
    "map_to_range",
]
