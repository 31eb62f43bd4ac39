"""Schema derivation, output validation/coercion and correction feedback."""

from .correction import build_correction, describe_failure
from .schema import WRAPPER_KEY, OutputSchema, build_output_schema, derive_schema
from .validator import validate_text

__all__ = [
    "WRAPPER_KEY",
    "OutputSchema",
    "build_output_schema",
    "derive_schema",
    "validate_text",
    "build_correction",
    "describe_failure",
]
