"""Shared prompt texts and sentinels.

Security
--------
Only generic sentinel strings live here; no credentials.
"""
from __future__ import annotations

BASE_INSTRUCTIONS = """You are a computer function. You are expected to perform the following tasks:
Step 1: Review and understand the 'instructions'.
Step 2: Prepare a response by processing the provided data as per the 'instructions'.
Step 3: Convert the response to a Json object. The Json object must match the schema provided as the `output json schema`.
Step 4: Validate that the Json object matches the 'output json schema' and correct if needed. If you are not able to generate a valid Json, respond with "Error calculating the answer."
Step 5: Respond ONLY with properly formatted Json object. No other words or text, only valid Json in the answer.
"""

FUNCTION_INSTRUCTIONS = """You are a computer function. You are expected to perform the following tasks:
Step 1: Review and understand the 'instructions'.
Step 2: Prepare a response by processing the provided data as per the 'instructions'.
Step 3: Convert the response to a Json object. The Json object must match the schema provided in the function definition.
Step 4: Validate that the Json object matches the function properties and correct if needed. If you are not able to generate a valid Json, respond with "Error calculating the answer."
Step 5: Respond ONLY with properly formatted Json object. No other words or text, only valid Json in the answer.
"""

PLAIN_INSTRUCTIONS = """You are a computer function. Review and understand the 'instructions' and respond only with the requested result."""

# Name of the function declared when native function calling carries the output
OUTPUT_FUNCTION_NAME = "analyze_data"
OUTPUT_FUNCTION_DESCRIPTION = "Use this function to compute the answer based on input data, instructions and your language model. Output should be a fully formed Json object."

MISSING_API_KEY_ERROR = "missing_api_key"  # pragma: allowlist secret - sentinel, not a secret

# Safety margin applied to tokenizer estimates for vendors without a public tokenizer
PROMPT_TOKEN_MARGIN = 1.05

__all__ = [
    "BASE_INSTRUCTIONS",
    "FUNCTION_INSTRUCTIONS",
    "PLAIN_INSTRUCTIONS",
    "OUTPUT_FUNCTION_NAME",
    "OUTPUT_FUNCTION_DESCRIPTION",
    "MISSING_API_KEY_ERROR",
    "PROMPT_TOKEN_MARGIN",
]
