"""Generation service client, prompt templates and output schema."""

from specwatch.llm.client import GenerationClient
from specwatch.llm.prompts import SYSTEM_PROMPT, build_diff_prompt, build_prompt
from specwatch.llm.schema import CHANGE_SCHEMA

__all__ = [
    "CHANGE_SCHEMA",
    "GenerationClient",
    "SYSTEM_PROMPT",
    "build_diff_prompt",
    "build_prompt",
]
