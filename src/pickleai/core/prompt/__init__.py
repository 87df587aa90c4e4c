"""System prompt composition."""

from .composer import (
    build_context_prompt,
    format_known_context,
    generate_intelligent_system_prompt,
    generic_system_prompt,
)

__all__ = [
    "build_context_prompt",
    "format_known_context",
    "generate_intelligent_system_prompt",
    "generic_system_prompt",
]
