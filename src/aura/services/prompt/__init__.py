"""Prompt construction package."""

from aura.services.prompt.prompt_builder import BuiltPrompt, PromptBuilder
from aura.services.prompt.themes import THEME_PATTERNS, detect_themes

__all__ = [
    "BuiltPrompt",
    "PromptBuilder",
    "THEME_PATTERNS",
    "detect_themes",
]
