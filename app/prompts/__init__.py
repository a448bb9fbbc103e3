"""Prompt management system.

Lesson generation and translation prompts live as YAML + Mako templates
in ``app/prompts/templates`` so wording can change without code changes.
"""

from app.prompts.manager import LLMSettings, PromptManager, PromptTemplate, PromptType

__all__ = ["LLMSettings", "PromptManager", "PromptTemplate", "PromptType"]
