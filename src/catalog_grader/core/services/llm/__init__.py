"""Completion providers."""

from .completion_provider import CompletionProvider, OpenAICompletionProvider

__all__ = ["CompletionProvider", "OpenAICompletionProvider"]
