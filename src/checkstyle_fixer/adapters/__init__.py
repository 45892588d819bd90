"""Concrete implementations of provider interfaces."""

from .llm.ollama import OllamaAdapter

__all__ = ["OllamaAdapter"]
