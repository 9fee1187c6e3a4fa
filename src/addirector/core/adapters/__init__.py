"""Capability provider bindings."""

from .gemini import GeminiProvider

__all__ = ["GeminiProvider"]
