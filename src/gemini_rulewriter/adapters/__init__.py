"""Completion session providers."""

from .gemini import GeminiSessionProvider
from .scripted import ScriptedSessionProvider

__all__ = ["GeminiSessionProvider", "ScriptedSessionProvider"]
