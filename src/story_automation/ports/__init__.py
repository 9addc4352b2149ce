"""Ports (interfaces) – depend on these, implement in adapters."""

from story_automation.ports.interfaces import (
    ITextGenerator,
    ISceneSegmenter,
    IScriptWriter,
)

__all__ = [
    "ITextGenerator",
    "ISceneSegmenter",
    "IScriptWriter",
]
