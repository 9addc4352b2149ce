"""
Port interfaces.
Implement these in adapters; the application layer depends only on these abstractions.
A different text backend only needs to implement ITextGenerator.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from story_automation.domain.models import (
    SegmentationBatchResult,
    SegmentationContext,
    StoryConfig,
    ViralIdea,
)
from story_automation.domain.styles import ContentFormat


class ITextGenerator(ABC):
    """Raw text/JSON generation. Failures are raised as GenerationError with a category."""

    @abstractmethod
    def generate(
        self,
        prompt: str,
        options: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Return {"response": str, "provider": str, "tokens": int}."""
        pass

    @abstractmethod
    def generate_json(
        self,
        prompt: str,
        schema: Optional[Dict[str, Any]] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> Tuple[Dict[str, Any], int]:
        """Return (parsed JSON object, tokens used)."""
        pass


class ISceneSegmenter(ABC):
    """Break a window of narrative into a bounded batch of scenes."""

    @abstractmethod
    def segment_batch(
        self,
        text_window: str,
        starting_scene_number: int,
        batch_size: int,
        context: SegmentationContext,
    ) -> SegmentationBatchResult:
        """Scenes numbered from starting_scene_number, plus the generator's 'more remains' flag."""
        pass


class IScriptWriter(ABC):
    """Idea and narrative generation (the stages before the storyboard)."""

    @abstractmethod
    def generate_viral_ideas(
        self,
        content_format: ContentFormat,
        duration: str,
        reference_script: Optional[str] = None,
    ) -> Tuple[List[ViralIdea], int]:
        """Return (ideas, tokens used)."""
        pass

    @abstractmethod
    def generate_script(self, story_config: StoryConfig) -> Tuple[str, int]:
        """Return (narrative text, tokens used) for story_config.selected_idea."""
        pass
