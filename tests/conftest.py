from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import pytest

from story_automation.domain.models import (
    Scene,
    SegmentationBatchResult,
    SegmentationContext,
    StoryConfig,
    ViralIdea,
)
from story_automation.ports.interfaces import ISceneSegmenter, IScriptWriter, ITextGenerator

SENTENCES = [
    "The lighthouse keeper counted the ships every night.",
    "On the fourth night one of them had no lights at all.",
    "He watched it drift closer until it scraped the rocks below.",
    "Nobody climbed out, but the cabin door was open.",
    "In the morning his own boots were missing from the porch.",
]
STORY = " ".join(SENTENCES)


def make_scene(number: int, script: str, visual: str = "a dark coast") -> Scene:
    return Scene(scene_number=number, visual_description=visual, script=script)


def batch(scripts: Sequence[str], has_more: bool, start: int = 1, tokens: int = 10) -> SegmentationBatchResult:
    return SegmentationBatchResult(
        scenes=[make_scene(start + i, s) for i, s in enumerate(scripts)],
        has_more_scenes=has_more,
        tokens_used=tokens,
    )


class FakeSegmenter(ISceneSegmenter):
    """Replays queued results (or raises queued exceptions) and records every call."""

    def __init__(self, responses: Optional[List[Union[SegmentationBatchResult, Exception]]] = None):
        self.responses = list(responses or [])
        self.calls: List[Dict[str, Any]] = []

    def segment_batch(
        self,
        text_window: str,
        starting_scene_number: int,
        batch_size: int,
        context: SegmentationContext,
    ) -> SegmentationBatchResult:
        self.calls.append({
            "text_window": text_window,
            "starting_scene_number": starting_scene_number,
            "batch_size": batch_size,
            "context": context,
        })
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakeLLM(ITextGenerator):
    """ITextGenerator returning queued JSON payloads / texts, or raising queued errors."""

    def __init__(self, responses: Optional[List[Any]] = None, tokens: int = 42):
        self.responses = list(responses or [])
        self.tokens = tokens
        self.prompts: List[str] = []
        self.options: List[Dict[str, Any]] = []

    def _next(self):
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def generate(self, prompt: str, options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        self.prompts.append(prompt)
        self.options.append(options or {})
        return {"response": self._next(), "provider": "fake", "tokens": self.tokens}

    def generate_json(
        self,
        prompt: str,
        schema: Optional[Dict[str, Any]] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> Tuple[Dict[str, Any], int]:
        self.prompts.append(prompt)
        self.options.append(options or {})
        return self._next(), self.tokens


class FakeWriter(IScriptWriter):
    def __init__(self, script: str = STORY):
        self.script = script
        self.configs: List[StoryConfig] = []

    def generate_viral_ideas(self, content_format, duration, reference_script=None):
        return [ViralIdea("The Dark Ship", "A ship with no lights", "mystery")], 7

    def generate_script(self, config: StoryConfig):
        self.configs.append(config)
        return self.script, 100


@pytest.fixture
def sleeps() -> List[float]:
    """Collects delays passed to the injected sleep function."""
    return []
