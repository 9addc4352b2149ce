"""Domain models – scenes, per-narrative segmentation state and usage counters."""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

from story_automation.domain.styles import DEFAULT_STYLE_ID, DURATION_OPTIONS, ContentFormat

SILENCE_MARKER = "(Silence)"


@dataclass(frozen=True)
class Scene:
    scene_number: int
    visual_description: str
    script: str  # spoken excerpt; empty means a silent scene
    editing_tips: str = ""
    style_block: str = ""
    full_prompt: str = ""
    duration: int = 6  # seconds on the timeline
    generated_image_url: Optional[str] = None

    @property
    def is_silent(self) -> bool:
        return not self.script.strip()

    @property
    def display_script(self) -> str:
        return SILENCE_MARKER if self.is_silent else self.script

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sceneNumber": self.scene_number,
            "visualDescription": self.visual_description,
            "script": self.script,
            "editingTips": self.editing_tips,
            "styleBlock": self.style_block,
            "fullPrompt": self.full_prompt,
            "duration": self.duration,
            "generatedImageUrl": self.generated_image_url,
        }


@dataclass(frozen=True)
class ViralIdea:
    title: str
    hook: str
    viral_factor: str = ""


@dataclass(frozen=True)
class SegmentationContext:
    """Character/style context sent along with every batch."""
    character_description: str = ""
    style_id: str = DEFAULT_STYLE_ID
    format: ContentFormat = ContentFormat.SHORT


@dataclass
class StoryConfig:
    format: ContentFormat = ContentFormat.SHORT
    selected_idea: Optional[ViralIdea] = None
    duration: str = DURATION_OPTIONS[0]
    character_description: str = ""
    art_style_id: str = DEFAULT_STYLE_ID
    reference_script: Optional[str] = None

    def segmentation_context(self) -> SegmentationContext:
        return SegmentationContext(
            character_description=self.character_description,
            style_id=self.art_style_id,
            format=self.format,
        )


@dataclass(frozen=True)
class SegmentationBatchResult:
    """What the generator produced for one batch."""
    scenes: List[Scene]
    has_more_scenes: bool
    tokens_used: int = 0


@dataclass(frozen=True)
class BatchOutcome:
    """New scenes plus the cursor/finished values the caller should apply."""
    scenes: List[Scene]
    new_cursor: int
    new_finished: bool
    tokens_used: int = 0
    short_circuited: bool = False  # finished without contacting the backend


@dataclass(frozen=True)
class UsageStats:
    tokens: int = 0
    images: int = 0
    audio: int = 0

    def add(self, tokens: int = 0, images: int = 0, audio: int = 0) -> "UsageStats":
        return UsageStats(
            tokens=self.tokens + (tokens or 0),
            images=self.images + (images or 0),
            audio=self.audio + (audio or 0),
        )


@dataclass(frozen=True)
class SegmentationState:
    """
    Everything tied to one narrative: the text, how far it has been segmented,
    whether it is finished, and the scenes produced so far.

    Updated by value; adopting a new narrative means building a fresh state.
    """
    narrative: str = ""
    cursor: int = 0
    finished: bool = False
    scenes: Tuple[Scene, ...] = field(default_factory=tuple)

    @classmethod
    def for_narrative(cls, narrative: str) -> "SegmentationState":
        return cls(narrative=narrative)

    @property
    def next_scene_number(self) -> int:
        return len(self.scenes) + 1

    def apply(self, outcome: BatchOutcome) -> "SegmentationState":
        """Commit a successful batch: append scenes, move the cursor, maybe finish."""
        if outcome.new_cursor < self.cursor:
            raise ValueError(
                f"Cursor may not move backwards ({self.cursor} -> {outcome.new_cursor})"
            )
        return replace(
            self,
            cursor=outcome.new_cursor,
            finished=self.finished or outcome.new_finished,
            scenes=self.scenes + tuple(outcome.scenes),
        )

    def update_scene(self, scene_number: int, /, **changes: Any) -> "SegmentationState":
        """Replace one scene in place (e.g. attach a rendered image); numbering is untouched."""
        changes.pop("scene_number", None)
        if not any(s.scene_number == scene_number for s in self.scenes):
            raise KeyError(f"No scene numbered {scene_number}")
        return replace(
            self,
            scenes=tuple(
                replace(s, **changes) if s.scene_number == scene_number else s
                for s in self.scenes
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "processedCharCount": self.cursor,
            "isScriptFinished": self.finished,
            "narrativeLength": len(self.narrative),
            "scenes": [s.to_dict() for s in self.scenes],
        }


def script_progress(state: SegmentationState) -> float:
    """Percentage of the narrative segmented so far (exactly 100 once finished)."""
    if state.finished:
        return 100.0
    if not state.narrative:
        return 0.0
    return min(100.0, state.cursor / len(state.narrative) * 100)
