"""
Batch segmentation client: asks the text generator to break a window of the
narrative into a bounded number of scenes.

Excerpt fidelity is not checked here; the generator may paraphrase the
"verbatim" script segments and the reconciler copes with that.
"""

import time
from typing import Any, Callable, Dict, List

from story_automation import config
from story_automation.application.retry import with_retry
from story_automation.domain.errors import ContractViolationError
from story_automation.domain.models import Scene, SegmentationBatchResult, SegmentationContext
from story_automation.domain.styles import get_style
from story_automation.ports.interfaces import ISceneSegmenter, ITextGenerator

SCENE_BATCH_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "scenes": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "sceneNumber": {"type": "INTEGER"},
                    "visualDescription": {"type": "STRING"},
                    "script": {"type": "STRING"},
                    "editingTips": {"type": "STRING"},
                },
                "required": ["sceneNumber", "visualDescription", "script", "editingTips"],
            },
        },
        "hasMoreScenes": {"type": "BOOLEAN"},
    },
    "required": ["scenes", "hasMoreScenes"],
}


def parse_has_more(value: Any) -> bool:
    """Read the generator's "more text remains" flag; JSON-mode backends may send it as a string."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise ContractViolationError(f"Invalid 'hasMoreScenes' value: {value!r}")


def build_segmentation_prompt(
    text_window: str,
    starting_scene_number: int,
    batch_size: int,
    context: SegmentationContext,
) -> str:
    return f"""
Analyze this narrative and break it into visual scenes.
TEXT: "{text_window}"
Character Description: {context.character_description}
Content Format: {context.format.value}
Batch Size: {batch_size}
Scene Starting Number: {starting_scene_number}

IMPORTANT: Each scene's "script" segment MUST BE SHORT. Aim for approx. {config.EXCERPT_MIN_WORDS}-{config.EXCERPT_MAX_WORDS} words (roughly 4-8 seconds of speech).
Do not output long paragraphs. Break the story into small, cinematic visual beats.
Start at the beginning of TEXT and cover it in order without skipping anything.
Copy each "script" segment VERBATIM from TEXT.
Produce at most {batch_size} scenes. Set "hasMoreScenes" to true if TEXT continues beyond the last scene.

For each scene, generate a visual prompt, the verbatim script segment, and editing tips.
Output Format: JSON.
"""


class GeminiSceneSegmenter(ISceneSegmenter):
    """ISceneSegmenter backed by any ITextGenerator (Gemini → Ollama by default)."""

    def __init__(
        self,
        llm: ITextGenerator,
        retries: int = config.RETRY_ATTEMPTS,
        retry_delay: float = config.RETRY_INITIAL_DELAY,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._llm = llm
        self._retries = retries
        self._retry_delay = retry_delay
        self._sleep = sleep

    def segment_batch(
        self,
        text_window: str,
        starting_scene_number: int,
        batch_size: int,
        context: SegmentationContext,
    ) -> SegmentationBatchResult:
        prompt = build_segmentation_prompt(text_window, starting_scene_number, batch_size, context)
        data, tokens = with_retry(
            lambda: self._llm.generate_json(prompt, schema=SCENE_BATCH_SCHEMA),
            retries=self._retries,
            delay=self._retry_delay,
            sleep=self._sleep,
            label="Storyboard",
        )
        return self._parse_batch(data, tokens, starting_scene_number, batch_size, context)

    def _parse_batch(
        self,
        data: Dict[str, Any],
        tokens: int,
        starting_scene_number: int,
        batch_size: int,
        context: SegmentationContext,
    ) -> SegmentationBatchResult:
        raw_scenes = data.get("scenes")
        if not isinstance(raw_scenes, list):
            raise ContractViolationError("Missing 'scenes' list in segmentation response")
        if "hasMoreScenes" not in data:
            raise ContractViolationError("Missing 'hasMoreScenes' in segmentation response")

        if len(raw_scenes) > batch_size:
            print(f"  ⚠️  Generator returned {len(raw_scenes)} scenes for a batch of {batch_size}; "
                  f"keeping the first {batch_size}")
            raw_scenes = raw_scenes[:batch_size]

        style = get_style(context.style_id)
        scenes: List[Scene] = []
        for offset, raw in enumerate(raw_scenes):
            if not isinstance(raw, dict):
                raise ContractViolationError(f"Scene entry {offset} is not an object")
            visual = str(raw.get("visualDescription") or "").strip()
            scenes.append(
                Scene(
                    # Numbering is ours, not the generator's, so it can never repeat.
                    scene_number=starting_scene_number + offset,
                    visual_description=visual,
                    script=str(raw.get("script") or "").strip(),
                    editing_tips=str(raw.get("editingTips") or "").strip(),
                    style_block=style["prompt"],
                    full_prompt=f"{style['prompt']}.\n\n{visual}",
                    duration=config.DEFAULT_SCENE_DURATION,
                )
            )

        return SegmentationBatchResult(
            scenes=scenes,
            has_more_scenes=parse_has_more(data["hasMoreScenes"]),
            tokens_used=tokens,
        )
