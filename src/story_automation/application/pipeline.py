"""
Storyboard pipeline – orchestrates idea → narrative → batched scene segmentation.
Depends only on port interfaces.

One batch may be in flight at a time. Either a batch commits fully (scenes
appended, cursor advanced, maybe finished) or it fails and nothing changes.
"""

import json
import os
from dataclasses import replace
from typing import List, Optional

from story_automation import config
from story_automation.application.cursor import finished_outcome, is_exhausted, unconsumed_window
from story_automation.application.reconciler import decide_completion, reconcile_cursor
from story_automation.domain.errors import ContractViolationError, GenerationError, SegmentationBatchError
from story_automation.domain.models import (
    BatchOutcome,
    Scene,
    SegmentationContext,
    SegmentationState,
    StoryConfig,
    UsageStats,
    ViralIdea,
    script_progress,
)
from story_automation.ports.interfaces import ISceneSegmenter, IScriptWriter


def request_next_batch(
    segmenter: ISceneSegmenter,
    state: SegmentationState,
    batch_size: int = config.SEGMENT_BATCH_SIZE,
    context: Optional[SegmentationContext] = None,
) -> BatchOutcome:
    """
    Segment the next slice of state.narrative. Does not mutate `state`; apply
    the returned outcome with state.apply(outcome).

    Raises SegmentationBatchError when the backend fails or breaks its contract.
    """
    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")
    if context is None:
        context = SegmentationContext()

    if state.finished:
        return finished_outcome(state.narrative)

    window, window_start = unconsumed_window(state.narrative, state.cursor)
    if is_exhausted(window):
        return finished_outcome(state.narrative)

    try:
        result = segmenter.segment_batch(window, state.next_scene_number, batch_size, context)
        new_cursor = reconcile_cursor(window, window_start, result.scenes)
        new_cursor, finished = decide_completion(
            result.has_more_scenes, new_cursor, len(state.narrative)
        )
        if not finished and new_cursor <= state.cursor:
            raise ContractViolationError(
                f"Batch did not advance the cursor (stuck at {state.cursor})"
            )
    except GenerationError as e:
        print(f"  ❌ Storyboard batch failed ({e.category.value}): {e}")
        raise SegmentationBatchError() from e

    return BatchOutcome(
        scenes=list(result.scenes),
        new_cursor=new_cursor,
        new_finished=finished,
        tokens_used=result.tokens_used,
    )


class StoryboardPipeline:
    """
    Holds the wizard state for one story and drives the stages.
    All dependencies are injected (ports); no concrete implementations here.
    """

    def __init__(
        self,
        *,
        segmenter: ISceneSegmenter,
        script_writer: IScriptWriter,
        story_config: Optional[StoryConfig] = None,
        batch_size: int = config.SEGMENT_BATCH_SIZE,
    ):
        self._segmenter = segmenter
        self._writer = script_writer
        self.story_config = story_config or StoryConfig()
        self.batch_size = batch_size
        self.state = SegmentationState()
        self.usage = UsageStats()
        self.is_generating = False

    # --- Stage 1: ideas ---

    def generate_ideas(self) -> List[ViralIdea]:
        cfg = self.story_config
        print("\n[1/3] Generating viral story ideas...")
        ideas, tokens = self._writer.generate_viral_ideas(
            cfg.format, cfg.duration, cfg.reference_script
        )
        self.usage = self.usage.add(tokens=tokens)
        print(f"  ✅ {len(ideas)} ideas ({tokens} tokens)")
        return ideas

    # --- Stage 2: narrative ---

    def generate_script(self, idea: Optional[ViralIdea] = None) -> str:
        if idea is not None:
            self.story_config = replace(self.story_config, selected_idea=idea)
        if self.story_config.selected_idea is None:
            raise ValueError("Please select an idea first.")

        print(f"\n[2/3] Writing narrative for: {self.story_config.selected_idea.title}")
        script, tokens = self._writer.generate_script(self.story_config)
        self.usage = self.usage.add(tokens=tokens)
        self.adopt_narrative(script)
        print(f"  ✅ Script length: {len(script)} characters ({tokens} tokens)")
        return script

    def adopt_narrative(self, narrative: str) -> None:
        """Start over on a new narrative: cursor 0, not finished, no scenes."""
        self.state = SegmentationState.for_narrative(narrative)

    # --- Stage 3: storyboard ---

    @property
    def progress(self) -> float:
        return script_progress(self.state)

    def generate_next_batch(self) -> List[Scene]:
        """Run one batch and commit it. Returns the new scenes ([] when already finished)."""
        if self.is_generating:
            raise RuntimeError("A storyboard batch is already in progress")
        if self.state.finished:
            return []

        start = self.state.next_scene_number
        print(f"  ⏳ Visualizing scenes {start}-{start + self.batch_size - 1}...")
        self.is_generating = True
        try:
            outcome = request_next_batch(
                self._segmenter,
                self.state,
                self.batch_size,
                self.story_config.segmentation_context(),
            )
        finally:
            self.is_generating = False

        self.state = self.state.apply(outcome)
        self.usage = self.usage.add(tokens=outcome.tokens_used)
        if outcome.short_circuited:
            print("  ✅ Remaining text exhausted; script fully visualized")
        else:
            print(f"  ✅ {len(outcome.scenes)} scenes, {self.progress:.0f}% of script processed")
        return outcome.scenes

    def run_storyboard(self, max_batches: Optional[int] = None) -> SegmentationState:
        """Request batches until the narrative is finished or max_batches is reached."""
        print("=" * 60)
        print("Visualizing script into storyboard scenes...")
        print("=" * 60)

        batches = 0
        while not self.state.finished:
            if max_batches is not None and batches >= max_batches:
                print(f"  ⚠️  Stopped after {batches} batches at {self.progress:.0f}%")
                break
            self.generate_next_batch()
            batches += 1

        print(f"\nScenes: {len(self.state.scenes)} | Tokens used: {self.usage.tokens}")
        return self.state

    def update_scene(self, scene_number: int, **changes) -> Scene:
        """In-place update of one scene (e.g. generated_image_url once an image is rendered)."""
        self.state = self.state.update_scene(scene_number, **changes)
        if "generated_image_url" in changes:
            self.usage = self.usage.add(images=1)
        return next(s for s in self.state.scenes if s.scene_number == scene_number)

    def save_storyboard(self, output_path: str) -> str:
        """Write scenes, cursor and usage as JSON; returns the path."""
        directory = os.path.dirname(output_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        data = self.state.to_dict()
        data["usage"] = {
            "tokens": self.usage.tokens,
            "images": self.usage.images,
            "audio": self.usage.audio,
        }
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        print(f"  💾 Storyboard saved to: {output_path}")
        return output_path
