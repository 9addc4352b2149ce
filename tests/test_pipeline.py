import json

import pytest

from story_automation.application.pipeline import StoryboardPipeline, request_next_batch
from story_automation.domain.errors import (
    ContractViolationError,
    ErrorCategory,
    GenerationError,
    SegmentationBatchError,
)
from story_automation.domain.models import SegmentationState, StoryConfig, ViralIdea, script_progress
from story_automation.domain.styles import ContentFormat

from conftest import SENTENCES, STORY, FakeSegmenter, FakeWriter, batch


def make_pipeline(responses, **kwargs):
    segmenter = FakeSegmenter(responses)
    pipeline = StoryboardPipeline(segmenter=segmenter, script_writer=FakeWriter(), **kwargs)
    pipeline.adopt_narrative(STORY)
    return pipeline, segmenter


def end_of(sentence_index):
    sentence = SENTENCES[sentence_index]
    return STORY.index(sentence) + len(sentence)


def test_first_batch_anchors_cursor_on_last_excerpt():
    pipeline, segmenter = make_pipeline([batch(SENTENCES[:2], has_more=True)])

    scenes = pipeline.generate_next_batch()

    assert [s.scene_number for s in scenes] == [1, 2]
    assert pipeline.state.cursor == end_of(1)
    assert pipeline.state.finished is False
    call = segmenter.calls[0]
    assert call["text_window"] == STORY
    assert call["starting_scene_number"] == 1
    assert call["batch_size"] == 5


def test_next_batch_continues_where_previous_stopped():
    pipeline, segmenter = make_pipeline([
        batch(SENTENCES[:2], has_more=True),
        batch(SENTENCES[2:4], has_more=True, start=3),
    ])

    pipeline.generate_next_batch()
    pipeline.generate_next_batch()

    second = segmenter.calls[1]
    assert second["starting_scene_number"] == 3
    assert second["text_window"] == " ".join(SENTENCES[2:])
    assert pipeline.state.cursor == end_of(3)
    assert [s.scene_number for s in pipeline.state.scenes] == [1, 2, 3, 4]


def test_full_run_covers_narrative_in_order():
    pipeline, segmenter = make_pipeline([
        batch(SENTENCES[:2], has_more=True),
        batch(SENTENCES[2:4], has_more=True, start=3),
        batch(SENTENCES[4:], has_more=False, start=5),
    ])
    cursors = []
    while not pipeline.state.finished:
        pipeline.generate_next_batch()
        cursors.append(pipeline.state.cursor)

    assert cursors == sorted(cursors)
    assert cursors[-1] == len(STORY)
    assert " ".join(s.script for s in pipeline.state.scenes) == STORY
    assert pipeline.progress == 100.0
    assert pipeline.usage.tokens == 30


def test_generator_reporting_done_finishes_and_snaps():
    pipeline, _ = make_pipeline([batch(SENTENCES[:1], has_more=False)])
    pipeline.generate_next_batch()
    assert pipeline.state.finished is True
    assert pipeline.state.cursor == len(STORY)


def test_cursor_within_tolerance_of_end_finishes():
    narrative = "The storm broke over the harbour at midnight. Hm."
    last = "The storm broke over the harbour at midnight."
    assert len(narrative) - len(last) == 4
    segmenter = FakeSegmenter([batch([last], has_more=True)])
    state = SegmentationState.for_narrative(narrative)

    outcome = request_next_batch(segmenter, state)

    assert outcome.new_finished is True
    assert outcome.new_cursor == len(narrative)


def test_exhausted_window_finishes_without_backend_call():
    narrative = STORY + "   \n"
    segmenter = FakeSegmenter()
    state = SegmentationState(narrative=narrative, cursor=len(STORY) - 3)

    for _ in range(3):
        outcome = request_next_batch(segmenter, state)
        assert outcome.new_finished is True
        assert outcome.new_cursor == len(narrative)
        assert outcome.short_circuited is True

    assert segmenter.calls == []


def test_finished_state_is_absorbing():
    pipeline, segmenter = make_pipeline([batch(SENTENCES, has_more=False)])
    pipeline.generate_next_batch()
    scenes_before = pipeline.state.scenes

    assert pipeline.generate_next_batch() == []
    assert request_next_batch(segmenter, pipeline.state).new_finished is True
    assert pipeline.state.scenes == scenes_before
    assert len(segmenter.calls) == 1


def test_zero_scenes_fails_batch_and_keeps_state():
    pipeline, _ = make_pipeline([batch(SENTENCES[:1], has_more=True), batch([], has_more=True)])
    pipeline.generate_next_batch()
    before = pipeline.state

    with pytest.raises(SegmentationBatchError) as excinfo:
        pipeline.generate_next_batch()

    assert isinstance(excinfo.value.__cause__, ContractViolationError)
    assert pipeline.state == before
    assert pipeline.is_generating is False


def test_backend_failure_keeps_state_and_batch_can_be_retried():
    pipeline, segmenter = make_pipeline([
        GenerationError("503 overloaded", ErrorCategory.SERVER, status_code=503),
        batch(SENTENCES[:2], has_more=True),
    ])

    with pytest.raises(SegmentationBatchError):
        pipeline.generate_next_batch()
    assert pipeline.state.cursor == 0
    assert pipeline.state.scenes == ()

    pipeline.generate_next_batch()
    assert segmenter.calls[0]["text_window"] == segmenter.calls[1]["text_window"]
    assert pipeline.state.cursor == end_of(1)


def test_batch_that_cannot_advance_is_rejected():
    pipeline, _ = make_pipeline([batch([""], has_more=True)])
    with pytest.raises(SegmentationBatchError) as excinfo:
        pipeline.generate_next_batch()
    assert isinstance(excinfo.value.__cause__, ContractViolationError)
    assert pipeline.state.cursor == 0


def test_paraphrased_batch_uses_length_estimate():
    paraphrase = "The keeper tallied ships nightly."
    pipeline, _ = make_pipeline([batch([paraphrase], has_more=True)])
    pipeline.generate_next_batch()
    assert pipeline.state.cursor == len(paraphrase)
    assert pipeline.state.finished is False


def test_adopting_new_narrative_resets_everything():
    pipeline, _ = make_pipeline([batch(SENTENCES[:2], has_more=True)])
    pipeline.generate_next_batch()

    pipeline.adopt_narrative("A completely different story about a quiet village.")

    assert pipeline.state.cursor == 0
    assert pipeline.state.finished is False
    assert pipeline.state.scenes == ()
    assert script_progress(pipeline.state) == 0.0


def test_generate_script_adopts_narrative_and_counts_tokens():
    writer = FakeWriter(script="Brand new narrative text for the storyboard.")
    pipeline = StoryboardPipeline(segmenter=FakeSegmenter(), script_writer=writer)
    pipeline.state = SegmentationState(narrative=STORY, cursor=40)

    pipeline.generate_script(ViralIdea("The Dark Ship", "A ship with no lights"))

    assert pipeline.state == SegmentationState.for_narrative(writer.script)
    assert writer.configs[0].selected_idea.title == "The Dark Ship"
    assert pipeline.usage.tokens == 100


def test_generate_script_requires_an_idea():
    pipeline = StoryboardPipeline(segmenter=FakeSegmenter(), script_writer=FakeWriter())
    with pytest.raises(ValueError):
        pipeline.generate_script()


def test_generate_ideas_counts_tokens():
    pipeline = StoryboardPipeline(segmenter=FakeSegmenter(), script_writer=FakeWriter())
    ideas = pipeline.generate_ideas()
    assert ideas[0].title == "The Dark Ship"
    assert pipeline.usage.tokens == 7


def test_only_one_batch_in_flight():
    pipeline, segmenter = make_pipeline([batch(SENTENCES[:1], has_more=True)])
    pipeline.is_generating = True
    with pytest.raises(RuntimeError):
        pipeline.generate_next_batch()
    assert segmenter.calls == []


def test_story_config_is_sent_as_context():
    story_config = StoryConfig(
        format=ContentFormat.LONG,
        character_description="A tall woman in a yellow raincoat",
        art_style_id="cinematic",
    )
    pipeline, segmenter = make_pipeline(
        [batch(SENTENCES[:1], has_more=True)], story_config=story_config, batch_size=3
    )
    pipeline.generate_next_batch()

    call = segmenter.calls[0]
    assert call["batch_size"] == 3
    assert call["context"].style_id == "cinematic"
    assert call["context"].format is ContentFormat.LONG
    assert call["context"].character_description == "A tall woman in a yellow raincoat"


def test_run_storyboard_stops_at_max_batches():
    pipeline, segmenter = make_pipeline([
        batch(SENTENCES[:1], has_more=True),
        batch(SENTENCES[1:2], has_more=True, start=2),
    ])
    state = pipeline.run_storyboard(max_batches=2)
    assert len(segmenter.calls) == 2
    assert state.finished is False
    assert state.cursor == end_of(1)


def test_run_storyboard_until_finished():
    pipeline, _ = make_pipeline([
        batch(SENTENCES[:3], has_more=True),
        batch(SENTENCES[3:], has_more=False, start=4),
    ])
    state = pipeline.run_storyboard()
    assert state.finished is True
    assert len(state.scenes) == 5


def test_update_scene_and_save_storyboard(tmp_path):
    pipeline, _ = make_pipeline([batch(SENTENCES[:2], has_more=True)])
    pipeline.generate_next_batch()

    scene = pipeline.update_scene(2, generated_image_url="images/scene_2.png")
    assert scene.scene_number == 2
    assert scene.script == SENTENCES[1]
    assert pipeline.usage.images == 1

    path = pipeline.save_storyboard(str(tmp_path / "out" / "storyboard.json"))
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    assert data["processedCharCount"] == end_of(1)
    assert data["isScriptFinished"] is False
    assert [s["sceneNumber"] for s in data["scenes"]] == [1, 2]
    assert data["scenes"][1]["generatedImageUrl"] == "images/scene_2.png"
    assert data["usage"]["tokens"] == 10
