import pytest

from story_automation.application.cursor import (
    finished_outcome,
    is_exhausted,
    unconsumed_text,
    unconsumed_window,
)


def test_unconsumed_text_slices_and_trims():
    assert unconsumed_text("Hello there.   General Kenobi.  ", 12) == "General Kenobi."


def test_unconsumed_window_offset_skips_leading_whitespace():
    narrative = "First part.\n\n   Second part here."
    window, start = unconsumed_window(narrative, 11)
    assert window == "Second part here."
    assert narrative[start:start + len(window)] == window


def test_unconsumed_window_at_start_and_end():
    assert unconsumed_window("abc def", 0) == ("abc def", 0)
    assert unconsumed_window("abc def", 7) == ("", 7)


@pytest.mark.parametrize("cursor", [-1, 8])
def test_cursor_outside_narrative_rejected(cursor):
    with pytest.raises(ValueError):
        unconsumed_window("abc def", cursor)


def test_exhaustion_threshold():
    assert is_exhausted("")
    assert is_exhausted("The.")
    assert not is_exhausted("The e")


def test_finished_outcome_snaps_to_length():
    outcome = finished_outcome("Once upon a time.   ")
    assert outcome.new_cursor == 20
    assert outcome.new_finished is True
    assert outcome.scenes == []
    assert outcome.short_circuited is True
