"""
Text cursor tracking: which part of the narrative still needs segmenting.

The cursor is a character offset into the narrative. Everything before it has
been turned into scenes; the window handed to the generator is the trimmed
remainder.
"""

from typing import Tuple

from story_automation import config
from story_automation.domain.models import BatchOutcome


def unconsumed_window(narrative: str, cursor: int) -> Tuple[str, int]:
    """
    Return (trimmed remainder, offset of its first character in narrative).

    The offset accounts for leading whitespace dropped by the trim, so an index
    found inside the window maps straight back onto the narrative.
    """
    if cursor < 0 or cursor > len(narrative):
        raise ValueError(f"Cursor {cursor} outside narrative of length {len(narrative)}")
    rest = narrative[cursor:]
    stripped_left = rest.lstrip()
    return stripped_left.rstrip(), cursor + (len(rest) - len(stripped_left))


def unconsumed_text(narrative: str, cursor: int) -> str:
    return unconsumed_window(narrative, cursor)[0]


def is_exhausted(unconsumed: str) -> bool:
    """Too little left to be worth a generator call (whitespace or a stray word)."""
    return len(unconsumed) < config.MIN_UNCONSUMED_CHARS


def finished_outcome(narrative: str) -> BatchOutcome:
    """Finish without contacting the backend; cursor snaps to the end so progress reads 100%."""
    return BatchOutcome(
        scenes=[],
        new_cursor=len(narrative),
        new_finished=True,
        short_circuited=True,
    )
