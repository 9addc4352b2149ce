"""
Consumption reconciliation and the completion decision.

The generator is asked for verbatim excerpts but often paraphrases them, so
this is best-effort: anchor on the last excerpt when it appears verbatim in
the window, otherwise estimate progress from the excerpt lengths. Drift from
the estimate is bounded by the end-of-text tolerance snap.
"""

from typing import Sequence, Tuple

from story_automation import config
from story_automation.domain.errors import ContractViolationError
from story_automation.domain.models import Scene


def reconcile_cursor(window: str, window_start: int, scenes: Sequence[Scene]) -> int:
    """
    Work out where in the narrative this batch stopped.

    `window` is the text sent to the generator and `window_start` its offset in
    the narrative. Returns the new absolute cursor (not yet clamped).
    """
    if not scenes:
        raise ContractViolationError("Generator returned zero scenes for a non-empty window")

    consumed_approx = " ".join(s.script for s in scenes)
    last_excerpt = scenes[-1].script

    # rfind("") would match at the very end; an empty excerpt anchors nothing.
    index = window.rfind(last_excerpt) if last_excerpt else -1
    if index != -1:
        return window_start + index + len(last_excerpt)

    print(f"  ⚠️  Last excerpt not found verbatim; estimating progress "
          f"from {len(consumed_approx)} consumed characters")
    return window_start + len(consumed_approx)


def decide_completion(
    has_more_scenes: bool,
    new_cursor: int,
    narrative_length: int,
    tolerance: int = config.END_TOLERANCE_CHARS,
) -> Tuple[int, bool]:
    """
    Finished when the generator says nothing remains OR the cursor is within
    `tolerance` characters of the end. A finished cursor is exactly the length.
    """
    if not has_more_scenes or new_cursor >= narrative_length - tolerance:
        return narrative_length, True
    return new_cursor, False
