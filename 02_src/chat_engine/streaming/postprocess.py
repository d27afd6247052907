"""Optional post-processing of a completed response.

Post-processors receive the final text and return notices to append.
They never truncate the text and never trigger a retry.
"""

from typing import Callable

PostProcessor = Callable[[str], "str | None"]

INCOMPLETE_NOTICE = "⚠️ The response may be incomplete."

_TERMINAL_CHARS = ".!?…:;)]}\"'`*>|"
MIN_COMPLETE_LENGTH = 20


def flag_possibly_incomplete(text: str) -> str | None:
    """Heuristic: short answers or answers ending mid-sentence."""
    stripped = text.rstrip()
    if not stripped:
        return None
    if stripped.endswith("```"):
        return None
    if len(stripped) < MIN_COMPLETE_LENGTH or stripped[-1] not in _TERMINAL_CHARS:
        return INCOMPLETE_NOTICE
    return None
