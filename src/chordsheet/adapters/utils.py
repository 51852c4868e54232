import re

_NEWLINE_RE = re.compile(r"\r\n?")
_BLANK_RUN_RE = re.compile(r"\n{3,}")


def clean_song_content(text: str) -> str:
    """Normalize line endings and collapse runs of blank lines.

    Leading and trailing blank lines are dropped.  Indentation is kept,
    chord rows depend on it.
    """
    lines = [line.rstrip() for line in _NEWLINE_RE.sub("\n", text).split("\n")]
    return _BLANK_RUN_RE.sub("\n\n", "\n".join(lines)).strip("\n")
