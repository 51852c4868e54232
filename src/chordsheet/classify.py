"""Chord-row vs lyric-row classification.

:func:`is_chord_line` applies the full rule set, in order:

  1. ``[Section Name]`` lines are never chord lines.
  2. Lines opening with a common French/English function word are lyrics.
  3. Bars (``|``) and surrounding whitespace are stripped and chord-shaped
     tokens are extracted.
  4. Nothing left once chords, whitespace and punctuation are removed → chords.
  5. Chord characters make up at least 70% of the non-space text → chords.
  6. The line matches a canonical 2–6 chord pattern → chords.

:func:`is_pure_chord_line` applies rules 3–6 only.  Both are heuristics:
a one-word lyric such as ``Am`` or ``Dad`` can be misclassified.
"""

import re

from .chords import CHORD_TOKEN_RE

SECTION_HEADER_RE = re.compile(r"^\[([^\]]*)\]$")

# Words that open lyric lines but never chord rows.
FUNCTION_WORDS = (
    "je", "tu", "il", "elle", "on", "nous", "vous", "ils", "elles",
    "le", "la", "les", "un", "une", "des", "du", "de", "et", "ou",
    "mais", "donc", "car", "ni", "or",
    "i", "you", "he", "she", "we", "they", "the", "a", "an", "and",
    "but", "so", "for", "nor", "yet",
)
_FUNCTION_WORD_RE = re.compile(
    r"^(?:" + "|".join(FUNCTION_WORDS) + r")\b", re.IGNORECASE
)

_FILLER_RE = re.compile(r"[\s\-(),|]")
_WHOLE_CHORD_RE = re.compile(r"^(?:" + CHORD_TOKEN_RE.pattern + r")$")

CHORD_DENSITY_THRESHOLD = 0.7

_COMMON_PATTERNS = [
    re.compile(r"^[A-G][#b]?m?\s+[A-G][#b]?m?\s*$"),  # two spaced chords
    re.compile(r"^[A-G][#b]?m?\s+[A-G][#b]?m?\s+[A-G][#b]?m?\s*$"),  # three spaced chords
    re.compile(r"^(?:[A-G][#b]?m?){2,6}$"),  # concatenated: GAm, DEm
]


def is_section_header(line: str) -> bool:
    return bool(SECTION_HEADER_RE.match(line.strip()))


def _opens_with_function_word(stripped: str) -> bool:
    """True if the line opens with a function word, unless its first token is a whole chord (``A  D  E``)."""
    first = stripped.split()[0]
    if _WHOLE_CHORD_RE.match(first):
        return False
    return bool(_FUNCTION_WORD_RE.match(stripped))


def is_pure_chord_line(line: str) -> bool:
    """Return True when *line* looks like a row of chords."""
    clean = line.strip().strip("|").strip()
    if not clean:
        return False

    tokens = CHORD_TOKEN_RE.findall(clean)
    if not tokens:
        return False

    remainder = _FILLER_RE.sub("", CHORD_TOKEN_RE.sub("", clean))
    if not remainder:
        return True

    non_space = len(re.sub(r"\s", "", clean))
    density = sum(len(t) for t in tokens) / non_space
    if density >= CHORD_DENSITY_THRESHOLD:
        return True

    return any(p.match(clean) for p in _COMMON_PATTERNS)


def is_chord_line(line: str) -> bool:
    """Return True when *line* is a chord row rather than lyrics or a header."""
    stripped = line.strip()
    if not stripped:
        return False
    if SECTION_HEADER_RE.match(stripped):
        return False
    if _opens_with_function_word(stripped):
        return False
    return is_pure_chord_line(stripped)
