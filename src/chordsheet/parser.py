"""Raw chord-over-lyrics text → :class:`~chordsheet.models.StructuredSong`.

Algorithm
---------
1. Walk the lines with a cursor.  ``[Header]`` lines close the current
   section and open a new one whose type is inferred from its name.
2. Content seen before any header goes to a lazily created ``Content``
   section.  ``Capo N`` and ``Key: X`` banners are kept as ``lyrics_only``
   text.
3. A pure chord row followed by a lyric row (not a chord row, not a header)
   becomes one ``chord_over_lyrics`` line and consumes both rows.  A chord
   row without such a partner becomes ``chords_only``.  Everything else is
   ``lyrics_only``.
4. Blank lines inside a section are kept as empty lyric lines; leading and
   trailing blanks of a section are dropped.

Chord offsets are columns of the chord row shifted by the lyric row's
indentation, so rows written with matching monospace alignment map 1:1.
The parser never raises: text it cannot read as chords stays lyrics.
"""

import logging
import re

from .chords import CHORD_TOKEN_RE
from .classify import SECTION_HEADER_RE, is_chord_line, is_pure_chord_line, is_section_header
from .models import ChordPosition, Line, LineKind, ParsedSong, Section, SectionType, StructuredSong

logger = logging.getLogger(__name__)

DEFAULT_SECTION_NAME = "Content"

CAPO_RE = re.compile(r"^(?:\U0001F3B8\s*)?capo\s*:?\s*(\d+)", re.IGNORECASE)
KEY_RE = re.compile(r"^(?i:key)\s*:\s*([A-G][#b]?m?)\s*$")

# Checked in order; first keyword found in the lowercased name wins.
_SECTION_KEYWORDS = [
    ("intro", SectionType.INTRO),
    ("verse", SectionType.VERSE),
    ("chorus", SectionType.CHORUS),
    ("refrain", SectionType.CHORUS),
    ("bridge", SectionType.BRIDGE),
    ("outro", SectionType.OUTRO),
]


def section_type(name: str) -> SectionType:
    """Infer the section type from a free section label (default verse)."""
    lowered = name.lower()
    for keyword, kind in _SECTION_KEYWORDS:
        if keyword in lowered:
            return kind
    return SectionType.VERSE


def chord_positions(chord_row: str, lyric_row: str) -> list[ChordPosition]:
    """Map every chord token of *chord_row* onto the trimmed *lyric_row*.

    Offsets are shifted left by the lyric row's indentation and clamped to
    ``[0, len(lyric_row.strip())]``.  Source order is kept, so positions are
    non-decreasing.
    """
    trimmed = lyric_row.strip()
    indent = len(lyric_row) - len(lyric_row.lstrip()) if trimmed else 0
    max_pos = len(trimmed)
    return [
        ChordPosition(chord=m.group(), position=min(max(m.start() - indent, 0), max_pos))
        for m in CHORD_TOKEN_RE.finditer(chord_row)
    ]


def _flush(sections: list[Section], section: Section | None) -> None:
    if section is None:
        return
    while section.lines and section.lines[-1].kind == LineKind.LYRICS_ONLY and not section.lines[-1].lyrics:
        section.lines.pop()
    if section.lines:
        sections.append(section)


def _takes_lyrics(next_line: str | None) -> bool:
    if next_line is None or not next_line.strip():
        return False
    return not is_chord_line(next_line) and not is_section_header(next_line)


def parse_structured_song(content: str) -> StructuredSong:
    """Parse raw chord sheet text into sections and lines."""
    lines = content.splitlines()
    sections: list[Section] = []
    current: Section | None = None

    i = 0
    while i < len(lines):
        raw = lines[i]
        stripped = raw.strip()

        header = SECTION_HEADER_RE.match(stripped)
        if header:
            _flush(sections, current)
            name = header.group(1).strip()
            current = Section(name=name, type=section_type(name))
            i += 1
            continue

        if not stripped:
            if current is not None and current.lines:
                current.lines.append(Line(kind=LineKind.LYRICS_ONLY, lyrics=""))
            i += 1
            continue

        if current is None:
            current = Section(name=DEFAULT_SECTION_NAME)

        if CAPO_RE.match(stripped) or KEY_RE.match(stripped):
            current.lines.append(Line(kind=LineKind.LYRICS_ONLY, lyrics=stripped))
            i += 1
            continue

        if is_pure_chord_line(stripped):
            next_line = lines[i + 1] if i + 1 < len(lines) else None
            if _takes_lyrics(next_line):
                current.lines.append(
                    Line(
                        kind=LineKind.CHORD_OVER_LYRICS,
                        lyrics=next_line.strip(),
                        chords=chord_positions(raw, next_line),
                    )
                )
                i += 2
            else:
                current.lines.append(Line(kind=LineKind.CHORDS_ONLY, chord_line=stripped))
                i += 1
            continue

        current.lines.append(Line(kind=LineKind.LYRICS_ONLY, lyrics=stripped))
        i += 1

    _flush(sections, current)
    return StructuredSong(sections=sections)


def chord_progression(song: StructuredSong) -> list[str]:
    """Return every chord occurrence of *song* in document order."""
    progression: list[str] = []
    for section in song.sections:
        for line in section.lines:
            if line.kind == LineKind.CHORD_OVER_LYRICS:
                progression.extend(cp.chord for cp in line.chords)
            elif line.kind == LineKind.CHORDS_ONLY:
                progression.extend(CHORD_TOKEN_RE.findall(line.chord_line))
    return progression


def summarize(parsed: ParsedSong) -> ParsedSong:
    """Fill the chord summary fields of *parsed* from its structure."""
    progression = chord_progression(parsed.song)
    parsed.chord_progression = progression
    parsed.all_chords = list(dict.fromkeys(progression))
    parsed.first_chord = progression[0] if progression else None
    parsed.last_chord = progression[-1] if progression else None
    return parsed


def extract_capo(content: str) -> int | None:
    for line in content.splitlines():
        m = CAPO_RE.match(line.strip())
        if m:
            return int(m.group(1))
    return None


def extract_key(content: str) -> str | None:
    for line in content.splitlines():
        m = KEY_RE.match(line.strip())
        if m:
            return m.group(1)
    return None


def parse_song(
    content: str,
    title: str = "",
    author: str = "",
    key: str | None = None,
    capo: int | None = None,
) -> ParsedSong:
    """Parse *content* and derive first/last chord, progression and vocabulary.

    *key* and *capo* are hints from the song source; when either is missing
    it is read from a ``Key: X`` or ``Capo N`` banner in the text.
    """
    song = parse_structured_song(content)
    if capo is None:
        capo = extract_capo(content)
    if not key:
        key = extract_key(content)
    parsed = summarize(ParsedSong(song=song, title=title, author=author, key=key or None, capo=capo))
    logger.debug(
        "Parsed %r: %d sections, %d chord occurrences",
        title,
        len(song.sections),
        len(parsed.chord_progression),
    )
    return parsed
