"""Transposition of structured songs and raw chord sheets.

Transposing never moves a chord: ``chord_over_lyrics`` offsets point into
the lyrics, which do not change, and ``chords_only`` rows keep every
character that is not a chord token.  Inputs are never mutated.
"""

import copy

from .chords import CHORD_TOKEN_RE, normalize_semitones, transpose_chord
from .classify import is_chord_line
from .models import LineKind, ParsedSong, StructuredSong
from .parser import summarize


def transpose_chord_row(row: str, semitones: int) -> str:
    """Transpose each chord token of *row*, keeping the text between them."""
    return CHORD_TOKEN_RE.sub(lambda m: transpose_chord(m.group(), semitones), row)


def transpose_structured_song(song: StructuredSong, semitones: int) -> StructuredSong:
    """Return a transposed deep copy of *song* (or *song* itself for 0)."""
    if semitones == 0:
        return song

    transposed = copy.deepcopy(song)
    for section in transposed.sections:
        for line in section.lines:
            if line.kind == LineKind.CHORD_OVER_LYRICS:
                for cp in line.chords:
                    cp.chord = transpose_chord(cp.chord, semitones)
            elif line.kind == LineKind.CHORDS_ONLY:
                line.chord_line = transpose_chord_row(line.chord_line, semitones)
    return transposed


def transpose_parsed_song(parsed: ParsedSong, semitones: int) -> ParsedSong:
    """Transpose a parsed song together with its key and chord summary."""
    if normalize_semitones(semitones) == 0:
        return parsed
    result = copy.copy(parsed)
    result.song = transpose_structured_song(parsed.song, semitones)
    if parsed.key:
        result.key = transpose_chord(parsed.key, semitones)
    return summarize(result)


def transpose_text(text: str, semitones: int) -> str:
    """Transpose the chord rows of a raw chord sheet, leaving lyrics alone."""
    if semitones == 0:
        return text
    return "\n".join(
        transpose_chord_row(line, semitones) if is_chord_line(line) else line
        for line in text.split("\n")
    )
