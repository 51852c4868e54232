import copy

from chordsheet.models import ChordPosition, LineKind
from chordsheet.parser import parse_song, parse_structured_song
from chordsheet.transpose import (
    transpose_chord_row,
    transpose_parsed_song,
    transpose_structured_song,
    transpose_text,
)

SONG = """\
[Verse 1]
C       G
Hello world
Am  F
"""


def test_transposes_chords_and_keeps_positions():
    song = parse_structured_song(SONG)
    result = transpose_structured_song(song, 2)
    line = result.sections[0].lines[0]
    assert line.chords == [ChordPosition("D", 0), ChordPosition("A", 8)]
    assert line.lyrics == "Hello world"


def test_transposes_chords_only_rows_in_place():
    result = transpose_structured_song(parse_structured_song(SONG), 2)
    line = result.sections[0].lines[1]
    assert line.kind == LineKind.CHORDS_ONLY
    assert line.chord_line == "Bm  G"


def test_input_is_not_mutated():
    song = parse_structured_song(SONG)
    before = copy.deepcopy(song)
    transpose_structured_song(song, 5)
    assert song == before


def test_zero_returns_same_song():
    song = parse_structured_song(SONG)
    assert transpose_structured_song(song, 0) is song


def test_octave_keeps_chord_names():
    song = parse_structured_song(SONG)
    assert transpose_structured_song(song, 12) == song


def test_structure_is_preserved():
    song = parse_structured_song(SONG)
    result = transpose_structured_song(song, -3)
    assert [s.name for s in result.sections] == [s.name for s in song.sections]
    assert [len(s.lines) for s in result.sections] == [len(s.lines) for s in song.sections]
    assert [line.kind for line in result.sections[0].lines] == [line.kind for line in song.sections[0].lines]


def test_transpose_parsed_song_updates_summary_and_key():
    parsed = parse_song(SONG, key="C")
    result = transpose_parsed_song(parsed, 2)
    assert result.key == "D"
    assert result.all_chords == ["D", "A", "Bm", "G"]
    assert result.first_chord == "D"
    assert result.last_chord == "G"
    assert parsed.key == "C"
    assert parsed.all_chords == ["C", "G", "Am", "F"]


def test_transpose_chord_row_keeps_separators():
    assert transpose_chord_row("| C  /  G7 |", 2) == "| D  /  A7 |"


def test_transpose_text_only_touches_chord_rows():
    text = "[Verse]\nC G\nAnd Go home\n"
    assert transpose_text(text, 2) == "[Verse]\nD A\nAnd Go home\n"
