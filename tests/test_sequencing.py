import copy
import random

import pytest

from chordsheet.models import SequenceOptions, SequenceResult, SongRecord
from chordsheet.sequencing import (
    calculate_chord_compatibility,
    calculate_key_adjustment,
    calculate_key_compatibility,
    calculate_transition_score,
    extract_key_from_title,
    generate_medley_sequence,
    generate_playlist_sequence,
    get_random_songs,
    get_song_key,
    get_songs_from_folders,
    most_common_key,
    normalize_key,
    select_candidates,
)


def _song(id, key=None, first=None, last=None, title=None, **kwargs) -> SongRecord:
    return SongRecord(
        id=id,
        title=title or f"Song {id}",
        key=key,
        first_chord=first,
        last_chord=last,
        **kwargs,
    )


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "chord1,chord2,expected",
    [
        ("C", "C", 1.0),
        ("C", "C#", 0.8),
        ("C", "D", 0.7),
        ("C", "A", 0.6),
        ("C", "E", 0.5),
        ("C", "F", 0.4),
        ("C", "F#", 0.3),
        ("Am", "C", 0.6),
        ("B", "C", 0.8),
    ],
)
def test_chord_compatibility(chord1, chord2, expected):
    assert calculate_chord_compatibility(chord1, chord2) == expected


def test_chord_compatibility_unparseable():
    assert calculate_chord_compatibility("N.C.", "C") == 0.0
    assert calculate_chord_compatibility("C", None) == 0.0


@pytest.mark.parametrize(
    "key1,key2,expected",
    [
        ("C", "C", 1.0),
        ("C", "Db", 0.9),
        ("C", "D", 0.7),
        ("C", "G", 0.8),
        ("C", "F", 0.8),
        ("C", "F#", 0.3),
        ("Am", "C", 0.6),
    ],
)
def test_key_compatibility(key1, key2, expected):
    assert calculate_key_compatibility(key1, key2) == expected


def test_key_compatibility_missing_is_neutral():
    assert calculate_key_compatibility("C", None) == 0.5
    assert calculate_key_compatibility("Unknown", "C") == 0.5


def test_compatibility_is_symmetric():
    keys = ["C", "C#", "D", "Eb", "E", "F", "F#", "G", "Ab", "A", "Bb", "B"]
    for a in keys:
        for b in keys:
            assert calculate_key_compatibility(a, b) == calculate_key_compatibility(b, a)
            assert calculate_chord_compatibility(a, b) == calculate_chord_compatibility(b, a)


def test_transition_score():
    a = _song("a", key="C", last="G")
    b = _song("b", key="G", first="C")
    assert calculate_transition_score(a, b) == pytest.approx(0.4 + 0.3 * 0.8)


def test_transition_score_capped():
    a = _song("a", key="C", last="C")
    b = _song("b", key="C", first="C")
    assert calculate_transition_score(a, b) == 1.0


def test_transition_score_missing_chord_is_neutral():
    assert calculate_transition_score(_song("a", last="C"), _song("b")) == 0.5
    assert calculate_transition_score(_song("a"), _song("b", first="C")) == 0.5


# ---------------------------------------------------------------------------
# Keys
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("C", "C"),
        (" G ", "G"),
        ("Bb major", "A#"),
        ("a minor", "Am"),
        ("Amin", "Am"),
        ("Ebm", "D#m"),
        ("Cmaj", "C"),
        ("D Major", "D"),
        ("whatever", "whatever"),
    ],
)
def test_normalize_key(raw, expected):
    assert normalize_key(raw) == expected


def test_extract_key_from_title():
    assert extract_key_from_title("Wonderwall (Am)") == "Am"
    assert extract_key_from_title("Hallelujah (live) (Bb)") == "A#"
    assert extract_key_from_title("No key here") is None
    assert extract_key_from_title(None) is None


def test_get_song_key():
    assert get_song_key(_song("1", key="Eb")) == "D#"
    assert get_song_key(_song("2", title="Let It Be (C)")) == "C"
    assert get_song_key(_song("3", key="  ", title="Plain")) == "Unknown"


@pytest.mark.parametrize(
    "song_key,target_key,expected",
    [
        ("C", "C", 0),
        ("C", "D", 2),
        ("C", "G", -5),
        ("G", "C", 5),
        ("C", "F#", 6),
        ("A", "Am", 0),
        ("Unknown", "C", 0),
        (None, "C", 0),
    ],
)
def test_key_adjustment(song_key, target_key, expected):
    assert calculate_key_adjustment(song_key, target_key) == expected


def test_key_adjustment_range():
    keys = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]
    for a in keys:
        for b in keys:
            assert -6 <= calculate_key_adjustment(a, b) <= 6


def test_most_common_key_skips_unknown():
    assert most_common_key(["Unknown", "Unknown", "C"]) == "C"
    assert most_common_key(["Unknown", "Unknown"]) is None
    assert most_common_key([]) is None


# ---------------------------------------------------------------------------
# Medley
# ---------------------------------------------------------------------------


def test_medley_groups_most_common_key():
    songs = [_song("1", key="C"), _song("2", key="G"), _song("3", key="C"), _song("4")]
    result = generate_medley_sequence(songs)
    assert [s.song.id for s in result.songs] == ["1", "3"]
    assert result.key_progression == ["C", "C"]
    assert result.total_score == 1.0
    assert result.estimated_duration == 7.0
    assert all(s.key_adjustment == 0 for s in result.songs)


def test_medley_with_target_key():
    songs = [_song("1", key="C"), _song("2", key="G"), _song("3", key="C")]
    result = generate_medley_sequence(songs, SequenceOptions(target_key="g"))
    assert [s.song.id for s in result.songs] == ["2"]


def test_medley_without_known_keys_is_empty():
    result = generate_medley_sequence([_song("1"), _song("2")])
    assert result == SequenceResult()


def test_medley_empty_input():
    assert generate_medley_sequence([]) == SequenceResult()


def test_medley_does_not_mutate_records():
    songs = [_song("1", key="Eb", first="Eb", last="Bb"), _song("2", key="D#")]
    before = copy.deepcopy(songs)
    generate_medley_sequence(songs)
    assert songs == before


# ---------------------------------------------------------------------------
# Playlist
# ---------------------------------------------------------------------------


def test_playlist_keeps_every_song():
    songs = [_song("1", key="C"), _song("2", key="G"), _song("3"), _song("4", key="C")]
    result = generate_playlist_sequence(songs)
    assert [s.song.id for s in result.songs] == ["1", "2", "3", "4"]
    assert result.key_progression == ["C"] * 4
    assert result.estimated_duration == 14.0
    assert 0.0 <= result.total_score <= 1.0


def test_playlist_entry_scores():
    songs = [_song("1", key="C"), _song("2", key="G"), _song("3")]
    first, second, third = generate_playlist_sequence(songs, SequenceOptions(target_key="C")).songs
    assert first.transition_score == 1.0
    assert first.compatibility_score == 1.0
    assert second.key_adjustment == 5
    assert second.compatibility_score == 0.8
    assert third.original_key == "Unknown"
    assert third.key_adjustment == 0
    assert third.compatibility_score == 0.5


def test_playlist_transitions_use_target_keys():
    songs = [_song("1", key="G", first="G", last="G"), _song("2", key="C", first="C", last="C")]
    before = copy.deepcopy(songs)
    result = generate_playlist_sequence(songs, SequenceOptions(target_key="C"))
    # G into C is a fourth apart (0.4); both songs are played in C (key bonus 0.3)
    assert result.songs[1].transition_score == pytest.approx(0.7)
    assert songs == before


def test_playlist_total_score():
    songs = [_song("1", key="C"), _song("2", key="C")]
    result = generate_playlist_sequence(songs)
    # compat 1.0 each, transitions 1.0 (first) and 0.5 (no chords)
    assert result.total_score == pytest.approx((1.0 + 1.0 + 1.0 + 0.5) / 4)


def test_playlist_genre_filter():
    songs = [_song("1", key="C", genre="rock"), _song("2", key="G", genre="folk")]
    result = generate_playlist_sequence(songs, SequenceOptions(genre="folk"))
    assert [s.song.id for s in result.songs] == ["2"]
    assert result.key_progression == ["G"]


def test_playlist_defaults_to_c_without_keys():
    result = generate_playlist_sequence([_song("1"), _song("2")])
    assert result.key_progression == ["C", "C"]


def test_playlist_empty_after_filter():
    result = generate_playlist_sequence([_song("1", genre="rock")], SequenceOptions(genre="jazz"))
    assert result == SequenceResult()


def test_playlist_most_common_key_tie_goes_to_first():
    result = generate_playlist_sequence([_song("1", key="A"), _song("2", key="E")])
    assert result.key_progression == ["A", "A"]


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------


def test_songs_from_folders():
    songs = [_song("1", folder_id="f1"), _song("2", folder_id="f2"), _song("3")]
    assert [s.id for s in get_songs_from_folders(songs, ["f1"])] == ["1"]
    assert [s.id for s in get_songs_from_folders(songs, ["unorganized"])] == ["3"]
    assert [s.id for s in get_songs_from_folders(songs, [])] == ["1", "2", "3"]


def test_random_songs_seeded():
    songs = [_song(str(i)) for i in range(10)]
    picked = get_random_songs(songs, 4, random.Random(7))
    assert len(picked) == 4
    assert len({s.id for s in picked}) == 4
    assert picked == get_random_songs(songs, 4, random.Random(7))
    assert [s.id for s in songs] == [str(i) for i in range(10)]


def test_select_candidates_by_song_id():
    songs = [_song("1", folder_id="f1"), _song("2", folder_id="f1"), _song("3", folder_id="f2")]
    options = SequenceOptions(selected_folders=["f1"], selected_songs=["2", "3"])
    assert [s.id for s in select_candidates(songs, options)] == ["2"]


def test_select_candidates_random():
    songs = [_song(str(i)) for i in range(10)]
    options = SequenceOptions(use_random_selection=True, max_songs=3)
    picked = select_candidates(songs, options, random.Random(1))
    assert len(picked) == 3
    assert all(s in songs for s in picked)


def test_select_candidates_max_songs_only_applies_to_random():
    songs = [_song(str(i)) for i in range(5)]
    assert len(select_candidates(songs, SequenceOptions(max_songs=2))) == 5
