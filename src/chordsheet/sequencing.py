"""Key-compatibility scoring and medley/playlist sequencing.

Scores are heuristics over the chromatic distance between roots (the
shortest way round the 12-tone circle), not harmonic analysis:

+----------+-----------------+---------------+
| Distance | Chord → chord   | Key ↔ key     |
+==========+=================+===============+
| 0        | 1.0             | 1.0           |
+----------+-----------------+---------------+
| 1        | 0.8             | 0.9           |
+----------+-----------------+---------------+
| 2        | 0.7             | 0.7           |
+----------+-----------------+---------------+
| 3        | 0.6             | 0.6           |
+----------+-----------------+---------------+
| 4        | 0.5             | 0.5           |
+----------+-----------------+---------------+
| 5        | 0.4             | 0.8           |
+----------+-----------------+---------------+
| 6        | 0.3             | 0.3           |
+----------+-----------------+---------------+

Two generation policies exist side by side.  A *medley* keeps only the songs
already in one grouping key.  A *playlist* keeps every song and computes the
shift that takes each one to a shared target key.  Neither mutates the song
records it is given.
"""

import dataclasses
import logging
import random
import re
from collections import Counter

from . import config
from .chords import normalize_note, note_index, parse_chord
from .models import SequencedSong, SequenceOptions, SequenceResult, SongRecord

logger = logging.getLogger(__name__)

_CHORD_STEP_SCORES = {0: 1.0, 1: 0.8, 2: 0.7, 3: 0.6, 4: 0.5, 5: 0.4, 6: 0.3}
_KEY_STEP_SCORES = {0: 1.0, 1: 0.9, 2: 0.7, 3: 0.6, 4: 0.5, 5: 0.8, 6: 0.3}

TRANSITION_KEY_WEIGHT = 0.3

_KEY_RE = re.compile(r"^([A-Ga-g][#b]?)(m)?$")
_TITLE_KEY_RE = re.compile(r"\(([^)]+)\)")
_DETECTED_KEY_RE = re.compile(r"^[A-G]#?m?$")


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------


def chromatic_distance(index1: int, index2: int) -> int:
    diff = abs(index2 - index1) % 12
    return min(diff, 12 - diff)


def _root_index(text: str | None) -> int | None:
    parsed = parse_chord(text)
    if parsed is None:
        return None
    return note_index(parsed.root)


def calculate_chord_compatibility(chord1: str | None, chord2: str | None) -> float:
    """Score how smoothly *chord1* leads into *chord2* (0 if unparseable)."""
    index1, index2 = _root_index(chord1), _root_index(chord2)
    if index1 is None or index2 is None:
        return 0.0
    return _CHORD_STEP_SCORES.get(chromatic_distance(index1, index2), 0.2)


def calculate_key_compatibility(key1: str | None, key2: str | None) -> float:
    """Score how related two keys are (neutral when either is unknown)."""
    index1, index2 = _root_index(key1), _root_index(key2)
    if index1 is None or index2 is None:
        return config.NEUTRAL_SCORE
    return _KEY_STEP_SCORES.get(chromatic_distance(index1, index2), 0.4)


def calculate_transition_score(song_a: SongRecord, song_b: SongRecord) -> float:
    """Score playing *song_b* right after *song_a*.

    Last chord of A into first chord of B, plus a weighted key bonus, capped
    at 1.0.  Neutral when either chord is missing.
    """
    if not song_a.last_chord or not song_b.first_chord:
        return config.NEUTRAL_SCORE
    chord_score = calculate_chord_compatibility(song_a.last_chord, song_b.first_chord)
    key_score = calculate_key_compatibility(song_a.key, song_b.key)
    return min(1.0, chord_score + TRANSITION_KEY_WEIGHT * key_score)


# ---------------------------------------------------------------------------
# Keys
# ---------------------------------------------------------------------------


def normalize_key(key: str) -> str:
    """Fold a free-text key into ``<root>[m]`` with a sharp root.

    ``"Bb major"`` → ``A#``, ``"a minor"`` → ``Am``, ``"Ebm"`` → ``D#m``.
    Text that is not a key comes back stripped but otherwise unchanged.
    """
    compact = re.sub(r"\s+", "", key)
    compact = re.sub(r"major|maj", "", compact, flags=re.IGNORECASE)
    compact = re.sub(r"minor|min", "m", compact, flags=re.IGNORECASE)
    m = _KEY_RE.match(compact)
    if not m:
        return key.strip()
    root = normalize_note(m.group(1)[0].upper() + m.group(1)[1:])
    return root + ("m" if m.group(2) else "")


def extract_key_from_title(title: str | None) -> str | None:
    """Return the key written in parentheses in a title, e.g. ``Song (Am)``."""
    if not title:
        return None
    for token in _TITLE_KEY_RE.findall(title):
        candidate = normalize_key(token.strip())
        if _DETECTED_KEY_RE.match(candidate):
            return candidate
    return None


def get_song_key(song: SongRecord) -> str:
    """The declared key, else a key from the title, else ``Unknown``."""
    declared = (song.key or "").strip()
    if declared:
        return normalize_key(declared)
    return extract_key_from_title(song.title) or config.UNKNOWN_KEY


def calculate_key_adjustment(song_key: str | None, target_key: str | None) -> int:
    """Semitones (in ``-6..6``) that take *song_key* to *target_key*."""
    if not song_key or not target_key:
        return 0
    if config.UNKNOWN_KEY in (song_key, target_key):
        return 0
    index1, index2 = _root_index(song_key), _root_index(target_key)
    if index1 is None or index2 is None:
        return 0
    adjustment = index2 - index1
    if adjustment > 6:
        adjustment -= 12
    if adjustment < -6:
        adjustment += 12
    return adjustment


def most_common_key(keys: list[str]) -> str | None:
    """Most frequent known key; ties go to the key seen first.

    ``Unknown`` never wins, so songs without a key cannot form a medley
    group of their own; ``None`` when no key is known at all.
    """
    counts = Counter(k for k in keys if k != config.UNKNOWN_KEY)
    if not counts:
        return None
    return counts.most_common(1)[0][0]


def _requested_key(options: SequenceOptions) -> str | None:
    requested = (options.target_key or "").strip()
    return normalize_key(requested) if requested else None


def _result(songs: list[SequencedSong], total_score: float) -> SequenceResult:
    return SequenceResult(
        songs=songs,
        total_score=total_score,
        key_progression=[s.target_key for s in songs],
        estimated_duration=len(songs) * config.MINUTES_PER_SONG,
    )


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------


def generate_medley_sequence(
    songs: list[SongRecord], options: SequenceOptions | None = None
) -> SequenceResult:
    """Build a medley from the songs already in a single grouping key.

    The grouping key is the requested target key or, failing that, the most
    frequent key among *songs*.  Songs in any other key are left out rather
    than transposed.
    """
    options = options or SequenceOptions()
    if not songs:
        return SequenceResult()

    keyed = [(song, get_song_key(song)) for song in songs]
    grouping_key = _requested_key(options) or most_common_key([k for _, k in keyed])
    if grouping_key is None:
        logger.info("Medley: no song has a known key, nothing to group")
        return SequenceResult()

    members = [
        SequencedSong(
            song=song,
            compatibility_score=1.0,
            transition_score=1.0,
            key_adjustment=0,
            original_key=key,
            target_key=grouping_key,
        )
        for song, key in keyed
        if key == grouping_key
    ]
    logger.info("Medley: %d of %d songs in %s", len(members), len(songs), grouping_key)
    return _result(members, 1.0 if members else 0.0)


def _in_target_key(entry: SequencedSong) -> SongRecord:
    """The song record with its key swapped for the playlist target key.

    Only the key changes; first and last chords stay as stored.
    """
    return dataclasses.replace(entry.song, key=entry.target_key)


def generate_playlist_sequence(
    songs: list[SongRecord], options: SequenceOptions | None = None
) -> SequenceResult:
    """Build a playlist that keeps every song, each shifted to one target key.

    Transitions are judged between consecutive songs with both keys set
    to the target key, since every song is played in that key.
    """
    options = options or SequenceOptions()
    candidates = list(songs)
    if options.genre:
        candidates = [s for s in candidates if s.genre == options.genre]
    if not candidates:
        return SequenceResult()

    keys = [get_song_key(s) for s in candidates]
    target_key = _requested_key(options) or most_common_key(keys) or config.DEFAULT_PLAYLIST_KEY

    sequence: list[SequencedSong] = []
    for song, original_key in zip(candidates, keys):
        if original_key == config.UNKNOWN_KEY:
            compatibility = config.NEUTRAL_SCORE
        else:
            compatibility = calculate_key_compatibility(original_key, target_key)
        sequence.append(
            SequencedSong(
                song=song,
                compatibility_score=compatibility,
                transition_score=1.0,
                key_adjustment=calculate_key_adjustment(original_key, target_key),
                original_key=original_key,
                target_key=target_key,
            )
        )

    for prev, current in zip(sequence, sequence[1:]):
        current.transition_score = calculate_transition_score(_in_target_key(prev), _in_target_key(current))

    total = sum(s.compatibility_score + s.transition_score for s in sequence) / (2 * len(sequence))
    logger.info("Playlist: %d songs to %s, score %.2f", len(sequence), target_key, total)
    return _result(sequence, min(1.0, max(0.0, total)))


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------


def get_songs_from_folders(songs: list[SongRecord], folder_ids: list[str]) -> list[SongRecord]:
    if not folder_ids:
        return list(songs)
    return [s for s in songs if (s.folder_id or config.UNORGANIZED_FOLDER) in folder_ids]


def get_random_songs(
    songs: list[SongRecord], count: int, rng: random.Random | None = None
) -> list[SongRecord]:
    shuffled = list(songs)
    (rng or random.Random()).shuffle(shuffled)
    return shuffled[:count]


def select_candidates(
    songs: list[SongRecord],
    options: SequenceOptions,
    rng: random.Random | None = None,
) -> list[SongRecord]:
    """Narrow *songs* by folder, then by song id, then by random pick."""
    candidates = get_songs_from_folders(songs, options.selected_folders)
    if options.selected_songs:
        wanted = set(options.selected_songs)
        candidates = [s for s in candidates if s.id in wanted]
    if options.use_random_selection:
        count = options.max_songs if options.max_songs is not None else len(candidates)
        candidates = get_random_songs(candidates, count, rng)
    logger.debug("Selected %d of %d songs", len(candidates), len(songs))
    return candidates
