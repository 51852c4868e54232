"""Chord difficulty, easy-key search and chord-learning progress.

An *easy* chord is an open-position shape a beginner plays without a barre:

+----------------------+--------------------------------------------+
| Roots                | Allowed qualities                          |
+======================+============================================+
| ``C D E G A``        | major, ``7``, ``maj7``, ``sus4``, ``add9`` |
+----------------------+--------------------------------------------+
| ``A D E``            | ``m``, ``m7``                              |
+----------------------+--------------------------------------------+

Everything else is hard: accidental roots, the barre roots ``F`` and ``B``,
slash chords, ``dim``/``aug``, and ``sus``/``add`` other than ``sus4`` and
``add9``.
"""

import logging

from .chords import normalize_note, parse_chord, transpose_chord
from .models import ChordProgress, EasyTransposition, SongRecord

logger = logging.getLogger(__name__)

EASY_MAJOR_ROOTS = {"C", "D", "E", "G", "A"}
EASY_MAJOR_QUALITIES = {"", "7", "maj7", "sus4", "add9"}
EASY_MINOR_ROOTS = {"A", "D", "E"}
EASY_MINOR_QUALITIES = {"m", "m7"}

DIFFICULTY_LEVELS = ("beginner", "intermediate", "advanced")


def is_easy_chord(chord: str | None) -> bool:
    """Return True if *chord* is on the open-position allow-list."""
    parsed = parse_chord(chord)
    if parsed is None or parsed.bass:
        return False
    root = normalize_note(parsed.root)
    quality = parsed.quality.lower()
    if root in EASY_MAJOR_ROOTS and quality in EASY_MAJOR_QUALITIES:
        return True
    return root in EASY_MINOR_ROOTS and quality in EASY_MINOR_QUALITIES


def song_has_only_easy_chords(all_chords: list[str] | None) -> bool:
    """Return True when every chord of the song is easy.

    A song with no chord data is never reported as easy.
    """
    if not all_chords:
        return False
    return all(is_easy_chord(c) for c in all_chords)


def count_easy_chords(chords: list[str], semitones: int = 0) -> int:
    return sum(1 for c in chords if is_easy_chord(transpose_chord(c, semitones)))


def _search_order():
    # Closer shifts first so equal counts keep the smaller |shift|.
    for distance in range(1, 12):
        yield -distance
        yield distance


def find_best_easy_chord_transposition(all_chords: list[str] | None) -> EasyTransposition:
    """Find the shift in ``-11..11`` that makes the most chords easy.

    Ties prefer the smaller absolute shift.  The search stops as soon as a
    shift makes every chord easy.
    """
    if not all_chords:
        return EasyTransposition(semitones=0, easy_count=0)

    total = len(all_chords)
    best = EasyTransposition(semitones=0, easy_count=count_easy_chords(all_chords))
    if best.easy_count == total:
        return best

    for semitones in _search_order():
        easy_count = count_easy_chords(all_chords, semitones)
        if easy_count > best.easy_count:
            best = EasyTransposition(semitones=semitones, easy_count=easy_count)
            if easy_count == total:
                break

    logger.debug("Best easy transposition for %s: %s", all_chords, best)
    return best


# ---------------------------------------------------------------------------
# Chord-learning progress
# ---------------------------------------------------------------------------


def normalize_chord_name(chord: str) -> str:
    """Comparison form of a chord name: canonical root, quality kept."""
    parsed = parse_chord(chord)
    if parsed is None:
        return chord.strip()
    name = normalize_note(parsed.root) + parsed.quality
    if parsed.bass:
        name += "/" + normalize_note(parsed.bass)
    return name


def known_chords(songs: list[SongRecord]) -> set[str]:
    """Chords a user knows: every chord appearing in one of their songs."""
    known: set[str] = set()
    for song in songs:
        for chord in song.all_chords or []:
            if isinstance(chord, str) and chord.strip():
                known.add(normalize_chord_name(chord))
    return known


def chord_progress(songs: list[SongRecord], catalog: list[dict]) -> ChordProgress:
    """Measure how much of a chord *catalog* the user's songs already cover.

    *catalog* entries are ``{"name": ..., "difficulty": ...}`` with
    difficulty one of ``beginner``/``intermediate``/``advanced`` (missing
    means beginner).
    """
    known = known_chords(songs)
    total_by = dict.fromkeys(DIFFICULTY_LEVELS, 0)
    known_by = dict.fromkeys(DIFFICULTY_LEVELS, 0)

    for entry in catalog:
        difficulty = entry.get("difficulty") or "beginner"
        if difficulty not in total_by:
            continue
        total_by[difficulty] += 1
        if normalize_chord_name(entry.get("name", "")) in known:
            known_by[difficulty] += 1

    total_chords = sum(total_by.values())
    total_known = sum(known_by.values())
    percentage = int(total_known * 100 / total_chords + 0.5) if total_chords else 0
    return ChordProgress(
        total_known=total_known,
        total_chords=total_chords,
        known_by_difficulty=known_by,
        total_by_difficulty=total_by,
        progress_percentage=percentage,
    )
