"""Chord primitives: parsing, enharmonic normalization and transposition.

All pitch arithmetic happens on the index of a note in :data:`SHARP_NOTES`
(mod 12).  Flat spellings, and the double accidentals that arithmetic on
spelled notes can produce (``C##``, ``Dbb``), are folded onto that index
first by :func:`normalize_note`.

Respelling after a transposition depends on the chord quality:

+---------------------------------------------+-----------------------------+
| Quality                                     | Black-key spelling          |
+=============================================+=============================+
| minor (``m``, ``m7``, ``min``), ``dim``,    | flat (``Bbm``, ``Ebsus4``)  |
| ``sus``, ``add``, ``maj7``                  |                             |
+---------------------------------------------+-----------------------------+
| major, dominant and anything else           | sharp (``F#``, ``C#7``)     |
+---------------------------------------------+-----------------------------+
"""

import re

from .models import Chord

SHARP_NOTES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]
FLAT_NOTES = ["C", "Db", "D", "Eb", "E", "F", "Gb", "G", "Ab", "A", "Bb", "B"]

_NATURAL_INDEX = {"C": 0, "D": 2, "E": 4, "F": 5, "G": 7, "A": 9, "B": 11}

# A chord token inside a chord row: C, Am, F#m7, Bbmaj7, Dsus4, Cadd9, D/F#
CHORD_TOKEN_RE = re.compile(
    r"[A-G][#b]?"
    r"(?:m(?!aj)|maj|min|dim|aug|sus|add)?"
    r"[0-9]*"
    r"(?:/[A-G][#b]?)?"
)

_CHORD_RE = re.compile(r"^([A-G][#b]?)(.*)$")
_SLASH_BASS_RE = re.compile(r"^(.*)/([A-G][#b]?)$")
_SPELLED_NOTE_RE = re.compile(r"^[A-G](?:#+|b+)?$")
_FLAT_QUALITY_RE = re.compile(r"^m(?!aj)|dim|sus|add|maj7")


def parse_chord(text: str | None) -> Chord | None:
    """Split *text* into root, quality and slash bass.

    Returns ``None`` when *text* does not start with a note letter A–G
    (optionally followed by ``#`` or ``b``).  A slash part that is not a
    note (``C/x``) stays in the quality.
    """
    if not text:
        return None
    m = _CHORD_RE.match(text.strip())
    if not m:
        return None
    root, rest = m.group(1), m.group(2)
    bass_match = _SLASH_BASS_RE.match(rest)
    if bass_match:
        return Chord(root=root, quality=bass_match.group(1), bass=bass_match.group(2))
    return Chord(root=root, quality=rest)


def normalize_note(note: str) -> str:
    """Return the canonical sharp spelling of *note*.

    ``Db`` → ``C#``, ``Cb`` → ``B``, ``C##`` → ``D``, ``E#`` → ``F``.
    Anything that is not a spelled note is returned unchanged.
    """
    if not _SPELLED_NOTE_RE.match(note):
        return note
    index = _NATURAL_INDEX[note[0]] + note.count("#") - note.count("b")
    return SHARP_NOTES[index % 12]


def note_index(note: str) -> int | None:
    """Return the chromatic index (0 = C) of *note*, or ``None``."""
    canonical = normalize_note(note)
    if canonical not in SHARP_NOTES:
        return None
    return SHARP_NOTES.index(canonical)


def prefers_flats(quality: str) -> bool:
    return bool(_FLAT_QUALITY_RE.search(quality))


def spell_note(index: int, flats: bool = False) -> str:
    table = FLAT_NOTES if flats else SHARP_NOTES
    return table[index % 12]


def normalize_semitones(semitones: int) -> int:
    """Fold *semitones* into ``[-11, 11]`` keeping its direction."""
    shift = abs(int(semitones)) % 12
    return shift if semitones >= 0 else -shift


def _shift_note(note: str, semitones: int, flats: bool) -> str | None:
    index = note_index(note)
    if index is None:
        return None
    return spell_note(index + semitones, flats)


def transpose_chord(chord: str, semitones: int) -> str:
    """Transpose *chord* by *semitones*, respelling by quality.

    Unparseable input, and any shift that is a whole number of octaves,
    returns *chord* unchanged.  Slash chords move root and bass
    independently.
    """
    parsed = parse_chord(chord)
    if parsed is None:
        return chord
    shift = normalize_semitones(semitones)
    if shift == 0:
        return chord

    flats = prefers_flats(parsed.quality)
    root = _shift_note(parsed.root, shift, flats)
    if root is None:
        return chord
    bass = None
    if parsed.bass:
        bass = _shift_note(parsed.bass, shift, flats) or parsed.bass
    return str(Chord(root=root, quality=parsed.quality, bass=bass))
