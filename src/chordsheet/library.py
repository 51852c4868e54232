"""Loading song libraries and chord catalogs from JSON files.

A library file is either a bare list of song objects or ``{"songs": [...]}``.
Keys may be snake_case (``first_chord``) or the camelCase used by web
exports (``firstChord``).  A song that carries ``content`` but no chord
summary is parsed so the sequencing engine has first/last chords to work
with.
"""

import json
import logging
from pathlib import Path

from .exceptions import LibraryError
from .models import SongRecord
from .parser import parse_song

logger = logging.getLogger(__name__)

_CAMEL_KEYS = {
    "firstChord": "first_chord",
    "lastChord": "last_chord",
    "allChords": "all_chords",
    "folderId": "folder_id",
    "artist": "author",
}

_RECORD_FIELDS = (
    "title", "author", "key", "first_chord", "last_chord",
    "capo", "all_chords", "genre", "folder_id", "content",
)


def _read_json(path: str | Path):
    try:
        with open(path, encoding="utf-8") as fh:
            return json.load(fh)
    except OSError as exc:
        raise LibraryError(str(path), exc.strerror or str(exc)) from exc
    except json.JSONDecodeError as exc:
        raise LibraryError(str(path), f"invalid JSON ({exc.msg} at line {exc.lineno})") from exc


def record_from_dict(raw: dict, index: int = 0) -> SongRecord:
    """Build a :class:`SongRecord` from one JSON song object."""
    data = {_CAMEL_KEYS.get(k, k): v for k, v in raw.items()}
    fields = {name: data[name] for name in _RECORD_FIELDS if data.get(name) is not None}
    fields["id"] = str(data.get("id", index))
    fields.setdefault("title", "")

    if "capo" in fields:
        try:
            fields["capo"] = int(fields["capo"])
        except (TypeError, ValueError):
            del fields["capo"]

    record = SongRecord(**fields)
    if record.content and not record.all_chords:
        parsed = parse_song(record.content, title=record.title, author=record.author, key=record.key)
        record.all_chords = parsed.all_chords
        record.first_chord = record.first_chord or parsed.first_chord
        record.last_chord = record.last_chord or parsed.last_chord
        record.key = record.key or parsed.key
        if record.capo is None:
            record.capo = parsed.capo
    return record


def load_library(path: str | Path) -> list[SongRecord]:
    """Read every song of the library file at *path*.

    Raises :class:`~chordsheet.exceptions.LibraryError` if the file is
    missing, is not JSON, or is not shaped like a song list.
    """
    data = _read_json(path)
    if isinstance(data, dict):
        data = data.get("songs")
    if not isinstance(data, list):
        raise LibraryError(str(path), "expected a list of songs or an object with a 'songs' list")

    songs = []
    for index, raw in enumerate(data):
        if not isinstance(raw, dict):
            raise LibraryError(str(path), f"song #{index} is not an object")
        songs.append(record_from_dict(raw, index))
    logger.debug("Loaded %d songs from %s", len(songs), path)
    return songs


def load_chord_catalog(path: str | Path) -> list[dict]:
    """Read a chord catalog: a list of ``{"name", "difficulty"}`` objects."""
    data = _read_json(path)
    if isinstance(data, dict):
        data = data.get("chords")
    if not isinstance(data, list) or not all(isinstance(c, dict) and c.get("name") for c in data):
        raise LibraryError(str(path), "expected a list of chords with a 'name'")
    return data
