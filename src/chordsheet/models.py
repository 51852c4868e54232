from dataclasses import dataclass, field
from enum import Enum


class LineKind(str, Enum):
    LYRICS_ONLY = "lyrics_only"
    CHORDS_ONLY = "chords_only"
    CHORD_OVER_LYRICS = "chord_over_lyrics"


class SectionType(str, Enum):
    INTRO = "intro"
    VERSE = "verse"
    CHORUS = "chorus"
    BRIDGE = "bridge"
    OUTRO = "outro"


@dataclass
class Chord:
    """A chord split into root, quality suffix and optional slash bass.

    Example: ``Bbm7/F`` is ``Chord(root="Bb", quality="m7", bass="F")``.
    """

    root: str
    quality: str = ""
    bass: str | None = None

    def __str__(self) -> str:
        text = self.root + self.quality
        if self.bass:
            text += f"/{self.bass}"
        return text


@dataclass
class ChordPosition:
    """A chord anchored at a character offset of its paired lyrics string."""

    chord: str
    position: int


@dataclass
class Line:
    """One logical line of a section.

    ``lyrics_only`` lines use ``lyrics``; ``chords_only`` lines keep the raw
    chord row in ``chord_line``; ``chord_over_lyrics`` lines pair ``lyrics``
    with position-addressed ``chords``.
    """

    kind: LineKind
    lyrics: str = ""
    chords: list[ChordPosition] = field(default_factory=list)
    chord_line: str = ""


@dataclass
class Section:
    """A named section of a song (verse, chorus, bridge, etc.)."""

    name: str
    type: SectionType = SectionType.VERSE
    lines: list[Line] = field(default_factory=list)


@dataclass
class StructuredSong:
    sections: list[Section] = field(default_factory=list)


@dataclass
class RenderOptions:
    max_width: int = 80
    word_wrap: bool = False
    is_mobile: bool = False


@dataclass
class ParsedSong:
    """A structured song plus the metadata derived while parsing it."""

    song: StructuredSong
    title: str = ""
    author: str = ""
    key: str | None = None
    capo: int | None = None
    first_chord: str | None = None
    last_chord: str | None = None
    chord_progression: list[str] = field(default_factory=list)
    all_chords: list[str] = field(default_factory=list)


@dataclass
class SongRecord:
    """Song metadata as consumed by the sequencing engine."""

    id: str
    title: str
    author: str = ""
    key: str | None = None
    first_chord: str | None = None
    last_chord: str | None = None
    capo: int | None = None
    all_chords: list[str] = field(default_factory=list)
    genre: str | None = None
    folder_id: str | None = None
    content: str | None = None


@dataclass
class SequenceOptions:
    target_key: str | None = None
    selected_folders: list[str] = field(default_factory=list)
    selected_songs: list[str] = field(default_factory=list)
    genre: str | None = None
    use_random_selection: bool = False
    max_songs: int | None = None


@dataclass
class SequencedSong:
    """A song placed in a generated medley or playlist.

    The scores and the key adjustment are computed per generation run and
    layered on top of ``song``; the record itself is never modified.
    """

    song: SongRecord
    compatibility_score: float
    transition_score: float
    key_adjustment: int
    original_key: str
    target_key: str


@dataclass
class SequenceResult:
    songs: list[SequencedSong] = field(default_factory=list)
    total_score: float = 0.0
    key_progression: list[str] = field(default_factory=list)
    estimated_duration: float = 0.0


@dataclass
class EasyTransposition:
    semitones: int
    easy_count: int


@dataclass
class ChordProgress:
    """Chord-learning progress of a user against a chord catalog."""

    total_known: int
    total_chords: int
    known_by_difficulty: dict[str, int]
    total_by_difficulty: dict[str, int]
    progress_percentage: int


@dataclass
class RawSong:
    """A chord sheet as fetched from a song source, before parsing."""

    title: str
    author: str
    content: str
    key: str | None = None
    capo: int | None = None
    source_url: str | None = None
