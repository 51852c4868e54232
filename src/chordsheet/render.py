"""Structured song → display text.

Every section is emitted as a ``[Name]`` header, its lines, and a blank
separator line.  A ``chord_over_lyrics`` line becomes a chord row above its
lyric row; with word-wrap the pair is reflowed into several row pairs.

Word-wrap re-basing
-------------------
Lyrics are split on single spaces and packed greedily into segments of at
most ``max_width`` columns.  A chord belongs to the segment whose span
(from its first word up to the first word of the next segment) contains the
chord's offset, and is re-based to ``position - segment_start``.  Each chord
therefore stays above the same syllable after reflow.
"""

from . import config
from .chords import CHORD_TOKEN_RE
from .models import ChordPosition, Line, LineKind, RenderOptions, StructuredSong


def effective_width(options: RenderOptions) -> int:
    if options.is_mobile:
        return min(options.max_width, config.MOBILE_MAX_WIDTH)
    return options.max_width


def render_chord_row(chords: list[ChordPosition], width: int = 0) -> str:
    """Place each chord at its offset; a later chord overwrites an earlier one
    where they collide.  The row is padded with spaces to at least *width*.
    """
    row: list[str] = []
    for cp in chords:
        end = cp.position + len(cp.chord)
        if len(row) < end:
            row.extend(" " * (end - len(row)))
        row[cp.position:end] = cp.chord
    if len(row) < width:
        row.extend(" " * (width - len(row)))
    return "".join(row)


def wrap_segments(text: str, max_width: int) -> list[tuple[int, int]]:
    """Return ``(start, end)`` spans of *text* packed into *max_width* columns.

    A single word wider than *max_width* gets a span of its own.
    """
    segments: list[tuple[int, int]] = []
    seg_start, seg_end = 0, 0
    offset = 0
    for word in text.split(" "):
        start, end = offset, offset + len(word)
        offset = end + 1
        if end - seg_start > max_width and seg_end > seg_start:
            segments.append((seg_start, seg_end))
            seg_start = start
        seg_end = end
    segments.append((seg_start, seg_end))
    return segments


def _token_positions(chord_line: str) -> list[ChordPosition]:
    return [ChordPosition(chord=m.group(), position=m.start()) for m in CHORD_TOKEN_RE.finditer(chord_line)]


def _is_concatenated(chords: list[ChordPosition]) -> bool:
    return all(
        nxt.position <= prev.position + len(prev.chord)
        for prev, nxt in zip(chords, chords[1:])
    )


def render_chords_only(line: Line, max_width: int, word_wrap: bool) -> list[str]:
    chords = _token_positions(line.chord_line)
    if not chords:
        return [line.chord_line]

    if not word_wrap:
        if _is_concatenated(chords):
            return ["".join(cp.chord for cp in chords)]
        return [render_chord_row(chords)]

    rows: list[str] = []
    current = ""
    base = 0
    for cp in chords:
        gap = max(0, cp.position - base - len(current))
        if current and len(current) + gap + len(cp.chord) > max_width:
            rows.append(current)
            current, base = cp.chord, cp.position
        else:
            current += " " * gap + cp.chord
    rows.append(current)
    return rows


def render_chord_over_lyrics(line: Line, max_width: int, word_wrap: bool) -> list[str]:
    lyrics = line.lyrics
    if not line.chords:
        return render_lyrics(lyrics, max_width, word_wrap)
    if not word_wrap or len(lyrics) <= max_width:
        return [render_chord_row(line.chords, len(lyrics)), lyrics]

    segments = wrap_segments(lyrics, max_width)
    rows: list[str] = []
    for idx, (start, end) in enumerate(segments):
        upper = segments[idx + 1][0] if idx + 1 < len(segments) else None
        seg_chords = [
            ChordPosition(chord=cp.chord, position=cp.position - start)
            for cp in line.chords
            if cp.position >= start and (upper is None or cp.position < upper)
        ]
        text = lyrics[start:end]
        rows.append(render_chord_row(seg_chords, len(text)))
        rows.append(text)
    return rows


def render_lyrics(lyrics: str, max_width: int, word_wrap: bool) -> list[str]:
    if not word_wrap or len(lyrics) <= max_width:
        return [lyrics]
    return [lyrics[start:end] for start, end in wrap_segments(lyrics, max_width)]


def render_line(line: Line, max_width: int, word_wrap: bool) -> list[str]:
    if line.kind == LineKind.CHORDS_ONLY:
        return render_chords_only(line, max_width, word_wrap)
    if line.kind == LineKind.CHORD_OVER_LYRICS:
        return render_chord_over_lyrics(line, max_width, word_wrap)
    return render_lyrics(line.lyrics, max_width, word_wrap)


def render_structured_song(song: StructuredSong, options: RenderOptions | None = None) -> str:
    """Render *song* as display text."""
    options = options or RenderOptions(max_width=config.DEFAULT_MAX_WIDTH)
    width = effective_width(options)

    out: list[str] = []
    for section in song.sections:
        out.append(f"[{section.name}]")
        for line in section.lines:
            out.extend(render_line(line, width, options.word_wrap))
        out.append("")
    return "\n".join(out)


def structured_song_to_text(song: StructuredSong) -> str:
    """Serialize *song* back to editable raw text.

    ``chords_only`` rows come back verbatim and chord rows are rebuilt from
    positions, so the result parses back to the same structure.
    """
    parts: list[str] = []
    for section in song.sections:
        if section.name:
            parts.append(f"[{section.name}]")
        for line in section.lines:
            if line.kind == LineKind.CHORDS_ONLY:
                parts.append(line.chord_line)
            elif line.kind == LineKind.CHORD_OVER_LYRICS:
                row = render_chord_row(line.chords).rstrip()
                if row:
                    parts.append(row)
                parts.append(line.lyrics)
            else:
                parts.append(line.lyrics)
        parts.append("")
    return "\n".join(parts).rstrip() + "\n" if parts else ""
