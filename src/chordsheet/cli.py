import dataclasses
import json
import logging
import random
import re
import sys
from pathlib import Path

import click

from . import config
from .difficulty import chord_progress, find_best_easy_chord_transposition
from .exceptions import FetchError, LibraryError, ParseError, UnsupportedSiteError
from .library import load_chord_catalog, load_library
from .models import RawSong, RenderOptions, SequenceOptions, SequenceResult
from .parser import extract_capo, extract_key, parse_song
from .registry import SUPPORTED_SITES, get_adapter
from .render import render_structured_song
from .sequencing import generate_medley_sequence, generate_playlist_sequence, select_candidates
from .transpose import transpose_parsed_song

logger = logging.getLogger(__name__)

_INPUT_FILE = click.Path(exists=True, dir_okay=False, path_type=Path)


def _slugify(text: str) -> str:
    """Convert a string to a lowercase hyphenated slug suitable for filenames."""
    text = text.lower()
    text = re.sub(r"[^\w\s-]", "", text)   # drop punctuation
    text = re.sub(r"[\s_]+", "-", text)     # spaces/underscores → hyphens
    text = re.sub(r"-{2,}", "-", text)      # collapse multiple hyphens
    return text.strip("-")


def _default_filename(author: str, title: str) -> str:
    return f"{_slugify(author)}-{_slugify(title)}.txt"


def _sheet_text(song: RawSong) -> str:
    """Song text with ``Key:`` and ``Capo`` banners the parser reads back."""
    banners = []
    if song.key and extract_key(song.content) is None:
        banners.append(f"Key: {song.key}")
    if song.capo and extract_capo(song.content) is None:
        banners.append(f"Capo {song.capo}")
    return "\n".join(banners + [song.content]) + "\n"


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _load_songs(path: Path):
    try:
        return load_library(path)
    except LibraryError as exc:
        _fail(str(exc))


@click.group()
@click.option("-v", "--verbose", is_flag=True, default=False, help="Log debug output to stderr.")
def main(verbose: bool) -> None:
    """Chord sheet toolkit: render, transpose and sequence songs."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=config.LOG_FORMAT,
    )


# --- Single songs ---


@main.command()
@click.argument("song_file", type=_INPUT_FILE)
@click.option("--width", default=config.DEFAULT_MAX_WIDTH, show_default=True,
              help="Maximum line width when wrapping.")
@click.option("--wrap", is_flag=True, default=False, help="Word-wrap long lines.")
@click.option("--mobile", is_flag=True, default=False,
              help=f"Cap the width at {config.MOBILE_MAX_WIDTH} columns.")
@click.option("--transpose", "semitones", default=0, show_default=True,
              help="Transpose by N semitones before rendering.")
def render(song_file: Path, width: int, wrap: bool, mobile: bool, semitones: int) -> None:
    """Render a chord sheet for display."""
    parsed = transpose_parsed_song(parse_song(song_file.read_text(encoding="utf-8")), semitones)
    options = RenderOptions(max_width=width, word_wrap=wrap, is_mobile=mobile)
    click.echo(render_structured_song(parsed.song, options), nl=False)


@main.command()
@click.argument("song_file", type=_INPUT_FILE)
@click.option("--title", default="", help="Song title.")
@click.option("--author", default="", help="Song author.")
@click.option("--key", default=None, help="Declared key of the song.")
@click.option("--capo", type=int, default=None, help="Capo position (default: read from the sheet).")
def parse(song_file: Path, title: str, author: str, key: str | None, capo: int | None) -> None:
    """Print the parsed structure of a chord sheet as JSON."""
    parsed = parse_song(song_file.read_text(encoding="utf-8"), title=title, author=author, key=key, capo=capo)
    click.echo(json.dumps(dataclasses.asdict(parsed), indent=2, ensure_ascii=False))


@main.command()
@click.argument("song_file", type=_INPUT_FILE)
def easy(song_file: Path) -> None:
    """Find the transposition that makes the most chords easy to play."""
    parsed = parse_song(song_file.read_text(encoding="utf-8"))
    if not parsed.all_chords:
        _fail(f"no chords found in {song_file}")

    best = find_best_easy_chord_transposition(parsed.all_chords)
    total = len(parsed.all_chords)
    click.echo(f"Transpose {best.semitones:+d}: {best.easy_count}/{total} easy chords")
    if best.semitones:
        shifted = transpose_parsed_song(parsed, best.semitones)
        click.echo("Chords: " + " ".join(shifted.all_chords))


# --- Libraries ---


def _sequence_options(func):
    """Selection options shared by ``medley`` and ``playlist``."""
    options = [
        click.argument("library", type=_INPUT_FILE),
        click.option("--key", "target_key", default=None, help="Target key."),
        click.option("--folder", "folders", multiple=True, help="Only songs in this folder (repeatable)."),
        click.option("--song", "song_ids", multiple=True, help="Only this song id (repeatable)."),
        click.option("--random", "use_random", is_flag=True, default=False, help="Pick songs at random."),
        click.option("--max-songs", type=int, default=None, help="Number of songs to pick with --random."),
        click.option("--seed", type=int, default=None, help="Seed for --random."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _echo_sequence(result: SequenceResult) -> None:
    if not result.songs:
        click.echo("No songs selected.")
        return
    for n, entry in enumerate(result.songs, start=1):
        song = entry.song
        name = f"{song.title} - {song.author}" if song.author else song.title
        click.echo(
            f"{n:2d}. {name}  [{entry.original_key} → {entry.target_key}, {entry.key_adjustment:+d}]"
            f"  compat {entry.compatibility_score:.2f}  transition {entry.transition_score:.2f}"
        )
    click.echo(
        f"Score: {result.total_score:.2f} | Duration: {result.estimated_duration:g} min"
        f" | Keys: {' → '.join(result.key_progression)}"
    )


def _run_sequence(generate, library, target_key, folders, song_ids, use_random, max_songs, seed, genre=None):
    songs = _load_songs(library)
    options = SequenceOptions(
        target_key=target_key,
        selected_folders=list(folders),
        selected_songs=list(song_ids),
        genre=genre,
        use_random_selection=use_random,
        max_songs=max_songs,
    )
    candidates = select_candidates(songs, options, random.Random(seed))
    _echo_sequence(generate(candidates, options))


@main.command()
@_sequence_options
def medley(library, target_key, folders, song_ids, use_random, max_songs, seed) -> None:
    """Group the library's songs that share one key into a medley."""
    _run_sequence(generate_medley_sequence, library, target_key, folders, song_ids, use_random, max_songs, seed)


@main.command()
@_sequence_options
@click.option("--genre", default=None, help="Only songs of this genre.")
def playlist(library, target_key, folders, song_ids, use_random, max_songs, seed, genre) -> None:
    """Sequence the library's songs into a playlist in one target key."""
    _run_sequence(
        generate_playlist_sequence, library, target_key, folders, song_ids, use_random, max_songs, seed, genre
    )


@main.command()
@click.argument("library", type=_INPUT_FILE)
@click.argument("catalog", type=_INPUT_FILE)
def progress(library: Path, catalog: Path) -> None:
    """Report how much of a chord catalog the library's songs cover."""
    songs = _load_songs(library)
    try:
        chords = load_chord_catalog(catalog)
    except LibraryError as exc:
        _fail(str(exc))

    result = chord_progress(songs, chords)
    click.echo(f"Known chords: {result.total_known}/{result.total_chords} ({result.progress_percentage}%)")
    for level, total in result.total_by_difficulty.items():
        click.echo(f"  {level}: {result.known_by_difficulty[level]}/{total}")


# --- Song sources ---


@main.command()
@click.argument("url")
@click.option("-o", "--output", "output_path", default=None, metavar="PATH",
              help="Output file path (default: <author>-<title>.txt)")
@click.option("--stdout", is_flag=True, default=False,
              help="Print to stdout instead of writing a file.")
def fetch(url: str, output_path: str | None, stdout: bool) -> None:
    """Download a chord sheet from a song site as plain text.

    \b
    Supported sites:
      - tabs.ultimate-guitar.com
      - tab4u.com
    """
    try:
        adapter = get_adapter(url)
    except UnsupportedSiteError as exc:
        click.echo(f"Error: {exc}", err=True)
        click.echo(f"Supported sites: {', '.join(SUPPORTED_SITES)}", err=True)
        sys.exit(1)

    try:
        song = adapter.scrape(url)
    except FetchError as exc:
        msg = f"Error: Could not fetch {exc.url}"
        if exc.status_code:
            msg += f" (HTTP {exc.status_code})"
        click.echo(msg, err=True)
        sys.exit(1)
    except ParseError as exc:
        _fail(str(exc))

    logger.debug("Fetched %r by %r (%d chars)", song.title, song.author, len(song.content))
    text = _sheet_text(song)
    if stdout:
        click.echo(text, nl=False)
        return

    dest = Path(output_path) if output_path else Path(_default_filename(song.author, song.title))
    dest.write_text(text, encoding="utf-8")
    click.echo(f"Written to {dest}")
