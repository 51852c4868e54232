"""Adapter for tab4u.com song pages.

Tab4U renders the sheet as a table whose cells hold either a chord row or a
lyric row.  Pages without a usable table carry the plain text in
``div#songContentTPL`` instead.  Titles read ``אקורדים לשיר <song> של
<artist>`` and are trimmed to the song name.
"""

import re

from bs4 import BeautifulSoup

from .base import SiteAdapter
from .utils import clean_song_content
from ..chords import CHORD_TOKEN_RE
from ..exceptions import ParseError
from ..models import RawSong

_TITLE_PREFIX_RE = re.compile(r"^אקורדים לשיר\s+")
_TITLE_ARTIST_RE = re.compile(r"\s+של\s+.*$")

# Fewer chord tokens than this and a table is page chrome, not the sheet.
MIN_TABLE_CHORDS = 6
MIN_CONTENT_LENGTH = 50


def _table_content(soup: BeautifulSoup) -> str:
    rows: list[str] = []
    for table in soup.find_all("table"):
        if len(CHORD_TOKEN_RE.findall(table.get_text())) < MIN_TABLE_CHORDS:
            continue
        for cell in table.find_all("td"):
            text = cell.get_text().rstrip()
            if text.strip():
                rows.append(text)
    return "\n".join(rows)


class Tab4uAdapter(SiteAdapter):
    """Adapter for tab4u.com song pages."""

    extra_headers = {"Accept-Language": "he-IL,he;q=0.9,en-US;q=0.8,en;q=0.7"}

    @classmethod
    def can_handle(cls, url: str) -> bool:
        return "tab4u.com/tabs/songs/" in url

    def extract(self, html: str, url: str) -> RawSong:
        soup = BeautifulSoup(html, "html.parser")

        h1 = soup.find("h1")
        title = h1.get_text().strip() if h1 else ""
        title = _TITLE_ARTIST_RE.sub("", _TITLE_PREFIX_RE.sub("", title))

        artist_link = soup.find("a", class_="artistTitle")
        author = artist_link.get_text().strip() if artist_link else ""

        content = _table_content(soup)
        if len(content) < MIN_CONTENT_LENGTH:
            song_div = soup.find("div", id="songContentTPL")
            if song_div:
                content = song_div.get_text()

        content = clean_song_content(content)
        if len(content) < MIN_CONTENT_LENGTH:
            raise ParseError(url, "no chord sheet found in tables or #songContentTPL")

        return RawSong(title=title, author=author, content=content, source_url=url)
