"""Adapter for tabs.ultimate-guitar.com chord pages.

UG returns 403 without browser-like headers.

Two page formats are supported (UG has migrated away from Next.js):

New format (current):
    <div class="js-store" data-content="<html-entity-encoded JSON>">
    JSON path:
        store.page.data.tab
            .song_name        → RawSong.title
            .artist_name      → RawSong.author
            .tonality_name    → RawSong.key
        store.page.data.tab_view
            .wiki_tab.content → raw chord sheet

Legacy format (Next.js, kept as fallback):
    <script id="__NEXT_DATA__" type="application/json">
    JSON path:
        props.pageProps.data.tab_view
            .song_name / .artist_name / .capo / .tonality_name
            .wiki_tab.content

The sheet marks chords as ``[ch]D[/ch]`` and may wrap chord+lyric pairs in
``[tab]...[/tab]``.  Both are stripped to the bare text so chord rows line
up with their lyrics again.
"""

import html as html_module
import json
import re

from bs4 import BeautifulSoup

from .base import SiteAdapter
from .utils import clean_song_content
from ..exceptions import ParseError
from ..models import RawSong

_CH_TAG_RE = re.compile(r"\[ch\]([^\[]*)\[/ch\]")
_TAB_TAG_RE = re.compile(r"\[/?tab\]")


def strip_ug_tags(text: str) -> str:
    """Strip UG-specific markup from tab content.

    - ``[ch]D[/ch]`` → ``D``
    - ``[tab]`` / ``[/tab]`` → removed
    """
    text = _CH_TAG_RE.sub(r"\1", text)
    text = _TAB_TAG_RE.sub("", text)
    return text


def _extract_page_data(soup: BeautifulSoup, url: str) -> dict:
    """Return the ``page.data`` dict from whichever JSON container is present.

    Tries the current ``js-store`` format first, then falls back to the
    legacy ``__NEXT_DATA__`` format.

    Raises :class:`~chordsheet.exceptions.ParseError` if neither is found or
    can be parsed.
    """
    store_div = soup.find("div", class_="js-store")
    if store_div and store_div.get("data-content"):
        try:
            data = json.loads(html_module.unescape(store_div["data-content"]))
            return data["store"]["page"]["data"]
        except (KeyError, TypeError, json.JSONDecodeError):
            pass  # try legacy

    script_tag = soup.find("script", id="__NEXT_DATA__")
    if script_tag and script_tag.string:
        try:
            data = json.loads(script_tag.string)
            return data["props"]["pageProps"]["data"]
        except (KeyError, TypeError, json.JSONDecodeError):
            pass

    raise ParseError(url, "Could not find tab data (tried js-store and __NEXT_DATA__)")


class UltimateGuitarAdapter(SiteAdapter):
    """Adapter for tabs.ultimate-guitar.com chord pages."""

    @classmethod
    def can_handle(cls, url: str) -> bool:
        return "tabs.ultimate-guitar.com/tab/" in url

    def extract(self, html: str, url: str) -> RawSong:
        soup = BeautifulSoup(html, "html.parser")
        page_data = _extract_page_data(soup, url)

        # Metadata lives in page_data["tab"] (new) or page_data["tab_view"] (legacy).
        tab_meta = page_data.get("tab") or page_data.get("tab_view") or {}
        tab_view = page_data.get("tab_view") or {}

        capo_raw = tab_meta.get("capo") or tab_view.get("capo") or 0
        content = (tab_view.get("wiki_tab") or {}).get("content") or ""
        if not content:
            raise ParseError(url, "wiki_tab.content is empty or missing")

        return RawSong(
            title=tab_meta.get("song_name") or "",
            author=tab_meta.get("artist_name") or "",
            content=clean_song_content(strip_ug_tags(content)),
            key=tab_meta.get("tonality_name") or tab_view.get("tonality_name") or None,
            capo=int(capo_raw) if capo_raw else None,
            source_url=url,
        )
