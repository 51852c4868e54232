from abc import ABC, abstractmethod

import httpx

from .. import config
from ..exceptions import FetchError
from ..models import RawSong


class SiteAdapter(ABC):
    """Abstract base class for all song-source adapters."""

    extra_headers: dict[str, str] = {}

    @classmethod
    @abstractmethod
    def can_handle(cls, url: str) -> bool:
        """Return True if this adapter can handle the given URL."""

    def fetch(self, url: str) -> str:
        """GET the page with browser-like headers and return raw HTML.

        Raises FetchError on HTTP-level failures.
        """
        try:
            resp = httpx.get(
                url,
                headers={**config.FETCH_HEADERS, **self.extra_headers},
                follow_redirects=True,
                timeout=config.FETCH_TIMEOUT,
            )
        except httpx.RequestError as exc:
            raise FetchError(url, 0) from exc
        if resp.status_code != 200:
            raise FetchError(url, resp.status_code)
        return resp.text

    @abstractmethod
    def extract(self, html: str, url: str) -> RawSong:
        """Parse HTML and return the song's raw chord sheet.

        The content must keep chord rows above their lyric rows with the
        original column alignment; no site markup may remain.

        Raises ParseError if expected content cannot be found.
        """

    def scrape(self, url: str) -> RawSong:
        """Convenience method: fetch + extract."""
        html = self.fetch(url)
        return self.extract(html, url)
