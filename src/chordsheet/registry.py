from .adapters.base import SiteAdapter
from .adapters.tab4u import Tab4uAdapter
from .adapters.ultimate_guitar import UltimateGuitarAdapter
from .exceptions import UnsupportedSiteError

_ADAPTERS: list[type[SiteAdapter]] = [
    UltimateGuitarAdapter,
    Tab4uAdapter,
]

SUPPORTED_SITES = ("tabs.ultimate-guitar.com", "tab4u.com")


def get_adapter(url: str) -> SiteAdapter:
    """Return an instantiated adapter for the given URL.

    Raises UnsupportedSiteError if no adapter matches.
    """
    for cls in _ADAPTERS:
        if cls.can_handle(url):
            return cls()
    raise UnsupportedSiteError(url)
