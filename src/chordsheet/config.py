"""
Configuration settings for chordsheet.
Adjust these values to change rendering and sequencing defaults; the CLI
flags override them per invocation.
"""

# =============================================================================
# RENDERING
# =============================================================================

# Column width used when word-wrap is requested without an explicit width
DEFAULT_MAX_WIDTH = 80

# Narrower cap applied when rendering for a phone screen
MOBILE_MAX_WIDTH = 40

# =============================================================================
# SEQUENCING
# =============================================================================

# Estimated playing time per song (minutes)
MINUTES_PER_SONG = 3.5

# Playlist target key when none is requested and no song declares a key
DEFAULT_PLAYLIST_KEY = "C"

# Score used whenever key or chord information is missing
NEUTRAL_SCORE = 0.5

# Label for songs whose key cannot be determined
UNKNOWN_KEY = "Unknown"

# Folder id given to songs that are not filed in any folder
UNORGANIZED_FOLDER = "unorganized"

# =============================================================================
# SONG SOURCES
# =============================================================================

# HTTP timeout for chord-page fetches (seconds)
FETCH_TIMEOUT = 15

# Browser-like headers; chord sites answer 403 without them
FETCH_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept-Language": "en-US,en;q=0.9",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}

# =============================================================================
# LOGGING
# =============================================================================

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
