"""Utility modules for songmatch.

- **errors** -- exception hierarchy rooted at SongMatchError.
- **logging** -- structlog setup with console output in development and
  JSON in production.
- **similarity** -- word-overlap scoring of lyrics against a query.
- **text_normalizer** -- artist-key and lyric-text normalization.
"""

from songmatch.utils.errors import (
    CatalogLoadError,
    CollectionCancelledError,
    ConfigurationError,
    SongMatchError,
)
from songmatch.utils.logging import configure_logging, get_logger
from songmatch.utils.similarity import (
    ALL_WORDS_MATCH_SCORE,
    EXACT_MATCH_SCORE,
    calculate_similarity,
)
from songmatch.utils.text_normalizer import normalize_artist_key, normalize_text

__all__ = [
    "ALL_WORDS_MATCH_SCORE",
    "CatalogLoadError",
    "CollectionCancelledError",
    "ConfigurationError",
    "EXACT_MATCH_SCORE",
    "SongMatchError",
    "calculate_similarity",
    "configure_logging",
    "get_logger",
    "normalize_artist_key",
    "normalize_text",
]
