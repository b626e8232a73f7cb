"""Text normalization utilities for artist keys and lyric text.

Two distinct concerns live here:

1. **Artist key normalization** -- the catalog, the cache and the search
   coordinator all partition state by artist, so "Demo", " demo " and
   "DEMO" must resolve to the same key.

2. **Lyric normalization** -- lyrics and queries arrive with mixed case,
   line breaks from verse layout, and punctuation.  Both sides are folded
   into the same plain, single-spaced form before scoring.
"""

import re

_WHITESPACE_RUN = re.compile(r"\s+")

# Anything that is neither a word character nor whitespace.
_NON_WORD = re.compile(r"[^\w\s]")


def normalize_artist_key(artist: str) -> str:
    """Normalize an artist identifier for catalog and cache lookups.

    Args:
        artist: Raw artist/profile name as typed by the user.

    Returns:
        The trimmed, lowercased artist key.
    """
    return artist.strip().lower()


def normalize_text(text: str) -> str:
    """Fold lyric or query text into a comparable form.

    Lowercases, collapses whitespace runs (including newlines) into single
    spaces, strips every character that is neither a word character nor
    whitespace, then trims the ends.

    Args:
        text: Raw lyrics or query text.

    Returns:
        The normalized text, possibly empty.
    """
    collapsed = _WHITESPACE_RUN.sub(" ", text.lower())
    return _NON_WORD.sub("", collapsed).strip()


def split_words(normalized: str) -> list[str]:
    """Split already-normalized text into its whitespace-delimited words."""
    return [word for word in normalized.split() if word]
