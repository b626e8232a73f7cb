"""songmatch - find the songs in an artist's catalog that match a lyric fragment."""

__version__ = "0.1.0"
