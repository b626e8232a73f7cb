"""Command-line tools for songmatch."""
