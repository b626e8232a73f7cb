"""songmatch services: collection, caching and ranking."""
