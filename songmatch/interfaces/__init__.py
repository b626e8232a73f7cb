"""Abstract interfaces for pluggable songmatch providers."""

from songmatch.interfaces.cache_provider import ICacheProvider
from songmatch.interfaces.catalog_provider import ICatalogProvider

__all__ = ["ICacheProvider", "ICatalogProvider"]
