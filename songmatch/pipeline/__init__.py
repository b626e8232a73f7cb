"""Search coordination for the songmatch discovery pipeline."""

from songmatch.pipeline.search_coordinator import SearchCoordinator

__all__ = ["SearchCoordinator"]
