"""
BuilderSearch - Record search and ranking service for the AI Builder platform.

Example:
    >>> from buildersearch.domains.search import SearchRankingEngine
    >>> engine = SearchRankingEngine(store)
    >>> response = await engine.execute({"query": "red shoes", "limit": 5})
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
