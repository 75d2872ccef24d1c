# Market-data providers package for keyword volume and web research
from .base_provider import BaseProvider
from .dataforseo import DataForSEOProvider
from .tavily import TavilyProvider

__all__ = [
    "BaseProvider",
    "DataForSEOProvider",
    "TavilyProvider"
]
