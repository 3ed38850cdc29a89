"""Engine components orchestrating scan → resolve → fetch → splice."""

from .dedup import InFlightRequests
from .fetcher import FetchClient, FetchError, FetchRequest, FetchResponse, Fetcher
from .processor import ESIProcessor, ProcessingState
from .provider import DataProvider
from .resolver import to_fully_qualified_url
from .scanner import IncludeDirective, extract_src, find_include_tags, has_include_tag

__all__ = [
    "DataProvider",
    "ESIProcessor",
    "FetchClient",
    "FetchError",
    "FetchRequest",
    "FetchResponse",
    "Fetcher",
    "InFlightRequests",
    "IncludeDirective",
    "ProcessingState",
    "extract_src",
    "find_include_tags",
    "has_include_tag",
    "to_fully_qualified_url",
]
