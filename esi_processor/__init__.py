"""Edge Side Includes processing for assembled HTML pages."""

from .config import ProcessorConfig, load_config
from .engine import DataProvider, ESIProcessor, FetchError, Fetcher, ProcessingState
from .logging_conf import SinkLogger, configure_logging

__all__ = [
    "DataProvider",
    "ESIProcessor",
    "FetchError",
    "Fetcher",
    "ProcessingState",
    "ProcessorConfig",
    "SinkLogger",
    "configure_logging",
    "load_config",
]
