"""Configuration package exports."""

from .loader import CONFIG_EXTENSIONS, load_config
from .models import ErrorHandler, ProcessorConfig

__all__ = [
    "CONFIG_EXTENSIONS",
    "ErrorHandler",
    "ProcessorConfig",
    "load_config",
]
