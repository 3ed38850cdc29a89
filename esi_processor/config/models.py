"""Pydantic models describing processor configuration."""

from __future__ import annotations

from typing import Any, Callable, Optional
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, field_validator

ErrorHandler = Callable[[str, Exception], Any]


class ProcessorConfig(BaseModel):
    """Immutable settings owned by one :class:`ESIProcessor`."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    base_url: Optional[str] = None
    max_depth: int = 3
    on_error: Optional[ErrorHandler] = None
    # Object exposing ``to_fully_qualified_url(src)`` and ``async get(src, headers)``
    data_provider: Any = None
    # Object exposing ``async get(url, headers=None, timeout=None)``
    fetch_client: Any = None
    cache: bool = True
    timeout: float = 15.0
    headers: dict[str, str] = Field(default_factory=dict)
    # Any object with ``write(str)``
    log_to: Any = None

    @field_validator("base_url", mode="before")
    @classmethod
    def _validate_base_url(cls, value: Any) -> Optional[str]:
        if value in (None, ""):
            return None
        text = str(value).strip()
        parts = urlsplit(text)
        if not (parts.scheme and parts.netloc):
            raise ValueError(f"base_url must be an absolute URL: {text!r}")
        return text

    @field_validator("max_depth")
    @classmethod
    def _validate_max_depth(cls, value: int) -> int:
        if value < 0:
            raise ValueError("max_depth must be >= 0")
        return value

    @field_validator("timeout")
    @classmethod
    def _validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout must be > 0")
        return value

    @field_validator("headers", mode="before")
    @classmethod
    def _coerce_headers(cls, value: Any) -> dict[str, str]:
        if value in (None, ""):
            return {}
        if not isinstance(value, dict):
            raise ValueError("headers expects a mapping of names to values")
        return {str(key): str(item) for key, item in value.items()}

    @field_validator("log_to")
    @classmethod
    def _validate_sink(cls, value: Any) -> Any:
        if value is not None and not callable(getattr(value, "write", None)):
            raise ValueError("log_to must provide a write(message) method")
        return value


__all__ = ["ErrorHandler", "ProcessorConfig"]
