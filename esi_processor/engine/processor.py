"""Depth-bounded resolution of ``<esi:include>`` directives."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Mapping

import httpx
import structlog

from ..config.models import ProcessorConfig
from ..logging_conf import SinkLogger
from .provider import DataProvider
from .scanner import IncludeDirective, find_include_tags, has_include_tag, splice


@dataclass(slots=True)
class ProcessingState:
    """Bookkeeping for one top-level :meth:`ESIProcessor.process` call."""

    current_depth: int = 0
    passes: int = 0
    included: int = 0
    failed: int = 0
    dropped: int = 0


class ESIProcessor:
    """Fetch and inline every include directive of an HTML document.

    Each pass scans the document, fetches all directives of that pass
    concurrently and rebuilds the document from the literal gaps and the
    fetched bodies. Passes repeat while fetched content introduces new
    directives. Once the depth exceeds ``max_depth`` the remaining directives
    are removed instead of fetched.
    """

    def __init__(self, config: ProcessorConfig | None = None, **options: Any) -> None:
        if config is None:
            config = ProcessorConfig(**options)
        elif options:
            config = ProcessorConfig(**{**dict(config), **options})
        self.config = config
        self.logger = SinkLogger(config.log_to)
        self.data_provider = config.data_provider or DataProvider(
            base_url=config.base_url,
            cache=config.cache,
            fetch_client=config.fetch_client,
            timeout=config.timeout,
        )
        self._log = structlog.get_logger("esi_processor.engine")

    @property
    def max_depth(self) -> int:
        return self.config.max_depth

    find_include_tags = staticmethod(find_include_tags)
    has_include_tag = staticmethod(has_include_tag)

    async def process(
        self,
        html: str,
        headers: Mapping[str, str] | None = None,
        state: ProcessingState | None = None,
    ) -> str:
        """Return ``html`` with every include directive resolved.

        ``headers`` are sent, on top of the configured defaults, with every
        fragment request issued for this call. Failed fragments never fail
        the call; see :meth:`handle_error`.
        """

        state = state if state is not None else ProcessingState()
        merged = httpx.Headers(self.config.headers)
        merged.update(headers or {})
        request_headers = dict(merged.items()) or None
        directives = find_include_tags(html)
        while directives:
            state.passes += 1
            if state.current_depth > self.max_depth:
                for directive in directives:
                    self.logger.write(f"ESI max depth exceeded, dropping include: {directive.src}\n")
                state.dropped += len(directives)
                html = splice(html, directives, [""] * len(directives))
                break
            replacements = await asyncio.gather(
                *(self._include_contents(directive, request_headers, state) for directive in directives)
            )
            html = splice(html, directives, list(replacements))
            directives = find_include_tags(html)
            if directives:
                state.current_depth += 1

        self._log.debug(
            "process_complete",
            depth=state.current_depth,
            passes=state.passes,
            included=state.included,
            failed=state.failed,
            dropped=state.dropped,
        )
        return html

    def process_sync(
        self,
        html: str,
        headers: Mapping[str, str] | None = None,
        state: ProcessingState | None = None,
    ) -> str:
        """Synchronous wrapper for :meth:`process`."""
        return asyncio.run(self.process(html, headers=headers, state=state))

    async def _include_contents(
        self,
        directive: IncludeDirective,
        headers: Mapping[str, str] | None,
        state: ProcessingState,
    ) -> str:
        url = self.data_provider.to_fully_qualified_url(directive.src)
        try:
            response = await self.data_provider.get(url, headers=headers)
        except Exception as exc:  # noqa: BLE001
            state.failed += 1
            self.logger.write(f"ESI include failed: {url}: {exc}\n")
            return self.handle_error(url, exc)
        state.included += 1
        return response.body

    def handle_error(self, src: str, error: Exception) -> str:
        """Return the substitution for a failed include.

        ``on_error`` receives the resolved URL and the error; a string result
        is used as-is, anything else (or no handler) yields ``""``.
        """

        on_error = self.config.on_error
        if on_error is None:
            return ""
        try:
            result = on_error(src, error)
        except Exception as exc:  # noqa: BLE001
            self._log.warning("on_error_failed", url=src, error=str(exc))
            return ""
        return result if isinstance(result, str) else ""


__all__ = ["ESIProcessor", "ProcessingState"]
