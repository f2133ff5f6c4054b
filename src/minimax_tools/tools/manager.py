from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from enum import Enum

import httpx

from ..config import AppConfig
from ..state import ToolResult
from .client import MiniMaxClient
from .errors import MiniMaxError
from .formatting import format_error, format_image_analysis, format_search_response
from .image import ImageResolver

_log = logging.getLogger(__name__)

DEFAULT_IMAGE_PROMPT = "Describe this image in detail"
MIN_RESULTS = 1
MAX_RESULTS = 20

UpdateCallback = Callable[[ToolResult], Awaitable[None]]


class ToolName(str, Enum):
    WEB_SEARCH = "web_search"
    UNDERSTAND_IMAGE = "understand_image"


class ToolManager:
    def __init__(
        self,
        config: AppConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._transport = transport
        self.resolver = ImageResolver(timeout=config.timeout, transport=transport)

    def _client(self) -> MiniMaxClient:
        return MiniMaxClient(
            self.config.require_api_key(),
            self.config.api_host,
            timeout=self.config.timeout,
            transport=self._transport,
        )

    @staticmethod
    def _failure(title: str, exc: MiniMaxError, **details: object) -> ToolResult:
        _log.warning("%s (%s): %s", title, exc.kind.value, exc.message)
        return ToolResult.text(
            format_error(title, exc.message),
            {"error": exc.message, "kind": exc.kind.value, **details},
            is_error=True,
        )

    async def run_web_search(
        self,
        query: str,
        num_results: int | None = None,
        on_update: UpdateCallback | None = None,
    ) -> ToolResult:
        """Search the web; returns markdown results or an error result."""
        try:
            client = self._client()
        except MiniMaxError as exc:
            return self._failure("Search Error", exc, query=query)

        limit = None
        if num_results is not None:
            limit = max(MIN_RESULTS, min(int(num_results), MAX_RESULTS))

        if on_update is not None:
            await on_update(ToolResult.text(
                f'Searching: "{query}"...',
                {"status": "searching", "query": query},
            ))

        try:
            response = await client.search(query)
        except MiniMaxError as exc:
            return self._failure("Search Error", exc, query=query)

        shown = response.organic if limit is None else response.organic[:limit]
        _log.info("web_search %r: %d result(s)", query, len(shown))
        return ToolResult.text(
            format_search_response(query, response, limit),
            {"query": query, "result_count": len(shown)},
        )

    async def run_understand_image(
        self,
        image: str,
        prompt: str | None = None,
        on_update: UpdateCallback | None = None,
    ) -> ToolResult:
        """Resolve *image* to a data URL and ask the vision model about it."""
        prompt = prompt or DEFAULT_IMAGE_PROMPT
        try:
            client = self._client()
        except MiniMaxError as exc:
            return self._failure("Image Analysis Error", exc, image=image)

        if on_update is not None:
            await on_update(ToolResult.text(
                "Analyzing image...",
                {"status": "analyzing", "image": image},
            ))

        try:
            data_url = await self.resolver.resolve(image)
            response = await client.understand_image(data_url, prompt)
        except MiniMaxError as exc:
            return self._failure("Image Analysis Error", exc, image=image)

        _log.info("understand_image %s: %d char(s)", image[:80], len(response.content))
        return ToolResult.text(
            format_image_analysis(response.content),
            {"image": image, "prompt": prompt},
        )
