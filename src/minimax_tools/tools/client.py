from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from .errors import APIError, NetworkError

_log = logging.getLogger(__name__)

SEARCH_PATH = "/v1/coding_plan/search"
VLM_PATH = "/v1/coding_plan/vlm"
API_SOURCE = "Minimax-MCP"


def http_client(
    timeout: float | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Short-lived client; httpx's default timeout applies unless *timeout* is set."""
    kwargs: dict[str, Any] = {"follow_redirects": True}
    if timeout is not None:
        kwargs["timeout"] = timeout
    if transport is not None:
        kwargs["transport"] = transport
    return httpx.AsyncClient(**kwargs)


@dataclass(slots=True)
class SearchResult:
    title: str
    link: str
    snippet: str
    date: str | None = None

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "SearchResult":
        return cls(
            title=str(raw.get("title") or ""),
            link=str(raw.get("link") or ""),
            snippet=str(raw.get("snippet") or ""),
            date=raw.get("date") or None,
        )


@dataclass(slots=True)
class SearchResponse:
    organic: list[SearchResult] = field(default_factory=list)
    related_searches: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "SearchResponse":
        raw_organic = raw.get("organic")
        raw_related = raw.get("related_searches")
        if not isinstance(raw_organic, list):
            raw_organic = []
        if not isinstance(raw_related, list):
            raw_related = []
        organic = [SearchResult.from_dict(r) for r in raw_organic if isinstance(r, dict)]
        related = [
            str(rs["query"])
            for rs in raw_related
            if isinstance(rs, dict) and rs.get("query")
        ]
        return cls(organic=organic, related_searches=related)


@dataclass(slots=True)
class VisionResponse:
    content: str = ""

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "VisionResponse":
        return cls(content=str(raw.get("content") or ""))


class MiniMaxClient:
    """Bindings for the MiniMax Coding Plan search and VLM endpoints."""

    def __init__(
        self,
        api_key: str,
        api_host: str,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.api_host = api_host.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "MM-API-Source": API_SOURCE,
        }

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.api_host}{path}"
        _log.debug("POST %s", url)
        try:
            async with http_client(self._timeout, self._transport) as client:
                response = await client.post(url, json=payload, headers=self._headers())
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise NetworkError(f"MiniMax request failed for {path}: {exc}", cause=exc) from exc

        if not response.is_success:
            raise NetworkError(
                f"MiniMax API error ({response.status_code}): {response.text}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise APIError(f"MiniMax API returned invalid JSON for {path}", cause=exc) from exc
        if not isinstance(body, dict):
            raise APIError(f"MiniMax API returned unexpected payload for {path}")

        base_resp = body.get("base_resp") or {}
        if not isinstance(base_resp, dict):
            raise APIError(f"MiniMax API returned a malformed base_resp for {path}: {base_resp!r}")
        status_code = base_resp.get("status_code", 0)
        if status_code != 0:
            raise APIError(
                f"MiniMax API error ({status_code}): {base_resp.get('status_msg', '')}",
                status_code=status_code,
            )
        return body

    async def search(self, query: str) -> SearchResponse:
        body = await self._post(SEARCH_PATH, {"q": query})
        return SearchResponse.from_dict(body)

    async def understand_image(self, image_url: str, prompt: str) -> VisionResponse:
        body = await self._post(VLM_PATH, {"image_url": image_url, "prompt": prompt})
        return VisionResponse.from_dict(body)
