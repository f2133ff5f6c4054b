from __future__ import annotations

from .client import SearchResponse, SearchResult


def format_search_results(query: str, results: list[SearchResult], related: list[str]) -> str:
    lines = [f'## Web Search Results: "{query}"', ""]
    for r in results:
        lines.append(f"### {r.title}")
        lines.append(f"- **URL:** {r.link}")
        lines.append(f"- **Snippet:** {r.snippet}")
        if r.date:
            lines.append(f"- **Date:** {r.date}")
        lines.append("")
    if related:
        lines.append("## Related Searches")
        lines.append("")
        lines.extend(f"- {q}" for q in related)
    return "\n".join(lines) + "\n"


def format_search_response(query: str, response: SearchResponse, limit: int | None = None) -> str:
    results = response.organic if limit is None else response.organic[:limit]
    return format_search_results(query, results, response.related_searches)


def format_image_analysis(content: str) -> str:
    return f"## Image Analysis\n\n{content}"


def format_error(title: str, message: str) -> str:
    return f"❌ **{title}:**\n\n{message}"
