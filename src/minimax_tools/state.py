from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class ToolResult:
    content: list[dict[str, Any]]
    details: dict[str, Any] = field(default_factory=dict)
    is_error: bool = False

    @classmethod
    def text(cls, text: str, details: dict[str, Any] | None = None, *, is_error: bool = False) -> "ToolResult":
        return cls(content=[{"type": "text", "text": text}], details=details or {}, is_error=is_error)

    @property
    def text_content(self) -> str:
        return "\n".join(b.get("text", "") for b in self.content if b.get("type") == "text")

    def as_mcp_result(self) -> dict[str, Any]:
        return {
            "content": self.content,
            "structuredContent": self.details,
            "isError": self.is_error,
        }
