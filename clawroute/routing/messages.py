"""Helpers for OpenAI-shaped chat requests."""

from __future__ import annotations

from typing import Any, Callable, Mapping


def latest_user_index(request: Mapping[str, Any]) -> int | None:
    """Index of the last user turn in request["messages"], if any."""
    messages = request.get("messages")
    if not isinstance(messages, list):
        return None
    for idx in range(len(messages) - 1, -1, -1):
        message = messages[idx]
        if isinstance(message, Mapping) and message.get("role") == "user":
            return idx
    return None


def content_text(content: Any) -> str:
    """Normalize provider-specific content payloads into plain text."""
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts: list[str] = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
                continue
            if isinstance(part, Mapping) and part.get("type", "text") == "text":
                text = part.get("text")
                if isinstance(text, str):
                    parts.append(text)
        return "\n".join(parts)
    return ""


def rewrite_content(content: Any, rewrite: Callable[[str], str]) -> Any:
    """Apply rewrite to every text part of a message content payload."""
    if isinstance(content, str):
        return rewrite(content)
    if isinstance(content, list):
        rewritten: list[Any] = []
        for part in content:
            if isinstance(part, str):
                rewritten.append(rewrite(part))
            elif isinstance(part, dict) and part.get("type", "text") == "text" and isinstance(
                part.get("text"), str
            ):
                rewritten.append({**part, "text": rewrite(part["text"])})
            else:
                rewritten.append(part)
        return rewritten
    return content
