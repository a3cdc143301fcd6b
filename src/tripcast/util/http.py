"""
Helpers for turning `requests` failures into short log/exception text.
"""

from __future__ import annotations

import requests

_BODY_LIMIT = 500


def format_request_exception(exc: requests.RequestException) -> str:
    """
    Describe a requests exception without leaking query-string API keys.

    HTTP errors include the status code and a truncated body; transport errors
    are reduced to their class name and message.
    """
    response = getattr(exc, "response", None)
    if response is not None:
        body = (response.text or "").strip()
        if len(body) > _BODY_LIMIT:
            body = body[:_BODY_LIMIT] + "..."
        return f"status={response.status_code} body={body}"
    return f"{type(exc).__name__}: {_strip_query(str(exc))}"


def _strip_query(message: str) -> str:
    """Drop anything after '?' in URLs embedded in the message."""
    parts = []
    for token in message.split(" "):
        if "://" in token and "?" in token:
            token = token.split("?", 1)[0]
        parts.append(token)
    return " ".join(parts)
