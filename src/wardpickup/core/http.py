"""
HTTP helpers.

This module centralizes the minimal HTTP client logic used by outbound collaborators
(currently the credit ledger).

Design goals:
- Small surface area (one long-lived client, POST JSON).
- Deterministic defaults (timeout + User-Agent).
- Raise on non-2xx so callers can decide how to fail.
"""

from __future__ import annotations

from typing import Any

import httpx


DEFAULT_USER_AGENT = "wardpickup/0.1.0 (+https://local)"


def build_client(
    base_url: str,
    *,
    headers: dict[str, str] | None = None,
    timeout_seconds: float = 10,
) -> httpx.Client:
    """Create a pooled client; the owner is responsible for `close()`."""
    request_headers = {"User-Agent": DEFAULT_USER_AGENT}
    if headers:
        request_headers.update(headers)
    return httpx.Client(base_url=base_url, headers=request_headers, timeout=timeout_seconds)


def post_json(client: httpx.Client, path: str, *, payload: dict[str, Any]) -> Any:
    """POST `payload` as JSON and return the decoded response (None for empty bodies).

    Raises:
        httpx.HTTPError: On transport errors or non-2xx status codes.
        ValueError: If a non-empty response body is not valid JSON.
    """
    resp = client.post(path, json=payload)
    resp.raise_for_status()
    if not resp.content:
        return None
    return resp.json()
