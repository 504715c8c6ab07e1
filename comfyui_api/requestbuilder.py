"""Builds outgoing ComfyUI API requests from a sequence of request options.

Each option receives the shared :class:`RequestDraft` and either updates it or
raises. Options run in the order given and the first exception aborts the
build, so later options never see a half-configured draft.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union
from urllib.parse import quote

import httpx
from pydantic import BaseModel

# Timeout can be a single float (seconds) or a fully specified httpx.Timeout.
TimeoutType = Union[float, httpx.Timeout]

_PATH_SAFE = "/:@!$&'()*+,;="


@dataclass
class RequestDraft:
    """Mutable request state shared by the request options."""

    base_url: str
    url: str
    method: str = "GET"
    content: Optional[bytes] = None


RequestOption = Callable[[RequestDraft], None]


def _parse_base_url(base_url: str) -> httpx.URL:
    url = httpx.URL(base_url)
    if url.scheme not in ("http", "https") or not url.host:
        raise httpx.InvalidURL(f"Invalid base URL {base_url!r}: expected an absolute http(s) URL")
    return url


def _clean_path(path: str) -> str:
    parts: list[str] = []
    for part in path.split("/"):
        if part in ("", "."):
            continue
        if part == "..":
            if parts:
                parts.pop()
            continue
        parts.append(part)
    return "/" + "/".join(parts)


def join_path(base_url: str, *segments: str) -> str:
    """
    Join path segments onto the path of ``base_url``.

    Duplicate slashes are collapsed and ``.``/``..`` segments are resolved
    (never above the root). A trailing slash on the last segment is kept.
    Segments are percent-encoded.

    Raises:
        httpx.InvalidURL: The base URL is malformed or a segment contains
            non-printable characters.
        TypeError: A segment is not a string.
    """
    url = _parse_base_url(base_url)
    for segment in segments:
        if not isinstance(segment, str):
            raise TypeError(f"Path segment must be str, not {type(segment).__name__}")
        if any(char.isascii() and not char.isprintable() for char in segment):
            raise httpx.InvalidURL(f"Invalid non-printable ASCII character in path segment {segment!r}")

    path = _clean_path("/".join([url.path, *segments]))
    if segments and segments[-1].endswith("/") and not path.endswith("/"):
        path += "/"
    return str(url.copy_with(path=quote(path, safe=_PATH_SAFE)))


def with_path(*segments: str) -> RequestOption:
    """Target ``<base_url>/<segments...>`` instead of the bare base URL."""

    def _apply(draft: RequestDraft) -> None:
        draft.url = join_path(draft.base_url, *segments)

    return _apply


def with_body_json(payload: Any) -> RequestOption:
    """Send ``payload`` as a JSON body with the POST method.

    Models that embed raw JSON fragments provide their own ``to_json()``;
    other models go through ``model_dump_json()``. Plain values reject NaN
    and Infinity since they are not valid JSON.
    """

    def _apply(draft: RequestDraft) -> None:
        if isinstance(payload, BaseModel):
            to_json = getattr(payload, "to_json", None)
            body = to_json() if callable(to_json) else payload.model_dump_json()
        else:
            body = json.dumps(payload, allow_nan=False)
        draft.content = body.encode("utf-8")
        draft.method = "POST"

    return _apply


def new_request(
    base_url: str,
    *options: RequestOption,
    api_token: Optional[str] = None,
    timeout: Optional[TimeoutType] = None,
) -> httpx.Request:
    """
    Build a JSON request against ``base_url``.

    Args:
        base_url: ComfyUI API base URL.
        *options: Request options, applied in order.
        api_token: Sent as a Bearer token when non-empty.
        timeout: Per-request deadline handed to the transport unchanged. When
            omitted the transport's own timeout applies.

    Returns:
        httpx.Request: The request, ready to be sent.
    """
    _parse_base_url(base_url)
    draft = RequestDraft(base_url=base_url, url=base_url)
    for option in options:
        option(draft)

    headers = {
        "Accept": "application/json",
        "Content-Type": "application/json",
    }
    if api_token:
        headers["Authorization"] = f"Bearer {api_token}"

    extensions = {}
    if timeout is not None:
        extensions["timeout"] = httpx.Timeout(timeout).as_dict()

    return httpx.Request(
        draft.method,
        draft.url,
        content=draft.content,
        headers=headers,
        extensions=extensions,
    )
