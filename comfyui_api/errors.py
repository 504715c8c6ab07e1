"""Errors raised by the ComfyUI generation API client."""

from __future__ import annotations


class ClientError(Exception):
    """The remote service answered with an HTTP status code >= 400.

    ``details`` holds the raw response body. The string form of the error is
    that body verbatim, so the service's own error message reaches the caller
    untouched. Bodies that are not valid UTF-8 are decoded with replacement
    characters; ``details`` always keeps the exact bytes.
    """

    def __init__(self, code: int, details: bytes = b"") -> None:
        self.code = code
        self.details = details
        super().__init__(code, details)

    def __str__(self) -> str:
        return self.details.decode("utf-8", errors="replace")

    def __repr__(self) -> str:
        return f"ClientError(code={self.code!r}, details={self.details!r})"
