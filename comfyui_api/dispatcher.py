"""Sends built requests and decodes typed JSON responses."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional, Type, TypeVar

import httpx
from pydantic import BaseModel

from .errors import ClientError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def new_http_client(transport: Optional[httpx.BaseTransport] = None) -> httpx.Client:
    """Client configured like the shared default: no timeout, redirects followed."""
    # Deadlines are chosen per call by the caller.
    return httpx.Client(timeout=None, follow_redirects=True, transport=transport)


@lru_cache
def get_default_http_client() -> httpx.Client:
    return new_http_client()


def dispatch(http_client: httpx.Client, request: httpx.Request, response_model: Type[ModelT]) -> ModelT:
    """
    Send ``request`` once and decode the response body into ``response_model``.

    The response is always read and closed before returning, whatever the outcome.

    Args:
        http_client: Transport used to send the request.
        request: Request built by :func:`comfyui_api.requestbuilder.new_request`.
        response_model: Pydantic model describing the expected JSON body.

    Returns:
        The decoded model instance.

    Raises:
        ClientError: The service answered with a status code >= 400.
        pydantic.ValidationError: A successful response did not match ``response_model``.
        httpx.HTTPError: Transport failures, unchanged.
    """
    if "timeout" not in request.extensions:
        request.extensions["timeout"] = http_client.timeout.as_dict()

    logger.debug("Dispatching %s %s", request.method, request.url)
    response = http_client.send(request, stream=True)
    try:
        logger.debug("%s %s returned HTTP %s", request.method, request.url, response.status_code)
        if response.status_code >= 400:
            try:
                details = response.read()
            except httpx.HTTPError:
                details = b""
            raise ClientError(response.status_code, details)
        return response_model.model_validate_json(response.read())
    finally:
        response.close()
