# aiservices/comfyuiclient.py
from __future__ import annotations

from typing import Optional

import httpx

from ..config import Settings, get_settings
from ..dispatcher import dispatch, get_default_http_client
from ..requestbuilder import RequestOption, TimeoutType, new_request, with_body_json, with_path
from ..schemas import StartWorkflowRequest, Status
from .imagegenerationclient import ImageGenerationClient


class ComfyUIClient(ImageGenerationClient):
    """
    Client for the ComfyUI generation API.

    Every call is a single request against the remote service: nothing is
    cached, retried or polled. The attributes may be reassigned by the owner
    between calls.
    """

    def __init__(
        self,
        base_url: str,
        api_token: Optional[str] = None,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        # Usually ends with /api.
        self.base_url = base_url
        # Used for Bearer authentication when set.
        self.api_token = api_token
        # Falls back to the shared default client when None.
        self.http_client = http_client

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.Client] = None,
    ) -> "ComfyUIClient":
        settings = settings or get_settings()
        return cls(
            settings.base_url,
            api_token=settings.api_token.get_secret_value() or None,
            http_client=http_client,
        )

    # --- Generation API -------------------------------------------------------

    def start_workflow(self, request: StartWorkflowRequest, *, timeout: Optional[TimeoutType] = None) -> Status:
        http_request = self._new_request(with_path("payload"), with_body_json(request), timeout=timeout)
        return dispatch(self._client(), http_request, Status)

    def workflow_status(self, workflow_id: str, *, timeout: Optional[TimeoutType] = None) -> Status:
        http_request = self._new_request(with_path("result", workflow_id), timeout=timeout)
        return dispatch(self._client(), http_request, Status)

    # --- Internals ------------------------------------------------------------

    def _client(self) -> httpx.Client:
        if self.http_client is not None:
            return self.http_client
        return get_default_http_client()

    def _new_request(self, *options: RequestOption, timeout: Optional[TimeoutType] = None) -> httpx.Request:
        return new_request(self.base_url, *options, api_token=self.api_token, timeout=timeout)
