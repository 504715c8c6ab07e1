"""Pydantic models describing the ComfyUI generation API wire format."""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_serializer


class HandlerType(str, Enum):
    """Tells the remote worker how to interpret the submitted payload."""

    RAW_WORKFLOW = "RawWorkflow"


class StatusType(str, Enum):
    """Known generation statuses.

    The service may report statuses this client does not know about yet;
    those map to ``UNKNOWN`` instead of failing.
    """

    PENDING = "pending"
    SUCCESS = "success"
    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value: object) -> "StatusType":
        return cls.UNKNOWN


# ---- Request models ----------------------------------------------------


class FeatureToggle(BaseModel):
    """Empty marker object. Only its presence in the payload matters."""


class Webhook(BaseModel):
    url: str = Field(..., description="URL invoked by the remote service once the generation finishes")
    extra_params: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Free-form parameters forwarded to the webhook",
    )

    @model_serializer(mode="wrap")
    def omit_empty_params(self, handler):
        data = handler(self)
        if not data.get("extra_params"):
            data.pop("extra_params", None)
        return data


class WorkflowInput(BaseModel):
    request_id: Optional[str] = Field(
        default=None,
        description=(
            "Namespaces the generated files, e.g. results for request ID '1234' land under "
            "<bucket>/1234/<filename>. The service generates a UUID when omitted."
        ),
    )
    handler: HandlerType = Field(default=HandlerType.RAW_WORKFLOW)
    gcp: Optional[FeatureToggle] = None
    modifiers: Optional[FeatureToggle] = None
    workflow_json: str = Field(
        default="null",
        description="Raw JSON text of the ComfyUI workflow, embedded into the payload byte for byte",
    )
    webhook: Optional[Webhook] = None

    @model_serializer(mode="wrap")
    def omit_unset_fields(self, handler):
        data = handler(self)
        if not data.get("request_id"):
            data.pop("request_id", None)
        for key in ("gcp", "modifiers", "webhook"):
            if data.get(key) is None:
                data.pop(key, None)
        return data

    def to_json(self) -> str:
        # workflow_json is spliced in verbatim: numbers, key order and duplicate keys survive untouched.
        fields = self.model_dump(mode="json")
        fields.pop("workflow_json", None)
        members = [f"{json.dumps(key)}:{json.dumps(value, allow_nan=False)}" for key, value in fields.items()]
        members.append(f'"workflow_json":{self.workflow_json}')
        return "{" + ",".join(members) + "}"


class StartWorkflowRequest(BaseModel):
    input: WorkflowInput

    def to_json(self) -> str:
        """Encode the request with the workflow embedded as raw JSON."""
        return '{"input":' + self.input.to_json() + "}"


# ---- Response models ---------------------------------------------------


class OutputURLs(BaseModel):
    gcp_url: Optional[str] = Field(default=None, description="GET-signed URL on GCP storage, valid for 7 days")
    s3_url: Optional[str] = Field(default=None, description="GET-signed URL on S3 storage, valid for 7 days")
    # Deprecated: superseded by s3_url and gcp_url.
    url: Optional[str] = Field(default=None, description="Deprecated GET-signed URL, use s3_url instead")


class OutputItem(OutputURLs):
    local_path: Optional[str] = Field(default=None, description="Path of the artifact on the worker")


class Status(BaseModel):
    id: str = ""
    message: str = ""
    status: str = Field(default="", description="Generation status, e.g. 'pending' or 'success'")
    comfyui_response: Any = Field(default=None, description="Raw response of the ComfyUI server")
    output: List[OutputItem] = Field(default_factory=list)

    @field_validator("output", mode="before")
    @classmethod
    def null_output_is_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def status_type(self) -> StatusType:
        return StatusType(self.status)

    @property
    def is_pending(self) -> bool:
        return self.status_type is StatusType.PENDING

    @property
    def is_success(self) -> bool:
        return self.status_type is StatusType.SUCCESS


# ---- Start request construction ----------------------------------------

StartWorkflowOption = Callable[[StartWorkflowRequest], None]


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Invalid JSON constant {name!r} in workflow")


def start_with_request_id(request_id: str) -> StartWorkflowOption:
    """Set the caller supplied request ID."""

    def _apply(request: StartWorkflowRequest) -> None:
        request.input.request_id = request_id

    return _apply


def start_with_webhook(url: str, extra_params: Optional[Dict[str, Any]] = None) -> StartWorkflowOption:
    """Ask the service to call ``url`` once the generation finishes."""

    def _apply(request: StartWorkflowRequest) -> None:
        request.input.webhook = Webhook(url=url, extra_params=extra_params)

    return _apply


def new_start_workflow_request(workflow: Any, *options: StartWorkflowOption) -> StartWorkflowRequest:
    """
    Build a start request for a raw ComfyUI workflow.

    Args:
        workflow: The workflow either as raw JSON text (str or bytes) or as a
            JSON-serialisable value. Raw text is only checked for well-formedness
            and is sent exactly as given; values are encoded once.
        *options: Applied in order after the defaults are set.

    Returns:
        StartWorkflowRequest: Request with the RawWorkflow handler and both
        feature markers present.

    Raises:
        ValueError: The text is not well-formed JSON (``json.JSONDecodeError``),
            or contains NaN/Infinity.
    """
    if isinstance(workflow, (bytes, bytearray)):
        workflow = bytes(workflow).decode("utf-8")
    if isinstance(workflow, str):
        json.loads(workflow, parse_constant=_reject_constant)
        raw_workflow = workflow
    else:
        raw_workflow = json.dumps(workflow, allow_nan=False)

    request = StartWorkflowRequest(
        input=WorkflowInput(
            handler=HandlerType.RAW_WORKFLOW,
            workflow_json=raw_workflow,
            gcp=FeatureToggle(),
            modifiers=FeatureToggle(),
        )
    )
    for option in options:
        option(request)
    return request
