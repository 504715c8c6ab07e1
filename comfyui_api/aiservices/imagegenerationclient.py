from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from ..requestbuilder import TimeoutType
from ..schemas import StartWorkflowRequest, Status

class ImageGenerationClient(ABC):
    """Abstract interface for a job based image generation client.

    Implementations submit a generation job and report its status. Callers
    poll :meth:`workflow_status` at an interval of their own choosing.
    """


    @abstractmethod
    def start_workflow(self, request: StartWorkflowRequest, *, timeout: Optional[TimeoutType] = None) -> Status:
        """Submit a generation job."""

    @abstractmethod
    def workflow_status(self, workflow_id: str, *, timeout: Optional[TimeoutType] = None) -> Status:
        """Fetch the status and outputs of a submitted job."""
