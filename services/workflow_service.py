"""WorkflowService for running the notes-formatting workflow on the Scout API.

The workflow is an LLM pipeline hosted by Scout. This service only starts a
run and hands back the raw response; classification of the output lives in
the normalizer.
"""
import os
import time
import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from models.normalized_result import loads_strict

logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "https://api.scoutos.com"
DEFAULT_TIMEOUT_SECONDS = 300.0


class WorkflowServiceError(Exception):
    """Raised when the workflow API cannot be reached or returns an error."""
    pass


class WorkflowTimeoutError(WorkflowServiceError):
    """Raised when the workflow run exceeds the configured timeout."""
    pass


class WorkflowResponseError(WorkflowServiceError):
    """Raised when the workflow response has no run state at all."""
    pass


@dataclass
class WorkflowOutput:
    """Output extracted from a workflow run.

    Attributes:
        value: The raw output (string or parsed object)
        source: Which response path produced it: "llm", "json_output" or "fallback"
    """
    value: Any
    source: str


def extract_output(response: dict) -> WorkflowOutput:
    """
    Pull the formatted notes out of a workflow run response.

    The workflow exposes its result under ``run.state.llm.output`` (text
    output) or ``run.state.json_output.output`` (structured output). When
    neither is present, the whole response is handed back so the user still
    sees something.

    Args:
        response: Parsed JSON body of the workflow run

    Returns:
        WorkflowOutput with the extracted value and its source path

    Raises:
        WorkflowResponseError: If the response has no ``run.state``
    """
    run = response.get("run") if isinstance(response, dict) else None
    state = run.get("state") if isinstance(run, dict) else None

    if not state or not isinstance(state, dict):
        logger.warning("No state found in workflow response")
        raise WorkflowResponseError("Response missing state")

    llm = state.get("llm")
    if isinstance(llm, dict) and llm.get("output"):
        return WorkflowOutput(value=llm["output"], source="llm")

    json_output = state.get("json_output")
    if isinstance(json_output, dict) and json_output.get("output"):
        return WorkflowOutput(value=json_output["output"], source="json_output")

    state_keys = [
        key for key in state.keys()
        if not key.startswith("__") and key != "inputs"
    ]
    logger.warning(
        f"Could not extract formatted notes. Available state keys: {state_keys}"
    )
    return WorkflowOutput(value=response, source="fallback")


class WorkflowService:
    """Service for executing the notes-formatting workflow."""

    def __init__(self, timeout: Optional[float] = None):
        """Initialize with Scout API credentials from environment."""
        api_key = os.getenv("SCOUT_API_KEY")
        if not api_key:
            raise ValueError("SCOUT_API_KEY environment variable is required")

        workflow_id = os.getenv("SCOUT_WORKFLOW_ID")
        if not workflow_id:
            raise ValueError("SCOUT_WORKFLOW_ID environment variable is required")

        self.api_key = api_key
        self.workflow_id = workflow_id
        self.base_url = os.getenv("SCOUT_API_BASE_URL", DEFAULT_API_BASE_URL).rstrip("/")
        self.timeout = timeout or float(
            os.getenv("WORKFLOW_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS)
        )
        logger.info(
            f"WorkflowService initialized: workflow_id={self.workflow_id}, "
            f"timeout={self.timeout:.0f}s"
        )

    @property
    def run_url(self) -> str:
        return f"{self.base_url}/v2/workflows/{self.workflow_id}/execute"

    async def run_workflow(self, raw_notes: str) -> dict:
        """
        Run the workflow on a set of raw notes.

        No cancellation is sent upstream: if the caller gives up, the run
        keeps going on the Scout side.

        Args:
            raw_notes: The notes exactly as the user typed them

        Returns:
            Parsed JSON body of the workflow run

        Raises:
            WorkflowTimeoutError: If the run exceeds the configured timeout
            WorkflowServiceError: On any other transport or HTTP failure
        """
        logger.info(f"Calling workflow: workflow_id={self.workflow_id}, notes_length={len(raw_notes)}")
        start_time = time.monotonic()

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self.run_url,
                    json={"inputs": {"raw_notes": raw_notes}},
                    headers={
                        "Authorization": f"Bearer {self.api_key}",
                        "Content-Type": "application/json",
                    },
                )
        except httpx.TimeoutException as e:
            logger.error(f"Workflow timed out after {self.timeout:.0f}s: {e}")
            raise WorkflowTimeoutError(
                f"Workflow did not finish within {self.timeout:.0f} seconds"
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Workflow request failed: {type(e).__name__}: {e}", exc_info=True)
            raise WorkflowServiceError(f"Could not reach workflow API: {e}") from e

        elapsed = time.monotonic() - start_time
        logger.info(
            f"Workflow completed in {elapsed:.2f} seconds: status={response.status_code}"
        )

        if response.status_code >= 400:
            raise WorkflowServiceError(
                f"Workflow API returned HTTP {response.status_code}: {response.text[:200]}"
            )

        try:
            return loads_strict(response.text)
        except ValueError as e:
            raise WorkflowServiceError("Workflow API returned a non-JSON body") from e
