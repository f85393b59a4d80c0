"""
Notes router for formatting raw notes and rendering the result.

Endpoints:
- POST /api/format: run the formatting workflow and normalize its output
- POST /api/render: render a formatting result as an HTML fragment
- POST /api/render/download: the structured record as a JSON attachment
"""

import logging
import uuid
from fastapi import APIRouter
from fastapi.responses import JSONResponse, Response

from models.format_request import (
    ErrorResponse,
    FormatRequest,
    FormatResponse,
    RenderRequest,
    RenderResponse,
)
from services.normalizer_service import normalize_workflow_output
from services.renderer_service import RenderError, render_result
from services.workflow_service import (
    WorkflowResponseError,
    WorkflowService,
    WorkflowServiceError,
    WorkflowTimeoutError,
    extract_output,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["notes"])


def error_response(status_code: int, error: str, message: str = None) -> JSONResponse:
    """Build the {error, message} envelope used by every notes endpoint."""
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, message=message).model_dump(),
    )


@router.post(
    "/format",
    response_model=FormatResponse,
    responses={400: {"model": ErrorResponse}, 502: {"model": ErrorResponse}, 504: {"model": ErrorResponse}},
)
async def format_notes(body: FormatRequest):
    """
    Format raw notes with the workflow and normalize the output.

    Args:
        body: FormatRequest with raw_notes

    Returns:
        FormatResponse with formatted_notes and is_structured, or an
        {error, message} body on failure
    """
    request_id = str(uuid.uuid4())
    logger.info(
        f"Received request to format notes: request_id={request_id}, "
        f"length={len(body.raw_notes)}"
    )

    try:
        workflow_service = WorkflowService()
        response = await workflow_service.run_workflow(body.raw_notes)
        output = extract_output(response)
        result = normalize_workflow_output(output)
    except WorkflowTimeoutError as e:
        logger.error(f"Workflow timed out: request_id={request_id}, error={e}")
        return error_response(504, "Workflow timed out", str(e))
    except WorkflowResponseError as e:
        logger.error(f"Invalid workflow response: request_id={request_id}, error={e}")
        return error_response(502, "Invalid response structure from workflow API", str(e))
    except WorkflowServiceError as e:
        logger.error(
            f"Workflow failed: request_id={request_id}, error={e}",
            exc_info=True
        )
        return error_response(502, "Failed to format notes", str(e))
    except Exception as e:
        logger.error(
            f"Error formatting notes: request_id={request_id}, "
            f"error={type(e).__name__}: {str(e)}",
            exc_info=True
        )
        return error_response(500, "Failed to format notes", str(e))

    logger.info(
        f"Format request complete: request_id={request_id}, source={output.source}, "
        f"is_structured={result.is_structured}, length={len(result.text)}"
    )

    return FormatResponse(
        formatted_notes=result.text,
        is_structured=result.is_structured
    )


@router.post("/render", response_model=RenderResponse)
async def render_notes(body: RenderRequest):
    """Render a formatting result for the result panel."""
    result = render_result(body.text, body.is_structured)
    logger.info(f"Rendered result: view={result.view}, html_length={len(result.html)}")
    return result.to_response()


@router.post(
    "/render/download",
    responses={422: {"model": ErrorResponse}},
)
async def download_notes(body: RenderRequest):
    """
    Return the structured record as a downloadable JSON file.

    Only results that render as a structured view can be downloaded.
    """
    result = render_result(body.text, body.is_structured)
    try:
        payload = result.download_payload()
    except RenderError as e:
        logger.warning(f"Download rejected: view={result.view}")
        return error_response(422, "Nothing to download", str(e))

    return Response(
        content=payload,
        media_type="application/json",
        headers={
            "Content-Disposition": f'attachment; filename="{result.download_filename}"'
        },
    )
