"""Language assistant webhook endpoints.

For a stage-by-stage map see
`langassist.pipelines.assist.flow.PipelineOrchestrator.describe`. The POST
`/webhook/langassist` endpoint performs:

1. Connectivity probe short-circuit (`ping`).
2. Discriminator resolution and field validation for the selected flow.
3. Delegation to the orchestrator, which runs the upload, transcription,
   processing and synthesis stages that flow needs.
"""

import logging
from typing import Any, Union

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from langassist.controllers.dependencies import OrchestratorDep, SettingsDep
from langassist.middleware import request_id_for
from langassist.pipelines.assist import (
    build_assist_request,
    is_ping,
    read_submission,
)
from langassist.pipelines.assist.ingestion import resolve_section
from langassist.views import (
    ErrorResponse,
    PracticeModeResponse,
    StatusResponse,
    VoiceAssistantResponse,
)

router = APIRouter(prefix="/webhook/langassist", tags=["langassist"])

logger = logging.getLogger(__name__)

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "Missing or invalid request fields"},
    499: {"model": ErrorResponse, "description": "Client disconnected mid-pipeline"},
    502: {"model": ErrorResponse, "description": "An upstream service failed"},
    504: {"model": ErrorResponse, "description": "Transcription did not finish in time"},
}


@router.get("", response_model=StatusResponse)
async def server_status() -> StatusResponse:
    """Report that the webhook is reachable."""

    return StatusResponse(status="ok", message="Server is running")


@router.post("/test", response_model=StatusResponse)
async def connection_test() -> StatusResponse:
    return StatusResponse(status="ok", message="Connection successful")


@router.post(
    "",
    response_model=Union[str, VoiceAssistantResponse, PracticeModeResponse],
    responses=_ERROR_RESPONSES,
)
async def langassist(
    request: Request,
    orchestrator: OrchestratorDep,
    settings: SettingsDep,
) -> JSONResponse:
    """Run the Text Assist, Voice Assistant or Practice Mode flow."""

    submission = await read_submission(request)
    try:
        if is_ping(submission.fields):
            return JSONResponse(
                content=StatusResponse(status="ok", message="Connection successful").model_dump()
            )

        logger.info("Processing request for section: %s", resolve_section(submission.fields) or "Unknown")
        assist_request = await build_assist_request(
            submission,
            max_bytes=settings.max_request_bytes,
        )
    finally:
        await submission.close()

    body = await orchestrator.run(
        assist_request,
        is_cancelled=request.is_disconnected,
        request_id=request_id_for(request),
    )
    return JSONResponse(content=body)
