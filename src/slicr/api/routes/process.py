"""Audio processing endpoint."""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, File, Form, UploadFile
from pydantic import ValidationError

from slicr.api.auth import verify_client
from slicr.api.deps import get_orchestrator
from slicr.api.schemas import ProcessResponse
from slicr.errors import ClientInputError
from slicr.models.request import InputSource, ProcessingRequest
from slicr.pipeline.orchestrator import PipelineOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter(tags=["process"], dependencies=[Depends(verify_client)])


def parse_params(raw: str | None) -> ProcessingRequest:
    """Parse the ``params`` form field into a request.

    Raises:
        ClientInputError: If the field is not a JSON object or fails validation
    """
    if raw is None or not raw.strip():
        return ProcessingRequest()

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ClientInputError(f"Invalid params JSON: {e.msg}") from e

    if not isinstance(data, dict):
        raise ClientInputError("params must be a JSON object")

    try:
        return ProcessingRequest.model_validate(data)
    except ValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'params'}: {err['msg']}" for err in e.errors()
        )
        raise ClientInputError(f"Invalid params: {details}") from e


@router.post("/api/process", response_model=ProcessResponse, response_model_exclude_none=True)
@router.post(
    "/process",
    response_model=ProcessResponse,
    response_model_exclude_none=True,
    include_in_schema=False,
)
async def process_audio(
    params: str | None = Form(None),
    audio_url: str | None = Form(None, alias="audioUrl"),
    audio_file: UploadFile | None = File(None, alias="audioFile"),
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
) -> ProcessResponse:
    request = parse_params(params)

    source = InputSource(
        upload=audio_file.file if audio_file is not None else None,
        filename=audio_file.filename if audio_file is not None else None,
        url=audio_url,
    )
    if not source.is_valid:
        raise ClientInputError("Provide exactly one of audioFile or audioUrl")

    result = await orchestrator.run(request, source)
    return ProcessResponse(audio_url=result.audio_url, srt_url=result.srt_url)
