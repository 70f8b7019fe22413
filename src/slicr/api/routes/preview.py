"""Silence preview endpoint: detected intervals without rendering audio."""

from __future__ import annotations

import asyncio
import logging
from typing import BinaryIO

import numpy as np
import soundfile as sf
from fastapi import APIRouter, Depends, File, Form, UploadFile

from slicr.api.auth import verify_client
from slicr.api.routes.process import parse_params
from slicr.api.schemas import SilencePreviewResponse
from slicr.errors import ClientInputError
from slicr.services.silence import detect_silence

logger = logging.getLogger(__name__)

router = APIRouter(tags=["preview"], dependencies=[Depends(verify_client)])


def read_audio(stream: BinaryIO) -> tuple[np.ndarray, int]:
    """Decode an audio stream to float samples.

    Raises:
        ClientInputError: If the stream is not a readable audio file
    """
    try:
        samples, sample_rate = sf.read(stream, dtype="float32")
    except sf.LibsndfileError as e:
        raise ClientInputError(f"Unreadable audio file: {e}") from e
    return samples, sample_rate


@router.post("/api/silence-preview", response_model=SilencePreviewResponse)
async def silence_preview(
    audio_file: UploadFile = File(..., alias="audioFile"),
    params: str | None = Form(None),
) -> SilencePreviewResponse:
    request = parse_params(params)
    samples, sample_rate = await asyncio.to_thread(read_audio, audio_file.file)

    intervals = detect_silence(
        samples,
        sample_rate,
        threshold_db=request.threshold_db,
        min_duration=request.min_duration,
        padding_start=request.left_padding,
        padding_end=request.right_padding,
    )
    duration = len(samples) / sample_rate if sample_rate else 0.0
    logger.info(
        "Silence preview of %s: %d intervals in %.3fs", audio_file.filename, len(intervals), duration
    )
    return SilencePreviewResponse(sample_rate=sample_rate, duration=duration, intervals=intervals)
