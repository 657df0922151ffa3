"""
Speech Collector — Recordings Router

API endpoints for uploading a recorded sentence and withdrawing it.
"""

import uuid
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, File, Form, HTTPException, UploadFile, status
from loguru import logger

from app import storage
from app.object_storage import get_storage
from app.schemas import RecordingCreated, RecordingStatusOut
from app.storage import RecordingStatus

router = APIRouter(prefix="/api/recordings", tags=["Recordings"])


def recording_key(user_id: str, sentence_id: int, upload_name: Optional[str]) -> str:
    """Object key: recordings/<user>/<sentence>_<uuid><ext>."""
    suffix = Path(upload_name or "audio.webm").suffix or ".webm"
    safe_user = "".join(c for c in user_id if c.isalnum() or c in "-_") or "anonymous"
    return f"recordings/{safe_user}/{sentence_id}_{uuid.uuid4().hex}{suffix}"


@router.post(
    "",
    response_model=RecordingCreated,
    summary="Upload a sentence recording",
    status_code=status.HTTP_201_CREATED,
)
async def upload_recording(
    audio_file: UploadFile = File(..., description="Recorded audio for one sentence."),
    sentence_id: int = Form(...),
    user_id: str = Form(..., min_length=1),
    duration: Optional[float] = Form(default=None, ge=0.0),
) -> RecordingCreated:
    if storage.get_sentence(sentence_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No sentence with id {sentence_id}.",
        )

    content = await audio_file.read()
    if not content:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Uploaded audio file is empty.",
        )

    key = recording_key(user_id, sentence_id, audio_file.filename)
    object_storage = get_storage()
    object_storage.upload_file(key, content)
    try:
        recording_id = storage.save_recording(sentence_id, user_id, key, duration)
    except Exception as e:
        logger.error(f"[RecordingsRouter] Failed to save recording row for {key}: {e}")
        object_storage.delete_file(key)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save recording",
        )

    logger.info(f"[RecordingsRouter] Saved recording {recording_id} → {key} ({len(content)} bytes)")
    return RecordingCreated(
        recording_id=recording_id,
        sentence_id=sentence_id,
        user_id=user_id,
        filename=key,
        status=RecordingStatus.pending.value,
    )


@router.delete(
    "/{recording_id}",
    response_model=RecordingStatusOut,
    summary="Mark a recording as deleted",
    description=(
        "Soft delete: the recording is flagged 'deleted' and purged later by "
        "the admin cleanup."
    ),
)
def delete_recording(recording_id: int) -> RecordingStatusOut:
    if not storage.set_recording_status(recording_id, RecordingStatus.deleted):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No recording with id {recording_id}.",
        )
    logger.info(f"[RecordingsRouter] Recording {recording_id} marked deleted")
    return RecordingStatusOut(recording_id=recording_id, status=RecordingStatus.deleted.value)
