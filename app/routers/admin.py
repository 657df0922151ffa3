"""
Speech Collector — Admin Router
================================
Maintenance endpoints, all gated by the shared admin token
(``?token=<ADMIN_TOKEN>`` or ``X-Admin-Token`` header):

    POST  /api/admin/cleanup-deleted
        Permanently delete recordings marked 'deleted' (storage + DB).

    GET   /api/admin/stats
        Recording counts and total duration by status.

    POST  /api/admin/recordings/{recording_id}/review
        Approve or reject a pending recording.

    GET   /api/admin/export
        Recording metadata joined with sentence text.

    POST  /api/admin/import-stories
        Import the configured story files (``?force=true`` clears first).
"""

import secrets
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status
from loguru import logger

from app import maintenance, storage
from app.config import Settings, get_settings
from app.object_storage import get_storage
from app.schemas import (
    CleanupResponse,
    ExportResponse,
    ImportResponse,
    RecordingStatusOut,
    ReviewRequest,
    StatsResponse,
)
from app.storage import RecordingStatus


def require_admin_token(
    token: Optional[str] = Query(default=None),
    x_admin_token: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> None:
    provided = token or x_admin_token or ""
    if not secrets.compare_digest(provided.encode(), settings.admin_token.encode()):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid or missing admin token",
        )


router = APIRouter(
    prefix="/api/admin",
    tags=["Admin"],
    dependencies=[Depends(require_admin_token)],
)


# ── POST /api/admin/cleanup-deleted ───────────────────────────────────────────

@router.post(
    "/cleanup-deleted",
    response_model=CleanupResponse,
    summary="Purge recordings marked as deleted",
    status_code=status.HTTP_200_OK,
)
def cleanup_deleted() -> CleanupResponse:
    logger.info("[AdminRouter] 🗑️  Admin cleanup initiated...")
    try:
        report = maintenance.cleanup_deleted_recordings(get_storage())
    except Exception as e:
        logger.error(f"[AdminRouter] Cleanup error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Cleanup failed: {e}",
        )

    if report.total == 0:
        return CleanupResponse(message="No recordings marked for deletion")

    return CleanupResponse(
        message=f"Cleanup complete: {report.deleted} deleted, {report.failed} failed",
        total=report.total,
        deleted=report.deleted,
        failed=report.failed,
        errors=report.errors,
    )


# ── GET /api/admin/stats ──────────────────────────────────────────────────────

@router.get(
    "/stats",
    response_model=StatsResponse,
    summary="Recording statistics by status",
)
def stats() -> StatsResponse:
    try:
        rows = storage.recording_stats()
    except Exception as e:
        logger.error(f"[AdminRouter] Stats query failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch stats",
        )
    return StatsResponse(by_status=rows, total=sum(r["count"] for r in rows))


# ── POST /api/admin/recordings/{recording_id}/review ──────────────────────────

@router.post(
    "/recordings/{recording_id}/review",
    response_model=RecordingStatusOut,
    summary="Approve or reject a recording",
)
def review_recording(recording_id: int, request: ReviewRequest) -> RecordingStatusOut:
    new_status = RecordingStatus(request.decision.value)
    if not storage.set_recording_status(recording_id, new_status):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No recording with id {recording_id}.",
        )
    logger.info(f"[AdminRouter] Recording {recording_id} → {new_status.value}")
    return RecordingStatusOut(recording_id=recording_id, status=new_status.value)


# ── GET /api/admin/export ─────────────────────────────────────────────────────

@router.get(
    "/export",
    response_model=ExportResponse,
    summary="Export recording metadata with sentence text",
)
def export(status_filter: Optional[RecordingStatus] = Query(default=None, alias="status")) -> ExportResponse:
    records = storage.export_recordings(status_filter)
    logger.info(f"[AdminRouter] Export: {len(records)} recordings (status={status_filter})")
    return ExportResponse(total=len(records), recordings=records)


# ── POST /api/admin/import-stories ────────────────────────────────────────────

@router.post(
    "/import-stories",
    response_model=ImportResponse,
    summary="Import the configured story files",
)
def import_stories(
    force: bool = Query(default=False, description="Clear existing stories first."),
    settings: Settings = Depends(get_settings),
) -> ImportResponse:
    report = maintenance.import_stories(
        settings.story_paths,
        force=force,
        language=settings.story_language,
    )
    return ImportResponse(
        cleared=report.cleared,
        existing_stories=report.existing_stories,
        imported=report.imported,
        skipped=report.skipped,
        failed=report.failed,
    )
