"""
Speech Collector — Pydantic Schemas

Defines all request / response data contracts used across the API.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


# ── Enums ─────────────────────────────────────────────────────────────────

class ReviewDecision(str, Enum):
    approved = "approved"
    rejected = "rejected"


# ── Stories ───────────────────────────────────────────────────────────────

class StoryOut(BaseModel):
    id: int
    title: str
    language: str
    total_sentences: int
    created_at: Optional[datetime] = None


class SentenceOut(BaseModel):
    id: Optional[int] = None
    order_in_story: int = Field(..., ge=1)
    text: str


class StorySentencesResponse(BaseModel):
    story_id: int
    total_sentences: int
    sentences: list[SentenceOut]


class SegmentResponse(BaseModel):
    """Preview of what the importer would store for a piece of text."""
    title: Optional[str] = None
    total_sentences: int
    sentences: list[SentenceOut]


# ── Recordings ────────────────────────────────────────────────────────────

class RecordingCreated(BaseModel):
    recording_id: int
    sentence_id: int
    user_id: str
    filename: str
    status: str


class RecordingStatusOut(BaseModel):
    recording_id: int
    status: str


class ReviewRequest(BaseModel):
    decision: ReviewDecision


# ── Admin ─────────────────────────────────────────────────────────────────

class CleanupError(BaseModel):
    recording_id: int
    filename: str
    error: str


class CleanupResponse(BaseModel):
    success: bool = True
    message: str
    total: int = 0
    deleted: int = 0
    failed: int = 0
    errors: list[CleanupError] = Field(default_factory=list)


class StatusCount(BaseModel):
    status: str
    count: int
    total_duration_sec: float


class StatsResponse(BaseModel):
    by_status: list[StatusCount]
    total: int


class ExportRecord(BaseModel):
    recording_id: int
    filename: str
    user_id: str
    status: str
    duration: Optional[float] = None
    story_id: int
    sentence_id: int
    order_in_story: int
    text: str
    created_at: Optional[datetime] = None


class ExportResponse(BaseModel):
    total: int
    recordings: list[ExportRecord]


class ImportResponse(BaseModel):
    cleared: bool
    existing_stories: int
    imported: list[dict]
    skipped: list[str]
    failed: list[dict]
