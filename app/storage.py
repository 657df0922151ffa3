"""
Speech Collector — Relational Storage
======================================
Owns the collection tables:

    stories          — one row per imported story
    sentences        — ordered sentences of a story (1-indexed)
    recordings       — one audio take of a sentence by a user
    user_progress    — last sentence a user reached in a story
    recording_stats  — per-user recording totals

Design notes:
  - One SQLAlchemy engine / session factory built from settings.database_url.
  - init_db() is additive (create_all only) so collected data survives
    restarts; destructive resets live in app.maintenance.
  - Read helpers log and return safe defaults so a DB outage never crashes
    a listing endpoint. Write helpers raise so callers can report failures.
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from enum import Enum
from typing import Iterator, Optional, Sequence

from loguru import logger
from sqlalchemy import (
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    create_engine,
    func,
    inspect,
    select,
)
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from app.config import get_settings

# ── Engine ────────────────────────────────────────────────────────────────────

_settings = get_settings()

engine = create_engine(
    _settings.database_url,
    pool_pre_ping=True,
    echo=False,
)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


class Base(DeclarativeBase):
    pass


class RecordingStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"
    deleted = "deleted"


# ── ORM Models ────────────────────────────────────────────────────────────────

class Story(Base):
    __tablename__ = "stories"

    id              = Column(Integer, primary_key=True, autoincrement=True)
    title           = Column(Text, nullable=False)
    language        = Column(String(32), default="marathi")
    total_sentences = Column(Integer, default=0)
    created_at      = Column(DateTime, default=datetime.utcnow)


class Sentence(Base):
    __tablename__ = "sentences"

    id              = Column(Integer, primary_key=True, autoincrement=True)
    story_id        = Column(Integer, ForeignKey("stories.id"), index=True, nullable=False)
    order_in_story  = Column(Integer, nullable=False)   # 1-indexed
    text_devanagari = Column(Text, nullable=False)


class Recording(Base):
    __tablename__ = "recordings"

    id          = Column(Integer, primary_key=True, autoincrement=True)
    sentence_id = Column(Integer, ForeignKey("sentences.id"), index=True, nullable=False)
    user_id     = Column(String(64), index=True, nullable=False)
    filename    = Column(String(512), nullable=False)   # object-storage key
    status      = Column(String(16), default=RecordingStatus.pending.value, index=True)
    duration    = Column(Float, nullable=True)          # seconds
    created_at  = Column(DateTime, default=datetime.utcnow)


class UserProgress(Base):
    __tablename__ = "user_progress"

    id                  = Column(Integer, primary_key=True, autoincrement=True)
    user_id             = Column(String(64), index=True, nullable=False)
    story_id            = Column(Integer, ForeignKey("stories.id"), nullable=False)
    last_sentence_order = Column(Integer, default=0)
    updated_at          = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class RecordingStats(Base):
    __tablename__ = "recording_stats"

    id                 = Column(Integer, primary_key=True, autoincrement=True)
    user_id            = Column(String(64), unique=True, nullable=False)
    total_recordings   = Column(Integer, default=0)
    total_duration_sec = Column(Float, default=0.0)
    updated_at         = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


EXPECTED_TABLES = ("stories", "sentences", "recordings", "user_progress", "recording_stats")


# ── Table initialization ──────────────────────────────────────────────────────

def init_db() -> None:
    """Create any missing tables. Existing tables and rows are left alone."""
    Base.metadata.create_all(bind=engine)
    logger.info(f"[Storage] Tables ready ({', '.join(EXPECTED_TABLES)}).")


def existing_tables() -> list[str]:
    """Names of the tables currently present in the database."""
    return sorted(inspect(engine).get_table_names())


@contextmanager
def session_scope() -> Iterator[Session]:
    """Session that commits on success and rolls back on any exception."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


# ── Stories & sentences ───────────────────────────────────────────────────────

def save_story(title: str, language: str, sentences: Sequence[str]) -> int:
    """
    Insert a story and its sentences in one transaction.
    Sentence order is the sequence order, starting at 1.
    Returns the new story id.
    """
    with session_scope() as db:
        story = Story(title=title, language=language, total_sentences=len(sentences))
        db.add(story)
        db.flush()
        db.add_all(
            Sentence(story_id=story.id, order_in_story=order, text_devanagari=text)
            for order, text in enumerate(sentences, start=1)
        )
        return story.id


def count_stories() -> int:
    with SessionLocal() as db:
        return db.scalar(select(func.count()).select_from(Story)) or 0


def list_stories() -> list[dict]:
    """All stories, oldest first. Returns [] on any DB error."""
    try:
        with SessionLocal() as db:
            rows = db.scalars(select(Story).order_by(Story.id)).all()
            return [
                {
                    "id":              r.id,
                    "title":           r.title,
                    "language":        r.language,
                    "total_sentences": r.total_sentences,
                    "created_at":      r.created_at,
                }
                for r in rows
            ]
    except Exception as e:
        logger.warning(f"[Storage] list_stories failed: {e}")
        return []


def get_story_sentences(story_id: int) -> Optional[list[dict]]:
    """
    Ordered sentences of a story, or None when the story does not exist.
    """
    with SessionLocal() as db:
        if db.get(Story, story_id) is None:
            return None
        rows = db.scalars(
            select(Sentence)
            .where(Sentence.story_id == story_id)
            .order_by(Sentence.order_in_story)
        ).all()
        return [
            {
                "id":             r.id,
                "order_in_story": r.order_in_story,
                "text":           r.text_devanagari,
            }
            for r in rows
        ]


def get_sentence(sentence_id: int) -> Optional[Sentence]:
    with SessionLocal() as db:
        return db.get(Sentence, sentence_id)


# ── Recordings ────────────────────────────────────────────────────────────────

def save_recording(
    sentence_id: int,
    user_id: str,
    filename: str,
    duration: Optional[float] = None,
) -> int:
    """Insert a pending recording and bump the user's stats. Returns its id."""
    with session_scope() as db:
        rec = Recording(
            sentence_id=sentence_id,
            user_id=user_id,
            filename=filename,
            status=RecordingStatus.pending.value,
            duration=duration,
        )
        db.add(rec)

        stats = db.scalar(select(RecordingStats).where(RecordingStats.user_id == user_id))
        if stats is None:
            stats = RecordingStats(user_id=user_id, total_recordings=0, total_duration_sec=0.0)
            db.add(stats)
        stats.total_recordings = (stats.total_recordings or 0) + 1
        stats.total_duration_sec = (stats.total_duration_sec or 0.0) + (duration or 0.0)

        db.flush()
        return rec.id


def get_recording(recording_id: int) -> Optional[Recording]:
    with SessionLocal() as db:
        return db.get(Recording, recording_id)


def set_recording_status(recording_id: int, status: RecordingStatus) -> bool:
    """Update a recording's status. Returns False when it does not exist."""
    with session_scope() as db:
        rec = db.get(Recording, recording_id)
        if rec is None:
            return False
        rec.status = status.value
        return True


def recordings_with_status(status: RecordingStatus) -> list[Recording]:
    """Recordings in *status*, oldest first."""
    with SessionLocal() as db:
        return list(
            db.scalars(
                select(Recording)
                .where(Recording.status == status.value)
                .order_by(Recording.created_at, Recording.id)
            ).all()
        )


def delete_recording_row(recording_id: int) -> None:
    with session_scope() as db:
        rec = db.get(Recording, recording_id)
        if rec is not None:
            db.delete(rec)


def recording_stats() -> list[dict]:
    """Count and summed duration of recordings per status."""
    with SessionLocal() as db:
        rows = db.execute(
            select(
                Recording.status,
                func.count(Recording.id),
                func.coalesce(func.sum(Recording.duration), 0.0),
            ).group_by(Recording.status)
        ).all()
        return [
            {
                "status":             status,
                "count":              int(count),
                "total_duration_sec": float(total),
            }
            for status, count, total in rows
        ]


def export_recordings(status: Optional[RecordingStatus] = None) -> list[dict]:
    """Recording metadata joined with sentence text, for dataset export."""
    with SessionLocal() as db:
        query = (
            select(Recording, Sentence)
            .join(Sentence, Sentence.id == Recording.sentence_id)
            .order_by(Recording.id)
        )
        if status is not None:
            query = query.where(Recording.status == status.value)
        return [
            {
                "recording_id":   rec.id,
                "filename":       rec.filename,
                "user_id":        rec.user_id,
                "status":         rec.status,
                "duration":       rec.duration,
                "story_id":       sent.story_id,
                "sentence_id":    sent.id,
                "order_in_story": sent.order_in_story,
                "text":           sent.text_devanagari,
                "created_at":     rec.created_at,
            }
            for rec, sent in db.execute(query).all()
        ]
