"""
Speech Collector — Maintenance Operations
==========================================
Database and storage housekeeping shared by the admin router, the CLI and
the startup hook:

    import_stories              — segment story files and persist them
    clear_stories               — wipe stories, sentences and dependants
    clear_recordings            — wipe recordings, progress and stats
    cleanup_deleted_recordings  — purge recordings marked 'deleted'
    update_story_titles         — title := first sentence minus terminators
    database_status             — connectivity / tables / row counts
    auto_setup                  — schema + first import on an empty database
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

from loguru import logger
from sqlalchemy import delete, func, select, text

from app import storage
from app.config import Settings, get_settings
from app.object_storage import LocalObjectStorage, ObjectNotFoundError
from app.storage import (
    EXPECTED_TABLES,
    Recording,
    RecordingStats,
    RecordingStatus,
    Sentence,
    Story,
    UserProgress,
    session_scope,
)
from app.text_pipeline import read_story_file, segment, title_from_sentence


# ── Reports ───────────────────────────────────────────────────────────────────

@dataclass
class ImportReport:
    cleared:  bool = False
    imported: list[dict] = field(default_factory=list)   # {"file", "story_id", "title", "sentences"}
    skipped:  list[str]  = field(default_factory=list)   # files with nothing to import
    failed:   list[dict] = field(default_factory=list)   # {"file", "error"}
    existing_stories: int = 0


@dataclass
class CleanupReport:
    total:   int = 0
    deleted: int = 0
    failed:  int = 0
    errors:  list[dict] = field(default_factory=list)   # {"recording_id", "filename", "error"}


@dataclass
class DatabaseStatus:
    connected:      bool
    tables:         list[str] = field(default_factory=list)
    missing_tables: list[str] = field(default_factory=list)
    stories:        Optional[int] = None
    sentences:      Optional[int] = None
    recordings:     Optional[int] = None
    error:          Optional[str] = None


# ══════════════════════════════════════════════════════════════════════════════
# Destructive resets
# ══════════════════════════════════════════════════════════════════════════════

def clear_stories() -> dict[str, int]:
    """Delete every story with its sentences, recordings and progress rows."""
    with session_scope() as db:
        # dependants first (foreign keys)
        counts = {
            "recordings":    db.execute(delete(Recording)).rowcount,
            "user_progress": db.execute(delete(UserProgress)).rowcount,
            "sentences":     db.execute(delete(Sentence)).rowcount,
            "stories":       db.execute(delete(Story)).rowcount,
        }
    logger.info(
        "[Maintenance] Cleared "
        + ", ".join(f"{n} {table}" for table, n in counts.items())
    )
    return counts


def clear_recordings() -> dict[str, int]:
    """Delete every recording, progress row and per-user stats row."""
    with session_scope() as db:
        counts = {
            "recordings":      db.execute(delete(Recording)).rowcount,
            "user_progress":   db.execute(delete(UserProgress)).rowcount,
            "recording_stats": db.execute(delete(RecordingStats)).rowcount,
        }
    logger.info(
        "[Maintenance] Cleared "
        + ", ".join(f"{n} {table}" for table, n in counts.items())
    )
    return counts


# ══════════════════════════════════════════════════════════════════════════════
# Story import
# ══════════════════════════════════════════════════════════════════════════════

def import_stories(
    paths: Iterable[str | Path],
    force: bool = False,
    language: str = "marathi",
) -> ImportReport:
    """
    Import story files into an empty database.

    Stories are only imported when none exist. With ``force`` any existing
    stories (and everything recorded against them) are cleared first.
    A file that cannot be read or stored is logged and reported; the
    remaining files are still imported.
    """
    report = ImportReport()
    story_count = storage.count_stories()

    if force and story_count > 0:
        logger.info(f"[Maintenance] 🔄 Force re-import: clearing {story_count} existing stories")
        clear_stories()
        report.cleared = True
        story_count = 0

    if story_count > 0:
        logger.info(f"[Maintenance] {story_count} stories already present, import skipped.")
        report.existing_stories = story_count
        return report

    logger.info("[Maintenance] 📚 Importing stories...")
    for path in map(Path, paths):
        try:
            story = read_story_file(path)
            if story is None:
                logger.warning(f"[Maintenance] ⚠️  {path.name} is empty, skipping")
                report.skipped.append(path.name)
                continue

            sentences = segment(story.body)
            if not sentences:
                logger.warning(f"[Maintenance] ⚠️  {path.name} has no sentences, skipping")
                report.skipped.append(path.name)
                continue

            logger.info(f"[Maintenance] Importing {path.name}: '{story.title}' ({len(sentences)} sentences)")
            story_id = storage.save_story(story.title, language, sentences)
            report.imported.append({
                "file":      path.name,
                "story_id":  story_id,
                "title":     story.title,
                "sentences": len(sentences),
            })
        except Exception as e:
            logger.error(f"[Maintenance] ❌ Failed to import {path.name}: {e}")
            report.failed.append({"file": path.name, "error": str(e)})

    logger.info(
        f"[Maintenance] ✅ Story import complete | imported={len(report.imported)} "
        f"| skipped={len(report.skipped)} | failed={len(report.failed)}"
    )
    return report


def update_story_titles() -> list[tuple[int, str]]:
    """
    Set every story's title to its first sentence without trailing
    terminators. Stories without sentences keep their title.
    Returns (story_id, title) for all stories, ordered by id.
    """
    with session_scope() as db:
        first_sentences = dict(
            db.execute(
                select(Sentence.story_id, Sentence.text_devanagari)
                .where(Sentence.order_in_story == 1)
            ).all()
        )
        stories = db.scalars(select(Story).order_by(Story.id)).all()
        for story in stories:
            first = first_sentences.get(story.id)
            if first:
                story.title = title_from_sentence(first)
        titles = [(s.id, s.title) for s in stories]

    logger.info(f"[Maintenance] Updated titles for {len(titles)} stories")
    return titles


# ══════════════════════════════════════════════════════════════════════════════
# Deleted-recording cleanup
# ══════════════════════════════════════════════════════════════════════════════

def cleanup_deleted_recordings(object_storage: LocalObjectStorage) -> CleanupReport:
    """
    Permanently remove recordings marked 'deleted', oldest first.

    For each one the audio object is deleted first; an object that is
    already gone only logs a warning. Then the row is deleted. A failure on
    one recording is counted and the loop moves on.
    """
    deleted = storage.recordings_with_status(RecordingStatus.deleted)
    report = CleanupReport(total=len(deleted))

    if not deleted:
        logger.info("[Maintenance] No recordings marked for deletion.")
        return report

    logger.info(f"[Maintenance] 🗑️  Found {len(deleted)} recording(s) marked for deletion")

    for rec in deleted:
        try:
            logger.debug(f"[Maintenance] Processing ID {rec.id}: {rec.filename}")
            try:
                object_storage.delete_file(rec.filename)
            except ObjectNotFoundError as e:
                logger.warning(f"[Maintenance] ⚠️  Storage delete skipped (may not exist): {e}")

            storage.delete_recording_row(rec.id)
            report.deleted += 1
        except Exception as e:
            logger.error(f"[Maintenance] ❌ Failed to delete recording {rec.id}: {e}")
            report.failed += 1
            report.errors.append({
                "recording_id": rec.id,
                "filename":     rec.filename,
                "error":        str(e),
            })

    logger.info(f"[Maintenance] ✨ Cleanup complete: {report.deleted} deleted, {report.failed} failed")
    return report


# ══════════════════════════════════════════════════════════════════════════════
# Status & startup
# ══════════════════════════════════════════════════════════════════════════════

def database_status() -> DatabaseStatus:
    """Check connectivity, expected tables and row counts."""
    try:
        with storage.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        tables = storage.existing_tables()
    except Exception as e:
        logger.error(f"[Maintenance] Database unreachable: {e}")
        return DatabaseStatus(connected=False, error=str(e))

    status = DatabaseStatus(
        connected=True,
        tables=tables,
        missing_tables=[t for t in EXPECTED_TABLES if t not in tables],
    )
    with storage.SessionLocal() as db:
        if "stories" in tables:
            status.stories = db.scalar(select(func.count()).select_from(Story))
        if "sentences" in tables:
            status.sentences = db.scalar(select(func.count()).select_from(Sentence))
        if "recordings" in tables:
            status.recordings = db.scalar(select(func.count()).select_from(Recording))
    return status


def auto_setup(settings: Optional[Settings] = None) -> ImportReport:
    """
    Create the schema when the core tables are missing, then import the
    configured story files (cleared first when settings.force_reimport).
    """
    settings = settings or get_settings()

    tables = storage.existing_tables()
    logger.info(f"[Maintenance] 📋 Found tables: {', '.join(tables) or 'none'}")
    if "stories" not in tables or "sentences" not in tables:
        logger.info("[Maintenance] 🔧 Database needs initialization...")
        storage.init_db()

    return import_stories(
        settings.story_paths,
        force=settings.force_reimport,
        language=settings.story_language,
    )
