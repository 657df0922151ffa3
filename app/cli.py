"""
Speech Collector — Command Line
================================
Maintenance commands for local development and deployments.

Usage:
    python -m app.cli status
    python -m app.cli setup-db
    python -m app.cli import-stories [--force] [FILE ...]
    python -m app.cli segment stories/marathi_story1.txt --has-title
    python -m app.cli clear-stories
    python -m app.cli clear-recordings
    python -m app.cli cleanup-deleted
    python -m app.cli update-titles
    python -m app.cli serve [--host 0.0.0.0] [--port 8000]

Database and storage locations come from the environment / .env
(DATABASE_URL, STORAGE_DIR, STORIES_DIR ...).
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from loguru import logger

from app.config import get_settings


def _mask_url(url: str) -> str:
    """Hide the password part of a database URL."""
    scheme, sep, rest = url.partition("://")
    if not sep or "@" not in rest:
        return url
    creds, host = rest.rsplit("@", 1)
    user = creds.split(":", 1)[0]
    return f"{scheme}://{user}:****@{host}"


# ══════════════════════════════════════════════════════════════════════════════
# Commands
# ══════════════════════════════════════════════════════════════════════════════

def cmd_status(args: argparse.Namespace) -> int:
    from app.maintenance import database_status

    settings = get_settings()
    print(f"📊 Database: {_mask_url(settings.database_url)}")

    status = database_status()
    if not status.connected:
        print(f"❌ Database connection failed: {status.error}")
        return 1
    print("✅ Database connection successful")

    if not status.tables:
        print("❌ No tables found. Run: python -m app.cli setup-db")
        return 1
    print(f"✅ Tables found: {', '.join(status.tables)}")
    if status.missing_tables:
        print(f"⚠️  Missing tables: {', '.join(status.missing_tables)}")

    print(f"   Stories    : {status.stories}")
    print(f"   Sentences  : {status.sentences}")
    print(f"   Recordings : {status.recordings}")
    return 0


def cmd_setup_db(args: argparse.Namespace) -> int:
    from app import storage

    storage.init_db()
    count = storage.count_stories()
    if count:
        logger.info(f"Database already has {count} stories, skipping import.")
    else:
        logger.info("Database is empty. Import stories with: python -m app.cli import-stories")
    logger.success("✅ Setup complete")
    return 0


def cmd_import_stories(args: argparse.Namespace) -> int:
    from app import storage
    from app.maintenance import import_stories

    settings = get_settings()
    storage.init_db()
    paths = [Path(f) for f in args.files] if args.files else settings.story_paths
    report = import_stories(paths, force=args.force, language=settings.story_language)

    for item in report.imported:
        print(f"  ✓ {item['file']}: '{item['title']}' ({item['sentences']} sentences)")
    for name in report.skipped:
        print(f"  - {name}: nothing to import")
    for item in report.failed:
        print(f"  ❌ {item['file']}: {item['error']}")
    if report.existing_stories:
        print(f"⚠️  {report.existing_stories} stories already present. Use --force to re-import.")
    return 1 if report.failed else 0


def cmd_segment(args: argparse.Namespace) -> int:
    from app.text_pipeline import parse_story, segment

    content = Path(args.file).read_text(encoding="utf-8")
    body = content
    if args.has_title:
        story = parse_story(content)
        if story is None:
            print("⚠️  File is empty.")
            return 0
        print(f"Title: {story.title}\n")
        body = story.body

    sentences = segment(body)
    for i, sentence in enumerate(sentences, start=1):
        print(f"{i:>4}. {sentence}")
    print(f"\n{len(sentences)} sentence(s)")
    return 0


def cmd_clear_stories(args: argparse.Namespace) -> int:
    from app.maintenance import clear_stories

    counts = clear_stories()
    for table, n in counts.items():
        print(f"✓ Deleted {n} {table}")
    logger.success("✅ Database cleared. Re-import with: python -m app.cli import-stories")
    return 0


def cmd_clear_recordings(args: argparse.Namespace) -> int:
    from app.maintenance import clear_recordings

    counts = clear_recordings()
    for table, n in counts.items():
        print(f"✓ Deleted {n} {table}")
    logger.success("✅ Recording cleanup complete")
    return 0


def cmd_cleanup_deleted(args: argparse.Namespace) -> int:
    from app.maintenance import cleanup_deleted_recordings
    from app.object_storage import get_storage

    report = cleanup_deleted_recordings(get_storage())
    print("━" * 50)
    print("📈 Cleanup Summary:")
    print(f"   ✅ Successfully deleted: {report.deleted}")
    if report.failed:
        print(f"   ❌ Failed: {report.failed}")
    return 1 if report.failed else 0


def cmd_update_titles(args: argparse.Namespace) -> int:
    from app.maintenance import update_story_titles

    for story_id, title in update_story_titles():
        print(f"  {story_id:>4}  {title}")
    logger.success("✅ Story titles updated")
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("app.main:app", host=args.host, port=args.port, reload=args.reload)
    return 0


# ══════════════════════════════════════════════════════════════════════════════
# Entry point
# ══════════════════════════════════════════════════════════════════════════════

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="speech-collector", description="Speech Collector maintenance")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("status", help="Check database connectivity, tables and counts").set_defaults(func=cmd_status)
    sub.add_parser("setup-db", help="Create missing tables").set_defaults(func=cmd_setup_db)

    p = sub.add_parser("import-stories", help="Segment and import story files")
    p.add_argument("files", nargs="*", help="Story files (default: configured STORY_FILES)")
    p.add_argument("--force", action="store_true", help="Clear existing stories first")
    p.set_defaults(func=cmd_import_stories)

    p = sub.add_parser("segment", help="Print the sentences of a text file")
    p.add_argument("file")
    p.add_argument("--has-title", action="store_true", help="Treat the first line as the title")
    p.set_defaults(func=cmd_segment)

    sub.add_parser("clear-stories", help="Delete stories, sentences and their recordings").set_defaults(func=cmd_clear_stories)
    sub.add_parser("clear-recordings", help="Delete recordings, progress and stats").set_defaults(func=cmd_clear_recordings)
    sub.add_parser("cleanup-deleted", help="Purge recordings marked deleted").set_defaults(func=cmd_cleanup_deleted)
    sub.add_parser("update-titles", help="Set titles from first sentences").set_defaults(func=cmd_update_titles)

    p = sub.add_parser("serve", help="Run the API server")
    p.add_argument("--host", default="0.0.0.0")
    p.add_argument("--port", type=int, default=8000)
    p.add_argument("--reload", action="store_true")
    p.set_defaults(func=cmd_serve)

    return parser


def main(argv: list[str] | None = None) -> int:
    # Devanagari / emoji output on Windows consoles
    if hasattr(sys.stdout, "reconfigure"):
        sys.stdout.reconfigure(encoding="utf-8", errors="replace")

    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
