"""
Maintenance operations against a throwaway SQLite database.
"""

import uuid

from app import maintenance, storage
from app.config import Settings
from app.storage import RecordingStatus

STORY_ONE = "कावळा आणि चिमणी\nएक होता कावळा.\nएक होती चिमणी.\nकावळ्याचे घर शेणाचे\n"
STORY_TWO = "ससा आणि कासव\nससा म्हणाला, \"मी जिंकणार!\" कासव हसले.\n"


def _write_stories(stories_dir):
    one = stories_dir / "one.txt"
    two = stories_dir / "two.txt"
    one.write_text(STORY_ONE, encoding="utf-8")
    two.write_text(STORY_TWO, encoding="utf-8")
    return [one, two]


def _record(sentence_id, user="u1", status=RecordingStatus.pending, object_store=None, data=b"RIFF"):
    key = f"recordings/{user}/{sentence_id}_{uuid.uuid4().hex}.wav"
    if object_store is not None:
        object_store.upload_file(key, data)
    rec_id = storage.save_recording(sentence_id, user, key, duration=1.5)
    if status is not RecordingStatus.pending:
        storage.set_recording_status(rec_id, status)
    return rec_id, key


# ── Import ────────────────────────────────────────────────────────────────

def test_import_stories_persists_ordered_sentences(db, stories_dir):
    report = maintenance.import_stories(_write_stories(stories_dir))

    assert [i["title"] for i in report.imported] == ["कावळा आणि चिमणी", "ससा आणि कासव"]
    assert not report.failed and not report.skipped

    stories = storage.list_stories()
    assert [s["total_sentences"] for s in stories] == [3, 1]

    sentences = storage.get_story_sentences(stories[0]["id"])
    assert [s["order_in_story"] for s in sentences] == [1, 2, 3]
    assert [s["text"] for s in sentences] == [
        "एक होता कावळा",
        "एक होती चिमणी",
        "कावळ्याचे घर शेणाचे",
    ]

    quoted = storage.get_story_sentences(stories[1]["id"])
    assert [s["text"] for s in quoted] == ['ससा म्हणाला, "मी जिंकणार!" कासव हसले']


def test_import_skips_when_stories_exist(db, stories_dir):
    paths = _write_stories(stories_dir)
    maintenance.import_stories(paths)

    report = maintenance.import_stories(paths)

    assert report.existing_stories == 2
    assert report.imported == []
    assert storage.count_stories() == 2


def test_force_reimport_clears_first(db, stories_dir, object_store):
    paths = _write_stories(stories_dir)
    maintenance.import_stories(paths)
    first_sentence = storage.get_story_sentences(storage.list_stories()[0]["id"])[0]
    _record(first_sentence["id"], object_store=object_store)

    report = maintenance.import_stories(paths, force=True)

    assert report.cleared
    assert len(report.imported) == 2
    assert storage.count_stories() == 2
    assert storage.export_recordings() == []


def test_import_reports_bad_files_and_continues(db, stories_dir):
    empty = stories_dir / "empty.txt"
    empty.write_text("\n\n", encoding="utf-8")
    no_sentences = stories_dir / "title_only.txt"
    no_sentences.write_text("फक्त शीर्षक\n। ...\n", encoding="utf-8")
    missing = stories_dir / "missing.txt"
    good = stories_dir / "good.txt"
    good.write_text(STORY_ONE, encoding="utf-8")

    report = maintenance.import_stories([empty, no_sentences, missing, good])

    assert report.skipped == ["empty.txt", "title_only.txt"]
    assert [f["file"] for f in report.failed] == ["missing.txt"]
    assert [i["file"] for i in report.imported] == ["good.txt"]


# ── Titles ────────────────────────────────────────────────────────────────

def test_update_story_titles_uses_first_sentence(db):
    story_id = storage.save_story("जुने नाव", "marathi", ["राजा आणि राणी।", "दुसरे वाक्य"])
    empty_id = storage.save_story("रिकामी गोष्ट", "marathi", [])

    titles = dict(maintenance.update_story_titles())

    assert titles[story_id] == "राजा आणि राणी"
    assert titles[empty_id] == "रिकामी गोष्ट"


# ── Clearing ──────────────────────────────────────────────────────────────

def test_clear_stories_counts_rows(db):
    story_id = storage.save_story("गोष्ट", "marathi", ["एक", "दोन"])
    sentence_id = storage.get_story_sentences(story_id)[0]["id"]
    _record(sentence_id)

    counts = maintenance.clear_stories()

    assert counts == {"recordings": 1, "user_progress": 0, "sentences": 2, "stories": 1}
    assert storage.count_stories() == 0


def test_clear_recordings_keeps_stories(db):
    story_id = storage.save_story("गोष्ट", "marathi", ["एक"])
    sentence_id = storage.get_story_sentences(story_id)[0]["id"]
    _record(sentence_id)
    _record(sentence_id, user="u2")

    counts = maintenance.clear_recordings()

    assert counts == {"recordings": 2, "user_progress": 0, "recording_stats": 2}
    assert storage.count_stories() == 1


# ── Deleted-recording cleanup ─────────────────────────────────────────────

def test_cleanup_deleted_recordings(db, object_store):
    story_id = storage.save_story("गोष्ट", "marathi", ["एक", "दोन"])
    s1, s2 = (s["id"] for s in storage.get_story_sentences(story_id))

    kept_id, kept_key = _record(s1, object_store=object_store)
    gone_id, gone_key = _record(s1, status=RecordingStatus.deleted, object_store=object_store)
    # object already missing from storage: row is still purged
    orphan_id, _ = _record(s2, status=RecordingStatus.deleted)

    report = maintenance.cleanup_deleted_recordings(object_store)

    assert (report.total, report.deleted, report.failed) == (2, 2, 0)
    assert storage.get_recording(gone_id) is None
    assert storage.get_recording(orphan_id) is None
    assert storage.get_recording(kept_id) is not None
    assert not object_store.exists(gone_key)
    assert object_store.exists(kept_key)


def test_cleanup_with_nothing_to_delete(db, object_store):
    report = maintenance.cleanup_deleted_recordings(object_store)
    assert (report.total, report.deleted, report.failed) == (0, 0, 0)


def test_cleanup_counts_failures(db, object_store):
    class BrokenStorage:
        def delete_file(self, key):
            raise PermissionError("read-only bucket")

    story_id = storage.save_story("गोष्ट", "marathi", ["एक"])
    sentence_id = storage.get_story_sentences(story_id)[0]["id"]
    rec_id, key = _record(sentence_id, status=RecordingStatus.deleted)

    report = maintenance.cleanup_deleted_recordings(BrokenStorage())

    assert (report.deleted, report.failed) == (0, 1)
    assert report.errors[0]["recording_id"] == rec_id
    assert report.errors[0]["filename"] == key
    assert storage.get_recording(rec_id) is not None


# ── Status & startup ──────────────────────────────────────────────────────

def test_database_status(db):
    storage.save_story("गोष्ट", "marathi", ["एक", "दोन"])

    status = maintenance.database_status()

    assert status.connected
    assert status.missing_tables == []
    assert (status.stories, status.sentences, status.recordings) == (1, 2, 0)


def test_auto_setup_creates_schema_and_imports(stories_dir):
    storage.Base.metadata.drop_all(bind=storage.engine)
    _write_stories(stories_dir)
    settings = Settings(stories_dir=str(stories_dir), story_files=["one.txt", "two.txt"])

    report = maintenance.auto_setup(settings)

    assert "stories" in storage.existing_tables()
    assert len(report.imported) == 2
    storage.Base.metadata.drop_all(bind=storage.engine)
