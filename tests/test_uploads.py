from datetime import datetime, timezone
from pathlib import Path

import pytest

from ticknowledge.db import connect
from ticknowledge.models import TrackedChatLog
from ticknowledge.uploads import (
    UploadError,
    count_uploaded_files,
    list_tracked_chat_logs,
    list_uploaded_files,
    save_context_file,
    save_uploaded_files,
)


@pytest.fixture
def session():
    factory = connect("sqlite://")
    with factory() as s:
        yield s


def test_save_uploaded_files_writes_and_records(session, tmp_path):
    files = [("a.txt", b"alpha"), ("b.txt", b"beta")]
    result = save_uploaded_files(session, files, tmp_path)
    assert result == {
        "message": f"{len(files)} file(s) uploaded successfully",
        "count": len(files),
    }
    for name, data in files:
        assert (tmp_path / name).read_bytes() == data
    assert count_uploaded_files(session) == len(files)

    listed = list_uploaded_files(session)["files"]
    assert [f["name"] for f in listed] == ["a.txt", "b.txt"]
    assert listed[0]["path"] == str(tmp_path / "a.txt")
    assert isinstance(listed[0]["uploaded_at"], str)


def test_save_uploaded_files_strips_directories(session, tmp_path):
    save_uploaded_files(session, [("../../escape.txt", b"x")], tmp_path)
    assert (tmp_path / "escape.txt").read_bytes() == b"x"
    assert not (tmp_path.parent.parent / "escape.txt").exists()


def test_no_files_is_bad_request(session, tmp_path):
    with pytest.raises(UploadError) as info:
        save_uploaded_files(session, [], tmp_path)
    assert info.value.status == 400
    assert info.value.message == "No file uploaded"


def test_missing_directory_fails_to_save(session, tmp_path):
    with pytest.raises(UploadError) as info:
        save_uploaded_files(session, [("a.txt", b"x")], tmp_path / "missing")
    assert info.value.status == 500
    assert info.value.message == "Failed to save file"
    assert count_uploaded_files(session) == 0


def test_save_context_file_defaults(session, tmp_path):
    result = save_context_file(session, "ctx.md", b"# notes", upload_dir=tmp_path)
    assert result["message"] == "Context file uploaded successfully"
    assert result["file"]["name"] == "ctx.md"
    assert result["file"]["status"] == "Active"
    assert result["file"]["labels"] == ""
    assert (tmp_path / "ctx.md").read_bytes() == b"# notes"


def test_duplicate_context_file_is_rejected(session, tmp_path):
    save_context_file(session, "ctx.md", b"1", "x", "first", upload_dir=tmp_path)
    with pytest.raises(UploadError) as info:
        save_context_file(session, "ctx.md", b"2", upload_dir=tmp_path)
    assert info.value.message == "Failed to insert context file record"
    again = save_context_file(session, "other.md", b"3", "y", "second", "Draft", tmp_path)
    assert again["file"]["status"] == "Draft"
    assert again["file"]["description"] == "second"


def test_tracked_chat_logs_newest_first(session):
    older = TrackedChatLog(
        api_name="ai/chat",
        request_msg="old",
        response_value="{}",
        response_time=5,
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )
    newer = TrackedChatLog(
        api_name="assistant/chat",
        request_msg="new",
        response_value="{}",
        response_time=9,
        created_at=datetime(2024, 6, 1, tzinfo=timezone.utc),
    )
    session.add_all([older, newer])
    session.commit()

    logs = list_tracked_chat_logs(session)["logs"]
    assert [log["RequestMsg"] for log in logs] == ["new", "old"]
    assert logs[0]["APIName"] == "assistant/chat"
    assert logs[1]["ResponseTime"] == 5


def test_empty_listings(session):
    assert list_uploaded_files(session) == {"files": []}
    assert list_tracked_chat_logs(session) == {"logs": []}
    assert count_uploaded_files(session) == 0