"""Saving uploaded files and listing upload records."""

from datetime import datetime, timezone
from pathlib import Path

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from .models import ContextFile, TrackedChatLog, UploadedFile, to_dict

DEFAULT_UPLOAD_DIR = "file"


class UploadError(Exception):
    """An upload could not be completed; status is the matching HTTP code."""

    def __init__(self, message, status=500):
        super().__init__(message)
        self.message = message
        self.status = status


def _iso(value):
    return value.isoformat() if value is not None else None


def _write(upload_dir, filename, data):
    name = Path(filename or "").name
    if not name:
        raise UploadError("No file uploaded", 400)
    dest = Path(upload_dir) / name
    try:
        dest.write_bytes(data)
    except OSError as exc:
        raise UploadError("Failed to save file", 500) from exc
    return name, dest


def _commit(session, record, message):
    session.add(record)
    try:
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        raise UploadError(message, 500) from exc


def save_uploaded_files(session, files, upload_dir=DEFAULT_UPLOAD_DIR):
    """Save (filename, bytes) pairs into upload_dir and record each one."""
    files = list(files)
    if not files:
        raise UploadError("No file uploaded", 400)

    uploaded = 0
    for filename, data in files:
        name, dest = _write(upload_dir, filename, data)
        record = UploadedFile(
            file_name=name, file_path=str(dest), upload_time=datetime.now(timezone.utc)
        )
        _commit(session, record, "Failed to insert file record")
        uploaded += 1

    return {"message": f"{uploaded} file(s) uploaded successfully", "count": uploaded}


def save_context_file(
    session,
    filename,
    data,
    labels="",
    description="",
    status="Active",
    upload_dir=DEFAULT_UPLOAD_DIR,
):
    """Save a context file into upload_dir and record it with its labels."""
    name, _ = _write(upload_dir, filename, data)
    record = ContextFile(
        file_name=name,
        labels=labels,
        description=description,
        status=status,
        updated_at=datetime.now(timezone.utc),
    )
    _commit(session, record, "Failed to insert context file record")
    return {
        "message": "Context file uploaded successfully",
        "file": {
            "name": record.file_name,
            "labels": record.labels,
            "description": record.description,
            "status": record.status,
            "updated": _iso(record.updated_at),
        },
    }


def count_uploaded_files(session):
    """Number of recorded uploaded files."""
    try:
        return session.scalar(select(func.count()).select_from(UploadedFile))
    except SQLAlchemyError as exc:
        raise UploadError("Failed to count uploaded files", 500) from exc


def list_uploaded_files(session):
    """All recorded uploaded files."""
    try:
        records = session.scalars(select(UploadedFile).order_by(UploadedFile.id)).all()
    except SQLAlchemyError as exc:
        raise UploadError("Failed to fetch uploaded files", 500) from exc
    return {
        "files": [
            {"name": f.file_name, "path": f.file_path, "uploaded_at": _iso(f.upload_time)}
            for f in records
        ]
    }


def list_tracked_chat_logs(session):
    """All tracked chat logs, newest first."""
    try:
        logs = session.scalars(
            select(TrackedChatLog).order_by(
                TrackedChatLog.created_at.desc(), TrackedChatLog.id.desc()
            )
        ).all()
    except SQLAlchemyError as exc:
        raise UploadError("Failed to fetch tracked chat logs", 500) from exc
    return {"logs": [to_dict(log) for log in logs]}