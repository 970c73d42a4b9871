import io
import uuid

import pytest

from ticknowledge.app import create_app
from ticknowledge.config import Config
from ticknowledge.db import connect
from ticknowledge.models import UploadedDocument
from ticknowledge.tracking import log_tracked_chat
from ticknowledge.users import get_or_create_default_user


@pytest.fixture
def factory(tmp_path):
    return connect(f"sqlite:///{tmp_path / 'app.db'}")


@pytest.fixture
def upload_dir(tmp_path):
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def client(factory, upload_dir):
    app = create_app(Config(cors_origins="*"), factory)
    app.config["UPLOAD_DIR"] = str(upload_dir)
    return app.test_client()


def _file(data, name):
    return (io.BytesIO(data), name)


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.get_json() == {"status": "healthy", "version": "1.0.0"}


def test_cors_headers(client):
    response = client.get("/health")
    assert response.headers["Access-Control-Allow-Origin"] == "*"
    assert response.headers["Access-Control-Allow-Methods"] == "GET,POST,PUT,DELETE,OPTIONS"


def test_unknown_route_returns_json_error(client):
    response = client.get("/nowhere")
    assert response.status_code == 404
    assert response.get_json()["code"] == 404


def test_upload_and_list_files(client, upload_dir):
    response = client.post(
        "/api/v1/upload",
        data={"file": [_file(b"one", "a.txt"), _file(b"two", "b.txt")]},
        content_type="multipart/form-data",
    )
    assert response.status_code == 200
    assert response.get_json() == {"message": "2 file(s) uploaded successfully", "count": 2}
    assert (upload_dir / "a.txt").read_bytes() == b"one"

    assert client.get("/api/v1/upload/count").get_json() == {"count": 2}
    names = [f["name"] for f in client.get("/api/v1/upload/files").get_json()["files"]]
    assert names == ["a.txt", "b.txt"]


def test_upload_without_file(client):
    response = client.post(
        "/api/v1/upload", data={"other": "x"}, content_type="multipart/form-data"
    )
    assert response.status_code == 400
    assert response.get_json() == {"error": "No file uploaded"}


def test_upload_not_multipart(client):
    response = client.post("/api/v1/upload", json={"file": "x"})
    assert response.status_code == 400
    assert response.get_json() == {"error": "Invalid multipart form"}


def test_context_file_upload_and_dashboard(client, upload_dir):
    response = client.post(
        "/api/v1/context-file",
        data={"file": _file(b"ctx", "ctx.md"), "labels": "a,b", "description": "notes"},
        content_type="multipart/form-data",
    )
    assert response.status_code == 200
    body = response.get_json()
    assert body["message"] == "Context file uploaded successfully"
    assert body["file"]["labels"] == "a,b"
    assert body["file"]["status"] == "Active"
    assert (upload_dir / "ctx.md").read_bytes() == b"ctx"

    dashboard = client.get("/api/v1/context-dashboard").get_json()
    assert dashboard["total_files"] == 1
    assert [f["name"] for f in dashboard["context_files"]] == ["ctx.md"]


def test_context_file_requires_file(client):
    response = client.post(
        "/api/v1/context-file", data={"labels": "x"}, content_type="multipart/form-data"
    )
    assert response.status_code == 400
    assert response.get_json() == {"error": "No file uploaded"}


def test_tracked_chat_logs(client, factory):
    with factory() as session:
        log_tracked_chat(session, "ai/chat", "hello", {"success": True}, 12)
    logs = client.get("/api/v1/tracked-chat-logs").get_json()["logs"]
    assert len(logs) == 1
    assert logs[0]["APIName"] == "ai/chat"
    assert logs[0]["RequestMsg"] == "hello"
    assert logs[0]["ResponseTime"] == 12


def _add_document(factory, name):
    with factory() as session:
        user_id = get_or_create_default_user(session)
        doc = UploadedDocument(
            file_name=name,
            original_file_name=name,
            file_path=f"./uploads/{name}",
            file_size=3,
            mime_type="text/plain",
            uploaded_by=user_id,
        )
        session.add(doc)
        session.commit()
        return doc.id, user_id


def test_document_status(client, factory):
    doc_id, _ = _add_document(factory, "doc.txt")
    response = client.get(f"/api/v1/documents/{doc_id}/status")
    assert response.status_code == 200
    body = response.get_json()
    assert body["id"] == str(doc_id)
    assert body["status"] == "uploaded"


def test_document_status_invalid_id(client):
    response = client.get("/api/v1/documents/not-a-uuid/status")
    assert response.status_code == 400
    assert response.get_json() == {"error": "Invalid document ID"}


def test_document_status_missing(client):
    response = client.get(f"/api/v1/documents/{uuid.uuid4()}/status")
    assert response.status_code == 404
    assert response.get_json() == {"error": "Document not found"}


def test_list_documents(client, factory):
    _, user_id = _add_document(factory, "one.txt")
    _add_document(factory, "two.txt")

    body = client.post("/api/v1/documents", json={"limit": 1}).get_json()
    assert body["total"] == 2
    assert body["limit"] == 1
    assert body["offset"] == 0
    assert len(body["documents"]) == 1

    other = client.post("/api/v1/documents", json={"uploaded_by": str(uuid.uuid4())})
    assert other.get_json()["total"] == 0

    mine = client.post("/api/v1/documents", json={"uploaded_by": str(user_id)})
    assert mine.get_json()["total"] == 2


def test_list_documents_without_body_uses_defaults(client):
    body = client.post("/api/v1/documents").get_json()
    assert body == {"documents": [], "total": 0, "limit": 10, "offset": 0}