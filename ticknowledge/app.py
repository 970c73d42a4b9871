"""HTTP application serving uploads, dashboard and document status endpoints."""

import argparse
import logging
import uuid
from contextlib import contextmanager

from flask import Blueprint, Flask, jsonify, request
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from . import config as config_module
from .dashboard import context_dashboard
from .db import connect, run_migrations
from .models import UploadedDocument, to_dict
from .uploads import (
    DEFAULT_UPLOAD_DIR,
    UploadError,
    count_uploaded_files,
    list_tracked_chat_logs,
    list_uploaded_files,
    save_context_file,
    save_uploaded_files,
)
from .users import parse_list_params

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"
VERSION = "1.0.0"
_ALLOW_METHODS = "GET,POST,PUT,DELETE,OPTIONS"
_ALLOW_HEADERS = "Origin,Content-Type,Accept,Authorization"


def _error(message, status):
    return jsonify({"error": message}), status


def _http_error_details(exc):
    """Return (code, name) for an HTTP exception raised by the framework, else None."""
    code = getattr(exc, "code", None)
    name = getattr(exc, "name", None)
    if isinstance(code, int) and isinstance(name, str) and hasattr(exc, "get_response"):
        return code, name
    return None


def create_app(config, session_factory):
    """Build the Flask application bound to a database session factory."""
    app = Flask(__name__)
    app.config["UPLOAD_DIR"] = DEFAULT_UPLOAD_DIR

    @contextmanager
    def db_session():
        with session_factory() as session:
            yield session

    @app.after_request
    def add_cors_headers(response):
        response.headers["Access-Control-Allow-Origin"] = config.cors_origins
        response.headers["Access-Control-Allow-Methods"] = _ALLOW_METHODS
        response.headers["Access-Control-Allow-Headers"] = _ALLOW_HEADERS
        return response

    @app.errorhandler(Exception)
    def handle_error(exc):
        details = _http_error_details(exc)
        if details is not None:
            code, message = details
        else:
            logger.exception("Unhandled error")
            code, message = 500, "Internal Server Error"
        return jsonify({"error": message, "code": code}), code

    @app.get("/health")
    def health():
        return jsonify({"status": "healthy", "version": VERSION})

    api = Blueprint("api", __name__, url_prefix=API_PREFIX)

    @api.post("/upload")
    def upload_files():
        if request.mimetype != "multipart/form-data":
            return _error("Invalid multipart form", 400)
        files = [(f.filename, f.read()) for f in request.files.getlist("file")]
        try:
            with db_session() as session:
                return jsonify(save_uploaded_files(session, files, app.config["UPLOAD_DIR"]))
        except UploadError as exc:
            return _error(exc.message, exc.status)

    @api.post("/context-file")
    def upload_context_file():
        uploaded = request.files.get("file")
        if uploaded is None:
            return _error("No file uploaded", 400)
        try:
            with db_session() as session:
                result = save_context_file(
                    session,
                    uploaded.filename,
                    uploaded.read(),
                    labels=request.form.get("labels") or "",
                    description=request.form.get("description") or "",
                    status=request.form.get("status") or "Active",
                    upload_dir=app.config["UPLOAD_DIR"],
                )
        except UploadError as exc:
            return _error(exc.message, exc.status)
        return jsonify(result)

    @api.get("/upload/count")
    def upload_count():
        try:
            with db_session() as session:
                return jsonify({"count": count_uploaded_files(session)})
        except UploadError as exc:
            return _error(exc.message, exc.status)

    @api.get("/upload/files")
    def upload_files_list():
        try:
            with db_session() as session:
                return jsonify(list_uploaded_files(session))
        except UploadError as exc:
            return _error(exc.message, exc.status)

    @api.get("/tracked-chat-logs")
    def tracked_chat_logs():
        try:
            with db_session() as session:
                return jsonify(list_tracked_chat_logs(session))
        except UploadError as exc:
            return _error(exc.message, exc.status)

    @api.get("/context-dashboard")
    def dashboard():
        with db_session() as session:
            return jsonify(context_dashboard(session))

    @api.get("/documents/<doc_id>/status")
    def document_status(doc_id):
        try:
            document_id = uuid.UUID(doc_id)
        except ValueError:
            return _error("Invalid document ID", 400)
        with db_session() as session:
            document = session.get(UploadedDocument, document_id)
            if document is None:
                return _error("Document not found", 404)
            return jsonify(to_dict(document))

    @api.post("/documents")
    def list_documents():
        params = parse_list_params(request.get_json(silent=True))
        condition = (
            UploadedDocument.uploaded_by == params.uploaded_by
            if params.uploaded_by is not None
            else None
        )
        query = select(UploadedDocument).order_by(UploadedDocument.created_at.desc())
        count_query = select(func.count()).select_from(UploadedDocument)
        if condition is not None:
            query = query.where(condition)
            count_query = count_query.where(condition)
        if params.limit > 0:
            query = query.limit(params.limit)
        if params.offset > 0:
            query = query.offset(params.offset)
        try:
            with db_session() as session:
                total = session.scalar(count_query)
                documents = [to_dict(d) for d in session.scalars(query)]
        except SQLAlchemyError:
            logger.exception("Error listing documents")
            return _error("Failed to list documents", 500)
        return jsonify(
            {
                "documents": documents,
                "total": total,
                "limit": params.limit,
                "offset": params.offset,
            }
        )

    app.register_blueprint(api)
    return app


def main(argv=None):
    """Load settings, connect to the database and serve the application."""
    parser = argparse.ArgumentParser(
        prog="ticknowledge-server", description="Run the knowledge base HTTP server."
    )
    parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")

    cfg = config_module.load()
    try:
        session_factory = connect(cfg.database_url)
        run_migrations(cfg.database_url)
    except (ValueError, SQLAlchemyError) as exc:
        logger.error("Failed to connect to database: %s", exc)
        return 1

    try:
        port = int(cfg.port)
    except ValueError:
        logger.error("Failed to start server: invalid port %r", cfg.port)
        return 1

    app = create_app(cfg, session_factory)
    logger.info("Server starting on port %s", cfg.port)
    try:
        app.run(host="0.0.0.0", port=port)
    except OSError as exc:
        logger.error("Failed to start server: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())