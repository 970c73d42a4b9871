"""Database models for the knowledge base, chat and tracking data."""

import enum
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    Uuid,
    inspect,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.types import TypeDecorator


def _now():
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Declarative base shared by every model."""


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    EDITOR = "editor"
    USER = "user"
    SUPPORT = "support"


class FieldType(str, enum.Enum):
    TEXT = "text"
    TEXTAREA = "textarea"
    SELECT = "select"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    URL = "url"
    EMAIL = "email"


class MessageRole(str, enum.Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class FeedbackType(str, enum.Enum):
    HELPFUL = "helpful"
    NOT_HELPFUL = "not_helpful"
    INCORRECT = "incorrect"
    INCOMPLETE = "incomplete"


class DocumentStatus(str, enum.Enum):
    UPLOADED = "uploaded"
    SENT_TO_OPENAI = "sent_to_openai"
    ADDED_TO_VECTOR = "added_to_vector"
    PROCESSING_FAILED = "processing_failed"


class _EnumString(TypeDecorator):
    """Stores an enum as its string value; unknown strings are kept as-is."""

    impl = String
    cache_ok = True

    def __init__(self, enum_class, length=50):
        super().__init__(length)
        self.enum_class = enum_class

    def process_bind_param(self, value, dialect):
        if isinstance(value, enum.Enum):
            return value.value
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        try:
            return self.enum_class(value)
        except ValueError:
            return value


def _uuid_pk():
    return mapped_column(Uuid, primary_key=True, default=uuid.uuid4)


class _Timestamped:
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_now, onupdate=_now
    )
    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), index=True, info={"hidden": True}
    )


class User(_Timestamped, Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = _uuid_pk()
    email: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)
    role: Mapped[UserRole] = mapped_column(
        _EnumString(UserRole), nullable=False, default=UserRole.USER
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)


class Template(_Timestamped, Base):
    __tablename__ = "templates"

    id: Mapped[uuid.UUID] = _uuid_pk()
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String, default="")
    category: Mapped[str] = mapped_column(String, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_by: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)

    fields: Mapped[list["TemplateField"]] = relationship(
        cascade="all, delete-orphan", order_by="TemplateField.order"
    )
    creator: Mapped["User"] = relationship()


class TemplateField(_Timestamped, Base):
    __tablename__ = "template_fields"

    id: Mapped[uuid.UUID] = _uuid_pk()
    template_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("templates.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    type: Mapped[FieldType] = mapped_column(_EnumString(FieldType), nullable=False)
    label: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String, default="")
    required: Mapped[bool] = mapped_column(Boolean, default=False)
    options: Mapped[Optional[str]] = mapped_column(String, default="")
    placeholder: Mapped[Optional[str]] = mapped_column(String, default="")
    validation: Mapped[Optional[str]] = mapped_column(String, default="")
    order: Mapped[int] = mapped_column(Integer, default=0)


class KnowledgeEntry(_Timestamped, Base):
    __tablename__ = "knowledge_entries"

    id: Mapped[uuid.UUID] = _uuid_pk()
    title: Mapped[str] = mapped_column(String, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    summary: Mapped[Optional[str]] = mapped_column(Text, default="")
    category: Mapped[str] = mapped_column(String, nullable=False)
    tags: Mapped[Optional[str]] = mapped_column(String, default="")
    template_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, ForeignKey("templates.id"))
    field_data: Mapped[Optional[str]] = mapped_column(Text)
    is_published: Mapped[bool] = mapped_column(Boolean, default=False)
    priority: Mapped[int] = mapped_column(Integer, default=0)
    view_count: Mapped[int] = mapped_column(Integer, default=0)
    created_by: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    updated_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, ForeignKey("users.id"))

    template: Mapped[Optional["Template"]] = relationship()
    creator: Mapped["User"] = relationship(foreign_keys="KnowledgeEntry.created_by")
    updater: Mapped[Optional["User"]] = relationship(foreign_keys="KnowledgeEntry.updated_by")


class ChatSession(_Timestamped, Base):
    __tablename__ = "chat_sessions"

    id: Mapped[uuid.UUID] = _uuid_pk()
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    title: Mapped[Optional[str]] = mapped_column(String, default="")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    user: Mapped["User"] = relationship()
    messages: Mapped[list["ChatMessage"]] = relationship(
        cascade="all, delete-orphan", order_by="ChatMessage.created_at"
    )


class ChatMessage(_Timestamped, Base):
    __tablename__ = "chat_messages"

    id: Mapped[uuid.UUID] = _uuid_pk()
    session_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("chat_sessions.id", ondelete="CASCADE"), nullable=False
    )
    role: Mapped[MessageRole] = mapped_column(_EnumString(MessageRole), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    metadata_: Mapped[Optional[str]] = mapped_column("metadata", Text)


class Feedback(_Timestamped, Base):
    __tablename__ = "feedbacks"

    id: Mapped[uuid.UUID] = _uuid_pk()
    message_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("chat_messages.id"), nullable=False
    )
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[Optional[str]] = mapped_column(Text, default="")
    type: Mapped[FeedbackType] = mapped_column(_EnumString(FeedbackType), nullable=False)
    is_resolved: Mapped[bool] = mapped_column(Boolean, default=False)

    message: Mapped["ChatMessage"] = relationship()
    user: Mapped["User"] = relationship()


class UploadedDocument(_Timestamped, Base):
    __tablename__ = "uploaded_documents"

    id: Mapped[uuid.UUID] = _uuid_pk()
    file_name: Mapped[str] = mapped_column(String, nullable=False)
    original_file_name: Mapped[str] = mapped_column(String, nullable=False)
    file_path: Mapped[str] = mapped_column(String, nullable=False)
    file_size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    mime_type: Mapped[str] = mapped_column(String, nullable=False)
    openai_file_id: Mapped[Optional[str]] = mapped_column(
        "open_ai_file_id", String, default="", info={"json": "openai_file_id"}
    )
    vector_store_id: Mapped[Optional[str]] = mapped_column(String, default="")
    vector_file_id: Mapped[Optional[str]] = mapped_column(String, default="")
    status: Mapped[DocumentStatus] = mapped_column(
        _EnumString(DocumentStatus), nullable=False, default=DocumentStatus.UPLOADED
    )
    error_message: Mapped[Optional[str]] = mapped_column(String, default="")
    uploaded_by: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)

    uploader: Mapped["User"] = relationship()


class VectorEmbedding(_Timestamped, Base):
    __tablename__ = "vector_embeddings"

    id: Mapped[uuid.UUID] = _uuid_pk()
    knowledge_entry_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("knowledge_entries.id"), nullable=False
    )
    vector_id: Mapped[str] = mapped_column(String, nullable=False)
    chunk_index: Mapped[int] = mapped_column(Integer, default=0)
    chunk_text: Mapped[Optional[str]] = mapped_column(Text, default="")

    knowledge_entry: Mapped["KnowledgeEntry"] = relationship()


class UploadedFile(Base):
    __tablename__ = "uploaded_files"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, info={"json": "ID"})
    file_name: Mapped[str] = mapped_column(String(255), nullable=False, info={"json": "FileName"})
    file_path: Mapped[str] = mapped_column(String(255), nullable=False, info={"json": "FilePath"})
    upload_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_now, info={"json": "UploadTime"}
    )


class APICallLog(Base):
    __tablename__ = "api_call_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, info={"json": "ID"})
    api_name: Mapped[str] = mapped_column(
        String(255), nullable=False, index=True, info={"json": "APIName"}
    )
    called_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_now, info={"json": "CalledAt"}
    )


class ContextFile(Base):
    __tablename__ = "context_files"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, info={"json": "ID"})
    file_name: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True, info={"json": "FileName"}
    )
    labels: Mapped[Optional[str]] = mapped_column(String(255), default="", info={"json": "Labels"})
    description: Mapped[Optional[str]] = mapped_column(
        String(255), default="", info={"json": "Description"}
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_now, onupdate=_now, info={"json": "UpdatedAt"}
    )
    status: Mapped[Optional[str]] = mapped_column(String(50), default="", info={"json": "Status"})


class Topic(Base):
    __tablename__ = "topics"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, info={"json": "ID"})
    name: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True, info={"json": "Name"}
    )
    description: Mapped[Optional[str]] = mapped_column(
        String(255), default="", info={"json": "Description"}
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_now, info={"json": "CreatedAt"}
    )


class TopicQuestionStat(Base):
    __tablename__ = "topic_question_stats"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, info={"json": "ID"})
    topic_id: Mapped[Optional[int]] = mapped_column(Integer, index=True, info={"json": "TopicID"})
    count: Mapped[int] = mapped_column(Integer, default=0, info={"json": "Count"})
    percent: Mapped[int] = mapped_column(Integer, default=0, info={"json": "Percent"})
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_now, onupdate=_now, info={"json": "UpdatedAt"}
    )


class TimeDistributionStat(Base):
    __tablename__ = "time_distribution_stats"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, info={"json": "ID"})
    time_range: Mapped[str] = mapped_column(
        String(50), nullable=False, unique=True, info={"json": "TimeRange"}
    )
    count: Mapped[int] = mapped_column(Integer, default=0, info={"json": "Count"})
    percent: Mapped[int] = mapped_column(Integer, default=0, info={"json": "Percent"})
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_now, onupdate=_now, info={"json": "UpdatedAt"}
    )


class TrackedChatLog(Base):
    __tablename__ = "tracked_chat_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, info={"json": "ID"})
    api_name: Mapped[str] = mapped_column(
        String(255), nullable=False, index=True, info={"json": "APIName"}
    )
    request_msg: Mapped[Optional[str]] = mapped_column(Text, default="", info={"json": "RequestMsg"})
    response_value: Mapped[Optional[str]] = mapped_column(
        Text, default="", info={"json": "ResponseValue"}
    )
    response_time: Mapped[int] = mapped_column(
        BigInteger, nullable=False, info={"json": "ResponseTime"}
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_now, info={"json": "CreatedAt"}
    )


def _plain(value):
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def to_dict(obj):
    """Return a JSON-ready dict of a model's columns and already-loaded relations."""
    state = inspect(obj)
    mapper = state.mapper
    result = {}
    for attr in mapper.column_attrs:
        column = attr.columns[0]
        if column.info.get("hidden"):
            continue
        result[column.info.get("json", column.name)] = _plain(getattr(obj, attr.key))
    unloaded = state.unloaded
    for rel in mapper.relationships:
        if rel.key in unloaded:
            continue
        value = getattr(obj, rel.key)
        if value is None:
            continue
        if rel.uselist:
            result[rel.key] = [to_dict(item) for item in value]
        else:
            result[rel.key] = to_dict(value)
    return result