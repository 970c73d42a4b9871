"""Application settings read from the environment and an optional .env file."""

from dataclasses import MISSING, dataclass, field, fields
import os
from pathlib import Path

from dotenv import load_dotenv


def _env(name, default=""):
    return field(default=default, metadata={"env": name})


def _blank():
    return field(default_factory=str)


@dataclass(frozen=True)
class Config:
    """Runtime configuration; every value is kept as the string it was given.

    A field reads the environment variable named in its metadata, or else
    the variable named by its own name in upper case.
    """

    port: str = _env("PORT", "8080")
    database_url: str = _env("DATABASE_URL")
    openai_key: str = _env("OPENAI_API_KEY")
    jwt_secret: str = _blank()
    vector_db_url: str = _env("VECTOR_DB_URL", "http://localhost:6333")
    cors_origins: str = _env("CORS_ORIGINS", "*")

    db_host: str = _env("DB_HOST", "localhost")
    db_port: str = _env("DB_PORT", "5432")
    db_name: str = _env("DB_NAME", "tic_knowledge_db")
    db_user: str = _env("DB_USER", "username")
    db_password: str = "password"
    db_ssl_mode: str = _env("DB_SSLMODE", "disable")

    openai_model: str = _env("OPENAI_MODEL", "gpt-4")
    openai_embedding_model: str = _env("OPENAI_EMBEDDING_MODEL", "text-embedding-ada-002")
    max_tokens: str = _env("MAX_TOKENS", "1000")
    temperature: str = _env("TEMPERATURE", "0.7")

    gemini_api_key: str = _blank()
    gemini_model: str = _env("GEMINI_MODEL", "gemini-1.5-pro")

    primary_ai_provider: str = _env("PRIMARY_AI_PROVIDER", "openai")
    embedding_provider: str = _env("EMBEDDING_PROVIDER", "openai")

    qdrant_host: str = _env("QDRANT_HOST", "localhost")
    qdrant_port: str = _env("QDRANT_PORT", "6333")
    qdrant_collection_name: str = _env("QDRANT_COLLECTION_NAME", "knowledge_base")
    vector_dimension: str = _env("VECTOR_DIMENSION", "1536")


def _get_env(name, default):
    value = os.environ.get(name, "")
    return value if value else default


def _default_of(f):
    if f.default is not MISSING:
        return f.default
    return f.default_factory()


def _env_name_of(f):
    return f.metadata.get("env", f.name.upper())


def load():
    """Build a Config from the environment, reading ./.env first if present.

    Variables already set in the environment are not overridden by the file;
    empty variables fall back to their defaults.
    """
    env_file = Path.cwd() / ".env"
    if env_file.is_file():
        load_dotenv(env_file, override=False)
    return Config(
        **{f.name: _get_env(_env_name_of(f), _default_of(f)) for f in fields(Config)}
    )