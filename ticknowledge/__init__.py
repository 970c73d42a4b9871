"""Knowledge base models, question tracking, file uploads, a dashboard and an HTTP API."""

__version__ = "1.0.0"