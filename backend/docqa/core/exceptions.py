# backend/docqa/core/exceptions.py
"""
Error taxonomy for the document Q&A pipeline.

Every error is terminal for the current query turn: nothing here is retried.
The API layer turns these into a single readable message on the turn's result.
"""
from typing import Optional


class DocQAError(Exception):
    """Base class for all pipeline errors."""


# --- Chunking / Scoring (configuration or programming defects) ---
class InvalidConfiguration(DocQAError):
    """Chunking parameters produce a non-advancing window."""


class DegenerateInput(DocQAError):
    """Scoring attempted on an empty query or empty chunk text."""


# --- Retrieval ---
class NoRelevantContext(DocQAError):
    """No chunk cleared the similarity threshold for the query."""

    def __init__(self, message: str = "No relevant information found in the selected documents."):
        super().__init__(message)


# --- Provider Gateway ---
class MissingCredential(DocQAError):
    """No API key was supplied; raised before any network attempt."""

    def __init__(self, message: str = "API key not configured"):
        super().__init__(message)


class UnsupportedProvider(DocQAError):
    """The provider tag is not one of the known providers."""

    def __init__(self, provider: object):
        self.provider = provider
        super().__init__(f"Unsupported API provider: {provider!r}")


class UpstreamError(DocQAError):
    """The LLM backend (or the transport in front of it) reported a non-success status."""

    def __init__(self, status_code: Optional[int], status_text: str = ""):
        self.status_code = status_code
        self.status_text = status_text
        super().__init__(f"API Error: {status_code} {status_text}".strip())


class MalformedResponse(DocQAError):
    """A success response whose body does not match the provider schema."""


# --- Ingestion / Library ---
class ExtractionError(DocQAError):
    """Text could not be extracted from an uploaded document."""


class DocumentNotFound(DocQAError):
    """A document id is not part of the library."""

    def __init__(self, document_id: str):
        self.document_id = document_id
        super().__init__(f"Document not found: {document_id}")
