from typing import Optional

from docqa.core.config import settings
from docqa.core.logger import get_logger
from docqa.models.data_models import Document
from docqa.services.text_splitter import chunk_text, count_words

log = get_logger(__name__)

def build_document(
    name: str,
    text: str,
    size_bytes: int = 0,
    chunk_size: Optional[int] = None,
    overlap: Optional[int] = None,
) -> Document:
    """Chunks extracted text and wraps it in an immutable Document."""
    chunk_size = settings.CHUNK_SIZE if chunk_size is None else chunk_size
    overlap = settings.CHUNK_OVERLAP if overlap is None else overlap

    chunks = chunk_text(text, chunk_size=chunk_size, overlap=overlap)
    document = Document(
        name=name,
        raw_text=text,
        chunks=chunks,
        word_count=count_words(text),
        chunk_count=len(chunks),
        size_bytes=size_bytes,
    )
    log.info(f"[Indexer Service] Indexed '{name}': {document.word_count} words, {document.chunk_count} chunks (id={document.id}).")
    return document
