from pydantic import BaseModel, ConfigDict, Field
from typing import List
from datetime import datetime, timezone
import uuid

class Chunk(BaseModel):
    """A bounded, overlapping slice of a document's word stream."""
    model_config = ConfigDict(frozen=True)

    text: str
    start_index: int  # word offset, inclusive
    end_index: int  # word offset, exclusive

class Document(BaseModel):
    """An ingested document. Chunks are attached once, at creation."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str  # Original filename
    raw_text: str
    chunks: List[Chunk] = Field(default_factory=list)
    word_count: int = 0
    chunk_count: int = 0
    size_bytes: int = 0
    uploaded_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

class ScoredChunk(BaseModel):
    """Query-scoped wrapper around a chunk; never persisted."""
    model_config = ConfigDict(frozen=True)

    chunk: Chunk
    document_name: str
    similarity: float

    @property
    def text(self) -> str:
        return self.chunk.text

class AssembledContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    context_text: str
    source_labels: List[str] = Field(default_factory=list)

class AnswerResult(BaseModel):
    answer: str
    sources: List[str] = Field(default_factory=list)
    relevant_chunks: int = 0
