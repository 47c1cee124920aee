from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

class DocumentInfo(BaseModel):
    id: str
    name: str
    word_count: int
    chunk_count: int
    size_bytes: int
    uploaded_at: datetime
    selected: bool = False

class UploadError(BaseModel):
    name: str
    message: str

class UploadResponse(BaseModel):
    status: str  # 'ok', 'partial', 'error'
    documents: List[DocumentInfo] = []
    errors: List[UploadError] = []
    message: Optional[str] = None

class SelectionRequest(BaseModel):
    document_ids: List[str]

class SelectionResponse(BaseModel):
    selected_ids: List[str]

class AskRequest(BaseModel):
    question: str
    provider: Optional[str] = None  # Falls back to settings.DEFAULT_PROVIDER
    api_key: Optional[str] = None  # Falls back to the provider key in settings
    document_ids: Optional[List[str]] = None  # Falls back to the current selection
    top_k: Optional[int] = Field(default=None, ge=1)

class AskResponse(BaseModel):
    answer: str
    type: str  # 'text', 'not_found', 'error'
    sources: List[str] = []
    relevant_chunks: int = 0
    message: Optional[str] = None  # Error message for 'not_found' / 'error'

class StatusResponse(BaseModel):
    status: str
    documents: int
    selected: int
    chunks: int
    providers: List[str]
    default_provider: str
