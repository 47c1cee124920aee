# backend/docqa/api/endpoints/status.py
from fastapi import APIRouter, Depends

from docqa.core.config import settings
from docqa.core.state import DocumentLibrary, get_library
from docqa.models.api_models import StatusResponse
from docqa.services.knowledge.providers import supported_providers

router = APIRouter()

@router.get("/", response_model=StatusResponse)
async def get_status(library: DocumentLibrary = Depends(get_library)):
    """
    Reports what the library holds and which providers can be asked.
    """
    documents = library.list_documents()
    return StatusResponse(
        status="ready" if documents else "empty",
        documents=len(documents),
        selected=len(library.selected_ids),
        chunks=library.total_chunks(),
        providers=supported_providers(),
        default_provider=settings.DEFAULT_PROVIDER,
    )
