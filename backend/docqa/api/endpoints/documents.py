from fastapi import APIRouter, HTTPException, Depends
from typing import List

from docqa.api.endpoints.upload import to_document_info
from docqa.core.exceptions import DocumentNotFound
from docqa.core.logger import get_logger
from docqa.core.state import DocumentLibrary, get_library
from docqa.models.api_models import DocumentInfo, SelectionRequest, SelectionResponse

log = get_logger(__name__)

router = APIRouter()

@router.get("/", response_model=List[DocumentInfo])
async def list_documents(library: DocumentLibrary = Depends(get_library)):
    return [to_document_info(doc, library) for doc in library.list_documents()]

@router.put("/selection", response_model=SelectionResponse)
async def replace_selection(request: SelectionRequest, library: DocumentLibrary = Depends(get_library)):
    try:
        selected = library.set_selection(request.document_ids)
    except DocumentNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    log.info(f"[Documents Endpoint] Selection set to {len(selected)} document(s).")
    return SelectionResponse(selected_ids=selected)

@router.post("/{document_id}/toggle", response_model=DocumentInfo)
async def toggle_document(document_id: str, library: DocumentLibrary = Depends(get_library)):
    try:
        library.toggle(document_id)
        document = library.get(document_id)
    except DocumentNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    return to_document_info(document, library)

@router.delete("/{document_id}", response_model=DocumentInfo)
async def remove_document(document_id: str, library: DocumentLibrary = Depends(get_library)):
    try:
        document = library.remove(document_id)
    except DocumentNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    log.info(f"[Documents Endpoint] Removed '{document.name}' ({document_id}).")
    return to_document_info(document, library)
