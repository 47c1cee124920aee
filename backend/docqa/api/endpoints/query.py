# backend/docqa/api/endpoints/query.py

from fastapi import APIRouter, HTTPException, Depends

from docqa.models.api_models import AskRequest, AskResponse
from docqa.core.config import settings
from docqa.core.exceptions import DocQAError, DocumentNotFound, NoRelevantContext
from docqa.core.logger import get_logger
from docqa.core.state import DocumentLibrary, get_library
from docqa.services.knowledge.llm_interface import answer_question
from docqa.services.knowledge.transport import HttpxTransport, Transport

log = get_logger(__name__)

router = APIRouter()

def get_transport() -> Transport:
    """FastAPI dependency for the LLM transport; tests override it."""
    return HttpxTransport(timeout=settings.LLM_REQUEST_TIMEOUT)

# --- Main Query Endpoint ---
@router.post("/", response_model=AskResponse)
async def handle_ask_question(
    request: AskRequest,
    library: DocumentLibrary = Depends(get_library),
    transport: Transport = Depends(get_transport),
):
    question = request.question.strip()
    log.info(f"Received question: '{question}'")
    if not question: raise HTTPException(400, "Missing question.")

    try:
        documents = library.selected_documents(request.document_ids)
    except DocumentNotFound as e:
        raise HTTPException(404, str(e))
    if not documents: raise HTTPException(400, "No documents selected.")

    provider = request.provider or settings.DEFAULT_PROVIDER
    api_key = request.api_key or settings.api_key_for(provider)
    top_k = request.top_k or settings.SEARCH_TOP_K

    try:
        result = await answer_question(question, documents, provider, api_key, top_k=top_k, transport=transport)
    except NoRelevantContext as e:
        log.info(f"No relevant context for '{question}'.")
        return AskResponse(answer=str(e), type="not_found", message=str(e))
    except DocQAError as e:
        log.warning(f"Question failed ({type(e).__name__}): {e}")
        return AskResponse(answer=f"❌ Error: {e}", type="error", message=str(e))

    return AskResponse(
        answer=result.answer,
        type="text",
        sources=result.sources,
        relevant_chunks=result.relevant_chunks,
    )
