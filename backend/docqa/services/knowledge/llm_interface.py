from typing import List, Optional, Sequence

from docqa.core.config import settings
from docqa.core.exceptions import NoRelevantContext
from docqa.core.logger import get_logger
from docqa.models.data_models import AnswerResult, AssembledContext, Document, ScoredChunk
from docqa.services.knowledge.providers import Provider, invoke_provider, require_credential, resolve_provider
from docqa.services.knowledge.search import collect_candidates, retrieve_relevant_chunks
from docqa.services.knowledge.transport import Transport

log = get_logger(__name__)

SYSTEM_PROMPT = """You are a helpful assistant that answers questions based on provided document context.
Always cite which document sections you're referencing and be specific about the information you found.
If the context doesn't contain enough information to answer the question, say so clearly."""

def assemble_context(scored_chunks: Sequence[ScoredChunk]) -> AssembledContext:
    """Labels each chunk with its 1-based rank and document, in ranked order."""
    lines = [f"[Source {i + 1} - {sc.document_name}]: {sc.chunk.text}" for i, sc in enumerate(scored_chunks)]
    labels = [f"{sc.document_name} (chunk {sc.chunk.start_index}-{sc.chunk.end_index})" for sc in scored_chunks]
    return AssembledContext(context_text="\n".join(lines), source_labels=labels)

def build_user_prompt(question: str, context_text: str, document_names: Sequence[str]) -> str:
    return (
        f"Context from documents ({', '.join(document_names)}):\n"
        f"{context_text}\n"
        f"Question: {question}\n"
        "Please provide a comprehensive answer based on the context above. "
        "Include specific references to the document sections when possible."
    )

async def answer_question(
    question: str,
    documents: Sequence[Document],
    provider: str,
    api_key: Optional[str],
    top_k: int = settings.SEARCH_TOP_K,
    transport: Optional[Transport] = None,
) -> AnswerResult:
    """
    Runs one query turn: retrieve from the given documents, assemble context,
    ask the provider. Raises NoRelevantContext instead of sending a
    contextless prompt.
    """
    # Fail on configuration before spending time on retrieval
    require_credential(api_key)
    resolved: Provider = resolve_provider(provider)

    candidates = collect_candidates(documents)
    log.info(f"[LLM Service] Question over {len(documents)} document(s), {len(candidates)} chunk(s).")
    relevant = retrieve_relevant_chunks(question, candidates, top_k=top_k)
    if not relevant:
        raise NoRelevantContext()

    assembled = assemble_context(relevant)
    document_names: List[str] = [doc.name for doc in documents]
    user_prompt = build_user_prompt(question, assembled.context_text, document_names)
    log.debug(f"[LLM Service] Context (Start): {assembled.context_text[:200]}...")

    answer = await invoke_provider(resolved, api_key, SYSTEM_PROMPT, user_prompt, transport=transport)
    return AnswerResult(answer=answer, sources=assembled.source_labels, relevant_chunks=len(relevant))
