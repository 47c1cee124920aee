import math
from typing import List, Sequence, Tuple

from docqa.core.exceptions import DegenerateInput
from docqa.core.logger import get_logger
from docqa.models.data_models import Chunk, Document, ScoredChunk

log = get_logger(__name__)

EXACT_MATCH_WEIGHT = 2.0
PARTIAL_MATCH_WEIGHT = 0.5
PARTIAL_MATCH_MIN_LENGTH = 3  # words must be longer than this to partially match
MIN_SIMILARITY = 0.1  # results must score strictly above this

def score_relevance(query: str, text: str) -> float:
    """
    Lexical token-overlap score between a query and a chunk of text.

    Exact pass: +2.0 per distinct query word found in the text's word set.
    Partial pass: over every (query word, text word) pair, duplicates included,
    +0.5 when the query word minus its last character occurs inside the text
    word, and +0.5 the other way round. Words of length <= 3 never partially
    match. The sum is divided by sqrt(len(query_words) * len(text_words)).

    Raises DegenerateInput if either side has no words.
    """
    query_words = query.lower().split()
    text_words = text.lower().split()
    if not query_words or not text_words:
        raise DegenerateInput("Cannot score an empty query or an empty chunk.")

    score = 0.0
    text_word_set = set(text_words)
    for word in set(query_words):
        if word in text_word_set:
            score += EXACT_MATCH_WEIGHT

    for query_word in query_words:
        for text_word in text_words:
            if len(query_word) > PARTIAL_MATCH_MIN_LENGTH and query_word[:-1] in text_word:
                score += PARTIAL_MATCH_WEIGHT
            if len(text_word) > PARTIAL_MATCH_MIN_LENGTH and text_word[:-1] in query_word:
                score += PARTIAL_MATCH_WEIGHT

    return score / math.sqrt(len(query_words) * len(text_words))

def collect_candidates(documents: Sequence[Document]) -> List[Tuple[Chunk, str]]:
    """Flattens documents into (chunk, document name) pairs, in document order."""
    return [(chunk, doc.name) for doc in documents for chunk in doc.chunks]

def retrieve_relevant_chunks(query: str, chunks: Sequence[Tuple[Chunk, str]], top_k: int = 5) -> List[ScoredChunk]:
    """
    Scores every candidate, keeps the top_k best and then drops anything at or
    below MIN_SIMILARITY. Truncation happens before filtering, so fewer than
    top_k results (including none) is a normal outcome.
    """
    if not chunks:
        log.info("[Search Service] No candidate chunks for query.")
        return []

    scored = [
        ScoredChunk(chunk=chunk, document_name=doc_name, similarity=score_relevance(query, chunk.text))
        for chunk, doc_name in chunks
    ]
    # sorted() is stable, so ties keep candidate order
    ranked = sorted(scored, key=lambda s: s.similarity, reverse=True)[:top_k]
    relevant = [s for s in ranked if s.similarity > MIN_SIMILARITY]
    log.info(f"[Search Service] Scored {len(scored)} chunks, {len(relevant)} above {MIN_SIMILARITY} (top_k={top_k}).")
    return relevant
