from typing import List
from docqa.core.config import settings
from docqa.core.exceptions import InvalidConfiguration
from docqa.models.data_models import Chunk

def count_words(text: str) -> int:
    """Number of whitespace-separated words in text."""
    return len(text.split())

def chunk_text(text: str, chunk_size: int = settings.CHUNK_SIZE, overlap: int = settings.CHUNK_OVERLAP) -> List[Chunk]:
    """
    Splits text into overlapping fixed-size word windows.

    Windows start every `chunk_size - overlap` words and cover
    [start, min(start + chunk_size, word_count)). Generation stops once a
    window reaches the last word, so the final chunk's end_index always equals
    the word count. start_index/end_index are word offsets, meant for
    provenance display only.
    """
    if chunk_size <= 0:
        raise InvalidConfiguration(f"chunk_size must be positive, got {chunk_size}")
    if overlap < 0:
        raise InvalidConfiguration(f"overlap must not be negative, got {overlap}")
    step = chunk_size - overlap
    if step <= 0:
        raise InvalidConfiguration(f"overlap ({overlap}) must be smaller than chunk_size ({chunk_size})")

    words = text.split()
    chunks: List[Chunk] = []
    for start in range(0, len(words), step):
        end = min(start + chunk_size, len(words))
        piece = " ".join(words[start:end])
        if piece.strip():
            chunks.append(Chunk(text=piece, start_index=start, end_index=end))
        if end >= len(words):
            break
    return chunks
