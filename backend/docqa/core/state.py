# backend/docqa/core/state.py
from typing import Dict, Iterable, List, Optional

from docqa.core.exceptions import DocumentNotFound
from docqa.models.data_models import Document

# --- Simple In-Memory Store ---
# Lost on server restart. All endpoints are async and run on one event loop,
# so no locking is needed.

class DocumentLibrary:
    """Uploaded documents plus the subset currently selected for retrieval."""

    def __init__(self):
        self._documents: Dict[str, Document] = {}  # insertion order = upload order
        self._selected: Dict[str, None] = {}  # ordered set

    def add(self, document: Document, select: bool = True) -> Document:
        self._documents[document.id] = document
        if select:
            self._selected[document.id] = None
        return document

    def get(self, document_id: str) -> Document:
        try:
            return self._documents[document_id]
        except KeyError:
            raise DocumentNotFound(document_id) from None

    def remove(self, document_id: str) -> Document:
        document = self.get(document_id)
        del self._documents[document_id]
        self._selected.pop(document_id, None)
        return document

    def list_documents(self) -> List[Document]:
        return list(self._documents.values())

    @property
    def selected_ids(self) -> List[str]:
        return list(self._selected)

    def is_selected(self, document_id: str) -> bool:
        return document_id in self._selected

    def set_selection(self, document_ids: Iterable[str]) -> List[str]:
        document_ids = list(document_ids)
        for document_id in document_ids:
            self.get(document_id)
        self._selected = dict.fromkeys(document_ids)
        return self.selected_ids

    def toggle(self, document_id: str) -> bool:
        """Flips the selection of one document; returns the new state."""
        self.get(document_id)
        if document_id in self._selected:
            del self._selected[document_id]
            return False
        self._selected[document_id] = None
        return True

    def selected_documents(self, document_ids: Optional[Iterable[str]] = None) -> List[Document]:
        """Documents for the given ids (default: the current selection), in upload order."""
        wanted = set(self._selected if document_ids is None else document_ids)
        for document_id in wanted:
            self.get(document_id)
        return [doc for doc in self._documents.values() if doc.id in wanted]

    def total_chunks(self) -> int:
        return sum(doc.chunk_count for doc in self._documents.values())

    def clear(self) -> None:
        self._documents.clear()
        self._selected.clear()

library = DocumentLibrary()

def get_library() -> DocumentLibrary:
    """FastAPI dependency; tests override it with a fresh library."""
    return library
