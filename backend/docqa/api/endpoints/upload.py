from fastapi import APIRouter, UploadFile, File, HTTPException, Depends
from typing import List
import os

from docqa.models.api_models import UploadResponse, UploadError, DocumentInfo
from docqa.core.config import settings
from docqa.core.exceptions import DocQAError
from docqa.core.logger import get_logger
from docqa.core.state import DocumentLibrary, get_library
from docqa.services.parser.main_parser import extract_document_text
from docqa.services.knowledge.indexer import build_document
from docqa.models.data_models import Document

log = get_logger(__name__)

router = APIRouter()

def to_document_info(document: Document, library: DocumentLibrary) -> DocumentInfo:
    return DocumentInfo(
        id=document.id,
        name=document.name,
        word_count=document.word_count,
        chunk_count=document.chunk_count,
        size_bytes=document.size_bytes,
        uploaded_at=document.uploaded_at,
        selected=library.is_selected(document.id),
    )

@router.post("/", response_model=UploadResponse)
async def handle_file_upload(files: List[UploadFile] = File(...), library: DocumentLibrary = Depends(get_library)):
    if not files: raise HTTPException(status_code=400, detail="No files uploaded.")
    log.info(f"API: Handling upload of {len(files)} file(s).")

    added: List[Document] = []
    errors: List[UploadError] = []
    for file in files:
        if not file.filename: continue
        safe_filename = os.path.basename(file.filename)
        try:
            extension = os.path.splitext(safe_filename)[1].lower()
            if extension not in settings.ALLOWED_EXTENSIONS:
                raise DocQAError(f"File type '{extension or safe_filename}' is not allowed.")
            data = await file.read()
            text = extract_document_text(data, safe_filename)
            document = build_document(safe_filename, text, size_bytes=len(data))
        except DocQAError as e:
            log.warning(f"API: Skipping {safe_filename}: {e}")
            errors.append(UploadError(name=safe_filename, message=str(e)))
            continue
        finally:
            await file.close()
        added.append(library.add(document, select=True))

    if not added and not errors: raise HTTPException(status_code=400, detail="No valid files uploaded.")

    status = "ok" if not errors else ("partial" if added else "error")
    message = f"Processed {len(added)} document(s)." + (f" {len(errors)} file(s) failed." if errors else "")
    log.info(f"API: Upload finished. {message}")
    return UploadResponse(
        status=status,
        documents=[to_document_info(doc, library) for doc in added],
        errors=errors,
        message=message,
    )
