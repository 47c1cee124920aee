import io
import os
from typing import Callable, Dict

# Parsing Libraries
from pypdf import PdfReader
import docx
from pptx import Presentation
import pandas as pd

from docqa.core.exceptions import ExtractionError
from docqa.core.logger import get_logger

log = get_logger(__name__)

# --- PDF Parsing ---
def _parse_pdf(data: bytes, original_name: str) -> str:
    reader = PdfReader(io.BytesIO(data))
    log.info(f"[Parser] Processing PDF: {original_name}, Pages: {len(reader.pages)}")
    pages = []
    for page_num, page in enumerate(reader.pages):
        page_text = page.extract_text() or ""
        if page_text.strip():
            pages.append(page_text)
        else:
            log.info(f"[Parser] Page {page_num + 1}: No text found.")
    return "\n".join(pages)

# --- DOCX Parsing ---
def _parse_docx(data: bytes, original_name: str) -> str:
    doc = docx.Document(io.BytesIO(data))
    log.info(f"[Parser] Processing DOCX: {original_name}")
    return "\n".join(para.text for para in doc.paragraphs if para.text.strip())

# --- PPTX Parsing ---
def _parse_pptx(data: bytes, original_name: str) -> str:
    prs = Presentation(io.BytesIO(data))
    log.info(f"[Parser] Processing PPTX: {original_name}")
    full_text = ""
    for i, slide in enumerate(prs.slides):
        slide_text = f"--- Slide {i+1} ---\n"
        for shape in slide.shapes:
            if hasattr(shape, "text") and shape.text.strip():
                slide_text += shape.text + "\n"
        if slide.has_notes_slide and slide.notes_slide.notes_text_frame and slide.notes_slide.notes_text_frame.text.strip():
            slide_text += "\nNotes:\n" + slide.notes_slide.notes_text_frame.text + "\n"
        full_text += slide_text + "\n"
    return full_text

# --- TXT Parsing ---
def _parse_txt(data: bytes, original_name: str) -> str:
    log.info(f"[Parser] Processing TXT: {original_name}")
    return data.decode("utf-8", errors="ignore")

# --- Structured Data Parsing (CSV, XLSX, JSON) ---
def generate_df_summary(df: pd.DataFrame, filename: str) -> str:
    """Creates a textual summary of a pandas DataFrame."""
    summary = f"Summary for {filename}:\n"
    summary += f"Columns: {', '.join(str(c) for c in df.columns)}\n"
    summary += f"Rows: {len(df)}\n"
    summary += "First 5 Rows:\n" + df.head().to_string() + "\n"
    return summary

def _parse_structured(data: bytes, original_name: str) -> str:
    file_extension = os.path.splitext(original_name)[1].lower()
    log.info(f"[Parser] Processing Structured Data ({file_extension}): {original_name}")
    if file_extension == '.csv':
        df = pd.read_csv(io.BytesIO(data))
    elif file_extension == '.xlsx':
        df = pd.read_excel(io.BytesIO(data))
    else:
        raw = data.decode("utf-8", errors="ignore")
        try:
            df = pd.read_json(io.StringIO(raw), orient='records', lines=True)
        except ValueError:
            try:
                df = pd.read_json(io.StringIO(raw), orient='records')
            except ValueError:
                # Nested JSON that pandas cannot tabulate: index the raw text
                log.info("[Parser] Parsed JSON as raw text.")
                return raw
    return generate_df_summary(df, original_name)

_PARSERS: Dict[str, Callable[[bytes, str], str]] = {
    '.pdf': _parse_pdf,
    '.docx': _parse_docx,
    '.pptx': _parse_pptx,
    '.txt': _parse_txt,
    '.md': _parse_txt,
    '.csv': _parse_structured,
    '.xlsx': _parse_structured,
    '.json': _parse_structured,
}

def supported_extensions() -> list:
    return sorted(_PARSERS)

# --- Main Processing Function ---
def extract_document_text(data: bytes, original_name: str) -> str:
    """
    Routes raw document bytes to a parser based on the file extension and
    returns the extracted plain text. Raises ExtractionError when the type is
    unsupported, the file cannot be read, or it contains no text.
    """
    file_extension = os.path.splitext(original_name)[1].lower()
    parser = _PARSERS.get(file_extension)
    if parser is None:
        raise ExtractionError(f"Unsupported file type '{file_extension or original_name}'")

    try:
        text = parser(data, original_name)
    except Exception as e:
        log.warning(f"[Parser Service] Failed to read {original_name}: {e}")
        raise ExtractionError(f"Could not read {original_name}: {e}") from e

    if not text.strip():
        raise ExtractionError(f"No extractable text in {original_name}")
    log.info(f"[Parser Service] Finished processing {original_name}: {len(text)} chars.")
    return text
