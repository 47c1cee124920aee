# frontend/app.py

import streamlit as st
import requests
import os
from datetime import datetime

# --- Configuration ---
BACKEND_URL = os.getenv("BACKEND_URL", "http://127.0.0.1:8000")
UPLOAD_ENDPOINT = f"{BACKEND_URL}/api/v1/upload/"
DOCUMENTS_ENDPOINT = f"{BACKEND_URL}/api/v1/documents"
ASK_ENDPOINT = f"{BACKEND_URL}/api/v1/ask/"
STATUS_ENDPOINT = f"{BACKEND_URL}/api/v1/status/"
PROVIDER_LABELS = {
    "openai": "OpenAI (GPT-3.5/4)",
    "anthropic": "Anthropic (Claude)",
    "openrouter": "OpenRouter",
    "groq": "Groq",
    "gemini": "Google Gemini",
}

# --- Set Page Config FIRST ---
st.set_page_config(page_title="Document Q&A", layout="wide", initial_sidebar_state="expanded")

# --- Custom CSS ---
st.markdown("""
<style>
    div[data-testid="stChatMessage"][class*="user"] { background-color: #DCF8C6; border-radius: 10px 10px 0 10px; padding: 10px; border: 1px solid #A5D6A7; margin-bottom: 10px; }
    div[data-testid="stChatMessage"][class*="assistant"] { background-color: #FFFFFF; border-radius: 10px 10px 10px 0; padding: 10px; border: 1px solid #E0E0E0; margin-bottom: 10px; }
    .stCaption { font-size: 0.85em; color: #555; }
    .stButton>button { width: 100%; }
</style>
""", unsafe_allow_html=True)

# --- Helper Functions ---
def display_sources(sources, relevant_chunks):
    """Displays the ranked source labels for one answer."""
    if sources:
        with st.expander(f"View Sources ({relevant_chunks} relevant chunks)", expanded=False):
            for source in sources:
                st.caption(f"- {source}")

def format_transcript(messages):
    """Plain-text transcript: one block per message, sources listed under answers."""
    blocks = []
    for msg in messages:
        block = f"{msg['role'].upper()} [{msg['timestamp']}]:\n{msg['content']}\n"
        if msg.get("sources"):
            block += f"\nSources: {', '.join(msg['sources'])}\n"
        blocks.append(block)
    return "\n".join(blocks)

def fetch_status():
    try:
        response = requests.get(STATUS_ENDPOINT, timeout=15)
        response.raise_for_status()
        return response.json()
    except requests.exceptions.RequestException as e:
        print(f"Frontend: Status check failed: {e}")
        return None

def fetch_documents():
    try:
        response = requests.get(f"{DOCUMENTS_ENDPOINT}/", timeout=15)
        response.raise_for_status()
        return response.json()
    except requests.exceptions.RequestException as e:
        st.session_state.upload_status_message = f"❌ Could not load documents: {e}"
        st.session_state.upload_status_type = "error"
        return []

def now():
    return datetime.now().strftime("%H:%M:%S")

# --- Streamlit App ---
st.title("📄 Document Q&A")
st.markdown("Upload documents (PDF, DOCX, PPTX, TXT, MD, CSV, XLSX, JSON), pick which ones to search, and ask questions.")

# --- Session State Init ---
default_state = {"messages": [], "api_key": "", "provider": None, "upload_status_message": "", "upload_status_type": "info", "uploader_key": 0}
for key, default_value in default_state.items():
    if key not in st.session_state: st.session_state[key] = default_value

backend_status = fetch_status()
providers = (backend_status or {}).get("providers") or list(PROVIDER_LABELS)
if st.session_state.provider is None:
    st.session_state.provider = (backend_status or {}).get("default_provider", providers[0])

# --- Sidebar ---
with st.sidebar:
    with st.expander("⚙️ API Configuration", expanded=not st.session_state.api_key):
        st.session_state.provider = st.selectbox(
            "Provider",
            providers,
            index=providers.index(st.session_state.provider) if st.session_state.provider in providers else 0,
            format_func=lambda p: PROVIDER_LABELS.get(p, p),
        )
        st.session_state.api_key = st.text_input("API key", value=st.session_state.api_key, type="password", placeholder="Enter your API key...")
        st.caption("The key is kept in this browser session only and sent with each question.")

    st.header("Upload Documents")
    uploaded_files = st.file_uploader(
        "Choose files",
        accept_multiple_files=True,
        type=["pdf", "docx", "pptx", "txt", "md", "csv", "xlsx", "json"],
        key=f"file_uploader_{st.session_state.uploader_key}",
    )
    if uploaded_files and st.button("Process Files", key="process"):
        with st.spinner(f"Processing {len(uploaded_files)} file(s)..."):
            files_to_send = [("files", (f.name, f.getvalue(), f.type)) for f in uploaded_files]
            try:
                response = requests.post(UPLOAD_ENDPOINT, files=files_to_send, timeout=120)
                response.raise_for_status()
                result = response.json()
                failed = "; ".join(f"{e['name']}: {e['message']}" for e in result.get("errors", []))
                st.session_state.upload_status_message = result.get("message", "") + (f" {failed}" if failed else "")
                st.session_state.upload_status_type = {"ok": "success", "partial": "warning"}.get(result.get("status"), "error")
            except requests.exceptions.RequestException as e:
                st.session_state.upload_status_message = f"❌ Upload Request Error: {e}"
                st.session_state.upload_status_type = "error"
        st.session_state.uploader_key += 1  # Reset the uploader widget
        st.rerun()

    if st.session_state.upload_status_message:
        msg = st.session_state.upload_status_message
        st_type = st.session_state.upload_status_type
        if st_type == "success": st.success(msg, icon="✅")
        elif st_type == "warning": st.warning(msg, icon="⚠️")
        elif st_type == "error": st.error(msg, icon="❌")
        else: st.info(msg)

    # --- Document list with selection ---
    documents = fetch_documents()
    selected_count = sum(1 for d in documents if d["selected"])
    with st.expander(f"Documents ({selected_count}/{len(documents)} selected)", expanded=True):
        if not documents:
            st.caption("No documents uploaded yet.")
        for doc in documents:
            col_select, col_remove = st.columns([5, 1])
            with col_select:
                checked = st.checkbox(doc["name"], value=doc["selected"], key=f"select_{doc['id']}")
                st.caption(f"{doc['word_count']} words · {doc['chunk_count']} chunks · {doc['size_bytes'] / 1024 / 1024:.2f} MB")
            if checked != doc["selected"]:
                requests.post(f"{DOCUMENTS_ENDPOINT}/{doc['id']}/toggle", timeout=15)
                st.rerun()
            with col_remove:
                if st.button("🗑️", key=f"remove_{doc['id']}"):
                    requests.delete(f"{DOCUMENTS_ENDPOINT}/{doc['id']}", timeout=15)
                    st.rerun()

    # --- Chat Controls ---
    st.markdown("---")
    if st.button("Clear Chat", key="clear"): st.session_state.messages = []; st.rerun()
    if st.session_state.messages:
        st.download_button(
            "Download Chat",
            data=format_transcript(st.session_state.messages),
            file_name=f"docqa_chat_{datetime.now().strftime('%Y-%m-%d')}.txt",
            mime="text/plain",
        )
    st.markdown("---"); st.caption(f"Backend API: {BACKEND_URL}")

# --- Chat Interface ---
message_container = st.container()
with message_container:
    for msg in st.session_state.get('messages', []):
        with st.chat_message(msg["role"]):
            st.markdown(msg["content"])
            if msg["role"] == "assistant" and msg.get("type") == "text":
                display_sources(msg.get("sources", []), msg.get("relevant_chunks", 0))

prompt = st.chat_input("Ask a question about the selected documents...",
                       disabled=selected_count == 0,
                       key="chat_input")

if prompt:
    cleaned_prompt = prompt.strip()
    if not cleaned_prompt: st.warning("Enter question.")
    elif not st.session_state.api_key: st.error("Please configure your API key in settings first.")
    else: st.session_state.messages.append({"role": "user", "content": cleaned_prompt, "type": "text", "timestamp": now()}); st.rerun()

# Generate the assistant response if the last message was from the user
if st.session_state.get('messages') and st.session_state.messages[-1]["role"] == "user":
    last_user_message = st.session_state.messages[-1]["content"]
    with st.chat_message("assistant"):
        mp = st.empty(); mp.markdown("Thinking... ▌")
        content = ""; srcs = []; rt = "error"; relevant = 0
        payload = {
            "question": last_user_message,
            "provider": st.session_state.provider,
            "api_key": st.session_state.api_key,
            "document_ids": [d["id"] for d in documents if d["selected"]],
        }
        try:
            r = requests.post(ASK_ENDPOINT, json=payload, timeout=180)
            r.raise_for_status()
            res = r.json()
            content = res.get("answer", "Error"); rt = res.get("type", "error"); srcs = res.get("sources", []); relevant = res.get("relevant_chunks", 0)
        except requests.exceptions.HTTPError as e:
            try: detail = r.json().get("detail", r.text)
            except ValueError: detail = r.text
            content = f"❌ Ask Error: {detail} (Status: {r.status_code})"
        except requests.exceptions.RequestException as e:
            content = f"❌ Ask Error: {e}"
        st.session_state.messages.append({"role": "assistant", "content": content, "type": rt, "sources": srcs if rt == "text" else [], "relevant_chunks": relevant, "timestamp": now()})
        mp.empty()
        st.markdown(content)
        if rt == "text": display_sources(srcs, relevant)
