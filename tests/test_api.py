from docqa.core.config import settings
from docqa.services.knowledge.indexer import build_document
from conftest import SAMPLE_TEXT, make_response


def _upload(client, *files):
    return client.post("/api/v1/upload/", files=[("files", f) for f in files])


def test_root(client):
    assert client.get("/").json() == {"message": f"Welcome to {settings.PROJECT_NAME}"}


class TestUpload:

    def test_upload_indexes_and_selects(self, client, library):
        response = _upload(client, ("sample.txt", SAMPLE_TEXT.encode(), "text/plain"))

        assert response.status_code == 200
        payload = response.json()
        assert payload["status"] == "ok"
        assert payload["errors"] == []
        [info] = payload["documents"]
        assert info["name"] == "sample.txt"
        assert info["word_count"] == len(SAMPLE_TEXT.split())
        assert info["chunk_count"] == 1
        assert info["selected"] is True
        assert library.selected_ids == [info["id"]]

    def test_bad_files_are_reported_per_file(self, client, library):
        response = _upload(
            client,
            ("good.txt", b"some words here", "text/plain"),
            ("picture.png", b"\x89PNG", "image/png"),
            ("empty.txt", b"   ", "text/plain"),
        )

        payload = response.json()
        assert response.status_code == 200
        assert payload["status"] == "partial"
        assert [d["name"] for d in payload["documents"]] == ["good.txt"]
        assert [e["name"] for e in payload["errors"]] == ["picture.png", "empty.txt"]
        assert len(library.list_documents()) == 1

    def test_all_files_failing(self, client, library):
        payload = _upload(client, ("broken.pdf", b"not a pdf", "application/pdf")).json()

        assert payload["status"] == "error"
        assert payload["documents"] == []
        assert library.list_documents() == []

    def test_path_components_are_stripped(self, client):
        payload = _upload(client, ("../../etc/notes.txt", b"hello there", "text/plain")).json()

        assert payload["documents"][0]["name"] == "notes.txt"


class TestDocuments:

    def test_list_toggle_select_remove(self, client, library):
        a = library.add(build_document("a.txt", "alpha beta"))
        b = library.add(build_document("b.txt", "gamma delta"))

        listed = client.get("/api/v1/documents/").json()
        assert [(d["name"], d["selected"]) for d in listed] == [("a.txt", True), ("b.txt", True)]

        toggled = client.post(f"/api/v1/documents/{a.id}/toggle").json()
        assert toggled["selected"] is False

        response = client.put("/api/v1/documents/selection", json={"document_ids": [a.id]})
        assert response.json() == {"selected_ids": [a.id]}

        removed = client.delete(f"/api/v1/documents/{a.id}")
        assert removed.status_code == 200
        assert removed.json()["name"] == "a.txt"
        assert library.selected_ids == []
        assert [d.id for d in library.list_documents()] == [b.id]

    def test_unknown_ids_are_404(self, client, library):
        library.add(build_document("a.txt", "alpha"))

        assert client.delete("/api/v1/documents/ghost").status_code == 404
        assert client.post("/api/v1/documents/ghost/toggle").status_code == 404
        assert client.put("/api/v1/documents/selection", json={"document_ids": ["ghost"]}).status_code == 404


class TestAsk:

    def _ask(self, client, **overrides):
        payload = {"question": "machine learning", "provider": "openai", "api_key": "sk-test"}
        payload.update(overrides)
        return client.post("/api/v1/ask/", json=payload)

    def test_answer_with_sources(self, client, library, spy_transport):
        document = library.add(build_document("sample.pdf", SAMPLE_TEXT))
        spy_transport.response = make_response(200, {"choices": [{"message": {"content": "ML is discussed."}}]})

        response = self._ask(client)

        assert response.status_code == 200
        assert response.json() == {
            "answer": "ML is discussed.",
            "type": "text",
            "sources": [f"sample.pdf (chunk 0-{document.word_count})"],
            "relevant_chunks": 1,
            "message": None,
        }
        prompt = spy_transport.calls[0]["body"]["messages"][1]["content"]
        assert prompt.startswith("Context from documents (sample.pdf):")

    def test_only_requested_documents_are_searched(self, client, library, spy_transport):
        ml = library.add(build_document("ml.txt", SAMPLE_TEXT))
        budget = library.add(build_document("budget.txt", "quarterly budget planning"))

        response = self._ask(client, document_ids=[budget.id])

        assert response.json()["type"] == "not_found"
        assert spy_transport.calls == []

        response = self._ask(client, document_ids=[ml.id, budget.id])
        assert response.json()["sources"][0].startswith("ml.txt")

    def test_no_relevant_context_is_a_clear_message(self, client, library, spy_transport):
        library.add(build_document("budget.txt", "quarterly budget planning"))

        payload = self._ask(client).json()

        assert payload["type"] == "not_found"
        assert payload["answer"] == "No relevant information found in the selected documents."
        assert spy_transport.calls == []

    def test_missing_key_never_reaches_transport(self, client, library, spy_transport, monkeypatch):
        monkeypatch.setattr(settings, "OPENAI_API_KEY", None)
        library.add(build_document("sample.pdf", SAMPLE_TEXT))

        payload = self._ask(client, api_key="").json()

        assert payload["type"] == "error"
        assert payload["message"] == "API key not configured"
        assert spy_transport.calls == []

    def test_key_falls_back_to_settings(self, client, library, spy_transport, monkeypatch):
        monkeypatch.setattr(settings, "OPENAI_API_KEY", "env-key")
        library.add(build_document("sample.pdf", SAMPLE_TEXT))

        payload = self._ask(client, api_key=None).json()

        assert payload["type"] == "text"
        assert spy_transport.calls[0]["headers"]["Authorization"] == "Bearer env-key"

    def test_unsupported_provider(self, client, library, spy_transport):
        library.add(build_document("sample.pdf", SAMPLE_TEXT))

        payload = self._ask(client, provider="cohere").json()

        assert payload["type"] == "error"
        assert "Unsupported API provider" in payload["message"]
        assert spy_transport.calls == []

    def test_upstream_failure_is_attached_to_the_turn(self, client, library, spy_transport):
        library.add(build_document("sample.pdf", SAMPLE_TEXT))
        spy_transport.response = make_response(503, b"", status_text="Service Unavailable")

        response = self._ask(client)

        assert response.status_code == 200
        assert response.json()["type"] == "error"
        assert response.json()["answer"] == "❌ Error: API Error: 503 Service Unavailable"

    def test_request_validation(self, client, library):
        assert self._ask(client, question="   ").status_code == 400
        assert self._ask(client).status_code == 400  # nothing selected
        assert self._ask(client, document_ids=["ghost"]).status_code == 404
        assert self._ask(client, top_k=0).status_code == 422


def test_status(client, library):
    library.add(build_document("a.txt", "a b c d e f g h", chunk_size=4, overlap=2))
    document = library.add(build_document("b.txt", "one two"))
    library.toggle(document.id)

    payload = client.get("/api/v1/status/").json()

    assert payload["status"] == "ready"
    assert payload["documents"] == 2
    assert payload["selected"] == 1
    assert payload["chunks"] == 4
    assert "anthropic" in payload["providers"]
    assert payload["default_provider"] == settings.DEFAULT_PROVIDER
