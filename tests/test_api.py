"""Tests for the HTTP tool transport."""

import pytest
from fastapi.testclient import TestClient

from librarian.application.api.api_server import create_app
from librarian.infrastructure.config.settings import LibrarianSettings

from conftest import SOURCE_DOCUMENT, serve_text


@pytest.fixture
def client(docs_root):
    settings = LibrarianSettings(docs_root=docs_root, session_ttl_seconds=600)
    app = create_app(settings, transport=serve_text(SOURCE_DOCUMENT))
    with TestClient(app) as client:
        yield client


def call(client, tool_id, **arguments):
    response = client.post(f"/tools/{tool_id}", json={"arguments": arguments})
    assert response.status_code == 200
    return response.json()


class TestToolRoutes:
    """Tests for /tools."""

    def test_list_tools(self, client):
        """Descriptors include input schemas."""
        response = client.get("/tools")

        assert response.status_code == 200
        tools = response.json()
        assert len(tools) == 9
        assert all("inputSchema" in tool for tool in tools)

    def test_list_tools_by_category(self, client):
        """Category and query filters combine."""
        response = client.get("/tools", params={"category": "structuring", "query": "source"})

        ids = [tool["id"] for tool in response.json()]
        assert "knowledgeStructuringSession.showSourceDocument" in ids
        assert "listDocuments" not in ids

    def test_unknown_tool_is_404(self, client):
        """Unregistered tool ids are not found."""
        response = client.post("/tools/nope", json={"arguments": {}})

        assert response.status_code == 404

    def test_errors_are_flagged_not_raised(self, client):
        """Failures come back as 200 with isError."""
        body = call(client, "knowledgeStructuringSession.end", sessionToken="missing")

        assert body["isError"] is True
        assert body["content"][0]["type"] == "text"
        assert body["content"][0]["text"].startswith("Error. ")

    def test_invalid_arguments_are_flagged(self, client):
        """Schema violations are error text too."""
        body = call(client, "knowledgeStructuringSession.writeSections", sessionToken="t", sections=[])

        assert body["isError"] is True
        assert body["content"][0]["text"].startswith("Invalid arguments for")

    def test_structuring_workflow(self, client, docs_root):
        """A full session over HTTP, then the library sees the result."""
        started = call(
            client, "knowledgeStructuring.startPendingSession",
            documentName="guide", documentSource="https://example.com/doc.md",
        )
        assert started["isError"] is False
        token = client.app.state.session_store.pending.copy().popitem()[0]
        assert token in started["content"][0]["text"]

        planned = call(
            client, "knowledgeStructuringSession.start",
            sessionToken=token, sectionFilepaths=["/guide/intro.md", "/guide/usage.md"],
        )
        assert planned["isError"] is False

        shown = call(
            client, "knowledgeStructuringSession.showSourceDocument",
            sessionToken=token, sourceDocumentRange="L9-L11",
        )
        assert "lines 9-11 of 15" in shown["content"][0]["text"]

        written = call(
            client, "knowledgeStructuringSession.writeSections",
            sessionToken=token,
            sections=[
                {"filepath": "/guide/intro.md", "tags": ["intro"], "contentSpecifiers": ["@1-3"]},
                {"filepath": "/guide/usage.md", "tags": ["usage"], "contentSpecifiers": ["@9-11"]},
            ],
        )
        assert written["isError"] is False

        ended = call(client, "knowledgeStructuringSession.end", sessionToken=token)
        assert ended["isError"] is False

        listed = call(client, "listDocuments", directory="/guide/")
        assert listed["content"][0]["text"] == (
            "- guide/intro.md\n  - tags: intro\n- guide/usage.md\n  - tags: usage"
        )

        found = call(client, "searchDocuments", query="call the TOOL")
        assert "guide/usage.md" in found["content"][0]["text"]

        document = call(client, "getDocument", filepath="/guide/intro.md")
        assert "Welcome to the guide." in document["content"][0]["text"]

        tags = call(client, "listTags", directory="/guide", includeFilepaths=True)
        assert "- intro (1)" in tags["content"][0]["text"]

        assert (docs_root / "guide" / "usage.md").exists()

    def test_existing_document_name_is_refused(self, client, docs_root):
        """Names with content on disk cannot be reused."""
        (docs_root / "guide").mkdir()
        (docs_root / "guide" / "index.md").write_text("# Guide")

        body = call(
            client, "knowledgeStructuring.startPendingSession",
            documentName="guide", documentSource="https://example.com/doc.md",
        )

        assert body["isError"] is True
        assert "already exists" in body["content"][0]["text"]


class TestHealth:
    """Tests for /health."""

    def test_health_reports_sessions(self, client):
        """Health includes store stats and metrics."""
        call(
            client, "knowledgeStructuring.startPendingSession",
            documentName="guide", documentSource="https://example.com/doc.md",
        )

        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["sessions"]["pending_sessions"] == 1
        assert body["sessions"]["ttl_seconds"] == 600
        assert "metrics" in body
