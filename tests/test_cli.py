"""Tests for the CLI module."""

from unittest.mock import AsyncMock, patch

import click
import pytest
from click.testing import CliRunner

from mata.client.cli import clear, ingest, query, search_chats, stats
from mata.client.cli_helpers import (
    ensure_server_available,
    format_message_result,
    format_search_result,
)

SEARCH_HIT = {
    "id": "doc-1",
    "content": "Tokens expire after one hour.",
    "source": "auth.md",
    "type": "markdown",
    "title": "auth",
    "page_number": None,
    "chunk_index": 0,
    "score": 0.91,
}


class TestIngestCLI:
    """Tests for the ingest command."""

    def setup_method(self):
        self.runner = CliRunner()

    @patch("mata.client.cli.asyncio.run")
    @patch("mata.client.cli.load_document_payloads")
    @patch("mata.client.cli.ensure_server_available")
    def test_ingest_supported_files(self, mock_ensure, mock_load, mock_async_run, tmp_path):
        """Supported files are ingested; other files are ignored."""
        (tmp_path / "guide.md").write_text("# Guide")
        (tmp_path / "notes.txt").write_text("Notes.")
        (tmp_path / "photo.png").write_bytes(b"\x89PNG")

        mock_load.side_effect = lambda path: [{"content": "x", "source": path.name}]
        mock_async_run.return_value = {"success": True, "stored": 2, "failed": 0}

        result = self.runner.invoke(ingest, [str(tmp_path)])

        assert result.exit_code == 0
        assert "Found 2 file(s)" in result.output
        assert "✓ Ingested guide.md" in result.output
        assert "✓ Ingested notes.txt" in result.output
        assert "Stored 4 chunks" in result.output
        assert mock_load.call_count == 2
        mock_ensure.assert_called_once()

    @patch("mata.client.cli.asyncio.run")
    @patch("mata.client.cli.load_document_payloads")
    @patch("mata.client.cli.ensure_server_available")
    def test_ingest_recursive(self, mock_ensure, mock_load, mock_async_run, tmp_path):
        nested = tmp_path / "src"
        nested.mkdir()
        (nested / "main.py").write_text("print('hi')")

        mock_load.return_value = [{"content": "x"}]
        mock_async_run.return_value = {"success": True, "stored": 1, "failed": 0}

        flat = self.runner.invoke(ingest, [str(tmp_path)])
        deep = self.runner.invoke(ingest, [str(tmp_path), "--recursive"])

        assert "No supported files found" in flat.output
        assert "✓ Ingested main.py" in deep.output

    @patch("mata.client.cli.asyncio.run")
    @patch("mata.client.cli.load_document_payloads")
    @patch("mata.client.cli.ensure_server_available")
    def test_ingest_warns_about_failed_chunks(self, mock_ensure, mock_load, mock_async_run, tmp_path):
        (tmp_path / "notes.txt").write_text("Notes.")
        mock_load.return_value = [{"content": "Notes."}]
        mock_async_run.return_value = {"success": True, "stored": 3, "failed": 2}

        result = self.runner.invoke(ingest, [str(tmp_path)])

        assert result.exit_code == 0
        assert "2 chunk(s) were not stored" in result.output

    @patch("mata.client.cli.asyncio.run")
    @patch("mata.client.cli.load_document_payloads")
    @patch("mata.client.cli.ensure_server_available")
    def test_ingest_warns_about_rejected_chunks(self, mock_ensure, mock_load, mock_async_run, tmp_path):
        (tmp_path / "notes.txt").write_text("Notes.")
        mock_load.return_value = [{"content": "Notes."}]
        mock_async_run.return_value = {
            "success": False,
            "stored": 0,
            "failed": 0,
            "rejected": 4,
            "message": "Stored 0 of 4 chunks from notes.txt",
        }

        result = self.runner.invoke(ingest, [str(tmp_path)])

        assert result.exit_code == 0
        assert "4 chunk(s) were not stored" in result.output

    @patch("mata.client.cli.load_document_payloads")
    @patch("mata.client.cli.ensure_server_available")
    def test_ingest_continues_after_file_error(self, mock_ensure, mock_load, tmp_path):
        (tmp_path / "broken.pdf").write_text("not a pdf")
        mock_load.side_effect = RuntimeError("cannot open broken document")

        result = self.runner.invoke(ingest, [str(tmp_path)])

        assert result.exit_code == 0
        assert "✗ Error processing broken.pdf: cannot open broken document" in result.output
        assert "Stored 0 chunks" in result.output

    def test_ingest_nonexistent_directory(self):
        result = self.runner.invoke(ingest, ["/nonexistent/path"])

        assert result.exit_code != 0
        assert "does not exist" in result.output.lower()


class TestQueryCLI:
    """Tests for the query command."""

    def setup_method(self):
        self.runner = CliRunner()

    @patch("mata.client.cli.asyncio.run")
    @patch("mata.client.cli.ensure_server_available")
    def test_query_prints_results(self, mock_ensure, mock_async_run):
        mock_async_run.return_value = [SEARCH_HIT]

        result = self.runner.invoke(query, ["when do tokens expire", "--limit", "3", "--type", "markdown"])

        assert result.exit_code == 0
        assert "Found 1 result(s)" in result.output
        assert "auth.md - chunk #0" in result.output
        assert "0.9100" in result.output

    @patch("mata.client.cli.asyncio.run")
    @patch("mata.client.cli.ensure_server_available")
    def test_query_with_prompt(self, mock_ensure, mock_async_run):
        mock_async_run.return_value = {"prompt": "Context information is below.", "sources": [SEARCH_HIT]}

        result = self.runner.invoke(query, ["tokens", "--prompt"])

        assert result.exit_code == 0
        assert "Prompt:" in result.output
        assert "Context information is below." in result.output

    @patch("mata.client.cli.asyncio.run")
    @patch("mata.client.cli.ensure_server_available")
    def test_query_no_results(self, mock_ensure, mock_async_run):
        mock_async_run.return_value = []

        result = self.runner.invoke(query, ["nothing"])

        assert result.exit_code == 0
        assert "No results found." in result.output

    @patch("mata.client.cli.asyncio.run")
    @patch("mata.client.cli.ensure_server_available")
    def test_query_error_aborts(self, mock_ensure, mock_async_run):
        mock_async_run.side_effect = Exception("Error calling tool 'query_knowledge_base'")

        result = self.runner.invoke(query, ["tokens"])

        assert result.exit_code == 1
        assert "✗ Error" in result.output

    def test_query_rejects_unknown_type(self):
        result = self.runner.invoke(query, ["tokens", "--type", "pdf"])
        assert result.exit_code != 0


class TestSearchChatsCLI:
    """Tests for the search-chats command."""

    @patch("mata.client.cli.asyncio.run")
    @patch("mata.client.cli.ensure_server_available")
    def test_search_chats(self, mock_ensure, mock_async_run):
        mock_async_run.return_value = [
            {
                "id": "m1",
                "chat_id": "c1",
                "role": "user",
                "content": "How do I run docker compose?",
                "timestamp": 1_700_000_000_000,
                "model_id": None,
                "score": 0.693,
            }
        ]

        result = CliRunner().invoke(search_chats, ["docker"])

        assert result.exit_code == 0
        assert "Found 1 message(s)" in result.output
        assert "chat c1 - user" in result.output
        assert "How do I run docker compose?" in result.output

    @patch("mata.client.cli.asyncio.run")
    @patch("mata.client.cli.ensure_server_available")
    def test_search_chats_no_matches(self, mock_ensure, mock_async_run):
        mock_async_run.return_value = []

        result = CliRunner().invoke(search_chats, ["docker"])

        assert "No matching messages." in result.output


class TestStatsAndClearCLI:
    """Tests for the stats and clear commands."""

    @patch("mata.client.cli.asyncio.run")
    @patch("mata.client.cli.ensure_server_available")
    def test_stats(self, mock_ensure, mock_async_run):
        mock_async_run.return_value = {
            "vector_store": {
                "total_documents": 5,
                "type_distribution": {"code": 3, "text": 2},
                "dimensions": 4096,
            },
            "chat_index": {"total_documents": 10, "total_tokens": 240},
            "embedding_model": "llama2",
        }

        result = CliRunner().invoke(stats)

        assert result.exit_code == 0
        assert "Knowledge base: 5 chunk(s)" in result.output
        assert "code: 3" in result.output
        assert "llama2 (4096 dims)" in result.output
        assert "10 message(s), 240 token(s)" in result.output

    @patch("mata.client.cli.asyncio.run")
    @patch("mata.client.cli.ensure_server_available")
    def test_clear_with_yes(self, mock_ensure, mock_async_run):
        result = CliRunner().invoke(clear, ["--yes"])

        assert result.exit_code == 0
        assert "Knowledge base cleared" in result.output
        mock_async_run.assert_called_once()

    @patch("mata.client.cli.asyncio.run")
    @patch("mata.client.cli.ensure_server_available")
    def test_clear_cancelled(self, mock_ensure, mock_async_run):
        result = CliRunner().invoke(clear, input="n\n")

        assert result.exit_code == 0
        assert "Cancelled." in result.output
        mock_async_run.assert_not_called()


class TestCliHelpers:
    """Tests for CLI helper functions."""

    @patch("mata.client.cli_helpers.check_mcp_server", new_callable=AsyncMock)
    def test_ensure_server_available_aborts(self, mock_check):
        mock_check.return_value = {"status": "failed", "error": "Connection refused"}

        with pytest.raises(click.Abort):
            ensure_server_available("http://localhost:8001/sse")

    @patch("mata.client.cli_helpers.check_mcp_server", new_callable=AsyncMock)
    def test_ensure_server_available_passes(self, mock_check):
        mock_check.return_value = {"status": "connected", "tools": []}

        ensure_server_available("http://localhost:8001/sse")

        mock_check.assert_called_once_with("http://localhost:8001/sse")

    def test_format_search_result_truncates(self):
        hit = {**SEARCH_HIT, "content": "word " * 100, "page_number": 4}

        text = format_search_result(2, hit, max_length=20)

        assert text.startswith("2. [auth.md - chunk #0, page 4] (markdown, score: 0.9100)")
        assert text.splitlines()[1].strip().endswith("...")

    def test_format_message_result(self):
        hit = {
            "chat_id": "c1",
            "role": "assistant",
            "content": "Use   docker\ncompose",
            "timestamp": 1_700_000_000_000,
            "score": 1.5,
        }

        text = format_message_result(1, hit)

        assert "[chat c1 - assistant @ " in text
        assert "(score: 1.5000)" in text
        assert "Use docker compose" in text
