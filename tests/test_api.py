"""Tests for the FastAPI transcript API.

WHY: Validates that every endpoint behaves correctly: happy paths,
error cases, and edge cases. The host UI drives the engine only through
these endpoints, so status codes and bodies are part of the contract.

HOW: Each test exercises one endpoint behavior through FastAPI's
TestClient. Tests create transcripts via the API, then inspect response
status codes, bodies, and headers.

RULES:
- All tests use the FastAPI TestClient (synchronous)
- Each test is independent; the session store is cleared around each test
- Tests cover: happy paths, 404 not found, 409 conflict, 422 unprocessable,
  429 too many sessions
"""

from __future__ import annotations

import io
from urllib.parse import quote

import pytest
from fastapi.testclient import TestClient

from transcript_studio import __version__
from transcript_studio.server.app import app, session_store


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_session_store():
    """Clear all sessions before and after each test to ensure isolation."""
    session_store._sessions.clear()
    yield
    session_store._sessions.clear()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def transcript_id(client, sample_text):
    """A finished transcript named interview.mp3 holding the sample text."""
    resp = client.post("/transcripts", json={"name": "interview.mp3", "text": sample_text})
    assert resp.status_code == 201
    return resp.json()["id"]


def _csv_upload(content: bytes, name: str = "table.csv"):
    return [("file", (name, io.BytesIO(content), "text/csv"))]


# ---------------------------------------------------------------------------
# Transcripts
# ---------------------------------------------------------------------------


class TestTranscripts:

    def test_create_returns_201(self, client):
        resp = client.post("/transcripts", json={"name": "a.mp3"})
        assert resp.status_code == 201
        body = resp.json()
        assert body["name"] == "a.mp3"
        assert body["streaming"] is False
        assert body["line_count"] == 0
        assert body["text"] is None

    def test_create_with_text(self, client, transcript_id):
        body = client.get("/transcripts/{}".format(transcript_id)).json()
        assert body["line_count"] == 10
        assert body["segment_count"] == 5

    def test_include_text(self, client, transcript_id, sample_text):
        resp = client.get("/transcripts/{}".format(transcript_id), params={"include_text": "true"})
        assert resp.json()["text"] == sample_text

    def test_get_nonexistent(self, client):
        resp = client.get("/transcripts/nope")
        assert resp.status_code == 404
        assert "not found" in resp.json()["detail"].lower()

    def test_list(self, client, transcript_id):
        client.post("/transcripts", json={"name": "second"})
        names = [t["name"] for t in client.get("/transcripts").json()]
        assert names == ["interview.mp3", "second"]

    def test_delete(self, client, transcript_id):
        assert client.delete("/transcripts/{}".format(transcript_id)).status_code == 204
        assert client.get("/transcripts/{}".format(transcript_id)).status_code == 404

    def test_delete_nonexistent(self, client):
        assert client.delete("/transcripts/nope").status_code == 404

    def test_session_limit_returns_429(self, client, monkeypatch):
        monkeypatch.setattr(session_store, "max_sessions", 1)
        client.post("/transcripts", json={})
        resp = client.post("/transcripts", json={})
        assert resp.status_code == 429


# ---------------------------------------------------------------------------
# Streaming
# ---------------------------------------------------------------------------


class TestStreaming:

    def test_partial_chunks_complete_a_segment(self, client):
        tid = client.post("/transcripts", json={}).json()["id"]
        client.post("/transcripts/{}/sources".format(tid), json={"name": "live.mp3"})

        first = client.post("/transcripts/{}/append".format(tid), json={"chunk": "[00:1"})
        assert first.json() == {"version": 1, "line_count": 1}
        rows = client.get("/transcripts/{}/rows".format(tid)).json()["rows"]
        assert rows[0]["kind"] == "raw"

        client.post("/transcripts/{}/append".format(tid), json={"chunk": "2] A: hi\n"})
        rows = client.get("/transcripts/{}/rows".format(tid)).json()["rows"]
        assert rows[0]["kind"] == "segment"
        assert rows[0]["start_s"] == 12

    def test_begin_source_writes_separator(self, client, transcript_id):
        resp = client.post(
            "/transcripts/{}/sources".format(transcript_id),
            json={"name": "part3.mp3", "start_time": "05:00"},
        )
        assert resp.status_code == 200
        assert resp.json()["streaming"] is True

        client.post("/transcripts/{}/append".format(transcript_id), json={"chunk": "[00:01] C: hi"})
        rows = client.get("/transcripts/{}/rows".format(transcript_id)).json()["rows"]
        assert rows[-2]["kind"] == "separator"
        assert rows[-2]["declared_offset_s"] == 300
        assert rows[-1]["start_s"] == 301

    def test_end_stream(self, client, transcript_id):
        client.post("/transcripts/{}/sources".format(transcript_id), json={"name": "b.mp3"})
        resp = client.post("/transcripts/{}/stream/end".format(transcript_id))
        assert resp.json()["streaming"] is False

    def test_append_to_nonexistent(self, client):
        resp = client.post("/transcripts/nope/append", json={"chunk": "x"})
        assert resp.status_code == 404


# ---------------------------------------------------------------------------
# Rows
# ---------------------------------------------------------------------------


class TestRows:

    def test_blank_rows_hidden(self, client, transcript_id):
        body = client.get("/transcripts/{}/rows".format(transcript_id)).json()
        assert [row["index"] for row in body["rows"]] == [0, 1, 2, 4, 6, 8, 9]

    def test_include_blank(self, client, transcript_id):
        resp = client.get("/transcripts/{}/rows".format(transcript_id), params={"include_blank": "true"})
        assert len(resp.json()["rows"]) == 10

    def test_row_fields(self, client, transcript_id):
        rows = client.get("/transcripts/{}/rows".format(transcript_id)).json()["rows"]
        segment = rows[5]
        assert segment["time"] == "01:40 - 01:50"
        assert segment["speaker"] == "Alice"
        assert (segment["start_s"], segment["end_s"]) == (100, 110)
        separator = rows[4]
        assert separator["content"] == "[Continued file: part2.mp3 | Start: 01:30]"
        assert separator["declared_offset_s"] == 90

    def test_edit_time(self, client, transcript_id):
        resp = client.patch(
            "/transcripts/{}/rows/8".format(transcript_id),
            json={"field": "time", "value": "01:45 - 01:55"},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["time"] == "01:45 - 01:55"
        assert (body["start_s"], body["end_s"]) == (105, 115)

    def test_edit_speaker(self, client, transcript_id):
        resp = client.patch(
            "/transcripts/{}/rows/1".format(transcript_id),
            json={"field": "speaker", "value": "Robert"},
        )
        assert resp.json()["display_line"] == "[00:05] Robert: Thanks for having me."

    def test_edit_unknown_field(self, client, transcript_id):
        resp = client.patch(
            "/transcripts/{}/rows/1".format(transcript_id),
            json={"field": "colour", "value": "red"},
        )
        assert resp.status_code == 422

    def test_edit_out_of_range(self, client, transcript_id):
        resp = client.patch(
            "/transcripts/{}/rows/42".format(transcript_id),
            json={"field": "content", "value": "x"},
        )
        assert resp.status_code == 404

    def test_edit_while_streaming_returns_409(self, client, transcript_id):
        client.post("/transcripts/{}/sources".format(transcript_id), json={"name": "b.mp3"})
        resp = client.patch(
            "/transcripts/{}/rows/0".format(transcript_id),
            json={"field": "content", "value": "x"},
        )
        assert resp.status_code == 409
        assert "streaming" in resp.json()["detail"]

    def test_delete_rows(self, client, transcript_id):
        resp = client.post("/transcripts/{}/rows/delete".format(transcript_id), json={"indices": [1, 4]})
        assert resp.json() == {"removed": 2, "line_count": 8}

    def test_delete_while_streaming_returns_409(self, client, transcript_id):
        client.post("/transcripts/{}/sources".format(transcript_id), json={"name": "b.mp3"})
        resp = client.post("/transcripts/{}/rows/delete".format(transcript_id), json={"indices": [0]})
        assert resp.status_code == 409


# ---------------------------------------------------------------------------
# Import
# ---------------------------------------------------------------------------


class TestImport:

    def test_import_into_empty_transcript(self, client):
        tid = client.post("/transcripts", json={}).json()["id"]
        content = '\ufeffTime,Speaker,Content\n"00:05","Bob","hi"\n'.encode("utf-8")
        resp = client.post("/transcripts/{}/import".format(tid), files=_csv_upload(content))
        assert resp.status_code == 200
        assert resp.json()["imported"] == 1

        rows = client.get("/transcripts/{}/rows".format(tid)).json()["rows"]
        assert rows[0]["display_line"] == "[00:05] Bob: hi"

    def test_import_appends_reset_separator(self, client, transcript_id):
        resp = client.post(
            "/transcripts/{}/import".format(transcript_id),
            files=_csv_upload(b'"00:05","Bob","hi"'),
        )
        assert resp.json() == {"imported": 1, "line_count": 13}

        rows = client.get("/transcripts/{}/rows".format(transcript_id)).json()["rows"]
        assert rows[-2]["content"] == "[Imported: table.csv | Start: 00:00]"
        assert rows[-1]["start_s"] == 5

    def test_import_while_streaming_returns_409(self, client, transcript_id):
        client.post("/transcripts/{}/sources".format(transcript_id), json={"name": "b.mp3"})
        resp = client.post(
            "/transcripts/{}/import".format(transcript_id),
            files=_csv_upload(b"x"),
        )
        assert resp.status_code == 409


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------


class TestSelection:

    def test_starts_empty(self, client, transcript_id):
        resp = client.get("/transcripts/{}/selection".format(transcript_id))
        assert resp.json() == {"indices": [], "row_count": 10}

    def test_toggle_adds_then_removes(self, client, transcript_id):
        url = "/transcripts/{}/selection/toggle".format(transcript_id)
        client.post(url, json={"index": 4})
        resp = client.post(url, json={"index": 1})
        assert resp.json()["indices"] == [1, 4]

        resp = client.post(url, json={"index": 4})
        assert resp.json()["indices"] == [1]

    @pytest.mark.parametrize("index", [-1, 10])
    def test_toggle_out_of_range(self, client, transcript_id, index):
        resp = client.post(
            "/transcripts/{}/selection/toggle".format(transcript_id), json={"index": index},
        )
        assert resp.status_code == 404
        assert "out of range" in resp.json()["detail"]

    def test_toggle_all_selects_then_clears(self, client, transcript_id):
        url = "/transcripts/{}/selection/toggle-all".format(transcript_id)
        assert client.post(url).json()["indices"] == list(range(10))
        assert client.post(url).json()["indices"] == []

    def test_delete_selected(self, client, transcript_id, sample_lines):
        url = "/transcripts/{}/selection".format(transcript_id)
        client.post(url + "/toggle", json={"index": 1})
        client.post(url + "/toggle", json={"index": 4})

        resp = client.post(url + "/delete")
        assert resp.json() == {"removed": 2, "line_count": 8}
        assert client.get(url).json() == {"indices": [], "row_count": 8}

        text = client.get("/transcripts/{}".format(transcript_id), params={"include_text": "true"}).json()["text"]
        assert text.split("\n") == [line for i, line in enumerate(sample_lines) if i not in (1, 4)]

    def test_delete_with_nothing_selected(self, client, transcript_id):
        resp = client.post("/transcripts/{}/selection/delete".format(transcript_id))
        assert resp.json() == {"removed": 0, "line_count": 10}

    def test_delete_while_streaming_returns_409(self, client, transcript_id):
        url = "/transcripts/{}/selection".format(transcript_id)
        client.post(url + "/toggle", json={"index": 0})
        client.post("/transcripts/{}/sources".format(transcript_id), json={"name": "b.mp3"})

        assert client.post(url + "/delete").status_code == 409
        assert client.get(url).json()["indices"] == [0]

    def test_missing_transcript(self, client):
        assert client.post("/transcripts/nope/selection/toggle-all").status_code == 404


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


class TestExport:

    def test_plain_text(self, client, transcript_id):
        resp = client.get("/transcripts/{}/export/plain_text".format(transcript_id))
        assert resp.status_code == 200
        assert resp.headers["content-type"] == "text/plain; charset=utf-8"
        assert resp.headers["content-disposition"] == (
            "attachment; filename=\"interview-transcript.txt\"; "
            "filename*=UTF-8''interview-transcript.txt"
        )
        assert "[01:40 - 01:50] Alice: Second part starts here." in resp.text

    def test_csv_has_bom(self, client, transcript_id):
        resp = client.get("/transcripts/{}/export/csv_table".format(transcript_id))
        assert resp.content.startswith(b"\xef\xbb\xbfTime,Speaker,Content\n")
        assert resp.headers["content-disposition"] == (
            "attachment; filename=\"interview-transcript.csv\"; "
            "filename*=UTF-8''interview-transcript.csv"
        )

    def test_subtitles(self, client, transcript_id):
        resp = client.get("/transcripts/{}/export/srt_subtitles".format(transcript_id))
        assert resp.status_code == 200
        assert resp.text.startswith("1\n00:00:00,000 --> 00:00:04,000\nAlice: Welcome to the show.\n\n")
        assert resp.headers["content-disposition"] == (
            "attachment; filename=\"interview.srt\"; filename*=UTF-8''interview.srt"
        )

    def test_unnamed_transcript_gets_dated_filename(self, client):
        tid = client.post("/transcripts", json={"text": "[00:01] A: hi"}).json()["id"]
        resp = client.get("/transcripts/{}/export/srt_subtitles".format(tid))
        disposition = resp.headers["content-disposition"]
        assert disposition.startswith('attachment; filename="subtitle_')
        assert '.srt"; filename*=UTF-8\'\'subtitle_' in disposition
        assert disposition.endswith(".srt")

    def test_non_ascii_name(self, client):
        tid = client.post(
            "/transcripts", json={"name": "會議錄音.mp3", "text": "[00:01] 阿明: 你好"},
        ).json()["id"]
        resp = client.get("/transcripts/{}/export/srt_subtitles".format(tid))
        assert resp.status_code == 200
        assert resp.text == "1\n00:00:01,000 --> 00:00:04,000\n阿明: 你好\n\n"
        assert resp.headers["content-disposition"] == (
            "attachment; filename=\"____.srt\"; "
            "filename*=UTF-8''{}".format(quote("會議錄音.srt", safe=""))
        )

    def test_quote_in_name_is_escaped(self, client):
        tid = client.post(
            "/transcripts", json={"name": 'the "final" cut.mp3', "text": "[00:01] A: hi"},
        ).json()["id"]
        resp = client.get("/transcripts/{}/export/plain_text".format(tid))
        assert resp.status_code == 200
        assert resp.headers["content-disposition"] == (
            "attachment; filename=\"the _final_ cut-transcript.txt\"; "
            "filename*=UTF-8''the%20%22final%22%20cut-transcript.txt"
        )

    def test_subtitles_without_segments_returns_422(self, client):
        tid = client.post("/transcripts", json={"name": "notes", "text": "just notes"}).json()["id"]
        resp = client.get("/transcripts/{}/export/srt_subtitles".format(tid))
        assert resp.status_code == 422
        assert "No valid timestamped segments" in resp.json()["detail"]

    def test_unknown_format_returns_422(self, client, transcript_id):
        resp = client.get("/transcripts/{}/export/docx".format(transcript_id))
        assert resp.status_code == 422

    def test_export_nonexistent(self, client):
        assert client.get("/transcripts/nope/export/plain_text").status_code == 404


# ---------------------------------------------------------------------------
# Formats and health
# ---------------------------------------------------------------------------


class TestFormatsAndHealth:

    def test_formats(self, client):
        body = client.get("/formats").json()
        assert [f["key"] for f in body] == ["csv_table", "plain_text", "srt_subtitles"]
        assert body[2]["suffix"] == ".srt"

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok", "version": __version__}
