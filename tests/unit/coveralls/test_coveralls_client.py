"""Tests for the Coveralls API client using httpx mock transports."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable, Iterator, List

import httpx
import pytest

from covsubmit.core.errors import ProcessingError, SubmissionError
from covsubmit.http.client import (
    FILE_FIELD,
    FILE_NAME,
    MIME_TYPE,
    CoverallsClient,
)

URL = "https://coveralls.example/api/v1/jobs"


class BrokenStream(httpx.SyncByteStream):
    """Response body that fails half way through."""

    def __iter__(self) -> Iterator[bytes]:
        yield b'{"message":'
        raise httpx.ReadError("connection reset by peer")


@pytest.fixture
def report_file(tmp_path: Path) -> Path:
    path = tmp_path / "coveralls.json"
    path.write_text(json.dumps({"repo_token": "t", "source_files": []}), encoding="utf-8")
    return path


def _client(handler: Callable[[httpx.Request], httpx.Response]) -> CoverallsClient:
    return CoverallsClient(URL, http_client=httpx.Client(transport=httpx.MockTransport(handler)))


class TestSubmitSuccess:
    """Tests for accepted submissions."""

    def test_returns_result(self, report_file: Path) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"message": "Job #12.1", "url": "https://coveralls.io/jobs/1"})

        with _client(handler) as client:
            result = client.submit(report_file)

        assert result.message == "Job #12.1"
        assert result.url == "https://coveralls.io/jobs/1"
        assert result.error is False
        assert result.status_code == 200
        assert result.reason == "OK"

    def test_sends_single_multipart_post(self, report_file: Path) -> None:
        requests: List[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"message": "ok"})

        with _client(handler) as client:
            client.submit(report_file)

        assert len(requests) == 1
        request = requests[0]
        assert request.method == "POST"
        assert str(request.url) == URL
        assert request.headers["content-type"].startswith("multipart/form-data; boundary=")
        body = request.content
        assert f'name="{FILE_FIELD}"; filename="{FILE_NAME}"'.encode() in body
        assert f"Content-Type: {MIME_TYPE}".encode() in body
        assert report_file.read_bytes() in body

    def test_missing_fields_are_none(self, report_file: Path) -> None:
        with _client(lambda request: httpx.Response(200, json={})) as client:
            result = client.submit(report_file)

        assert result.message is None
        assert result.url is None

    def test_body_without_charset_decoded_as_latin1(self, report_file: Path) -> None:
        body = '{"message": "Café"}'.encode("iso-8859-1")

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=body, headers={"Content-Type": "application/json"})

        with _client(handler) as client:
            result = client.submit(report_file)

        assert result.message == "Café"

    def test_body_with_declared_charset(self, report_file: Path) -> None:
        body = '{"message": "Café"}'.encode("utf-8")

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200, content=body, headers={"Content-Type": "application/json; charset=utf-8"}
            )

        with _client(handler) as client:
            assert client.submit(report_file).message == "Café"


class TestSubmitErrors:
    """Tests for rejected and failed submissions."""

    def test_error_response_raises_processing_error(self, report_file: Path) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, json={"message": "quota exceeded", "error": True})

        with _client(handler) as client:
            with pytest.raises(ProcessingError) as exc_info:
                client.submit(report_file)

        assert str(exc_info.value) == (
            "Report submission to Coveralls API failed with HTTP status 500: "
            "Internal Server Error (quota exceeded)"
        )

    def test_error_flag_wins_over_success_status(self, report_file: Path) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"message": "Couldn't find a repository", "error": True})

        with _client(handler) as client:
            with pytest.raises(ProcessingError, match=r"HTTP status 200: OK \(Couldn't find a repository\)"):
                client.submit(report_file)

    def test_error_without_message(self, report_file: Path) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(422, json={"error": True})

        with _client(handler) as client:
            with pytest.raises(ProcessingError) as exc_info:
                client.submit(report_file)

        assert "HTTP status 422:" in str(exc_info.value)
        assert "(" not in str(exc_info.value)

    def test_non_boolean_error_flag_is_not_a_rejection(self, report_file: Path) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"message": "Job #3.1", "error": "false"})

        with _client(handler) as client:
            result = client.submit(report_file)

        assert result.message == "Job #3.1"
        assert result.error is False

    def test_invalid_json_raises_processing_error_with_cause(self, report_file: Path) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, content=b"<html>Bad gateway</html>")

        with _client(handler) as client:
            with pytest.raises(ProcessingError) as exc_info:
                client.submit(report_file)

        assert str(exc_info.value).startswith(
            "Report submission to Coveralls API failed with HTTP status 502: Bad Gateway ("
        )
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_non_object_json_raises_processing_error(self, report_file: Path) -> None:
        with _client(lambda request: httpx.Response(200, json=[1, 2])) as client:
            with pytest.raises(ProcessingError, match="expected a JSON object, got list"):
                client.submit(report_file)

    def test_read_failure_raises_submission_error(self, report_file: Path) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, stream=BrokenStream())

        with _client(handler) as client:
            with pytest.raises(SubmissionError) as exc_info:
                client.submit(report_file)

        assert "HTTP status 200: OK (connection reset by peer)" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, httpx.ReadError)

    def test_corrupt_encoded_body_raises_submission_error(self, report_file: Path) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, headers={"Content-Encoding": "gzip"}, content=b"not gzip at all")

        with _client(handler) as client:
            with pytest.raises(SubmissionError) as exc_info:
                client.submit(report_file)

        assert str(exc_info.value).startswith(
            "Report submission to Coveralls API failed with HTTP status 200: OK ("
        )
        assert isinstance(exc_info.value.__cause__, httpx.DecodingError)

    def test_timeout_raises_submission_error(self, report_file: Path) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("read timed out", request=request)

        with _client(handler) as client:
            with pytest.raises(SubmissionError, match="timed out"):
                client.submit(report_file)

    def test_connect_failure_raises_submission_error(self, report_file: Path) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with _client(handler) as client:
            with pytest.raises(SubmissionError, match="connection refused"):
                client.submit(report_file)

    def test_submission_error_is_os_error(self, report_file: Path) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        with _client(handler) as client:
            with pytest.raises(OSError):
                client.submit(report_file)

    def test_missing_report_file(self, tmp_path: Path) -> None:
        with _client(lambda request: httpx.Response(200, json={})) as client:
            with pytest.raises(FileNotFoundError):
                client.submit(tmp_path / "missing.json")


class TestClientLifecycle:
    """Tests for client ownership."""

    def test_does_not_close_supplied_client(self) -> None:
        http_client = httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        with CoverallsClient(URL, http_client=http_client):
            pass
        assert not http_client.is_closed
        http_client.close()

    def test_closes_own_client(self) -> None:
        client = CoverallsClient(URL)
        client.close()
        assert client._http.is_closed

    def test_url(self) -> None:
        client = CoverallsClient(URL)
        assert client.url == URL
        client.close()
