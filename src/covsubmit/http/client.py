"""Coveralls API client.

Uploads a job document as a multipart/form-data POST and interprets the
JSON response. Each call makes exactly one attempt; retry policies belong
to the caller.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import httpx

from covsubmit.core.errors import ProcessingError, SubmissionError
from covsubmit.core.logging import get_logger
from covsubmit.http.tls import TlsPolicy, ssl_context_for

LOGGER = get_logger(__name__)

FILE_FIELD = "json_file"
FILE_NAME = "coveralls.json"
MIME_TYPE = "application/octet-stream; charset=utf-8"
DEFAULT_CHARSET = "ISO-8859-1"

DEFAULT_CONNECT_TIMEOUT = 10.0
DEFAULT_READ_TIMEOUT = 60.0


@dataclass
class SubmissionResult:
    """Outcome of a successful submission."""

    message: Optional[str] = None
    url: Optional[str] = None
    error: bool = False
    status_code: Optional[int] = None
    reason: Optional[str] = None


def create_default_client(
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
    read_timeout: float = DEFAULT_READ_TIMEOUT,
    tls_policy: TlsPolicy = TlsPolicy.VERIFY,
) -> httpx.Client:
    """Create the HTTP client used when none is supplied."""
    if TlsPolicy(tls_policy) is TlsPolicy.INSECURE:
        LOGGER.warning(
            "TLS certificate and hostname verification are disabled for Coveralls submission"
        )
    return httpx.Client(
        timeout=httpx.Timeout(read_timeout, connect=connect_timeout),
        verify=ssl_context_for(tls_policy),
    )


class CoverallsClient:
    """Client for the Coveralls jobs API."""

    def __init__(
        self,
        url: str,
        *,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        read_timeout: float = DEFAULT_READ_TIMEOUT,
        tls_policy: TlsPolicy = TlsPolicy.VERIFY,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        """Initialize CoverallsClient.

        Args:
            url: Coveralls jobs endpoint.
            connect_timeout: Seconds to wait for a connection.
            read_timeout: Seconds to wait for data on the socket.
            tls_policy: Server certificate trust policy. Ignored when
                ``http_client`` is given.
            http_client: Preconfigured httpx client; the caller keeps
                ownership and closes it.
        """
        self._url = url
        self._timeout = httpx.Timeout(read_timeout, connect=connect_timeout)
        self._owns_client = http_client is None
        self._http = http_client or create_default_client(connect_timeout, read_timeout, tls_policy)

    @property
    def url(self) -> str:
        return self._url

    def __enter__(self) -> "CoverallsClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        """Release the underlying HTTP client if this instance created it."""
        if self._owns_client:
            self._http.close()

    def submit(self, file: Path) -> SubmissionResult:
        """Upload a Coveralls job document.

        Args:
            file: JSON document to upload.

        Returns:
            SubmissionResult of the accepted job.

        Raises:
            ProcessingError: If the service rejects the job or replies with
                something other than a JSON object.
            SubmissionError: On connection, timeout or read failures.
            OSError: If ``file`` cannot be opened.
        """
        LOGGER.info(f"Submitting {file} to {self._url}")
        with open(file, "rb") as fh:
            files = {FILE_FIELD: (FILE_NAME, fh, MIME_TYPE)}
            try:
                with self._http.stream("POST", self._url, files=files, timeout=self._timeout) as response:
                    return self._parse_response(response)
            except httpx.TimeoutException as e:
                raise SubmissionError(f"Report submission to Coveralls API timed out: {e}") from e
            except httpx.HTTPError as e:
                raise SubmissionError(f"Report submission to Coveralls API failed: {e}") from e

    def _parse_response(self, response: httpx.Response) -> SubmissionResult:
        try:
            body = response.read()
        except (httpx.HTTPError, OSError) as e:
            raise SubmissionError(self._error_message(response, str(e))) from e

        try:
            data = json.loads(_decode(body, response.charset_encoding))
        except ValueError as e:
            raise ProcessingError(self._error_message(response, str(e))) from e

        if not isinstance(data, dict):
            raise ProcessingError(
                self._error_message(response, f"expected a JSON object, got {type(data).__name__}")
            )

        message = data.get("message")
        if data.get("error") is True:
            raise ProcessingError(self._error_message(response, _as_text(message)))

        result = SubmissionResult(
            message=_as_text(message),
            url=_as_text(data.get("url")),
            error=False,
            status_code=response.status_code,
            reason=response.reason_phrase,
        )
        LOGGER.info(f"Coveralls accepted the job: {result.message or ''} {result.url or ''}".rstrip())
        return result

    def _error_message(self, response: httpx.Response, message: Optional[str]) -> str:
        """Compose the error text: status, then reason, then remote message."""
        error_message = f"Report submission to Coveralls API failed with HTTP status {response.status_code}:"
        reason = response.reason_phrase
        if reason and reason.strip():
            error_message += f" {reason}"
        if message and message.strip():
            error_message += f" ({message})"
        return error_message


def _decode(body: bytes, charset: Optional[str]) -> str:
    """Decode the body with the declared charset, ISO-8859-1 when absent."""
    encoding = charset or DEFAULT_CHARSET
    try:
        return body.decode(encoding)
    except LookupError:
        LOGGER.debug(f"Unknown response charset {encoding}, using {DEFAULT_CHARSET}")
        return body.decode(DEFAULT_CHARSET)


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)
