# src/lumicheck/clients/http.py
"""HTTP client for upstream JSON and newline-delimited JSON endpoints.

Every public method performs exactly one upstream call, counted on the
CheckerContext. Transport failures, timeouts and non-2xx responses surface
as NetworkError for that call only; nothing is retried.
"""

from __future__ import annotations

import json
import ssl
import time
from collections.abc import Callable, Iterator
from json import JSONDecodeError
from typing import TYPE_CHECKING, Any, TypeVar

import httpx
import structlog

from lumicheck.clients.base import CountedClientBase
from lumicheck.contracts.errors import DecodeError, NetworkError

if TYPE_CHECKING:
    from lumicheck.core.context import CheckerContext

logger = structlog.get_logger(__name__)

T = TypeVar("T")

JSON_ACCEPT = "application/json"
NDJSON_ACCEPT = "application/ndjson"

# Exceptions a decode callback may raise for a structurally wrong element
_ELEMENT_ERRORS = (KeyError, TypeError, ValueError)


class CountedHTTPClient(CountedClientBase):
    """HTTP client bound to one upstream service.

    Wraps a shared httpx.Client (thread-safe, pooled connections). Supports:
    - Bounded JSON responses decoded in one piece (get_json)
    - Unbounded ndjson streams decoded line by line (iter_ndjson)
    - Per-call timeouts

    Example:
        client = CountedHTTPClient(
            context,
            service="dbs",
            base_url="https://cmsweb.cern.ch/dbs/prod/global/DBSReader",
            timeout=60.0,
        )
        rows = client.get_json("filesummaries", params={"dataset": name})
        for key in client.iter_ndjson("filelumis", decode=LumiKey.from_record, params={...}):
            ...
    """

    def __init__(
        self,
        context: CheckerContext,
        *,
        service: str,
        base_url: str,
        timeout: float = 60.0,
        verify: ssl.SSLContext | bool = True,
        headers: dict[str, str] | None = None,
    ) -> None:
        """Initialize HTTP client.

        Args:
            context: Process-scoped context owning the call counter
            service: Service name used in logs
            base_url: Base URL every path is appended to
            timeout: Default timeout in seconds for calls without an override
            verify: TLS verification setting or prepared SSL context, passed
                to httpx unchanged
            headers: Default headers for all requests
        """
        super().__init__(context)
        self._service = service
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._default_headers = headers or {}
        self._client = httpx.Client(timeout=timeout, verify=verify, follow_redirects=True)

    @property
    def service(self) -> str:
        return self._service

    def close(self) -> None:
        """Close the underlying httpx client and release connections."""
        self._client.close()

    def resolve_url(self, path: str) -> str:
        """Join base_url with path; an empty path targets base_url itself."""
        path = path.lstrip("/")
        if not path:
            return self._base_url
        return f"{self._base_url}/{path}"

    def _begin_call(self, url: str, params: dict[str, Any] | None, kind: str) -> None:
        total = self._count_call()
        logger.debug("upstream_call", service=self._service, kind=kind, url=url, params=params, total_calls=total)

    def _check_status(self, response: httpx.Response, url: str) -> None:
        if not 200 <= response.status_code < 300:
            raise NetworkError(
                f"{self._service} returned HTTP {response.status_code} for {url}",
                url=url,
                status_code=response.status_code,
            )

    def _iter_body_lines(self, response: httpx.Response, url: str, deadline: float, timeout: float) -> Iterator[bytes]:
        """Split a streamed body into lines, checking the deadline on every chunk.

        A server that trickles bytes without ever completing a line still
        trips the deadline.
        """
        pending = b""
        for chunk in response.iter_bytes():
            if time.monotonic() > deadline:
                raise NetworkError(
                    f"stream from {self._service} at {url} exceeded {timeout}s deadline",
                    url=url,
                )
            pending += chunk
            *lines, pending = pending.split(b"\n")
            yield from lines
        if pending:
            yield pending

    def get_json(
        self,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """Fetch a bounded JSON document.

        Args:
            path: Path appended to base_url
            params: Query parameters
            timeout: Timeout override in seconds

        Returns:
            The decoded JSON value

        Raises:
            NetworkError: Connection failure, timeout or non-2xx status
            DecodeError: Body is not valid JSON
        """
        url = self.resolve_url(path)
        self._begin_call(url, params, "json")
        try:
            response = self._client.get(
                url,
                params=params,
                headers={**self._default_headers, "Accept": JSON_ACCEPT},
                timeout=timeout if timeout is not None else self._timeout,
            )
        except httpx.TimeoutException as e:
            raise NetworkError(f"timeout calling {self._service} at {url}: {e}", url=url) from e
        except httpx.HTTPError as e:
            raise NetworkError(f"failed calling {self._service} at {url}: {e}", url=url) from e

        self._check_status(response, url)
        try:
            return json.loads(response.content)
        except (JSONDecodeError, UnicodeDecodeError) as e:
            raise DecodeError(f"invalid JSON from {self._service} at {url}: {e}", url=url) from e

    def iter_ndjson(
        self,
        path: str,
        *,
        decode: Callable[[Any], T],
        params: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Iterator[T]:
        """Stream a newline-delimited JSON response, one element at a time.

        Elements are decoded as they arrive; the body is never buffered
        whole. Blank lines are skipped. A ``null`` line is the end-of-stream
        sentinel. A line that is not valid JSON, or that ``decode`` rejects,
        stops consumption of this stream with a warning; elements already
        yielded stand.

        The timeout is both the per-read timeout and an overall deadline for
        the stream, checked on every chunk received.

        Args:
            path: Path appended to base_url
            decode: Converts one parsed JSON element to T; raises KeyError,
                TypeError or ValueError for malformed elements
            params: Query parameters
            timeout: Timeout override in seconds

        Yields:
            Decoded elements in stream order

        Raises:
            NetworkError: Connection failure, timeout, deadline exceeded or
                non-2xx status
        """
        url = self.resolve_url(path)
        effective_timeout = timeout if timeout is not None else self._timeout
        self._begin_call(url, params, "ndjson")
        deadline = time.monotonic() + effective_timeout
        count = 0

        try:
            with self._client.stream(
                "GET",
                url,
                params=params,
                headers={**self._default_headers, "Accept": NDJSON_ACCEPT},
                timeout=effective_timeout,
            ) as response:
                self._check_status(response, url)
                for line in self._iter_body_lines(response, url, deadline, effective_timeout):
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        element = json.loads(line)
                    except (JSONDecodeError, UnicodeDecodeError) as e:
                        logger.warning("stream_truncated", url=url, reason="malformed_json", error=str(e), elements=count)
                        return
                    if element is None:
                        return
                    try:
                        item = decode(element)
                    except _ELEMENT_ERRORS as e:
                        logger.warning("stream_truncated", url=url, reason="malformed_element", error=str(e), elements=count)
                        return
                    count += 1
                    yield item
        except httpx.TimeoutException as e:
            raise NetworkError(f"timeout streaming from {self._service} at {url}: {e}", url=url) from e
        except httpx.HTTPError as e:
            raise NetworkError(f"failed streaming from {self._service} at {url}: {e}", url=url) from e
