# src/lumicheck/contracts/errors.py
"""Error taxonomy for upstream calls and resolution.

Every error raised by lumicheck derives from CheckerError. All of them are
fatal to the unit of work that raised them: a failed call fails the dataset
resolution, which fails the workflow resolution. Only the batch orchestrator
converts a workflow-level error into "no records for this workflow".
"""

from __future__ import annotations


class CheckerError(Exception):
    """Base exception for lumicheck errors."""


class NetworkError(CheckerError):
    """Connection failure, timeout or error status on a single upstream call.

    Attributes:
        url: URL of the failed call
        status_code: HTTP status when the server answered with a non-2xx
            response, None for transport failures and timeouts
    """

    def __init__(self, message: str, *, url: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class DecodeError(CheckerError):
    """Malformed JSON payload or element.

    Attributes:
        url: URL whose response could not be decoded
    """

    def __init__(self, message: str, *, url: str) -> None:
        super().__init__(message)
        self.url = url


class UpstreamDataError(CheckerError):
    """Well-formed upstream response that does not carry the expected data.

    Raised for an empty summary array, a workflow id missing from the
    descriptor response, a descriptor without input dataset, or a block
    name without an id segment.
    """
