"""Failures raised by incident sources."""

from __future__ import annotations


class FetchError(Exception):
    """A fetch round-trip that produced no usable incident collection."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NetworkError(FetchError):
    pass


class MalformedResponseError(FetchError):
    pass


class UnexpectedStatusError(FetchError):
    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code
