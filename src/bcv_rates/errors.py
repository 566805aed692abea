"""Exception hierarchy shared by the extraction, fetching and HTTP layers."""

from __future__ import annotations


class ExtractionError(RuntimeError):
    """Raised when a rate record cannot be produced at all."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class ParseError(ExtractionError):
    """Raised when a document cannot be turned into a queryable tree."""


class FetchError(ExtractionError):
    """Raised when fetching the source document fails."""

    def __init__(
        self,
        url: str,
        status: int | None,
        message: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.url = url
        self.status = status
        super().__init__(f"{message or 'Failed to fetch URL'}: {url} (status={status})", cause)
