from typing import Optional


class ApiFormError(Exception):
    """Base class for errors raised by apiform."""


class BaseUrlMissingError(ApiFormError):
    def __init__(
        self,
        message="Base URL required. Pass base_url to the client or set the APIFORM_URL environment variable.",
    ):
        self.message = message
        super().__init__(self.message)


class MalformedParametersError(ApiFormError, ValueError):
    """Raised when request parameters cannot be flattened.

    Parameter trees must be tree-shaped: a mapping or sequence that contains
    itself (directly or through a descendant) is rejected before any part of
    the body is produced.
    """

    @staticmethod
    def cycle(key: Optional[str]) -> "MalformedParametersError":
        where = f" under key '{key}'" if key else ""
        return MalformedParametersError(
            f"Parameters contain a reference cycle{where}; "
            "nested mappings and sequences must form a tree."
        )


class EncodingError(ApiFormError, OSError):
    """Raised when a request body cannot be encoded.

    Covers unknown character sets and failures while reading a binary
    payload source.
    """


class ApiError(ApiFormError):
    """An HTTP error response returned by the API."""

    def __init__(
        self, message: str, status_code: int, body: Optional[str] = None
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.body = body
        super().__init__(message)

    def __str__(self) -> str:
        return f"{self.status_code}: {self.message}"
