import json
from contextlib import contextmanager
from typing import Generator

import httpx

from ..models.errors import ApiError


@contextmanager
def handle_errors() -> Generator[None, None, None]:
    """Convert HTTP status errors raised inside the block into ``ApiError``.

    Raises:
        ApiError: With the status code and the response body, and the
            ``message``/``error``/``detail`` field of a JSON body as message.
    """
    try:
        yield
    except httpx.HTTPStatusError as e:
        try:
            error_body = e.response.json()
        except Exception:
            error_body = e.response.text

        status_code = e.response.status_code

        message: str | None = None
        if isinstance(error_body, dict):
            message = (
                error_body.get("message")
                or error_body.get("error")
                or error_body.get("detail")
            )
            if isinstance(message, dict):
                message = message.get("message")
            error_body = json.dumps(error_body)

        raise ApiError(message or str(e), status_code, error_body) from e
