"""Error types raised by the Key Protect client."""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

import httpx


class MissingParametersError(ValueError):
    def __init__(self, missing: Iterable[str]) -> None:
        self.missing = list(missing)
        super().__init__(f"Missing required parameters: {', '.join(self.missing)}")


class ApiException(Exception):
    """A non-2xx response from the service."""

    def __init__(
        self,
        code: int,
        message: Optional[str] = None,
        http_response: Optional[httpx.Response] = None,
    ) -> None:
        self.code = code
        self.http_response = http_response
        self.headers: Dict[str, str] = dict(http_response.headers) if http_response is not None else {}
        self.message = message or _extract_error_message(http_response) or "Unknown error"
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"Error: {self.message}, Status code: {self.code}"


def _extract_error_message(response: Optional[httpx.Response]) -> Optional[str]:
    if response is None:
        return None
    try:
        payload: Any = response.json()
    except ValueError:
        return response.reason_phrase or None

    if isinstance(payload, dict):
        resources = payload.get("resources")
        if isinstance(resources, list) and resources and isinstance(resources[0], dict):
            if resources[0].get("errorMsg"):
                return str(resources[0]["errorMsg"])
        errors = payload.get("errors")
        if isinstance(errors, list) and errors and isinstance(errors[0], dict):
            if errors[0].get("message"):
                return str(errors[0]["message"])
        for key in ("errorMsg", "message", "error"):
            if payload.get(key):
                return str(payload[key])
    return response.reason_phrase or None
