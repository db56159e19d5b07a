"""Internal models for operation descriptors, requests and responses."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, Optional, Tuple

import httpx

PATH = "path"
QUERY = "query"
HEADER = "header"
BODY = "body"
BODY_FIELD = "body_field"


@dataclass(frozen=True)
class ParamSpec:
    name: str
    location: str
    wire_name: str
    required: bool = False


@dataclass(frozen=True)
class OperationDescriptor:
    operation_id: str
    method: str
    path: str
    params: Tuple[ParamSpec, ...] = ()
    accept: Optional[str] = None
    content_type: Optional[str] = None
    stream: bool = False
    description: str = ""

    @property
    def required_params(self) -> Tuple[str, ...]:
        return tuple(param.name for param in self.params if param.required)

    @property
    def param_names(self) -> Tuple[str, ...]:
        return tuple(param.name for param in self.params)


@dataclass(frozen=True)
class RequestDescriptor:
    operation_id: str
    method: str
    path: str
    path_template: str
    path_params: Dict[str, str] = field(default_factory=dict)
    query: Dict[str, Any] = field(default_factory=dict)
    headers: Dict[str, str] = field(default_factory=dict)
    body: Any = None
    stream: bool = False


class ByteStream:
    """Unparsed response body for stream-typed operations.

    Wraps an open streamed ``httpx.Response``; the connection is released once
    the stream is exhausted, read with ``aread()`` or closed explicitly.
    """

    def __init__(self, response: httpx.Response) -> None:
        self._response = response

    @property
    def response(self) -> httpx.Response:
        return self._response

    async def __aiter__(self) -> AsyncIterator[bytes]:
        try:
            async for chunk in self._response.aiter_bytes():
                yield chunk
        finally:
            await self._response.aclose()

    async def aread(self) -> bytes:
        try:
            return await self._response.aread()
        finally:
            await self._response.aclose()

    async def aclose(self) -> None:
        await self._response.aclose()

    async def __aenter__(self) -> "ByteStream":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


@dataclass
class DetailedResponse:
    result: Any = None
    headers: Dict[str, str] = field(default_factory=dict)
    status_code: int = 200

    def get_result(self) -> Any:
        return self.result

    def get_headers(self) -> Dict[str, str]:
        return self.headers

    def get_status_code(self) -> int:
        return self.status_code
