"""HTTP transport with optional retries for built requests."""

from __future__ import annotations

import asyncio
import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from .auth import Authenticator
from .errors import ApiException
from .logging import redact_headers, redact_payload
from .models import ByteStream, DetailedResponse, RequestDescriptor
from .schemas import dump_body

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\{([^{}]+)\}")


@dataclass(frozen=True)
class RetryPolicy:
    max_retries: int = 4
    retry_interval: float = 30.0


class HttpTransport:
    def __init__(
        self,
        timeout_seconds: float = 60,
        verify_ssl: bool = True,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.timeout_seconds = timeout_seconds
        self.verify_ssl = verify_ssl
        self._client = http_client
        self._owns_client = http_client is None
        self._retired: List[httpx.AsyncClient] = []

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout_seconds, verify=self.verify_ssl)
        return self._client

    def set_verify_ssl(self, verify_ssl: bool) -> None:
        self.verify_ssl = verify_ssl
        if not self._owns_client:
            logger.warning(
                "SSL verification setting (verify=%s) not applied to the injected http client; "
                "configure verify on that client instead",
                verify_ssl,
            )
            return
        if self._client is not None:
            self._retired.append(self._client)
            self._client = None

    async def aclose(self) -> None:
        clients = list(self._retired)
        if self._owns_client and self._client is not None:
            clients.append(self._client)
            self._client = None
        self._retired.clear()
        for client in clients:
            await client.aclose()

    async def send(
        self,
        request: RequestDescriptor,
        service_url: str,
        authenticator: Authenticator,
        retry_policy: Optional[RetryPolicy] = None,
    ) -> DetailedResponse:
        url = self._build_url(service_url, request)
        params = self._encode_query(request.query)
        content = self._encode_body(request.body)
        max_retries = retry_policy.max_retries if retry_policy else 0

        attempt = 0
        while True:
            attempt += 1
            headers = dict(request.headers)
            authenticator.authenticate(headers)
            http_request = self.client.build_request(
                request.method,
                url,
                headers=headers,
                params=params,
                content=content,
            )
            logger.debug(
                "Sending %s %s operation=%s headers=%s",
                request.method,
                url,
                request.operation_id,
                redact_headers(headers),
            )

            try:
                response = await self.client.send(http_request, stream=request.stream)
            except httpx.TransportError as exc:
                if attempt > max_retries:
                    raise
                backoff = self._backoff(attempt, retry_policy, None)
                logger.warning(
                    "Request failed (attempt %s/%s). Retrying in %ss. operation=%s query=%s error=%s",
                    attempt,
                    max_retries,
                    backoff,
                    request.operation_id,
                    redact_payload(params),
                    exc,
                )
                await asyncio.sleep(backoff)
                continue

            if response.is_success:
                return self._detailed_response(response, request.stream)

            if request.stream:
                await response.aread()
                await response.aclose()

            if attempt <= max_retries and self._is_retryable(response.status_code):
                backoff = self._backoff(attempt, retry_policy, response)
                logger.warning(
                    "Request returned %s (attempt %s/%s). Retrying in %ss. operation=%s query=%s headers=%s",
                    response.status_code,
                    attempt,
                    max_retries,
                    backoff,
                    request.operation_id,
                    redact_payload(params),
                    redact_headers(headers),
                )
                await asyncio.sleep(backoff)
                continue

            raise ApiException(response.status_code, http_response=response)

    def _build_url(self, service_url: str, request: RequestDescriptor) -> str:
        path = _PLACEHOLDER.sub(
            lambda match: quote(request.path_params[match.group(1)], safe="%"),
            request.path_template,
        )
        return service_url.rstrip("/") + path

    def _encode_query(self, query: Dict[str, Any]) -> Dict[str, str]:
        return {key: _query_value(value) for key, value in query.items()}

    def _encode_body(self, body: Any) -> Optional[bytes]:
        if body is None:
            return None
        if isinstance(body, (bytes, bytearray)):
            return bytes(body)
        if isinstance(body, str):
            return body.encode("utf-8")
        if hasattr(body, "read"):
            data = body.read()
            return data.encode("utf-8") if isinstance(data, str) else data
        return json.dumps(dump_body(body)).encode("utf-8")

    def _is_retryable(self, status_code: int) -> bool:
        return status_code == 429 or (500 <= status_code < 600 and status_code != 501)

    def _backoff(
        self,
        attempt: int,
        retry_policy: Optional[RetryPolicy],
        response: Optional[httpx.Response],
    ) -> float:
        interval = retry_policy.retry_interval if retry_policy else 0
        retry_after = response.headers.get("Retry-After") if response is not None else None
        if retry_after:
            try:
                return min(float(retry_after), interval)
            except ValueError:
                logger.debug("Ignoring non-numeric Retry-After header: %s", retry_after)
        return min(2 ** attempt, interval)

    def _detailed_response(self, response: httpx.Response, stream: bool) -> DetailedResponse:
        headers = dict(response.headers)
        if stream:
            return DetailedResponse(ByteStream(response), headers, response.status_code)

        result: Any = None
        if response.content:
            content_type = response.headers.get("content-type", "")
            result = response.json() if "json" in content_type else response.text
        return DetailedResponse(result, headers, response.status_code)


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(_query_value(item) for item in value)
    return str(value)
