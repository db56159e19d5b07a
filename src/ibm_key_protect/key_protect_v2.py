"""Key Protect v2 API client."""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Mapping, Optional

import httpx

from .auth import Authenticator, get_authenticator_from_environment
from .builder import build_request
from .common import get_sdk_headers
from .config import (
    DEFAULT_SERVICE_NAME,
    DEFAULT_SERVICE_URL,
    PARAMETERIZED_SERVICE_URL,
    construct_service_url,
    get_settings,
)
from .models import DetailedResponse, OperationDescriptor, RequestDescriptor
from .operations import OPERATIONS, get_operation
from .transport import HttpTransport, RetryPolicy

SERVICE_VERSION = "V2"


class KeyProtectV2:
    """Asynchronous client for the IBM Key Protect API.

    Every API operation is available as a coroutine method taking keyword
    parameters, e.g. ``await client.get_key(id=..., bluemix_instance=...)``.
    A ``headers`` keyword overrides any request header, including ``Accept``
    and ``Content-Type``. Missing required parameters raise
    ``MissingParametersError`` before any request is sent.
    """

    DEFAULT_SERVICE_NAME = DEFAULT_SERVICE_NAME
    DEFAULT_SERVICE_URL = DEFAULT_SERVICE_URL
    PARAMETERIZED_SERVICE_URL = PARAMETERIZED_SERVICE_URL

    def __init__(
        self,
        authenticator: Authenticator,
        service_url: Optional[str] = None,
        service_name: str = DEFAULT_SERVICE_NAME,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout_seconds: float = 60,
    ) -> None:
        if authenticator is None:
            raise ValueError("authenticator must be provided")
        authenticator.validate()
        self.authenticator = authenticator
        self.service_name = service_name
        self.service_url = service_url or DEFAULT_SERVICE_URL
        self.transport = HttpTransport(timeout_seconds=timeout_seconds, http_client=http_client)
        self.retry_policy: Optional[RetryPolicy] = None

    @classmethod
    def new_instance(
        cls,
        service_name: str = DEFAULT_SERVICE_NAME,
        authenticator: Optional[Authenticator] = None,
        service_url: Optional[str] = None,
    ) -> "KeyProtectV2":
        """Build a client from ``<SERVICE_NAME>_*`` environment configuration."""
        settings = get_settings(service_name)
        if authenticator is None:
            authenticator = get_authenticator_from_environment(service_name)

        service = cls(
            authenticator=authenticator,
            service_url=service_url or settings.url,
            service_name=service_name,
            timeout_seconds=settings.timeout_seconds,
        )
        if settings.disable_ssl:
            service.set_disable_ssl_verification(True)
        if settings.enable_retries:
            service.enable_retries(settings.max_retries, settings.retry_interval)
        return service

    @staticmethod
    def construct_service_url(variables: Optional[Mapping[str, str]] = None) -> str:
        return construct_service_url(variables)

    def set_service_url(self, service_url: str) -> None:
        if not service_url:
            raise ValueError("service_url must be a non-empty string")
        self.service_url = service_url

    def set_disable_ssl_verification(self, disabled: bool = False) -> None:
        self.transport.set_verify_ssl(not disabled)

    def enable_retries(self, max_retries: int = 4, retry_interval: float = 30.0) -> None:
        self.retry_policy = RetryPolicy(max_retries=max_retries, retry_interval=retry_interval)

    def disable_retries(self) -> None:
        self.retry_policy = None

    async def call(
        self, operation_id: str, params: Optional[Mapping[str, Any]] = None
    ) -> DetailedResponse:
        operation = get_operation(operation_id)
        sdk_headers = get_sdk_headers(self.service_name, SERVICE_VERSION, _camel(operation_id))
        request = build_request(operation, params, sdk_headers)
        return await self.create_request(request)

    async def create_request(self, request: RequestDescriptor) -> DetailedResponse:
        return await self.transport.send(
            request,
            service_url=self.service_url,
            authenticator=self.authenticator,
            retry_policy=self.retry_policy,
        )

    async def aclose(self) -> None:
        await self.transport.aclose()

    async def __aenter__(self) -> "KeyProtectV2":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


def _camel(operation_id: str) -> str:
    head, *rest = operation_id.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _operation_method(
    operation: OperationDescriptor,
) -> Callable[..., Awaitable[DetailedResponse]]:
    async def method(self: KeyProtectV2, **params: Any) -> DetailedResponse:
        return await self.call(operation.operation_id, params)

    required = ", ".join(operation.required_params) or "none"
    method.__name__ = operation.operation_id
    method.__qualname__ = f"KeyProtectV2.{operation.operation_id}"
    method.__doc__ = (
        f"{operation.description}\n\n"
        f"{operation.method} {operation.path}\n\n"
        f"Required parameters: {required}.\n"
        f"Parameters: {', '.join(operation.param_names)}."
    )
    return method


for _operation in OPERATIONS.values():
    setattr(KeyProtectV2, _operation.operation_id, _operation_method(_operation))
