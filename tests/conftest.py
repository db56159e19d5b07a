from typing import Callable, List

import httpx
import pytest

from ibm_key_protect.auth import BearerTokenAuthenticator
from ibm_key_protect.config import get_settings
from ibm_key_protect.key_protect_v2 import KeyProtectV2

SERVICE_URL = "https://kms.example.test"


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class RecordingHandler:
    """Mock transport handler that records requests and replays responses."""

    def __init__(self, responder: Callable[[httpx.Request], httpx.Response]):
        self.responder = responder
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)


def make_service(responder: Callable[[httpx.Request], httpx.Response]):
    handler = RecordingHandler(responder)
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    service = KeyProtectV2(
        authenticator=BearerTokenAuthenticator("token-123"),
        service_url=SERVICE_URL,
        http_client=client,
    )
    return service, handler
