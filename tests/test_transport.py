import json
import logging
from unittest.mock import AsyncMock

import httpx
import pytest

from conftest import SERVICE_URL, make_service
from ibm_key_protect.errors import ApiException
from ibm_key_protect.models import ByteStream
from ibm_key_protect.transport import HttpTransport, RetryPolicy


@pytest.fixture
def sleep(monkeypatch):
    mock = AsyncMock()
    monkeypatch.setattr("ibm_key_protect.transport.asyncio.sleep", mock)
    return mock


def _json(status_code=200, payload=None, headers=None):
    return lambda request: httpx.Response(status_code, json=payload or {}, headers=headers)


def _sequence(*responses):
    remaining = list(responses)

    def responder(request):
        return remaining.pop(0)

    return responder


class TestSend:
    async def test_json_response(self):
        payload = {"metadata": {"collectionTotal": 1}, "resources": [{"id": "k1"}]}
        service, handler = make_service(_json(200, payload, {"Correlation-Id": "c1"}))

        response = await service.get_key(id="k1", bluemix_instance="inst", x_kms_key_ring="ring")

        assert response.get_result() == payload
        assert response.get_status_code() == 200
        assert response.get_headers()["correlation-id"] == "c1"
        sent = handler.requests[0]
        assert str(sent.url) == f"{SERVICE_URL}/api/v2/keys/k1"
        assert sent.method == "GET"
        assert sent.headers["Authorization"] == "Bearer token-123"
        assert sent.headers["Bluemix-Instance"] == "inst"
        assert sent.headers["X-Kms-Key-Ring"] == "ring"
        assert sent.headers["Accept"] == "application/json"

    async def test_query_encoding(self):
        service, handler = make_service(_json())

        await service.get_keys(bluemix_instance="inst", state=[0, 1, 5], extractable=False, limit=10)

        params = handler.requests[0].url.params
        assert params["state"] == "0,1,5"
        assert params["extractable"] == "false"
        assert params["limit"] == "10"

    async def test_path_encoding(self):
        service, handler = make_service(_json())

        await service.create_key_ring(key_ring_id="my ring", bluemix_instance="inst")
        await service.delete_registration(
            id="k1", url_encoded_resource_crn="crn%3Av1%3Abluemix", bluemix_instance="inst"
        )

        assert handler.requests[0].url.raw_path == b"/api/v2/key_rings/my%20ring"
        assert handler.requests[1].url.raw_path == b"/api/v2/keys/k1/registrations/crn%3Av1%3Abluemix"

    async def test_json_body(self):
        service, handler = make_service(_json(201, {"resources": []}))
        body = {
            "metadata": {"collectionType": "application/vnd.ibm.kms.key+json", "collectionTotal": 1},
            "resources": [{"type": "application/vnd.ibm.kms.key+json", "name": "root", "extractable": False}],
        }

        response = await service.create_key(bluemix_instance="inst", key_create_body=body, prefer="return=minimal")

        sent = handler.requests[0]
        assert response.get_status_code() == 201
        assert json.loads(sent.content) == body
        assert sent.headers["Content-Type"] == "application/vnd.ibm.kms.key+json"
        assert sent.headers["Prefer"] == "return=minimal"

    async def test_raw_body(self):
        service, handler = make_service(_json())

        await service.create_key(bluemix_instance="inst", key_create_body=b"raw-bytes")

        assert handler.requests[0].content == b"raw-bytes"

    async def test_head_response_has_no_result(self):
        service, handler = make_service(lambda request: httpx.Response(200, headers={"Key-Total": "12"}))

        response = await service.get_key_collection_metadata(bluemix_instance="inst")

        assert handler.requests[0].method == "HEAD"
        assert response.get_result() is None
        assert response.get_headers()["key-total"] == "12"

    async def test_no_content(self):
        service, _ = make_service(lambda request: httpx.Response(204))

        response = await service.delete_key_alias(id="k1", alias="a1", bluemix_instance="inst")

        assert response.get_status_code() == 204
        assert response.get_result() is None

    async def test_stream_response(self):
        service, _ = make_service(lambda request: httpx.Response(201, content=b'{"resources": []}'))

        response = await service.restore_key(
            id="k1", bluemix_instance="inst", key_restore_body={"metadata": {}}
        )

        assert isinstance(response.get_result(), ByteStream)
        assert await response.get_result().aread() == b'{"resources": []}'

    async def test_stream_iteration(self):
        service, _ = make_service(lambda request: httpx.Response(201, content=b"chunked-body"))

        response = await service.restore_key(id="k1", bluemix_instance="inst", key_restore_body={})

        chunks = [chunk async for chunk in response.get_result()]
        assert b"".join(chunks) == b"chunked-body"

    async def test_numeric_header_override_is_sent(self):
        service, handler = make_service(_json())

        await service.get_key(id="k1", bluemix_instance="inst", headers={"Correlation-Id": 42})

        assert handler.requests[0].headers["Correlation-Id"] == "42"


class TestErrors:
    async def test_api_exception(self):
        payload = {
            "metadata": {"collectionTotal": 1},
            "resources": [{"errorMsg": "Not Found: Key could not be found"}],
        }
        service, _ = make_service(_json(404, payload, {"Correlation-Id": "c1"}))

        with pytest.raises(ApiException) as exc_info:
            await service.get_key(id="missing", bluemix_instance="inst")

        error = exc_info.value
        assert error.code == 404
        assert error.message == "Not Found: Key could not be found"
        assert error.headers["correlation-id"] == "c1"
        assert str(error) == "Error: Not Found: Key could not be found, Status code: 404"

    async def test_stream_error_is_read(self):
        service, _ = make_service(_json(400, {"errorMsg": "Bad Request: missing metadata"}))

        with pytest.raises(ApiException) as exc_info:
            await service.restore_key(id="k1", bluemix_instance="inst", key_restore_body={})

        assert exc_info.value.message == "Bad Request: missing metadata"

    async def test_no_retry_by_default(self, sleep):
        service, handler = make_service(_json(503))

        with pytest.raises(ApiException):
            await service.get_key(id="k1", bluemix_instance="inst")

        assert len(handler.requests) == 1
        sleep.assert_not_awaited()


class TestRetries:
    async def test_retries_server_errors(self, sleep):
        service, handler = make_service(
            _sequence(
                httpx.Response(503, json={}),
                httpx.Response(429, json={}),
                httpx.Response(200, json={"resources": []}),
            )
        )
        service.enable_retries(max_retries=3, retry_interval=30)

        response = await service.get_key(id="k1", bluemix_instance="inst")

        assert response.get_status_code() == 200
        assert len(handler.requests) == 3
        assert [call.args[0] for call in sleep.await_args_list] == [2, 4]

    async def test_backoff_capped_by_interval(self, sleep):
        service, _ = make_service(_json(500))
        service.enable_retries(max_retries=2, retry_interval=3)

        with pytest.raises(ApiException):
            await service.get_key(id="k1", bluemix_instance="inst")

        assert [call.args[0] for call in sleep.await_args_list] == [2, 3]

    async def test_retry_after_header(self, sleep):
        service, _ = make_service(
            _sequence(
                httpx.Response(429, json={}, headers={"Retry-After": "1"}),
                httpx.Response(200, json={}),
            )
        )
        service.enable_retries(max_retries=1, retry_interval=30)

        await service.get_key(id="k1", bluemix_instance="inst")

        sleep.assert_awaited_once_with(1.0)

    async def test_not_implemented_is_not_retried(self, sleep):
        service, handler = make_service(_json(501))
        service.enable_retries()

        with pytest.raises(ApiException) as exc_info:
            await service.get_key(id="k1", bluemix_instance="inst")

        assert exc_info.value.code == 501
        assert len(handler.requests) == 1

    async def test_client_errors_are_not_retried(self, sleep):
        service, handler = make_service(_json(400))
        service.enable_retries()

        with pytest.raises(ApiException):
            await service.get_key(id="k1", bluemix_instance="inst")

        assert len(handler.requests) == 1

    async def test_transport_errors_retried_then_raised(self, sleep):
        def responder(request):
            raise httpx.ConnectError("connection refused", request=request)

        service, handler = make_service(responder)
        service.enable_retries(max_retries=2, retry_interval=1)

        with pytest.raises(httpx.ConnectError):
            await service.get_key(id="k1", bluemix_instance="inst")

        assert len(handler.requests) == 3
        assert sleep.await_count == 2

    async def test_retry_reauthenticates(self, sleep):
        service, handler = make_service(
            _sequence(httpx.Response(502, json={}), httpx.Response(200, json={}))
        )
        service.enable_retries(max_retries=1, retry_interval=1)

        await service.get_key(id="k1", bluemix_instance="inst")

        assert all(sent.headers["Authorization"] == "Bearer token-123" for sent in handler.requests)


class TestHttpTransport:
    def test_retry_policy_defaults(self):
        assert RetryPolicy() == RetryPolicy(max_retries=4, retry_interval=30.0)

    async def test_disable_ssl_replaces_owned_client(self):
        transport = HttpTransport()
        first = transport.client

        transport.set_verify_ssl(False)

        assert transport.verify_ssl is False
        assert transport.client is not first
        await transport.aclose()
        assert first.is_closed

    async def test_injected_client_is_not_closed(self):
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
        transport = HttpTransport(http_client=client)

        await transport.aclose()

        assert not client.is_closed
        await client.aclose()

    async def test_disable_ssl_on_injected_client_warns(self, caplog):
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
        transport = HttpTransport(http_client=client)

        with caplog.at_level(logging.WARNING, logger="ibm_key_protect.transport"):
            transport.set_verify_ssl(False)

        assert transport.client is client
        assert "injected http client" in caplog.text
        await client.aclose()
