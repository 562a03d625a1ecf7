"""Tests for the single-attempt RequestExecutor."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from steadyhttp.client.executor import RequestExecutor, decode_body
from steadyhttp.exceptions import InvalidRequestError
from steadyhttp.models import Failure, FailureKind, HTTPMethod, RequestSpec, Success

BASE_URL = "https://api.example.com"


def _executor(handler, timeout: float = 5.0) -> RequestExecutor:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return RequestExecutor(client, BASE_URL, timeout)


# ---------------------------------------------------------------------------
# Success
# ---------------------------------------------------------------------------


class TestSuccess:
    @pytest.mark.asyncio
    async def test_json_body_decoded(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"users": [{"id": 1}]})

        outcome = await _executor(handler).attempt(RequestSpec(url="/users"))

        assert isinstance(outcome, Success)
        assert outcome.status == 200
        assert outcome.status_text == "OK"
        assert outcome.body == {"users": [{"id": 1}]}

    @pytest.mark.asyncio
    async def test_relative_url_resolved_against_base(self) -> None:
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200, json={})

        await _executor(handler).attempt(RequestSpec(url="/users/7"))
        assert seen == ["https://api.example.com/users/7"]

    @pytest.mark.asyncio
    async def test_url_in_query_string_still_uses_base(self) -> None:
        seen: list[httpx.URL] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url)
            return httpx.Response(200, json={})

        outcome = await _executor(handler).attempt(
            RequestSpec(url="/redirect?to=https://other.example.com")
        )

        assert isinstance(outcome, Success)
        assert seen[0].host == "api.example.com"
        assert seen[0].path == "/redirect"
        assert seen[0].params["to"] == "https://other.example.com"

    @pytest.mark.asyncio
    async def test_absolute_url_ignores_base(self) -> None:
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200, json={})

        await _executor(handler).attempt(RequestSpec(url="https://other.example.org/ping"))
        assert seen == ["https://other.example.org/ping"]

    @pytest.mark.asyncio
    async def test_json_body_sent(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "POST"
            assert json.loads(request.content) == {"name": "test", "active": True}
            return httpx.Response(201, json={"id": 42})

        outcome = await _executor(handler).attempt(
            RequestSpec(url="/items", method=HTTPMethod.POST, body={"name": "test", "active": True})
        )
        assert isinstance(outcome, Success)
        assert outcome.status == 201

    @pytest.mark.asyncio
    async def test_empty_body_decodes_to_none(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(204)

        outcome = await _executor(handler).attempt(RequestSpec(url="/items/1", method=HTTPMethod.DELETE))
        assert isinstance(outcome, Success)
        assert outcome.body is None


# ---------------------------------------------------------------------------
# Headers
# ---------------------------------------------------------------------------


class TestHeaders:
    @pytest.mark.asyncio
    async def test_default_content_type(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.headers["content-type"] == "application/json"
            return httpx.Response(200, json={})

        await _executor(handler).attempt(RequestSpec(url="/x"))

    @pytest.mark.asyncio
    async def test_caller_headers_override_default(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.headers.get_list("content-type") == ["text/plain"]
            assert request.headers["x-custom"] == "value"
            return httpx.Response(200, json={})

        await _executor(handler).attempt(
            RequestSpec(url="/x", headers={"content-type": "text/plain", "X-Custom": "value"})
        )


# ---------------------------------------------------------------------------
# Failure classification
# ---------------------------------------------------------------------------


class TestFailureClassification:
    @pytest.mark.asyncio
    async def test_deadline_elapsed_is_timeout(self) -> None:
        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(10)
            return httpx.Response(200)

        outcome = await _executor(handler, timeout=0.05).attempt(RequestSpec(url="/slow"))

        assert isinstance(outcome, Failure)
        assert outcome.kind == FailureKind.TIMEOUT
        assert outcome.status is None

    @pytest.mark.asyncio
    async def test_httpx_timeout_is_timeout(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("Read timed out")

        outcome = await _executor(handler).attempt(RequestSpec(url="/slow"))
        assert isinstance(outcome, Failure)
        assert outcome.kind == FailureKind.TIMEOUT

    @pytest.mark.asyncio
    async def test_connect_error_is_network_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused")

        outcome = await _executor(handler).attempt(RequestSpec(url="/x"))
        assert isinstance(outcome, Failure)
        assert outcome.kind == FailureKind.NETWORK_ERROR
        assert "Connection refused" in outcome.message

    @pytest.mark.asyncio
    async def test_redirect_loop_is_network_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(302, headers={"Location": str(request.url)})

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler), follow_redirects=True)
        outcome = await RequestExecutor(client, BASE_URL, 5.0).attempt(RequestSpec(url="/loop"))

        assert isinstance(outcome, Failure)
        assert outcome.kind == FailureKind.NETWORK_ERROR
        assert outcome.message

    @pytest.mark.asyncio
    async def test_undecodable_body_is_network_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, headers={"Content-Encoding": "gzip"}, content=b"not gzip at all")

        outcome = await _executor(handler).attempt(RequestSpec(url="/broken"))
        assert isinstance(outcome, Failure)
        assert outcome.kind == FailureKind.NETWORK_ERROR

    @pytest.mark.parametrize("status", [400, 401, 404, 429, 500, 503])
    @pytest.mark.asyncio
    async def test_non_2xx_is_http_error(self, status: int) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status, json={"error": "nope"})

        outcome = await _executor(handler).attempt(RequestSpec(url="/x"))
        assert isinstance(outcome, Failure)
        assert outcome.kind == FailureKind.HTTP_ERROR
        assert outcome.status == status
        assert outcome.message.startswith(f"HTTP {status}")

    @pytest.mark.asyncio
    async def test_exactly_one_round_trip(self) -> None:
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(500)

        await _executor(handler).attempt(RequestSpec(url="/x"))
        assert calls == 1


# ---------------------------------------------------------------------------
# Invalid requests
# ---------------------------------------------------------------------------


class TestInvalidRequest:
    @pytest.mark.asyncio
    async def test_relative_url_without_base_raises(self) -> None:
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        executor = RequestExecutor(client, "", 5.0)
        with pytest.raises(InvalidRequestError):
            await executor.attempt(RequestSpec(url="/users"))

    @pytest.mark.asyncio
    async def test_non_http_scheme_raises(self) -> None:
        executor = _executor(lambda r: httpx.Response(200))
        with pytest.raises(InvalidRequestError):
            await executor.attempt(RequestSpec(url="ftp://example.com/file"))


def test_decode_body_falls_back_to_text() -> None:
    response = httpx.Response(200, text="plain text", headers={"content-type": "text/plain"})
    assert decode_body(response) == "plain text"
