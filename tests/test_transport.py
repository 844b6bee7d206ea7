"""Tests for fmdata.transport -- sessions, envelopes, and failure mapping."""

from __future__ import annotations

import json

import httpx
import pytest

from fmdata.core.errors import (
    AuthenticationError,
    MissingConfigError,
    NetworkError,
    ParseError,
    ServerError,
    TransportTimeoutError,
)
from fmdata.core.settings import FileMakerSettings
from fmdata.records.request import build_request
from fmdata.records.scripts import Phase, ScriptSpec
from fmdata.transport import DataAPITransport, Operation


def _transport_for(handler, settings: FileMakerSettings) -> DataAPITransport:
    return DataAPITransport(settings, http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


class TestSession:
    @pytest.mark.asyncio
    async def test_login_once_and_reuse_token(self, transport, fake_api):
        request = build_request("Heroes", None, {"name": "Obi-Wan"})
        await transport.send(Operation.CREATE, request)
        await transport.send(Operation.CREATE, request)
        assert fake_api.logins == 1
        assert transport.has_session
        for sent in fake_api.record_requests():
            assert sent.headers["Authorization"] == "Bearer fake-token"

    @pytest.mark.asyncio
    async def test_login_uses_basic_auth(self, transport, fake_api):
        await transport.send(Operation.CREATE, build_request("Heroes", None, {}))
        login = fake_api.requests[0]
        assert login.method == "POST"
        assert login.url.path == "/fmi/data/v1/databases/Heroes/sessions"
        assert login.headers["Authorization"].startswith("Basic ")

    @pytest.mark.asyncio
    async def test_bad_credentials(self, settings, fake_api):
        bad_settings = FileMakerSettings(
            server=settings.server, database="Heroes", user="admin", password="wrong"
        )
        bad_transport = _transport_for(fake_api.handler, bad_settings)
        with pytest.raises(AuthenticationError) as info:
            await bad_transport.send(Operation.CREATE, build_request("Heroes", None, {}))
        assert info.value.context.http_status == 401
        assert info.value.context.metadata["code"] == "212"

    @pytest.mark.asyncio
    async def test_missing_user(self, fake_api):
        settings = FileMakerSettings(server="https://fms.example.com", database="Heroes")
        with pytest.raises(MissingConfigError, match="user"):
            await _transport_for(fake_api.handler, settings).send(
                Operation.CREATE, build_request("Heroes", None, {})
            )

    @pytest.mark.asyncio
    async def test_close_logs_out(self, transport, fake_api, http_client):
        await transport.send(Operation.CREATE, build_request("Heroes", None, {}))
        assert fake_api.open_sessions == {"fake-token"}
        await transport.close()
        assert fake_api.open_sessions == set()
        assert not transport.has_session
        assert fake_api.requests[-1].method == "DELETE"
        # injected client stays open for its owner
        assert not http_client.is_closed

    @pytest.mark.asyncio
    async def test_close_without_session(self, transport, fake_api):
        await transport.close()
        assert fake_api.requests == []

    @pytest.mark.asyncio
    async def test_token_from_body_when_header_missing(self, settings):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/sessions"):
                return httpx.Response(200, json={"response": {"token": "body-token"}, "messages": [{"code": "0", "message": "OK"}]})
            assert request.headers["Authorization"] == "Bearer body-token"
            return httpx.Response(200, json={"response": {"modId": "1"}, "messages": [{"code": "0", "message": "OK"}]})

        result = await _transport_for(handler, settings).send(
            Operation.EDIT, build_request("Heroes", "1", {"name": "Luke"})
        )
        assert result.unwrap() == {"modId": "1"}


class TestSend:
    @pytest.mark.asyncio
    async def test_create_posts_body(self, transport, fake_api):
        scripts = (ScriptSpec(name="FMS Triggered Script", phase=Phase.PREREQUEST, param={"data": 2}),)
        result = await transport.send(
            Operation.CREATE, build_request("Heroes", None, {"name": "Han Solo"}, scripts)
        )
        assert result.is_ok()
        assert result.value["recordId"] == "1"
        sent = fake_api.record_requests()[-1]
        assert sent.method == "POST"
        assert sent.url.path == "/fmi/data/v1/databases/Heroes/layouts/Heroes/records"
        assert json.loads(sent.content) == {
            "fieldData": {"name": "Han Solo"},
            "script.prerequest": "FMS Triggered Script",
            "script.prerequest.param": '{"data": 2}',
        }

    @pytest.mark.asyncio
    async def test_edit_patches_record(self, transport, fake_api):
        await transport.send(Operation.CREATE, build_request("Heroes", None, {"name": "Obi-Wan"}))
        result = await transport.send(
            Operation.EDIT, build_request("Heroes", "1", {"name": "Luke"}, mod_id="0")
        )
        assert result.unwrap() == {"modId": "1"}
        sent = fake_api.record_requests()[-1]
        assert sent.method == "PATCH"
        assert sent.url.path.endswith("/layouts/Heroes/records/1")
        assert json.loads(sent.content)["modId"] == "0"

    @pytest.mark.asyncio
    async def test_delete_sends_scripts_as_query(self, transport, fake_api):
        await transport.send(Operation.CREATE, build_request("Heroes", None, {"name": "Obi-Wan"}))
        scripts = (ScriptSpec(name="FMS Triggered Script", param="bye"),)
        result = await transport.send(Operation.DELETE, build_request("Heroes", "1", {}, scripts))
        assert result.unwrap() == {"scriptResult": "bye", "scriptError": "0"}
        sent = fake_api.record_requests()[-1]
        assert sent.method == "DELETE"
        assert sent.url.params["script"] == "FMS Triggered Script"
        assert sent.content == b""

    @pytest.mark.asyncio
    async def test_server_failure_is_err(self, transport):
        result = await transport.send(Operation.CREATE, build_request("Heroes", None, {"nope": 1}))
        assert result.is_err()
        error = result.error
        assert isinstance(error, ServerError)
        assert error.to_failure() == {"code": "102", "message": "Field is missing"}
        assert error.context.operation == "create"
        assert error.context.layout == "Heroes"
        assert error.context.http_status == 500

    @pytest.mark.asyncio
    async def test_unknown_layout(self, transport):
        result = await transport.send(Operation.CREATE, build_request("Villains", None, {}))
        assert result.error.to_failure() == {"code": "105", "message": "Layout is missing"}


class TestTransportFailures:
    @pytest.mark.asyncio
    async def test_connect_error(self, settings):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        with pytest.raises(NetworkError) as info:
            await _transport_for(handler, settings).send(Operation.CREATE, build_request("Heroes", None, {}))
        assert info.value.retryable is True
        assert info.value.context.url.endswith("/sessions")
        assert isinstance(info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_timeout(self, settings):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(TransportTimeoutError):
            await _transport_for(handler, settings).send(Operation.CREATE, build_request("Heroes", None, {}))

    @pytest.mark.asyncio
    async def test_non_json_body(self, settings):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="<html>Bad Gateway</html>")

        with pytest.raises(ParseError) as info:
            await _transport_for(handler, settings).send(Operation.CREATE, build_request("Heroes", None, {}))
        assert info.value.context.http_status == 502

    @pytest.mark.asyncio
    async def test_envelope_without_messages(self, settings):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"response": {}})

        with pytest.raises(ParseError, match="messages"):
            await _transport_for(handler, settings).send(Operation.CREATE, build_request("Heroes", None, {}))

    @pytest.mark.parametrize(
        "body",
        [
            {"messages": ["x"]},
            {"messages": "OK"},
            {"response": "x", "messages": [{"code": "0", "message": "OK"}]},
            ["not", "an", "object"],
        ],
    )
    @pytest.mark.asyncio
    async def test_malformed_envelope(self, settings, body):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/sessions"):
                return httpx.Response(
                    200,
                    headers={"X-FM-Data-Access-Token": "t"},
                    json={"response": {}, "messages": [{"code": "0", "message": "OK"}]},
                )
            return httpx.Response(200, json=body)

        with pytest.raises(ParseError):
            await _transport_for(handler, settings).send(Operation.CREATE, build_request("Heroes", None, {}))
