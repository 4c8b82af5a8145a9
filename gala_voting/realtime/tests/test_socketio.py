from unittest import mock

import pytest
from asgiref.sync import async_to_sync

from gala_voting.realtime.registry import ConnectionState
from gala_voting.realtime.socketio import _extract_token
from gala_voting.realtime.socketio import build_server
from gala_voting.realtime.socketio import register_handlers
from gala_voting.realtime.tests.fakes import ADMIN_TOKEN


@pytest.fixture
def sio(registry):
    server = build_server()
    register_handlers(server, registry)
    return server


def _handler(sio, name):
    return sio.handlers["/"][name]


def test_extract_token_from_asgi_query_string():
    environ = {"asgi.scope": {"query_string": b"EIO=4&token=abc"}}
    assert _extract_token(environ, None) == "abc"


def test_extract_token_falls_back_to_auth():
    assert _extract_token({"QUERY_STRING": ""}, {"token": "xyz"}) == "xyz"
    assert _extract_token({}, None) is None


@pytest.mark.django_db
def test_anonymous_connect_and_disconnect(sio, registry):
    async_to_sync(_handler(sio, "connect"))("s1", {}, None)
    assert registry.state_of("s1") is ConnectionState.CONNECTED_ANONYMOUS

    async_to_sync(_handler(sio, "disconnect"))("s1")
    assert registry.state_of("s1") is ConnectionState.DISCONNECTED


@pytest.mark.django_db
def test_connect_with_admin_token(sio, registry):
    environ = {"asgi.scope": {"query_string": f"token={ADMIN_TOKEN}".encode()}}
    async_to_sync(_handler(sio, "connect"))("s1", environ, None)
    assert registry.state_of("s1") is ConnectionState.CONNECTED_ADMIN


@pytest.mark.django_db
def test_join_admin_accepts_bare_or_wrapped_token(sio, registry):
    registry.connect("s1")
    registry.connect("s2")
    async_to_sync(_handler(sio, "join-admin"))("s1", ADMIN_TOKEN)
    async_to_sync(_handler(sio, "join-admin"))("s2", {"token": ADMIN_TOKEN})
    assert set(registry.admin_connection_ids()) == {"s1", "s2"}


@pytest.mark.django_db
def test_join_admin_denial_is_silent(sio, registry):
    registry.connect("s1")
    with mock.patch.object(sio, "emit", new_callable=mock.AsyncMock) as emit:
        async_to_sync(_handler(sio, "join-admin"))("s1", {"token": "nope"})
    emit.assert_not_called()
    assert registry.state_of("s1") is ConnectionState.CONNECTED_ANONYMOUS


def test_ping_health_replies_to_sender(sio):
    with mock.patch.object(sio, "emit", new_callable=mock.AsyncMock) as emit:
        async_to_sync(_handler(sio, "ping_health"))("s1", {"n": 1})
    emit.assert_awaited_once()
    args, kwargs = emit.await_args
    assert args[0] == "pong_health"
    assert args[1]["ok"] is True
    assert kwargs == {"to": "s1"}
