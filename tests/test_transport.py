import asyncio

import pytest

from vocabbie_client import ProtocolError, Settings, Transport, TransportError
from vocabbie_client.schemas import Message

from fakes import run_fake_server


def test_transport_round_trip(scoring_server, live_settings):
    transport = Transport(live_settings)

    started = asyncio.run(transport.send("/start", Message(0, {"kind": "standard"})))
    state = asyncio.run(transport.send("/state", Message(started.session, {})))

    assert started.session != 0
    assert state.session == started.session
    assert state.details["question"] == "abandon"
    assert state.details["result_available"] == "false"
    assert scoring_server.received[0] == ("/start", {"session": 0, "details": {"kind": "standard"}})


def test_non_2xx_is_transport_error(scoring_server, live_settings):
    scoring_server.fail_status = 503
    with pytest.raises(TransportError) as excinfo:
        asyncio.run(Transport(live_settings).send("/state", Message(1, {})))
    assert excinfo.value.status == 503
    assert excinfo.value.path == "/state"


def test_malformed_json_is_transport_error(scoring_server, live_settings):
    scoring_server.raw_body = b"<html>oops</html>"
    with pytest.raises(TransportError):
        asyncio.run(Transport(live_settings).send("/submit", Message(1, {"action": "finish"})))


@pytest.mark.parametrize("body", [b"[1, 2, 3]", b'{"details": {}}', b'{"session": 1, "details": []}'])
def test_non_message_json_is_protocol_error(scoring_server, live_settings, body):
    scoring_server.raw_body = body
    with pytest.raises(ProtocolError):
        asyncio.run(Transport(live_settings).send("/state", Message(1, {})))


def test_unreachable_server_is_transport_error():
    server = run_fake_server()
    host = server.host
    server.shutdown()
    server.server_close()

    transport = Transport(Settings(host=host, request_timeout=2.0))
    with pytest.raises(TransportError):
        asyncio.run(transport.send("/start", Message(0, {"kind": "recall"})))


def test_unknown_endpoint_is_rejected_locally(live_settings, scoring_server):
    with pytest.raises(ValueError):
        asyncio.run(Transport(live_settings).send("/abandon", Message(1, {})))
    assert scoring_server.received == []
