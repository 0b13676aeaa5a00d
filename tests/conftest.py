import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1] / "src"))

from vocabbie_client import Settings  # noqa: E402

from fakes import QuizBackend, ScriptedTransport, run_fake_server  # noqa: E402


@pytest.fixture
def fast_settings():
    return Settings(feedback_dwell_ms=0, settle_ms=0, curtain_ms=0)


@pytest.fixture
def scripted():
    return ScriptedTransport()


@pytest.fixture
def backend():
    return QuizBackend()


@pytest.fixture
def scoring_server(backend):
    server = run_fake_server(backend)
    try:
        yield server
    finally:
        server.shutdown()
        server.server_close()


@pytest.fixture
def live_settings(scoring_server):
    return Settings(
        host=scoring_server.host,
        request_timeout=5.0,
        feedback_dwell_ms=0,
        settle_ms=0,
        curtain_ms=0,
    )
