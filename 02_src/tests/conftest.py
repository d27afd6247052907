"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from fakes import SDK_GLOBAL, SDK_SRC, FakeScriptHost, FakeSDK  # noqa: E402


@pytest.fixture
def sdk():
    """Fake gateway SDK."""
    return FakeSDK()


@pytest.fixture
def host(sdk):
    """Script host that installs the fake SDK when injected."""
    return FakeScriptHost(sdk=sdk)


@pytest.fixture
def loaded_host(sdk):
    """Script host with the fake SDK already installed."""
    h = FakeScriptHost(sdk=sdk)
    h.namespace[SDK_GLOBAL] = sdk
    return h


@pytest.fixture
def engine_state():
    from chat_engine.models import EngineState

    return EngineState()


@pytest.fixture
def gateway(loaded_host, engine_state):
    """Gateway over a host with the SDK loaded."""
    from chat_engine.gateway import TransportGateway

    return TransportGateway(
        loaded_host,
        engine_state,
        script_src=SDK_SRC,
        global_name=SDK_GLOBAL,
        poll_interval=0.01,
    )


@pytest.fixture
def bridge(loaded_host):
    """Fallback bridge over the same host."""
    from chat_engine.streaming import ExternalBridge

    return ExternalBridge(loaded_host, SDK_SRC, SDK_GLOBAL, timeout=1.0)


@pytest.fixture
def trace_tracker():
    from chat_engine.tracker import Tracker

    return Tracker()


@pytest.fixture
def controller(gateway, bridge, engine_state, trace_tracker):
    """Controller with fast timings."""
    from chat_engine.streaming import StreamingSessionController

    return StreamingSessionController(
        gateway,
        bridge,
        state=engine_state,
        tracker=trace_tracker,
        retry_backoff=0.0,
        stall_timeout=0.2,
        load_timeout=0.05,
        fallback_timeout=1.0,
    )


@pytest.fixture
def exchange_config():
    from chat_engine.models import ExchangeConfig

    return ExchangeConfig(model_id="claude-3-5-sonnet", temperature=0.7)


@pytest.fixture
def payload(exchange_config):
    from chat_engine.composer import RequestComposer

    return RequestComposer().compose("Hi", [], exchange_config)


@pytest.fixture
def settings():
    """Settings with fast timings for tests."""
    from chat_engine.config import Settings

    return Settings(
        sdk_src=SDK_SRC,
        sdk_global=SDK_GLOBAL,
        retry_backoff=0.0,
        stall_timeout=0.2,
        load_timeout=0.05,
        fallback_timeout=1.0,
        probe_interval=0.01,
        detection_window=0.1,
    )


@pytest.fixture
def mock_logger():
    """Create mock logger."""
    import logging

    logger = logging.getLogger("test")
    logger.setLevel(logging.DEBUG)
    return logger
