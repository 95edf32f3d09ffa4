"""
Pytest configuration and fixtures for relay tests
"""
import pytest
from fastapi.testclient import TestClient

from app import create_app
from authorization import AuthorizationGate
from broadcaster import RoomBroadcaster
from lifecycle import ConnectionLifecycleManager
from message_router import MessageRouter
from rooms import RoomRegistry
from session_lookup import InMemorySessionLookup
from mocks import MockWebSocket, join_frame


@pytest.fixture
def session_lookup():
    """Session store with s1 = (therapist t1, client c1) and s2 = (t2, c2)"""
    lookup = InMemorySessionLookup()
    lookup.add_session("s1", therapist_id="t1", client_id="c1")
    lookup.add_session("s2", therapist_id="t2", client_id="c2")
    return lookup


@pytest.fixture
def registry():
    return RoomRegistry()


@pytest.fixture
def broadcaster(registry):
    return RoomBroadcaster(registry)


@pytest.fixture
def gate(session_lookup):
    return AuthorizationGate(session_lookup)


@pytest.fixture
def router(registry, gate, broadcaster):
    return MessageRouter(registry, gate, broadcaster)


@pytest.fixture
def lifecycle(registry, broadcaster):
    return ConnectionLifecycleManager(registry, broadcaster)


@pytest.fixture
def therapist_ws():
    return MockWebSocket("therapist")


@pytest.fixture
def client_ws():
    return MockWebSocket("client")


@pytest.fixture
async def joined_room(router, therapist_ws, client_ws):
    """Therapist t1 and client c1 both joined to s1, with their inboxes cleared"""
    await router.handle_raw(therapist_ws, join_frame("s1", "t1", "therapist"))
    await router.handle_raw(client_ws, join_frame("s1", "c1", "client"))
    therapist_ws.messages_sent.clear()
    client_ws.messages_sent.clear()
    return therapist_ws, client_ws


@pytest.fixture
def test_app(session_lookup):
    return create_app(session_lookup=session_lookup)


@pytest.fixture
def sync_test_client(test_app):
    """Create synchronous test client for WebSocket testing"""
    with TestClient(test_app) as client:
        yield client
