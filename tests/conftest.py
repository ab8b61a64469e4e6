import json

import httpx
import pytest
from jose import jwt
from socketio.exceptions import ConnectionError as SocketConnectionError
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from core.api_client import ApiClient
from core.db import init_db
from core.notifications import Notifier
from core.realtime import RealtimeChannel
from core.session_manager import SessionStore
from core.settings_storage import SettingsStorage

NOW = 1_700_000_000.0
BASE_URL = "http://backend.test/api"


def make_token(exp=NOW + 3600, **claims):
    """HS256 token carrying `exp`; the client never checks the signature."""
    if exp is not None:
        claims["exp"] = exp
    return jwt.encode(claims, "test-secret", algorithm="HS256")


class FakeBackend:
    """httpx.MockTransport handler answering from a (method, path) route table."""

    def __init__(self):
        self.routes = {}
        self.requests = []

    def on(self, method, path, body=None, status=200, handler=None):
        self.routes[(method, path)] = (status, body, handler)

    def __call__(self, request: httpx.Request):
        self.requests.append(request)
        path = request.url.path[len("/api"):]
        route = self.routes.get((request.method, path))
        if route is None:
            return httpx.Response(404, json={"message": f"No route for {request.method} {path}"})
        status, body, handler = route
        if handler is not None:
            status, body = handler(request)
        if isinstance(body, (bytes, str)):
            return httpx.Response(status, content=body)
        return httpx.Response(status, json=body)

    def calls(self, method, path):
        return [r for r in self.requests if r.method == method and r.url.path == "/api" + path]

    def last_json(self, method=None, path=None):
        requests = self.calls(method, path) if method else self.requests
        return json.loads(requests[-1].content)


class FakeSocketClient:
    """Stands in for socketio.Client: records handlers and emits, fails connects on demand."""

    def __init__(self, fail_times=0):
        self.handlers = {}
        self.connected = False
        self.fail_times = fail_times
        self.connect_calls = 0
        self.emitted = []

    def on(self, event, handler=None, namespace=None):
        self.handlers[event] = handler

    def connect(self, url, **kwargs):
        self.connect_calls += 1
        if self.connect_calls <= self.fail_times:
            raise SocketConnectionError("Connection refused by the server")
        self.connected = True
        self.handlers["connect"]()

    def disconnect(self):
        self.connected = False
        self.handlers["disconnect"]("client disconnect")

    def emit(self, event, data=None, namespace=None, callback=None):
        self.emitted.append((event, data))

    def server_event(self, event, payload=None):
        self.handlers[event](payload)

    def drop(self):
        self.connected = False
        self.handlers["disconnect"]("transport close")


def order_payload(order_id, status="PENDING", table_id=1, table_number=None, lines=None,
                  total=None, created_at="2023-11-14T22:00:00Z", **extra):
    lines = lines if lines is not None else [{"itemId": 1, "quantity": 1, "price": 100, "item": {"name": "Paneer Tikka"}}]
    payload = {
        "id": order_id,
        "tableId": table_id,
        "status": status,
        "total": total if total is not None else sum(l["price"] * l["quantity"] for l in lines),
        "orderItems": lines,
        "createdAt": created_at,
    }
    if table_number is not None:
        payload["table"] = {"id": table_id, "tableNumber": table_number}
    payload.update(extra)
    return payload


@pytest.fixture
def storage():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    init_db(bind=engine)
    yield SettingsStorage(sessionmaker(bind=engine, expire_on_commit=False))
    engine.dispose()


@pytest.fixture
def session(storage):
    return SessionStore(storage, clock=lambda: NOW, check_interval=0.01)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def api(backend, session):
    client = ApiClient(base_url=BASE_URL, session=session, transport=httpx.MockTransport(backend))
    yield client
    client.close()


@pytest.fixture
def notifier():
    return Notifier(clock=lambda: NOW)


@pytest.fixture
def socket_client():
    return FakeSocketClient()


@pytest.fixture
def channel(socket_client, notifier):
    sleeps = []
    ch = RealtimeChannel(url="http://backend.test", notifier=notifier, client=socket_client,
                         sleep=sleeps.append, attempts=10, delay=1.0, delay_max=5.0)
    ch.sleeps = sleeps
    yield ch
    ch.close()
