"""
Configuração global para testes.
Contém fixtures compartilhadas entre testes unitários e de integração:
um emulador em memória do key/value store, um timer manual e um relógio falso.
"""
def pytest_addoption(parser):
    """Adicionar opções específicas para testes de integração."""
    parser.addoption(
        "--runintegration", action="store_true", default=False, help="Executar testes de integração"
    )

import json
import logging
import pytest
import httpx

from announcer.lock_store import InMemoryLockStore
from store_client.client import StoreClient

# Configurar logging para testes
logging.basicConfig(level=logging.INFO)

KEYS_PREFIX = "/v2/keys"


class FakeKeyStore:
    """
    Emulador mínimo da API de chaves v2, usado como handler de httpx.MockTransport.

    Suporta GET e PUT com value, ttl, prevExist, prevValue e refresh.
    """

    def __init__(self):
        self.data = {}  # key -> {"value": str, "ttl": int | None}
        self.index = 10
        self.requests = []
        self.down = False  # simula store inalcançável

    def expire(self, key: str):
        self.data.pop(key, None)

    def _response(self, status: int, body: dict) -> httpx.Response:
        return httpx.Response(
            status,
            headers={"X-Etcd-Index": str(self.index)},
            content=json.dumps(body).encode(),
        )

    def _error(self, status: int, code: int, message: str, key: str) -> httpx.Response:
        return self._response(status, {"errorCode": code, "message": message, "cause": key, "index": self.index})

    def _node(self, key: str) -> dict:
        entry = self.data[key]
        node = {"key": key, "value": entry["value"], "modifiedIndex": entry["index"]}
        if entry["ttl"] is not None:
            node["ttl"] = entry["ttl"]
        return node

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.down:
            raise httpx.ConnectError("connection refused", request=request)

        path = request.url.path
        # Ignora prefixos de proxy antes de /v2/keys
        key = path[path.index(KEYS_PREFIX) + len(KEYS_PREFIX):] or "/"
        params = request.url.params

        if request.method == "GET":
            if key not in self.data:
                return self._error(404, 100, "Key not found", key)
            return self._response(200, {"action": "get", "node": self._node(key)})

        if request.method == "PUT":
            return self._put(key, params)

        return self._error(405, 0, "Method not allowed", key)

    def _put(self, key: str, params: httpx.QueryParams) -> httpx.Response:
        exists = key in self.data
        prev_exist = params.get("prevExist")
        prev_value = params.get("prevValue")
        ttl = params.get("ttl")
        if ttl is not None:
            ttl = float(ttl)
            ttl = int(ttl) if ttl.is_integer() else ttl

        if prev_exist == "false" and exists:
            return self._error(412, 105, "Key already exists", key)
        if prev_exist == "true" and not exists:
            return self._error(404, 100, "Key not found", key)
        if prev_value is not None:
            if not exists:
                return self._error(404, 100, "Key not found", key)
            if self.data[key]["value"] != prev_value:
                return self._error(412, 101, "Compare failed", key)

        self.index += 1
        if params.get("refresh") == "true":
            self.data[key]["ttl"] = ttl
            self.data[key]["index"] = self.index
            return self._response(200, {"action": "update", "node": self._node(key)})

        self.data[key] = {"value": params.get("value", ""), "ttl": ttl, "index": self.index}
        action = "update" if exists else "create"
        return self._response(200 if exists else 201, {"action": action, "node": self._node(key)})


class FakeHandle:
    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self):
        self.cancelled = True


class FakeTimer:
    """Timer manual: registra os agendamentos e só executa quando fire() é chamado."""

    def __init__(self):
        self.calls = []

    def call_later(self, delay, callback):
        handle = FakeHandle(delay, callback)
        self.calls.append(handle)
        return handle

    @property
    def last(self) -> FakeHandle:
        return self.calls[-1]

    @property
    def delays(self):
        return [h.delay for h in self.calls]

    async def fire(self):
        handle = self.last
        assert not handle.fired, "handle already fired"
        handle.fired = True
        await handle.callback()


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def fake_store():
    return FakeKeyStore()


@pytest.fixture
def transport(fake_store):
    return httpx.MockTransport(fake_store.handler)


@pytest.fixture
def client(transport):
    return StoreClient("127.0.0.1:2379", timeout=2, transport=transport)


@pytest.fixture
def fake_timer():
    return FakeTimer()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def lock_store(clock):
    return InMemoryLockStore(clock=clock)


@pytest.fixture
def make_timer():
    """Fábrica de timers manuais, para cenários com mais de um worker."""
    return FakeTimer
