import json
import threading

import httpx
import pytest

from ai.model_cache import ModelCache, ReadWriteLock, get_model_cache
from ai.provider import OpenRouterClient, get_provider
from core.config import settings
from main import app
from conftest import bearer, register


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class FakeOpenRouter:
    """Records outbound requests and answers from a canned response."""

    def __init__(self, status_code: int = 200, payload=None) -> None:
        self.status_code = status_code
        self.payload = payload if payload is not None else {}
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.payload)

    def client(self) -> OpenRouterClient:
        return OpenRouterClient("https://openrouter.test/api/v1", transport=httpx.MockTransport(self))


@pytest.fixture()
def use_provider():
    def _install(fake: FakeOpenRouter) -> FakeOpenRouter:
        provider = fake.client()
        app.dependency_overrides[get_provider] = lambda: provider
        return fake

    return _install


def _save_key(client, headers, key: str = "sk-or-v1-user") -> None:
    response = client.put("/api/ai/key", json={"key": key}, headers=headers)
    assert response.status_code == 200, response.text


def test_complete_forwards_prompt_with_users_key(client, auth_headers, use_provider) -> None:
    fake = use_provider(FakeOpenRouter(payload={
        "model": "anthropic/claude-3.5-sonnet",
        "choices": [{"message": {"content": "<div>Hello</div>"}}],
        "usage": {"prompt_tokens": 12, "completion_tokens": 5},
    }))
    _save_key(client, auth_headers)

    response = client.post(
        "/api/ai/complete",
        json={"model": "anthropic/claude-3.5-sonnet", "prompt": "Make a hero", "systemPrompt": "Be terse"},
        headers=auth_headers,
    )

    assert response.status_code == 200
    assert response.json() == {
        "content": "<div>Hello</div>",
        "model": "anthropic/claude-3.5-sonnet",
        "usage": {"prompt_tokens": 12, "completion_tokens": 5},
    }

    sent = fake.requests[0]
    assert sent.url.path == "/api/v1/chat/completions"
    assert sent.headers["Authorization"] == "Bearer sk-or-v1-user"
    assert json.loads(sent.content)["messages"] == [
        {"role": "system", "content": "Be terse"},
        {"role": "user", "content": "Make a hero"},
    ]


def test_complete_defaults_missing_fields(client, auth_headers, use_provider) -> None:
    use_provider(FakeOpenRouter(payload={"choices": []}))
    _save_key(client, auth_headers)

    response = client.post("/api/ai/complete", json={"model": "openai/gpt-4o", "prompt": "hi"}, headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == {"content": "", "model": "openai/gpt-4o", "usage": None}


def test_complete_without_any_key_is_rejected(client, auth_headers, use_provider, monkeypatch) -> None:
    monkeypatch.setattr(settings, "openrouter_fallback_key", None)
    fake = use_provider(FakeOpenRouter())

    response = client.post("/api/ai/complete", json={"model": "m", "prompt": "hi"}, headers=auth_headers)

    assert response.status_code == 422
    assert "API key" in response.json()["error"]
    assert fake.requests == []


def test_complete_uses_fallback_key(client, auth_headers, use_provider, monkeypatch) -> None:
    monkeypatch.setattr(settings, "openrouter_fallback_key", "sk-or-v1-server")
    fake = use_provider(FakeOpenRouter(payload={"choices": [{"message": {"content": "ok"}}]}))

    response = client.post("/api/ai/complete", json={"model": "m", "prompt": "hi"}, headers=auth_headers)

    assert response.status_code == 200
    assert fake.requests[0].headers["Authorization"] == "Bearer sk-or-v1-server"


def test_provider_error_becomes_bad_gateway(client, auth_headers, use_provider) -> None:
    use_provider(FakeOpenRouter(status_code=401, payload={"error": {"message": "Invalid API key"}}))
    _save_key(client, auth_headers)

    response = client.post("/api/ai/complete", json={"model": "m", "prompt": "hi"}, headers=auth_headers)

    assert response.status_code == 502
    assert response.json() == {"error": "OpenRouter error 401: Invalid API key"}


def test_provider_transport_failure_becomes_bad_gateway(client, auth_headers) -> None:
    def _unreachable(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    provider = OpenRouterClient("https://openrouter.test/api/v1", transport=httpx.MockTransport(_unreachable))
    app.dependency_overrides[get_provider] = lambda: provider
    _save_key(client, auth_headers)

    response = client.post("/api/ai/complete", json={"model": "m", "prompt": "hi"}, headers=auth_headers)

    assert response.status_code == 502
    assert response.json()["error"].startswith("Request failed")


def test_complete_requires_authentication(client) -> None:
    response = client.post("/api/ai/complete", json={"model": "m", "prompt": "hi"})
    assert response.status_code == 401


def test_key_status_save_and_delete(client, auth_headers, monkeypatch) -> None:
    monkeypatch.setattr(settings, "openrouter_fallback_key", None)

    assert client.get("/api/ai/key", headers=auth_headers).json() == {"hasKey": False, "fallbackAvailable": False}

    _save_key(client, auth_headers, "first")
    _save_key(client, auth_headers, "second")
    status = client.get("/api/ai/key", headers=auth_headers).json()
    assert status == {"hasKey": True, "fallbackAvailable": False}
    assert "second" not in json.dumps(status)

    assert client.delete("/api/ai/key", headers=auth_headers).status_code == 200
    assert client.delete("/api/ai/key", headers=auth_headers).status_code == 200
    assert client.get("/api/ai/key", headers=auth_headers).json()["hasKey"] is False


def test_saved_key_replaces_previous_one(client, auth_headers, use_provider) -> None:
    fake = use_provider(FakeOpenRouter(payload={"choices": [{"message": {"content": "ok"}}]}))
    _save_key(client, auth_headers, "first")
    _save_key(client, auth_headers, "second")

    client.post("/api/ai/complete", json={"model": "m", "prompt": "hi"}, headers=auth_headers)

    assert fake.requests[0].headers["Authorization"] == "Bearer second"


def test_empty_key_is_rejected(client, auth_headers) -> None:
    response = client.put("/api/ai/key", json={"key": ""}, headers=auth_headers)
    assert response.status_code == 422


def test_keys_are_per_user(client, auth_headers, monkeypatch) -> None:
    monkeypatch.setattr(settings, "openrouter_fallback_key", None)
    _save_key(client, auth_headers)
    other = bearer(register(client, email="bob@example.com")["accessToken"])

    assert client.get("/api/ai/key", headers=other).json()["hasKey"] is False


def test_models_are_cached_for_the_ttl(client, auth_headers, use_provider) -> None:
    fake = use_provider(FakeOpenRouter(payload={"data": [{"id": "openai/gpt-4o"}]}))
    clock = FakeClock()
    cache = ModelCache(ttl=600, clock=clock)
    app.dependency_overrides[get_model_cache] = lambda: cache

    first = client.get("/api/ai/models", headers=auth_headers)
    fake.payload = {"data": [{"id": "anthropic/claude-3.5-sonnet"}]}
    clock.now += 599
    second = client.get("/api/ai/models", headers=auth_headers)

    assert first.status_code == second.status_code == 200
    assert first.json() == second.json() == {"data": [{"id": "openai/gpt-4o"}]}
    assert len(fake.requests) == 1

    # Past the TTL: refetched, and the new list replaces the old one
    clock.now += 2
    third = client.get("/api/ai/models", headers=auth_headers)
    assert third.json() == {"data": [{"id": "anthropic/claude-3.5-sonnet"}]}
    assert len(fake.requests) == 2

    clock.now += 300
    fourth = client.get("/api/ai/models", headers=auth_headers)
    assert fourth.json() == {"data": [{"id": "anthropic/claude-3.5-sonnet"}]}
    assert len(fake.requests) == 2


def test_models_failure_is_not_cached(client, auth_headers, use_provider) -> None:
    use_provider(FakeOpenRouter(status_code=503, payload={"error": {"message": "down"}}))
    cache = ModelCache(ttl=600, clock=FakeClock())
    app.dependency_overrides[get_model_cache] = lambda: cache

    response = client.get("/api/ai/models", headers=auth_headers)

    assert response.status_code == 502
    assert cache.get() is None


def test_models_require_authentication(client) -> None:
    assert client.get("/api/ai/models").status_code == 401


def test_read_lock_admits_concurrent_readers() -> None:
    lock = ReadWriteLock()
    readers = 3
    barrier = threading.Barrier(readers, timeout=2)
    errors = []

    def _reader() -> None:
        with lock.read():
            try:
                # Only passes if every reader holds the lock at once
                barrier.wait()
            except threading.BrokenBarrierError as exc:
                errors.append(exc)

    threads = [threading.Thread(target=_reader) for _ in range(readers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=5)

    assert not any(thread.is_alive() for thread in threads)
    assert errors == []


def test_write_lock_waits_for_readers() -> None:
    lock = ReadWriteLock()
    reader_inside = threading.Event()
    release_reader = threading.Event()
    writer_done = threading.Event()

    def _reader() -> None:
        with lock.read():
            reader_inside.set()
            release_reader.wait(timeout=5)

    def _writer() -> None:
        with lock.write():
            writer_done.set()

    reader = threading.Thread(target=_reader)
    reader.start()
    assert reader_inside.wait(timeout=2)

    writer = threading.Thread(target=_writer)
    writer.start()
    assert not writer_done.wait(timeout=0.3)

    release_reader.set()
    reader.join(timeout=5)
    writer.join(timeout=5)

    assert writer_done.is_set()
    assert not reader.is_alive() and not writer.is_alive()


def test_readers_wait_for_writer() -> None:
    lock = ReadWriteLock()
    writer_inside = threading.Event()
    release_writer = threading.Event()
    reader_done = threading.Event()

    def _writer() -> None:
        with lock.write():
            writer_inside.set()
            release_writer.wait(timeout=5)

    def _reader() -> None:
        with lock.read():
            reader_done.set()

    writer = threading.Thread(target=_writer)
    writer.start()
    assert writer_inside.wait(timeout=2)

    reader = threading.Thread(target=_reader)
    reader.start()
    assert not reader_done.wait(timeout=0.3)

    release_writer.set()
    writer.join(timeout=5)
    reader.join(timeout=5)

    assert reader_done.is_set()
